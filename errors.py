"""Error kinds surfaced by the blog core."""


class BlogError(Exception):
    """Base class: every error carries a kind and a human-readable message."""

    kind = "InternalError"
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class Unauthorized(BlogError):
    """The actor lacks the required role or ownership."""

    kind = "Unauthorized"
    status_code = 403


class InvalidArgument(BlogError):
    """Malformed or out-of-domain input."""

    kind = "InvalidArgument"
    status_code = 400


class NotFound(BlogError):
    """A referenced entity, or one member of a referenced set, does not exist."""

    kind = "NotFound"
    status_code = 404


class StoreUnavailable(BlogError):
    kind = "StoreUnavailable"
    status_code = 503
