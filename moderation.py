"""Single-post moderation: status transitions, deletion and owner edits.

Status transitions are flat. Any status may move to any other, including
itself, so approving an approved post is a successful no-op.
"""
import logging
from datetime import datetime

from sqlalchemy.orm import Session

import models
from database import store_guard
from errors import InvalidArgument, NotFound, Unauthorized
from posts import get_post_by_id, require_text

logger = logging.getLogger("blog.moderation")


def parse_status(value) -> models.StatusEnum:
    """Coerce a raw status value, rejecting anything outside the enum"""
    try:
        return models.StatusEnum(value)
    except (ValueError, TypeError):
        raise InvalidArgument("Invalid status. Must be APPROVED, REJECTED, or PENDING.")


def ensure_admin(actor_role):
    if actor_role != models.RoleEnum.ADMIN:
        raise Unauthorized("Unauthorized. Admin access required.")


def set_status(db: Session, actor_role, post_id: int, target_status):
    """Move a post to target_status on behalf of an admin"""
    ensure_admin(actor_role)
    status = parse_status(target_status)

    post = get_post_by_id(db, post_id)
    if not post:
        raise NotFound("Post not found")

    with store_guard(db, "updating post status"):
        post.status = status
        post.updated_at = datetime.now()
        db.commit()
        db.refresh(post)

    logger.info("Post %s moved to %s", post.id, status.value)
    return post


def can_modify(actor, post) -> bool:
    return actor.role == models.RoleEnum.ADMIN or post.author_id == actor.id


def delete_post(db: Session, actor, post_id: int):
    """Delete a post as an admin or as its author.

    A post the actor may not touch is reported exactly like a missing one.
    """
    post = get_post_by_id(db, post_id)
    if not post or not can_modify(actor, post):
        raise NotFound("Post not found")

    with store_guard(db, "deleting post"):
        db.delete(post)
        db.commit()

    logger.info("Post %s deleted by %s", post_id, actor.email)


def edit_post(db: Session, owner_id: int, post_id: int, title: str, content: str):
    """Rewrite a post's text as its author and send it back for review"""
    require_text(title, content)

    post = get_post_by_id(db, post_id)
    if not post or post.author_id != owner_id:
        raise NotFound("Post not found")

    with store_guard(db, "editing post"):
        post.title = title.strip()
        post.content = content
        post.status = models.StatusEnum.PENDING
        post.updated_at = datetime.now()
        db.commit()
        db.refresh(post)

    logger.info("Post %s edited by owner %s, back to PENDING", post.id, owner_id)
    return post
