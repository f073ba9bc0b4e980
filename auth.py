"""Password hashing, JWT issuance and resolution of the calling actor."""
import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import List, Optional

from fastapi import Depends, HTTPException, Request, Response
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from passlib.context import CryptContext
from pydantic import BaseModel
from sqlalchemy.orm import Session

import config
import models
from database import get_db
from errors import Unauthorized
from users import get_user_by_email, normalize_email

logger = logging.getLogger("blog.auth")

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")
bearer_scheme = HTTPBearer(auto_error=False)


class Actor(BaseModel):
    """The authenticated identity performing a request"""
    id: Optional[int] = None
    name: str
    email: str
    role: models.RoleEnum

    @property
    def is_admin(self) -> bool:
        return self.role == models.RoleEnum.ADMIN


class StaticPrincipal(BaseModel):
    """An account configured outside the store and checked before it"""
    email: str
    password: str
    name: str
    role: models.RoleEnum = models.RoleEnum.ADMIN

    def to_actor(self) -> Actor:
        return Actor(id=None, name=self.name, email=normalize_email(self.email), role=self.role)


def load_static_principals() -> List[StaticPrincipal]:
    """Build the static principal list from the DEMO_ADMIN_* settings"""
    if not (config.DEMO_ADMIN_EMAIL and config.DEMO_ADMIN_PASSWORD):
        return []
    return [StaticPrincipal(email=config.DEMO_ADMIN_EMAIL,
                            password=config.DEMO_ADMIN_PASSWORD,
                            name=config.DEMO_ADMIN_NAME)]


STATIC_PRINCIPALS = load_static_principals()


def get_static_principals() -> List[StaticPrincipal]:
    """Dependency returning the configured static principals"""
    return STATIC_PRINCIPALS


def hash_password(password: str):
    """Hash a plain text password using the configured password hashing context"""
    return pwd_context.hash(password)


def verify_password(plain_password, hashed_password):
    """ Verify if a plain text password matches its hashed version"""
    return pwd_context.verify(plain_password, hashed_password)


def actor_from_user(user: models.User) -> Actor:
    return Actor(id=user.id, name=user.name, email=user.email, role=user.role)


def find_static_principal(principals: List[StaticPrincipal], email: str) -> Optional[StaticPrincipal]:
    email = normalize_email(email)
    for principal in principals:
        if normalize_email(principal.email) == email:
            return principal
    return None


def authenticate(db: Session,
                 email: str,
                 password: str,
                 principals: List[StaticPrincipal]) -> Optional[Actor]:
    """Check credentials against the static principals first, then the store"""
    if not email or not password:
        return None

    principal = find_static_principal(principals, email)
    if principal is not None:
        if secrets.compare_digest(principal.password, password):
            logger.info("Static principal %s authenticated", principal.email)
            return principal.to_actor()
        logger.warning("Invalid password for static principal %s", principal.email)
        return None

    user = get_user_by_email(db, email)
    if not user:
        logger.warning("Login attempt for unknown email %s", normalize_email(email))
        return None
    if not verify_password(password, user.password_hash):
        logger.warning("Invalid password for user %s", user.email)
        return None

    logger.info("User %s authenticated", user.email)
    return actor_from_user(user)


def create_access_token(data: dict, expires_delta: timedelta | None = None):
    """Create a new JWT access token"""
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=config.ACCESS_TOKEN_EXPIRE_MINUTES))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, config.SECRET_KEY, algorithm=config.ALGORITHM)


def token_for_actor(actor: Actor) -> str:
    return create_access_token({
        "sub": actor.email,
        "id": actor.id,
        "name": actor.name,
        "role": actor.role.value,
    })


def set_jwt_cookie(response: Response, actor: Actor):
    """ Generate a JWT for an actor and store it in an HTTP-only cookie"""
    jwt_token = token_for_actor(actor)
    response.set_cookie(
        key="access_token",
        value=jwt_token,
        httponly=True,
        secure=config.COOKIE_SECURE,
        samesite="Strict",
        max_age=config.ACCESS_TOKEN_EXPIRE_MINUTES * 60
    )
    return jwt_token


def get_current_actor(request: Request,
                      credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
                      db: Session = Depends(get_db),
                      principals: List[StaticPrincipal] = Depends(get_static_principals)) -> Actor:
    """Resolve the caller from the access_token cookie or a bearer header"""
    token = request.cookies.get("access_token")
    if not token and credentials is not None:
        token = credentials.credentials
    if not token:
        raise HTTPException(status_code=401, detail="Not authenticated")

    try:
        payload = jwt.decode(token,
                             config.SECRET_KEY,
                             algorithms=[config.ALGORITHM])
    except JWTError:
        raise HTTPException(status_code=401, detail="Invalid token")
    email = payload.get("sub")
    if email is None:
        raise HTTPException(status_code=401, detail="Invalid token")

    principal = find_static_principal(principals, email)
    if principal is not None:
        return principal.to_actor()

    user = get_user_by_email(db, email)
    if not user or user.id != payload.get("id"):
        raise HTTPException(status_code=401, detail="User not found")
    return actor_from_user(user)


def require_admin(actor: Actor):
    """ Ensure the current actor has admin privileges"""
    if not actor.is_admin:
        logger.warning("Non-admin %s attempted an admin action", actor.email)
        raise Unauthorized("Admin privileges required")


def get_current_admin(actor: Actor = Depends(get_current_actor)) -> Actor:
    require_admin(actor)
    return actor
