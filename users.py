"""Account lookup and registration."""
import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

import models
from database import store_guard
from errors import InvalidArgument

logger = logging.getLogger("blog.users")

MIN_NAME_LENGTH = 2
MIN_PASSWORD_LENGTH = 8


def normalize_email(email: str) -> str:
    """Lowercase and strip an email address before any lookup or storage"""
    return (email or "").strip().lower()


def get_user_by_email(db: Session, email: str):
    """Retrieve a user from the database by their email address, case-insensitively"""
    with store_guard(db, "looking up user"):
        return db.query(models.User).filter(models.User.email == normalize_email(email)).first()


def get_user_by_id(db: Session, user_id: int):
    """Retrieve a user from the database by their ID"""
    with store_guard(db, "looking up user"):
        return db.query(models.User).filter(models.User.id == user_id).first()


def validate_registration(name: str, email: str, password: str):
    if not name or len(name.strip()) < MIN_NAME_LENGTH:
        raise InvalidArgument(f"Name must be at least {MIN_NAME_LENGTH} characters long")
    if not email or "@" not in email:
        raise InvalidArgument("Please provide a valid email address")
    if not password or len(password) < MIN_PASSWORD_LENGTH:
        raise InvalidArgument(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long")


def create_user(db: Session,
                name: str,
                email: str,
                password_hash: str,
                role: models.RoleEnum = models.RoleEnum.USER):
    """Create and store a new user; the email is normalized and must be unused"""
    email = normalize_email(email)
    if get_user_by_email(db, email):
        raise InvalidArgument("An account with this email already exists")

    user = models.User(name=name.strip(),
                       email=email,
                       password_hash=password_hash,
                       role=role)
    with store_guard(db, "creating user"):
        db.add(user)
        try:
            db.commit()
        except IntegrityError:
            # lost a race with a concurrent registration of the same address
            db.rollback()
            raise InvalidArgument("An account with this email already exists")
        db.refresh(user)

    logger.info("Registered %s account %s", role.value, email)
    return user
