"""Seed the initial administrator account from the ADMIN_* settings."""
import logging

from sqlalchemy.orm import Session

import config
import models
from auth import hash_password
from database import SessionLocal
from logging_config import configure_logging
from users import create_user

logger = logging.getLogger("blog.seed")


def seed_admin(db: Session,
               email: str = None,
               password: str = None,
               name: str = None):
    """Create the first admin unless one already exists; returns the admin"""
    existing = db.query(models.User).filter(models.User.role == models.RoleEnum.ADMIN).first()
    if existing:
        logger.info("Admin user already exists: %s", existing.email)
        return existing

    admin = create_user(db,
                        name=name or config.ADMIN_NAME,
                        email=email or config.ADMIN_EMAIL,
                        password_hash=hash_password(password or config.ADMIN_PASSWORD),
                        role=models.RoleEnum.ADMIN)
    logger.info("Initial admin user created: %s", admin.email)
    logger.warning("Please change the password after first login!")
    return admin


def create_admin():
    db = SessionLocal()
    try:
        seed_admin(db)
    finally:
        db.close()


if __name__ == "__main__":
    configure_logging()
    create_admin()
