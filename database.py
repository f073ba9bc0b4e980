"""Engine, session factory and store helpers."""
import logging
from contextlib import contextmanager

from sqlalchemy import create_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker

import config
from errors import StoreUnavailable

logger = logging.getLogger("blog.database")

if not config.DATABASE_URL:
    raise ValueError("DATABASE_URL environment variable not set!")

connect_args = {"check_same_thread": False} if config.DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(config.DATABASE_URL, echo=config.SQL_ECHO, connect_args=connect_args)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    """Dependency function that provides a database session"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def store_guard(db: Session, action: str):
    """Turn any store failure raised inside the block into StoreUnavailable"""
    try:
        yield
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("Store failure while %s: %s", action, exc)
        raise StoreUnavailable(f"Store unavailable while {action}") from exc
