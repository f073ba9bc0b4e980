"""Initialize the database by creating all tables defined in the models"""
from database import Base, engine
import models  # noqa: F401  registers the tables on Base
from logging_config import configure_logging

logger = configure_logging()


def init_db():
    logger.info("Creating tables on the database...")
    Base.metadata.create_all(bind=engine)
    logger.info("Tables created successfully!")


if __name__ == "__main__":
    init_db()
