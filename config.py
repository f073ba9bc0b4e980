"""Application settings loaded from the environment."""
import os

from dotenv import load_dotenv

load_dotenv()

DATABASE_URL = os.getenv("DATABASE_URL")
SQL_ECHO = os.getenv("SQL_ECHO", "false").lower() == "true"

SECRET_KEY = os.getenv("SECRET_KEY")
ALGORITHM = os.getenv("ALGORITHM", "HS256")
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "60"))
COOKIE_SECURE = os.getenv("COOKIE_SECURE", "true").lower() == "true"

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FILE = os.getenv("LOG_FILE", "app.log")

# Hardcoded demo account, accepted before any store lookup
DEMO_ADMIN_EMAIL = os.getenv("DEMO_ADMIN_EMAIL")
DEMO_ADMIN_PASSWORD = os.getenv("DEMO_ADMIN_PASSWORD")
DEMO_ADMIN_NAME = os.getenv("DEMO_ADMIN_NAME", "Demo Administrator")

ADMIN_EMAIL = os.getenv("ADMIN_EMAIL", "admin@blogify.com")
ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD", "admin123")
ADMIN_NAME = os.getenv("ADMIN_NAME", "System Administrator")
