import os

os.environ["DATABASE_URL"] = "sqlite:///./test_blog.db"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["ALGORITHM"] = "HS256"
os.environ["COOKIE_SECURE"] = "false"
os.environ["LOG_FILE"] = ""
os.environ["LOG_LEVEL"] = "INFO"

from datetime import datetime

import pytest
from fastapi.testclient import TestClient

import models
from auth import StaticPrincipal, actor_from_user, get_static_principals, hash_password, token_for_actor
from database import Base, SessionLocal, engine
from main import app

DEMO_ADMIN = StaticPrincipal(email="Demo@Blogify.com",
                             password="demo-password",
                             name="Demo Administrator")
PASSWORD = "password123"
_PASSWORD_HASH = hash_password(PASSWORD)


@pytest.fixture
def db():
    """Fresh tables for every test"""
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    yield session
    session.close()
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db):
    app.dependency_overrides[get_static_principals] = lambda: [DEMO_ADMIN]
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(db):
    def _make_user(name="Test User", email="user@example.com", role=models.RoleEnum.USER):
        user = models.User(name=name, email=email.lower(), password_hash=_PASSWORD_HASH, role=role)
        db.add(user)
        db.commit()
        db.refresh(user)
        return user
    return _make_user


@pytest.fixture
def make_post(db):
    def _make_post(author, title="Title", content="Some content",
                   status=models.StatusEnum.PENDING, created_at=None):
        created_at = created_at or datetime.now()
        post = models.Post(title=title, content=content, status=status, author_id=author.id,
                           created_at=created_at, updated_at=created_at)
        db.add(post)
        db.commit()
        db.refresh(post)
        return post
    return _make_post


@pytest.fixture
def author(make_user):
    return make_user(name="Alice Author", email="alice@example.com")


@pytest.fixture
def admin(make_user):
    return make_user(name="Ada Admin", email="ada@example.com", role=models.RoleEnum.ADMIN)


def headers_for(user):
    """Bearer header carrying a token for a persisted user"""
    return {"Authorization": f"Bearer {token_for_actor(actor_from_user(user))}"}


@pytest.fixture
def author_headers(author):
    return headers_for(author)


@pytest.fixture
def admin_headers(admin):
    return headers_for(admin)
