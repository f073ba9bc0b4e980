"""SQLAlchemy models defining User, Post, RoleEnum and StatusEnum for the application."""
import enum
from datetime import datetime

from sqlalchemy import Column, DateTime, Enum, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from database import Base


class RoleEnum(str, enum.Enum):
    """Enumeration for user roles in the system."""
    USER = "USER"
    ADMIN = "ADMIN"


class StatusEnum(str, enum.Enum):
    """Moderation state of a post."""
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class User(Base):
    """User model representing application accounts."""
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    # always stored lowercase
    email = Column(String(255), unique=True, index=True, nullable=False)
    password_hash = Column(String(100), nullable=False)
    role = Column(Enum(RoleEnum), nullable=False, default=RoleEnum.USER)
    created_at = Column(DateTime, nullable=False, default=datetime.now)

    posts = relationship("Post", back_populates="author", cascade="all, delete-orphan")


class Post(Base):
    """Post model representing blog posts written by users."""
    __tablename__ = "posts"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(200), nullable=False)
    content = Column(Text, nullable=False)
    status = Column(Enum(StatusEnum), nullable=False, default=StatusEnum.PENDING, index=True)
    created_at = Column(DateTime, nullable=False, default=datetime.now, index=True)
    updated_at = Column(DateTime, nullable=False, default=datetime.now, onupdate=datetime.now)
    author_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)

    author = relationship("User", back_populates="posts")
