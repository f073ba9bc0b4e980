"""Pydantic request and response schemas."""
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from models import RoleEnum, StatusEnum


class RegisterRequest(BaseModel):
    """Schema for account registration"""
    name: str
    email: str
    password: str


class PostBase(BaseModel):
    """Base schema for Post data"""
    title: str
    content: str


class PostCreate(PostBase):
    pass


class PostUpdate(PostBase):
    """Schema for an owner edit; both fields are rewritten"""


class StatusUpdate(BaseModel):
    """Validated against StatusEnum by the moderation layer, not here"""
    status: Optional[str] = None


class BulkStatusUpdate(BaseModel):
    post_ids: List[int] = Field(default_factory=list)
    status: Optional[str] = None


class BulkDelete(BaseModel):
    post_ids: List[int] = Field(default_factory=list)


class AuthorOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: str


class PostOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    content: str
    status: StatusEnum
    author_id: int
    created_at: datetime
    updated_at: datetime


class PostWithAuthor(PostOut):
    author: AuthorOut


class AdminAuthorOut(AuthorOut):
    role: RoleEnum


class AdminPostOut(PostOut):
    author: AdminAuthorOut
