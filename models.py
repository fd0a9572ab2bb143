"""
Data models for the blog and chat entities
Using Pydantic for validation and serialization
"""

import re
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field, field_validator, model_validator, ConfigDict

EMAIL_RE = re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")
CHAT_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

MIN_TITLE_LENGTH = 5
MIN_NAME_LENGTH = 2


def _check_title(title: str) -> str:
    if len(title) < MIN_TITLE_LENGTH:
        raise ValueError(f"Title should not be empty and should be at least {MIN_TITLE_LENGTH} characters")
    return title


def _check_name(name: str) -> str:
    if len(name) < MIN_NAME_LENGTH:
        raise ValueError("invalid name format")
    return name


def _check_email(email: str) -> str:
    if not EMAIL_RE.match(email):
        raise ValueError("invalid email format")
    return email


# ============================================================================
# Base Models
# ============================================================================

class BaseEntity(BaseModel):
    """Base model for all stored entities"""
    model_config = ConfigDict(from_attributes=True)

    id: int
    created_at: datetime
    updated_at: datetime


# ============================================================================
# Users
# ============================================================================

class User(BaseEntity):
    """Blog user"""
    name: str
    email: str


class UserCreate(BaseModel):
    """Payload for creating a user"""
    name: str
    email: str

    @field_validator('name')
    @classmethod
    def validate_name(cls, v):
        return _check_name(v)

    @field_validator('email')
    @classmethod
    def validate_email(cls, v):
        return _check_email(v)


class UserUpdate(BaseModel):
    """Partial update for a user; unset fields are left untouched"""
    name: Optional[str] = None
    email: Optional[str] = None

    @field_validator('name')
    @classmethod
    def validate_name(cls, v):
        return v if v is None else _check_name(v)

    @field_validator('email')
    @classmethod
    def validate_email(cls, v):
        return v if v is None else _check_email(v)


class UserWithStats(User):
    """User with aggregated post activity"""
    post_count: int = 0
    published_count: int = 0
    last_post_date: Optional[str] = Field(None, description="Most recent post timestamp as ISO text, None without posts")


# ============================================================================
# Posts
# ============================================================================

class Post(BaseEntity):
    """Blog post"""
    user_id: int
    title: str
    content: str = ""
    published: bool = False


class PostCreate(BaseModel):
    """Payload for creating a post"""
    user_id: int
    title: str
    content: str = ""
    published: bool = False

    @field_validator('title')
    @classmethod
    def validate_title(cls, v):
        return _check_title(v)

    @field_validator('user_id')
    @classmethod
    def validate_user_id(cls, v):
        if v <= 0:
            raise ValueError("UserID should be greater than 0")
        return v

    @model_validator(mode='after')
    def validate_content(self):
        if self.published and not self.content:
            raise ValueError("Content should not be empty if published is true")
        return self


class PostUpdate(BaseModel):
    """Partial update for a post; unset fields are left untouched"""
    title: Optional[str] = None
    content: Optional[str] = None
    published: Optional[bool] = None

    @field_validator('title')
    @classmethod
    def validate_title(cls, v):
        return v if v is None else _check_title(v)


class PostStats(BaseModel):
    """Aggregate post statistics; no entity identity"""
    total_posts: int = 0
    published_posts: int = 0
    active_users: int = 0
    avg_content_length: float = 0.0


# ============================================================================
# Chat (in-memory stores)
# ============================================================================

class Message(BaseModel):
    """Chat message"""
    model_config = ConfigDict(frozen=True)

    sender: str
    content: str
    timestamp: int


class ChatUser(BaseModel):
    """Chat directory user"""
    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1)
    email: str
    id: str = Field(..., min_length=1)

    @field_validator('email')
    @classmethod
    def validate_email(cls, v):
        if not v:
            raise ValueError("email is required")
        if not CHAT_EMAIL_RE.match(v):
            raise ValueError("invalid email format")
        return v
