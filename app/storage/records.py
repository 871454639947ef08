"""
Plain records returned by every storage backend.

Both backends hand these out instead of ORM objects so routes and services
never depend on which store is configured.
"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional


@dataclass
class UserRecord:
    id: int
    username: str
    email: str
    password: str
    name: str
    created_at: datetime
    bio: str = ""
    avatar_url: Optional[str] = None


@dataclass
class PostRecord:
    id: int
    title: str
    slug: str
    content: str
    excerpt: str
    author_id: int
    category: str
    created_at: datetime
    updated_at: datetime
    cover_image: Optional[str] = None
    published: bool = True
    like_count: int = 0
    comment_count: int = 0


@dataclass
class PostWithAuthor(PostRecord):
    author: Optional[UserRecord] = None
    liked: Optional[bool] = None


@dataclass
class CommentRecord:
    id: int
    content: str
    post_id: int
    author_id: int
    created_at: datetime
    parent_id: Optional[int] = None


@dataclass
class CommentWithAuthor(CommentRecord):
    author: Optional[UserRecord] = None
    replies: List["CommentWithAuthor"] = field(default_factory=list)


@dataclass
class LikeRecord:
    id: int
    post_id: int
    user_id: int
    created_at: datetime


@dataclass
class CategoryRecord:
    id: int
    name: str
    slug: str
    created_at: datetime
    post_count: int = 0
