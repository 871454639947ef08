from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime
from typing import List, Optional
from app.schemas.profile_schema import ResponseProfile


class PostBase(BaseModel):
    title: str = Field(min_length=1)
    content: str = Field(min_length=1)
    category: str = Field(min_length=1)


class PostCreate(PostBase):
    slug: str | None = None
    excerpt: str | None = None
    cover_image: str | None = None
    published: bool = True


class PostUpdate(BaseModel):
    title: str | None = Field(default=None, min_length=1)
    content: str | None = Field(default=None, min_length=1)
    category: str | None = Field(default=None, min_length=1)
    slug: str | None = Field(default=None, min_length=1)
    excerpt: str | None = None
    cover_image: str | None = None
    published: bool | None = None


class ResponsePost(PostBase):
    id: int
    slug: str
    excerpt: str
    cover_image: str | None = None
    author_id: int
    published: bool
    like_count: int
    comment_count: int
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ResponsePostWithAuthor(ResponsePost):
    author: ResponseProfile
    liked: Optional[bool] = None


class PostListResponse(BaseModel):
    posts: List[ResponsePostWithAuthor]
    total: int
    page: int
    limit: int
    total_pages: int


class LikeResponse(BaseModel):
    like_count: int
    liked: bool
