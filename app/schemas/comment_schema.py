from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime
from typing import List
from app.schemas.profile_schema import ResponseProfile


class CommentCreate(BaseModel):
    content: str = Field(min_length=1)
    parent_id: int | None = None


class ResponseComment(BaseModel):
    id: int
    content: str
    post_id: int
    author_id: int
    parent_id: int | None = None
    created_at: datetime
    author: ResponseProfile

    model_config = ConfigDict(from_attributes=True)


class ResponseCommentThread(ResponseComment):
    replies: List["ResponseCommentThread"] = []

ResponseCommentThread.model_rebuild()
