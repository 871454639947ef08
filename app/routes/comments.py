from fastapi import APIRouter, Depends, Response, status
from app.schemas.comment_schema import CommentCreate, ResponseComment, ResponseCommentThread
from app.services import blog
from app.services.auth import get_current_user
from app.storage.base import Storage
from app.storage.deps import get_storage
from app.storage.records import UserRecord

router = APIRouter(tags=["comments"])


@router.get("/posts/{post_id}/comments", response_model=list[ResponseCommentThread])
def get_comments(post_id: int, storage: Storage = Depends(get_storage)):
    """Top-level comments of a post, each carrying its nested replies."""
    return blog.list_comments(storage, post_id)


@router.post("/posts/{post_id}/comments", response_model=ResponseComment,
             status_code=status.HTTP_201_CREATED)
def create_comment(post_id: int, comment: CommentCreate, storage: Storage = Depends(get_storage),
                   user: UserRecord = Depends(get_current_user)):
    return blog.add_comment(storage, post_id, comment, user)


@router.delete("/comments/{comment_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_comment(comment_id: int, storage: Storage = Depends(get_storage),
                   user: UserRecord = Depends(get_current_user)):
    """Delete a comment together with every reply beneath it."""
    blog.remove_comment(storage, comment_id, user)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
