import logging
import math
from typing import List, Optional

from fastapi import HTTPException

from app.config import settings
from app.schemas.comment_schema import CommentCreate
from app.schemas.post_schema import PostCreate, PostUpdate
from app.storage.base import DuplicateKeyError, Storage
from app.storage.records import (
    CategoryRecord,
    CommentWithAuthor,
    PostRecord,
    PostWithAuthor,
    UserRecord,
)
from app.utils.text_utils import make_excerpt, slugify

logger = logging.getLogger(__name__)


def _mark_liked(storage: Storage, posts: List[PostWithAuthor], viewer: Optional[UserRecord]):
    """Set the `liked` flag for authenticated viewers; anonymous posts keep None."""
    if viewer is None:
        return posts
    for post in posts:
        post.liked = storage.check_liked(post.id, viewer.id)
    return posts


def _require_post(storage: Storage, post_id: int) -> PostRecord:
    post = storage.get_post_by_id(post_id)
    if not post:
        raise HTTPException(status_code=404, detail="Post not found")
    return post


def _check_post_length(content: str):
    if len(content) > settings.MAX_POST_LENGTH:
        raise HTTPException(
            status_code=400,
            detail=f"Post content exceeds {settings.MAX_POST_LENGTH} characters")

# Posts


def list_posts(storage: Storage, page: int, limit: int, category: Optional[str],
               viewer: Optional[UserRecord]) -> dict:
    posts, total = storage.get_posts(page=page, limit=limit, category=category)
    return {
        "posts": _mark_liked(storage, posts, viewer),
        "total": total,
        "page": page,
        "limit": limit,
        "total_pages": math.ceil(total / limit),
    }


def featured_posts(storage: Storage, viewer: Optional[UserRecord]) -> List[PostWithAuthor]:
    posts = storage.get_featured_posts(limit=settings.FEATURED_POSTS_LIMIT)
    return _mark_liked(storage, posts, viewer)


def get_post(storage: Storage, slug: str, viewer: Optional[UserRecord]) -> PostWithAuthor:
    post = storage.get_post_by_slug(slug)
    if not post:
        raise HTTPException(status_code=404, detail="Post not found")
    return _mark_liked(storage, [post], viewer)[0]


def create_post(storage: Storage, data: PostCreate, author: UserRecord) -> PostRecord:
    _check_post_length(data.content)
    slug = slugify(data.slug or data.title)
    if not slug:
        raise HTTPException(
            status_code=400, detail="Could not derive a slug from the title")
    try:
        post = storage.create_post(
            author_id=author.id,
            title=data.title,
            slug=slug,
            content=data.content,
            excerpt=data.excerpt or make_excerpt(data.content),
            category=data.category,
            cover_image=data.cover_image,
            published=data.published,
        )
    except DuplicateKeyError:
        raise HTTPException(
            status_code=400, detail="A post with this slug already exists")
    logger.info(f"User {author.id} created post {post.id} ({post.slug})")
    return post


def update_post(storage: Storage, post_id: int, data: PostUpdate, user: UserRecord) -> PostRecord:
    post = _require_post(storage, post_id)
    if post.author_id != user.id:
        raise HTTPException(
            status_code=403, detail="Not authorized to update this post")

    changes = data.model_dump(exclude_unset=True)
    if changes.get("content") is not None:
        _check_post_length(changes["content"])
    if changes.get("slug") is not None:
        changes["slug"] = slugify(changes["slug"])
        if not changes["slug"]:
            raise HTTPException(status_code=400, detail="Invalid slug")
    # Required columns cannot be cleared
    for key in ("title", "content", "category", "slug", "excerpt", "published"):
        if key in changes and changes[key] is None:
            changes.pop(key)
    try:
        return storage.update_post(post_id, **changes)
    except DuplicateKeyError:
        raise HTTPException(
            status_code=400, detail="A post with this slug already exists")


def delete_post(storage: Storage, post_id: int, user: UserRecord):
    post = _require_post(storage, post_id)
    if post.author_id != user.id:
        raise HTTPException(
            status_code=403, detail="Not authorized to delete this post")
    if not storage.delete_post(post_id):
        raise HTTPException(status_code=500, detail="Failed to delete post")
    logger.info(f"User {user.id} deleted post {post_id}")

# Comments


def list_comments(storage: Storage, post_id: int) -> List[CommentWithAuthor]:
    _require_post(storage, post_id)
    return storage.get_comments_by_post_id(post_id)


def add_comment(storage: Storage, post_id: int, data: CommentCreate,
                author: UserRecord) -> CommentWithAuthor:
    _require_post(storage, post_id)
    if len(data.content) > settings.MAX_COMMENT_LENGTH:
        raise HTTPException(
            status_code=400,
            detail=f"Comment exceeds {settings.MAX_COMMENT_LENGTH} characters")
    if data.parent_id is not None:
        parent = storage.get_comment_by_id(data.parent_id)
        if not parent or parent.post_id != post_id:
            raise HTTPException(
                status_code=400, detail="Parent comment does not belong to this post")

    comment = storage.create_comment(
        post_id=post_id, author_id=author.id,
        content=data.content, parent_id=data.parent_id)
    return CommentWithAuthor(
        id=comment.id,
        content=comment.content,
        post_id=comment.post_id,
        author_id=comment.author_id,
        parent_id=comment.parent_id,
        created_at=comment.created_at,
        author=author,
    )


def remove_comment(storage: Storage, comment_id: int, user: UserRecord):
    comment = storage.get_comment_by_id(comment_id)
    if not comment:
        raise HTTPException(status_code=404, detail="Comment not found")
    if comment.author_id != user.id:
        raise HTTPException(
            status_code=403, detail="Not authorized to delete this comment")
    if not storage.delete_comment(comment_id):
        raise HTTPException(status_code=500, detail="Failed to delete comment")

# Likes


def like(storage: Storage, post_id: int, user: UserRecord) -> dict:
    _require_post(storage, post_id)
    storage.like_post(post_id, user.id)
    return {"like_count": storage.get_like_count(post_id), "liked": True}


def unlike(storage: Storage, post_id: int, user: UserRecord) -> dict:
    _require_post(storage, post_id)
    if not storage.unlike_post(post_id, user.id):
        raise HTTPException(status_code=400, detail="Post was not liked")
    return {"like_count": storage.get_like_count(post_id), "liked": False}

# Categories


def list_categories(storage: Storage) -> List[CategoryRecord]:
    return storage.get_categories()
