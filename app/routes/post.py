from fastapi import APIRouter, Depends, Query, Response, status
from app.config import settings
from app.schemas.post_schema import (
    LikeResponse,
    PostCreate,
    PostListResponse,
    PostUpdate,
    ResponsePost,
    ResponsePostWithAuthor,
)
from app.services import blog
from app.services.auth import get_current_user, get_optional_user
from app.storage.base import Storage
from app.storage.deps import get_storage
from app.storage.records import UserRecord

router = APIRouter(prefix="/posts", tags=["posts"])

# List posts, newest first


@router.get("", response_model=PostListResponse)
def get_posts(
    page: int = Query(1, ge=1),
    limit: int = Query(settings.POSTS_PER_PAGE, ge=1, le=100),
    category: str | None = Query(None, description="Category name or slug"),
    storage: Storage = Depends(get_storage),
    viewer: UserRecord | None = Depends(get_optional_user),
):
    return blog.list_posts(storage, page, limit, category, viewer)

# Featured posts (declared before /{slug} so it is not taken for a slug)


@router.get("/featured", response_model=list[ResponsePostWithAuthor])
def get_featured_posts(storage: Storage = Depends(get_storage),
                       viewer: UserRecord | None = Depends(get_optional_user)):
    return blog.featured_posts(storage, viewer)

# Get a post by slug


@router.get("/{slug}", response_model=ResponsePostWithAuthor)
def get_post(slug: str, storage: Storage = Depends(get_storage),
             viewer: UserRecord | None = Depends(get_optional_user)):
    return blog.get_post(storage, slug, viewer)

# Create a new post


@router.post("", response_model=ResponsePost, status_code=status.HTTP_201_CREATED)
def create_post(post: PostCreate, storage: Storage = Depends(get_storage),
                user: UserRecord = Depends(get_current_user)):
    return blog.create_post(storage, post, user)

# Update


@router.put("/{post_id}", response_model=ResponsePost)
def update_post(post_id: int, post_data: PostUpdate, storage: Storage = Depends(get_storage),
                user: UserRecord = Depends(get_current_user)):
    return blog.update_post(storage, post_id, post_data, user)

# Delete


@router.delete("/{post_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_post(post_id: int, storage: Storage = Depends(get_storage),
                user: UserRecord = Depends(get_current_user)):
    blog.delete_post(storage, post_id, user)
    return Response(status_code=status.HTTP_204_NO_CONTENT)

# Like


@router.post("/{post_id}/like", response_model=LikeResponse, status_code=status.HTTP_201_CREATED)
def like_post(post_id: int, storage: Storage = Depends(get_storage),
              user: UserRecord = Depends(get_current_user)):
    return blog.like(storage, post_id, user)

# Unlike


@router.delete("/{post_id}/like", response_model=LikeResponse)
def unlike_post(post_id: int, storage: Storage = Depends(get_storage),
                user: UserRecord = Depends(get_current_user)):
    return blog.unlike(storage, post_id, user)
