from fastapi import APIRouter, Depends
from app.schemas.post_schema import ResponsePostWithAuthor
from app.schemas.profile_schema import ProfileUpdate, ResponseAccount, ResponseProfile
from app.services import profile as profile_service
from app.services.auth import get_current_user
from app.storage.base import Storage
from app.storage.deps import get_storage
from app.storage.records import UserRecord

router = APIRouter(prefix="/users", tags=["users"])

# Update own profile (declared before /{user_id})


@router.put("/me", response_model=ResponseAccount)
def update_profile(profile_data: ProfileUpdate, storage: Storage = Depends(get_storage),
                   user: UserRecord = Depends(get_current_user)):
    return profile_service.update_profile(storage, profile_data, user)

# Get profile by user_id


@router.get("/{user_id}", response_model=ResponseProfile)
def get_profile(user_id: int, storage: Storage = Depends(get_storage)):
    return profile_service.get_profile(storage, user_id)

# Posts written by a user


@router.get("/{user_id}/posts", response_model=list[ResponsePostWithAuthor])
def get_user_posts(user_id: int, storage: Storage = Depends(get_storage)):
    return profile_service.posts_by_author(storage, user_id)
