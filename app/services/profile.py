import logging
from typing import List

from fastapi import HTTPException

from app.schemas.profile_schema import ProfileUpdate
from app.storage.base import Storage
from app.storage.records import PostWithAuthor, UserRecord

logger = logging.getLogger(__name__)


def get_profile(storage: Storage, user_id: int) -> UserRecord:
    profile = storage.get_user(user_id)
    if not profile:
        raise HTTPException(status_code=404, detail="User not found")
    return profile


def update_profile(storage: Storage, data: ProfileUpdate, user: UserRecord) -> UserRecord:
    changes = data.model_dump(exclude_unset=True)
    # name is required, an explicit null leaves it unchanged
    if "name" in changes and changes["name"] is None:
        changes.pop("name")
    updated = storage.update_user(user.id, **changes)
    if not updated:
        raise HTTPException(status_code=404, detail="User not found")
    logger.info(f"User {user.id} updated profile fields {sorted(changes)}")
    return updated


def posts_by_author(storage: Storage, user_id: int) -> List[PostWithAuthor]:
    get_profile(storage, user_id)
    return storage.get_posts_by_author(user_id)
