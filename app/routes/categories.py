from fastapi import APIRouter, Depends
from app.schemas.category_schema import ResponseCategory
from app.services import blog
from app.storage.base import Storage
from app.storage.deps import get_storage

router = APIRouter(prefix="/categories", tags=["categories"])


@router.get("", response_model=list[ResponseCategory])
def get_categories(storage: Storage = Depends(get_storage)):
    return blog.list_categories(storage)
