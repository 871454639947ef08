from fastapi import APIRouter, Depends, status
from app.schemas.auth_schema import UserCreate, UserLogin, Token
from app.schemas.profile_schema import ResponseAccount
from app.services.auth import register_user, login_user, get_current_user
from app.storage.base import Storage
from app.storage.deps import get_storage
from app.storage.records import UserRecord

router = APIRouter()


@router.post("/register", response_model=ResponseAccount, status_code=status.HTTP_201_CREATED)
def register(user: UserCreate, storage: Storage = Depends(get_storage)):
    return register_user(user, storage)


@router.post("/login", response_model=Token)
def login(user: UserLogin, storage: Storage = Depends(get_storage)):
    return login_user(user, storage)


@router.get("/me", response_model=ResponseAccount)
def me(user: UserRecord = Depends(get_current_user)):
    return user
