from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from app.schemas.auth_schema import UserCreate, UserLogin, Token
from app.core.security import hash_password, verify_password, create_access_token, decode_access_token
from app.storage.base import Storage, DuplicateKeyError
from app.storage.deps import get_storage
from app.storage.records import UserRecord
import logging

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


def register_user(user: UserCreate, storage: Storage) -> UserRecord:
    logger.debug(f"Registering user: {user.username}")
    # Check if the username or email already exists
    if storage.get_user_by_username(user.username):
        raise HTTPException(
            status_code=400, detail="Username already exists")
    if storage.get_user_by_email(user.email):
        raise HTTPException(
            status_code=400, detail="User with this email already exists")

    # Hash the password and create a new user
    try:
        return storage.create_user(
            username=user.username,
            email=user.email,
            password=hash_password(user.password),
            name=user.name,
            bio=user.bio or "",
            avatar_url=user.avatar_url,
        )
    except DuplicateKeyError as e:
        raise HTTPException(status_code=400, detail=str(e))


def login_user(user: UserLogin, storage: Storage) -> Token:
    logger.debug(f"Logging in user: {user.username}")
    db_user = storage.get_user_by_username(user.username)
    if not db_user or not verify_password(user.password, db_user.password):
        raise HTTPException(status_code=401, detail="Invalid credentials")

    token = create_access_token({"sub": str(db_user.id)})
    return Token(access_token=token)


def get_optional_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    storage: Storage = Depends(get_storage),
) -> UserRecord | None:
    """The authenticated user, or None for anonymous requests."""
    if credentials is None:
        return None
    claims = decode_access_token(credentials.credentials)
    if not claims or "sub" not in claims:
        return None
    try:
        user_id = int(claims["sub"])
    except (TypeError, ValueError):
        return None
    return storage.get_user(user_id)


def get_current_user(user: UserRecord | None = Depends(get_optional_user)) -> UserRecord:
    if user is None:
        raise HTTPException(
            status_code=401, detail="Authentication required",
            headers={"WWW-Authenticate": "Bearer"})
    return user
