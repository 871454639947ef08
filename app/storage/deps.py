from fastapi import Depends
from sqlalchemy.orm import Session
from app.config import settings
from app.db.session import get_db
from app.storage.base import Storage
from app.storage.database import DatabaseStorage
from app.storage.memory import MemoryStorage

# Shared across requests when STORAGE_BACKEND=memory
memory_storage = MemoryStorage()


def get_storage(db: Session = Depends(get_db)) -> Storage:
    if settings.STORAGE_BACKEND == "memory":
        return memory_storage
    return DatabaseStorage(db)
