import logging
from app.config import settings
from app.db.session import engine, Base, SessionLocal
import app.models  # noqa: F401  register all mappers on Base
from app.storage.database import DatabaseStorage
from app.storage.deps import memory_storage

logger = logging.getLogger(__name__)


def initialize_database():
    """Create the tables (database backend) and seed the default categories."""
    if settings.STORAGE_BACKEND == "memory":
        if settings.SEED_CATEGORIES:
            memory_storage.seed_categories()
        return

    logger.info("Initializing the database...")
    Base.metadata.create_all(bind=engine)
    if settings.SEED_CATEGORIES:
        db = SessionLocal()
        try:
            DatabaseStorage(db).seed_categories()
        finally:
            db.close()
    logger.info("Database initialization completed successfully.")


if __name__ == "__main__":
    logging.basicConfig(level=settings.LOG_LEVEL)
    initialize_database()
