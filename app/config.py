from pydantic_settings import BaseSettings
from typing import List


class Settings(BaseSettings):
    APP_NAME: str = "Inkwell"
    ENVIRONMENT: str = "development"
    SECRET_KEY: str = "dev-jwt-secret-key"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 7
    DATABASE_URL: str = "sqlite:///./blog.db"

    # "database" (SQLAlchemy) or "memory" (process-local dicts)
    STORAGE_BACKEND: str = "database"
    SEED_CATEGORIES: bool = True

    POSTS_PER_PAGE: int = 10
    FEATURED_POSTS_LIMIT: int = 3
    MAX_COMMENT_LENGTH: int = 2000
    MAX_POST_LENGTH: int = 50000

    LOG_LEVEL: str = "INFO"

    # CORS: default allow local frontend on port 3000 (can be overridden via .env)
    ALLOWED_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]

    class Config:
        env_file = ".env"  # Load environment variables from the .env file

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT == "production"


settings = Settings()
