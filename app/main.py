import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.routes import auth, categories, comments, post, profile
from app.config import settings  # <- import settings
import app.models  # <- ensure all model modules are imported and mappers registered
from app.init_db import initialize_database
from app.storage.base import StorageError

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger("app")


@asynccontextmanager
async def lifespan(app: FastAPI):
    initialize_database()
    logger.info(
        f"{settings.APP_NAME} started ({settings.ENVIRONMENT}, storage={settings.STORAGE_BACKEND})")
    yield


app = FastAPI(title=settings.APP_NAME, lifespan=lifespan)

# Use configured origins (reads from app.config.settings)
origins = settings.ALLOWED_ORIGINS

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.perf_counter()
    response = await call_next(request)
    if request.url.path.startswith("/api"):
        duration = (time.perf_counter() - start) * 1000
        logger.info(
            f"{request.method} {request.url.path} {response.status_code} in {duration:.0f}ms")
    return response


@app.exception_handler(StorageError)
async def storage_error_handler(request: Request, exc: StorageError):
    logger.error(f"Storage failure on {request.method} {request.url.path}: {exc}")
    detail = "Internal Server Error" if settings.is_production else str(exc)
    return JSONResponse(status_code=500, content={"detail": detail})


app.include_router(auth.router, prefix="/api/auth", tags=["auth"])
app.include_router(post.router, prefix="/api")
app.include_router(comments.router, prefix="/api")
app.include_router(categories.router, prefix="/api")
app.include_router(profile.router, prefix="/api")


@app.get("/")
async def read_root():
    return {"message": f"{settings.APP_NAME} API is running"}
