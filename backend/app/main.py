"""FastAPI application entry point."""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.core.config import settings
from app.core.database import init_models
from app.core.logging import setup_logging
from app.core.middleware import CorrelationIdMiddleware, RequestLoggingMiddleware
from app.modules.auth import router as auth_router
from app.modules.transcoding import StagingArea
from app.modules.video import router as video_router
from app.modules.video import upload_router

setup_logging(
    level="DEBUG" if settings.DEBUG else "INFO",
    json_format=settings.LOG_JSON,
    include_stack_trace=True,
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    StagingArea().ensure_root()
    if settings.DATABASE_URL.startswith("sqlite"):
        await init_models()
    yield


app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.VERSION,
    description="""
## Video upload and fast-start processing API

Uploaded mp4 files are remuxed so playback can start before the download
finishes, classified as landscape, portrait or other, and stored in object
storage. The resulting URL is recorded on the video.

### Authentication

All endpoints except `/health` require a JWT Bearer token.

```
Authorization: Bearer <access_token>
```
    """,
    openapi_url=f"{settings.API_V1_PREFIX}/openapi.json",
    lifespan=lifespan,
    openapi_tags=[
        {
            "name": "health",
            "description": "Health check endpoints",
        },
        {
            "name": "auth",
            "description": "Bearer token management",
        },
        {
            "name": "videos",
            "description": "Video records - create, list, get, delete",
        },
        {
            "name": "uploads",
            "description": "Video and thumbnail uploads for an existing record",
        },
    ],
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(CorrelationIdMiddleware)


@app.get("/health", tags=["health"])
async def health_check() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "healthy"}


app.include_router(auth_router, prefix=settings.API_V1_PREFIX)
app.include_router(video_router, prefix=settings.API_V1_PREFIX)
app.include_router(upload_router, prefix=settings.API_V1_PREFIX)
