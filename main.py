import uvicorn

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from contextlib import asynccontextmanager

from app.core.config import settings
from app.core.errors import register_exception_handlers
from app.core.http import PreflightMiddleware
from app.core.logging_config import configure_logging
from app.core.redis_client import init_redis
from app.core.rest_client import RestClient
from app.core.storage import StorageClient
from app.api.v1.api import api_router

configure_logging("DEBUG" if settings.DEBUG else settings.LOG_LEVEL)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    # Note: tables are managed by Alembic migrations against the hosted Postgres
    app.state.rest_client = RestClient(settings)
    app.state.storage_client = StorageClient(settings)
    app.state.redis = await init_redis(settings.REDIS_URL)
    yield
    # Shutdown
    await app.state.rest_client.aclose()
    await app.state.storage_client.aclose()
    await app.state.redis.aclose()


app = FastAPI(
    title="Digital Diary API",
    description="A RESTful API for diary entries, to-dos, tasks, moods and notes",
    version="1.0.0",
    lifespan=lifespan
)

register_exception_handlers(app)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Preflight wraps CORS so OPTIONS never reaches routing
app.add_middleware(PreflightMiddleware)

# Add trusted host middleware for production
if not settings.DEBUG:
    app.add_middleware(
        TrustedHostMiddleware,
        allowed_hosts=["*"]  # Configure with your actual domains in production
    )

# Include API router
app.include_router(api_router, prefix=settings.API_PREFIX)


@app.get("/")
async def root():
    return {"message": "Digital Diary API", "version": "1.0.0"}


@app.get("/health")
async def health_check():
    return {"status": "healthy"}


if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG,
        proxy_headers=True,  # Enable proxy headers support
        forwarded_allow_ips="*"  # Allow forwarded headers from any IP
    )
