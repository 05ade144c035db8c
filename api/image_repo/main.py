"""Main FastAPI application."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse

from image_repo.api.v1 import api_router
from image_repo.api.v1.endpoints import health
from image_repo.config import settings
from image_repo.errors import ImageRepoError
from image_repo.metadata.factory import close_metadata_store
from image_repo.schemas.envelope import create_error

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(
        f"Starting image repository (storage={settings.storage_provider}, "
        f"metadata={settings.metadata_provider})"
    )
    yield
    await close_metadata_store()


app = FastAPI(
    title="Image Repository",
    description="Upload, share and download images",
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(ImageRepoError)
async def image_repo_error_handler(request: Request, exc: ImageRepoError):
    """Return service failures as the failure envelope."""
    logger.info(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=create_error(exc.message))


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    logger.error(f"Unexpected error in {request.method} {request.url.path}: {exc}", exc_info=True)
    return JSONResponse(status_code=500, content=create_error(f"Unexpected error: {exc}"))


# Include API routers
app.include_router(health.router, tags=["health"])
app.include_router(api_router, prefix="/api")


@app.get("/", response_class=PlainTextResponse)
async def index():
    """Landing text."""
    return "Image repository is running! :)"


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "image_repo.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_reload,
    )
