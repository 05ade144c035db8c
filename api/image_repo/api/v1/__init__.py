"""API router."""

from fastapi import APIRouter

from image_repo.api.v1.endpoints import images, users

api_router = APIRouter()

api_router.include_router(images.router, prefix="/images", tags=["images"])
api_router.include_router(users.router, prefix="/users", tags=["users"])
