from fastapi import APIRouter

from link_registry.api.v1 import resources

api_router = APIRouter(prefix="/api")
api_router.include_router(resources.router)

__all__ = ["api_router"]
