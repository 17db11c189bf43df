import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from link_registry.api import api_router
from link_registry.api.deps import close_metadata_service
from link_registry.config import get_settings

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup and shutdown events."""
    # Startup
    app_settings = get_settings()
    logging.basicConfig(
        level=app_settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
    app_settings.storage_dir.mkdir(parents=True, exist_ok=True)
    yield
    # Shutdown
    close_metadata_service()


app = FastAPI(title=settings.app_name, lifespan=lifespan)
app.include_router(api_router)


@app.get("/health", tags=["system"])
async def healthcheck() -> dict[str, str]:
    return {"status": "ok", "app": settings.app_name}
