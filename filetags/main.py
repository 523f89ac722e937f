"""FastAPI application exposing the tagging engine."""
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from filetags.api.v1.router import api_router
from filetags.core.config import settings
from filetags.core.content_hasher import ContentHasher
from filetags.core.logging_config import configure_logging
from filetags.services.tag_store import TagStore

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Configure logging, open the tag store at startup and close it at shutdown."""
    configure_logging(settings.LOG_LEVEL, settings.SQL_ECHO)
    store: TagStore = app.state.tag_store
    store.open()
    try:
        yield
    finally:
        store.close()


def create_app(tag_store: Optional[TagStore] = None) -> FastAPI:
    """Build the application around a tag store.

    Args:
        tag_store: Store to serve; one built from settings when omitted

    Returns:
        Configured FastAPI application
    """
    app = FastAPI(title=settings.PROJECT_NAME, lifespan=lifespan)
    app.state.tag_store = tag_store or TagStore(
        settings.SQLALCHEMY_DATABASE_URL,
        echo=settings.SQL_ECHO,
        hasher=ContentHasher(settings.HASH_CHUNK_SIZE),
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/health")
    def health_check() -> dict:
        """Health check endpoint."""
        return {"status": "healthy"}

    app.include_router(api_router, prefix="/api/v1")
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("filetags.main:app", host="127.0.0.1", port=8000)
