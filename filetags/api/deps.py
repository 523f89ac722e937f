"""Shared API dependencies."""
from fastapi import Request

from filetags.services.tag_store import TagStore


def get_tag_store(request: Request) -> TagStore:
    """Dependency returning the application's tag store."""
    return request.app.state.tag_store
