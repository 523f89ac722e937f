"""API v1 router."""
from fastapi import APIRouter

from filetags.api.v1 import files, tags

api_router: APIRouter = APIRouter()
api_router.include_router(tags.router, tags=["tags"])
api_router.include_router(files.router, tags=["files"])
