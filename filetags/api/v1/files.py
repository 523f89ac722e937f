"""File tagging endpoints."""
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from filetags.api.deps import get_tag_store
from filetags.api.v1.schemas import (
    FileResponse,
    FileTagLink,
    FileWithTagsResponse,
    OperationResponse,
    RatingUpdate,
    TagRefResponse,
    TagResponse,
)
from filetags.core.config import settings
from filetags.core.exceptions import TagNotFoundError
from filetags.services.tag_store import TagStore

logger = logging.getLogger(__name__)
router: APIRouter = APIRouter(prefix="/files")


def parse_tag_ids(raw: str) -> List[int]:
    """Parse a comma-separated list of tag IDs.

    Raises:
        HTTPException: If any element is not an integer
    """
    try:
        return [int(part) for part in raw.split(",") if part.strip()]
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid tag_ids: {raw}",
        )


@router.get("")
def list_files(store: TagStore = Depends(get_tag_store)) -> dict:
    """List every known file with its tags."""
    listing = store.all_files_with_tags()
    return {
        "files": [
            FileWithTagsResponse(
                **FileResponse.model_validate(entry.file).model_dump(),
                tags=[TagRefResponse.model_validate(tag) for tag in entry.tags],
            )
            for entry in listing
        ]
    }


@router.get("/by-tags")
def list_files_by_tags(
    tag_ids: str = Query(..., description="Comma-separated tag IDs, all required"),
    store: TagStore = Depends(get_tag_store),
) -> dict:
    """List files carrying every one of the given tags."""
    files = store.files_for_tags(parse_tag_ids(tag_ids))
    return {"files": [FileResponse.model_validate(f) for f in files]}


@router.get("/tags")
def list_tags_for_file(
    path: str = Query(..., min_length=1),
    store: TagStore = Depends(get_tag_store),
) -> dict:
    """List tags linked to the file at ``path``."""
    tags = store.tags_for_file(path)
    return {"tags": [TagResponse.model_validate(tag) for tag in tags]}


@router.post("/tags", response_model=OperationResponse)
def add_tag_to_file(body: FileTagLink, store: TagStore = Depends(get_tag_store)) -> OperationResponse:
    """Link a tag to a file."""
    try:
        success = store.link(body.file_path, body.tag_id)
    except TagNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))

    return OperationResponse(
        success=success,
        message="Tag added to file" if success else "Tag already exists on file",
    )


@router.delete("/tags", response_model=OperationResponse)
def remove_tag_from_file(
    path: str = Query(..., min_length=1),
    tag_id: int = Query(...),
    store: TagStore = Depends(get_tag_store),
) -> OperationResponse:
    """Unlink a tag from a file."""
    success = store.unlink(path, tag_id)
    return OperationResponse(
        success=success,
        message="Tag removed from file" if success else "Tag not found on file",
    )


@router.delete("/tags/all")
def remove_all_tags_from_file(
    path: str = Query(..., min_length=1),
    store: TagStore = Depends(get_tag_store),
) -> dict:
    """Unlink every tag from a file."""
    return {"removed": store.unlink_all(path)}


@router.put("/rating")
def set_rating(body: RatingUpdate, store: TagStore = Depends(get_tag_store)) -> dict:
    """Set a file's 1-5 rating, replacing any previous one; 0 clears it."""
    if body.rating == 0:
        store.clear_exclusive_tag(body.file_path, settings.RATING_TAG_TYPE)
        return {"success": True, "rating": 0, "tag": None}

    tag = store.set_exclusive_tag(body.file_path, settings.RATING_TAG_TYPE, str(body.rating))
    return {"success": True, "rating": body.rating, "tag": TagResponse.model_validate(tag)}
