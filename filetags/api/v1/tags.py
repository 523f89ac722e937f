"""Tag endpoints."""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from filetags.api.deps import get_tag_store
from filetags.api.v1.schemas import FileResponse, OperationResponse, TagCreate, TagResponse, TagUpdate
from filetags.core.config import settings
from filetags.core.exceptions import TagLabelConflictError
from filetags.services.tag_store import TagStore

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/tags")


@router.get("")
def list_tags(
    type: Optional[str] = Query(None, description="Only tags of this type"),
    store: TagStore = Depends(get_tag_store),
) -> dict:
    """List tags, optionally filtered by type."""
    tags = store.list_tags(type)
    return {"tags": [TagResponse.model_validate(tag) for tag in tags]}


@router.post("")
def create_tag(body: TagCreate, store: TagStore = Depends(get_tag_store)) -> dict:
    """Create a tag, or return the existing one with the same type and label."""
    tag = store.create_tag(body.type, body.label)
    return {"success": True, "tag": TagResponse.model_validate(tag)}


@router.put("/{tag_id}")
def update_tag(tag_id: int, body: TagUpdate, store: TagStore = Depends(get_tag_store)) -> dict:
    """Rename a tag.

    Renaming to the delete sentinel ("-" by default) deletes the tag
    instead, matching how the browser UI removes tags inline.
    """
    if body.label == settings.TAG_DELETE_SENTINEL:
        success = store.delete_tag(tag_id)
        return {
            "success": success,
            "deleted": True,
            "message": "Tag deleted" if success else "Tag not found",
        }

    try:
        success = store.rename_tag(tag_id, body.label)
    except TagLabelConflictError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))

    return {"success": success, "message": "Tag updated" if success else "Tag not found"}


@router.delete("/{tag_id}", response_model=OperationResponse)
def delete_tag(tag_id: int, store: TagStore = Depends(get_tag_store)) -> OperationResponse:
    """Delete a tag and every link to it."""
    success = store.delete_tag(tag_id)
    return OperationResponse(success=success, message="Tag deleted" if success else "Tag not found")


@router.get("/{tag_id}/files")
def list_files_for_tag(tag_id: int, store: TagStore = Depends(get_tag_store)) -> dict:
    """List files linked to a tag."""
    files = store.files_for_tag(tag_id)
    return {"files": [FileResponse.model_validate(f) for f in files]}
