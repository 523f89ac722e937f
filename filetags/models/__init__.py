"""Database models."""
from filetags.models.file import File
from filetags.models.file_tag import FileTag
from filetags.models.tag import Tag

__all__ = [
    "File",
    "FileTag",
    "Tag",
]
