"""Repository exports."""
from filetags.repositories.file_repository import FileRepository
from filetags.repositories.file_tag_repository import FileTagRepository, FileWithTags, TagRef
from filetags.repositories.tag_repository import TagRepository

__all__ = [
    "FileRepository",
    "TagRepository",
    "FileTagRepository",
    "FileWithTags",
    "TagRef",
]
