"""Services package for the tagging engine."""

from filetags.services.tag_store import TagStore

__all__ = ["TagStore"]
