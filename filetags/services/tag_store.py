"""Process-wide handle on the tag database."""
import logging
from contextlib import contextmanager
from typing import Iterable, Iterator, List, Optional

from sqlalchemy import Engine
from sqlalchemy.orm import sessionmaker

from filetags.core.content_hasher import ContentHasher, PathLike
from filetags.core.database import create_db_engine, create_session_factory, init_db
from filetags.models.file import File
from filetags.models.tag import Tag
from filetags.repositories.file_repository import FileRepository
from filetags.repositories.file_tag_repository import FileTagRepository, FileWithTags
from filetags.repositories.tag_repository import TagRepository

logger = logging.getLogger(__name__)


class TagStore:
    """Owns the engine and runs each tagging operation in one transaction.

    Open it once at startup and close it at shutdown. Every public method
    commits on success and rolls back on error, so a link or unlink and
    the recount it triggers are applied together or not at all.
    """

    def __init__(
        self,
        database_url: str = "sqlite://",
        echo: bool = False,
        hasher: Optional[ContentHasher] = None,
    ):
        """Initialize tag store.

        Args:
            database_url: SQLAlchemy URL of the SQLite store
            echo: Log SQL statements
            hasher: Content hasher used to identify files
        """
        self.database_url = database_url
        self.echo = echo
        self.hasher = hasher or ContentHasher()
        self._engine: Optional[Engine] = None
        self._session_factory: Optional[sessionmaker] = None

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def open(self) -> "TagStore":
        """Create the engine and make sure the schema is current."""
        if not self.is_open:
            self._engine = create_db_engine(self.database_url, echo=self.echo)
            init_db(self._engine)
            self._session_factory = create_session_factory(self._engine)
            logger.info(f"Opened tag store at {self.database_url}")
        return self

    def close(self) -> None:
        """Dispose of the engine's connections."""
        if self.is_open:
            self._engine.dispose()
            logger.info(f"Closed tag store at {self.database_url}")
        self._engine = None
        self._session_factory = None

    @property
    def is_open(self) -> bool:
        return self._engine is not None

    @property
    def engine(self) -> Engine:
        if not self.is_open:
            raise RuntimeError("TagStore is not open")
        return self._engine

    def __enter__(self) -> "TagStore":
        return self.open()

    def __exit__(self, *exc) -> None:
        self.close()

    @contextmanager
    def transaction(self) -> Iterator[FileTagRepository]:
        """Yield repositories bound to one session inside one transaction."""
        if self._session_factory is None:
            raise RuntimeError("TagStore is not open")

        with self._session_factory.begin() as session:
            yield FileTagRepository(
                session,
                files=FileRepository(session, self.hasher),
                tags=TagRepository(session),
            )

    # -------------------------------------------------------------------------
    # Tags
    # -------------------------------------------------------------------------

    def list_tags(self, tag_type: Optional[str] = None) -> List[Tag]:
        with self.transaction() as repo:
            return repo.tags.list_all(tag_type)

    def get_tag(self, tag_id: int) -> Optional[Tag]:
        with self.transaction() as repo:
            return repo.tags.get_by_id(tag_id)

    def create_tag(self, tag_type: str, label: str) -> Tag:
        """Create a tag, or fetch it if (type, label) already exists."""
        with self.transaction() as repo:
            repo.tags.get_or_create(tag_type, label)
            return repo.tags.get_by_key(tag_type, label)

    def rename_tag(self, tag_id: int, new_label: str) -> bool:
        with self.transaction() as repo:
            return repo.tags.rename(tag_id, new_label)

    def delete_tag(self, tag_id: int) -> bool:
        with self.transaction() as repo:
            return repo.tags.delete(tag_id)

    def recount_tags(self, tag_ids: Optional[Iterable[int]] = None) -> None:
        """Rebuild usage counts from the association table."""
        with self.transaction() as repo:
            repo.tags.recount(tag_ids)

    # -------------------------------------------------------------------------
    # Files
    # -------------------------------------------------------------------------

    def register_file(self, path: PathLike) -> File:
        with self.transaction() as repo:
            file_id = repo.files.get_or_create(path)
            return repo.files.get_by_id(file_id)

    def get_file(self, path: PathLike) -> Optional[File]:
        with self.transaction() as repo:
            return repo.files.get_by_path(path)

    def list_files(self) -> List[File]:
        with self.transaction() as repo:
            return repo.files.list_all()

    def delete_file(self, file_id: int) -> bool:
        """Delete a file row and recount the tags it carried."""
        with self.transaction() as repo:
            tag_ids = repo.tag_ids_for_file(file_id)
            deleted = repo.files.delete(file_id)
            repo.tags.recount(tag_ids)
            return deleted

    # -------------------------------------------------------------------------
    # Associations
    # -------------------------------------------------------------------------

    def link(self, path: PathLike, tag_id: int) -> bool:
        with self.transaction() as repo:
            return repo.link(path, tag_id)

    def unlink(self, path: PathLike, tag_id: int) -> bool:
        with self.transaction() as repo:
            return repo.unlink(path, tag_id)

    def unlink_all(self, path: PathLike) -> int:
        with self.transaction() as repo:
            return repo.unlink_all(path)

    def tags_for_file(self, path: PathLike) -> List[Tag]:
        with self.transaction() as repo:
            return repo.tags_for(path)

    def files_for_tag(self, tag_id: int) -> List[File]:
        with self.transaction() as repo:
            return repo.files_for(tag_id)

    def files_for_tags(self, tag_ids: Iterable[int]) -> List[File]:
        with self.transaction() as repo:
            return repo.files_for_all(tag_ids)

    def all_files_with_tags(self) -> List[FileWithTags]:
        with self.transaction() as repo:
            return repo.all_files_with_tags()

    # -------------------------------------------------------------------------
    # Exclusive tag groups
    # -------------------------------------------------------------------------

    def set_exclusive_tag(self, path: PathLike, tag_type: str, label: str) -> Tag:
        """Give a file exactly one tag of ``tag_type``.

        Used for ratings: any other tag of the same type is unlinked in the
        same transaction that links the new one, so a file never shows two.

        Args:
            path: Filesystem path of the file
            tag_type: Exclusive tag type, e.g. 'rating'
            label: Label of the tag to keep

        Returns:
            The linked tag, with its updated count
        """
        with self.transaction() as repo:
            tag_id = repo.tags.get_or_create(tag_type, label)
            removed = repo.unlink_type(path, tag_type, keep_tag_id=tag_id)
            repo.link(path, tag_id)
            if removed:
                logger.info(f"Replaced {removed} '{tag_type}' tags on {path}")
            return repo.tags.get_by_id(tag_id)

    def clear_exclusive_tag(self, path: PathLike, tag_type: str) -> int:
        """Remove every tag of ``tag_type`` from a file."""
        with self.transaction() as repo:
            return repo.unlink_type(path, tag_type)
