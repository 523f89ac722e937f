"""File repository keyed by content hash."""
import logging
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.dialects.sqlite import insert
from sqlalchemy.orm import Session

from filetags.core.content_hasher import ContentHasher, PathLike
from filetags.models.file import File
from filetags.repositories.base_repository import BaseRepository

logger = logging.getLogger(__name__)


class FileRepository(BaseRepository[File]):
    """Repository for File rows, deduplicated by content identity."""

    def __init__(self, session: Session, hasher: Optional[ContentHasher] = None):
        """Initialize file repository.

        Args:
            session: Database session
            hasher: Content hasher used to derive file identities
        """
        super().__init__(File, session)
        self.hasher = hasher or ContentHasher()

    def get_or_create(self, path: PathLike) -> int:
        """Get the File id for a path, creating the row on first sight.

        The insert is attempted first and ignored on a hash conflict, then
        the id is read back, so concurrent callers tagging the same new file
        both end up with the single winning row.

        Args:
            path: Filesystem path of the file

        Returns:
            File ID
        """
        file_hash = self.hasher.identity_of(path)
        folder, filename = self.hasher.split_path(path)

        result = self.session.execute(
            insert(File.__table__)
            .values({File.hash: file_hash, File.folder: folder, File.filename: filename})
            .on_conflict_do_nothing(index_elements=["hash"])
        )
        if result.rowcount > 0:
            logger.info(f"Registered file {path} ({file_hash[:12]})")

        return self.session.execute(
            select(File.id).filter(File.hash == file_hash)
        ).scalar_one()

    def get_by_hash(self, file_hash: str) -> Optional[File]:
        """Get file by content hash.

        Args:
            file_hash: Content identity

        Returns:
            File instance or None if not found
        """
        result = self.session.execute(select(File).filter(File.hash == file_hash))
        return result.scalar_one_or_none()

    def get_by_path(self, path: PathLike) -> Optional[File]:
        """Resolve a path to its File row without creating one.

        Args:
            path: Filesystem path of the file

        Returns:
            File instance or None if the content was never registered
        """
        return self.get_by_hash(self.hasher.identity_of(path))

    def list_all(self) -> List[File]:
        """List all files ordered by folder, then filename."""
        result = self.session.execute(select(File).order_by(File.folder, File.filename))
        return list(result.scalars().all())

    def delete(self, file_id: int) -> bool:
        """Delete a file; its associations cascade.

        Args:
            file_id: File ID

        Returns:
            True if the file existed
        """
        deleted = self.delete_by_id(file_id)
        if deleted:
            logger.info(f"Deleted file {file_id}")
        return deleted
