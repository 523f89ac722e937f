"""File-tag association repository with intersection queries."""
import logging
from dataclasses import dataclass, field
from itertools import groupby
from typing import Iterable, List, Optional

from sqlalchemy import delete, distinct, func, select
from sqlalchemy.dialects.sqlite import insert
from sqlalchemy.orm import Session

from filetags.core.content_hasher import PathLike
from filetags.core.exceptions import TagNotFoundError
from filetags.models.file import File
from filetags.models.file_tag import FileTag
from filetags.models.tag import Tag
from filetags.repositories.file_repository import FileRepository
from filetags.repositories.tag_repository import TagRepository

logger = logging.getLogger(__name__)


@dataclass
class TagRef:
    """Minimal tag reference attached to a file listing."""

    id: int
    label: str


@dataclass
class FileWithTags:
    """A file together with every tag linked to it."""

    file: File
    tags: List[TagRef] = field(default_factory=list)


class FileTagRepository:
    """Repository for the many-to-many join between files and tags.

    Every mutation that actually changes a link recounts the affected tags
    in the same session, so committing the session commits both.
    """

    def __init__(
        self,
        session: Session,
        files: Optional[FileRepository] = None,
        tags: Optional[TagRepository] = None,
    ):
        """Initialize association repository.

        Args:
            session: Database session
            files: File repository sharing the session
            tags: Tag repository sharing the session
        """
        self.session = session
        self.files = files or FileRepository(session)
        self.tags = tags or TagRepository(session)

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    def link(self, path: PathLike, tag_id: int) -> bool:
        """Attach a tag to the file at ``path``.

        Args:
            path: Filesystem path of the file
            tag_id: Tag ID

        Returns:
            True if a new link was created, False if it already existed

        Raises:
            TagNotFoundError: The tag does not exist
        """
        if self.tags.get_by_id(tag_id) is None:
            raise TagNotFoundError(tag_id)

        file_id = self.files.get_or_create(path)
        result = self.session.execute(
            insert(FileTag.__table__)
            .values({FileTag.file_id: file_id, FileTag.tag_id: tag_id})
            .on_conflict_do_nothing(index_elements=["fileId", "tagId"])
        )

        if result.rowcount == 0:
            logger.debug(f"Tag {tag_id} already linked to file {file_id}")
            return False

        self.tags.recount([tag_id])
        logger.info(f"Linked tag {tag_id} to file {file_id}")
        return True

    def unlink(self, path: PathLike, tag_id: int) -> bool:
        """Detach a tag from the file at ``path``.

        Args:
            path: Filesystem path of the file
            tag_id: Tag ID

        Returns:
            True if a link was removed; False for unknown files or
            tags that were not linked
        """
        file = self.files.get_by_path(path)
        if not file:
            return False

        result = self.session.execute(
            delete(FileTag.__table__).where(
                FileTag.file_id == file.id, FileTag.tag_id == tag_id
            )
        )
        if result.rowcount == 0:
            return False

        self.tags.recount([tag_id])
        logger.info(f"Unlinked tag {tag_id} from file {file.id}")
        return True

    def unlink_all(self, path: PathLike) -> int:
        """Detach every tag from the file at ``path``.

        Args:
            path: Filesystem path of the file

        Returns:
            Number of links removed
        """
        file = self.files.get_by_path(path)
        if not file:
            return 0

        tag_ids = self.tag_ids_for_file(file.id)
        result = self.session.execute(
            delete(FileTag.__table__).where(FileTag.file_id == file.id)
        )
        self.tags.recount(tag_ids)

        logger.info(f"Removed {result.rowcount} tags from file {file.id}")
        return result.rowcount

    def unlink_type(
        self, path: PathLike, tag_type: str, keep_tag_id: Optional[int] = None
    ) -> int:
        """Detach every tag of one type from a file, except ``keep_tag_id``.

        Args:
            path: Filesystem path of the file
            tag_type: Tag type to clear
            keep_tag_id: Tag of that type to leave linked

        Returns:
            Number of links removed
        """
        file = self.files.get_by_path(path)
        if not file:
            return 0

        query = (
            select(FileTag.tag_id)
            .join(Tag, Tag.id == FileTag.tag_id)
            .where(FileTag.file_id == file.id, Tag.tag_type == tag_type)
        )
        if keep_tag_id is not None:
            query = query.where(FileTag.tag_id != keep_tag_id)
        tag_ids = list(self.session.execute(query).scalars().all())

        if not tag_ids:
            return 0

        result = self.session.execute(
            delete(FileTag.__table__).where(
                FileTag.file_id == file.id, FileTag.tag_id.in_(tag_ids)
            )
        )
        self.tags.recount(tag_ids)
        return result.rowcount

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def tag_ids_for_file(self, file_id: int) -> List[int]:
        """IDs of the tags linked to a file."""
        result = self.session.execute(
            select(FileTag.tag_id).where(FileTag.file_id == file_id)
        )
        return list(result.scalars().all())

    def tags_for(self, path: PathLike) -> List[Tag]:
        """Tags linked to the file at ``path``, ordered by label.

        Args:
            path: Filesystem path of the file

        Returns:
            List of Tag instances; empty if the file is unknown
        """
        file = self.files.get_by_path(path)
        if not file:
            return []

        result = self.session.execute(
            select(Tag)
            .join(FileTag, FileTag.tag_id == Tag.id)
            .where(FileTag.file_id == file.id)
            .order_by(Tag.label)
            .execution_options(populate_existing=True)
        )
        return list(result.scalars().all())

    def files_for(self, tag_id: int) -> List[File]:
        """Files linked to a tag, ordered by folder then filename.

        Args:
            tag_id: Tag ID

        Returns:
            List of File instances
        """
        result = self.session.execute(
            select(File)
            .join(FileTag, FileTag.file_id == File.id)
            .where(FileTag.tag_id == tag_id)
            .order_by(File.folder, File.filename)
        )
        return list(result.scalars().all())

    def files_for_all(self, tag_ids: Iterable[int]) -> List[File]:
        """Files linked to every one of ``tag_ids``.

        A file qualifies when the number of distinct requested tags it
        carries equals the number of distinct requested tags. An empty
        request matches nothing.

        Args:
            tag_ids: Tag IDs that must all be present

        Returns:
            List of File instances ordered by folder then filename
        """
        tag_ids = list(dict.fromkeys(tag_ids))
        if not tag_ids:
            return []
        if len(tag_ids) == 1:
            return self.files_for(tag_ids[0])

        matching = (
            select(FileTag.file_id)
            .where(FileTag.tag_id.in_(tag_ids))
            .group_by(FileTag.file_id)
            .having(func.count(distinct(FileTag.tag_id)) == len(tag_ids))
        )
        result = self.session.execute(
            select(File)
            .where(File.id.in_(matching))
            .order_by(File.folder, File.filename)
        )
        return list(result.scalars().all())

    def all_files_with_tags(self) -> List[FileWithTags]:
        """Every known file with its tags, including untagged files.

        Returns:
            List of FileWithTags ordered by folder then filename, each
            with tags ordered by label
        """
        result = self.session.execute(
            select(File, Tag.id, Tag.label)
            .outerjoin(FileTag, FileTag.file_id == File.id)
            .outerjoin(Tag, Tag.id == FileTag.tag_id)
            .order_by(File.folder, File.filename, File.id, Tag.label)
        )

        listing = []
        for _, rows in groupby(result.all(), key=lambda row: row[0].id):
            rows = list(rows)
            listing.append(
                FileWithTags(
                    file=rows[0][0],
                    tags=[
                        TagRef(id=tag_id, label=label)
                        for _, tag_id, label in rows
                        if tag_id is not None
                    ],
                )
            )
        return listing
