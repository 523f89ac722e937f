"""Tag repository with usage counter maintenance."""
import logging
from typing import Iterable, List, Optional

from sqlalchemy import distinct, func, select, update
from sqlalchemy.dialects.sqlite import insert
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from filetags.core.exceptions import TagLabelConflictError
from filetags.models.file_tag import FileTag
from filetags.models.tag import Tag
from filetags.repositories.base_repository import BaseRepository

logger = logging.getLogger(__name__)


class TagRepository(BaseRepository[Tag]):
    """Repository for Tag model keyed by (type, label)."""

    def __init__(self, session: Session):
        """Initialize tag repository.

        Args:
            session: Database session
        """
        super().__init__(Tag, session)

    def get_by_key(self, tag_type: str, label: str) -> Optional[Tag]:
        """Get tag by its (type, label) pair.

        Args:
            tag_type: Flat tag type, e.g. 'image' or 'rating'
            label: Tag label

        Returns:
            Tag instance or None if not found
        """
        result = self.session.execute(
            select(Tag)
            .filter(Tag.tag_type == tag_type, Tag.label == label)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    def get_or_create(self, tag_type: str, label: str) -> int:
        """Get existing tag ID or create the tag.

        Inserts first and lets the unique (type, label) constraint reject
        duplicates, then reads the surviving row back.

        Args:
            tag_type: Flat tag type
            label: Tag label

        Returns:
            Tag ID
        """
        result = self.session.execute(
            insert(Tag.__table__)
            .values({Tag.tag_type: tag_type, Tag.label: label})
            .on_conflict_do_nothing(index_elements=["type", "label"])
        )
        if result.rowcount > 0:
            logger.info(f"Created tag {tag_type}:{label}")

        return self.session.execute(
            select(Tag.id).filter(Tag.tag_type == tag_type, Tag.label == label)
        ).scalar_one()

    def list_all(self, tag_type: Optional[str] = None) -> List[Tag]:
        """List tags, optionally filtered by type.

        Args:
            tag_type: Optional type filter

        Returns:
            Tags ordered by label, or by type then label when unfiltered
        """
        query = select(Tag).execution_options(populate_existing=True)

        if tag_type:
            query = query.filter(Tag.tag_type == tag_type).order_by(Tag.label)
        else:
            query = query.order_by(Tag.tag_type, Tag.label)

        result = self.session.execute(query)
        return list(result.scalars().all())

    def rename(self, tag_id: int, new_label: str) -> bool:
        """Change a tag's label in place.

        Args:
            tag_id: Tag ID
            new_label: Replacement label

        Returns:
            True if the tag existed and was updated

        Raises:
            TagLabelConflictError: Another tag of the same type already
                uses ``new_label``
        """
        tag = self.get_by_id(tag_id)
        if not tag:
            return False

        try:
            self.session.execute(
                update(Tag).where(Tag.id == tag_id).values(label=new_label),
                execution_options={"synchronize_session": False},
            )
        except IntegrityError as e:
            raise TagLabelConflictError(tag_id, tag.tag_type, new_label) from e

        logger.info(f"Renamed tag {tag_id} from {tag.label!r} to {new_label!r}")
        return True

    def delete(self, tag_id: int) -> bool:
        """Delete a tag; its associations cascade.

        Args:
            tag_id: Tag ID

        Returns:
            True if the tag existed
        """
        deleted = self.delete_by_id(tag_id)
        if deleted:
            logger.info(f"Deleted tag {tag_id}")
        return deleted

    def recount(self, tag_ids: Optional[Iterable[int]] = None) -> None:
        """Recompute usage counts from the association table.

        The count is always derived from ``COUNT(DISTINCT fileId)``, never
        incremented, so it cannot drift from the links it describes.

        Args:
            tag_ids: Tags to recount; every tag when None
        """
        usage = (
            select(func.count(distinct(FileTag.file_id)))
            .where(FileTag.tag_id == Tag.id)
            .correlate(Tag)
            .scalar_subquery()
        )
        stmt = update(Tag).values(usage_count=usage)

        if tag_ids is not None:
            tag_ids = list(set(tag_ids))
            if not tag_ids:
                return
            stmt = stmt.where(Tag.id.in_(tag_ids))

        self.session.execute(stmt, execution_options={"synchronize_session": False})
