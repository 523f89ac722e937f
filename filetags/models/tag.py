"""Tag model with a cached usage counter."""
from sqlalchemy import Column, DateTime, Index, Integer, String, UniqueConstraint, func, text
from sqlalchemy.orm import relationship

from filetags.core.database import Base


class Tag(Base):
    """Free-form label grouped by a flat type string (e.g. 'image', 'rating')."""

    __tablename__ = "tags"

    id = Column(Integer, primary_key=True, autoincrement=True)
    tag_type = Column("type", String, nullable=False)
    label = Column(String, nullable=False)
    # distinct files linked to this tag, recomputed on every link mutation
    usage_count = Column("count", Integer, nullable=False, default=0, server_default=text("0"))
    created_at = Column(DateTime, server_default=func.now())

    # Relationships
    file_associations = relationship(
        "FileTag",
        back_populates="tag",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    __table_args__ = (
        UniqueConstraint(tag_type, label),
        Index("idx_tags_type", tag_type),
    )

    def __repr__(self) -> str:
        return f"<Tag {self.id} {self.tag_type}:{self.label} ({self.usage_count})>"
