"""FileTag association model."""
from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, UniqueConstraint, func
from sqlalchemy.orm import relationship

from filetags.core.database import Base


class FileTag(Base):
    """Many-to-many association between files and tags."""

    __tablename__ = "files_tags"

    id = Column(Integer, primary_key=True, autoincrement=True)
    file_id = Column("fileId", Integer, ForeignKey("files.id", ondelete="CASCADE"), nullable=False)
    tag_id = Column("tagId", Integer, ForeignKey("tags.id", ondelete="CASCADE"), nullable=False)
    created_at = Column(DateTime, server_default=func.now())

    # Relationships
    file = relationship("File", back_populates="tag_associations")
    tag = relationship("Tag", back_populates="file_associations")

    __table_args__ = (
        UniqueConstraint(file_id, tag_id),
        Index("idx_files_tags_fileId", file_id),
        Index("idx_files_tags_tagId", tag_id),
    )
