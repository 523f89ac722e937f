"""File model."""
from sqlalchemy import Column, DateTime, Index, Integer, String, func
from sqlalchemy.orm import relationship

from filetags.core.database import Base


class File(Base):
    """File identified by content hash.

    ``folder`` and ``filename`` are recorded when the hash is first seen and
    are not refreshed if the file later moves.
    """

    __tablename__ = "files"

    id = Column(Integer, primary_key=True, autoincrement=True)
    hash = Column(String, unique=True, nullable=False)
    folder = Column(String, nullable=False)
    filename = Column(String, nullable=False)
    created_at = Column(DateTime, server_default=func.now())

    # Relationships
    tag_associations = relationship(
        "FileTag",
        back_populates="file",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    __table_args__ = (
        Index("idx_files_hash", hash),
        Index("idx_files_folder", folder),
        Index("idx_files_filename", filename),
    )

    def __repr__(self) -> str:
        return f"<File {self.id} {self.folder}/{self.filename}>"
