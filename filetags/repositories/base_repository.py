"""Base repository with common CRUD operations."""
from typing import Any, Generic, Optional, Type, TypeVar

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from filetags.core.database import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """Generic base repository for common database operations."""

    def __init__(self, model: Type[ModelType], session: Session):
        """Initialize repository.

        Args:
            model: SQLAlchemy model class
            session: Database session
        """
        self.model = model
        self.session = session

    def get_by_id(self, id: Any) -> Optional[ModelType]:
        """Get model by primary key ID.

        Args:
            id: Primary key value

        Returns:
            Model instance or None if not found
        """
        result = self.session.execute(
            select(self.model)
            .filter(self.model.id == id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    def delete_by_id(self, id: Any) -> bool:
        """Delete model by primary key ID.

        Dependent rows are removed by the database's ON DELETE CASCADE.

        Args:
            id: Primary key value

        Returns:
            True if a row was deleted
        """
        result = self.session.execute(
            delete(self.model.__table__).where(self.model.__table__.c.id == id)
        )
        return result.rowcount > 0
