"""
Base repository with the point reads and writes every collection needs.

Repositories only flush; committing belongs to the unit of work that owns
the session.
"""

from typing import Any, Dict, Generic, List, Optional, Type, TypeVar

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from myroom.core.logging import get_logger

logger = get_logger(__name__)

ModelType = TypeVar("ModelType")


class BaseRepository(Generic[ModelType]):
    """
    Repository over a single table.

    Subclasses set ``model``; the unit of work builds them from its session.
    """

    model: Type[ModelType]

    def __init__(self, db: Session):
        self.db = db

    # ==================== Read Operations ====================

    def get_by_id(self, entity_id: str) -> Optional[ModelType]:
        return self.db.get(self.model, entity_id)

    def find_by(self, field: str, value: Any) -> List[ModelType]:
        """Equality query on a single column."""
        column = getattr(self.model, field)
        stmt = select(self.model).where(column == value)
        return list(self.db.scalars(stmt))

    def list_all(self) -> List[ModelType]:
        return list(self.db.scalars(select(self.model)))

    def count_by(self, field: str) -> Dict[Any, int]:
        """Row counts grouped by a column value."""
        column = getattr(self.model, field)
        stmt = select(column, func.count()).group_by(column)
        return {value: count for value, count in self.db.execute(stmt)}

    # ==================== Write Operations ====================

    def add(self, entity: ModelType) -> ModelType:
        self.db.add(entity)
        self.db.flush()
        logger.debug(f"Added {entity!r}")
        return entity

    def remove(self, entity: ModelType) -> None:
        self.db.delete(entity)
        self.db.flush()
        logger.debug(f"Removed {entity!r}")
