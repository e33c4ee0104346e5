"""
Generic data access for one model class.

Repositories only flush. Committing and rolling back belong to the
service's TransactionManager, so several repository calls can share one
unit of work.
"""

from typing import Any, Dict, Generic, List, Optional, Tuple, Type, TypeVar

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Query, Session

from hajzi.core.exceptions import EntityAlreadyExistsError, RepositoryError
from hajzi.core.logging import get_logger
from hajzi.models.base.base_model import BaseModel

logger = get_logger(__name__)

ModelType = TypeVar("ModelType", bound=BaseModel)

UNIQUE_VIOLATION_SQLSTATE = "23505"


def is_unique_violation(exc: IntegrityError) -> bool:
    """True for duplicate-key errors only; other constraint failures return False."""
    sqlstate = getattr(exc.orig, "pgcode", None) or getattr(exc.orig, "sqlstate", None)
    if sqlstate:
        return sqlstate == UNIQUE_VIOLATION_SQLSTATE
    # SQLite reports "UNIQUE constraint failed: ..."
    return "unique constraint" in str(exc.orig).lower()


class BaseRepository(Generic[ModelType]):

    def __init__(self, model: Type[ModelType], db: Session):
        self.model = model
        self.db = db

    @property
    def entity_name(self) -> str:
        return self.model.__name__

    def _flush(self, action: str) -> None:
        try:
            self.db.flush()
        except IntegrityError as e:
            if is_unique_violation(e):
                raise EntityAlreadyExistsError(self.entity_name) from e
            raise RepositoryError(f"{action} {self.entity_name} violates a constraint: {e.orig}") from e
        except SQLAlchemyError as e:
            raise RepositoryError(f"{action} {self.entity_name} failed: {e}") from e

    def create(self, entity: ModelType) -> ModelType:
        """
        Add and flush a new row.

        Raises:
            EntityAlreadyExistsError: A unique constraint rejected the row
            RepositoryError: Any other database failure
        """
        self.db.add(entity)
        self._flush("Create")
        logger.debug(f"Created {self.entity_name} {entity.id}")
        return entity

    def find_by_id(self, id: Any) -> Optional[ModelType]:
        try:
            return self.db.query(self.model).filter(self.model.id == id).first()
        except SQLAlchemyError as e:
            raise RepositoryError(f"Lookup of {self.entity_name} {id} failed: {e}") from e

    def update(self, entity: ModelType, data: Dict[str, Any]) -> ModelType:
        for key, value in data.items():
            setattr(entity, key, value)
        self._flush("Update")
        return entity

    def paginate_query(self, query: Query, offset: int, limit: int) -> Tuple[List[ModelType], int]:
        """Return one window of ``query`` and the unwindowed row count."""
        try:
            total = query.order_by(None).count()
            return query.offset(offset).limit(limit).all(), total
        except SQLAlchemyError as e:
            raise RepositoryError(f"Listing {self.entity_name} failed: {e}") from e
