# backend/studiobook/repositories/base_repository.py
"""
Generic data access shared by every studiobook repository.

Repositories flush but never commit: the service that called them owns the
transaction and decides when to commit or roll back.
"""

from contextlib import contextmanager
import logging
from typing import Any, Generic, Iterator, List, Optional, Type, TypeVar

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Query, Session

from ..core.exceptions import RepositoryException

ModelT = TypeVar("ModelT")

logger = logging.getLogger(__name__)


class BaseRepository(Generic[ModelT]):
    """
    CRUD and query helpers for one mapped model.

    Subclasses add domain queries and may override ``_apply_eager_loading``
    to choose which relationships ``get_by_id`` loads up front.
    """

    def __init__(self, db: Session, model: Type[ModelT]):
        self.db = db
        self.model = model
        self.logger = logging.getLogger(f"{__name__}.{model.__name__}")

    @contextmanager
    def _guard(self, action: str) -> Iterator[None]:
        """Log and wrap SQLAlchemy failures of ``action`` as RepositoryException."""
        try:
            yield
        except IntegrityError as exc:
            self.logger.error(f"Integrity error while trying to {action}: {str(exc)}")
            self.db.rollback()
            raise RepositoryException(f"Integrity constraint violated: {str(exc)}") from exc
        except SQLAlchemyError as exc:
            self.logger.error(f"Database error while trying to {action}: {str(exc)}")
            raise RepositoryException(f"Failed to {action}: {str(exc)}") from exc

    @property
    def _name(self) -> str:
        return self.model.__name__

    def get_by_id(self, id: str, load_relationships: bool = True) -> Optional[ModelT]:
        query = self._build_query().filter(self.model.id == id)
        if load_relationships:
            query = self._apply_eager_loading(query)
        with self._guard(f"load {self._name} {id}"):
            return query.first()

    def create(self, **fields: Any) -> ModelT:
        """Add a new row and flush it so generated ids are available."""
        with self._guard(f"create {self._name}"):
            entity = self.model(**fields)
            self.db.add(entity)
            self.db.flush()
            return entity

    def update(self, id: str, **fields: Any) -> Optional[ModelT]:
        """Apply the given column values; unknown keys are ignored."""
        entity = self.get_by_id(id, load_relationships=False)
        if entity is None:
            return None
        with self._guard(f"update {self._name} {id}"):
            for key, value in fields.items():
                if hasattr(entity, key):
                    setattr(entity, key, value)
            self.db.flush()
        return entity

    def delete(self, id: str) -> bool:
        entity = self.get_by_id(id, load_relationships=False)
        if entity is None:
            return False
        with self._guard(f"delete {self._name} {id}"):
            self.db.delete(entity)
            self.db.flush()
        return True

    def exists(self, **criteria: Any) -> bool:
        with self._guard(f"check {self._name} existence"):
            return self.db.query(self.model).filter_by(**criteria).first() is not None

    def find_one_by(self, **criteria: Any) -> Optional[ModelT]:
        with self._guard(f"find {self._name}"):
            return self.db.query(self.model).filter_by(**criteria).first()

    def flush(self) -> None:
        self.db.flush()

    # Helpers for subclasses

    def _apply_eager_loading(self, query: Query) -> Query:
        return query

    def _build_query(self) -> Query:
        return self.db.query(self.model)

    def _execute_query(self, query: Query) -> List[ModelT]:
        with self._guard(f"query {self._name}"):
            return query.all()

    def _execute_scalar(self, query: Query) -> Any:
        with self._guard(f"run scalar query on {self._name}"):
            return query.scalar()
