# backend/studiobook/services/base.py
"""
Common base for studiobook services.

Services own transaction boundaries: repositories flush, services commit.
Public operations are wrapped with ``measure_operation`` so timings are
collected per service class and slow calls show up in the logs.
"""

from contextlib import contextmanager
from dataclasses import dataclass
from functools import wraps
import logging
import time
from typing import Any, Callable, Dict, Iterator, TypeVar, cast

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.exceptions import ServiceException

logger = logging.getLogger(__name__)

SLOW_OPERATION_SECONDS = 1.0

F = TypeVar("F", bound=Callable[..., Any])


@dataclass
class OperationStats:
    count: int = 0
    failures: int = 0
    total_seconds: float = 0.0
    max_seconds: float = 0.0

    def record(self, elapsed: float, success: bool) -> None:
        self.count += 1
        self.total_seconds += elapsed
        self.max_seconds = max(self.max_seconds, elapsed)
        if not success:
            self.failures += 1

    def as_dict(self) -> Dict[str, Any]:
        return {
            "count": self.count,
            "failure_count": self.failures,
            "avg_time": self.total_seconds / self.count if self.count else 0.0,
            "max_time": self.max_seconds,
        }


class BaseService:
    """Session holder with transaction, logging and timing helpers."""

    # {service class name: {operation: stats}}
    _stats: Dict[str, Dict[str, OperationStats]] = {}

    def __init__(self, db: Session):
        self.db = db
        self.logger = logging.getLogger(self.__class__.__name__)

    @contextmanager
    def transaction(self) -> Iterator[Session]:
        """
        Commit on success, roll back on any error.

        Database errors are re-raised as ServiceException; domain errors
        raised inside the block propagate unchanged after the rollback.
        """
        try:
            yield self.db
            self.db.commit()
        except SQLAlchemyError as e:
            self.logger.error(f"Transaction failed: {str(e)}")
            self.db.rollback()
            raise ServiceException(f"Database operation failed: {str(e)}") from e
        except Exception:
            self.db.rollback()
            raise

    @staticmethod
    def measure_operation(operation_name: str) -> Callable[[F], F]:
        """
        Time a service method.

        Usage:
            @BaseService.measure_operation("create_booking")
            def create_booking(self, data): ...
        """

        def decorator(func: F) -> F:
            @wraps(func)
            def wrapper(self: "BaseService", *args: Any, **kwargs: Any) -> Any:
                started = time.perf_counter()
                success = False
                try:
                    result = func(self, *args, **kwargs)
                    success = True
                    return result
                finally:
                    elapsed = time.perf_counter() - started
                    self._record(operation_name, elapsed, success)
                    if elapsed > SLOW_OPERATION_SECONDS:
                        self.logger.warning(
                            f"Slow operation detected: {operation_name} took {elapsed:.2f}s"
                        )

            return cast(F, wrapper)

        return decorator

    def log_operation(self, operation: str, **context: Any) -> None:
        self.logger.info(f"Operation: {operation}", extra={"operation": operation, **context})

    def _record(self, operation: str, elapsed: float, success: bool) -> None:
        per_class = BaseService._stats.setdefault(self.__class__.__name__, {})
        per_class.setdefault(operation, OperationStats()).record(elapsed, success)

    def get_metrics(self) -> Dict[str, Any]:
        """Timing summary of every measured operation of this service class."""
        per_class = BaseService._stats.get(self.__class__.__name__, {})
        return {operation: stats.as_dict() for operation, stats in per_class.items()}
