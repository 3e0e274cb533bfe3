"""Translation of SQLAlchemy and driver errors into repository exceptions."""

import logging
from collections.abc import Sequence

from dinostore.repository.exceptions import DatabaseError
from dinostore.repository.sqlalchemy._strategies.base import MappingStrategy
from dinostore.repository.sqlalchemy._strategies.connection_error import (
    ConnectionFailureStrategy,
)
from dinostore.repository.sqlalchemy._strategies.unique_violation import (
    PrimaryKeyViolationStrategy,
)

logger = logging.getLogger(__name__)

DEFAULT_STRATEGIES: tuple[MappingStrategy, ...] = (
    PrimaryKeyViolationStrategy(),
    ConnectionFailureStrategy(),
)


class SqlAlchemyExceptionMapper:
    """Maps SQLAlchemy exceptions to repository exceptions.

    Strategies are consulted in order and the first one recognizing the error
    decides. An error none of them recognizes becomes a generic DatabaseError,
    so callers only ever deal with the repository's own exceptions.
    """

    def __init__(self, strategies: Sequence[MappingStrategy] | None = None) -> None:
        self._strategies = tuple(DEFAULT_STRATEGIES if strategies is None else strategies)

    @property
    def strategies(self) -> tuple[MappingStrategy, ...]:
        return self._strategies

    def map(
        self,
        error: Exception,
        entity_type: str,
        entity_id: str | None = None,
    ) -> DatabaseError:
        """Map a SQLAlchemy exception to a repository exception.

        Args:
            error: The SQLAlchemy (or driver socket) exception
            entity_type: The entity type name (e.g., "Dino")
            entity_id: The identifier the statement targeted, if any

        Returns:
            The mapped exception, a generic DatabaseError when no strategy applies
        """
        for strategy in self._strategies:
            mapped = strategy.map(error, entity_type, entity_id)
            if mapped is not None:
                return mapped

        logger.warning("Unmapped database error on %s: %s", entity_type, error)
        return DatabaseError(f"Database error during operation on {entity_type}: {error}")
