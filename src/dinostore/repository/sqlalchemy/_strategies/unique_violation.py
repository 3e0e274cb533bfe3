"""Strategy for handling identifier collisions."""

import re

from sqlalchemy.exc import IntegrityError
from typing_extensions import override

from dinostore.repository.exceptions import EntityAlreadyExistsError
from dinostore.repository.sqlalchemy._strategies.base import MappingStrategy

_POSTGRES_UNIQUE_VIOLATION = "23505"
_SQLITE_UNIQUE_VIOLATION = "UNIQUE constraint failed"
_POSTGRES_CONSTRAINT = re.compile(r'violates unique constraint "([^"]+)"')


class PrimaryKeyViolationStrategy(MappingStrategy):
    """Map an INSERT that reused a live identifier to EntityAlreadyExistsError.

    PostgreSQL reports sqlstate 23505 and names the constraint; only primary
    keys (suffix ``_pkey``) count as identifier collisions. SQLite does not name
    the constraint, and the identifier is the only unique column of the table.
    Other unique violations are left to the generic fallback.
    """

    @override
    def map(
        self,
        error: Exception,
        entity_type: str,
        entity_id: str | None,
    ) -> EntityAlreadyExistsError | None:
        if not isinstance(error, IntegrityError):
            return None

        message = str(error.orig)
        if _SQLITE_UNIQUE_VIOLATION in message:
            return EntityAlreadyExistsError(entity_type, entity_id or "unknown")

        if getattr(error.orig, "sqlstate", None) != _POSTGRES_UNIQUE_VIOLATION:
            return None
        match = _POSTGRES_CONSTRAINT.search(message)
        if match is None or not match.group(1).endswith("_pkey"):
            return None
        return EntityAlreadyExistsError(entity_type, entity_id or "unknown")
