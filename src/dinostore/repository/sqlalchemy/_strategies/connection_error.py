"""Strategy for handling an unreachable or failing database."""

from sqlalchemy.exc import DBAPIError, InterfaceError, OperationalError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from typing_extensions import override

from dinostore.repository.exceptions import DatabaseUnavailableError
from dinostore.repository.sqlalchemy._strategies.base import MappingStrategy


class ConnectionFailureStrategy(MappingStrategy):
    """Handle I/O failures between the application and the database.

    Covers operational and interface errors reported by the driver, connections
    SQLAlchemy invalidated mid-statement, pool checkouts that timed out because
    every connection is busy, and raw socket errors (refused connection, timeout)
    that asyncpg raises before a DBAPI connection exists.
    """

    @override
    def map(
        self,
        error: Exception,
        entity_type: str,
        entity_id: str | None,
    ) -> DatabaseUnavailableError | None:
        if not self._is_connection_failure(error):
            return None
        # The driver message says more than SQLAlchemy's wrapper around it
        reason = str(getattr(error, "orig", None) or error) or type(error).__name__
        return DatabaseUnavailableError(entity_type, reason)

    @staticmethod
    def _is_connection_failure(error: Exception) -> bool:
        if isinstance(error, (OperationalError, InterfaceError, PoolTimeoutError, OSError)):
            return True
        return isinstance(error, DBAPIError) and error.connection_invalidated
