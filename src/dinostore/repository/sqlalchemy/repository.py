"""SQLAlchemy implementation of the Repository pattern."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Any

from sqlalchemy import delete, insert, select, update
from sqlalchemy.exc import SQLAlchemyError
from typing_extensions import override

from dinostore.repository.exceptions import (
    DatabaseUnavailableError,
    EntityAlreadyExistsError,
    EntityModelError,
)
from dinostore.repository.protocols import ID, Repository, T
from dinostore.repository.sqlalchemy.mapper import SqlAlchemyExceptionMapper

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Mapping

    from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker
    from sqlalchemy.orm import DeclarativeBase

logger = logging.getLogger(__name__)


class SqlAlchemy(Repository[T, ID]):
    """SQLAlchemy implementation of the Repository pattern.

    Every operation checks a fresh AsyncSession out of the session factory (and
    thus a connection out of the engine's pool), runs exactly one statement in
    its own transaction and commits. Atomicity comes from the database alone:
    no in-process lock is held while waiting on I/O, so concurrent callers only
    contend for pool connections.

    Type Parameters:
        T: The entity type returned to callers (a pydantic model).
        ID: The type of the entity's identifier (UUID by default).

    Attributes:
        session_factory: Factory producing one AsyncSession per operation.
        entity_model: The pydantic model rows are converted to.
        table: The table backing the repository.
        key_attribute: The column used as identifier.
        engine: The engine disposed by close(), when the repository owns it.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        entity_model: type[T],
        table_model: type[DeclarativeBase],
        *,
        key_attribute: str = "id",
        engine: AsyncEngine | None = None,
    ) -> None:
        """Initialize the SQLAlchemy repository.

        Args:
            session_factory: An async_sessionmaker bound to the target database.
            entity_model: The pydantic model returned by the repository.
            table_model: The declarative model whose table stores the entities.
            key_attribute: Name of the identifier column.
            engine: Engine to dispose of on close(). Leave None if the caller
                manages the engine's lifetime.
        """
        self.session_factory = session_factory
        self.entity_model = entity_model
        self.table = table_model.__table__
        self.key_attribute = key_attribute
        self.key_column = self.table.c[key_attribute]
        self.engine = engine
        self._columns = set(self.table.c.keys())
        self._exception_mapper = SqlAlchemyExceptionMapper()

    @asynccontextmanager
    async def _transaction(self, entity_id: str | None = None) -> AsyncIterator[AsyncSession]:
        """Run the enclosed statement in its own committed transaction.

        Args:
            entity_id: Identifier the statement targets, None when it has none

        Raises:
            DatabaseError: If the statement or the commit fails (mapped from any
                infrastructure exception)
        """
        entity_type = self.entity_model.__name__
        try:
            async with self.session_factory() as session, session.begin():
                yield session
        except (SQLAlchemyError, OSError) as e:
            # The mapper always returns a DatabaseError (specific or generic)
            domain_error = self._exception_mapper.map(e, entity_type, entity_id)
            if isinstance(domain_error, EntityAlreadyExistsError):
                logger.info("Rejected duplicate %s '%s'", entity_type, entity_id)
            elif isinstance(domain_error, DatabaseUnavailableError):
                logger.warning("Database unavailable for %s: %s", entity_type, e)
            raise domain_error from e

    def _ensure_entity_model(self, entity: T) -> None:
        if not isinstance(entity, self.entity_model):
            actual_type = entity.__class__.__name__
            msg = f"Entity must be of type {self.entity_model.__name__}, got {actual_type}"
            raise EntityModelError(msg)

    def _coerce_id(self, entity_id: ID) -> Any | None:
        """Convert an identifier to the key column's Python type.

        Returns:
            The converted identifier, or None when it cannot denote any row
            (e.g. a malformed UUID taken from a URL).
        """
        python_type = self.key_column.type.python_type
        if isinstance(entity_id, python_type):
            return entity_id
        try:
            return python_type(str(entity_id))
        except (TypeError, ValueError):
            return None

    def _to_entity(self, row: Mapping[str, Any]) -> T:
        return self.entity_model.model_validate(dict(row))

    @override
    async def create(self, entity: T) -> T:
        """Insert a new row and return it as stored.

        When the entity carries no identifier, the column default generates one.

        Args:
            entity: The entity to insert.

        Returns:
            The inserted entity, including its identifier.

        Raises:
            EntityAlreadyExistsError: If a row with the same identifier exists.
            DatabaseUnavailableError: If the database cannot be reached.
        """
        self._ensure_entity_model(entity)
        values = entity.model_dump(include=self._columns)
        key = values.get(self.key_attribute)
        if key is None:
            values.pop(self.key_attribute, None)
        stmt = insert(self.table).values(**values).returning(*self.table.c)
        async with self._transaction(entity_id=None if key is None else str(key)) as session:
            row = (await session.execute(stmt)).mappings().one()
        logger.debug("Created %s '%s'", self.entity_model.__name__, row[self.key_attribute])
        return self._to_entity(row)

    @override
    async def list(self) -> list[T]:
        """Retrieve every row of the table.

        Returns:
            All entities, unordered and unpaginated.
        """
        async with self._transaction() as session:
            rows = (await session.execute(select(self.table))).mappings().all()
        return [self._to_entity(row) for row in rows]

    @override
    async def get(self, entity_id: ID) -> T | None:
        """Retrieve a row by its identifier.

        Args:
            entity_id: The identifier of the entity to retrieve.

        Returns:
            The matching entity, or None if no row matches.
        """
        key = self._coerce_id(entity_id)
        if key is None:
            return None
        stmt = select(self.table).where(self.key_column == key)
        async with self._transaction(entity_id=str(key)) as session:
            row = (await session.execute(stmt)).mappings().one_or_none()
        return None if row is None else self._to_entity(row)

    @override
    async def update(self, entity_id: ID, values: T) -> T | None:
        """Overwrite every non-identifier column of a row.

        Args:
            entity_id: The identifier of the row to update.
            values: The new field values; their identifier, if any, is ignored.

        Returns:
            The updated entity, or None if no row matched (nothing is created).
        """
        self._ensure_entity_model(values)
        key = self._coerce_id(entity_id)
        if key is None:
            return None
        new_values = values.model_dump(
            include=self._columns - {self.key_attribute},
        )
        stmt = (
            update(self.table)
            .where(self.key_column == key)
            .values(**new_values)
            .returning(*self.table.c)
        )
        async with self._transaction(entity_id=str(key)) as session:
            row = (await session.execute(stmt)).mappings().one_or_none()
        if row is None:
            return None
        logger.debug("Updated %s '%s'", self.entity_model.__name__, key)
        return self._to_entity(row)

    @override
    async def delete(self, entity_id: ID) -> bool:
        """Delete a row by its identifier.

        Args:
            entity_id: The identifier of the row to delete.

        Returns:
            True if a row was deleted, False if none matched.
        """
        key = self._coerce_id(entity_id)
        if key is None:
            return False
        stmt = delete(self.table).where(self.key_column == key).returning(self.key_column)
        async with self._transaction(entity_id=str(key)) as session:
            deleted = (await session.execute(stmt)).scalar_one_or_none()
        if deleted is None:
            return False
        logger.debug("Deleted %s '%s'", self.entity_model.__name__, key)
        return True

    @override
    async def close(self) -> None:
        """Dispose of the owned engine, closing its pooled connections."""
        if self.engine is not None:
            await self.engine.dispose()
