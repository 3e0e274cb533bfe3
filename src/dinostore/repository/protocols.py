"""Repository protocol definition."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Generic, TypeVar

from pydantic import BaseModel

ID = TypeVar("ID")
T = TypeVar("T", bound=BaseModel)


class Repository(ABC, Generic[T, ID]):
    """Abstract base class for implementing the Repository pattern.

    Every backend must behave identically from the caller's point of view:
    identifiers are unique among live entities, a missing entity is reported as
    an absence marker rather than an exception, and returned entities are
    independent copies that never alias stored state.

    Type Parameters:
        T: The entity type managed by this repository.
        ID: The type of the entity's identifier (str, UUID, etc.).
    """

    @abstractmethod
    async def create(self, entity: T) -> T:
        """Store a new entity.

        Args:
            entity: The entity to store.

        Returns:
            The stored entity, including its resolved identifier.

        Raises:
            EntityAlreadyExistsError: If the identifier already denotes a live entity.
            DatabaseUnavailableError: If the backend cannot be reached.
        """

    @abstractmethod
    async def list(self) -> list[T]:
        """Retrieve a snapshot of every stored entity.

        Returns:
            All entities, in no guaranteed order. Empty if the repository is empty.
        """

    @abstractmethod
    async def get(self, entity_id: ID) -> T | None:
        """Retrieve an entity by its identifier.

        Args:
            entity_id: The identifier of the entity to retrieve.

        Returns:
            The matching entity, or None if no live entity has this identifier.
        """

    @abstractmethod
    async def update(self, entity_id: ID, values: T) -> T | None:
        """Replace every mutable field of an existing entity.

        The identifier itself never changes, and a missing entity is never created.

        Args:
            entity_id: The identifier of the entity to update.
            values: The new field values.

        Returns:
            The entity as stored after the update, or None if it does not exist.
        """

    @abstractmethod
    async def delete(self, entity_id: ID) -> bool:
        """Remove an entity by its identifier.

        Args:
            entity_id: The identifier of the entity to delete.

        Returns:
            True if an entity was deleted, False if none existed.
        """

    async def close(self) -> None:
        """Release any resources held by the backend.

        Called once at shutdown. The default implementation does nothing.
        """
