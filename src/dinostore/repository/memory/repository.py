"""In-memory implementation of the Repository pattern."""

from __future__ import annotations

import logging
from typing import Any

from typing_extensions import override

from dinostore.repository.exceptions import EntityAlreadyExistsError, EntityModelError
from dinostore.repository.memory.lock import ReadWriteLock
from dinostore.repository.protocols import ID, Repository, T

logger = logging.getLogger(__name__)


class InMemory(Repository[T, ID]):
    """In-memory implementation of the Repository pattern.

    Entities live in a dictionary guarded by a single ReadWriteLock: get() and
    list() share the lock, while create(), update() and delete() hold it
    exclusively, so every check-then-act sequence runs as one atomic step and
    readers never observe a half-applied write.

    Type Parameters:
        T: The entity type managed by this repository.
        ID: The type of the key attribute (str by default, since dinos are keyed
            by name).

    Attributes:
        entity_model: The entity class representing the entity type.
        key_attribute: The entity attribute used as the identifier.

    Important Note:
        The internal dictionary always uses string keys (via str(key)). Entities
        are deep-copied on the way in and on the way out: callers never hold a
        reference to stored state.

        Example:
            class Dino(BaseModel):
                id: UUID | None = None
                name: str
                weight: int
                diet: str

            repo: InMemory[Dino, str] = InMemory(entity_model=Dino)
            await repo.create(Dino(name="rex", weight=500, diet="carnivorous"))
            await repo.get("rex")
    """

    def __init__(self, entity_model: type[T], *, key_attribute: str = "name") -> None:
        """Initialize an empty in-memory repository.

        Args:
            entity_model: The entity class that this repository will manage.
            key_attribute: Name of the entity field that serves as identifier.

        Raises:
            ValueError: If key_attribute is not a field of entity_model.
        """
        if key_attribute not in entity_model.model_fields:
            msg = f"{entity_model.__name__} has no field named '{key_attribute}'"
            raise ValueError(msg)
        self._entities: dict[str, T] = {}
        self._lock = ReadWriteLock()
        self.entity_model = entity_model
        self.key_attribute = key_attribute

    @property
    def entities(self) -> dict[str, T]:
        """Get read-only access to the entities dictionary.

        Returns:
            Dictionary mapping entity keys (as strings) to entity instances.

        Note:
            This property exposes internal storage for testing purposes.
            Direct modification bypasses locking - use create(), update() and
            delete() methods instead.
        """
        return self._entities

    def _ensure_entity_model(self, entity: T) -> None:
        """Ensure an entity is of the correct model type.

        Args:
            entity: The entity to validate.

        Raises:
            EntityModelError: If the entity is not of the expected model type.
        """
        if not isinstance(entity, self.entity_model):
            actual_type = entity.__class__.__name__
            msg = f"Entity must be of type {self.entity_model.__name__}, got {actual_type}"
            raise EntityModelError(msg)

    def _key_of(self, entity: T) -> str:
        return str(getattr(entity, self.key_attribute))

    def _identity_of(self, entity: T) -> dict[str, Any]:
        """Collect the fields an update must never change."""
        return {
            field: getattr(entity, field)
            for field in (self.key_attribute, "id")
            if field in self.entity_model.model_fields
        }

    @override
    async def create(self, entity: T) -> T:
        """Store a new entity.

        Args:
            entity: The entity to store.

        Returns:
            A copy of the stored entity.

        Raises:
            EntityAlreadyExistsError: If an entity with the same key already exists.
        """
        self._ensure_entity_model(entity)
        key = self._key_of(entity)
        async with self._lock.write():
            if key in self._entities:
                logger.info("Rejected duplicate %s '%s'", self.entity_model.__name__, key)
                raise EntityAlreadyExistsError(
                    entity_type=self.entity_model.__name__, entity_id=key
                )
            stored = entity.model_copy(deep=True)
            self._entities[key] = stored
        logger.debug("Created %s '%s'", self.entity_model.__name__, key)
        return stored.model_copy(deep=True)

    @override
    async def list(self) -> list[T]:
        """Retrieve a snapshot of every stored entity.

        Entities are returned in insertion order (the order in which they were added
        to the repository).

        Returns:
            Copies of all entities, taken under one read acquisition.
        """
        async with self._lock.read():
            return [entity.model_copy(deep=True) for entity in self._entities.values()]

    @override
    async def get(self, entity_id: ID) -> T | None:
        """Retrieve an entity by its key.

        Args:
            entity_id: The key of the entity to retrieve.

        Returns:
            A copy of the matching entity, or None if absent.
        """
        async with self._lock.read():
            entity = self._entities.get(str(entity_id))
            return None if entity is None else entity.model_copy(deep=True)

    @override
    async def update(self, entity_id: ID, values: T) -> T | None:
        """Replace every mutable field of an existing entity.

        The key attribute (and the ``id`` field, when the model has one) keeps its
        stored value whatever ``values`` carries.

        Args:
            entity_id: The key of the entity to update.
            values: The new field values.

        Returns:
            A copy of the updated entity, or None if no entity has this key.
        """
        self._ensure_entity_model(values)
        key = str(entity_id)
        async with self._lock.write():
            current = self._entities.get(key)
            if current is None:
                return None
            updated = values.model_copy(update=self._identity_of(current), deep=True)
            self._entities[key] = updated
        logger.debug("Updated %s '%s'", self.entity_model.__name__, key)
        return updated.model_copy(deep=True)

    @override
    async def delete(self, entity_id: ID) -> bool:
        """Remove an entity by its key.

        Args:
            entity_id: The key of the entity to delete.

        Returns:
            True if the entity existed and was removed, False otherwise.
        """
        key = str(entity_id)
        async with self._lock.write():
            if self._entities.pop(key, None) is None:
                return False
        logger.debug("Deleted %s '%s'", self.entity_model.__name__, key)
        return True
