"""Repository-specific exceptions.

Missing entities are not errors: repositories return ``None`` (or ``False`` for
deletions) instead of raising.
"""


class DatabaseError(Exception):
    """Base exception for all database-related errors."""


class EntityAlreadyExistsError(DatabaseError):
    """Raised when attempting to create an entity whose identifier is already in use."""

    def __init__(self, entity_type: str, entity_id: str) -> None:
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(f"{entity_type} with id '{entity_id}' already exists")


class DatabaseUnavailableError(DatabaseError):
    """Raised when the storage backend cannot be reached or fails mid-statement."""

    def __init__(self, entity_type: str, reason: str) -> None:
        self.entity_type = entity_type
        self.reason = reason
        super().__init__(f"Storage unavailable while accessing {entity_type}: {reason}")


class EntityModelError(DatabaseError):
    """Raised when the model of an entity does not match with the one instantiated."""
