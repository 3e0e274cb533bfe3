"""Repository pattern implementations.

Provides a unified interface for data access across different storage backends.
"""

from dinostore.repository.exceptions import (
    DatabaseError,
    DatabaseUnavailableError,
    EntityAlreadyExistsError,
    EntityModelError,
)

# Implementations
from dinostore.repository.memory import InMemory
from dinostore.repository.protocols import Repository
from dinostore.repository.sqlalchemy import SqlAlchemy

__all__ = [  # noqa: RUF022
    # Core
    "Repository",
    # Exceptions
    "DatabaseError",
    "DatabaseUnavailableError",
    "EntityAlreadyExistsError",
    "EntityModelError",
    # Implementations
    "InMemory",
    "SqlAlchemy",
]
