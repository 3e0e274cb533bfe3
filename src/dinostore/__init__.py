"""Dino record service: concurrent in-memory and SQL repositories behind a REST API."""

from dinostore.models import Dino
from dinostore.repository import (
    DatabaseError,
    DatabaseUnavailableError,
    EntityAlreadyExistsError,
    InMemory,
    Repository,
    SqlAlchemy,
)

__all__ = [
    "DatabaseError",
    "DatabaseUnavailableError",
    "Dino",
    "EntityAlreadyExistsError",
    "InMemory",
    "Repository",
    "SqlAlchemy",
]
