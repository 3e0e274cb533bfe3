"""In-memory repository implementation."""

from dinostore.repository.memory.lock import ReadWriteLock
from dinostore.repository.memory.repository import InMemory

__all__ = ["InMemory", "ReadWriteLock"]
