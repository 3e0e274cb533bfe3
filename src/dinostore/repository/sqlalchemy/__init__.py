"""SQLAlchemy repository implementation."""

from dinostore.repository.sqlalchemy.repository import SqlAlchemy
from dinostore.repository.sqlalchemy.session_factory import (
    create_default_session_factory,
    create_schema,
)

__all__ = ["SqlAlchemy", "create_default_session_factory", "create_schema"]
