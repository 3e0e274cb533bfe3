"""Construction of the configured repository backend."""

import logging
from typing import Any
from uuid import UUID

from dinostore.config import Settings
from dinostore.models import Dino, DinoRecord
from dinostore.repository import InMemory, Repository, SqlAlchemy
from dinostore.repository.sqlalchemy import create_default_session_factory, create_schema

logger = logging.getLogger(__name__)


async def build_repository(settings: Settings) -> Repository[Dino, Any]:
    """Build the dino repository selected by ``settings.backend``.

    The in-memory backend keys dinos by name. The sqlalchemy backend keys them by
    a UUID, owns its engine and disposes of it on close().

    Args:
        settings: The service settings.

    Returns:
        A ready-to-use repository. The caller is responsible for closing it.
    """
    if settings.backend == "memory":
        logger.info("Using in-memory dino repository")
        return InMemory[Dino, str](entity_model=Dino, key_attribute="name")

    engine, session_factory = create_default_session_factory(settings)
    if settings.create_schema:
        try:
            await create_schema(engine)
        except BaseException:
            await engine.dispose()
            raise
    logger.info("Using SQL dino repository on %s", engine.url.render_as_string(hide_password=True))
    return SqlAlchemy[Dino, UUID](
        session_factory=session_factory,
        entity_model=Dino,
        table_model=DinoRecord,
        engine=engine,
    )
