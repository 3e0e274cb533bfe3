"""Dependency injection functions used by the routers."""

from typing import Annotated, Any

from fastapi import Depends, Request

from dinostore.models import Dino
from dinostore.repository import Repository


def get_repository(request: Request) -> Repository[Dino, Any]:
    """Return the repository the application was started with.

    Raises:
        RuntimeError: If the application state holds no repository.
    """
    repository = getattr(request.app.state, "repository", None)
    if repository is None:
        raise RuntimeError("Dino repository not initialized")
    return repository


DinoRepository = Annotated[Repository[Dino, Any], Depends(get_repository)]
