"""REST endpoints for dinos.

Repository outcomes map to statuses as follows: creation 201 (409 on a taken
identifier), reads and updates 200, deletion 204, and 404 whenever the
identifier denotes no live dino.
"""

from fastapi import APIRouter, HTTPException, Response, status

from dinostore.api.dependencies import DinoRepository
from dinostore.models import Dino

router = APIRouter(prefix="/dinos", tags=["dinos"])


def _not_found(dino_id: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND, detail=f"Dino '{dino_id}' not found"
    )


@router.post(
    "",
    response_model=Dino,
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
    summary="Create a dino",
)
async def create_dino(dino: Dino, repository: DinoRepository) -> Dino:
    return await repository.create(dino)


@router.get(
    "",
    response_model=list[Dino],
    response_model_exclude_none=True,
    summary="List all dinos",
)
async def list_dinos(repository: DinoRepository) -> list[Dino]:
    return await repository.list()


@router.get(
    "/{dino_id}",
    response_model=Dino,
    response_model_exclude_none=True,
    summary="Get a dino",
)
async def get_dino(dino_id: str, repository: DinoRepository) -> Dino:
    dino = await repository.get(dino_id)
    if dino is None:
        raise _not_found(dino_id)
    return dino


@router.put(
    "/{dino_id}",
    response_model=Dino,
    response_model_exclude_none=True,
    summary="Replace a dino's attributes",
)
async def update_dino(dino_id: str, dino: Dino, repository: DinoRepository) -> Dino:
    """Replace name, weight and diet of an existing dino. Never creates one."""
    updated = await repository.update(dino_id, dino)
    if updated is None:
        raise _not_found(dino_id)
    return updated


@router.delete(
    "/{dino_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    summary="Delete a dino",
)
async def delete_dino(dino_id: str, repository: DinoRepository) -> Response:
    if not await repository.delete(dino_id):
        raise _not_found(dino_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
