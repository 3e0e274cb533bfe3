"""
Abstract test suite for Repository contract.

This module defines the contract that ALL Repository implementations must satisfy.
Each concrete implementation (InMemory, SqlAlchemy) must inherit from
RepositoryContractTests and implement the abstract verification methods.

The verification methods ensure that we never test code with itself:
- For SqlAlchemy: use plain SQL
- For InMemory: use direct access to internal storage
"""

import asyncio
from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Any, Generic, TypeVar
from uuid import UUID, uuid4

import pytest
from pydantic import BaseModel

from dinostore.models import Dino
from dinostore.repository import Repository
from dinostore.repository.exceptions import (
    DatabaseError,
    EntityAlreadyExistsError,
    EntityModelError,
)

IDType = TypeVar("IDType")

SEED_SIZE = 10


class RepositoryContractTests(ABC, Generic[IDType]):
    """
    Abstract base class defining the Repository contract tests.

    All Repository implementations must pass these tests to be considered
    compliant with the Repository interface.

    Subclasses must implement:
    - All abstract fixtures (repository, repository_with_entities)
    - All abstract verification methods (_key_of, _verify_*, _fetch_*)
    """

    # ==================== Fixtures ====================

    @pytest.fixture
    @abstractmethod
    def repository(self) -> Repository[Dino, IDType]:
        """Return an empty repository instance to test."""

    @pytest.fixture
    @abstractmethod
    async def repository_with_entities(
        self, repository: Repository[Dino, IDType], seed_dinos: list[Dino]
    ) -> Repository[Dino, IDType]:
        """
        Return the repository pre-populated with seed_dinos.

        CRITICAL: Entities MUST be inserted WITHOUT using repository methods.
        - For SqlAlchemy: use plain SQL (text())
        - For InMemory: directly access internal storage
        """

    @pytest.fixture
    def dino_factory(self) -> Callable[..., Dino]:
        """
        Return a factory creating dinos with a fresh UUID and a unique name.

        Every field can be overridden: entity_id, name, weight, diet.
        """

        def _create_dino(
            entity_id: UUID | None = None,
            name: str | None = None,
            weight: int = 100,
            diet: str = "herbivorous",
        ) -> Dino:
            return Dino(
                id=entity_id or uuid4(),
                name=name or f"dino-{uuid4().hex[:12]}",
                weight=weight,
                diet=diet,
            )

        return _create_dino

    @pytest.fixture
    def seed_dinos(self, dino_factory: Callable[..., Dino]) -> list[Dino]:
        return [dino_factory(name=f"Dino {i}", weight=10 * i) for i in range(SEED_SIZE)]

    @pytest.fixture
    def entity_ids(self, seed_dinos: list[Dino]) -> list[IDType]:
        return [self._key_of(dino) for dino in seed_dinos]

    # ==================== Abstract Verification Methods ====================

    @abstractmethod
    def _key_of(self, dino: Dino) -> IDType:
        """Return the identifier the repository uses for this dino."""

    @abstractmethod
    def _unknown_key(self) -> IDType:
        """Return an identifier that no stored dino can have."""

    @abstractmethod
    async def _verify_entity_exists(
        self, repo: Repository[Dino, IDType], entity_id: IDType
    ) -> bool:
        """
        Verify that an entity exists WITHOUT using repository methods.

        For SqlAlchemy: SELECT COUNT(*) with text()
        For InMemory: check internal _entities dict
        """

    @abstractmethod
    async def _verify_entity_count(self, repo: Repository[Dino, IDType]) -> int:
        """
        Count entities WITHOUT using repository methods.

        For SqlAlchemy: SELECT COUNT(*) with text()
        For InMemory: len(_entities)
        """

    @abstractmethod
    async def _fetch_stored(
        self, repo: Repository[Dino, IDType], entity_id: IDType
    ) -> dict[str, Any] | None:
        """
        Read the stored name, weight and diet WITHOUT using repository methods.

        Returns:
            A dict with keys name, weight, diet, or None if the entity is absent
        """

    # ==================== Contract Tests: create ====================

    @pytest.mark.asyncio
    async def test_create_empty_repository(
        self, repository: Repository[Dino, IDType], dino_factory: Callable[..., Dino]
    ) -> None:
        """create() on an empty repository should store the dino and return it."""
        dino = dino_factory(name="rex", weight=500, diet="carnivorous")
        result = await repository.create(dino)

        assert result.id == dino.id
        assert (result.name, result.weight, result.diet) == ("rex", 500, "carnivorous")

        # Verify using abstract method (not repository.get!)
        assert await self._verify_entity_exists(repository, self._key_of(result))
        assert await self._verify_entity_count(repository) == 1
        assert await self._fetch_stored(repository, self._key_of(result)) == {
            "name": "rex",
            "weight": 500,
            "diet": "carnivorous",
        }

    @pytest.mark.asyncio
    async def test_create_then_get_reads_own_write(
        self, repository: Repository[Dino, IDType], dino_factory: Callable[..., Dino]
    ) -> None:
        """get() right after create() should return the stored form of the dino."""
        created = await repository.create(dino_factory(name="rex", weight=500, diet="carnivorous"))

        fetched = await repository.get(self._key_of(created))

        assert fetched == created

    @pytest.mark.asyncio
    async def test_create_with_id_taken(
        self,
        repository_with_entities: Repository[Dino, IDType],
        seed_dinos: list[Dino],
        entity_ids: list[IDType],
    ) -> None:
        """create() with an existing identifier should raise and keep the original."""
        duplicate = seed_dinos[3].model_copy(update={"weight": 9999, "diet": "everything"})

        with pytest.raises(EntityAlreadyExistsError, match="already exists"):
            await repository_with_entities.create(duplicate)

        assert await self._verify_entity_count(repository_with_entities) == SEED_SIZE
        assert await self._fetch_stored(repository_with_entities, entity_ids[3]) == {
            "name": "Dino 3",
            "weight": 30,
            "diet": "herbivorous",
        }

    @pytest.mark.asyncio
    async def test_create_does_not_alias_input(
        self, repository: Repository[Dino, IDType], dino_factory: Callable[..., Dino]
    ) -> None:
        """Mutating the dino passed to create() must not change stored state."""
        dino = dino_factory(weight=42)
        created = await repository.create(dino)

        dino.weight = 0
        created.weight = 1

        stored = await self._fetch_stored(repository, self._key_of(created))
        assert stored is not None
        assert stored["weight"] == 42

    @pytest.mark.asyncio
    async def test_create_rejects_wrong_model(self, repository: Repository[Dino, IDType]) -> None:
        """create() should reject objects of another model type."""

        class Fossil(BaseModel):
            id: UUID
            name: str

        with pytest.raises(EntityModelError, match="Entity must be of type Dino, got Fossil"):
            await repository.create(Fossil(id=uuid4(), name="ammonite"))  # type: ignore[arg-type]

    # ==================== Contract Tests: list ====================

    @pytest.mark.asyncio
    async def test_list_empty(self, repository: Repository[Dino, IDType]) -> None:
        """list() on an empty repository should return an empty list."""
        assert await repository.list() == []

    @pytest.mark.asyncio
    async def test_list_returns_all_entities(
        self, repository_with_entities: Repository[Dino, IDType], seed_dinos: list[Dino]
    ) -> None:
        """list() should return every stored dino, in any order."""
        result = await repository_with_entities.list()

        assert len(result) == SEED_SIZE
        assert sorted(d.name for d in result) == sorted(d.name for d in seed_dinos)

    @pytest.mark.asyncio
    async def test_list_returns_copies(
        self, repository_with_entities: Repository[Dino, IDType], entity_ids: list[IDType]
    ) -> None:
        """Mutating dinos returned by list() must not change stored state."""
        for dino in await repository_with_entities.list():
            dino.diet = "mutated"

        stored = await self._fetch_stored(repository_with_entities, entity_ids[0])
        assert stored is not None
        assert stored["diet"] == "herbivorous"

    # ==================== Contract Tests: get ====================

    @pytest.mark.asyncio
    async def test_get_success(
        self,
        repository_with_entities: Repository[Dino, IDType],
        seed_dinos: list[Dino],
        entity_ids: list[IDType],
    ) -> None:
        """get() should return the dino with the given identifier."""
        dino = await repository_with_entities.get(entity_ids[0])

        assert dino == seed_dinos[0]

    @pytest.mark.asyncio
    async def test_get_absent(self, repository_with_entities: Repository[Dino, IDType]) -> None:
        """get() should return None, not raise, for an unknown identifier."""
        assert await repository_with_entities.get(self._unknown_key()) is None

    @pytest.mark.asyncio
    async def test_get_returns_copy(
        self, repository_with_entities: Repository[Dino, IDType], entity_ids: list[IDType]
    ) -> None:
        """Mutating the dino returned by get() must not change stored state."""
        dino = await repository_with_entities.get(entity_ids[1])
        assert dino is not None
        dino.weight = -1

        again = await repository_with_entities.get(entity_ids[1])
        assert again is not None
        assert again.weight == 10

    # ==================== Contract Tests: update ====================

    @pytest.mark.asyncio
    async def test_update_success(
        self,
        repository_with_entities: Repository[Dino, IDType],
        seed_dinos: list[Dino],
        entity_ids: list[IDType],
        dino_factory: Callable[..., Dino],
    ) -> None:
        """update() should replace the mutable fields and keep the identifier."""
        new_values = dino_factory(name="Dino 2", weight=777, diet="omnivorous")

        result = await repository_with_entities.update(entity_ids[2], new_values)

        assert result is not None
        assert self._key_of(result) == entity_ids[2]
        assert result.id == seed_dinos[2].id
        assert (result.weight, result.diet) == (777, "omnivorous")
        # Verify using abstract method
        assert await self._fetch_stored(repository_with_entities, entity_ids[2]) == {
            "name": "Dino 2",
            "weight": 777,
            "diet": "omnivorous",
        }

    @pytest.mark.asyncio
    async def test_update_absent_does_not_create(
        self,
        repository_with_entities: Repository[Dino, IDType],
        dino_factory: Callable[..., Dino],
    ) -> None:
        """update() on an unknown identifier should return None and create nothing."""
        result = await repository_with_entities.update(self._unknown_key(), dino_factory())

        assert result is None
        assert await self._verify_entity_count(repository_with_entities) == SEED_SIZE

    # ==================== Contract Tests: delete ====================

    @pytest.mark.asyncio
    async def test_delete_success(
        self, repository_with_entities: Repository[Dino, IDType], entity_ids: list[IDType]
    ) -> None:
        """delete() should remove the dino and report that it existed."""
        assert await repository_with_entities.delete(entity_ids[0]) is True

        # Verify deletion using abstract method
        assert not await self._verify_entity_exists(repository_with_entities, entity_ids[0])
        assert await self._verify_entity_count(repository_with_entities) == SEED_SIZE - 1

    @pytest.mark.asyncio
    async def test_delete_twice(
        self, repository_with_entities: Repository[Dino, IDType], entity_ids: list[IDType]
    ) -> None:
        """A second delete() of the same identifier should report absence, not raise."""
        assert await repository_with_entities.delete(entity_ids[4]) is True
        assert await repository_with_entities.delete(entity_ids[4]) is False

    @pytest.mark.asyncio
    async def test_delete_absent(self, repository: Repository[Dino, IDType]) -> None:
        """delete() on an unknown identifier should return False."""
        assert await repository.delete(self._unknown_key()) is False

    @pytest.mark.asyncio
    async def test_absence_after_delete(
        self,
        repository_with_entities: Repository[Dino, IDType],
        entity_ids: list[IDType],
        dino_factory: Callable[..., Dino],
    ) -> None:
        """get(), update() and delete() on a deleted identifier all report absence."""
        await repository_with_entities.delete(entity_ids[5])

        assert await repository_with_entities.get(entity_ids[5]) is None
        assert await repository_with_entities.update(entity_ids[5], dino_factory()) is None
        assert await repository_with_entities.delete(entity_ids[5]) is False

    # ==================== Contract Tests: Concurrency ====================

    @pytest.mark.asyncio
    async def test_concurrent_creates_with_distinct_ids(
        self, repository: Repository[Dino, IDType], dino_factory: Callable[..., Dino]
    ) -> None:
        """Concurrent create() calls with distinct identifiers should all succeed."""
        dinos = [dino_factory() for _ in range(8)]

        await asyncio.gather(*(repository.create(dino) for dino in dinos))

        listed = await repository.list()
        assert sorted(d.name for d in listed) == sorted(d.name for d in dinos)

    @pytest.mark.asyncio
    async def test_concurrent_creates_with_same_id(
        self, repository: Repository[Dino, IDType], dino_factory: Callable[..., Dino]
    ) -> None:
        """Of several concurrent create() calls on one identifier, exactly one wins."""
        original = dino_factory(name="contested")
        attempts = [original.model_copy(update={"weight": w}) for w in range(1, 6)]

        results = await asyncio.gather(
            *(repository.create(dino) for dino in attempts), return_exceptions=True
        )

        winners = [r for r in results if isinstance(r, Dino)]
        conflicts = [r for r in results if isinstance(r, EntityAlreadyExistsError)]
        assert len(winners) == 1
        assert len(conflicts) == 4
        assert await self._verify_entity_count(repository) == 1
        stored = await self._fetch_stored(repository, self._key_of(original))
        assert stored is not None
        assert stored["weight"] == winners[0].weight

    @pytest.mark.asyncio
    async def test_concurrent_updates_leave_one_whole_version(
        self,
        repository_with_entities: Repository[Dino, IDType],
        entity_ids: list[IDType],
        dino_factory: Callable[..., Dino],
    ) -> None:
        """Racing update() calls leave exactly one of the written versions, never a mix."""
        versions = [
            dino_factory(name="Dino 6", weight=1, diet="ferns"),
            dino_factory(name="Dino 6", weight=2, diet="fish"),
        ]

        await asyncio.gather(
            *(repository_with_entities.update(entity_ids[6], versions[i % 2]) for i in range(10))
        )

        stored = await self._fetch_stored(repository_with_entities, entity_ids[6])
        assert stored is not None
        assert (stored["weight"], stored["diet"]) in {(1, "ferns"), (2, "fish")}

    @pytest.mark.asyncio
    async def test_list_never_observes_half_written_entity(
        self, repository: Repository[Dino, IDType], dino_factory: Callable[..., Dino]
    ) -> None:
        """list() racing with update() only ever sees complete versions."""
        created = await repository.create(dino_factory(weight=0, diet="diet-0"))
        key = self._key_of(created)

        async def writer() -> None:
            for i in range(1, 15):
                version = created.model_copy(update={"weight": i, "diet": f"diet-{i}"})
                await repository.update(key, version)

        async def reader() -> list[list[Dino]]:
            return [await repository.list() for _ in range(15)]

        _, snapshots = await asyncio.gather(writer(), reader())

        for snapshot in snapshots:
            assert len(snapshot) == 1
            assert snapshot[0].diet == f"diet-{snapshot[0].weight}"

    # ==================== Contract Tests: Integration ====================

    @pytest.mark.asyncio
    async def test_complete_crud_cycle(
        self, repository: Repository[Dino, IDType], dino_factory: Callable[..., Dino]
    ) -> None:
        """Full CRUD cycle: Create, Read, Update, Delete."""
        # Create
        created = await repository.create(dino_factory(name="cycle", weight=50))
        key = self._key_of(created)
        assert await self._verify_entity_exists(repository, key)

        # Update
        await repository.update(key, created.model_copy(update={"weight": 60}))
        stored = await self._fetch_stored(repository, key)
        assert stored is not None
        assert stored["weight"] == 60

        # Delete
        assert await repository.delete(key) is True
        assert not await self._verify_entity_exists(repository, key)
        assert await self._verify_entity_count(repository) == 0

    @pytest.mark.asyncio
    async def test_conflict_is_a_database_error(
        self, repository: Repository[Dino, IDType], dino_factory: Callable[..., Dino]
    ) -> None:
        """EntityAlreadyExistsError should inherit from DatabaseError."""
        dino = await repository.create(dino_factory())

        with pytest.raises(DatabaseError):
            await repository.create(dino.model_copy())
