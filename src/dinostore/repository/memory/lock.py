"""Asyncio reader/writer lock."""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager


class ReadWriteLock:
    """A reader/writer lock for coroutines sharing one event loop.

    Any number of readers may hold the lock together, while a writer holds it
    alone. Writers are preferred: as soon as a writer is waiting, newly arriving
    readers queue behind it, so a steady stream of readers cannot starve writes.

    Example:
        >>> lock = ReadWriteLock()
        >>> async with lock.read():
        ...     snapshot = dict(storage)
        >>> async with lock.write():
        ...     storage[key] = value
    """

    def __init__(self) -> None:
        self._condition = asyncio.Condition()
        self._readers = 0
        self._writer = False
        self._waiting_writers = 0

    @property
    def readers(self) -> int:
        """Number of readers currently holding the lock."""
        return self._readers

    @property
    def writer(self) -> bool:
        """Whether a writer currently holds the lock."""
        return self._writer

    @asynccontextmanager
    async def read(self) -> AsyncIterator[None]:
        """Hold the lock in shared mode for the duration of the block."""
        async with self._condition:
            await self._condition.wait_for(self._can_read)
            self._readers += 1
        try:
            yield
        finally:
            self._readers -= 1
            if self._readers == 0:
                await asyncio.shield(self._notify())

    @asynccontextmanager
    async def write(self) -> AsyncIterator[None]:
        """Hold the lock in exclusive mode for the duration of the block."""
        async with self._condition:
            self._waiting_writers += 1
            try:
                await self._condition.wait_for(self._can_write)
            except BaseException:
                # Readers queued behind this writer must be woken up again.
                self._waiting_writers -= 1
                self._condition.notify_all()
                raise
            self._waiting_writers -= 1
            self._writer = True
        try:
            yield
        finally:
            self._writer = False
            await asyncio.shield(self._notify())

    async def _notify(self) -> None:
        # Counters are reset before this runs: a caller cancelled here leaks nothing.
        async with self._condition:
            self._condition.notify_all()

    def _can_read(self) -> bool:
        return not self._writer and self._waiting_writers == 0

    def _can_write(self) -> bool:
        return not self._writer and self._readers == 0
