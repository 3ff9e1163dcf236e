"""Single-threaded owner of the suffix index and the processed-entity set."""

from __future__ import annotations

import asyncio
import functools
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Callable, Iterable, TypeVar

from clone_check.core.metrics import INDEXED_SEQUENCES
from clone_check.index.suffix_tree import SuffixTree
from clone_check.models.tokens import Mode, SourceUnit

logger = logging.getLogger(__name__)

T = TypeVar("T")
ProcessedKey = tuple[Mode, int]


@dataclass
class TokenIndex:
    """Suffix tree plus the source unit behind every stored sequence."""

    tree: SuffixTree = field(default_factory=SuffixTree)
    units: list[SourceUnit] = field(default_factory=list)
    processed: set[ProcessedKey] = field(default_factory=set)

    def add_unit(self, unit: SourceUnit) -> int | None:
        if len(unit) < 2:
            logger.debug("Skipping unit %s in %s: too short", unit.function_name, unit.file)
            return None
        sequence_id = self.tree.add_sequence(unit.tokens)
        self.units.append(unit)
        return sequence_id

    def unit(self, sequence_id: int) -> SourceUnit:
        return self.units[sequence_id]


class IndexWorker:
    """Serialize every read and write of the index onto one dedicated thread.

    Other pipeline stages hand finished units over with ``add_units`` and
    read results through ``query``; nothing else touches the ``TokenIndex``.
    """

    def __init__(self, index: TokenIndex | None = None) -> None:
        self._index = index or TokenIndex()
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="clone-index")

    async def _run(self, fn: Callable[..., T], *args: object) -> T:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(self._executor, functools.partial(fn, *args))

    async def add_units(self, units: Iterable[SourceUnit]) -> list[int]:
        batch = list(units)
        return await self._run(self._add_units, batch)

    def _add_units(self, units: list[SourceUnit]) -> list[int]:
        ids = [seq_id for seq_id in map(self._index.add_unit, units) if seq_id is not None]
        INDEXED_SEQUENCES.set(self._index.tree.sequence_count)
        return ids

    async def is_processed(self, key: ProcessedKey) -> bool:
        return await self._run(self._index.processed.__contains__, key)

    async def mark_processed(self, key: ProcessedKey) -> None:
        await self._run(self._index.processed.add, key)

    async def query(self, fn: Callable[[TokenIndex], T]) -> T:
        """Run ``fn`` against the index on the worker thread."""
        return await self._run(fn, self._index)

    async def stats(self) -> dict[str, int]:
        return await self._run(self._stats)

    def _stats(self) -> dict[str, int]:
        return {
            "processed": len(self._index.processed),
            "sequences": self._index.tree.sequence_count,
            "tokens": self._index.tree.token_count,
        }

    def close(self) -> None:
        self._executor.shutdown(wait=True)


__all__ = ["TokenIndex", "IndexWorker", "ProcessedKey"]
