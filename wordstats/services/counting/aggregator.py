"""
Global frequency table shared by every processing worker.

The table is split into lock-striped shards. A word always hashes to the same
shard, so updates to one word are serialized by that shard's lock while
workers touching words in other shards proceed in parallel.
"""

from __future__ import annotations

import threading
from typing import Dict, Iterator, List, Mapping, Tuple

from wordstats.constants.config import DEFAULT_AGGREGATOR_SHARDS


class _Shard:
    __slots__ = ("lock", "counts")

    def __init__(self) -> None:
        self.lock = threading.Lock()
        self.counts: Dict[str, int] = {}


class FrequencyAggregator:
    """Concurrency-safe accumulator of per-document word counts."""

    def __init__(self, shards: int = DEFAULT_AGGREGATOR_SHARDS) -> None:
        if shards < 1:
            raise ValueError("shards must be at least 1")
        self._shards: List[_Shard] = [_Shard() for _ in range(shards)]
        self._frozen = False

    @property
    def shard_count(self) -> int:
        return len(self._shards)

    @property
    def frozen(self) -> bool:
        return self._frozen

    def _shard_for(self, word: str) -> _Shard:
        return self._shards[hash(word) % len(self._shards)]

    def merge(self, local: Mapping[str, int]) -> None:
        """
        Add every (word, count) of a per-document mapping into the table.

        Entries are grouped by shard first so each shard lock is taken once per
        call. Safe to call from many threads at once.
        """
        if self._frozen:
            raise RuntimeError("Cannot merge into a frozen frequency table")

        buckets: Dict[int, List[Tuple[str, int]]] = {}
        width = len(self._shards)
        for word, count in local.items():
            buckets.setdefault(hash(word) % width, []).append((word, count))

        for index, items in buckets.items():
            shard = self._shards[index]
            with shard.lock:
                counts = shard.counts
                for word, count in items:
                    counts[word] = counts.get(word, 0) + count

    def freeze(self) -> None:
        """Reject further merges. Called once every processing task has joined."""
        self._frozen = True

    def snapshot(self) -> Dict[str, int]:
        """Plain-dict copy of the whole table."""
        merged: Dict[str, int] = {}
        for shard in self._shards:
            with shard.lock:
                merged.update(shard.counts)
        return merged

    def get(self, word: str, default: int = 0) -> int:
        shard = self._shard_for(word)
        with shard.lock:
            return shard.counts.get(word, default)

    def total(self) -> int:
        total = 0
        for shard in self._shards:
            with shard.lock:
                total += sum(shard.counts.values())
        return total

    def items(self) -> Iterator[Tuple[str, int]]:
        return iter(self.snapshot().items())

    def __len__(self) -> int:
        size = 0
        for shard in self._shards:
            with shard.lock:
                size += len(shard.counts)
        return size

    def __contains__(self, word: object) -> bool:
        if not isinstance(word, str):
            return False
        shard = self._shard_for(word)
        with shard.lock:
            return word in shard.counts


def merge(local: Mapping[str, int], into: FrequencyAggregator) -> None:
    """Functional form of FrequencyAggregator.merge."""
    into.merge(local)
