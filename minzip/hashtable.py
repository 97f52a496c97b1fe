"""Open-addressing hash table with linear probing and tombstones.

Adds and lookups dominate; removals are rare and leave tombstones that are
only cleared when the table is resized.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Iterator, Optional

log = logging.getLogger("minzip")

# The table is resized once (live + dead) entries exceed 5/8 of its slots.
LOAD_NUMER = 5
LOAD_DENOM = 8

_MASK32 = 0xFFFFFFFF

# Footprint of the table header and of one slot, as laid out on a 32-bit target.
_TABLE_STRUCT_SIZE = 20
_ENTRY_SIZE = 8


class _Tombstone:
    __slots__ = ()

    def __repr__(self) -> str:
        return "<tombstone>"


_TOMBSTONE = _Tombstone()

CompareFunc = Callable[[Any, Any], int]


def hash_size(size: int) -> int:
    """Capacity needed for a table to hold ``size`` entries without resizing."""
    return (size * LOAD_DENOM) // LOAD_NUMER + 1


def round_up_power2(value: int) -> int:
    """Round ``value`` up to a power of two, with 32-bit unsigned wrap-around."""
    val = (value - 1) & _MASK32
    for shift in (1, 2, 4, 8, 16):
        val |= val >> shift
    return (val + 1) & _MASK32


@dataclass(frozen=True)
class ProbeStats:
    """Probe counts over every entry of a table."""

    min_probe: int
    max_probe: int
    total_probe: int
    entries: int
    table_size: int

    @property
    def average(self) -> float:
        return self.total_probe / self.entries if self.entries else 0.0


class HashTable:
    """A hash table of items keyed by a caller-supplied 32-bit hash.

    Slots are ``None`` (empty), a tombstone, or a ``(hash, item)`` pair.
    """

    def __init__(self, initial_size: int,
                 free_func: Optional[Callable[[Any], None]] = None) -> None:
        if initial_size <= 0:
            raise ValueError("initial size must be positive")
        self._size = round_up_power2(initial_size)
        if self._size == 0:
            raise ValueError(f"initial size {initial_size} is too large")
        self._slots: list = [None] * self._size
        self._num_entries = 0
        self._num_dead = 0
        self.free_func = free_func

    @property
    def table_size(self) -> int:
        """Number of slots; always a power of two."""
        return self._size

    @property
    def dead_entries(self) -> int:
        """Number of tombstones currently in the table."""
        return self._num_dead

    def _probe(self, item_hash: int, matches: Callable[[Any], bool]) -> tuple[int, int, bool]:
        """Probe from the home slot; return (slot index, probe count, matched)."""
        mask = self._size - 1
        idx = item_hash & mask
        count = 0
        while self._slots[idx] is not None:
            slot = self._slots[idx]
            if slot is not _TOMBSTONE and matches(slot):
                return idx, count, True
            idx = (idx + 1) & mask
            if idx == 0 and self._size == 1:
                break
            count += 1
        return idx, count, False

    def _check_item(self, item: Any) -> None:
        if item is None or item is _TOMBSTONE:
            raise ValueError("cannot store or look up None")

    def lookup(self, item_hash: int, item: Any, compare: CompareFunc,
               add: bool = False) -> Any:
        """Find an entry equal to ``item``, adding ``item`` if asked.

        Returns the stored entry, ``item`` itself when it was just added, or
        None when it is absent and ``add`` is false. An add may resize the
        table.
        """
        self._check_item(item)
        item_hash &= _MASK32
        idx, _, matched = self._probe(
            item_hash,
            lambda slot: slot[0] == item_hash and compare(slot[1], item) == 0,
        )
        if matched:
            return self._slots[idx][1]
        if self._slots[idx] is not None or not add:
            return None
        self._slots[idx] = (item_hash, item)
        self._num_entries += 1
        if (self._num_entries + self._num_dead) * LOAD_DENOM > self._size * LOAD_NUMER:
            self._resize(self._size * 2)
        return item

    def _resize(self, new_size: int) -> None:
        mask = new_size - 1
        new_slots: list = [None] * new_size
        for slot in self._slots:
            if slot is None or slot is _TOMBSTONE:
                continue
            idx = slot[0] & mask
            while new_slots[idx] is not None:
                idx = (idx + 1) & mask
            new_slots[idx] = slot
        self._slots = new_slots
        self._size = new_size
        self._num_dead = 0

    def remove(self, item_hash: int, item: Any) -> bool:
        """Detach the entry that is ``item`` itself; the free function is not called."""
        item_hash &= _MASK32
        idx, _, matched = self._probe(item_hash, lambda slot: slot[1] is item)
        if not matched:
            return False
        self._slots[idx] = _TOMBSTONE
        self._num_entries -= 1
        self._num_dead += 1
        return True

    def clear(self) -> None:
        """Remove every entry, passing each live one to the free function."""
        for slot in self._slots:
            if slot is not None and slot is not _TOMBSTONE and self.free_func is not None:
                self.free_func(slot[1])
        self._slots = [None] * self._size
        self._num_entries = 0
        self._num_dead = 0

    def foreach(self, func: Callable[[Any], int]) -> int:
        """Call ``func`` on each entry; stop and return its first nonzero result."""
        for item in self:
            val = func(item)
            if val:
                return val
        return 0

    def __iter__(self) -> Iterator[Any]:
        for slot in list(self._slots):
            if slot is not None and slot is not _TOMBSTONE:
                yield slot[1]

    def __len__(self) -> int:
        return self._num_entries

    def mem_usage(self) -> int:
        """Modelled memory footprint of the table in bytes."""
        return _TABLE_STRUCT_SIZE + self._size * _ENTRY_SIZE

    def count_probes(self, item_hash: int, item: Any,
                     compare: CompareFunc) -> Optional[int]:
        """Number of probes needed to find ``item``, or None if it is absent."""
        self._check_item(item)
        item_hash &= _MASK32
        _, count, matched = self._probe(
            item_hash,
            lambda slot: slot[0] == item_hash and compare(slot[1], item) == 0,
        )
        return count if matched else None

    def probe_count(self, calc: Callable[[Any], int],
                    compare: CompareFunc) -> ProbeStats:
        """Measure probing over all entries, log the figures and return them."""
        counts = [self.count_probes(calc(item), item, compare) for item in self]
        counts = [-1 if c is None else c for c in counts]
        stats = ProbeStats(
            min_probe=min(counts, default=0),
            max_probe=max(counts, default=0),
            total_probe=sum(counts),
            entries=len(counts),
            table_size=self._size,
        )
        log.info(
            "Probe: min=%d max=%d, total=%d in %d (%d), avg=%.3f",
            stats.min_probe, stats.max_probe, stats.total_probe,
            stats.entries, stats.table_size, stats.average,
        )
        return stats