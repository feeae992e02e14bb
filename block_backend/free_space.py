#!/usr/bin/env python3

# Copyright (c) 2026 Stephen P Smith
# MIT License

"""
Free Space Tracker

Owns the partition of block numbers into free and used. A used block maps to
the id of the file that owns it. reserve() is all-or-nothing; release() never
fails for blocks that exist on the disk.
"""

import logging
from typing import Dict, Iterable, List, Optional, Tuple

from .errors import DoubleReservation, InvalidBlockError

logger = logging.getLogger(__name__)


class FreeSpaceTracker:
    """Free/used bookkeeping for a disk of total_blocks blocks"""

    def __init__(self, total_blocks: int):
        if total_blocks <= 0:
            raise ValueError(f"Disk must have at least one block (got {total_blocks})")
        self.total_blocks = total_blocks
        self._free = set(range(total_blocks))
        self._used: Dict[int, str] = {}

    def __repr__(self):
        return f"FreeSpaceTracker(total={self.total_blocks}, used={len(self._used)})"

    @property
    def free_blocks(self) -> List[int]:
        """Free block numbers in ascending order."""
        return sorted(self._free)

    @property
    def used_blocks(self) -> Dict[int, str]:
        """Copy of the block -> owner mapping."""
        return dict(self._used)

    @property
    def free_count(self) -> int:
        return len(self._free)

    @property
    def used_count(self) -> int:
        return len(self._used)

    def is_free(self, block: int) -> bool:
        self._check_range([block])
        return block in self._free

    def owner_of(self, block: int) -> Optional[str]:
        """Return the owning file id, or None for a free block."""
        self._check_range([block])
        return self._used.get(block)

    def blocks_of(self, owner: str) -> List[int]:
        """All blocks held by one owner, ascending."""
        return sorted(b for b, o in self._used.items() if o == owner)

    def snapshot(self) -> Tuple[Tuple[int, ...], Tuple[Tuple[int, str], ...]]:
        """
        Hashable copy of the full state.

        Two snapshots compare equal exactly when the free and used sides
        (owners included) are identical.
        """
        return tuple(sorted(self._free)), tuple(sorted(self._used.items()))

    def _check_range(self, blocks: Iterable[int]):
        bad = [b for b in blocks if not (0 <= b < self.total_blocks)]
        if bad:
            raise InvalidBlockError(
                f"Block(s) {bad} outside disk range 0..{self.total_blocks - 1}")

    def reserve(self, blocks: List[int], owner: str):
        """
        Move blocks from free to used, all or nothing.

        Args:
            blocks: Block numbers to hand to the owner.
            owner: File id recorded against every block.

        Raises:
            InvalidBlockError: A block lies outside the disk.
            DoubleReservation: A block is already used, or listed twice.
        """
        blocks = list(blocks)
        self._check_range(blocks)

        conflicts = [b for b in blocks if b in self._used]
        seen = set()
        for b in blocks:
            if b in seen:
                conflicts.append(b)
            seen.add(b)
        if conflicts:
            logger.error(f"Refusing reservation for '{owner}': blocks {sorted(set(conflicts))} already held")
            raise DoubleReservation(conflicts)

        for b in blocks:
            self._free.discard(b)
            self._used[b] = owner
        logger.debug(f"Reserved {len(blocks)} block(s) for '{owner}'")

    def release(self, blocks: List[int]):
        """
        Return blocks to the free set.

        Releasing a block that is already free does nothing.

        Raises:
            InvalidBlockError: A block lies outside the disk (nothing is released).
        """
        blocks = list(blocks)
        self._check_range(blocks)

        released = 0
        for b in blocks:
            if self._used.pop(b, None) is not None:
                released += 1
            self._free.add(b)
        logger.debug(f"Released {released} block(s)")

    def rebuild(self, mapping: Dict[int, str]):
        """
        Replace the whole state from a block -> owner mapping.

        Free blocks are everything the mapping does not name.
        """
        self._check_range(mapping.keys())
        self._used = dict(mapping)
        self._free = set(range(self.total_blocks)) - set(self._used)
