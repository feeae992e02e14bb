#!/usr/bin/env python3

# Copyright (c) 2026 Stephen P Smith
# MIT License

"""
Block Allocator

Chooses which free blocks a new file receives. Three strategies are supported:

- CONTINUOUS: first run of consecutive free blocks, scanning the sorted free list.
- LINKED: blocks drawn at random (without replacement) from the free list.
- INDEXED: one index block (the lowest free block) followed by randomly drawn
  data blocks.

The allocator never changes the tracker. It works on a private copy of the
free list, so a failed request leaves the disk exactly as it was; committing
the result is the caller's job (see FreeSpaceTracker.reserve).
"""

import enum
import logging
import random
from typing import List, Optional

from .errors import InsufficientContiguousSpace, InsufficientSpace
from .free_space import FreeSpaceTracker

logger = logging.getLogger(__name__)


class AllocationStrategy(enum.Enum):
    CONTINUOUS = 'continuous'
    LINKED = 'linked'
    INDEXED = 'indexed'

    @classmethod
    def from_name(cls, name) -> 'AllocationStrategy':
        """
        Parse a stored or user-supplied strategy name.

        Unknown or missing names fall back to CONTINUOUS. Only loaders and
        front ends should call this; the allocator itself rejects non-members.
        """
        if isinstance(name, cls):
            return name
        if name:
            try:
                return cls(str(name).strip().lower())
            except ValueError:
                pass
        logger.warning(f"Unknown allocation strategy {name!r}, using continuous")
        return cls.CONTINUOUS

    @property
    def overhead_blocks(self) -> int:
        """Blocks needed on top of the data blocks (the index block)."""
        return 1 if self is AllocationStrategy.INDEXED else 0


class BlockAllocator:
    """Dispatches allocation requests to the three strategies"""

    def __init__(self, rng: Optional[random.Random] = None):
        # Linked and indexed draws come from here; seed it for repeatable runs
        self.rng = rng if rng is not None else random.Random()
        self._strategies = {
            AllocationStrategy.CONTINUOUS: self.allocate_continuous,
            AllocationStrategy.LINKED: self.allocate_linked,
            AllocationStrategy.INDEXED: self.allocate_indexed,
        }

    def allocate(self, required: int, strategy: AllocationStrategy,
                 free_space: FreeSpaceTracker) -> List[int]:
        """
        Pick blocks for a file without committing them.

        Args:
            required: Number of data blocks the file needs.
            strategy: AllocationStrategy member.
            free_space: Tracker to read the free list from.

        Returns:
            Block list. For INDEXED the first entry is the index block.

        Raises:
            InsufficientContiguousSpace: CONTINUOUS found no long enough run.
            InsufficientSpace: LINKED/INDEXED ran out of free blocks.
            ValueError: Negative count or unsupported strategy.
        """
        if required < 0:
            raise ValueError(f"Block count cannot be negative (got {required})")
        handler = self._strategies.get(strategy)
        if handler is None:
            raise ValueError(f"Unsupported allocation strategy: {strategy!r}")

        blocks = handler(required, free_space.free_blocks)
        logger.debug(f"{strategy.value} allocation of {required} block(s) -> {blocks}")
        return blocks

    def allocate_continuous(self, required: int, free_blocks: List[int]) -> List[int]:
        """First-fit over the ascending free list."""
        if required == 0:
            return []

        run_start = 0
        for i in range(1, len(free_blocks) + 1):
            if i - run_start >= required:
                return free_blocks[run_start:run_start + required]
            if i < len(free_blocks) and free_blocks[i] != free_blocks[i - 1] + 1:
                run_start = i

        logger.warning(f"No contiguous run of {required} blocks ({len(free_blocks)} free in total)")
        raise InsufficientContiguousSpace(
            f"No contiguous run of {required} free blocks",
            required=required, available=len(free_blocks))

    def _draw(self, count: int, pool: List[int]) -> List[int]:
        # pool is consumed in place
        picked = []
        for _ in range(count):
            picked.append(pool.pop(self.rng.randrange(len(pool))))
        return picked

    def allocate_linked(self, required: int, free_blocks: List[int]) -> List[int]:
        if len(free_blocks) < required:
            logger.warning(f"Linked allocation needs {required} blocks, only {len(free_blocks)} free")
            raise InsufficientSpace(
                f"Not enough free blocks: need {required}, have {len(free_blocks)}",
                required=required, available=len(free_blocks))
        return self._draw(required, list(free_blocks))

    def allocate_indexed(self, required: int, free_blocks: List[int]) -> List[int]:
        needed = required + 1
        if len(free_blocks) < needed:
            logger.warning(f"Indexed allocation needs {needed} blocks (1 index + {required} data), "
                           f"only {len(free_blocks)} free")
            raise InsufficientSpace(
                f"Not enough free blocks: need {needed} including the index block, have {len(free_blocks)}",
                required=needed, available=len(free_blocks))

        pool = list(free_blocks)
        index_block = pool.pop(0)
        return [index_block] + self._draw(required, pool)
