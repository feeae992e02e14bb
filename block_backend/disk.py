#!/usr/bin/env python3

# Copyright (c) 2026 Stephen P Smith
# MIT License

"""
Virtual Disk
Owns the free-space tracker, the allocator and the file table for one
simulated disk, and exposes the operations a front end needs: allocate and
release blocks, create and delete files, measure fragmentation, compact, and
run head scheduling against the disk's geometry.
"""

import logging
import random
from typing import Dict, List, Optional

from .allocator import AllocationStrategy, BlockAllocator
from .defrag import compact
from .errors import (
    FileExistsInTableError,
    FileNotInTableError,
    InsufficientContiguousSpace,
    InsufficientSpace,
)
from .fragmentation import compute_rate, file_fragments, largest_free_extent
from .free_space import FreeSpaceTracker
from .scheduler import ScanDirection, SchedulingPolicy, schedule

logger = logging.getLogger(__name__)

DEFAULT_FORMAT = 'default'


class FileRecord:
    """A data-bearing file: id, size in bytes, block list, allocation strategy"""

    def __init__(self, file_id: str, size: int, blocks: List[int],
                 allocation: AllocationStrategy = AllocationStrategy.CONTINUOUS):
        self.id = file_id
        self.size = size
        self.blocks = list(blocks)
        self._allocation = allocation

    @property
    def allocation(self) -> AllocationStrategy:
        return self._allocation

    @property
    def index_block(self) -> Optional[int]:
        """The index block of an indexed file, None otherwise."""
        if self._allocation is AllocationStrategy.INDEXED and self.blocks:
            return self.blocks[0]
        return None

    @property
    def data_blocks(self) -> List[int]:
        if self._allocation is AllocationStrategy.INDEXED:
            return self.blocks[1:]
        return list(self.blocks)

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'size': self.size,
            'blocks': list(self.blocks),
            'allocation': self._allocation.value,
        }

    def __repr__(self):
        return f"FileRecord({self.id!r}, size={self.size}, {self._allocation.value}, blocks={self.blocks})"


class VirtualDisk:
    """A disk of fixed-size blocks plus the files stored on it"""

    # Disk presets
    FORMATS = {
        'default': {
            'name': 'Default disk (1000 x 4 KB)',
            'total_blocks': 1000,
            'block_size': 4096,
        },
        'small': {
            'name': 'Small disk (100 x 512 B)',
            'total_blocks': 100,
            'block_size': 512,
        },
        'medium': {
            'name': 'Medium disk (500 x 1 KB)',
            'total_blocks': 500,
            'block_size': 1024,
        },
        'large': {
            'name': 'Large disk (4096 x 4 KB)',
            'total_blocks': 4096,
            'block_size': 4096,
        },
    }

    def __init__(self, total_blocks: int, block_size: int, rng: Optional[random.Random] = None):
        if block_size <= 0:
            raise ValueError(f"Block size must be positive (got {block_size})")
        self.total_blocks = total_blocks
        self.block_size = block_size
        self.tracker = FreeSpaceTracker(total_blocks)
        self.allocator = BlockAllocator(rng)
        self._files: Dict[str, FileRecord] = {}
        logger.debug(f"Initialized VirtualDisk with {total_blocks} blocks of {block_size} bytes")

    @classmethod
    def create(cls, format_key: str = DEFAULT_FORMAT, rng: Optional[random.Random] = None) -> 'VirtualDisk':
        """
        Create an empty disk from one of the FORMATS presets.

        Raises:
            ValueError: Unknown format key.
        """
        if format_key not in cls.FORMATS:
            raise ValueError(f"Unknown format: {format_key}")
        fmt = cls.FORMATS[format_key]
        logger.info(f"Creating {fmt['name']}")
        return cls(fmt['total_blocks'], fmt['block_size'], rng)

    # -- block level ---------------------------------------------------------

    def blocks_needed(self, size: int) -> int:
        """Data blocks needed for `size` bytes (ceiling division)."""
        if size < 0:
            raise ValueError(f"File size cannot be negative (got {size})")
        return (size + self.block_size - 1) // self.block_size

    def allocate(self, size: int, strategy: AllocationStrategy, owner: str) -> List[int]:
        """
        Allocate and reserve blocks for `size` bytes.

        The total-space pre-check counts the index block for indexed files,
        so it agrees with the allocator's own check. A continuous request
        that fails it raises InsufficientContiguousSpace, as the allocator would.

        Raises:
            AllocationError: Not enough (contiguous) space. Nothing changes.
        """
        required = self.blocks_needed(size)
        needed = required + strategy.overhead_blocks
        if needed > self.tracker.free_count:
            logger.warning(f"Disk full: '{owner}' needs {needed} block(s), {self.tracker.free_count} free")
            error = InsufficientContiguousSpace if strategy is AllocationStrategy.CONTINUOUS else InsufficientSpace
            raise error(
                f"Disk full: need {needed} blocks, have {self.tracker.free_count}",
                required=needed, available=self.tracker.free_count)

        blocks = self.allocator.allocate(required, strategy, self.tracker)
        self.tracker.reserve(blocks, owner)
        return blocks

    def release(self, blocks: List[int]):
        self.tracker.release(blocks)

    def fragmentation_rate(self) -> float:
        return compute_rate(self.tracker.used_blocks)

    @property
    def fragment_rate(self) -> float:
        return self.fragmentation_rate()

    def get_block_map(self) -> Dict[int, str]:
        """
        Return a dictionary mapping used block numbers to file ids.
        Used to visualize which file occupies which blocks.
        """
        return self.tracker.used_blocks

    # -- file table ----------------------------------------------------------

    @property
    def files(self) -> List[FileRecord]:
        return list(self._files.values())

    def get_file(self, file_id: str) -> FileRecord:
        try:
            return self._files[file_id]
        except KeyError:
            raise FileNotInTableError(f"No such file: '{file_id}'") from None

    def create_file(self, file_id: str, size: int,
                    strategy: AllocationStrategy = AllocationStrategy.CONTINUOUS) -> FileRecord:
        """Create a file and allocate its blocks
        Raises:
            FileExistsInTableError: The id is taken.
            AllocationError: Not enough space (the file is not created).
        """
        if file_id in self._files:
            raise FileExistsInTableError(f"File '{file_id}' already exists")

        logger.info(f"Creating file '{file_id}' ({size} bytes, {strategy.value})")
        blocks = self.allocate(size, strategy, file_id)
        record = FileRecord(file_id, size, blocks, strategy)
        self._files[file_id] = record
        return record

    def delete_file(self, file_id: str) -> FileRecord:
        """Delete a file and free its blocks
        Raises:
            FileNotInTableError: Unknown id.
        """
        record = self.get_file(file_id)
        logger.info(f"Deleting file '{file_id}' ({len(record.blocks)} block(s))")
        self.release(record.blocks)
        del self._files[file_id]
        return record

    def adopt_file(self, record: FileRecord):
        """
        Track a file whose blocks were chosen elsewhere (e.g. a loaded snapshot).

        Raises:
            FileExistsInTableError: The id is taken.
            DoubleReservation: A block is already held.
        """
        if record.id in self._files:
            raise FileExistsInTableError(f"File '{record.id}' already exists")
        self.tracker.reserve(record.blocks, record.id)
        self._files[record.id] = record

    # -- maintenance and analysis -------------------------------------------

    def compact(self) -> dict:
        """Defragment the disk. Returns {'moved_blocks': n}."""
        logger.info("Starting disk compaction")
        return compact(self.files, self.tracker)

    def schedule(self, requests: List[int], current_position: int,
                 policy: SchedulingPolicy = SchedulingPolicy.FCFS,
                 direction: ScanDirection = ScanDirection.UP) -> dict:
        """Run head scheduling with this disk's last block as the SCAN edge."""
        out_of_range = [r for r in requests if r >= self.total_blocks]
        if out_of_range or current_position >= self.total_blocks:
            raise ValueError(f"Requests/head must lie within 0..{self.total_blocks - 1}")
        return schedule(requests, current_position, policy, self.total_blocks - 1, direction)

    def get_status(self) -> dict:
        """Disk usage summary for status displays."""
        used = self.tracker.used_count
        free_blocks = self.tracker.free_blocks
        return {
            'total_blocks': self.total_blocks,
            'block_size': self.block_size,
            'used_blocks': used,
            'free_blocks': len(free_blocks),
            'utilization': used / self.total_blocks * 100,
            'fragment_rate': self.fragmentation_rate(),
            'file_count': len(self._files),
            'largest_free_extent': largest_free_extent(free_blocks),
            'file_fragments': file_fragments(self._files.values()),
        }
