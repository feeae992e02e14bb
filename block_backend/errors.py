#!/usr/bin/env python3

# Copyright (c) 2026 Stephen P Smith
# MIT License

"""
Block Manager Exceptions

Every failure raised by the backend derives from BlockDeviceError so a front end
can catch the whole family in one place. Allocation failures are recoverable
(retry with another strategy or a smaller file); DoubleReservation and
CompactionError signal a broken caller invariant.
"""

from typing import Iterable


class BlockDeviceError(Exception):
    """Base exception for block manager errors"""


class AllocationError(BlockDeviceError):
    """The allocator could not satisfy a request. Disk state is unchanged."""

    def __init__(self, message: str, required: int = 0, available: int = 0):
        super().__init__(message)
        self.required = required
        self.available = available


class InsufficientContiguousSpace(AllocationError):
    """No run of free blocks is long enough, even if the free total would be"""


class InsufficientSpace(AllocationError):
    """Not enough free blocks in total (index block included for indexed files)"""


class DoubleReservation(BlockDeviceError):
    """A block was requested for reservation while already owned"""

    def __init__(self, blocks: Iterable[int]):
        self.blocks = sorted(set(blocks))
        super().__init__(f"Blocks already in use: {self.blocks}")


class InvalidBlockError(BlockDeviceError, ValueError):
    """Block number outside the disk"""


class CompactionError(BlockDeviceError):
    """Used blocks and the file table disagree; compaction refused to run"""


class FileExistsInTableError(BlockDeviceError):
    """A file with this id is already tracked"""


class FileNotInTableError(BlockDeviceError):
    """No file with this id is tracked"""


class SnapshotError(BlockDeviceError):
    """A saved disk snapshot is unreadable or violates the block partition"""
