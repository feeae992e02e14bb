"""
Block Manager backend: block allocation, free-space tracking, fragmentation,
compaction and disk head scheduling for a simulated disk.
"""

from .allocator import AllocationStrategy, BlockAllocator
from .disk import FileRecord, VirtualDisk
from .errors import (
    AllocationError, BlockDeviceError, CompactionError, DoubleReservation,
    FileExistsInTableError, FileNotInTableError, InsufficientContiguousSpace,
    InsufficientSpace, InvalidBlockError, SnapshotError
)
from .free_space import FreeSpaceTracker
from .scheduler import ScanDirection, SchedulingPolicy, schedule
