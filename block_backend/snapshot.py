#!/usr/bin/env python3

# Copyright (c) 2026 Stephen P Smith
# MIT License

"""
Disk Snapshots

Saves a VirtualDisk (geometry + file table) to JSON and restores it. The
free/used partition is never trusted from the file: on load it is rebuilt
from the files' block lists, and the stored free list is only compared
against the result.

Layout:

    {"version": 1,
     "disk": {"total_blocks": 1000, "block_size": 4096, "free_blocks": [...]},
     "files": [{"id": "a.txt", "size": 9000, "blocks": [0, 1, 2],
                "allocation": "continuous"}, ...]}
"""

import json
import logging
import random
from typing import Optional

from .allocator import AllocationStrategy
from .disk import FileRecord, VirtualDisk
from .errors import BlockDeviceError, SnapshotError

logger = logging.getLogger(__name__)

SNAPSHOT_VERSION = 1


def to_dict(disk: VirtualDisk) -> dict:
    return {
        'version': SNAPSHOT_VERSION,
        'disk': {
            'total_blocks': disk.total_blocks,
            'block_size': disk.block_size,
            'free_blocks': disk.tracker.free_blocks,
        },
        'files': [f.to_dict() for f in disk.files],
    }


def _positive_int(value, field: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise SnapshotError(f"Snapshot field '{field}' must be a positive integer (got {value!r})")
    return value


def from_dict(data: dict, rng: Optional[random.Random] = None) -> VirtualDisk:
    """
    Rebuild a disk from a snapshot dictionary.

    Raises:
        SnapshotError: Missing fields, fields of the wrong type, unsupported
            version, blocks outside the disk, or a block claimed by two files.
    """
    if not isinstance(data, dict) or not isinstance(data.get('disk'), dict):
        raise SnapshotError("Snapshot is missing the 'disk' section")

    version = data.get('version', SNAPSHOT_VERSION)
    if version != SNAPSHOT_VERSION:
        raise SnapshotError(f"Unsupported snapshot version: {version}")

    disk_info = data['disk']
    total_blocks = _positive_int(disk_info.get('total_blocks'), 'total_blocks')
    block_size = _positive_int(disk_info.get('block_size'), 'block_size')
    disk = VirtualDisk(total_blocks, block_size, rng)

    files = data.get('files') or []
    if not isinstance(files, list):
        raise SnapshotError(f"Snapshot 'files' must be a list (got {type(files).__name__})")

    for i, raw in enumerate(files):
        if not isinstance(raw, dict) or 'id' not in raw:
            raise SnapshotError(f"File entry #{i} has no id")
        blocks = raw.get('blocks') or []
        if not isinstance(blocks, list):
            raise SnapshotError(f"File '{raw['id']}' blocks must be a list (got {type(blocks).__name__})")
        if not all(isinstance(b, int) and not isinstance(b, bool) for b in blocks):
            raise SnapshotError(f"File '{raw['id']}' has non-integer block numbers")

        size = raw.get('size') or 0
        if isinstance(size, bool) or not isinstance(size, int) or size < 0:
            raise SnapshotError(f"File '{raw['id']}' has an invalid size: {size!r}")

        record = FileRecord(str(raw['id']), size, blocks,
                            AllocationStrategy.from_name(raw.get('allocation')))
        try:
            disk.adopt_file(record)
        except BlockDeviceError as e:
            logger.error(f"Rejecting snapshot: file '{record.id}': {e}")
            raise SnapshotError(f"File '{record.id}': {e}") from e

        expected = disk.blocks_needed(record.size) + record.allocation.overhead_blocks
        if len(record.blocks) != expected:
            logger.warning(f"File '{record.id}' holds {len(record.blocks)} block(s), "
                           f"its size implies {expected}")

    stored_free = disk_info.get('free_blocks')
    if stored_free is not None and (not isinstance(stored_free, list) or not all(
            isinstance(b, int) and not isinstance(b, bool) for b in stored_free)):
        raise SnapshotError("Snapshot 'free_blocks' must be a list of block numbers")
    if stored_free is not None and sorted(stored_free) != disk.tracker.free_blocks:
        logger.warning("Stored free list disagrees with the file table; using the recomputed one")

    logger.info(f"Loaded snapshot: {total_blocks} blocks, {len(disk.files)} file(s)")
    return disk


def save_snapshot(disk: VirtualDisk, path: str):
    """Write a disk snapshot to `path` as JSON."""
    logger.info(f"Saving snapshot to {path}")
    with open(path, 'w', encoding='utf-8') as f:
        json.dump(to_dict(disk), f, indent=2)


def load_snapshot(path: str, rng: Optional[random.Random] = None) -> VirtualDisk:
    """
    Read a disk snapshot from `path`.

    Raises:
        SnapshotError: Unreadable JSON or an invalid snapshot.
        OSError: The file cannot be opened.
    """
    logger.debug(f"Loading snapshot from {path}")
    with open(path, 'r', encoding='utf-8') as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise SnapshotError(f"Snapshot {path} is not valid JSON: {e}") from e
    return from_dict(data, rng)
