#!/usr/bin/env python3

# Copyright (c) 2026 Stephen P Smith
# MIT License

"""
Defragmentation (compaction)

Packs every used block to the front of the disk. Files are laid out in the
order they first appear on disk, each file's blocks kept in ascending physical
order, with a single counter handing out new block numbers from 0.

The new layout is computed in full before anything changes. The file records
are then updated and the tracker is rebuilt from the new mapping in one step.
"""

import logging
from typing import Dict, List

from .errors import CompactionError
from .free_space import FreeSpaceTracker

logger = logging.getLogger(__name__)


def plan_compaction(files, tracker: FreeSpaceTracker) -> Dict[int, int]:
    """
    Compute the old -> new block mapping for a compaction.

    Args:
        files: Iterable of file records (objects with .id and .blocks).
        tracker: Current free/used state.

    Returns:
        Dictionary mapping every used block to its new block number.

    Raises:
        CompactionError: A used block belongs to a file missing from `files`.
    """
    known = {f.id for f in files}

    # Group by owner; dict insertion order follows first physical appearance
    owner_blocks: Dict[str, List[int]] = {}
    for block, owner in sorted(tracker.used_blocks.items()):
        if owner not in known:
            logger.error(f"Block {block} is owned by unknown file '{owner}'")
            raise CompactionError(f"Block {block} belongs to '{owner}', which is not in the file table")
        owner_blocks.setdefault(owner, []).append(block)

    mapping = {}
    next_block = 0
    for owner, blocks in owner_blocks.items():
        for old in blocks:
            mapping[old] = next_block
            next_block += 1
    return mapping


def compact(files, tracker: FreeSpaceTracker) -> dict:
    """
    Compact all used blocks into [0, used_count - 1].

    Each file's blocks are sorted ascending and given consecutive new numbers,
    so every file ends up as one ascending extent. An indexed file keeps its
    index block first, since that block was the lowest free one when the file
    was allocated.

    Returns:
        {'moved_blocks': n}, n being the number of blocks whose address changed.
    """
    files = list(files)
    mapping = plan_compaction(files, tracker)
    used = tracker.used_blocks

    held: Dict[str, List[int]] = {}
    for block, owner in used.items():
        held.setdefault(owner, []).append(block)
    for f in files:
        if sorted(f.blocks) != sorted(held.get(f.id, [])):
            logger.error(f"File '{f.id}' block list {f.blocks} disagrees with the tracker")
            raise CompactionError(f"File '{f.id}' block list does not match the blocks it holds")

    moved = sum(1 for old, new in mapping.items() if old != new)

    new_owners = {mapping[b]: owner for b, owner in used.items()}
    for f in files:
        f.blocks = [mapping[b] for b in sorted(f.blocks)]
    tracker.rebuild(new_owners)

    if moved == 0:
        logger.info("Disk already compact, nothing to move")
    else:
        logger.info(f"Compaction moved {moved} of {len(mapping)} used block(s)")
    return {'moved_blocks': moved}
