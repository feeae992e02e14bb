"""Fragmentation metrics over block layouts."""

from typing import Dict, Iterable, List, Tuple


def compute_rate(used_blocks: Iterable[int]) -> float:
    """Percentage of discontinuities among the used blocks

    Sorts the used block numbers and counts every position where a block does
    not directly follow its predecessor. The rate is breaks / used * 100, and 0
    for an empty disk.

    This is a discontinuity ratio, not a measure of wasted space. It does not
    tell a gap between two files from a gap inside one file, which keeps it
    simple enough to reason about by hand.
    """
    ordered = sorted(used_blocks)
    if not ordered:
        return 0.0

    breaks = 0
    for prev, curr in zip(ordered, ordered[1:]):
        if curr != prev + 1:
            breaks += 1

    return breaks / len(ordered) * 100


def find_extents(blocks: Iterable[int]) -> List[Tuple[int, int]]:
    """Maximal runs of consecutive block numbers as (start, length) pairs

    The blocks are sorted first, so a linked file's extents are its physical
    runs regardless of chain order.
    """
    extents = []
    for block in sorted(blocks):
        if extents and block == extents[-1][0] + extents[-1][1]:
            start, length = extents[-1]
            extents[-1] = (start, length + 1)
        else:
            extents.append((block, 1))
    return extents


def count_extents(blocks: Iterable[int]) -> int:
    return len(find_extents(blocks))


def file_fragments(files) -> Dict[str, int]:
    """Map each file id to the number of extents its blocks form."""
    return {f.id: count_extents(f.blocks) for f in files}


def free_extents(free_blocks: Iterable[int]) -> List[Tuple[int, int]]:
    # Holes are just extents of the free list
    return find_extents(free_blocks)


def largest_free_extent(free_blocks: Iterable[int]) -> int:
    """Length of the longest run a continuous allocation could use."""
    return max((length for _, length in free_extents(free_blocks)), default=0)
