#!/usr/bin/env python3

# Copyright (c) 2026 Stephen P Smith
# MIT License

"""
Disk Head Scheduling

Orders a queue of block requests for the disk head and measures how far the
head travels. Movement is the plain distance between block numbers.

- FCFS: requests in arrival order.
- SSTF: always the nearest pending request; ties go to the earlier request.
- SCAN: sweep in one direction to the edge of the disk, then reverse.

Every function is pure. Results are dictionaries:

    {'sequence': [...], 'total_movement': int,
     'movements': [{'from': a, 'to': b, 'distance': d}, ...],
     'average_seek': float}

An empty queue is not an error; it gives a zero-movement result.
"""

import enum
import logging
from typing import List, Optional, Sequence

logger = logging.getLogger(__name__)


class SchedulingPolicy(enum.Enum):
    FCFS = 'FCFS'
    SSTF = 'SSTF'
    SCAN = 'SCAN'

    @classmethod
    def from_name(cls, name: str) -> 'SchedulingPolicy':
        try:
            return cls(name.strip().upper())
        except ValueError:
            raise ValueError(f"Unknown scheduling policy: {name!r}") from None


class ScanDirection(enum.Enum):
    UP = 'up'
    DOWN = 'down'

    @classmethod
    def from_name(cls, name: str) -> 'ScanDirection':
        try:
            return cls(name.strip().lower())
        except ValueError:
            raise ValueError(f"Unknown scan direction: {name!r}") from None


class _HeadTrace:
    """Accumulates head moves for one scheduling run"""

    def __init__(self, start: int):
        self.position = start
        self.sequence: List[int] = []
        self.movements: List[dict] = []
        self.total = 0

    def move_to(self, target: int, boundary: bool = False):
        distance = abs(target - self.position)
        step = {'from': self.position, 'to': target, 'distance': distance}
        if boundary:
            step['boundary'] = True
        else:
            self.sequence.append(target)
        self.movements.append(step)
        self.total += distance
        self.position = target

    def result(self) -> dict:
        count = len(self.sequence)
        return {
            'sequence': self.sequence,
            'total_movement': self.total,
            'movements': self.movements,
            'average_seek': self.total / count if count else 0.0,
        }


def _validate(requests: Sequence[int], current_position: int):
    if current_position < 0:
        raise ValueError(f"Head position cannot be negative (got {current_position})")
    negative = [r for r in requests if r < 0]
    if negative:
        raise ValueError(f"Request block numbers cannot be negative: {negative}")


def fcfs(requests: Sequence[int], current_position: int) -> dict:
    """First come, first served."""
    _validate(requests, current_position)
    trace = _HeadTrace(current_position)
    for request in requests:
        trace.move_to(request)
    return trace.result()


def sstf(requests: Sequence[int], current_position: int) -> dict:
    """Shortest seek time first.

    O(n^2) scan of the pending list. On equal distance the request that comes
    first in the remaining queue wins, which keeps runs reproducible.
    """
    _validate(requests, current_position)
    trace = _HeadTrace(current_position)
    remaining = list(requests)

    while remaining:
        nearest = 0
        nearest_distance = abs(remaining[0] - trace.position)
        for i in range(1, len(remaining)):
            distance = abs(remaining[i] - trace.position)
            if distance < nearest_distance:
                nearest, nearest_distance = i, distance
        trace.move_to(remaining.pop(nearest))

    return trace.result()


def scan(requests: Sequence[int], current_position: int,
         max_block: Optional[int] = None,
         direction: ScanDirection = ScanDirection.UP) -> dict:
    """Elevator algorithm.

    Requests below the head are serviced nearest-first on the way down,
    requests at or above it nearest-first on the way up. When the head has to
    reverse, it first travels to the disk edge (max_block going up, 0 going
    down). No trip to the edge is made if nothing waits on the other side.

    Args:
        requests: Block numbers in arrival order.
        current_position: Head position before the first move.
        max_block: Highest block number on the disk. Defaults to the largest
            of the requests and the head position.
        direction: Initial sweep direction.
    """
    _validate(requests, current_position)
    if max_block is None:
        max_block = max(list(requests) + [current_position])
    elif max_block < max(list(requests) + [current_position]):
        raise ValueError(f"max_block {max_block} lies below a request or the head position")

    left = sorted((r for r in requests if r < current_position), reverse=True)
    right = sorted(r for r in requests if r >= current_position)

    if direction is ScanDirection.UP:
        first, second, edge = right, left, max_block
    else:
        first, second, edge = left, right, 0

    trace = _HeadTrace(current_position)
    for request in first:
        trace.move_to(request)
    if second:
        trace.move_to(edge, boundary=True)
        for request in second:
            trace.move_to(request)

    return trace.result()


def schedule(requests: Sequence[int], current_position: int,
             policy: SchedulingPolicy = SchedulingPolicy.FCFS,
             max_block: Optional[int] = None,
             direction: ScanDirection = ScanDirection.UP) -> dict:
    """
    Run one scheduling policy over a request queue.

    max_block and direction are only used by SCAN.
    """
    if not requests:
        logger.debug(f"{policy.value}: empty request queue")
        return _HeadTrace(current_position).result()

    if policy is SchedulingPolicy.FCFS:
        result = fcfs(requests, current_position)
    elif policy is SchedulingPolicy.SSTF:
        result = sstf(requests, current_position)
    elif policy is SchedulingPolicy.SCAN:
        result = scan(requests, current_position, max_block, direction)
    else:
        raise ValueError(f"Unsupported scheduling policy: {policy!r}")

    logger.debug(f"{policy.value} from {current_position}: {result['sequence']} "
                 f"(total {result['total_movement']})")
    return result
