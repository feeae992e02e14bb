#!/usr/bin/env python3

# Copyright (c) 2026 Stephen P Smith
# MIT License

"""
Block Manager
Command-line front end for the simulated disk: create snapshots, allocate and
delete files, compact, inspect fragmentation and run disk head scheduling.
"""

import sys
import random
import logging
import argparse
from typing import List, Optional

from block_backend.allocator import AllocationStrategy
from block_backend.disk import VirtualDisk
from block_backend.errors import BlockDeviceError
from block_backend.scheduler import ScanDirection, SchedulingPolicy, schedule
from block_backend.snapshot import load_snapshot, save_snapshot

logger = logging.getLogger("BlockManager")


def setup_logging(verbose: bool = False):
    """Configure application-wide logging"""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format='%(asctime)s - %(filename)s:%(lineno)d - %(levelname)s - %(message)s',
        handlers=[
            logging.FileHandler("blockmanager.log", mode='w'),
            logging.StreamHandler()
        ]
    )


def _rng(seed: Optional[int]) -> random.Random:
    return random.Random(seed)


def cmd_schedule(args) -> int:
    policy = SchedulingPolicy.from_name(args.policy)
    direction = ScanDirection.from_name(args.direction)
    result = schedule(args.requests, args.head, policy, args.max_block, direction)

    print(f"Policy:          {policy.value}")
    print(f"Sequence:        {' -> '.join(str(r) for r in [args.head] + result['sequence'])}")
    for step in result['movements']:
        note = "  (boundary)" if step.get('boundary') else ""
        print(f"  {step['from']:>6} -> {step['to']:<6} {step['distance']:>6}{note}")
    print(f"Total movement:  {result['total_movement']}")
    print(f"Average seek:    {result['average_seek']:.2f}")
    return 0


def cmd_new(args) -> int:
    if args.blocks is not None:
        block_size = 4096 if args.block_size is None else args.block_size
        disk = VirtualDisk(args.blocks, block_size)
    else:
        disk = VirtualDisk.create(args.format)
    save_snapshot(disk, args.path)
    print(f"Created disk: {disk.total_blocks} blocks x {disk.block_size} bytes")
    return 0


def cmd_create(args) -> int:
    disk = load_snapshot(args.path, _rng(args.seed))
    record = disk.create_file(args.file_id, args.size, AllocationStrategy.from_name(args.strategy))
    save_snapshot(disk, args.path)
    print(f"{record.id}: {record.allocation.value}, blocks {record.blocks}")
    return 0


def cmd_delete(args) -> int:
    disk = load_snapshot(args.path)
    record = disk.delete_file(args.file_id)
    save_snapshot(disk, args.path)
    print(f"Deleted {record.id} ({len(record.blocks)} block(s) freed)")
    return 0


def cmd_compact(args) -> int:
    disk = load_snapshot(args.path)
    before = disk.fragmentation_rate()
    result = disk.compact()
    save_snapshot(disk, args.path)
    print(f"Moved {result['moved_blocks']} block(s); "
          f"fragmentation {before:.2f}% -> {disk.fragmentation_rate():.2f}%")
    return 0


def cmd_status(args) -> int:
    disk = load_snapshot(args.path)
    status = disk.get_status()
    print(f"Blocks:          {status['total_blocks']} x {status['block_size']} bytes")
    print(f"Used / free:     {status['used_blocks']} / {status['free_blocks']} "
          f"({status['utilization']:.2f}% used)")
    print(f"Fragmentation:   {status['fragment_rate']:.2f}%")
    print(f"Largest hole:    {status['largest_free_extent']} block(s)")
    print(f"Files:           {status['file_count']}")
    for f in disk.files:
        print(f"  {f.id:<20} {f.size:>10} B  {f.allocation.value:<10} "
              f"{status['file_fragments'][f.id]} extent(s)  {f.blocks}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="blockmanager", description=__doc__.strip().splitlines()[0])
    parser.add_argument('-v', '--verbose', action='store_true', help="debug logging")
    sub = parser.add_subparsers(dest='command', required=True)

    p = sub.add_parser('schedule', help="order a request queue (FCFS, SSTF, SCAN)")
    p.add_argument('policy')
    p.add_argument('head', type=int)
    p.add_argument('requests', type=int, nargs='*')
    p.add_argument('--max-block', type=int, default=None)
    p.add_argument('--direction', default='up')
    p.set_defaults(func=cmd_schedule)

    p = sub.add_parser('new', help="write an empty disk snapshot")
    p.add_argument('path')
    p.add_argument('--format', default='default', choices=sorted(VirtualDisk.FORMATS))
    p.add_argument('--blocks', type=int, default=None)
    p.add_argument('--block-size', type=int, default=None)
    p.set_defaults(func=cmd_new)

    p = sub.add_parser('create', help="allocate a file")
    p.add_argument('path')
    p.add_argument('file_id')
    p.add_argument('size', type=int)
    p.add_argument('--strategy', default='continuous')
    p.add_argument('--seed', type=int, default=None)
    p.set_defaults(func=cmd_create)

    p = sub.add_parser('delete', help="delete a file")
    p.add_argument('path')
    p.add_argument('file_id')
    p.set_defaults(func=cmd_delete)

    p = sub.add_parser('compact', help="defragment the disk")
    p.add_argument('path')
    p.set_defaults(func=cmd_compact)

    p = sub.add_parser('status', help="show usage and fragmentation")
    p.add_argument('path')
    p.set_defaults(func=cmd_status)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.verbose)
    try:
        return args.func(args)
    except (BlockDeviceError, ValueError, OSError) as e:
        logger.error(f"{args.command} failed: {e}")
        print(f"Error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
