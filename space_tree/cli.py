"""cli.py - Command Line Entry Point

Loads an optional scenario directory into a fresh buffer, then either prints
one lookup and exits or runs the maintenance loop (and the tree printer with
:code:`--visualize`) until interrupted.
"""
from __future__ import annotations

import typing as typ

import argparse
import asyncio
import logging

from space_tree.buffer import FrameBuffer
from space_tree.config import BUFFER_MAINTAIN_RATE, VISUALIZE_REFRESH_RATE, WORLD_FRAME
from space_tree.cycles import is_cyclic_all
from space_tree.graph import FrameGraph
from space_tree.loading import load_frames_from_dir
from space_tree.lookup import lookup
from space_tree.logging_config import setup_logging
from space_tree.treeviz import visualize_tree

__all__ = ['build_parser', 'main']

logger = logging.getLogger(__name__)

LOG_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR')

# %% Arguments
def _positive_float(value: str) -> float:
    rate = float(value)
    if rate <= 0:
        raise argparse.ArgumentTypeError(f"expected a positive number, got {value}")
    return rate

def build_parser() -> argparse.ArgumentParser:
    """Builds the :code:`space-tree` argument parser

    :return: Argument parser
    :rtype: argparse.ArgumentParser
    """
    parser = argparse.ArgumentParser(prog='space-tree', description="Live frame graph buffer")
    parser.add_argument('--scenario', default=None,
                        help="Directory of JSON frame files to load at startup")
    parser.add_argument('-v', '--visualize', action='store_true',
                        help="Print the frame forest periodically")
    parser.add_argument('--lookup', nargs=2, metavar=('PARENT', 'CHILD'), default=None,
                        help="Print the pose of CHILD in PARENT and exit")
    parser.add_argument('--root', default=WORLD_FRAME, help="Common root frame of lookups")

    rates = parser.add_argument_group('rates', "Loop periods in seconds")
    rates.add_argument('--maintain-rate', type=_positive_float, default=BUFFER_MAINTAIN_RATE,
                       help="Seconds between buffer refresh cycles")
    rates.add_argument('--refresh-rate', type=_positive_float, default=VISUALIZE_REFRESH_RATE,
                       help="Seconds between tree renderings")

    logs = parser.add_argument_group('logging')
    logs.add_argument('--log-level', default='INFO', choices=LOG_LEVELS)
    logs.add_argument('--log-file', default=None)
    return parser

# %% Commands
def _cmd_lookup(args: argparse.Namespace, buffer: FrameBuffer) -> int:
    """Prints the pose of the requested child in the requested parent

    :return: Exit code, 1 when no transform exists
    :rtype: int
    """
    parent, child = args.lookup
    snapshot = buffer.snapshot()
    result = lookup(parent, child, args.root, snapshot)

    if result is None:
        print(f"[ERROR] No transform from '{parent}' to '{child}' through '{args.root}'.")
        if is_cyclic_all(snapshot):
            for loop in FrameGraph.from_snapshot(snapshot).loops():
                print(f"        Cycle: {' -> '.join(loop)}")
        return 1

    print(f"Pose of '{child}' in '{parent}'")
    print(f"  Translation: {result.transform.translation.tolist()}")
    print(f"  Quaternion (x, y, z, w): {result.transform.as_quaternion().tolist()}")
    return 0

async def _serve(args: argparse.Namespace, buffer: FrameBuffer) -> None:
    tasks = [buffer.maintain(args.maintain_rate)]
    if args.visualize:
        tasks.append(visualize_tree(buffer, args.refresh_rate))
    await asyncio.gather(*tasks)

# %% Entry point
def main(argv: typ.Sequence[str] | None = None) -> int:
    """Runs the command line interface

    :param argv: Arguments without the program name, defaults to :code:`sys.argv[1:]`
    :type argv: typing.Sequence[str] | None, optional

    :return: Process exit code
    :rtype: int
    """
    args = build_parser().parse_args(argv)
    setup_logging(getattr(logging, args.log_level), args.log_file)

    buffer = FrameBuffer()
    if args.scenario is not None:
        load_frames_from_dir(args.scenario, buffer)

    if args.lookup is not None:
        return _cmd_lookup(args, buffer)

    try:
        asyncio.run(_serve(args, buffer))
    except KeyboardInterrupt:
        logger.info("Interrupted, shutting down.")
    return 0

if __name__ == '__main__':
    raise SystemExit(main())
