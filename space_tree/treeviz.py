"""treeviz.py - Text Rendering of the Frame Forest"""
from __future__ import annotations

import typing as typ

import asyncio
import logging
import sys

from space_tree.config import MAX_RECURSION_DEPTH, VISUALIZE_REFRESH_RATE
from space_tree.frame import Frame
from space_tree.graph import FrameGraph

if typ.TYPE_CHECKING:
    from space_tree.buffer import FrameBuffer

__all__ = ['get_tree_roots', 'render_tree', 'render_forest', 'visualize_tree']

logger = logging.getLogger(__name__)

BRANCH, LAST_BRANCH = '├── ', '└── '
PIPE, SPACE = '│   ', '    '
DEPTH_LIMIT_LABEL = ' (depth limit reached)'

def get_tree_roots(snapshot: typ.Mapping[str, Frame]) -> list[str]:
    """Names that are a parent of some frame without being a frame themselves"""
    return FrameGraph.from_snapshot(snapshot).roots()

def render_tree(root: str, snapshot: typ.Mapping[str, Frame],
                max_depth: int = MAX_RECURSION_DEPTH,
                graph: FrameGraph | None = None) -> str:
    """Renders the tree below `root` with box drawing connectors

    :param root: Name of the top node
    :type root: str

    :param snapshot: Frame buffer snapshot
    :type snapshot: typing.Mapping[str, Frame]

    :param max_depth: Deepest level expanded, defaults to :data:`MAX_RECURSION_DEPTH`
    :type max_depth: int, optional

    :param graph: Prebuilt graph of the snapshot, defaults to None
    :type graph: FrameGraph | None, optional

    :return: One line per node, children sorted by name
    :rtype: str
    """
    graph = FrameGraph.from_snapshot(snapshot) if graph is None else graph

    lines = []
    # (name, depth, indent prefix, connector)
    stack = [(root, 0, '', '')]
    while stack:
        name, depth, prefix, connector = stack.pop()

        if depth > max_depth:
            logger.warning("Maximum recursion depth reached for frame '%s'.", name)
            lines.append(prefix + connector + name + DEPTH_LIMIT_LABEL)
            continue
        lines.append(prefix + connector + name)

        if depth > 0:
            prefix += SPACE if connector == LAST_BRANCH else PIPE

        children = graph.children(name)
        for i, child in reversed(list(enumerate(children))):
            stack.append((child, depth + 1, prefix,
                          LAST_BRANCH if i == len(children) - 1 else BRANCH))

    return '\n'.join(lines) + '\n'

def render_forest(snapshot: typ.Mapping[str, Frame],
                  max_depth: int = MAX_RECURSION_DEPTH) -> str:
    """Renders every tree of the snapshot, roots in name order"""
    graph = FrameGraph.from_snapshot(snapshot)
    return ''.join(render_tree(root, snapshot, max_depth, graph) for root in graph.roots())

async def visualize_tree(buffer: FrameBuffer,
                         refresh_rate: float = VISUALIZE_REFRESH_RATE,
                         stream: typ.TextIO | None = None):
    """Prints the frame forest of `buffer` every `refresh_rate` seconds until cancelled

    :param buffer: Frame buffer to render
    :type buffer: FrameBuffer

    :param refresh_rate: Rendering period in seconds, defaults to :data:`VISUALIZE_REFRESH_RATE`
    :type refresh_rate: float, optional

    :param stream: Output stream, defaults to :code:`sys.stdout`
    :type stream: typing.TextIO | None, optional

    :raises ValueError: If `refresh_rate` is not positive
    """
    if refresh_rate <= 0:
        raise ValueError('Visualization refresh rate must be positive')

    stream = sys.stdout if stream is None else stream
    while True:
        forest = render_forest(buffer.snapshot())
        if forest:
            print(forest, file=stream, flush=True)
        await asyncio.sleep(refresh_rate)
