"""lookup.py - Path Resolution and Transform Lookup"""
from __future__ import annotations

import typing as typ

import enum
import logging
import time
from collections import deque

from space_tree.config import MAX_TRANSFORM_CHAIN, WORLD_FRAME
from space_tree.cycles import children_map, is_cyclic_all
from space_tree.frame import Frame
from space_tree.geometry import RigidTransform, compose
from space_tree.graph import FrameGraph

__all__ = ['PathFailure', 'parent_to_root', 'root_to_child', 'lookup']

logger = logging.getLogger(__name__)

Snapshot = typ.Mapping[str, Frame]

class PathFailure(enum.Enum):
    """Reason a path search or lookup returned no result"""
    FRAME_NOT_FOUND = 'frame not found'
    CHAIN_LIMIT = 'transform chain limit exceeded'
    UNREACHABLE = 'frame not reachable from root'
    CYCLE = 'cycle detected'

# %% Path Resolution
def parent_to_root(parent_name: str, root_name: str, snapshot: Snapshot,
                   max_chain: int = MAX_TRANSFORM_CHAIN) -> list[RigidTransform] | None:
    """Walks upstream from a frame to the root

    :param parent_name: Frame to start from
    :type parent_name: str

    :param root_name: Root frame name
    :type root_name: str

    :param snapshot: Frame buffer snapshot
    :type snapshot: typing.Mapping[str, Frame]

    :param max_chain: Step cap, defaults to :data:`MAX_TRANSFORM_CHAIN`
    :type max_chain: int, optional

    :return: Inverse frame transforms in traversal order, whose product maps
        root frame coordinates into `parent_name` coordinates. Empty when
        `parent_name` is the root, None when the root cannot be reached.
    :rtype: list[RigidTransform] | None
    """
    if parent_name == root_name:
        return []

    path = []
    current = parent_name
    for _ in range(max_chain):
        frame = snapshot.get(current)
        if frame is None:
            logger.debug("No path from '%s' to '%s': %s ('%s').",
                         parent_name, root_name, PathFailure.FRAME_NOT_FOUND.value, current)
            return None

        path.append(frame.transform.inv())
        if frame.parent_name == root_name:
            return path
        current = frame.parent_name

    logger.debug("No path from '%s' to '%s': %s (%d).",
                 parent_name, root_name, PathFailure.CHAIN_LIMIT.value, max_chain)
    return None

def root_to_child(child_name: str, root_name: str, snapshot: Snapshot,
                  max_chain: int = MAX_TRANSFORM_CHAIN) -> list[RigidTransform] | None:
    """Breadth first search downstream from the root to a frame

    :param child_name: Frame to find
    :type child_name: str

    :param root_name: Root frame name
    :type root_name: str

    :param snapshot: Frame buffer snapshot
    :type snapshot: typing.Mapping[str, Frame]

    :param max_chain: Step cap, defaults to :data:`MAX_TRANSFORM_CHAIN`
    :type max_chain: int, optional

    :return: Frame transforms from the root down to `child_name`. Empty when
        `child_name` is the root, None when it cannot be found.
    :rtype: list[RigidTransform] | None
    """
    if child_name == root_name:
        return []

    children = children_map(snapshot)
    frontier = deque((frame.name, [frame.transform]) for frame in children.get(root_name, ()))

    for _ in range(max_chain):
        if not frontier:
            logger.debug("No path from '%s' to '%s': %s.",
                         root_name, child_name, PathFailure.UNREACHABLE.value)
            return None

        name, chain = frontier.popleft()
        if name == child_name:
            return chain

        frontier.extend((frame.name, chain + [frame.transform])
                        for frame in children.get(name, ()))

    logger.debug("No path from '%s' to '%s': %s (%d).",
                 root_name, child_name, PathFailure.CHAIN_LIMIT.value, max_chain)
    return None

# %% Lookup
def lookup(parent_name: str, child_name: str, root_name: str = WORLD_FRAME,
           snapshot: Snapshot | None = None,
           max_chain: int = MAX_TRANSFORM_CHAIN) -> Frame | None:
    """Pose of a frame relative to another through a common root

    The whole query is refused when the snapshot contains a cycle anywhere,
    even off the path between the two frames.

    :param parent_name: Frame the result is expressed in
    :type parent_name: str

    :param child_name: Frame whose pose is requested
    :type child_name: str

    :param root_name: Common root frame name, defaults to 'world'
    :type root_name: str, optional

    :param snapshot: Frame buffer snapshot, defaults to an empty snapshot
    :type snapshot: typing.Mapping[str, Frame] | None, optional

    :param max_chain: Step cap of each search, defaults to :data:`MAX_TRANSFORM_CHAIN`
    :type max_chain: int, optional

    :return: Frame named `child_name` with parent `parent_name` stamped now
        with empty metadata, or None when no answer exists
    :rtype: Frame | None
    """
    snapshot = {} if snapshot is None else snapshot

    if is_cyclic_all(snapshot):
        loops = FrameGraph.from_snapshot(snapshot).loops()
        logger.warning("Lookup of '%s' in '%s' refused: %s (%s).",
                       child_name, parent_name, PathFailure.CYCLE.value,
                       '; '.join(' -> '.join(loop) for loop in loops))
        return None

    up_chain = parent_to_root(parent_name, root_name, snapshot, max_chain)
    if up_chain is None:
        return None

    down_chain = root_to_child(child_name, root_name, snapshot, max_chain)
    if down_chain is None:
        return None

    return Frame(name=child_name,
                 parent_name=parent_name,
                 transform=compose(up_chain + down_chain),
                 freshness=time.monotonic(),
                 metadata='')
