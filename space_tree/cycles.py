"""cycles.py - Cycle Detection over Frame Snapshots"""
from __future__ import annotations

import typing as typ
from collections import defaultdict

from space_tree.frame import Frame

__all__ = ['children_map', 'get_frame_children', 'is_cyclic', 'is_cyclic_all']

Snapshot = typ.Mapping[str, Frame]

# %% Children
def children_map(snapshot: Snapshot) -> dict[str, list[Frame]]:
    """Groups frames by parent name

    :param snapshot: Frame buffer snapshot
    :type snapshot: typing.Mapping[str, Frame]

    :return: Children of every parent name, in snapshot order
    :rtype: dict[str, list[Frame]]
    """
    children = defaultdict(list)
    for frame in snapshot.values():
        children[frame.parent_name].append(frame)
    return dict(children)

def get_frame_children(name: str, snapshot: Snapshot) -> list[Frame]:
    """Frames whose parent is `name`. The parent itself does not have to be in
    the snapshot.

    :param name: Parent frame name
    :type name: str

    :param snapshot: Frame buffer snapshot
    :type snapshot: typing.Mapping[str, Frame]

    :return: Child frames, in snapshot order
    :rtype: list[Frame]
    """
    return [frame for frame in snapshot.values() if frame.parent_name == name]

# %% Cycles
def is_cyclic(start: str, snapshot: Snapshot,
              children: dict[str, list[Frame]] | None = None) -> bool:
    """Checks the tree segment below `start` for cycles by walking descendant
    edges depth first

    :param start: Frame name to start from, need not be in the snapshot
    :type start: str

    :param snapshot: Frame buffer snapshot
    :type snapshot: typing.Mapping[str, Frame]

    :param children: Precomputed :func:`children_map` of the snapshot, defaults to None
    :type children: dict[str, list[Frame]] | None, optional

    :return: Whether a frame reachable from `start` is visited twice
    :rtype: bool
    """
    children = children_map(snapshot) if children is None else children

    stack = [start]
    visited = set()
    while stack:
        current = stack.pop()
        if current in visited and current in snapshot:
            return True

        visited.add(current)
        stack.extend(child.name for child in children.get(current, ()))

    return False

def is_cyclic_all(snapshot: Snapshot) -> bool:
    """Checks every frame of a possibly disconnected snapshot for cycles

    :param snapshot: Frame buffer snapshot
    :type snapshot: typing.Mapping[str, Frame]

    :return: Whether any component contains a cycle
    :rtype: bool
    """
    children = children_map(snapshot)
    return any(is_cyclic(name, snapshot, children) for name in snapshot)
