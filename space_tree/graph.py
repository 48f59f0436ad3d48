"""graph.py - Frame Graph Views of Buffer Snapshots"""
from __future__ import annotations

import typing as typ

import numpy as np

import networkx as nx
import matplotlib.pyplot as plt

from space_tree.config import WORLD_FRAME
from space_tree.frame import Frame
from space_tree.geometry import RigidTransform

__all__ = ['FrameGraph']

AXIS_COLORS = ('r', 'g', 'b')

# %% Frame Graph
class FrameGraph(nx.DiGraph):
    """Reference frame graph network built from a buffer snapshot. Edges point
    from parent to child and carry the child frame transform; frames are stored
    on their nodes, dangling parent names are nodes without a frame."""

    @classmethod
    def from_snapshot(cls, snapshot: typ.Mapping[str, Frame]) -> FrameGraph:
        """Builds the graph of a snapshot

        :param snapshot: Frame buffer snapshot
        :type snapshot: typing.Mapping[str, Frame]

        :return: Frame graph
        :rtype: FrameGraph
        """
        graph = cls()
        for name, frame in snapshot.items():
            graph.add_edge(frame.parent_name, name, transform=frame.transform)
            graph.nodes[name]['frame'] = frame
        return graph

    # Traversal
    def roots(self) -> list[str]:
        """Forest roots: parent names that are not frames themselves. Frames on
        a cycle are never below a root.

        :return: Sorted root names
        :rtype: list[str]
        """
        return sorted(node for node, degree in self.in_degree() if degree == 0)

    def children(self, name: str) -> list[str]:
        """Sorted child frame names of `name`"""
        if name not in self:
            return []
        return sorted(self.successors(name))

    def loops(self) -> list[list[str]]:
        """Directed cycles of the graph, each listed along parent to child edges

        :return: List of cycles as frame name lists
        :rtype: list[list[str]]
        """
        return [list(cycle) for cycle in nx.simple_cycles(self)]

    def poses(self, root: str = WORLD_FRAME) -> dict[str, RigidTransform]:
        """Pose of every frame below `root` expressed in the root frame

        :param root: Reference frame name, defaults to 'world'
        :type root: str, optional

        :return: Frame name to pose mapping, including the root itself
        :rtype: dict[str, RigidTransform]
        """
        poses = {root: RigidTransform.identity()}
        if root not in self:
            return poses

        for parent, child in nx.bfs_edges(self, root):
            poses[child] = poses[parent] * self.edges[parent, child]['transform']
        return poses

    # Plotting
    def plot(self, ax: plt.Axes | None = None, root: str = WORLD_FRAME, size: float = 1):
        """3D plot of the frames below `root`

        :param ax: Plotting axes with a 3D projection, defaults to a new figure
        :type ax: matplotlib.pyplot.Axes | None, optional

        :param root: Reference frame to plot in, defaults to 'world'
        :type root: str, optional

        :param size: Quiver size, defaults to 1
        :type size: float, optional

        :return: Plotting axes
        :rtype: matplotlib.pyplot.Axes
        """
        if ax is None:
            ax = plt.figure().add_subplot(projection='3d')

        for name, pose in self.poses(root).items():
            O = pose.translation
            for i in range(3):
                E = pose.rotate(np.eye(3)[i])
                ax.quiver(*O, *E, color=AXIS_COLORS[i], length=size, normalize=True)
            ax.text(*O, name)

        ax.set_xlabel('X')
        ax.set_ylabel('Y')
        ax.set_zlabel('Z')
        ax.set_aspect('equal')

        return ax
