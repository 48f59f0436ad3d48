"""frame.py - Timestamped Reference Frames"""

# %% Imports
from __future__ import annotations

import time
import dataclasses
from dataclasses import dataclass, field

from space_tree.geometry import RigidTransform

__all__ = ['Frame', 'frame_factory']


# %% Core Functions
@dataclass(frozen=True)
class Frame:
    """Named reference frame positioned relative to a parent frame

    Equality and hashing compare :code:`name`, :code:`parent_name` and :code:`metadata`
    only. Two frames that differ in transform or freshness compare equal, use
    :meth:`RigidTransform.approx_equal` to compare poses.

    :param name: Frame name, unique key in the buffer
    :type name: str

    :param parent_name: Name of the frame this one is defined relative to, need not exist
    :type parent_name: str

    :param transform: Pose of the frame relative to its parent, defaults to identity
    :type transform: RigidTransform, optional

    :param freshness: Monotonic liveness timestamp, defaults to :code:`time.monotonic()`
    :type freshness: float, optional

    :param metadata: Opaque payload, defaults to ''
    :type metadata: str, optional
    """
    name: str
    parent_name: str
    transform: RigidTransform = field(default_factory=RigidTransform.identity, compare=False)
    freshness: float = field(default_factory=time.monotonic, compare=False)
    metadata: str = ''

    def touched(self, now: float | None = None) -> Frame:
        """Copy with refreshed freshness, all other fields unchanged

        :param now: Freshness timestamp, defaults to :code:`time.monotonic()`
        :type now: float | None, optional

        :return: Refreshed frame
        :rtype: Frame
        """
        return dataclasses.replace(self, freshness=time.monotonic() if now is None else now)


def frame_factory(name: str, parent_name: str, **kwargs) -> dict[str, Frame]:
    """Frame dictionary factory

    :param name: Frame name
    :type name: str

    :param parent_name: Parent frame name
    :type parent_name: str

    :return: Frame dictionary pair
    :rtype: dict[str, Frame]
    """
    return {name: Frame(name, parent_name, **kwargs)}
