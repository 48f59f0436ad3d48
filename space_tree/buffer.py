"""buffer.py - Shared Frame Buffer and Maintenance Loop"""
from __future__ import annotations

import typing as typ

import asyncio
import logging
import threading
import time
from types import MappingProxyType

from space_tree.config import BUFFER_MAINTAIN_RATE, MAX_TRANSFORM_CHAIN, WORLD_FRAME
from space_tree.frame import Frame
from space_tree.lookup import lookup

__all__ = ['FrameBuffer']

logger = logging.getLogger(__name__)

# %% Frame Buffer
class FrameBuffer():
    """Mapping from frame name to frame shared between producers, the
    maintenance loop, and queries. The lock is only held to copy or swap the
    mapping, traversals always run on a snapshot.

    :param frames: Initial frames, defaults to None
    :type frames: typing.Iterable[Frame] | None, optional
    """
    def __init__(self, frames: typ.Iterable[Frame] | None = None):
        """Initialize FrameBuffer"""
        self._lock = threading.Lock()
        self._frames: dict[str, Frame] = {}
        if frames is not None:
            self.insert_or_update(frames)

    def __len__(self) -> int:
        with self._lock:
            return len(self._frames)

    def __contains__(self, name: object) -> bool:
        with self._lock:
            return name in self._frames

    # Access
    def snapshot(self) -> typ.Mapping[str, Frame]:
        """Consistent point-in-time copy of the buffer

        :return: Read-only frame name to frame mapping
        :rtype: typing.Mapping[str, Frame]
        """
        with self._lock:
            return MappingProxyType(dict(self._frames))

    def swap(self, frames: typ.Mapping[str, Frame]):
        """Replaces the buffer contents

        :param frames: New frame name to frame mapping
        :type frames: typing.Mapping[str, Frame]
        """
        frames = dict(frames)
        with self._lock:
            self._frames = frames

    # Mutation
    def insert_or_update(self, frames: typ.Iterable[Frame]):
        """Inserts frames, replacing existing frames of the same name. Frames
        named 'world' are rejected and the remaining frames are still inserted.
        Acyclicity is not checked here but on lookup.

        :param frames: Frames to insert
        :type frames: typing.Iterable[Frame]

        :raises TypeError: If an element is not a :class:`Frame`
        """
        frames = list(frames)
        for frame in frames:
            if not isinstance(frame, Frame):
                raise TypeError(f"Expected Frame, got {type(frame).__name__}")

        with self._lock:
            for frame in frames:
                if frame.name == WORLD_FRAME:
                    logger.error("Frame name '%s' is reserved.", WORLD_FRAME)
                    continue

                if frame.name in self._frames:
                    logger.warning("Frame '%s' already exists, now updated.", frame.name)
                else:
                    logger.info("Frame '%s' added as child of frame '%s'.",
                                frame.name, frame.parent_name)
                self._frames[frame.name] = frame

    def evict(self, names: typ.Iterable[str]) -> list[str]:
        """Removes frames by name, unknown names are ignored

        :param names: Frame names to remove
        :type names: typing.Iterable[str]

        :return: Names that were removed
        :rtype: list[str]
        """
        with self._lock:
            removed = [name for name in names if self._frames.pop(name, None) is not None]

        if removed:
            logger.info("Frames %s evicted.", removed)
        return removed

    def clear(self):
        """Removes all frames"""
        self.swap({})
        logger.info("Frame buffer cleared.")

    def refresh(self, now: float | None = None):
        """Stamps every frame with a new freshness, leaving topology and
        transforms unchanged. Frames replaced or evicted while the refreshed
        mapping was being built keep their newer state.

        :param now: Freshness timestamp, defaults to :code:`time.monotonic()`
        :type now: float | None, optional
        """
        now = time.monotonic() if now is None else now

        snapshot = self.snapshot()
        refreshed = {name: frame.touched(now) for name, frame in snapshot.items()}

        with self._lock:
            current = self._frames
            self._frames = {
                name: refreshed[name] if snapshot.get(name) is frame else frame
                for name, frame in current.items()}

    # Queries
    def lookup(self, parent_name: str, child_name: str, root_name: str = WORLD_FRAME,
               max_chain: int = MAX_TRANSFORM_CHAIN) -> Frame | None:
        """Pose of `child_name` relative to `parent_name` on a fresh snapshot,
        see :func:`space_tree.lookup.lookup`"""
        return lookup(parent_name, child_name, root_name, self.snapshot(), max_chain)

    # Maintenance
    async def maintain(self, rate: float = BUFFER_MAINTAIN_RATE):
        """Refreshes the buffer every `rate` seconds until cancelled

        :param rate: Refresh period in seconds, defaults to :data:`BUFFER_MAINTAIN_RATE`
        :type rate: float, optional

        :raises ValueError: If `rate` is not positive
        """
        if rate <= 0:
            raise ValueError('Maintenance rate must be positive')

        logger.info("Frame buffer maintenance started, every %g s.", rate)
        try:
            while True:
                self.refresh()
                await asyncio.sleep(rate)
        finally:
            logger.info("Frame buffer maintenance stopped.")
