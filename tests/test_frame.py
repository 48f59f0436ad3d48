"""Frame module tests"""
import pytest
import dataclasses

from space_tree.frame import Frame, frame_factory
from space_tree.geometry import RigidTransform

__all__ = ['TestFrame']

class TestFrame():
    def test_defaults(self):
        frame = Frame('a', 'world')

        assert frame.transform.approx_equal(RigidTransform.identity())
        assert frame.metadata == ''
        assert frame.freshness > 0.

    def test_touched(self):
        frame = Frame('a', 'world', RigidTransform(translation=[1, 2, 3]), 1., 'meta')
        touched = frame.touched(7.)

        assert touched.freshness == 7.
        assert touched == frame
        assert touched.transform is frame.transform
        assert frame.freshness == 1.

    def test_equality_ignores_pose(self):
        frame = Frame('a', 'world', RigidTransform(translation=[1, 0, 0]), 1.)
        moved = Frame('a', 'world', RigidTransform(translation=[0, 5, 0]), 2.)

        assert frame == moved
        assert hash(frame) == hash(moved)
        assert not frame.transform.approx_equal(moved.transform)
        assert frame != Frame('a', 'other')
        assert frame != Frame('a', 'world', metadata='meta')

    def test_frozen(self):
        with pytest.raises(dataclasses.FrozenInstanceError):
            Frame('a', 'world').parent_name = 'other'

    def test_frame_factory(self):
        pair = frame_factory('a', 'world', metadata='meta')
        assert list(pair) == ['a']
        assert pair['a'].metadata == 'meta'
