"""geometry.py - Rigid Transforms and Transform Chains"""
from __future__ import annotations

import typing as typ
import numpy.typing as npt

import functools
import operator as op

import numpy as np

import scipy.spatial.transform as sptl

from space_tree.utilities import sequence_to_index

__all__ = ['RigidTransform',                        # rigid transforms
           'compose']                               # transform chains

# %% Rigid Transforms
class RigidTransform():
    """Rotation and translation in :math:`\\mathbb{R}^{3}` without scale or shear.
    Wraps a :code:`scipy.spatial.transform.Rotation` object for efficient
    rotation computations.

    A frame transform is the pose of the frame relative to its parent: applying
    it to a point expressed in the child frame yields the same point expressed
    in the parent frame.

    :param rotation: Rotation operator, defaults to identity
    :type rotation: scipy.spatial.transform.Rotation | None, optional

    :param translation: Child origin position in parent frame, defaults to :code:`numpy.zeros(3)`
    :type translation: numpy.typing.ArrayLike | None, optional
    """
    def __init__(self,
                 rotation: sptl.Rotation | None = None,
                 translation: npt.ArrayLike | None = None):
        """Initialize RigidTransform"""
        self.rotation = rotation if rotation is not None else sptl.Rotation.identity()
        self.translation = translation if translation is not None else np.zeros(3)

    translation: np.ndarray = property(op.attrgetter('_translation'))

    @translation.setter
    def translation(self, value: npt.ArrayLike):
        """Sets translation to array conversion with double datatype

        :param value: Child origin position in parent frame
        :type value: numpy.typing.ArrayLike

        :raises ValueError: If `value` is not a three dimensional vector
        """
        value = np.array(value, dtype=np.double)
        if value.shape != (3,):
            raise ValueError(f"Translation must have shape (3,), got {value.shape}")
        self._translation = value

    # Constructors
    @classmethod
    def identity(cls) -> RigidTransform:
        """Identity transform

        :return: Transform with no rotation and no translation
        :rtype: RigidTransform
        """
        return cls()

    @classmethod
    def from_quaternion(cls, quaternion: npt.ArrayLike,
                        translation: npt.ArrayLike | None = None) -> RigidTransform:
        """Transform from a scalar-last quaternion :code:`[x, y, z, w]`

        :param quaternion: Rotation quaternion, normalized on construction
        :type quaternion: numpy.typing.ArrayLike

        :param translation: Translation vector, defaults to :code:`numpy.zeros(3)`
        :type translation: numpy.typing.ArrayLike | None, optional

        :raises ValueError: If the quaternion has zero norm

        :return: Rigid transform
        :rtype: RigidTransform
        """
        return cls(sptl.Rotation.from_quat(quaternion), translation)

    @classmethod
    def from_euler(cls, angles: npt.ArrayLike,
                   translation: npt.ArrayLike | None = None,
                   sequence: str = 'ZYX', degrees: bool = True) -> RigidTransform:
        """Transform from Euler / Tait-Bryan angles

        :param angles: Rotation angles [X,Y,Z], applied in `sequence` order
        :type angles: numpy.typing.ArrayLike

        :param translation: Translation vector, defaults to :code:`numpy.zeros(3)`
        :type translation: numpy.typing.ArrayLike | None, optional

        :param sequence: Rotation angle sequence, defaults to 'ZYX' (intrinsic)
        :type sequence: str, optional

        :param degrees: Unit of rotation angles, defaults to True
        :type degrees: bool, optional

        :return: Rigid transform
        :rtype: RigidTransform
        """
        angles = np.asarray(angles, dtype=np.double)
        rotation = sptl.Rotation.from_euler(
            sequence, angles[sequence_to_index(sequence)], degrees)
        return cls(rotation, translation)

    # Algebra
    def __mul__(self, other: RigidTransform) -> RigidTransform:
        """Composition, `other` is applied first"""
        if not isinstance(other, RigidTransform):
            return NotImplemented
        return RigidTransform(self.rotation * other.rotation,
                              self.rotation.apply(other.translation) + self.translation)

    def inv(self) -> RigidTransform:
        """Inverse transform

        :return: Transform undoing this one
        :rtype: RigidTransform
        """
        rotation = self.rotation.inv()
        return RigidTransform(rotation, -rotation.apply(self.translation))

    def apply(self, points: npt.ArrayLike, inverse: bool = False) -> np.ndarray:
        """Applies transform to input point(s)

        :param points: Input point(s) of shape :math:`(3,)` or :math:`(n,3)`
        :type points: numpy.typing.ArrayLike

        :param inverse: Apply the inverse transform, defaults to False
        :type inverse: bool, optional

        :return: Transformed point(s)
        :rtype: numpy.ndarray
        """
        points = np.asarray(points, dtype=np.double)
        if inverse:
            return self.rotation.apply(points - self.translation, inverse=True)
        return self.rotation.apply(points) + self.translation

    def transform(self, point: npt.ArrayLike, orientation: str = 'f') -> np.ndarray:
        """Streamline rigid transformations

        :param point: Point position vector
        :type point: numpy.typing.ArrayLike

        :param orientation: Transformation orientation, defaults to 'f'
        :type orientation: str, optional

        :raises ValueError: If `orientation` is not recognized

        :return: Point position vector in new frame
        :rtype: numpy.ndarray
        """
        if orientation in ['f', 'forward']:
            return self.apply(point)
        elif orientation in ['r', 'i', 'reverse', 'inverse']:
            return self.apply(point, inverse=True)
        else:
            raise ValueError('Transformation orientation argument not valid')

    def rotate(self, direction: npt.ArrayLike, orientation: str = 'f') -> np.ndarray:
        """Rotate a direction vector, ignoring translation

        :param direction: Direction vector
        :type direction: numpy.typing.ArrayLike

        :param orientation: Rotation orientation, defaults to 'f'
        :type orientation: str, optional

        :raises ValueError: If `orientation` is not recognized

        :return: Direction vector in new frame
        :rtype: numpy.ndarray
        """
        if orientation in ['f', 'forward']:
            return self.rotation.apply(np.asarray(direction, dtype=np.double))
        elif orientation in ['r', 'i', 'reverse', 'inverse']:
            return self.rotation.apply(np.asarray(direction, dtype=np.double), inverse=True)
        else:
            raise ValueError('Rotation orientation argument not valid')

    # Conversions
    def as_matrix(self) -> np.ndarray:
        """Homogeneous transformation matrix

        :return: Matrix of shape :math:`(4,4)`
        :rtype: numpy.ndarray
        """
        H = np.eye(4)
        H[:3, :3] = self.rotation.as_matrix()
        H[:3, 3] = self.translation
        return H

    def as_quaternion(self) -> np.ndarray:
        """Scalar-last quaternion :code:`[x, y, z, w]`"""
        return self.rotation.as_quat()

    def approx_equal(self, other: RigidTransform, atol: float = 1e-9) -> bool:
        """Compares translation and rotation within tolerance

        :param other: Transform to compare against
        :type other: RigidTransform

        :param atol: Absolute tolerance on translation and rotation angle, defaults to 1e-9
        :type atol: float, optional

        :return: Whether both transforms agree
        :rtype: bool
        """
        if not np.allclose(self.translation, other.translation, rtol=0, atol=atol):
            return False
        return bool((self.rotation * other.rotation.inv()).magnitude() <= atol)

    def __str__(self) -> str:
        return (f"RigidTransform(translation={self.translation.tolist()}, "
                f"quaternion={self.as_quaternion().tolist()})")

    def __repr__(self) -> str:
        return str(self)

# %% Transform Chains
def compose(transforms: typ.Iterable[RigidTransform]) -> RigidTransform:
    """Left fold of a transform sequence starting from the identity

    :param transforms: Transforms in composition order
    :type transforms: typing.Iterable[RigidTransform]

    :return: Product of the sequence, identity when empty
    :rtype: RigidTransform
    """
    return functools.reduce(op.mul, transforms, RigidTransform.identity())
