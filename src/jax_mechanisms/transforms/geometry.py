"""Frames and the conversions between frames, transforms and quaternions.

A :class:`Frame` is a rigid pose: an origin plus an orthonormal basis whose
columns are the x, y and z axes. Every conversion here is relative to the
world reference frame (origin at zero, identity basis).
"""

from typing import Sequence

import jax
import jax.numpy as jnp
from flax import struct

from . import se3, so3

Array = jax.Array


@struct.dataclass
class Frame:
    """Immutable rigid pose.

    Attributes:
        origin: (3,) position of the frame origin.
        basis: (3, 3) rotation whose columns are the frame axes.
    """
    origin: Array
    basis: Array

    @classmethod
    def identity(cls) -> "Frame":
        """The world reference frame."""
        return cls(origin=jnp.zeros(3), basis=jnp.eye(3))

    @property
    def x_axis(self) -> Array:
        return self.basis[:, 0]

    @property
    def y_axis(self) -> Array:
        return self.basis[:, 1]

    @property
    def z_axis(self) -> Array:
        return self.basis[:, 2]

    def transform(self, T: Array) -> "Frame":
        """Return this frame moved by the rigid transform ``T``."""
        return transform_to_frame(se3.multiply(T, frame_to_transform(self)))


def frame_to_transform(frame: Frame) -> Array:
    """Transform carrying the world frame onto ``frame``."""
    return se3.from_position_and_rotation(frame.origin, frame.basis)


def transform_to_frame(T: Array) -> Frame:
    """Frame obtained by applying ``T`` to the world frame."""
    return Frame(origin=se3.get_position(T), basis=se3.get_rotation(T))


def plane_to_plane(source: Frame, target: Frame) -> Array:
    """Relative transform that moves ``source`` onto ``target``."""
    return se3.multiply(frame_to_transform(target), se3.inverse(frame_to_transform(source)))


def frame_from_quaternion(point: Sequence[float], quaternion: Sequence[float]) -> Frame:
    """
    Build a frame from a position and a unit quaternion.

    Args:
        point: (x, y, z) origin
        quaternion: (w, x, y, z) orientation, normalized before use

    Returns:
        Frame at ``point`` rotated by ``quaternion``
    """
    q = jnp.asarray(quaternion, dtype=float)
    return Frame(origin=jnp.asarray(point, dtype=float), basis=so3.from_quaternion(q))


def quaternion_from_frame(frame: Frame) -> Array:
    """Return ``(x, y, z, q0, q1, q2, q3)`` with the scalar part ``q0`` first."""
    return jnp.concatenate([frame.origin, so3.to_quaternion(frame.basis)])


def deg_to_rad(value):
    return jnp.deg2rad(value)


def rad_to_deg(value):
    return jnp.rad2deg(value)
