"""SE(3) rigid-body transforms as (..., 4, 4) homogeneous matrices.

All functions are pure and operate on JAX arrays. Only the rigid subset is
used here: no scale and no shear, so the inverse has a closed form.
"""

import jax
import jax.numpy as jnp

from . import so3

Array = jax.Array


def identity() -> Array:
    """The 4x4 identity transform."""
    return jnp.eye(4)


def from_position_and_rotation(p: Array, R: Array) -> Array:
    """
    Construct SE(3) transform from position and rotation.

    Args:
        p: (..., 3) position vector
        R: (..., 3, 3) rotation matrix

    Returns:
        (..., 4, 4) homogeneous transformation matrix
    """
    p = jnp.asarray(p, dtype=jnp.result_type(float))
    R = jnp.asarray(R, dtype=p.dtype)
    batch_shape = jnp.broadcast_shapes(p.shape[:-1], R.shape[:-2])

    T = jnp.zeros(batch_shape + (4, 4), dtype=p.dtype)
    T = T.at[..., :3, :3].set(jnp.broadcast_to(R, batch_shape + (3, 3)))
    T = T.at[..., :3, 3].set(jnp.broadcast_to(p, batch_shape + (3,)))
    return T.at[..., 3, 3].set(1.0)


def exp(twist: Array) -> Array:
    """
    SE(3) exponential map of a joint twist.

    Revolute joints use a pure rotation twist ``[0, 0, 0, wx, wy, wz]`` scaled
    by the angle; prismatic joints a pure translation twist ``[vx, vy, vz, 0, 0, 0]``
    scaled by the displacement. Mixed twists are handled as well.

    Args:
        twist: (..., 6) array [vx, vy, vz, wx, wy, wz]

    Returns:
        (..., 4, 4) transformation matrices
    """
    v, w = twist[..., :3], twist[..., 3:]
    angle = jnp.linalg.norm(w, axis=-1, keepdims=True)
    angle_sq = angle * angle
    small_angle = angle < 1e-6
    safe_angle = jnp.where(small_angle, 1.0, angle)

    # V = I + A*K + B*K^2, with series expansions near zero
    A = jnp.where(small_angle, 0.5 - angle_sq / 24.0,
                  (1.0 - jnp.cos(angle)) / (safe_angle * safe_angle))
    B = jnp.where(small_angle, 1.0 / 6.0 - angle_sq / 120.0,
                  (angle - jnp.sin(angle)) / (safe_angle * safe_angle * safe_angle))

    K = so3.skew_symmetric(w)
    I = jnp.broadcast_to(jnp.eye(3, dtype=twist.dtype), K.shape)
    V = I + A[..., None] * K + B[..., None] * jnp.matmul(K, K)

    t = jnp.einsum("...ij,...j->...i", V, v)
    return from_position_and_rotation(t, so3.exp(w))


def multiply(T1: Array, T2: Array) -> Array:
    """Compose transforms: apply ``T2`` first, then ``T1``."""
    return jnp.matmul(T1, T2)


def inverse(T: Array) -> Array:
    """
    Inverse of a rigid transform.

    Uses the block structure: T^-1 = [[R^T, -R^T @ t], [0, 1]]
    """
    R_inv = so3.inverse(T[..., :3, :3])
    t_inv = -jnp.einsum("...ij,...j->...i", R_inv, T[..., :3, 3])
    return from_position_and_rotation(t_inv, R_inv)


def apply(T: Array, points: Array) -> Array:
    """
    Apply transformation to points.

    Args:
        T: (4, 4) transformation matrix
        points: (3,) or (N, 3) points

    Returns:
        transformed points with the input shape
    """
    return jnp.einsum("ij,...j->...i", T[:3, :3], points) + T[:3, 3]


def get_position(T: Array) -> Array:
    """Translation part of a transform."""
    return T[..., :3, 3]


def get_rotation(T: Array) -> Array:
    """Rotation part of a transform."""
    return T[..., :3, :3]
