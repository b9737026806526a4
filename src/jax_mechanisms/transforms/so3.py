"""SO(3) rotation helpers in JAX.

Rotations are stored as (..., 3, 3) matrices. Quaternions use the scalar-first
(w, x, y, z) layout, which is also the ``q1..q4`` order of the base-pose
attributes in mechanism descriptions.
"""

import jax
import jax.numpy as jnp

Array = jax.Array


def skew_symmetric(v: Array) -> Array:
    """
    Convert 3D vector to its cross-product matrix.

    Args:
        v: (..., 3) vector

    Returns:
        (..., 3, 3) skew-symmetric matrix such that ``K @ u == cross(v, u)``
    """
    zeros = jnp.zeros(v.shape[:-1], dtype=v.dtype)
    return jnp.stack([
        jnp.stack([zeros, -v[..., 2], v[..., 1]], axis=-1),
        jnp.stack([v[..., 2], zeros, -v[..., 0]], axis=-1),
        jnp.stack([-v[..., 1], v[..., 0], zeros], axis=-1),
    ], axis=-2)


def exp(log_r: Array) -> Array:
    """
    Rotation matrix from an axis-angle vector (Rodrigues' formula).

    Args:
        log_r: (..., 3) axis scaled by the rotation angle in radians

    Returns:
        (..., 3, 3) rotation matrix
    """
    angle = jnp.linalg.norm(log_r, axis=-1, keepdims=True)
    small_angle = angle < 1e-8

    # Taylor terms keep the zero rotation exact
    sin_angle = jnp.where(small_angle, angle - angle**3 / 6.0, jnp.sin(angle))
    cos_angle = jnp.where(small_angle, 1.0 - 0.5 * angle**2, jnp.cos(angle))
    axis = jnp.where(small_angle, log_r, log_r / jnp.where(small_angle, 1.0, angle))

    K = skew_symmetric(axis)
    I = jnp.broadcast_to(jnp.eye(3, dtype=log_r.dtype), log_r.shape[:-1] + (3, 3))
    return I + sin_angle[..., None] * K + (1.0 - cos_angle)[..., None] * jnp.matmul(K, K)


def inverse(R: Array) -> Array:
    """Inverse of a rotation matrix (its transpose)."""
    return jnp.swapaxes(R, -1, -2)


def from_quaternion(quaternions: Array) -> Array:
    """
    Convert quaternions to rotation matrices.

    Args:
        quaternions: (..., 4) quaternions in (w, x, y, z) format, normalized here

    Returns:
        (..., 3, 3) rotation matrices
    """
    q = quaternions / jnp.linalg.norm(quaternions, axis=-1, keepdims=True)
    w, x, y, z = jnp.moveaxis(q, -1, 0)

    return jnp.stack([
        jnp.stack([1 - 2 * (y * y + z * z), 2 * (x * y - w * z), 2 * (x * z + w * y)], axis=-1),
        jnp.stack([2 * (x * y + w * z), 1 - 2 * (x * x + z * z), 2 * (y * z - w * x)], axis=-1),
        jnp.stack([2 * (x * z - w * y), 2 * (y * z + w * x), 1 - 2 * (x * x + y * y)], axis=-1),
    ], axis=-2)


def to_quaternion(matrix: Array) -> Array:
    """
    Convert rotation matrices to unit quaternions (w, x, y, z).

    The branch is picked from the largest of the trace and the diagonal
    entries, so the division is always by a well-conditioned term. The
    result has a non-negative scalar part.

    Args:
        matrix: (..., 3, 3) rotation matrices

    Returns:
        (..., 4) quaternions
    """
    m = matrix
    trace = m[..., 0, 0] + m[..., 1, 1] + m[..., 2, 2]
    eps = jnp.finfo(m.dtype).eps

    def candidate(s, w, x, y, z):
        s = jnp.sqrt(jnp.maximum(s, eps)) * 2.0
        return jnp.stack([w / s, x / s, y / s, z / s], axis=-1)

    q_w = candidate(1.0 + trace,
                    1.0 + trace,
                    m[..., 2, 1] - m[..., 1, 2],
                    m[..., 0, 2] - m[..., 2, 0],
                    m[..., 1, 0] - m[..., 0, 1])
    q_x = candidate(1.0 + m[..., 0, 0] - m[..., 1, 1] - m[..., 2, 2],
                    m[..., 2, 1] - m[..., 1, 2],
                    1.0 + m[..., 0, 0] - m[..., 1, 1] - m[..., 2, 2],
                    m[..., 0, 1] + m[..., 1, 0],
                    m[..., 0, 2] + m[..., 2, 0])
    q_y = candidate(1.0 + m[..., 1, 1] - m[..., 0, 0] - m[..., 2, 2],
                    m[..., 0, 2] - m[..., 2, 0],
                    m[..., 0, 1] + m[..., 1, 0],
                    1.0 + m[..., 1, 1] - m[..., 0, 0] - m[..., 2, 2],
                    m[..., 1, 2] + m[..., 2, 1])
    q_z = candidate(1.0 + m[..., 2, 2] - m[..., 0, 0] - m[..., 1, 1],
                    m[..., 1, 0] - m[..., 0, 1],
                    m[..., 0, 2] + m[..., 2, 0],
                    m[..., 1, 2] + m[..., 2, 1],
                    1.0 + m[..., 2, 2] - m[..., 0, 0] - m[..., 1, 1])

    diagonal = jnp.stack([trace, m[..., 0, 0], m[..., 1, 1], m[..., 2, 2]], axis=-1)
    choice = jnp.argmax(diagonal, axis=-1)[..., None]
    q = jnp.where(choice == 0, q_w, jnp.where(choice == 1, q_x, jnp.where(choice == 2, q_y, q_z)))

    q = jnp.where(q[..., 0:1] < 0, -q, q)
    return q / jnp.linalg.norm(q, axis=-1, keepdims=True)
