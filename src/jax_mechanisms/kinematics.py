"""Kinematics solving for mechanisms.

:func:`solve` is the per-call algorithm behind :meth:`Mechanism.kinematics`.
It keeps no state between calls. The mechanism's family supplies the joint
values and the link frames; this module fixes the base frame, checks travel
limits, moves every frame onto the base and positions the link meshes.
"""

from typing import Optional, Sequence, Tuple

import jax
import jax.numpy as jnp
from flax import struct

from jax_mechanisms.core.exceptions import StructuralSolveError
from jax_mechanisms.core.joint import Joint
from jax_mechanisms.core.logging import get_logger
from jax_mechanisms.core.mechanism import Mechanism
from jax_mechanisms.core.mesh import TriangleMesh
from jax_mechanisms.core.target import Target
from jax_mechanisms.transforms.geometry import Frame, frame_to_transform, plane_to_plane

Array = jax.Array

logger = get_logger(__name__)


@struct.dataclass
class KinematicSolution:
    """Result of one solve call.

    Attributes:
        joints: (N,) joint values in working units.
        frames: N + 1 frames; ``frames[0]`` is the base.
        meshes: N + 1 positioned meshes, or empty when not requested.
        errors: Human-readable range violations.
    """
    joints: Array
    frames: Tuple[Frame, ...]
    meshes: Tuple[TriangleMesh, ...] = ()
    errors: Tuple[str, ...] = struct.field(pytree_node=False, default=())


def select_branch(candidates: Array, previous: Optional[Array] = None) -> Array:
    """
    Pick one joint configuration among several solutions of the same target.

    Args:
        candidates: (K, N) alternative joint values
        previous: (N,) joint values of the previous solution, if any

    Returns:
        The candidate closest to ``previous``, or the first candidate
    """
    candidates = jnp.asarray(candidates, dtype=float)
    if previous is None:
        return candidates[0]
    distances = jnp.linalg.norm(candidates - jnp.asarray(previous, dtype=float), axis=-1)
    return candidates[int(jnp.argmin(distances))]


def joints_out_of_range(joints: Sequence[Joint], values: Array) -> Tuple[str, ...]:
    """Messages for every joint whose value lies outside its range."""
    errors = []
    for joint in joints:
        value = float(values[joint.index])
        if not joint.range.contains(value):
            logger.warning(
                "joint_out_of_range",
                axis=joint.number + 1,
                value=value,
                min=joint.range.min,
                max=joint.range.max,
            )
            errors.append(f"Axis {joint.number + 1} is outside the permitted range.")
    return tuple(errors)


def solve(
    mechanism: Mechanism,
    target: Target,
    previous_joints=None,
    compute_meshes: bool = False,
    base_frame: Optional[Frame] = None,
) -> KinematicSolution:
    """
    Solve joint values and link frames of ``mechanism`` for ``target``.

    Args:
        mechanism: Mechanism to solve.
        target: Motion goal.
        previous_joints: (N,) values of the previous solution, for continuity.
        compute_meshes: Also return one positioned mesh per frame.
        base_frame: Frame the mechanism base is mounted on for this call.

    Returns:
        KinematicSolution with N joint values and N + 1 frames

    Raises:
        StructuralSolveError: If the target or previous joints are malformed,
            or the family returns an inconsistent result
    """
    if target is None:
        raise StructuralSolveError("A target is required", details={"mechanism": mechanism.model})
    if not isinstance(target, Target):
        raise StructuralSolveError(
            "Target must be a Target instance",
            details={"mechanism": mechanism.model, "got": type(target).__name__},
        )

    family = mechanism.family
    joint_count = len(mechanism.joints)

    if previous_joints is not None:
        try:
            previous_joints = jnp.asarray(previous_joints, dtype=float)
        except (TypeError, ValueError) as e:
            raise StructuralSolveError(
                "Previous joint values must be numbers", details={"got": repr(previous_joints)}
            ) from e
        if previous_joints.shape != (joint_count,):
            raise StructuralSolveError(
                "Previous joint values do not match the mechanism",
                details={"expected": joint_count, "got": previous_joints.shape},
            )

    # Mounting frame moves the base relative to the world origin
    base = mechanism.base_frame
    if base_frame is not None:
        base = base.transform(frame_to_transform(base_frame))

    joints = jnp.asarray(family.solve_joints(mechanism, target, previous_joints), dtype=float)
    if joints.shape != (joint_count,):
        raise StructuralSolveError(
            "Family returned the wrong number of joint values",
            details={"expected": joint_count, "got": joints.shape},
        )

    errors = joints_out_of_range(mechanism.joints, joints)

    local_frames = tuple(family.solve_frames(mechanism, target, joints))
    if len(local_frames) != joint_count:
        raise StructuralSolveError(
            "Family returned the wrong number of frames",
            details={"expected": joint_count, "got": len(local_frames)},
        )

    base_transform = frame_to_transform(base)
    frames = (base,) + tuple(frame.transform(base_transform) for frame in local_frames)

    meshes: Tuple[TriangleMesh, ...] = ()
    if compute_meshes:
        meshes = _position_meshes(mechanism, frames)
        if target.tool is not None:
            meshes = tuple(family.attach_tool(mechanism, target.tool, frames, meshes))

    logger.debug("kinematics_solved", model=mechanism.model, errors=len(errors), meshes=len(meshes))
    return KinematicSolution(joints=joints, frames=frames, meshes=meshes, errors=errors)


def _position_meshes(mechanism: Mechanism, frames: Tuple[Frame, ...]) -> Tuple[TriangleMesh, ...]:
    # Joint meshes are authored at their local frame, so move them relative to it
    meshes = [mechanism.base_mesh.duplicate().transform(frame_to_transform(frames[0]))]
    for joint, frame in zip(mechanism.joints, frames[1:]):
        meshes.append(joint.local_mesh.duplicate().transform(plane_to_plane(joint.local_frame, frame)))
    return tuple(meshes)
