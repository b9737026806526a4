"""Built-in families for auxiliary mechanisms: positioners and tracks.

Both read their joint values from the target's external axes. External axes
are numbered after the six robot axes, so joint number 6 (axis 7) reads
``target.external[0]``.
"""

from typing import List, Optional, Sequence, Tuple

import jax
import jax.numpy as jnp

from jax_mechanisms.core.exceptions import StructuralSolveError
from jax_mechanisms.core.joint import Joint
from jax_mechanisms.core.mechanism import Mechanism, MechanismType
from jax_mechanisms.core.target import Target
from jax_mechanisms.families.base import KinematicFamily, product_of_exponentials, register_family
from jax_mechanisms.transforms.geometry import Frame

Array = jax.Array

EXTERNAL_AXIS_OFFSET = 6


def _stacked_frames(joints: Tuple[Joint, ...], basis: Array) -> Tuple[Joint, ...]:
    origin = jnp.zeros(3)
    placed = []
    for joint in joints:
        origin = origin + jnp.array([joint.a, 0.0, joint.d])
        placed.append(joint.replace(local_frame=Frame(origin=origin, basis=basis)))
    return tuple(placed)


class ExternalAxesFamily(KinematicFamily):
    """Mechanisms driven directly by external axis values."""

    def solve_joints(self, mechanism: Mechanism, target: Target, previous_joints: Optional[Array]) -> Array:
        if target.joints is not None:
            values = target.joints
        else:
            values = self._external_values(mechanism, target)

        try:
            return jnp.asarray(values, dtype=float)
        except (TypeError, ValueError) as e:
            raise StructuralSolveError(
                "Joint values must be numbers",
                details={"mechanism": mechanism.model, "got": repr(values)},
            ) from e

    def _external_values(self, mechanism: Mechanism, target: Target) -> List[float]:
        values = []
        for joint in mechanism.joints:
            external = joint.number - EXTERNAL_AXIS_OFFSET
            if not 0 <= external < len(target.external):
                raise StructuralSolveError(
                    f"External axis {joint.number + 1} not configured on this target",
                    details={"mechanism": mechanism.model, "external": len(target.external)},
                )
            values.append(target.external[external])
        return values

    def solve_frames(self, mechanism: Mechanism, target: Target, joints: Array) -> Sequence[Frame]:
        return product_of_exponentials(mechanism.joints, joints)


@register_family(MechanismType.POSITIONER)
class PositionerFamily(ExternalAxesFamily):
    """Rotary positioners; every axis turns about its stacked z axis."""

    def set_start_state(self, joints: Tuple[Joint, ...]) -> Tuple[Joint, ...]:
        return _stacked_frames(joints, jnp.eye(3))


@register_family(MechanismType.TRACK)
class TrackFamily(ExternalAxesFamily):
    """Linear tracks travelling along world +X."""

    # z along world X, x along world Y
    TRAVEL_BASIS = jnp.array([
        [0.0, 0.0, 1.0],
        [1.0, 0.0, 0.0],
        [0.0, 1.0, 0.0],
    ])

    def set_start_state(self, joints: Tuple[Joint, ...]) -> Tuple[Joint, ...]:
        return _stacked_frames(joints, self.TRAVEL_BASIS)

    def degree_to_radian(self, degree: float, joint: Joint) -> float:
        if joint.is_prismatic:
            return float(degree)
        return super().degree_to_radian(degree, joint)

    def radian_to_degree(self, radian: float, joint: Joint) -> float:
        if joint.is_prismatic:
            return float(radian)
        return super().radian_to_degree(radian, joint)
