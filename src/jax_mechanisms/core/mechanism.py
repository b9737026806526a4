"""Mechanism: an ordered chain of joints on a repositionable base.

A Mechanism owns its joints, base frame and base mesh. Its shape never
changes after construction; only the base frame may be reassigned, for
instance when the mechanism rides on a track. Solves read the base frame once
per call, so concurrent solves are safe as long as nobody reassigns the base
frame meanwhile. Use :meth:`Mechanism.with_base_frame` to reposition a copy
instead of mutating a shared instance.
"""

import copy
from enum import Enum
from typing import TYPE_CHECKING, Iterable, Optional, Tuple

import jax.numpy as jnp

from jax_mechanisms.core import mesh as mesh_ops
from jax_mechanisms.core.exceptions import ConfigurationError
from jax_mechanisms.core.joint import Joint, Range
from jax_mechanisms.core.logging import get_logger
from jax_mechanisms.core.mesh import TriangleMesh
from jax_mechanisms.transforms.geometry import Frame, frame_to_transform

if TYPE_CHECKING:
    from jax_mechanisms.core.target import Target
    from jax_mechanisms.families.base import KinematicFamily
    from jax_mechanisms.kinematics import KinematicSolution

logger = get_logger(__name__)


class MechanismType(Enum):
    ROBOT_ARM = "RobotArm"
    POSITIONER = "Positioner"
    TRACK = "Track"


class Manufacturer(Enum):
    ABB = "ABB"
    KUKA = "KUKA"
    UR = "UR"
    STAUBLI = "Staubli"
    OTHER = "Other"


class Mechanism:
    """Kinematic chain with family-specific solving.

    Args:
        model: Model name without manufacturer prefix.
        manufacturer: Hardware manufacturer.
        payload: Rated payload.
        base_frame: Pose of the mechanism base.
        base_mesh: Shape of the base, authored at the world origin.
        joints: Joints in chain order, with ranges in degrees (or length units).
        family: Strategy holding the hardware-specific kinematics.
        kind: Mechanism type, used for display and dispatch.
        moves_robot: Whether actuating this mechanism relocates a robot.
    """

    def __init__(
        self,
        model: str,
        manufacturer: Manufacturer,
        payload: float,
        base_frame: Frame,
        base_mesh: TriangleMesh,
        joints: Iterable[Joint],
        family: "KinematicFamily",
        kind: MechanismType = MechanismType.ROBOT_ARM,
        moves_robot: bool = False,
    ) -> None:
        self._model = model
        self.manufacturer = manufacturer
        self.payload = payload
        self.kind = kind
        self.family = family
        self.moves_robot = moves_robot
        self.base_mesh = base_mesh
        self._base_frame = base_frame

        joints = tuple(joints)
        converted = []
        for position, joint in enumerate(joints):
            if joint.index != position:
                raise ConfigurationError(
                    f"Joint index {joint.index} does not match its position {position} in the chain",
                    details={"model": model, "number": joint.number},
                )
            low, high = joint.range
            if low > high:
                raise ConfigurationError(
                    f"Empty range for axis {joint.number + 1}",
                    details={"model": model, "min": low, "max": high},
                )
            converted.append(joint.replace(range=Range.from_bounds(
                family.degree_to_radian(low, joint), family.degree_to_radian(high, joint))))

        self.joints: Tuple[Joint, ...] = tuple(family.set_start_state(tuple(converted)))
        self._display_mesh = self._create_display_mesh()

        logger.debug("mechanism_created", model=self.model, kind=kind.value, joints=len(self.joints))

    @property
    def model(self) -> str:
        return f"{self.manufacturer.value}.{self._model}"

    @property
    def base_frame(self) -> Frame:
        return self._base_frame

    @base_frame.setter
    def base_frame(self, frame: Frame) -> None:
        self._base_frame = frame
        self._display_mesh = self._create_display_mesh()

    @property
    def display_mesh(self) -> TriangleMesh:
        """Base and joint meshes combined, placed at the base frame."""
        return self._display_mesh

    def _create_display_mesh(self) -> TriangleMesh:
        combined = mesh_ops.concatenate([self.base_mesh] + [j.local_mesh for j in self.joints])
        return combined.transform(frame_to_transform(self._base_frame))

    def with_base_frame(self, frame: Frame) -> "Mechanism":
        """Return a shallow copy placed at ``frame``; this instance is untouched."""
        moved = copy.copy(self)
        moved.base_frame = frame
        return moved

    def degree_to_radian(self, degree: float, index: int) -> float:
        return self.family.degree_to_radian(degree, self.joints[index])

    def radian_to_degree(self, radian: float, index: int) -> float:
        return self.family.radian_to_degree(radian, self.joints[index])

    def to_radians(self, values) -> jnp.ndarray:
        """Convert a full vector of joint values from degrees to working units."""
        return jnp.array([self.degree_to_radian(v, i) for i, v in enumerate(values)])

    def to_degrees(self, values) -> jnp.ndarray:
        """Convert a full vector of joint values from working units to degrees."""
        return jnp.array([self.radian_to_degree(v, i) for i, v in enumerate(values)])

    def kinematics(
        self,
        target: "Target",
        previous_joints=None,
        compute_meshes: bool = False,
        base_frame: Optional[Frame] = None,
    ) -> "KinematicSolution":
        """
        Solve the chain for ``target``.

        Args:
            target: Motion goal read by the mechanism's family.
            previous_joints: Last joint values, used to keep branch continuity.
            compute_meshes: Also position a visualization mesh per link.
            base_frame: Reposition the base for this call only.

        Returns:
            A fresh KinematicSolution
        """
        from jax_mechanisms.kinematics import solve

        return solve(self, target, previous_joints, compute_meshes, base_frame)

    def __repr__(self) -> str:
        return f"{self.kind.value} ({self.model})"
