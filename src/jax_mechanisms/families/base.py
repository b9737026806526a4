"""
Kinematic family strategies and their registry.

A family holds the hardware-specific equations of a mechanism: how a target
maps to joint values and how joint values map to link frames. The solving
engine in :mod:`jax_mechanisms.kinematics` handles everything else.

Families are registered per mechanism type and, optionally, per
manufacturer. Robot arm families are provided by plug-ins::

    @register_family(MechanismType.ROBOT_ARM, Manufacturer.ABB)
    class AbbFamily(KinematicFamily):
        ...
"""

from abc import ABC, abstractmethod
from typing import Callable, Dict, Optional, Sequence, Tuple, Type

import jax
import jax.numpy as jnp

from jax_mechanisms.core.exceptions import ConfigurationError
from jax_mechanisms.core.joint import Joint
from jax_mechanisms.core.mechanism import Manufacturer, Mechanism, MechanismType
from jax_mechanisms.core.mesh import TriangleMesh
from jax_mechanisms.core.target import Target, Tool
from jax_mechanisms.transforms import se3
from jax_mechanisms.transforms.geometry import (
    Frame,
    deg_to_rad,
    frame_to_transform,
    rad_to_deg,
    transform_to_frame,
)

Array = jax.Array


class KinematicFamily(ABC):
    """Hardware-specific forward and inverse kinematics of a mechanism."""

    @abstractmethod
    def solve_joints(
        self, mechanism: Mechanism, target: Target, previous_joints: Optional[Array]
    ) -> Array:
        """
        Joint values reaching ``target``.

        When several configurations reach the target, pick the one closest to
        ``previous_joints``; without previous values pick a fixed default branch.

        Raises:
            StructuralSolveError: If ``target`` lacks what this family needs
        """

    @abstractmethod
    def solve_frames(self, mechanism: Mechanism, target: Target, joints: Array) -> Sequence[Frame]:
        """Frame of every joint for ``joints``, relative to the base frame."""

    def degree_to_radian(self, degree: float, joint: Joint) -> float:
        return float(deg_to_rad(degree))

    def radian_to_degree(self, radian: float, joint: Joint) -> float:
        return float(rad_to_deg(radian))

    def set_start_state(self, joints: Tuple[Joint, ...]) -> Tuple[Joint, ...]:
        """Prepare solver state and the joints' local frames; called once."""
        return joints

    def attach_tool(
        self,
        mechanism: Mechanism,
        tool: Tool,
        frames: Sequence[Frame],
        meshes: Sequence[TriangleMesh],
    ) -> Sequence[TriangleMesh]:
        """Hook to place ``tool`` on the last link. The default leaves meshes as-is."""
        return meshes


FamilyKey = Tuple[MechanismType, Optional[Manufacturer]]

_REGISTRY: Dict[FamilyKey, Type[KinematicFamily]] = {}


def register_family(
    kind: MechanismType, manufacturer: Optional[Manufacturer] = None
) -> Callable[[Type[KinematicFamily]], Type[KinematicFamily]]:
    """Class decorator registering a family; ``manufacturer=None`` matches any."""

    def decorator(family_class: Type[KinematicFamily]) -> Type[KinematicFamily]:
        if not issubclass(family_class, KinematicFamily):
            raise ConfigurationError(
                "Invalid kinematic family",
                details={"class": family_class.__name__, "reason": "Must inherit from KinematicFamily"},
            )
        _REGISTRY[(kind, manufacturer)] = family_class
        return family_class

    return decorator


def create_family(kind: MechanismType, manufacturer: Manufacturer) -> KinematicFamily:
    """
    Instantiate the family registered for ``kind`` and ``manufacturer``.

    Raises:
        ConfigurationError: If no family matches
    """
    family_class = _REGISTRY.get((kind, manufacturer)) or _REGISTRY.get((kind, None))
    if family_class is None:
        raise ConfigurationError(
            f"No kinematic family registered for {kind.value}.{manufacturer.value}",
            details={"registered": sorted(f"{k.value}.{m.value if m else '*'}" for k, m in _REGISTRY)},
        )
    return family_class()


def product_of_exponentials(joints: Sequence[Joint], values: Array) -> Tuple[Frame, ...]:
    """
    Frames of a serial chain whose joints move about their own local frames.

    Revolute joints rotate about the local z axis, prismatic joints translate
    along it. Joint ``i`` is moved by every joint ``j <= i``.
    """
    frames = []
    motion = se3.identity()
    for joint, value in zip(joints, values):
        local = frame_to_transform(joint.local_frame)
        if joint.is_revolute:
            twist = jnp.array([0.0, 0.0, 0.0, 0.0, 0.0, 1.0])
        else:
            twist = jnp.array([0.0, 0.0, 1.0, 0.0, 0.0, 0.0])
        screw = se3.multiply(se3.multiply(local, se3.exp(twist * value)), se3.inverse(local))
        motion = se3.multiply(motion, screw)
        frames.append(transform_to_frame(se3.multiply(motion, local)))
    return tuple(frames)
