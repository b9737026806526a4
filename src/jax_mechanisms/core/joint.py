"""Joint records of a kinematic chain.

A joint is either revolute (values in radians) or prismatic (values in length
units). The type is a tag read by kinematic families; the solving engine
itself treats both kinds the same way.
"""

from enum import Enum
from typing import NamedTuple

from flax import struct

from jax_mechanisms.core.mesh import TriangleMesh
from jax_mechanisms.transforms.geometry import Frame

# Values this close outside a bound still count as inside
RANGE_TOLERANCE = 1e-9


class JointType(Enum):
    REVOLUTE = "Revolute"
    PRISMATIC = "Prismatic"


class Range(NamedTuple):
    """Closed interval of permitted joint values."""
    min: float
    max: float

    @classmethod
    def from_bounds(cls, a: float, b: float) -> "Range":
        """Build a range from two bounds given in either order."""
        a, b = float(a), float(b)
        return cls(min(a, b), max(a, b))

    def contains(self, value: float, tolerance: float = RANGE_TOLERANCE) -> bool:
        return self.min - tolerance <= value <= self.max + tolerance


@struct.dataclass
class Joint:
    """One link of a mechanism.

    Attributes:
        index: 0-based position in the chain; defines solving order.
        number: 0-based external axis number, reported 1-based in messages.
        joint_type: Revolute or prismatic tag.
        a: Link offset length.
        d: Link displacement.
        range: Permitted joint values, in working units after mechanism construction.
        max_speed: Maximum rate of change of the joint value.
        local_frame: Reference frame of the joint in the un-posed mechanism.
        local_mesh: Shape of the joint, authored relative to ``local_frame``.
    """
    index: int = struct.field(pytree_node=False)
    number: int = struct.field(pytree_node=False)
    joint_type: JointType = struct.field(pytree_node=False)
    a: float
    d: float
    range: Range = struct.field(pytree_node=False)
    max_speed: float
    local_frame: Frame = struct.field(default_factory=Frame.identity)
    local_mesh: TriangleMesh = struct.field(default_factory=TriangleMesh.empty)

    @property
    def is_revolute(self) -> bool:
        return self.joint_type is JointType.REVOLUTE

    @property
    def is_prismatic(self) -> bool:
        return self.joint_type is JointType.PRISMATIC
