"""Motion targets passed to a solve call."""

from typing import Optional, Tuple

import jax
from flax import struct

from jax_mechanisms.core.mesh import TriangleMesh
from jax_mechanisms.transforms.geometry import Frame

Array = jax.Array


@struct.dataclass
class Tool:
    """End-of-arm tool; ``tcp`` is the tool center point relative to the flange."""
    name: str = struct.field(pytree_node=False)
    tcp: Frame = struct.field(default_factory=Frame.identity)
    mesh: Optional[TriangleMesh] = None


@struct.dataclass
class Target:
    """Motion goal for one solve call.

    Families read the fields they need: a Cartesian ``frame`` for robot arms,
    explicit ``joints`` for joint-space moves, and ``external`` axis values
    (radians or length units) for positioners and tracks.
    """
    frame: Optional[Frame] = None
    joints: Optional[Array] = None
    external: Tuple[float, ...] = ()
    tool: Optional[Tool] = None
