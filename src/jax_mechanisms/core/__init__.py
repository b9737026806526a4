"""Core data structures: joints, meshes, targets and mechanisms."""

from .config import LibraryConfig
from .exceptions import (
    AssetNotFoundError,
    ConfigurationError,
    MechanismError,
    StructuralSolveError,
)
from .joint import RANGE_TOLERANCE, Joint, JointType, Range
from .mechanism import Manufacturer, Mechanism, MechanismType
from .mesh import TriangleMesh
from .target import Target, Tool

__all__ = [
    "LibraryConfig",
    "AssetNotFoundError",
    "ConfigurationError",
    "MechanismError",
    "StructuralSolveError",
    "RANGE_TOLERANCE",
    "Joint",
    "JointType",
    "Range",
    "Manufacturer",
    "Mechanism",
    "MechanismType",
    "TriangleMesh",
    "Target",
    "Tool",
]
