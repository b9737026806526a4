"""Hardware-family kinematic strategies.

Importing this package registers the built-in positioner and track families.
"""

from .base import (
    KinematicFamily,
    create_family,
    product_of_exponentials,
    register_family,
)
from .external import EXTERNAL_AXIS_OFFSET, PositionerFamily, TrackFamily

__all__ = [
    "KinematicFamily",
    "create_family",
    "product_of_exponentials",
    "register_family",
    "EXTERNAL_AXIS_OFFSET",
    "PositionerFamily",
    "TrackFamily",
]
