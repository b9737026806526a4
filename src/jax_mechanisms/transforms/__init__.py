"""
Rigid-body math for kinematic chains.

- so3: rotation matrices and quaternions
- se3: 4x4 homogeneous transforms
- geometry: the Frame pose type and frame/transform/quaternion conversions

All functions are pure and stateless.
"""

from . import so3
from . import se3
from . import geometry
from .geometry import (
    Frame,
    deg_to_rad,
    frame_from_quaternion,
    frame_to_transform,
    plane_to_plane,
    quaternion_from_frame,
    rad_to_deg,
    transform_to_frame,
)

__all__ = [
    "so3",
    "se3",
    "geometry",
    "Frame",
    "deg_to_rad",
    "frame_from_quaternion",
    "frame_to_transform",
    "plane_to_plane",
    "quaternion_from_frame",
    "rad_to_deg",
    "transform_to_frame",
]
