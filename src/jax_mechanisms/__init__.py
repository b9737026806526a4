"""
JAX Mechanisms: forward kinematics of industrial mechanisms.

Robot arms, positioners and tracks are described as chains of revolute and
prismatic joints on a repositionable base. Hardware families plug in their
own equations; the solver composes the link frames, checks travel limits and
positions visualization meshes.
"""

import jax
jax.config.update("jax_enable_x64", True)

from . import transforms
from . import core
from . import families
from . import kinematics
from . import io

from .core import Mechanism, Target, Tool
from .kinematics import KinematicSolution, solve

__version__ = "0.1.0"
__all__ = [
    "transforms",
    "core",
    "families",
    "kinematics",
    "io",
    "Mechanism",
    "Target",
    "Tool",
    "KinematicSolution",
    "solve",
]
