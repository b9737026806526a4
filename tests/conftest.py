"""Shared fixtures: a small on-disk mechanism library and a planar test chain."""

from pathlib import Path

import jax.numpy as jnp
import pytest
import trimesh

from jax_mechanisms.core import (
    Joint,
    JointType,
    LibraryConfig,
    Manufacturer,
    Mechanism,
    MechanismType,
    Range,
    TriangleMesh,
)
from jax_mechanisms.families import KinematicFamily
from jax_mechanisms.transforms import Frame, so3

DESCRIPTION = """<?xml version="1.0" encoding="utf-8"?>
<Mechanisms>
  <Positioner model="Turntable" manufacturer="Other" payload="500">
    <Base x="0" y="0" z="0" q1="1" q2="0" q3="0" q4="0"/>
    <Joints>
      <Revolute number="7" a="0" d="500" minrange="-90" maxrange="90" maxspeed="90"/>
      <!-- rotating plate -->
      <Revolute number="8" a="100" d="200" minrange="-360" maxrange="360" maxspeed="180"/>
    </Joints>
  </Positioner>
  <Track model="Rail" manufacturer="Other" payload="2000" movesRobot="true">
    <Base x="0" y="1000" z="0" q1="1" q2="0" q3="0" q4="0"/>
    <Joints>
      <Prismatic number="7" a="0" d="0" minrange="0" maxrange="6000" maxspeed="2000"/>
    </Joints>
  </Track>
  <Positioner model="Missing" manufacturer="Other" payload="10">
    <Base x="0" y="0" z="0" q1="1" q2="0" q3="0" q4="0"/>
    <Joints>
      <Revolute number="7" a="0" d="0" minrange="-180" maxrange="180" maxspeed="90"/>
    </Joints>
  </Positioner>
  <RobotArm model="IRB120" manufacturer="ABB" payload="3">
    <Base x="0" y="0" z="0" q1="1" q2="0" q3="0" q4="0"/>
    <Joints>
      <Revolute number="1" a="0" d="290" minrange="-165" maxrange="165" maxspeed="250"/>
    </Joints>
  </RobotArm>
</Mechanisms>
"""

MANIFEST = """models:
  Positioner.Other.Turntable:
    - turntable/base.stl
    - turntable/tilt.stl
    - turntable/plate.stl
  Track.Other.Rail:
    - rail/base.stl
    - rail/carriage.stl
"""


def _write_box(path: Path, extents) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    trimesh.creation.box(extents=extents).export(str(path))


@pytest.fixture
def library(tmp_path) -> LibraryConfig:
    """A library folder with two loadable mechanisms."""
    root = tmp_path / "library"
    _write_box(root / "turntable" / "base.stl", (1000, 1000, 500))
    _write_box(root / "turntable" / "tilt.stl", (800, 800, 200))
    _write_box(root / "turntable" / "plate.stl", (600, 600, 20))
    _write_box(root / "rail" / "base.stl", (6000, 500, 100))
    _write_box(root / "rail" / "carriage.stl", (800, 800, 100))
    (root / "manifest.yaml").write_text(MANIFEST)
    (root / "mechanisms.xml").write_text(DESCRIPTION)
    return LibraryConfig(library_path=root)


def box_mesh(size: float = 1.0) -> TriangleMesh:
    box = trimesh.creation.box(extents=(size, size, size))
    return TriangleMesh.from_arrays(box.vertices, box.faces)


class PlanarFamily(KinematicFamily):
    """Two-link planar arm with unit links and fixed joint values."""

    def __init__(self, values_degrees=(30.0, 45.0)):
        self.values = jnp.deg2rad(jnp.array(values_degrees))

    def solve_joints(self, mechanism, target, previous_joints):
        return self.values

    def solve_frames(self, mechanism, target, joints):
        frames = []
        origin = jnp.zeros(3)
        angle = 0.0
        for value in joints:
            angle = angle + value
            origin = origin + jnp.array([jnp.cos(angle), jnp.sin(angle), 0.0])
            frames.append(Frame(origin=origin, basis=so3.exp(jnp.array([0.0, 0.0, angle]))))
        return frames


def make_planar(family=None, base_frame=None, numbers=(0, 1)) -> Mechanism:
    joints = [
        Joint(index=i, number=number, joint_type=JointType.REVOLUTE, a=float(i), d=0.0,
              range=Range(-180.0, 180.0), max_speed=1.0, local_mesh=box_mesh(0.1))
        for i, number in enumerate(numbers)
    ]
    return Mechanism(
        model="Planar",
        manufacturer=Manufacturer.OTHER,
        payload=1.0,
        base_frame=base_frame if base_frame is not None else Frame.identity(),
        base_mesh=box_mesh(),
        joints=joints,
        family=family if family is not None else PlanarFamily(),
        kind=MechanismType.ROBOT_ARM,
    )


@pytest.fixture
def planar() -> Mechanism:
    return make_planar()
