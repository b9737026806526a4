"""Tests for the kinematics solving algorithm."""

import jax.numpy as jnp
import numpy as np
import pytest

from conftest import PlanarFamily, make_planar

from jax_mechanisms.core import StructuralSolveError, Target, Tool
from jax_mechanisms.kinematics import KinematicSolution, select_branch, solve
from jax_mechanisms.transforms import (
    Frame,
    frame_from_quaternion,
    frame_to_transform,
    plane_to_plane,
)


def assert_frames_close(actual: Frame, expected: Frame, atol=1e-9):
    np.testing.assert_allclose(actual.origin, expected.origin, atol=atol)
    np.testing.assert_allclose(actual.basis, expected.basis, atol=atol)


def test_planar_two_link_scenario(planar):
    """Two revolute joints at 30 and 45 degrees land where planar FK predicts."""
    solution = planar.kinematics(Target())

    assert isinstance(solution, KinematicSolution)
    np.testing.assert_allclose(solution.joints, [0.5235987756, 0.7853981634], atol=1e-6)

    expected = [
        np.cos(np.radians(30)) + np.cos(np.radians(75)),
        np.sin(np.radians(30)) + np.sin(np.radians(75)),
        0.0,
    ]
    np.testing.assert_allclose(solution.frames[2].origin, expected, atol=1e-6)
    assert solution.errors == ()


def test_solution_sizes(planar):
    """N joint values and N + 1 frames, with or without meshes."""
    for compute_meshes in (False, True):
        solution = planar.kinematics(Target(), compute_meshes=compute_meshes)
        assert solution.joints.shape == (2,)
        assert len(solution.frames) == 3

    assert planar.kinematics(Target()).meshes == ()


def test_frame_zero_is_base():
    base = frame_from_quaternion([1.0, 2.0, 3.0], [0.9238795, 0.0, 0.0, 0.3826834])
    mechanism = make_planar(base_frame=base)
    solution = mechanism.kinematics(Target())
    assert_frames_close(solution.frames[0], base)


def test_frames_moved_onto_base():
    """Link frames are expressed in the mechanism's ambient space."""
    base = frame_from_quaternion([10.0, 0.0, 5.0], [0.7071068, 0.0, 0.0, 0.7071068])
    moved = make_planar(base_frame=base).kinematics(Target())
    local = make_planar().kinematics(Target())

    for frame, reference in zip(moved.frames[1:], local.frames[1:]):
        assert_frames_close(frame, reference.transform(frame_to_transform(base)), atol=1e-6)


def test_base_frame_override_is_rigid():
    """Two overrides give frame sets related by the transform from one to the other."""
    mechanism = make_planar(base_frame=frame_from_quaternion([0.5, 0.0, 0.0], [1.0, 0.0, 0.0, 0.0]))
    b1 = frame_from_quaternion([1.0, 2.0, 3.0], [0.9238795, 0.3826834, 0.0, 0.0])
    b2 = frame_from_quaternion([-4.0, 0.5, 1.0], [0.5, 0.5, 0.5, 0.5])

    first = mechanism.kinematics(Target(), base_frame=b1)
    second = mechanism.kinematics(Target(), base_frame=b2)
    relative = plane_to_plane(b1, b2)

    for a, b in zip(first.frames, second.frames):
        assert_frames_close(b, a.transform(relative), atol=1e-6)


def test_override_does_not_move_mechanism(planar):
    planar.kinematics(Target(), base_frame=frame_from_quaternion([5.0, 5.0, 5.0], [1.0, 0.0, 0.0, 0.0]))
    assert_frames_close(planar.base_frame, Frame.identity())


def test_values_inside_and_on_bounds_are_not_reported():
    for values in ((0.0, 0.0), (180.0, -180.0), (179.9, -45.0)):
        solution = make_planar(family=PlanarFamily(values)).kinematics(Target())
        assert solution.errors == ()


def test_value_outside_range_reported_once():
    """Each violation is reported once, by 1-based external axis number."""
    family = PlanarFamily((30.0, 180.0 + 1e-4))
    solution = make_planar(family=family, numbers=(0, 5)).kinematics(Target())

    assert solution.errors == ("Axis 6 is outside the permitted range.",)
    # The computation still completes
    assert len(solution.frames) == 3


def test_all_violations_reported():
    solution = make_planar(family=PlanarFamily((-200.0, 200.0))).kinematics(Target())
    assert solution.errors == (
        "Axis 1 is outside the permitted range.",
        "Axis 2 is outside the permitted range.",
    )


class TwoBranchFamily(PlanarFamily):
    """Elbow-up and elbow-down configurations reaching the same point."""

    BRANCHES = jnp.deg2rad(jnp.array([[30.0, 45.0], [75.0, -45.0]]))

    def solve_joints(self, mechanism, target, previous_joints):
        return select_branch(self.BRANCHES, previous_joints)


def test_previous_joints_select_branch():
    mechanism = make_planar(family=TwoBranchFamily())

    default = mechanism.kinematics(Target())
    np.testing.assert_allclose(default.joints, TwoBranchFamily.BRANCHES[0])

    near_second = jnp.deg2rad(jnp.array([70.0, -40.0]))
    continued = mechanism.kinematics(Target(), previous_joints=near_second)
    np.testing.assert_allclose(continued.joints, TwoBranchFamily.BRANCHES[1])

    near_first = jnp.deg2rad(jnp.array([28.0, 50.0]))
    np.testing.assert_allclose(
        mechanism.kinematics(Target(), previous_joints=near_first).joints, TwoBranchFamily.BRANCHES[0]
    )

    # Both branches reach the same end point
    np.testing.assert_allclose(continued.frames[2].origin, default.frames[2].origin, atol=1e-9)


def test_select_branch_without_previous():
    candidates = jnp.array([[1.0, 2.0], [3.0, 4.0]])
    np.testing.assert_allclose(select_branch(candidates), [1.0, 2.0])
    np.testing.assert_allclose(select_branch(candidates, jnp.array([2.9, 4.2])), [3.0, 4.0])


def test_meshes_follow_frames():
    base = frame_from_quaternion([1.0, -2.0, 0.5], [0.9238795, 0.0, 0.3826834, 0.0])
    mechanism = make_planar(base_frame=base)
    solution = mechanism.kinematics(Target(), compute_meshes=True)

    assert len(solution.meshes) == len(solution.frames)

    expected_base = mechanism.base_mesh.transform(frame_to_transform(solution.frames[0]))
    np.testing.assert_allclose(solution.meshes[0].vertices, expected_base.vertices, atol=1e-9)
    np.testing.assert_allclose(solution.meshes[0].faces, mechanism.base_mesh.faces)

    # Joint meshes are moved from their local frame to the solved frame
    for joint, frame, mesh in zip(mechanism.joints, solution.frames[1:], solution.meshes[1:]):
        expected = joint.local_mesh.transform(plane_to_plane(joint.local_frame, frame))
        np.testing.assert_allclose(mesh.vertices, expected.vertices, atol=1e-9)


def test_meshes_are_fresh(planar):
    first = planar.kinematics(Target(), compute_meshes=True)
    second = planar.kinematics(Target(), compute_meshes=True)
    assert first.meshes[0] is not planar.base_mesh
    assert first.meshes[1] is not second.meshes[1]


class ToolFamily(PlanarFamily):
    def __init__(self):
        super().__init__()
        self.calls = []

    def attach_tool(self, mechanism, tool, frames, meshes):
        self.calls.append(tool.name)
        return meshes


def test_tool_hook_only_with_meshes():
    family = ToolFamily()
    mechanism = make_planar(family=family)
    target = Target(tool=Tool(name="gripper"))

    mechanism.kinematics(target)
    assert family.calls == []

    solution = mechanism.kinematics(target, compute_meshes=True)
    assert family.calls == ["gripper"]
    assert len(solution.meshes) == 3


def test_missing_target_is_fatal(planar):
    with pytest.raises(StructuralSolveError, match="A target is required"):
        solve(planar, None)


def test_previous_joints_length_mismatch(planar):
    with pytest.raises(StructuralSolveError, match="Previous joint values"):
        planar.kinematics(Target(), previous_joints=[0.0, 0.0, 0.0])


class WrongCountFamily(PlanarFamily):
    def solve_joints(self, mechanism, target, previous_joints):
        return jnp.zeros(3)


def test_family_with_wrong_joint_count():
    mechanism = make_planar(family=WrongCountFamily())
    with pytest.raises(StructuralSolveError, match="wrong number of joint values"):
        mechanism.kinematics(Target())


class MissingFrameFamily(PlanarFamily):
    def solve_frames(self, mechanism, target, joints):
        return super().solve_frames(mechanism, target, joints)[:-1]


def test_family_with_wrong_frame_count():
    mechanism = make_planar(family=MissingFrameFamily())
    with pytest.raises(StructuralSolveError, match="wrong number of frames"):
        mechanism.kinematics(Target())


def test_target_of_wrong_type(planar):
    with pytest.raises(StructuralSolveError, match="Target instance"):
        planar.kinematics(Frame.identity())


def test_previous_joints_not_numeric(planar):
    with pytest.raises(StructuralSolveError, match="must be numbers"):
        planar.kinematics(Target(), previous_joints=["a", None])
