"""Triangle meshes used for mechanism visualization."""

from typing import Sequence

import jax
import jax.numpy as jnp
import numpy as np
from flax import struct

from jax_mechanisms.transforms import se3

Array = jax.Array


@struct.dataclass
class TriangleMesh:
    """Immutable triangulated surface.

    Attributes:
        vertices: (N, 3) vertex positions.
        faces: (M, 3) integer vertex indices of each triangle.
    """
    vertices: Array
    faces: Array

    @classmethod
    def empty(cls) -> "TriangleMesh":
        return cls(vertices=jnp.zeros((0, 3)), faces=jnp.zeros((0, 3), dtype=jnp.int32))

    @classmethod
    def from_arrays(cls, vertices, faces) -> "TriangleMesh":
        vertices = np.asarray(vertices, dtype=np.float64).reshape(-1, 3)
        faces = np.asarray(faces, dtype=np.int32).reshape(-1, 3)
        return cls(vertices=jnp.asarray(vertices), faces=jnp.asarray(faces))

    @property
    def vertex_count(self) -> int:
        return self.vertices.shape[0]

    @property
    def face_count(self) -> int:
        return self.faces.shape[0]

    @property
    def bounds(self) -> Array:
        """(2, 3) array of the minimum and maximum corners."""
        if self.vertex_count == 0:
            return jnp.zeros((2, 3))
        return jnp.stack([self.vertices.min(axis=0), self.vertices.max(axis=0)])

    def duplicate(self) -> "TriangleMesh":
        return TriangleMesh(vertices=jnp.array(self.vertices), faces=jnp.array(self.faces))

    def transform(self, T: Array) -> "TriangleMesh":
        """Return a copy of the mesh moved by the rigid transform ``T``."""
        return TriangleMesh(vertices=se3.apply(T, self.vertices), faces=jnp.array(self.faces))


def concatenate(meshes: Sequence[TriangleMesh]) -> TriangleMesh:
    """Append meshes into one, offsetting face indices of each part."""
    meshes = [m for m in meshes if m.vertex_count]
    if not meshes:
        return TriangleMesh.empty()

    offsets = np.cumsum([0] + [m.vertex_count for m in meshes[:-1]])
    vertices = jnp.concatenate([m.vertices for m in meshes])
    faces = jnp.concatenate([m.faces + offset for m, offset in zip(meshes, offsets)])
    return TriangleMesh(vertices=vertices, faces=faces.astype(jnp.int32))
