"""Folder-based geometry store for mechanism meshes.

The library folder contains a YAML manifest listing, for every fully
qualified model name, the mesh files of that model in order: the base first,
then one file per joint in chain order::

    models:
      Positioner.Other.Turntable:
        - turntable/base.stl
        - turntable/plate.stl

Mesh files are read with trimesh, so any format it supports can be used.
"""

from pathlib import Path
from typing import Dict, List, Tuple

import trimesh
import yaml
from pydantic import BaseModel, Field, ValidationError

from jax_mechanisms.core.config import LibraryConfig
from jax_mechanisms.core.exceptions import AssetNotFoundError, ConfigurationError
from jax_mechanisms.core.logging import get_logger
from jax_mechanisms.core.mesh import TriangleMesh

logger = get_logger(__name__)


class AssetManifest(BaseModel):
    """Ordered mesh files of every model in a library."""

    models: Dict[str, List[str]] = Field(default_factory=dict)


class GeometryStore:
    """
    Loads the meshes of a model from a library folder.

    Meshes are loaded the first time a model is requested and kept in memory
    for later lookups.

    Example:
        >>> store = GeometryStore(LibraryConfig(library_path=Path("library")))
        >>> base, *joint_meshes = store.meshes("Positioner.Other.Turntable")
    """

    def __init__(self, config: LibraryConfig) -> None:
        self.config = config
        if not config.library_path.is_dir():
            raise ConfigurationError(f"Library folder not found: {config.library_path}")
        self._manifest = self._load_manifest(config.manifest_path)
        self._cache: Dict[str, Tuple[TriangleMesh, ...]] = {}

    @staticmethod
    def _load_manifest(path: Path) -> AssetManifest:
        if not path.exists():
            raise ConfigurationError(f"Asset manifest not found: {path}")
        try:
            with open(path) as f:
                data = yaml.safe_load(f) or {}
            return AssetManifest(**data)
        except (yaml.YAMLError, ValidationError, TypeError) as e:
            raise ConfigurationError(
                f"Failed to load asset manifest: {path}",
                details={"error": str(e)},
            ) from e

    def models(self) -> List[str]:
        """Fully qualified names of every model in the manifest."""
        return list(self._manifest.models)

    def meshes(self, model: str) -> Tuple[TriangleMesh, ...]:
        """
        Meshes of ``model``: the base mesh followed by one mesh per joint.

        Raises:
            AssetNotFoundError: If the model or one of its files is missing
        """
        if model not in self._cache:
            self._cache[model] = self._load_model(model)
        return self._cache[model]

    def _load_model(self, model: str) -> Tuple[TriangleMesh, ...]:
        files = self._manifest.models.get(model)
        if not files:
            raise AssetNotFoundError(
                f'Mechanism "{model}" is not in the geometry library',
                model=model,
                details={"library": str(self.config.library_path)},
            )

        meshes = []
        for name in files:
            path = self.config.library_path / name
            if not path.exists():
                raise AssetNotFoundError(f"Mesh file not found: {path}", model=model)
            try:
                loaded = trimesh.load(str(path), force="mesh")
            except Exception as e:
                raise AssetNotFoundError(f"Unreadable mesh file: {path}", model=model) from e
            if len(loaded.vertices) == 0 or len(loaded.faces) == 0:
                raise AssetNotFoundError(f"Mesh file holds no geometry: {path}", model=model)
            meshes.append(TriangleMesh.from_arrays(loaded.vertices, loaded.faces))

        logger.info("assets_loaded", model=model, meshes=len(meshes))
        return tuple(meshes)
