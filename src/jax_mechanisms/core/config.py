"""
Library configuration.

A library is a folder holding a mechanism description file (XML) and an
asset manifest (YAML) that lists the mesh files of every model. The folder
is always passed in explicitly; nothing is read from global state.
"""

from pathlib import Path
from typing import Union

import yaml
from pydantic import BaseModel, ValidationError

from jax_mechanisms.core.exceptions import ConfigurationError


class LibraryConfig(BaseModel):
    """Location and file names of a mechanism library.

    Example:
        >>> config = LibraryConfig(library_path=Path("library"))
        >>> config.manifest_path
        PosixPath('library/manifest.yaml')
    """

    library_path: Path
    description_file: str = "mechanisms.xml"
    manifest_file: str = "manifest.yaml"

    @property
    def description_path(self) -> Path:
        return self.library_path / self.description_file

    @property
    def manifest_path(self) -> Path:
        return self.library_path / self.manifest_file

    @classmethod
    def from_yaml(cls, path: Union[str, Path]) -> "LibraryConfig":
        """
        Load the configuration from the ``library`` section of a YAML file.

        A relative ``library_path`` is resolved against the YAML file's folder.

        Raises:
            ConfigurationError: If the file is missing, unreadable or invalid
        """
        path = Path(path)
        if not path.exists():
            raise ConfigurationError(f"Library configuration not found: {path}")

        try:
            with open(path) as f:
                data = yaml.safe_load(f) or {}
            if "library" not in data:
                raise ConfigurationError(
                    f"Missing 'library' section in {path}",
                    details={"sections": list(data)},
                )
            config = cls(**data["library"])
        except (yaml.YAMLError, ValidationError, TypeError) as e:
            raise ConfigurationError(
                f"Failed to load library config: {path}",
                details={"error": str(e)},
            ) from e

        if not config.library_path.is_absolute():
            config = config.model_copy(update={"library_path": path.parent / config.library_path})
        return config
