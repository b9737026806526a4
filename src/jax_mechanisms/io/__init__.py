"""Loading mechanisms from a library folder.

- description: XML mechanism descriptions
- assets: manifest-based mesh store
"""

from .assets import AssetManifest, GeometryStore
from .description import list_mechanisms, load_mechanism, parse_mechanism

__all__ = ["AssetManifest", "GeometryStore", "list_mechanisms", "load_mechanism", "parse_mechanism"]
