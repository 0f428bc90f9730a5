"""Schema definitions for buildpack modules and layer hashes."""

from .digest import Hash, LayerHashes
from .module import ModuleInfo

__all__ = [
    "ModuleInfo",
    "Hash",
    "LayerHashes",
]
