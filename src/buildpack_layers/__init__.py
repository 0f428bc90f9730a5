"""Build container image layers from buildpack module blobs."""

__version__ = "0.1.0"

from .blob import Blob, DirectoryBlob, Module, TarBlob  # noqa: E402
from .exceptions import BuildError, HashError, LayerError  # noqa: E402
from .layer import build_layer, build_module_layer  # noqa: E402
from .utils.hashing import compute_layer_hashes  # noqa: E402

__all__ = [
    "__version__",
    "Blob",
    "TarBlob",
    "DirectoryBlob",
    "Module",
    "build_layer",
    "build_module_layer",
    "compute_layer_hashes",
    "LayerError",
    "BuildError",
    "HashError",
]
