"""Layer naming utilities for buildpack modules.

This module computes the layer file name and the mount directories a
module's content is placed under.

Layer files are named {escaped_id}.{version}.tar and their content lives
under {BUILDPACKS_DIR}/{escaped_id}/{version}.
"""

import posixpath

from schemas.module import ModuleInfo

from .constants import BUILDPACKS_DIR


def escape_module_id(module_id: str) -> str:
    """Make a module ID safe for use as a single path segment.

    Args:
        module_id: Module identifier (e.g., "com.example/mod")

    Returns:
        Escaped identifier (e.g., "com.example_mod")

    Examples:
        >>> escape_module_id("heroku/nodejs")
        "heroku_nodejs"
        >>> escape_module_id("io.buildpacks.samples")
        "io.buildpacks.samples"
    """
    return module_id.replace("/", "_")


def layer_file_name(info: ModuleInfo) -> str:
    """Compute the layer archive file name for a module.

    Examples:
        >>> layer_file_name(ModuleInfo(id="com.example/mod", version="1.2.3"))
        "com.example_mod.1.2.3.tar"
    """
    return f"{escape_module_id(info.id)}.{info.version}.tar"


def module_root_dir(info: ModuleInfo) -> str:
    """Directory holding every version of a module inside the layer."""
    return posixpath.join(BUILDPACKS_DIR, escape_module_id(info.id))


def module_version_dir(info: ModuleInfo) -> str:
    """Directory holding one module version's content inside the layer."""
    return posixpath.join(module_root_dir(info), info.version)
