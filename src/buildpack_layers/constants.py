"""Shared constants for layer generation.

Every archive this package writes uses the same normalized timestamp so
that identical inputs produce byte-identical outputs.
"""

import tarfile
from datetime import datetime, timezone

# Mount root for module content inside the image filesystem
BUILDPACKS_DIR = "/cnb/buildpacks"

# Fixed modification time for synthetic entries
NORMALIZED_DATETIME = datetime(1980, 1, 1, 0, 0, 1, tzinfo=timezone.utc)
NORMALIZED_MTIME = int(NORMALIZED_DATETIME.timestamp())

DIRECTORY_MODE = 0o755

# PAX only emits extended headers for entries that need them
TAR_FORMAT = tarfile.PAX_FORMAT

HASH_ALGORITHM = "sha256"

# zlib default level; gzip header mtime is pinned to 0
COMPRESSION_LEVEL = 6

CHUNK_SIZE = 64 * 1024
