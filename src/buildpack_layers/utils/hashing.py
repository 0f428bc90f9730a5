"""File hashing utilities.

Layer hashes are computed in one read pass: every chunk is fanned out to a
digest of the raw bytes and to a gzip stream feeding a second digest.

    raw digest  <-------------------------+
                                          |
    gz digest   <-- gzip (fixed level) <--+ <-- layer file
"""

import gzip
import hashlib
import logging
import zlib
from pathlib import Path
from typing import BinaryIO

from pydantic import ValidationError

from schemas.digest import Hash, LayerHashes

from ..constants import CHUNK_SIZE, COMPRESSION_LEVEL, HASH_ALGORITHM
from ..exceptions import HashError

logger = logging.getLogger(__name__)


class DigestWriter:
    """Writable sink feeding a hashlib object."""

    def __init__(self, hasher) -> None:
        self.hasher = hasher

    def write(self, data: bytes) -> int:
        self.hasher.update(data)
        return len(data)

    def flush(self) -> None:
        pass


class MultiWriter:
    """Writer duplicating every write to each of its sinks, in order."""

    def __init__(self, *sinks) -> None:
        self.sinks = sinks

    def write(self, data: bytes) -> int:
        for sink in self.sinks:
            sink.write(data)
        return len(data)

    def flush(self) -> None:
        for sink in self.sinks:
            sink.flush()


def compute_file_hash(file_path: Path) -> str:
    """Compute SHA256 hash of file content.

    Args:
        file_path: Path to file to hash

    Returns:
        Hexadecimal SHA256 hash string
    """
    sha256 = hashlib.sha256()
    with open(file_path, "rb") as f:
        while chunk := f.read(CHUNK_SIZE):
            sha256.update(chunk)
    return sha256.hexdigest()


def hash_layer_stream(
    reader: BinaryIO, compressed_copy: BinaryIO | None = None
) -> LayerHashes:
    """Compute the diff ID and digest of a layer from one forward read.

    The gzip stream uses a fixed compression level, a zero header mtime and
    no file name so the digest only depends on the raw bytes.

    Args:
        reader: Binary stream positioned at the start of the layer
        compressed_copy: Optional writable that also receives the gzip stream

    Returns:
        LayerHashes with diff_id (raw bytes) and digest (gzipped bytes)
    """
    raw = hashlib.new(HASH_ALGORITHM)
    compressed = hashlib.new(HASH_ALGORITHM)
    compressed_sink = DigestWriter(compressed)
    if compressed_copy is not None:
        compressed_sink = MultiWriter(compressed_sink, compressed_copy)

    zw = gzip.GzipFile(
        filename="",
        mode="wb",
        compresslevel=COMPRESSION_LEVEL,
        fileobj=compressed_sink,
        mtime=0,
    )
    try:
        tee = MultiWriter(DigestWriter(raw), zw)
        while chunk := reader.read(CHUNK_SIZE):
            tee.write(chunk)
    finally:
        # Closing flushes the trailing deflate block and gzip footer
        zw.close()

    return LayerHashes(
        diff_id=Hash(algorithm=HASH_ALGORITHM, hex=raw.hexdigest()),
        digest=Hash(algorithm=HASH_ALGORITHM, hex=compressed.hexdigest()),
    )


def compute_layer_hashes(layer_path: Path) -> LayerHashes:
    """Compute the diff ID and digest of a finished layer file.

    Args:
        layer_path: Path to the layer archive

    Returns:
        LayerHashes for the file

    Raises:
        HashError: If the file cannot be read or compressed, or a hash
            comes out malformed
    """
    try:
        with open(layer_path, "rb") as fh:
            hashes = hash_layer_stream(fh)
    except ValidationError as e:
        raise HashError(f"Malformed hash for layer '{layer_path}': {e}") from e
    except (OSError, zlib.error) as e:
        raise HashError(f"Failed to hash layer '{layer_path}': {e}") from e

    logger.debug(f"Layer {layer_path}: diff_id={hashes.diff_id} digest={hashes.digest}")
    return hashes
