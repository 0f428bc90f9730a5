"""Layer archive building for buildpack modules.

A module layer contains two synthetic directory entries followed by every
entry of the module blob, re-rooted under the module's version directory:

    /cnb/buildpacks/{escaped_id}/
    /cnb/buildpacks/{escaped_id}/{version}/
    /cnb/buildpacks/{escaped_id}/{version}/...

Each call writes one destination file through one archive writer. Callers
building several modules concurrently must give each call its own
destination path.
"""

import logging
import tarfile
from pathlib import Path
from typing import BinaryIO

from schemas.module import ModuleInfo

from .blob import Blob, Module
from .constants import DIRECTORY_MODE, NORMALIZED_MTIME, TAR_FORMAT
from .exceptions import BuildError
from .naming import layer_file_name, module_root_dir, module_version_dir
from .rewriter import rewrite_entry

logger = logging.getLogger(__name__)


class StrictTarInfo(tarfile.TarInfo):
    """TarInfo that reports corrupt or truncated headers as read errors.

    tarfile treats a bad header after the first one as the end of the
    archive, which would silently drop the remaining entries.
    """

    @classmethod
    def frombuf(cls, buf, encoding, errors):
        try:
            return super().frombuf(buf, encoding, errors)
        except (tarfile.InvalidHeaderError, tarfile.TruncatedHeaderError) as e:
            raise tarfile.SubsequentHeaderError(str(e)) from e


class ReplayReader:
    """Reader returning already consumed bytes before the rest of a stream."""

    def __init__(self, head: bytes, stream: BinaryIO) -> None:
        self._head = head
        self._stream = stream

    def read(self, size: int = -1) -> bytes:
        if not self._head:
            return self._stream.read(size)
        if size is None or size < 0:
            data = self._head + self._stream.read()
            self._head = b""
            return data
        data, self._head = self._head[:size], self._head[size:]
        return data


def build_layer(
    dest_dir: Path,
    uid: int,
    gid: int,
    info: ModuleInfo,
    blob: Blob,
) -> Path:
    """Write the layer archive for a module into dest_dir.

    Args:
        dest_dir: Existing, writable directory for the layer file
        uid: Owner user ID applied to every entry
        gid: Owner group ID applied to every entry
        info: Module identity
        blob: Module content, opened exactly once

    Returns:
        Path to the created layer file ({escaped_id}.{version}.tar)

    Raises:
        BuildError: If the file cannot be created, the blob cannot be read
            or decoded, or an entry cannot be written. A partially written
            file may be left behind and must be treated as invalid.
    """
    layer_path = Path(dest_dir) / layer_file_name(info)
    logger.debug(f"Creating layer {layer_path} for module {info}")

    try:
        fh = open(layer_path, "wb")
    except OSError as e:
        raise BuildError(f"Failed to create layer file '{layer_path}': {e}") from e

    with fh:
        try:
            tw = tarfile.open(fileobj=fh, mode="w", format=TAR_FORMAT)
            # The end-of-archive blocks are written on every exit path
            try:
                write_directory(tw, module_root_dir(info), uid, gid)
                base_dir = module_version_dir(info)
                write_directory(tw, base_dir, uid, gid)
                count = embed_blob(tw, blob, base_dir, uid, gid)
            finally:
                tw.close()
        except BuildError as e:
            raise BuildError(
                f"Failed to create layer for module '{info}' at '{layer_path}': {e}"
            ) from e
        except (OSError, tarfile.TarError) as e:
            raise BuildError(
                f"Failed to write layer for module '{info}' at '{layer_path}': {e}"
            ) from e

    logger.info(f"Built layer {layer_path.name} ({count} entries from module {info})")
    return layer_path


def build_module_layer(dest_dir: Path, uid: int, gid: int, module: Module) -> Path:
    """Write the layer archive for a Module into dest_dir."""
    return build_layer(dest_dir, uid, gid, module.info, module.blob)


def write_directory(tw: tarfile.TarFile, name: str, uid: int, gid: int) -> None:
    """Append a synthetic directory entry with normalized metadata."""
    header = tarfile.TarInfo(name)
    header.type = tarfile.DIRTYPE
    header.mode = DIRECTORY_MODE
    header.mtime = NORMALIZED_MTIME
    header.uid = uid
    header.gid = gid
    tw.addfile(header)


def embed_blob(
    tw: tarfile.TarFile,
    blob: Blob,
    base_dir: str,
    uid: int,
    gid: int,
) -> int:
    """Copy every blob entry into tw, re-rooted under base_dir.

    The blob is read in a single forward pass; a decode error ends the
    pass and is not resumable.

    Args:
        tw: Open archive writer for the layer
        blob: Module content
        base_dir: Directory entries are re-rooted under
        uid: Owner user ID for written entries
        gid: Owner group ID for written entries

    Returns:
        Number of entries written

    Raises:
        BuildError: If the blob cannot be opened, decoded or copied
    """
    try:
        rc = blob.open()
    except (OSError, tarfile.TarError) as e:
        raise BuildError(f"Failed to open module blob {blob!r}: {e}") from e

    count = 0
    with rc:
        head = rc.read(tarfile.BLOCKSIZE)
        if not head:
            logger.debug(f"Module blob {blob!r} is empty")
            return count

        try:
            tr = tarfile.open(
                fileobj=ReplayReader(head, rc), mode="r|*", tarinfo=StrictTarInfo
            )
        except tarfile.TarError as e:
            raise BuildError(f"Failed to read module blob {blob!r}: {e}") from e

        with tr:
            entries = iter(tr)
            while True:
                try:
                    member = next(entries)
                except StopIteration:
                    break
                except (OSError, tarfile.TarError) as e:
                    raise BuildError(f"Failed to get next entry from blob: {e}") from e

                # Stream mode still records every header; nothing reads them back
                tr.members.clear()
                tw.members.clear()

                header = rewrite_entry(member, base_dir, uid, gid)
                if header is None:
                    logger.debug(f"Skipping archive root entry '{member.name}'")
                    continue

                write_entry(tw, tr, member, header)
                count += 1

    return count


def write_entry(
    tw: tarfile.TarFile,
    tr: tarfile.TarFile,
    member: tarfile.TarInfo,
    header: tarfile.TarInfo,
) -> None:
    """Write one rewritten header and its content.

    The writer copies exactly header.size bytes and fails on a short
    source, so the written content always matches the declared size.
    """
    # tarfile stores data for unknown entry types like regular files
    has_content = member.isreg() or member.type not in tarfile.SUPPORTED_TYPES
    content = tr.extractfile(member) if has_content else None
    try:
        tw.addfile(header, content)
    except (OSError, tarfile.TarError, ValueError) as e:
        raise BuildError(f"Failed to write '{header.name}': {e}") from e
    logger.debug(f"Added {header.name}")
