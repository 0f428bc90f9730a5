"""Module blob sources.

A blob is the tar-encoded content of a buildpack module. The layer builder
only needs to open it once and read it forward, so sources range from an
archive already on disk to a directory tarred on demand.
"""

import logging
import os
import tarfile
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import BinaryIO

from schemas.module import ModuleInfo

from .constants import NORMALIZED_MTIME, TAR_FORMAT

logger = logging.getLogger(__name__)


class Blob(ABC):
    """Openable, forward-readable source of module content."""

    @abstractmethod
    def open(self) -> BinaryIO:
        """Open the blob for reading.

        The caller owns the returned stream and must close it.
        """


class TarBlob(Blob):
    """Blob backed by an archive file on disk.

    The archive may be plain or gzip/bzip2/xz compressed; decoding is left
    to the reader.
    """

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def open(self) -> BinaryIO:
        return open(self.path, "rb")

    def __repr__(self) -> str:
        return f"TarBlob({str(self.path)!r})"


class DirectoryBlob(Blob):
    """Blob backed by a directory tree.

    Opening the blob archives the directory into an anonymous temporary
    file with normalized timestamps and ownership, so the same tree always
    yields the same bytes.
    """

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def open(self) -> BinaryIO:
        if not self.path.is_dir():
            raise NotADirectoryError(f"Not a directory: {self.path}")

        fh = tempfile.TemporaryFile()
        try:
            with tarfile.open(fileobj=fh, mode="w", format=TAR_FORMAT) as tw:
                for path in self._walk():
                    self._add(tw, path)
            fh.seek(0)
        except BaseException:
            fh.close()
            raise
        return fh

    def _walk(self) -> list[Path]:
        """List every entry below the root in sorted, parent-first order."""
        entries: list[Path] = []
        for dirpath, dirnames, filenames in os.walk(self.path):
            # Sorting in place fixes the order os.walk descends in
            dirnames.sort()
            current = Path(dirpath)
            entries.extend(current / name for name in dirnames)
            entries.extend(current / name for name in sorted(filenames))
        return sorted(entries, key=lambda p: p.relative_to(self.path).parts)

    def _add(self, tw: tarfile.TarFile, path: Path) -> None:
        info = tw.gettarinfo(str(path), arcname=path.relative_to(self.path).as_posix())
        info.mtime = NORMALIZED_MTIME
        info.uid = info.gid = 0
        info.uname = info.gname = ""

        if info.isreg():
            with open(path, "rb") as f:
                tw.addfile(info, f)
        else:
            tw.addfile(info)
        logger.debug(f"Archived {info.name}")

    def __repr__(self) -> str:
        return f"DirectoryBlob({str(self.path)!r})"


class Module:
    """A buildpack module: its identity plus the blob holding its content."""

    def __init__(self, info: ModuleInfo, blob: Blob) -> None:
        self.info = info
        self.blob = blob

    def open(self) -> BinaryIO:
        return self.blob.open()

    def __repr__(self) -> str:
        return f"Module({str(self.info)!r}, {self.blob!r})"
