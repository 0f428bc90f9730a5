"""Shared fixtures for layer tests."""

import io
import tarfile
from pathlib import Path

import pytest

from buildpack_layers.blob import TarBlob
from schemas.module import ModuleInfo


def make_tar_bytes(entries: list[tuple]) -> bytes:
    """Build an in-memory tar archive.

    Each entry is (name, content) for a regular file, (name, None) for a
    directory, or (name, TarInfo-attribute dict) for anything else. A
    "content" key in the dict supplies data for the entry.
    """
    buf = io.BytesIO()
    with tarfile.open(fileobj=buf, mode="w", format=tarfile.PAX_FORMAT) as tw:
        for name, value in entries:
            info = tarfile.TarInfo(name)
            info.uid = 1000
            info.gid = 1000
            info.uname = "builder"
            info.gname = "builder"
            info.mtime = 1700000000
            if value is None:
                info.type = tarfile.DIRTYPE
                info.mode = 0o755
                tw.addfile(info)
            elif isinstance(value, bytes):
                info.size = len(value)
                info.mode = 0o644
                tw.addfile(info, io.BytesIO(value))
            else:
                attrs = dict(value)
                content = attrs.pop("content", None)
                for attr, attr_value in attrs.items():
                    setattr(info, attr, attr_value)
                if content is None:
                    tw.addfile(info)
                else:
                    info.size = len(content)
                    tw.addfile(info, io.BytesIO(content))
    return buf.getvalue()


def read_members(path: Path) -> list[tuple[tarfile.TarInfo, bytes | None]]:
    """Read every member of an archive with its content."""
    members = []
    with tarfile.open(path, mode="r") as tr:
        for member in tr.getmembers():
            content = tr.extractfile(member).read() if member.isreg() else None
            members.append((member, content))
    return members


@pytest.fixture
def module_info():
    """Module identity used by the layer scenarios."""
    return ModuleInfo(id="com.example/mod", version="1.2.3")


@pytest.fixture
def write_blob(tmp_path):
    """Write tar entries to a blob file and return a TarBlob for it."""

    def _write(entries: list[tuple], name: str = "blob.tar") -> TarBlob:
        blob_path = tmp_path / name
        blob_path.write_bytes(make_tar_bytes(entries))
        return TarBlob(blob_path)

    return _write


@pytest.fixture
def dest_dir(tmp_path):
    """Destination directory for layer files."""
    path = tmp_path / "layers"
    path.mkdir()
    return path


@pytest.fixture
def tar_bytes():
    """Build in-memory tar archives from entry tuples."""
    return make_tar_bytes


@pytest.fixture
def layer_members():
    """Read every member of an archive with its content."""
    return read_members
