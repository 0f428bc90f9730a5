"""Unit tests for module blob sources."""

import os
import tarfile

import pytest

from buildpack_layers.blob import DirectoryBlob, Module, TarBlob
from buildpack_layers.constants import NORMALIZED_MTIME
from schemas.module import ModuleInfo


class TestTarBlob:
    """Tests for TarBlob class."""

    def test_open_reads_file(self, tmp_path):
        """Test opening returns the file's bytes."""
        path = tmp_path / "blob.tar"
        path.write_bytes(b"content")

        with TarBlob(path).open() as fh:
            assert fh.read() == b"content"

    def test_missing_file(self, tmp_path):
        """Test opening a missing file raises."""
        with pytest.raises(FileNotFoundError):
            TarBlob(tmp_path / "missing.tar").open()


class TestDirectoryBlob:
    """Tests for DirectoryBlob class."""

    @pytest.fixture
    def source_dir(self, tmp_path):
        """Directory tree with nested files and a symlink."""
        src = tmp_path / "src"
        (src / "bin").mkdir(parents=True)
        (src / "bin" / "detect").write_text("detect")
        (src / "bin" / "build").write_text("build")
        (src / "buildpack.toml").write_text("[buildpack]")
        os.symlink("detect", src / "bin" / "alias")
        return src

    def test_archives_tree(self, source_dir):
        """Test every entry is archived with relative names."""
        with DirectoryBlob(source_dir).open() as fh:
            with tarfile.open(fileobj=fh, mode="r") as tr:
                names = tr.getnames()

        assert names == ["bin", "bin/alias", "bin/build", "bin/detect", "buildpack.toml"]

    def test_normalized_metadata(self, source_dir):
        """Test timestamps and ownership are normalized."""
        with DirectoryBlob(source_dir).open() as fh:
            with tarfile.open(fileobj=fh, mode="r") as tr:
                members = tr.getmembers()

        for member in members:
            assert member.mtime == NORMALIZED_MTIME
            assert member.uid == 0
            assert member.gid == 0
            assert member.uname == ""
            assert member.gname == ""

    def test_symlink_not_followed(self, source_dir):
        """Test symlinks are archived as links."""
        with DirectoryBlob(source_dir).open() as fh:
            with tarfile.open(fileobj=fh, mode="r") as tr:
                alias = tr.getmember("bin/alias")

        assert alias.issym()
        assert alias.linkname == "detect"

    def test_content(self, source_dir):
        """Test file content is archived."""
        with DirectoryBlob(source_dir).open() as fh:
            with tarfile.open(fileobj=fh, mode="r") as tr:
                assert tr.extractfile("buildpack.toml").read() == b"[buildpack]"

    def test_reproducible(self, source_dir):
        """Test the same tree yields the same archive bytes."""
        blob = DirectoryBlob(source_dir)
        with blob.open() as first, blob.open() as second:
            assert first.read() == second.read()

    def test_not_a_directory(self, tmp_path):
        """Test opening a file path fails."""
        path = tmp_path / "file"
        path.write_text("x")

        with pytest.raises(NotADirectoryError):
            DirectoryBlob(path).open()


class TestModule:
    """Tests for Module class."""

    def test_open_delegates_to_blob(self, tmp_path):
        """Test opening a module opens its blob."""
        path = tmp_path / "blob.tar"
        path.write_bytes(b"content")
        module = Module(ModuleInfo(id="a/b", version="1"), TarBlob(path))

        with module.open() as fh:
            assert fh.read() == b"content"
        assert module.info.id == "a/b"
