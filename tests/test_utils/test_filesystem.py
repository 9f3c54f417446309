from __future__ import annotations

import os
import stat
from pathlib import Path
from unittest.mock import patch

import pytest

from jamkit.exceptions import FilesystemError
from jamkit.utils.filesystem import (
    copy_tree,
    safe_read_file,
    safe_write_file,
    temporary_directory,
    validate_path,
)


@pytest.mark.unit
class TestSafeReadFile:
    """Tests for safe_read_file."""

    def test_reads_content(self, tmp_path: Path) -> None:
        """Test the file content is returned."""
        target = tmp_path / "buildpack.toml"
        target.write_text('api = "0.7"\n', encoding="utf-8")

        assert safe_read_file(target) == 'api = "0.7"\n'

    def test_missing_file_raises(self, tmp_path: Path) -> None:
        """Test a missing file raises FilesystemError."""
        with pytest.raises(FilesystemError) as exc_info:
            safe_read_file(tmp_path / "missing.toml")

        assert "File not found" in str(exc_info.value)
        assert exc_info.value.operation == "read"

    def test_directory_raises(self, tmp_path: Path) -> None:
        """Test a directory raises FilesystemError."""
        with pytest.raises(FilesystemError) as exc_info:
            safe_read_file(tmp_path)

        assert "Not a file" in str(exc_info.value)

    def test_undecodable_content_raises(self, tmp_path: Path) -> None:
        """Test non UTF-8 content raises FilesystemError."""
        target = tmp_path / "binary.toml"
        target.write_bytes(b"\xff\xfe\x00")

        with pytest.raises(FilesystemError) as exc_info:
            safe_read_file(target)

        assert isinstance(exc_info.value.original_error, UnicodeDecodeError)


@pytest.mark.unit
class TestSafeWriteFile:
    """Tests for safe_write_file."""

    def test_creates_file(self, tmp_path: Path) -> None:
        """Test a new file is written."""
        target = tmp_path / "buildpack.toml"

        safe_write_file(target, "content\n")

        assert target.read_text(encoding="utf-8") == "content\n"

    def test_replaces_and_keeps_mode(self, tmp_path: Path) -> None:
        """Test an existing file is replaced and keeps its mode."""
        target = tmp_path / "buildpack.toml"
        target.write_text("old", encoding="utf-8")
        os.chmod(target, 0o600)

        safe_write_file(target, "new")

        assert target.read_text(encoding="utf-8") == "new"
        assert stat.S_IMODE(target.stat().st_mode) == 0o600

    def test_leaves_no_temporary_files(self, tmp_path: Path) -> None:
        """Test no temporary file is left beside the target."""
        target = tmp_path / "buildpack.toml"

        safe_write_file(target, "content")

        assert sorted(p.name for p in tmp_path.iterdir()) == ["buildpack.toml"]

    def test_failure_raises_and_cleans_up(self, tmp_path: Path) -> None:
        """Test a failed replace raises and removes the temporary file."""
        target = tmp_path / "buildpack.toml"

        with patch("pathlib.Path.replace", side_effect=OSError("disk full")):
            with pytest.raises(FilesystemError) as exc_info:
                safe_write_file(target, "content")

        assert "Atomic write failed" in str(exc_info.value)
        assert list(tmp_path.iterdir()) == []


@pytest.mark.unit
class TestCopyTree:
    """Tests for copy_tree."""

    def test_copies_files_modes_and_symlinks(self, tmp_path: Path) -> None:
        """Test files, modes and symlinks are copied."""
        source = tmp_path / "src"
        (source / "bin").mkdir(parents=True)
        (source / "bin" / "build").write_text("#!/bin/sh\n", encoding="utf-8")
        os.chmod(source / "bin" / "build", 0o755)
        os.symlink("build", source / "bin" / "detect")

        destination = tmp_path / "dst"
        destination.mkdir()

        copy_tree(source, destination)

        assert (destination / "bin" / "build").read_text(encoding="utf-8") == "#!/bin/sh\n"
        assert stat.S_IMODE((destination / "bin" / "build").stat().st_mode) == 0o755
        assert os.readlink(destination / "bin" / "detect") == "build"

    def test_missing_source_raises(self, tmp_path: Path) -> None:
        """Test a missing source raises FilesystemError."""
        with pytest.raises(FilesystemError) as exc_info:
            copy_tree(tmp_path / "missing", tmp_path / "dst")

        assert exc_info.value.operation == "copy"


@pytest.mark.unit
class TestTemporaryDirectory:
    """Tests for temporary_directory."""

    def test_removed_after_use(self) -> None:
        """Test the directory is removed on exit."""
        with temporary_directory(prefix="jamkit-test-") as path:
            assert os.path.isdir(path)
            assert os.path.basename(path).startswith("jamkit-test-")
            Path(path, "file").write_text("x", encoding="utf-8")

        assert not os.path.exists(path)

    def test_removed_on_error(self) -> None:
        """Test the directory is removed when the block raises."""
        with pytest.raises(RuntimeError):
            with temporary_directory() as path:
                raise RuntimeError("boom")

        assert not os.path.exists(path)


@pytest.mark.unit
class TestValidatePath:
    """Tests for validate_path."""

    def test_resolves_relative_path(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test relative paths resolve against the working directory."""
        monkeypatch.chdir(tmp_path)

        assert validate_path("buildpack.toml") == (tmp_path / "buildpack.toml").resolve()

    def test_expands_home(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test a leading ~ expands to the home directory."""
        monkeypatch.setenv("HOME", str(tmp_path))

        assert validate_path("~/buildpack.toml") == (tmp_path / "buildpack.toml").resolve()

    def test_collapses_parent_segments(self, tmp_path: Path) -> None:
        """Test .. segments are resolved away for paths that do not exist."""
        result = validate_path(tmp_path / "a" / ".." / "output.tgz")

        assert result == (tmp_path / "output.tgz").resolve()
