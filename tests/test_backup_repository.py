"""Tests for BackupRepository: path resolution, listing and retention.

Creation times are controlled with ``os.utime`` so ordering does not
depend on how fast the test writes files.
"""

import os
from pathlib import Path

import pytest

from mysql_dumper.backup.models import BackupFile
from mysql_dumper.backup.repository import BackupRepository
from mysql_dumper.errors import AggregateRemovalFailure, InvalidArgument, NotFoundError

BASE_TIME = 1_700_000_000


def _make_backups(directory: Path, names: list[str], step: int = 60) -> None:
    """Create backup files, each ``step`` seconds newer than the previous."""
    for index, name in enumerate(names):
        path = directory / name
        path.write_bytes(b"-- dump " + name.encode())
        stamp = BASE_TIME + index * step
        os.utime(path, (stamp, stamp))


def _names(records: list[BackupFile]) -> list[str]:
    return [r.filename for r in records]


# ------------------------------------------------------------------
# Construction and path resolution
# ------------------------------------------------------------------


class TestResolvePath:
    """resolve_path() keeps every name inside the backup directory."""

    def test_creates_missing_directory(self, tmp_path: Path) -> None:
        repo = BackupRepository(tmp_path / "nested" / "backups")
        assert repo.directory.is_dir()

    def test_joins_directory_and_name(self, tmp_path: Path) -> None:
        repo = BackupRepository(tmp_path)
        path = repo.resolve_path("localhost-shop-20250101_030000.sql")
        assert path == tmp_path.resolve() / "localhost-shop-20250101_030000.sql"

    def test_dotted_names_are_allowed(self, tmp_path: Path) -> None:
        repo = BackupRepository(tmp_path)
        assert repo.resolve_path("..snapshot.sql").name == "..snapshot.sql"

    @pytest.mark.parametrize(
        "filename",
        [
            "../escape.sql",
            "..",
            ".",
            "sub/dir.sql",
            "..\\escape.sql",
            "/etc/passwd",
            "C:\\Windows\\x.sql",
            "bad\x00name.sql",
        ],
    )
    def test_rejects_traversal(self, tmp_path: Path, filename: str) -> None:
        repo = BackupRepository(tmp_path)
        with pytest.raises(InvalidArgument, match="Invalid backup filename"):
            repo.resolve_path(filename)

    def test_rejects_empty(self, tmp_path: Path) -> None:
        repo = BackupRepository(tmp_path)
        with pytest.raises(InvalidArgument, match="Missing backup filename"):
            repo.resolve_path("")

    def test_invalid_argument_is_value_error(self, tmp_path: Path) -> None:
        with pytest.raises(ValueError):
            BackupRepository(tmp_path).resolve_path("../x")

    @pytest.mark.skipif(os.name == "nt", reason="symlinks need privileges on Windows")
    def test_rejects_symlink_leading_outside(self, tmp_path: Path) -> None:
        outside = tmp_path / "outside.txt"
        outside.write_text("precious")
        backups = tmp_path / "backups"
        backups.mkdir()
        (backups / "snapshot.sql").symlink_to(outside)
        repo = BackupRepository(backups)

        with pytest.raises(InvalidArgument, match="resolves outside"):
            repo.resolve_path("snapshot.sql")
        with pytest.raises(InvalidArgument):
            repo.open("snapshot.sql", "wb")
        assert outside.read_text() == "precious"

    @pytest.mark.skipif(os.name == "nt", reason="symlinks need privileges on Windows")
    def test_rejects_dangling_symlink_leading_outside(self, tmp_path: Path) -> None:
        backups = tmp_path / "backups"
        backups.mkdir()
        (backups / "snapshot.sql").symlink_to(tmp_path / "not-yet.txt")

        with pytest.raises(InvalidArgument):
            BackupRepository(backups).resolve_path("snapshot.sql")
        assert not (tmp_path / "not-yet.txt").exists()

    @pytest.mark.skipif(os.name == "nt", reason="symlinks need privileges on Windows")
    def test_allows_symlink_inside_directory(self, tmp_path: Path) -> None:
        _make_backups(tmp_path, ["a.sql"])
        (tmp_path / "latest.sql").symlink_to(tmp_path / "a.sql")

        path = BackupRepository(tmp_path).resolve_path("latest.sql")
        assert path == tmp_path.resolve() / "latest.sql"


class TestLookup:
    """exists(), get() and open()."""

    def test_get_record(self, tmp_path: Path) -> None:
        _make_backups(tmp_path, ["a.sql.bz2"])
        record = BackupRepository(tmp_path).get("a.sql.bz2")

        assert record.filename == "a.sql.bz2"
        assert record.path == tmp_path.resolve() / "a.sql.bz2"
        assert record.size == len(b"-- dump a.sql.bz2")
        assert record.created.tzinfo is not None
        assert record.created.timestamp() == BASE_TIME
        assert record.compressed is True

    def test_get_missing(self, tmp_path: Path) -> None:
        with pytest.raises(NotFoundError, match="does not exist"):
            BackupRepository(tmp_path).get("missing.sql")

    def test_exists(self, tmp_path: Path) -> None:
        _make_backups(tmp_path, ["a.sql"])
        (tmp_path / "folder.sql").mkdir()
        repo = BackupRepository(tmp_path)

        assert repo.exists("a.sql") is True
        assert repo.exists("b.sql") is False
        assert repo.exists("folder.sql") is False

    def test_open_binary(self, tmp_path: Path) -> None:
        repo = BackupRepository(tmp_path)
        with repo.open("new.sql", "wb") as f:
            f.write(b"-- data")
        with repo.open("new.sql") as f:
            assert f.read() == b"-- data"

    def test_open_rejects_text_mode(self, tmp_path: Path) -> None:
        with pytest.raises(InvalidArgument, match="binary"):
            BackupRepository(tmp_path).open("new.sql", "w")


# ------------------------------------------------------------------
# Listing
# ------------------------------------------------------------------


class TestList:
    """list() ordering."""

    def test_default_is_oldest_first(self, tmp_path: Path) -> None:
        # Written newest-name-first so name order and time order differ
        _make_backups(tmp_path, ["c.sql", "b.sql", "a.sql"])
        assert _names(BackupRepository(tmp_path).list()) == ["c.sql", "b.sql", "a.sql"]

    def test_ties_broken_by_filename(self, tmp_path: Path) -> None:
        _make_backups(tmp_path, ["b.sql", "a.sql", "c.sql"], step=0)
        assert _names(BackupRepository(tmp_path).list()) == ["a.sql", "b.sql", "c.sql"]

    def test_custom_comparator_decides_order(self, tmp_path: Path) -> None:
        _make_backups(tmp_path, ["a.sql", "b.sql", "c.sql"])

        def by_name_descending(a: BackupFile, b: BackupFile) -> int:
            return (a.filename < b.filename) - (a.filename > b.filename)

        records = BackupRepository(tmp_path).list(by_name_descending)
        assert _names(records) == ["c.sql", "b.sql", "a.sql"]

    def test_comparator_by_size(self, tmp_path: Path) -> None:
        (tmp_path / "big.sql").write_bytes(b"x" * 100)
        (tmp_path / "small.sql").write_bytes(b"x")

        records = BackupRepository(tmp_path).list(lambda a, b: a.size - b.size)
        assert _names(records) == ["small.sql", "big.sql"]

    def test_only_regular_files(self, tmp_path: Path) -> None:
        _make_backups(tmp_path, ["a.sql"])
        (tmp_path / "subdir").mkdir()
        assert _names(BackupRepository(tmp_path).list()) == ["a.sql"]

    def test_empty_directory(self, tmp_path: Path) -> None:
        assert BackupRepository(tmp_path).list() == []

    def test_skips_dumps_in_progress(self, tmp_path: Path) -> None:
        _make_backups(tmp_path, ["a.sql", ".b.sql.partial"])
        assert _names(BackupRepository(tmp_path).list()) == ["a.sql"]


# ------------------------------------------------------------------
# Removal
# ------------------------------------------------------------------


class TestRemove:
    """remove() deletes one named file."""

    def test_remove(self, tmp_path: Path) -> None:
        _make_backups(tmp_path, ["a.sql", "b.sql"])
        repo = BackupRepository(tmp_path)
        repo.remove("a.sql")

        assert _names(repo.list()) == ["b.sql"]

    def test_remove_missing(self, tmp_path: Path) -> None:
        with pytest.raises(NotFoundError):
            BackupRepository(tmp_path).remove("a.sql")

    def test_remove_rejects_traversal(self, tmp_path: Path) -> None:
        outside = tmp_path / "outside.sql"
        outside.write_text("keep me")
        repo = BackupRepository(tmp_path / "backups")

        with pytest.raises(InvalidArgument):
            repo.remove("../outside.sql")
        assert outside.exists()


class TestRename:
    """rename() moves a file within the directory."""

    def test_rename_replaces_target(self, tmp_path: Path) -> None:
        (tmp_path / "new.partial").write_bytes(b"new")
        (tmp_path / "a.sql").write_bytes(b"old")
        repo = BackupRepository(tmp_path)

        path = repo.rename("new.partial", "a.sql")

        assert path == tmp_path.resolve() / "a.sql"
        assert path.read_bytes() == b"new"
        assert not (tmp_path / "new.partial").exists()

    def test_rename_missing_source(self, tmp_path: Path) -> None:
        with pytest.raises(NotFoundError):
            BackupRepository(tmp_path).rename("gone.sql", "a.sql")

    def test_rename_rejects_traversal(self, tmp_path: Path) -> None:
        backups = tmp_path / "backups"
        backups.mkdir()
        (backups / "a.sql").write_bytes(b"x")

        with pytest.raises(InvalidArgument):
            BackupRepository(backups).rename("a.sql", "../a.sql")
        assert (backups / "a.sql").exists()


class TestRemoveOld:
    """remove_old() retention pruning."""

    def test_keeps_newest_five_of_seven(self, tmp_path: Path) -> None:
        names = [f"db-{i}.sql" for i in range(7)]
        _make_backups(tmp_path, names)
        repo = BackupRepository(tmp_path)

        removed = repo.remove_old(5)

        assert _names(removed) == ["db-1.sql", "db-0.sql"]
        assert _names(repo.list()) == names[2:]
        assert not (tmp_path / "db-0.sql").exists()
        assert not (tmp_path / "db-1.sql").exists()

    @pytest.mark.parametrize("keep", [3, 4, 100])
    def test_keeps_everything_when_not_over_limit(self, tmp_path: Path, keep: int) -> None:
        _make_backups(tmp_path, ["a.sql", "b.sql", "c.sql"])
        repo = BackupRepository(tmp_path)

        assert repo.remove_old(keep) == []
        assert len(repo.list()) == 3

    def test_zero_removes_everything(self, tmp_path: Path) -> None:
        _make_backups(tmp_path, ["a.sql", "b.sql", "c.sql"])
        repo = BackupRepository(tmp_path)

        removed = repo.remove_old(0)

        assert len(removed) == 3
        assert repo.list() == []

    def test_negative_is_rejected_without_touching_files(self, tmp_path: Path) -> None:
        _make_backups(tmp_path, ["a.sql", "b.sql"])
        repo = BackupRepository(tmp_path)

        with pytest.raises(InvalidArgument, match=">= 0"):
            repo.remove_old(-1)
        assert len(repo.list()) == 2

    def test_ties_are_deterministic(self, tmp_path: Path) -> None:
        _make_backups(tmp_path, ["a.sql", "b.sql", "c.sql"], step=0)
        repo = BackupRepository(tmp_path)

        repo.remove_old(1)

        assert _names(repo.list()) == ["c.sql"]

    def test_continues_after_failure_and_aggregates(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        _make_backups(tmp_path, ["a.sql", "b.sql", "c.sql", "d.sql"])
        repo = BackupRepository(tmp_path)

        original_unlink = Path.unlink

        def flaky_unlink(self, *args, **kwargs):
            if self.name == "b.sql":
                raise PermissionError("file is locked")
            return original_unlink(self, *args, **kwargs)

        monkeypatch.setattr(Path, "unlink", flaky_unlink)

        with pytest.raises(AggregateRemovalFailure) as exc_info:
            repo.remove_old(1)

        failures = exc_info.value.failures
        assert [name for name, _ in failures] == ["b.sql"]
        assert isinstance(failures[0][1], PermissionError)
        assert "b.sql" in str(exc_info.value)
        # Older file after the failing one was still removed
        assert sorted(p.name for p in tmp_path.iterdir()) == ["b.sql", "d.sql"]


class TestRecordTimestamps:
    """BackupFile.created comes from filesystem metadata."""

    def test_created_matches_mtime(self, tmp_path: Path) -> None:
        _make_backups(tmp_path, ["a.sql", "b.sql"], step=3600)
        records = BackupRepository(tmp_path).list()

        assert (records[1].created - records[0].created).total_seconds() == 3600
