"""Backup directory management: lookup, listing and retention pruning.

``BackupRepository`` owns a single directory.  Every filename passed in
is resolved inside that directory; names that could escape it (path
separators, ``..``, drive or root anchors, symlinks leading out) are
rejected.

Ordering: the default listing is oldest first by creation time, with ties
broken by filename.  ``remove_old()`` uses the exact reverse of that
order, so ties are deterministic there too.

The directory is not locked.  Callers running dumps and pruning against
the same directory concurrently must serialize them.

Usage:
    from mysql_dumper.backup.repository import BackupRepository

    repo = BackupRepository("/var/backups/mysql")
    for backup in repo.list():
        print(backup.filename, backup.created)

    removed = repo.remove_old(7)   # keep the 7 newest
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import UTC, datetime
from functools import cmp_to_key
from pathlib import Path, PurePath
from typing import IO

from mysql_dumper.backup.models import PARTIAL_SUFFIX, BackupFile
from mysql_dumper.errors import AggregateRemovalFailure, InvalidArgument, NotFoundError

logger = logging.getLogger(__name__)

# cmp-style ordering: negative if a sorts first, positive if b does, 0 if equal
Comparator = Callable[[BackupFile, BackupFile], int]


class BackupRepository:
    """Backup files stored in one directory.

    Args:
        directory: Backup directory.  Created (with parents) if missing.
    """

    def __init__(self, directory: str | Path) -> None:
        path = Path(directory)
        path.mkdir(parents=True, exist_ok=True)
        self._directory = path.resolve()
        logger.debug(f"Backup directory: {self._directory}")

    @property
    def directory(self) -> Path:
        return self._directory

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def resolve_path(self, filename: str) -> Path:
        """Join the backup directory with ``filename``.

        Args:
            filename: Plain file name (no directory components).

        Returns:
            Full path inside the backup directory.

        Raises:
            InvalidArgument: If ``filename`` is empty or could resolve
                outside the backup directory.

        Example:
            repo.resolve_path("db-shop-20250101_030000.sql")
            repo.resolve_path("../etc/passwd")   # raises InvalidArgument
        """
        if not filename:
            raise InvalidArgument("Missing backup filename.")

        if (
            "/" in filename
            or "\\" in filename
            or "\x00" in filename
            or filename in (".", "..")
            or PurePath(filename).anchor
        ):
            raise InvalidArgument(
                f'Invalid backup filename "{filename}": '
                f"must be a plain name inside {self._directory}"
            )

        candidate = self._directory / filename
        # a symlink in the directory may still point elsewhere
        if not candidate.resolve().is_relative_to(self._directory):
            raise InvalidArgument(
                f'Invalid backup filename "{filename}": '
                f"resolves outside {self._directory}"
            )

        return candidate

    def exists(self, filename: str) -> bool:
        """Return True when ``filename`` is a regular file in the directory."""
        return self.resolve_path(filename).is_file()

    def get(self, filename: str) -> BackupFile:
        """Return the record for ``filename``.

        Raises:
            NotFoundError: If the file does not exist.
        """
        path = self.resolve_path(filename)
        if not path.is_file():
            raise NotFoundError(f'The backup file "{filename}" does not exist.')
        return self._record(path)

    def open(self, filename: str, mode: str = "rb") -> IO[bytes]:
        """Open a backup file in binary mode.

        Used for redirect targets of dump and restore pipelines; the caller
        closes the returned file.
        """
        if "b" not in mode:
            raise InvalidArgument(f'Backup files are binary; got mode "{mode}".')
        return open(self.resolve_path(filename), mode)

    # ------------------------------------------------------------------
    # Listing
    # ------------------------------------------------------------------

    def list(self, comparator: Comparator | None = None) -> list[BackupFile]:
        """List every regular file in the backup directory.

        Args:
            comparator: Optional cmp-style callable.  When given it fully
                determines the order; otherwise records are sorted by
                creation time ascending, then filename.

        Returns:
            Ordered list of ``BackupFile`` records.
        """
        records = [
            self._record(path)
            for path in self._directory.iterdir()
            if path.is_file() and not path.name.endswith(PARTIAL_SUFFIX)
        ]

        if comparator is None:
            records.sort(key=lambda r: (r.created, r.filename))
        else:
            records.sort(key=cmp_to_key(comparator))

        return records

    # ------------------------------------------------------------------
    # Removal
    # ------------------------------------------------------------------

    def remove(self, filename: str) -> None:
        """Delete a backup file.

        Raises:
            NotFoundError: If the file does not exist.
        """
        path = self.resolve_path(filename)
        if not path.is_file():
            raise NotFoundError(f'The backup file "{filename}" does not exist.')
        path.unlink()
        logger.info(f"Removed backup: {filename}")

    def rename(self, source: str, target: str) -> Path:
        """Move ``source`` to ``target``, replacing any existing ``target``.

        Raises:
            NotFoundError: If ``source`` does not exist.
        """
        source_path = self.resolve_path(source)
        target_path = self.resolve_path(target)
        if not source_path.is_file():
            raise NotFoundError(f'The backup file "{source}" does not exist.')
        source_path.replace(target_path)
        logger.debug(f"Renamed backup {source} -> {target}")
        return target_path

    def remove_old(self, keep_count: int) -> list[BackupFile]:
        """Keep the ``keep_count`` newest backups and delete the rest.

        Deletion continues past individual failures; every failure is
        reported together once all deletions were attempted.

        Args:
            keep_count: Number of newest backups to keep.  ``0`` removes
                every backup.

        Returns:
            Records of the removed files, newest first.

        Raises:
            InvalidArgument: If ``keep_count`` is negative (nothing is touched).
            AggregateRemovalFailure: If one or more files could not be deleted.
        """
        if keep_count < 0:
            raise InvalidArgument(
                f"Number of backups to keep must be >= 0, got {keep_count}."
            )

        newest_first = list(reversed(self.list()))
        stale = newest_first[keep_count:]

        removed: list[BackupFile] = []
        failures: list[tuple[str, OSError]] = []

        for record in stale:
            try:
                record.path.unlink()
            except OSError as e:
                logger.warning(f"Could not remove backup {record.filename}: {e}")
                failures.append((record.filename, e))
                continue
            logger.info(f"Removed old backup: {record.filename}")
            removed.append(record)

        if failures:
            raise AggregateRemovalFailure(failures)

        return removed

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _record(path: Path) -> BackupFile:
        stat = path.stat()
        return BackupFile(
            filename=path.name,
            path=path,
            created=datetime.fromtimestamp(stat.st_mtime, tz=UTC),
            size=stat.st_size,
        )
