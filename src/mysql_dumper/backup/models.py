"""Backup file record model.

A ``BackupFile`` is derived from filesystem metadata whenever the backup
directory is listed -- nothing is persisted besides the files themselves.
"""

from datetime import datetime
from pathlib import Path

from pydantic import BaseModel, ConfigDict

SQL_SUFFIX = ".sql"
COMPRESSED_SUFFIX = ".bz2"
# marks a dump still being written; renamed away once the tools succeed
PARTIAL_SUFFIX = ".partial"


def is_compressed(filename: str) -> bool:
    """Return True when ``filename`` names a bzip2-compressed dump."""
    return filename.lower().endswith(COMPRESSED_SUFFIX)


class BackupFile(BaseModel):
    """One stored backup, as seen on disk."""

    model_config = ConfigDict(frozen=True)

    filename: str                   # name inside the backup directory
    path: Path                      # full path
    created: datetime               # timezone-aware, from st_mtime
    size: int = 0                   # bytes

    @property
    def compressed(self) -> bool:
        return is_compressed(self.filename)
