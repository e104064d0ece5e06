"""Backup file records and the retention-aware repository.

Usage:
    from mysql_dumper.backup import BackupFile, BackupRepository
"""

from mysql_dumper.backup.models import BackupFile, is_compressed
from mysql_dumper.backup.repository import BackupRepository, Comparator

__all__ = [
    "BackupFile",
    "BackupRepository",
    "Comparator",
    "is_compressed",
]
