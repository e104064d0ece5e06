"""mysql-dumper: MySQL dump/restore through the client tools, with retained backups.

Drives ``mysqldump``, ``mysql`` and ``mysqlcheck`` (optionally piped
through ``bzip2``) and manages the resulting files as a retained,
queryable collection in one backup directory.

Usage:
    from mysql_dumper import MySqlDumper, ConnectionDescriptor, CompressionSetting
    from mysql_dumper import BackupRepository, BackupFile
    from mysql_dumper import load_dumper_config, DumperConfig
"""

__version__ = "0.1.0"

# Orchestrator
from mysql_dumper.dumper import FilenameFormatter, MySqlDumper

# Backup repository
from mysql_dumper.backup.models import BackupFile
from mysql_dumper.backup.repository import BackupRepository, Comparator

# Commands
from mysql_dumper.commands.builder import CommandBuilder
from mysql_dumper.commands.models import Command, Pipeline

# Config
from mysql_dumper.config.loader import load_dumper_config
from mysql_dumper.config.models import (
    CompressionSetting,
    ConnectionDescriptor,
    DumperConfig,
)

# Errors
from mysql_dumper.errors import (
    AggregateRemovalFailure,
    ConfigurationError,
    DumperError,
    InvalidArgument,
    LaunchFailure,
    NotFoundError,
    ProcessFailure,
)

# Platforms
from mysql_dumper.platforms import (
    PlatformProfile,
    PosixProfile,
    WindowsProfile,
    current_profile,
)

# Process
from mysql_dumper.process import ProcessRunner

__all__ = [
    # Orchestrator
    "MySqlDumper",
    "FilenameFormatter",
    # Backup repository
    "BackupFile",
    "BackupRepository",
    "Comparator",
    # Commands
    "Command",
    "CommandBuilder",
    "Pipeline",
    # Config
    "load_dumper_config",
    "CompressionSetting",
    "ConnectionDescriptor",
    "DumperConfig",
    # Errors
    "DumperError",
    "ConfigurationError",
    "InvalidArgument",
    "NotFoundError",
    "LaunchFailure",
    "ProcessFailure",
    "AggregateRemovalFailure",
    # Platforms
    "PlatformProfile",
    "PosixProfile",
    "WindowsProfile",
    "current_profile",
    # Process
    "ProcessRunner",
]
