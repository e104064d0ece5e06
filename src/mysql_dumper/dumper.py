"""MySQL dump and restore orchestration.

``MySqlDumper`` ties the pieces together: it asks ``CommandBuilder`` for
a pipeline, runs it with ``ProcessRunner``, and reads or writes backup
files only through ``BackupRepository``.  Operations share no state
besides what is fixed at construction (connection, platform, resolved
compression), and none of them retries.

Usage:
    from mysql_dumper import CompressionSetting, ConnectionDescriptor, MySqlDumper

    dumper = MySqlDumper(
        ConnectionDescriptor(host="localhost", name="shop", user="backup", password="s3cret"),
        "/var/backups/mysql",
        compression=CompressionSetting.default(),
    )
    filename = dumper.dump()                 # "localhost-shop-20250101_030000.sql.bz2"
    dumper.restore(filename)
    dumper.backup_manager.remove_old(7)
"""

import logging
from collections.abc import Callable
from datetime import datetime
from pathlib import Path

from mysql_dumper.backup.models import (
    COMPRESSED_SUFFIX,
    PARTIAL_SUFFIX,
    SQL_SUFFIX,
    is_compressed,
)
from mysql_dumper.backup.repository import BackupRepository
from mysql_dumper.commands.builder import CommandBuilder
from mysql_dumper.config.models import CompressionSetting, ConnectionDescriptor, DumperConfig
from mysql_dumper.errors import (
    InvalidArgument,
    LaunchFailure,
    NotFoundError,
    ProcessFailure,
)
from mysql_dumper.platforms import PlatformProfile, current_profile
from mysql_dumper.process import ProcessRunner

logger = logging.getLogger(__name__)

# Receives (host, database name), returns the filename without extension
FilenameFormatter = Callable[[str, str], str]

TIMESTAMP_FORMAT = "%Y%m%d_%H%M%S"


class MySqlDumper:
    """Dumps and restores one MySQL database.

    Args:
        connection: Database access data.
        backup_dir: Directory holding the backup files.
        compression: A ``CompressionSetting``, or the loose form accepted by
            ``CompressionSetting.from_option`` (``False``, ``True`` or a
            bzip2 directory).  Resolved immediately.
        tool_directory: Directory of the MySQL client programs
            (``MYSQL_HOME``); ``None`` uses the search path.
        profile: Platform conventions; defaults to the running OS.
        runner: Process runner; defaults to ``ProcessRunner()``.
        clock: Returns the current time for default filenames.
        optimize_before_dump: Default for ``dump(optimize_first=...)``.

    Raises:
        ConfigurationError: If compression is enabled but bzip2 cannot be
            located as the platform requires.
    """

    def __init__(
        self,
        connection: ConnectionDescriptor,
        backup_dir: str | Path,
        compression: CompressionSetting | bool | str | None = None,
        *,
        tool_directory: str | None = None,
        profile: PlatformProfile | None = None,
        runner: ProcessRunner | None = None,
        clock: Callable[[], datetime] | None = None,
        optimize_before_dump: bool = True,
    ) -> None:
        if not isinstance(compression, CompressionSetting):
            compression = CompressionSetting.from_option(compression)

        self._connection = connection
        self._profile = profile or current_profile()
        self._compressor_dir = compression.resolve(self._profile)
        self._builder = CommandBuilder(self._profile, tool_directory)
        self._runner = runner or ProcessRunner()
        self._clock = clock or datetime.now
        self._optimize_before_dump = optimize_before_dump
        self._manager = BackupRepository(backup_dir)

    @classmethod
    def from_config(cls, config: DumperConfig, **overrides) -> "MySqlDumper":
        """Create a dumper from loaded configuration.

        Keyword ``overrides`` are passed to the constructor and win over
        the configured ``tool_directory`` and ``optimize_before_dump``.

        Example:
            dumper = MySqlDumper.from_config(load_dumper_config())
        """
        options = {
            "tool_directory": config.mysql_home,
            "optimize_before_dump": config.optimize_before_dump,
        } | overrides
        return cls(
            config.connection,
            config.backup_dir,
            config.compression_setting,
            **options,
        )

    @property
    def backup_manager(self) -> BackupRepository:
        return self._manager

    @property
    def compression_enabled(self) -> bool:
        return self._compressor_dir is not None

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def dump(
        self,
        optimize_first: bool | None = None,
        filename_formatter: FilenameFormatter | None = None,
    ) -> str:
        """Dump the database into a new backup file.

        Args:
            optimize_first: Optimize all tables before dumping.  A failed
                optimization aborts the dump before any file is written.
                ``None`` uses the ``optimize_before_dump`` setting.
            filename_formatter: Builds the base filename from
                ``(host, database name)``.  Defaults to
                ``<host>-<name>-<YYYYMMDD_HHMMSS>``.

        Returns:
            Backup filename (``.sql``, or ``.sql.bz2`` when compressing).
            Pass it unchanged to ``restore()``.

        Raises:
            InvalidArgument: If the formatter returns an unusable name.
            LaunchFailure: If a tool cannot be started.
            ProcessFailure: If a tool exits with a non-zero code.  The
                partially written file is removed first; an existing
                backup of the same name is left untouched.
        """
        if optimize_first is None:
            optimize_first = self._optimize_before_dump
        if optimize_first:
            self._optimize()

        filename = self._prepare_filename(filename_formatter)
        target = self._manager.resolve_path(filename)
        # the tools write here; an existing backup of the same name survives a failure
        partial = f".{filename}{PARTIAL_SUFFIX}"
        pipeline = self._builder.build_dump_command(
            self._connection, self._compressor_dir, str(target)
        )

        logger.info(f"Dumping {self._connection.name}@{self._connection.host} to {filename}")
        try:
            with self._manager.open(partial, "wb") as output:
                self._runner.run(pipeline, stdout=output)
        except (LaunchFailure, ProcessFailure):
            self._discard(partial)
            raise

        self._manager.rename(partial, filename)
        logger.info(f"Dump complete: {filename}")
        return filename

    def restore(self, filename: str) -> None:
        """Restore (import) the database from a backup file.

        Args:
            filename: Backup filename as returned by ``dump()``.

        Raises:
            InvalidArgument: If ``filename`` is empty or not a plain name.
            NotFoundError: If the backup file does not exist.
            ConfigurationError: If the file is compressed and the platform
                needs a bzip2 directory that was never configured.
            LaunchFailure: If a tool cannot be started.
            ProcessFailure: If a tool exits with a non-zero code.
        """
        if not filename:
            raise InvalidArgument("Missing filename argument.")

        if not self._manager.exists(filename):
            raise NotFoundError(f'The backup file "{filename}" does not exist.')

        source = self._manager.resolve_path(filename)
        pipeline = self._builder.build_restore_command(
            self._connection,
            self._compressor_dir,
            str(source),
            compressed=is_compressed(filename),
        )

        logger.info(f"Restoring {self._connection.name}@{self._connection.host} from {filename}")
        with self._manager.open(filename, "rb") as source_file:
            self._runner.run(pipeline, stdin=source_file)
        logger.info(f"Restore complete: {filename}")

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _optimize(self) -> None:
        """Optimize all tables in the database."""
        logger.info(f"Optimizing tables of {self._connection.name}")
        self._runner.run(self._builder.build_optimize_command(self._connection))

    def _prepare_filename(self, filename_formatter: FilenameFormatter | None) -> str:
        host, name = self._connection.host, self._connection.name
        if filename_formatter is not None:
            base = str(filename_formatter(host, name))
            if not base:
                raise InvalidArgument("Filename formatter returned an empty name.")
        else:
            base = f"{host}-{name}-{self._clock().strftime(TIMESTAMP_FORMAT)}"

        filename = base + SQL_SUFFIX
        if self.compression_enabled:
            filename += COMPRESSED_SUFFIX

        return filename

    def _discard(self, filename: str) -> None:
        """Remove a partially written dump after a failure."""
        try:
            self._manager.remove(filename)
        except OSError as e:
            logger.warning(f"Could not remove incomplete dump {filename}: {e}")
