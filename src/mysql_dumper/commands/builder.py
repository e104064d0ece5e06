"""Builds MySQL dump, restore and optimize pipelines.

Every MySQL client program receives the same access arguments::

    <tool-dir><program> --user=<user> --password=<password> --host=<host> <name>

Compression is expressed as an extra pipeline stage (``bzip2`` after
``mysqldump``, ``bunzip2`` before ``mysql``) rather than a shell pipe.

Usage:
    from mysql_dumper.commands.builder import CommandBuilder
    from mysql_dumper.platforms import PosixProfile

    builder = CommandBuilder(PosixProfile(), tool_directory="/opt/mysql/bin")
    pipeline = builder.build_dump_command(connection, "", "/backups/shop.sql.bz2")
"""

from mysql_dumper.commands.models import Command, Pipeline
from mysql_dumper.config.models import ConnectionDescriptor
from mysql_dumper.errors import ConfigurationError
from mysql_dumper.platforms.base import PlatformProfile

DUMP_PROGRAM = "mysqldump"
RESTORE_PROGRAM = "mysql"
OPTIMIZE_PROGRAM = "mysqlcheck"
COMPRESS_PROGRAM = "bzip2"
DECOMPRESS_PROGRAM = "bunzip2"


class CommandBuilder:
    """Composes ``Pipeline`` objects for one platform and tool directory.

    Args:
        profile: Platform conventions for paths and executables.
        tool_directory: Directory holding the MySQL client programs
            (typically ``MYSQL_HOME``).  ``None`` means the programs are
            resolved through the search path.
    """

    def __init__(
        self,
        profile: PlatformProfile,
        tool_directory: str | None = None,
    ) -> None:
        self._profile = profile
        self._tool_directory = profile.normalize_directory(tool_directory or "")

    @property
    def tool_directory(self) -> str:
        return self._tool_directory

    # ------------------------------------------------------------------
    # Stage helpers
    # ------------------------------------------------------------------

    def _mysql_command(
        self,
        program: str,
        connection: ConnectionDescriptor,
        *options: str,
    ) -> Command:
        """Build a MySQL client invocation with access arguments."""
        if self._tool_directory:
            program = self._profile.program_path(self._tool_directory, program)
        return Command(
            program=program,
            args=(
                *options,
                f"--user={connection.user}",
                f"--password={connection.password}",
                f"--host={connection.host}",
                connection.name,
            ),
        )

    def _compressor_command(self, directory: str, program: str) -> Command:
        if directory:
            return Command(program=self._profile.program_path(directory, program))
        return Command(program=program)

    # ------------------------------------------------------------------
    # Pipelines
    # ------------------------------------------------------------------

    def build_dump_command(
        self,
        connection: ConnectionDescriptor,
        compressor_dir: str | None,
        target: str,
    ) -> Pipeline:
        """Build ``mysqldump [| bzip2] > target``.

        Args:
            connection: Database access data.
            compressor_dir: Resolved bzip2 directory prefix, ``""`` for the
                search path, or ``None`` to skip compression.
            target: Output file path (for rendering; the caller opens it).

        Returns:
            Dump pipeline.
        """
        stages = [self._mysql_command(DUMP_PROGRAM, connection)]
        if compressor_dir is not None:
            stages.append(self._compressor_command(compressor_dir, COMPRESS_PROGRAM))
        return Pipeline(stages=tuple(stages), stdout_path=target)

    def build_restore_command(
        self,
        connection: ConnectionDescriptor,
        compressor_dir: str | None,
        source: str,
        compressed: bool,
    ) -> Pipeline:
        """Build ``[bunzip2 < source |] mysql [< source]``.

        Args:
            connection: Database access data.
            compressor_dir: Resolved bzip2 directory prefix, or ``None`` when
                compression is not configured.
            source: Backup file path (for rendering; the caller opens it).
            compressed: Whether ``source`` is bzip2-compressed.

        Returns:
            Restore pipeline.

        Raises:
            ConfigurationError: If ``source`` is compressed and the platform
                requires a bzip2 directory that was never configured.
        """
        restore = self._mysql_command(RESTORE_PROGRAM, connection)
        if not compressed:
            return Pipeline(stages=(restore,), stdin_path=source)

        if compressor_dir is None:
            if self._profile.requires_compressor_directory:
                raise ConfigurationError(
                    "Import compressed sql file failure. "
                    "The path to bzip2 compressor is not set."
                )
            compressor_dir = ""

        decompress = self._compressor_command(compressor_dir, DECOMPRESS_PROGRAM)
        return Pipeline(stages=(decompress, restore), stdin_path=source)

    def build_optimize_command(self, connection: ConnectionDescriptor) -> Pipeline:
        """Build ``mysqlcheck --optimize`` over every table of the database."""
        return Pipeline(
            stages=(self._mysql_command(OPTIMIZE_PROGRAM, connection, "--optimize"),),
        )
