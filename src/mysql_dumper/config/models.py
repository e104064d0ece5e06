"""Pydantic models for dumper configuration."""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from mysql_dumper.errors import ConfigurationError
from mysql_dumper.platforms.base import PlatformProfile


# ============================================================================
# Connection
# ============================================================================


class ConnectionDescriptor(BaseModel):
    """Database access data passed to every MySQL client program."""

    model_config = ConfigDict(frozen=True)

    host: str
    name: str                                       # database (schema) name
    user: str
    password: str = Field(default="", repr=False)


# ============================================================================
# Compression
# ============================================================================


class CompressionSetting(BaseModel):
    """Whether and how dumps are compressed with bzip2.

    Three modes:

    - ``disabled``: plain ``.sql`` dumps.
    - ``default``: ``bzip2`` / ``bunzip2`` resolved through ``PATH``.
    - ``directory``: tools live in ``directory``; ``bzip2`` is checked
      for executability when the setting is resolved.
    """

    model_config = ConfigDict(frozen=True)

    mode: Literal["disabled", "default", "directory"] = "disabled"
    directory: str | None = None

    @classmethod
    def disabled(cls) -> "CompressionSetting":
        return cls(mode="disabled")

    @classmethod
    def default(cls) -> "CompressionSetting":
        return cls(mode="default")

    @classmethod
    def from_directory(cls, directory: str | Path) -> "CompressionSetting":
        return cls(mode="directory", directory=str(directory))

    @classmethod
    def from_option(cls, value: bool | str | Path | None) -> "CompressionSetting":
        """Build a setting from the loose config value.

        ``False``/``None``/``""`` disable compression, ``True`` enables it
        with default tooling, and a path enables it with that directory.
        """
        if value is None or value is False or value == "":
            return cls.disabled()
        if value is True:
            return cls.default()
        return cls.from_directory(value)

    @property
    def enabled(self) -> bool:
        return self.mode != "disabled"

    def resolve(self, profile: PlatformProfile) -> str | None:
        """Resolve the compressor directory prefix for ``profile``.

        Args:
            profile: Target platform conventions.

        Returns:
            ``None`` when compression is disabled, ``""`` for tools on the
            search path, otherwise the normalized directory prefix.

        Raises:
            ConfigurationError: If the configured ``bzip2`` is not executable,
                or the platform needs an explicit directory and none is set.
        """
        if self.mode == "disabled":
            return None

        if self.mode == "default":
            if profile.requires_compressor_directory:
                raise ConfigurationError(
                    f"The {profile.name} platform requires an explicit bzip2 "
                    f"directory. Set the path to the bzip2 compressor directory "
                    f"or disable compression."
                )
            return ""

        directory = profile.normalize_directory(self.directory or "")
        bzip2 = profile.program_path(directory, "bzip2")
        if not directory or not profile.is_executable(bzip2):
            raise ConfigurationError(
                f"The {bzip2} is not executable. Set proper path to bzip2 "
                f"compressor directory or disable compression."
            )
        return directory


# ============================================================================
# Dumper configuration
# ============================================================================


class DumperConfig(BaseModel):
    """Complete dumper configuration from dumper.toml."""

    connection: ConnectionDescriptor
    backup_dir: Path
    compression: bool | str = False                 # False, True, or bzip2 directory
    mysql_home: str | None = None                   # directory of mysql client tools
    optimize_before_dump: bool = True

    @property
    def compression_setting(self) -> CompressionSetting:
        return CompressionSetting.from_option(self.compression)
