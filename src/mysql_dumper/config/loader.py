"""TOML configuration loader for the dumper.

Reads ``dumper.toml`` once at startup.  This is the only place the
process environment is consulted: ``MYSQL_HOME`` fills ``mysql_home``
when the file does not set it, and the resulting ``DumperConfig`` is
passed explicitly into the dumper from then on.

Example ``dumper.toml``::

    [database]
    host = "localhost"
    name = "shop"
    user = "backup"
    password = "secret"

    [backup]
    directory = "/var/backups/mysql"
    compression = true          # or false, or "C:/tools/bzip2"
    optimize_before_dump = true

    [tools]
    mysql_home = "/opt/mysql/bin"
"""

import os
import tomllib
from collections.abc import Mapping
from pathlib import Path

from mysql_dumper.config.models import ConnectionDescriptor, DumperConfig

MYSQL_HOME_ENV = "MYSQL_HOME"


def load_dumper_config(
    config_path: Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> DumperConfig:
    """Load dumper configuration from TOML file.

    Args:
        config_path: Path to dumper.toml (default: ``Path.cwd() / "dumper.toml"``)
        environ: Environment mapping used for ``MYSQL_HOME`` (default: ``os.environ``)

    Returns:
        DumperConfig with connection, backup and tool settings

    Raises:
        FileNotFoundError: If config file doesn't exist
        ValueError: If config format is invalid
    """
    if config_path is None:
        config_path = Path.cwd() / "dumper.toml"
    if environ is None:
        environ = os.environ

    if not config_path.exists():
        raise FileNotFoundError(
            f"Dumper config not found: {config_path}\n"
            f"Create dumper.toml with [database] and [backup] sections."
        )

    with open(config_path, "rb") as f:
        try:
            data = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ValueError(f"Invalid TOML in {config_path}: {e}") from e

    if "database" not in data:
        raise ValueError(f"Missing [database] section in {config_path}")

    backup_settings = data.get("backup", {})
    tool_settings = data.get("tools", {})

    mysql_home = tool_settings.get("mysql_home") or environ.get(MYSQL_HOME_ENV) or None

    # ValidationError is a ValueError subclass
    return DumperConfig(
        connection=ConnectionDescriptor(**data["database"]),
        # Relative directories are anchored at the config file, absolute ones win
        backup_dir=config_path.parent / backup_settings.get("directory", "backups"),
        compression=backup_settings.get("compression", False),
        mysql_home=mysql_home,
        optimize_before_dump=backup_settings.get("optimize_before_dump", True),
    )
