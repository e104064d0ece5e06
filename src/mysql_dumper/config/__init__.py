"""Configuration management: TOML loading and config models.

Usage:
    >>> from mysql_dumper.config import load_dumper_config, DumperConfig
"""

from mysql_dumper.config.loader import load_dumper_config
from mysql_dumper.config.models import (
    CompressionSetting,
    ConnectionDescriptor,
    DumperConfig,
)

__all__ = [
    "load_dumper_config",
    "CompressionSetting",
    "ConnectionDescriptor",
    "DumperConfig",
]
