"""Platform profile protocol definition.

Defines the ``PlatformProfile`` Protocol that captures everything the
dumper needs to know about the host OS: path separator, executable
suffix, and whether the bzip2 tool directory must be configured
explicitly.  One implementation is injected per target platform instead
of branching on the OS inline.

Usage:
    from mysql_dumper.platforms.base import PlatformProfile

    def locate(profile: PlatformProfile, directory: str) -> str:
        return profile.program_path(profile.normalize_directory(directory), "bzip2")
"""

from typing import Protocol


class PlatformProfile(Protocol):
    """Platform conventions used when composing tool paths."""

    name: str
    separator: str
    executable_suffix: str
    requires_compressor_directory: bool

    def normalize_directory(self, path: str) -> str:
        """Return ``path`` with native separators and exactly one trailing separator.

        Args:
            path: Directory path in either separator convention.

        Returns:
            Normalized directory prefix, or ``""`` when ``path`` is empty.

        Example:
            WindowsProfile().normalize_directory("C:/bzip2/")  # "C:\\\\bzip2\\\\"
        """
        ...

    def program_path(self, directory: str, program: str) -> str:
        """Join a normalized directory prefix with a program name and suffix."""
        ...

    def is_executable(self, path: str) -> bool:
        """Return True when ``path`` is a file the current user may execute."""
        ...
