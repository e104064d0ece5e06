"""Platform profiles package.

Provides the ``PlatformProfile`` Protocol and one implementation per
supported platform.  ``current_profile()`` picks the profile for the
running interpreter; tests and cross-platform tooling inject a profile
explicitly instead.

Usage:
    from mysql_dumper.platforms import PosixProfile, WindowsProfile, current_profile

    profile = current_profile()
"""

import os

from mysql_dumper.platforms.base import PlatformProfile
from mysql_dumper.platforms.posix import PosixProfile
from mysql_dumper.platforms.windows import WindowsProfile

__all__ = [
    "PlatformProfile",
    "PosixProfile",
    "WindowsProfile",
    "current_profile",
]


def current_profile() -> PlatformProfile:
    """Return the profile matching the running OS."""
    if os.name == "nt":
        return WindowsProfile()
    return PosixProfile()
