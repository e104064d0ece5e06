"""Windows platform profile.

bzip2 is not shipped with Windows, so compression requires an explicit
directory holding ``bzip2.exe``; that executable is validated once when
the dumper is configured rather than when a dump runs.
"""

import os


class WindowsProfile:
    """``PlatformProfile`` for Windows (backslash paths, ``.exe`` tools)."""

    name = "windows"
    separator = "\\"
    executable_suffix = ".exe"
    requires_compressor_directory = True

    def normalize_directory(self, path: str) -> str:
        if not path:
            return ""
        # Mixed separators are common in config files
        return path.replace("/", "\\").rstrip("\\") + "\\"

    def program_path(self, directory: str, program: str) -> str:
        return f"{directory}{program}{self.executable_suffix}"

    def is_executable(self, path: str) -> bool:
        # os.access() reports X_OK for any existing file on Windows
        return os.path.isfile(path) and os.access(path, os.X_OK)
