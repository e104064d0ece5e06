"""POSIX platform profile (Linux, macOS, BSD)."""

import os


class PosixProfile:
    """``PlatformProfile`` for POSIX systems.

    Tools are found on ``PATH`` when no directory is configured, so an
    explicit bzip2 directory is optional.
    """

    name = "posix"
    separator = "/"
    executable_suffix = ""
    requires_compressor_directory = False

    def normalize_directory(self, path: str) -> str:
        if not path:
            return ""
        return path.replace("\\", "/").rstrip("/") + "/"

    def program_path(self, directory: str, program: str) -> str:
        return f"{directory}{program}{self.executable_suffix}"

    def is_executable(self, path: str) -> bool:
        return os.path.isfile(path) and os.access(path, os.X_OK)
