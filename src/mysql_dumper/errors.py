"""Typed errors raised by the dumper and the backup repository.

Every error derives from ``DumperError`` so callers can catch the whole
family at once, or pick out a single failure mode.

Usage:
    from mysql_dumper.errors import ProcessFailure

    try:
        dumper.dump()
    except ProcessFailure as e:
        print(e.exit_code, e.stderr)
"""


class DumperError(Exception):
    """Base class for all mysql-dumper errors."""

    pass


class ConfigurationError(DumperError):
    """Raised when compression tooling is missing or misconfigured."""

    pass


class InvalidArgument(DumperError, ValueError):
    """Raised for empty, negative or otherwise unusable input."""

    pass


class NotFoundError(DumperError, FileNotFoundError):
    """Raised when a referenced backup file does not exist."""

    pass


class LaunchFailure(DumperError):
    """Raised when an external process cannot be started."""

    def __init__(self, command: str, reason: str) -> None:
        self.command = command
        super().__init__(f'Unable to launch process "{command}": {reason}')


class ProcessFailure(DumperError):
    """Raised when an external process exits with a non-zero code.

    Carries the (masked) command text, the exit code and the decoded
    standard error output so the failure can be diagnosed without
    re-running the command.
    """

    def __init__(self, command: str, exit_code: int, stderr: str) -> None:
        self.command = command
        self.exit_code = exit_code
        self.stderr = stderr
        super().__init__(
            f'Process "{command}" failed with code {exit_code}. '
            f'Error: "{stderr.strip()}"'
        )


class AggregateRemovalFailure(DumperError):
    """Raised after retention pruning when one or more deletions failed.

    ``failures`` holds ``(filename, OSError)`` pairs for every file that
    could not be removed.  Files that were removed successfully stay removed.
    """

    def __init__(self, failures: list[tuple[str, OSError]]) -> None:
        self.failures = failures
        names = ", ".join(name for name, _ in failures)
        super().__init__(
            f"Failed to remove {len(failures)} backup file(s): {names}"
        )
