"""Argument-vector command models.

Commands are never built as shell strings.  A ``Command`` is a program
plus its ordered arguments; a ``Pipeline`` chains commands stdout-to-stdin
and optionally redirects the first stage's input from a file and the
last stage's output to a file.  ``render()`` produces shell-like text
for logs and error messages only -- it is never executed.

Usage:
    from mysql_dumper.commands.models import Command, Pipeline

    pipeline = Pipeline(
        stages=(Command(program="mysqldump", args=("--host=db", "shop")),
                Command(program="bzip2")),
        stdout_path="/backups/shop.sql.bz2",
    )
    pipeline.render()
    # "mysqldump --host=db shop | bzip2 > /backups/shop.sql.bz2"
"""

import shlex

from pydantic import BaseModel, ConfigDict, Field

# Argument prefixes whose values must never reach logs or error messages
SECRET_PREFIXES: tuple[str, ...] = ("--password=",)
MASK = "******"


def _mask(arg: str) -> str:
    for prefix in SECRET_PREFIXES:
        if arg.startswith(prefix):
            return prefix + MASK
    return arg


class Command(BaseModel):
    """A single program invocation."""

    model_config = ConfigDict(frozen=True)

    program: str                                     # path or bare name on PATH
    args: tuple[str, ...] = ()                       # ordered arguments

    @property
    def argv(self) -> list[str]:
        """Full argument vector as passed to the OS."""
        return [self.program, *self.args]

    def render(self) -> str:
        """Shell-like text with secret arguments masked."""
        return shlex.join(_mask(a) for a in self.argv)


class Pipeline(BaseModel):
    """Commands chained stdout -> stdin, with optional file redirects."""

    model_config = ConfigDict(frozen=True)

    stages: tuple[Command, ...] = Field(min_length=1)
    stdin_path: str | None = None                    # "< path" on the first stage
    stdout_path: str | None = None                   # "> path" on the last stage

    @property
    def programs(self) -> list[str]:
        """Program of every stage, in order."""
        return [stage.program for stage in self.stages]

    def render(self) -> str:
        """Render the pipeline as masked shell-like text.

        Returns:
            Text such as ``"bunzip2 < a.sql.bz2 | mysql --password=****** db"``.
        """
        parts = [stage.render() for stage in self.stages]
        if self.stdin_path is not None:
            parts[0] = f"{parts[0]} < {shlex.quote(self.stdin_path)}"
        text = " | ".join(parts)
        if self.stdout_path is not None:
            text = f"{text} > {shlex.quote(self.stdout_path)}"
        return text
