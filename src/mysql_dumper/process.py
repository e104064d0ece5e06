"""Runs command pipelines as child processes.

Each stage of a ``Pipeline`` becomes one child process; stage *i*'s
stdout feeds stage *i+1*'s stdin through an OS pipe, so no shell is
involved.  All stages share a single stderr pipe which is read to EOF
before any process is waited on -- a child blocked on a full stderr
buffer can therefore never deadlock the parent.

There is no timeout: a hung tool blocks the caller indefinitely.

Usage:
    from mysql_dumper.process import ProcessRunner

    runner = ProcessRunner()
    with open("/backups/shop.sql", "wb") as out:
        runner.run(pipeline, stdout=out)
"""

import logging
import os
import subprocess
from typing import IO

from mysql_dumper.commands.models import Pipeline
from mysql_dumper.errors import LaunchFailure, ProcessFailure

logger = logging.getLogger(__name__)


class ProcessRunner:
    """Synchronous pipeline runner raising typed errors."""

    def run(
        self,
        pipeline: Pipeline,
        stdin: IO[bytes] | None = None,
        stdout: IO[bytes] | None = None,
    ) -> None:
        """Run ``pipeline`` to completion.

        Args:
            pipeline: Stages to run.
            stdin: Open binary file feeding the first stage.  The null
                device is used when omitted.
            stdout: Open binary file receiving the last stage's output.  The
                null device is used when omitted.  The caller owns (and
                closes) both files.

        Raises:
            LaunchFailure: If any stage cannot be started.
            ProcessFailure: If any stage exits with a non-zero code.  The
                first stage with a positive exit code is reported, falling
                back to the first signal-terminated stage.
        """
        command = pipeline.render()
        logger.debug(f"Running: {command}")

        err_read, err_write = os.pipe()
        with os.fdopen(err_read, "rb") as error_stream:
            try:
                processes = self._launch(pipeline, command, stdin, stdout, err_write)
            finally:
                # Children hold their own copies; EOF arrives once all exit
                os.close(err_write)
            error_output = error_stream.read()

        exit_codes = [process.wait() for process in processes]

        failed = [code for code in exit_codes if code != 0]
        if failed:
            # A stage killed by SIGPIPE (negative code) is a symptom; prefer
            # the stage that actually exited with an error
            exit_code = next((code for code in failed if code > 0), failed[0])
            error = error_output.decode("utf-8", errors="replace")
            logger.warning(f"Process failed with code {exit_code}: {command}")
            raise ProcessFailure(command, exit_code, error)

        logger.debug(f"Finished: {command}")

    def _launch(
        self,
        pipeline: Pipeline,
        command: str,
        stdin: IO[bytes] | None,
        stdout: IO[bytes] | None,
        err_write: int,
    ) -> list[subprocess.Popen]:
        """Start every stage, chaining stdout to stdin."""
        processes: list[subprocess.Popen] = []
        source = stdin if stdin is not None else subprocess.DEVNULL
        last = len(pipeline.stages) - 1

        for index, stage in enumerate(pipeline.stages):
            if index == last:
                target = stdout if stdout is not None else subprocess.DEVNULL
            else:
                target = subprocess.PIPE

            try:
                process = subprocess.Popen(
                    stage.argv,
                    stdin=source,
                    stdout=target,
                    stderr=err_write,
                )
            except OSError as e:
                self._abort(processes)
                raise LaunchFailure(command, f"{stage.program}: {e}") from e

            # The next stage owns the read end now; closing ours lets the
            # writer see SIGPIPE if the reader exits early
            if processes and processes[-1].stdout is not None:
                processes[-1].stdout.close()

            processes.append(process)
            source = process.stdout

        return processes

    @staticmethod
    def _abort(processes: list[subprocess.Popen]) -> None:
        """Kill and reap stages that started before a launch failure."""
        for process in processes:
            if process.stdout is not None:
                process.stdout.close()
            process.kill()
            process.wait()
