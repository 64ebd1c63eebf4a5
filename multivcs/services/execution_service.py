"""
Execution service for multivcs.

Runs one Command as a subprocess with a time limit, captures its
combined stdout and stderr, and prints the normalized output when it is
of interest: always for status, and for any command that failed.
"""

import logging
import subprocess
from typing import Optional, Union

import click

from ..domain.command import Command, ExecutionResult, Outcome
from ..domain.options import RunOptions
from ..normalizer import normalize

logger = logging.getLogger(__name__)

DETACHED_HEAD_NOTICE = "You are not currently on a branch."


def _as_text(output: Optional[Union[str, bytes]]) -> str:
    # TimeoutExpired carries bytes even when the run was in text mode
    if output is None:
        return ""
    if isinstance(output, bytes):
        return output.decode("utf-8", errors="replace")
    return output


class ExecutionEngine:
    """
    Runs commands one at a time and reports their output.

    A command that cannot be started, exits non-zero, or runs out of time
    is reported and yields a result; it never raises, so one bad checkout
    cannot stop the others.

    Example:
        engine = ExecutionEngine(options)
        result = engine.run(command, show_output=True)
        if result.timed_out:
            ...
    """

    def __init__(self, options: RunOptions):
        self.options = options

    def run(self, command: Command, show_output: bool = False) -> ExecutionResult:
        """
        Run ``command`` (or, in a dry run, only print it).

        Args:
            command: The command to run
            show_output: Print the normalized output even on success

        Returns:
            ExecutionResult describing how the command ended
        """
        if self.options.show:
            click.echo(command.display())
        if self.options.dry_run:
            return ExecutionResult(command, Outcome.DRY_RUN)

        result = self._execute(command)
        if result.outcome is not Outcome.LAUNCH_FAILED:
            self._report(result, show_output)
        return result

    def _execute(self, command: Command) -> ExecutionResult:
        timeout = self.options.timeout
        try:
            completed = subprocess.run(
                list(command.argv),
                cwd=command.cwd,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                encoding="utf-8",
                errors="replace",
                timeout=timeout,
            )
        except subprocess.TimeoutExpired as e:
            click.echo(f"Timed out (limit: {timeout}s):")
            click.echo(command.display())
            return ExecutionResult(command, Outcome.TIMED_OUT, None, _as_text(e.output))
        except OSError as e:
            reason = e.strerror or str(e)
            click.echo(
                f'Cannot run program "{command.executable}" (in directory "{command.cwd}"): {reason}',
                err=True,
            )
            return ExecutionResult(command, Outcome.LAUNCH_FAILED)

        logger.debug(f"{' '.join(command.argv)} exited with {completed.returncode}")
        outcome = Outcome.SUCCESS if completed.returncode == 0 else Outcome.NON_ZERO_EXIT
        return ExecutionResult(command, outcome, completed.returncode, completed.stdout or "")

    def _report(self, result: ExecutionResult, show_output: bool) -> None:
        options = self.options
        if not (show_output or not result.ok or options.trace_output):
            return

        command = result.command
        output = result.output
        if options.trace_output:
            click.echo(f"preoutput=<<<{output}>>>")
        tracer = click.echo if options.debug_replacers else None
        output = normalize(output, command.rules, command.directory, tracer)
        if options.trace_output:
            click.echo(f"postoutput=<<<{output}>>>")

        if output.startswith(DETACHED_HEAD_NOTICE):
            click.echo(f"{command.cwd}:")
        if output:
            click.echo(output, nl=False)
