"""
Command and output-rewriting domain objects for multivcs.

A Command is one fully built subprocess invocation against one checkout,
together with the replacer rules that clean up its output. Commands are
built fresh for every checkout and never mutated.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

# Stands for the checkout directory inside a replacement template
DIR_PLACEHOLDER = "{dir}"


@dataclass(frozen=True)
class ReplacerRule:
    """
    A regex rewrite applied to the whole captured output of a command.

    ``template`` uses Python ``re`` replacement syntax (``\\g<1>``) and may
    contain ``{dir}``, which is replaced by the checkout directory.
    """
    pattern: str
    template: str

    @property
    def regex(self) -> re.Pattern:
        return re.compile(self.pattern)

    def apply(self, text: str, directory: str) -> str:
        """Replace every match of the pattern in ``text``."""
        # Backslashes in the directory must survive re.sub's template expansion
        replacement = self.template.replace(DIR_PLACEHOLDER, directory.replace("\\", "\\\\"))
        return self.regex.sub(replacement, text)

    @property
    def printable_pattern(self) -> str:
        return self.pattern.replace("\r", "\\r").replace("\n", "\\n")


@dataclass(frozen=True)
class Command:
    """One subprocess invocation: argv, working directory and output rules."""
    argv: Tuple[str, ...]
    cwd: str
    directory: str
    rules: Tuple[ReplacerRule, ...] = ()

    @property
    def executable(self) -> str:
        return self.argv[0]

    def display(self) -> str:
        """Shell-like rendering, as printed by --show and on timeout."""
        return f"  cd {self.cwd}\n  {' '.join(self.argv)}"


class Outcome(Enum):
    """How one command ended."""
    SUCCESS = "success"
    NON_ZERO_EXIT = "non_zero_exit"
    TIMED_OUT = "timed_out"
    LAUNCH_FAILED = "launch_failed"
    DRY_RUN = "dry_run"


@dataclass(frozen=True)
class ExecutionResult:
    """Result of running (or not running) a Command."""
    command: Command
    outcome: Outcome
    returncode: Optional[int] = None
    output: str = ""

    @property
    def ok(self) -> bool:
        return self.outcome in (Outcome.SUCCESS, Outcome.DRY_RUN)

    @property
    def timed_out(self) -> bool:
        return self.outcome is Outcome.TIMED_OUT
