"""
Run options for multivcs.

All switches that influence a run are bundled into one immutable value,
built once by ``config.build_options`` and passed to each component.
"""

from dataclasses import dataclass, field
from typing import Dict, Tuple

from ..paths import expand_tilde
from .checkout import Action, RepoType


@dataclass(frozen=True)
class RunOptions:
    """Options for one invocation of mvc."""
    action: Action
    home: str
    checkouts_file: str
    timeout: int = 600
    redo_existing: bool = False

    # Searching for clones
    search: bool = False
    search_prefix: bool = False
    search_dirs: Tuple[str, ...] = ()
    ignore_dirs: Tuple[str, ...] = ()

    # Programs
    executables: Dict[RepoType, str] = field(default_factory=dict)
    extra_args: Dict[RepoType, Tuple[str, ...]] = field(default_factory=dict)
    insecure: bool = False

    # Diagnostics
    show: bool = False
    print_directory: bool = False
    dry_run: bool = False
    quiet: bool = True
    debug: bool = False
    debug_replacers: bool = False
    debug_process_output: bool = False

    def executable(self, repo_type: RepoType) -> str:
        """Program to run for a repository type."""
        return self.executables.get(repo_type, repo_type.value)

    def args_for(self, repo_type: RepoType) -> Tuple[str, ...]:
        """Extra arguments to append to every command for a repository type."""
        return tuple(self.extra_args.get(repo_type, ()))

    def expand_tilde(self, path: str) -> str:
        """Replace a leading "~" by the home directory."""
        return expand_tilde(path, self.home)

    @property
    def trace_output(self) -> bool:
        """Whether captured output is shown even for successful commands."""
        return self.debug_replacers or self.debug_process_output
