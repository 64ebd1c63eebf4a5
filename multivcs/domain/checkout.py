"""
Checkout domain objects for multivcs.

A Checkout is a local directory recognized as a working copy of some
upstream location. Identity is the triple (repo_type, canonical
directory, module); how the checkout was found does not matter.
"""

import os
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple

from ..exit_codes import DirectoryMissing


class RepoType(Enum):
    """The version control systems multivcs knows about."""
    BZR = "bzr"
    CVS = "cvs"
    GIT = "git"
    HG = "hg"
    SVN = "svn"

    @property
    def marker(self) -> str:
        """Name of the metadata subdirectory that marks a working copy."""
        return MARKER_DIRS[self]


MARKER_DIRS = {
    RepoType.BZR: ".bzr",
    RepoType.CVS: "CVS",
    RepoType.GIT: ".git",
    RepoType.HG: ".hg",
    RepoType.SVN: ".svn",
}

# Reverse lookup used when walking the filesystem
MARKER_TYPES = {marker: repo_type for repo_type, marker in MARKER_DIRS.items()}


class Action(Enum):
    """Actions that can be applied to every checkout."""
    CLONE = "clone"
    STATUS = "status"
    PULL = "pull"
    LIST = "list"

    @classmethod
    def parse(cls, text: str) -> Optional['Action']:
        """
        Resolve a (possibly abbreviated) action name.

        The text may be any prefix of an action name or one of its aliases
        ("checkout" for clone, "update" for pull). Earlier names win when a
        prefix is ambiguous.
        """
        for name, action in ACTION_NAMES:
            if name.startswith(text):
                return action
        return None


ACTION_NAMES: Tuple[Tuple[str, Action], ...] = (
    ("checkout", Action.CLONE),
    ("clone", Action.CLONE),
    ("list", Action.LIST),
    ("pull", Action.PULL),
    ("status", Action.STATUS),
    ("update", Action.PULL),
)


@dataclass(frozen=True)
class Checkout:
    """
    Immutable representation of one working copy.

    Attributes:
        repo_type: Which version control system manages the directory
        directory: Absolute local directory, as it was given or found
        repository: Upstream reference (CVS root, SVN URL, Hg default path,
            Git origin URL); None when unknown
        module: Module within the repository; only used for CVS
        canonical_directory: ``directory`` with symlinks resolved

    The directory may not exist yet (a clone target), but if it exists it
    must contain the marker subdirectory for ``repo_type``.

    Example:
        c = Checkout(RepoType.GIT, "/home/u/proj", "https://example.org/proj.git")
        c == Checkout(RepoType.GIT, "/home/u/link-to-proj")  # True if the link resolves there
    """

    repo_type: RepoType
    directory: str = field(compare=False)
    repository: Optional[str] = field(default=None, compare=False)
    module: Optional[str] = None
    canonical_directory: str = field(init=False, repr=False)

    def __post_init__(self):
        object.__setattr__(self, 'canonical_directory', os.path.realpath(self.directory))
        if os.path.exists(self.directory):
            if not os.path.isdir(self.directory):
                raise DirectoryMissing(f"Not a directory: {self.directory}")
            marker = self.repo_type.marker
            if not os.path.isdir(os.path.join(self.directory, marker)):
                raise DirectoryMissing(
                    f"Directory {self.directory} exists but {marker} subdirectory does not exist"
                )
        if self.repo_type is RepoType.CVS:
            if self.module is None:
                raise ValueError(f"No module for CVS checkout at: {self.directory}")
        elif self.module is not None:
            raise ValueError(f"Only CVS checkouts carry a module: {self.directory}")

    @property
    def name(self) -> str:
        """Final path component of the checkout directory."""
        return os.path.basename(self.directory)

    @property
    def parent(self) -> Optional[str]:
        """Parent of the checkout directory, or None for the filesystem root."""
        parent = os.path.dirname(self.directory)
        return None if parent == self.directory else parent

    def to_dict(self):
        return {
            'type': self.repo_type.name,
            'directory': self.directory,
            'repository': self.repository,
            'module': self.module,
        }

    def __str__(self) -> str:
        return f"{self.repo_type.name} {self.directory} {self.repository} {self.module}"


@dataclass(frozen=True)
class CheckoutEntry:
    """One directory line of a checkout-list section."""
    directory: str
    module: Optional[str] = None
    line_number: int = 0


@dataclass(frozen=True)
class CheckoutSpec:
    """
    A parsed checkout-list section, before its entries are resolved.

    ``root`` is either a root (each entry names a module below it) or,
    when ``is_repos`` is set, a fully qualified repository.
    """
    repo_type: RepoType
    root: str
    is_repos: bool = False
    entries: Tuple[CheckoutEntry, ...] = ()

    def resolve(self, entry: CheckoutEntry, directory: str) -> Tuple[str, Optional[str]]:
        """
        Work out the repository reference and module for one entry.

        Args:
            entry: The directory line being resolved
            directory: The entry's directory with "~" expanded

        Returns:
            Tuple of (repository, module); module is None for every type but CVS
        """
        root = self.root[:-1] if self.root.endswith("/") else self.root
        module = entry.module
        if module is None:
            module = os.path.basename(os.path.normpath(directory))
        if self.repo_type is RepoType.CVS:
            return root, module
        if not self.is_repos:
            root = f"{root}/{module}"
        return root, None
