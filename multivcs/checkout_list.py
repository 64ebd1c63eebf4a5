"""
Read the checkout-list file (``~/.mvc-checkouts``).

The file is a sequence of sections. A section header names a root or a
repository; the lines below it are directories checked out from there:

    SVNROOT: svn+ssh://host/repos/
    ~/research/typequals/igj
    ~/research/concurrency/refactorings concRefactor/project/refactorings

    HGREPOS: https://example.org/hg/checker-framework
    ~/research/types/checker-framework

Under a *ROOT section each directory names a module below the root,
defaulting to the directory's basename; under a *REPOS section the
header is the whole repository. Blank lines and lines starting with "#"
are ignored.
"""

import logging
import os
from typing import Iterable, List, Optional, Tuple

from .domain.checkout import Checkout, CheckoutEntry, CheckoutSpec, RepoType
from .domain.checkout_set import CheckoutSet
from .exit_codes import ConfigFormatError, DirectoryMissing
from .paths import expand_tilde

logger = logging.getLogger(__name__)

SECTION_HEADERS = {
    "BZRROOT:": (RepoType.BZR, False),
    "BZRREPOS:": (RepoType.BZR, True),
    "CVSROOT:": (RepoType.CVS, False),
    "CVSREPOS:": (RepoType.CVS, True),
    "GITROOT:": (RepoType.GIT, False),
    "GITREPOS:": (RepoType.GIT, True),
    "HGROOT:": (RepoType.HG, False),
    "HGREPOS:": (RepoType.HG, True),
    "SVNROOT:": (RepoType.SVN, False),
    "SVNREPOS:": (RepoType.SVN, True),
}


def localize_cvs_root(root: str) -> str:
    """
    Use the local path of an ``:ext:`` CVS root when it is reachable.

    ``:ext:host:/path/to/cvsroot`` becomes ``/path/to/cvsroot`` if that
    directory exists on this machine.
    """
    if root.startswith(":ext:"):
        possible_root = root.split(":")[-1]
        if os.path.isdir(possible_root):
            return possible_root
    return root


def parse_entry(line: str, line_number: int = 0) -> CheckoutEntry:
    """Split a directory line at its last space into directory and module."""
    directory, sep, module = line.rpartition(" ")
    if not sep:
        return CheckoutEntry(line, None, line_number)
    return CheckoutEntry(directory.rstrip(), module, line_number)


def parse_checkout_list(lines: Iterable[str], filename: str = "<string>") -> List[CheckoutSpec]:
    """
    Parse checkout-list text into sections.

    Args:
        lines: Lines of the file
        filename: Name used in error messages

    Returns:
        List of CheckoutSpec, in file order

    Raises:
        ConfigFormatError: if a directory line comes before any section header
    """
    specs: List[CheckoutSpec] = []
    header: Optional[Tuple[RepoType, str, bool]] = None
    entries: List[CheckoutEntry] = []

    def close_section():
        if header is not None:
            repo_type, root, is_repos = header
            specs.append(CheckoutSpec(repo_type, root, is_repos, tuple(entries)))

    for line_number, raw_line in enumerate(lines, 1):
        logger.debug(f"line: {raw_line.rstrip()}")
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue

        words = line.split()
        if len(words) == 2 and words[0] in SECTION_HEADERS:
            close_section()
            repo_type, is_repos = SECTION_HEADERS[words[0]]
            root = words[1]
            if repo_type is RepoType.CVS:
                root = localize_cvs_root(root)
            header = (repo_type, root, is_repos)
            entries = []
            continue

        if header is None:
            raise ConfigFormatError(filename, line_number)
        entries.append(parse_entry(line, line_number))

    close_section()
    return specs


def prefix_siblings(
    repo_type: RepoType,
    directory: str,
    repository: Optional[str],
    module: Optional[str]
) -> List[Checkout]:
    """
    Checkouts for sibling directories whose name starts with ``directory``'s.

    Every sibling gets the same repository and module as ``directory``.
    Siblings without the marker subdirectory are not checkouts and are
    skipped.

    Known limitation: with entries ``/a/b/c`` and ``/a/b/c-fork`` pointing
    at different repositories, a directory ``/a/b/c-fork-x`` is returned
    for both, once with each repository.
    """
    parent = os.path.dirname(directory)
    if not os.path.isdir(parent):
        return []
    prefix = os.path.basename(directory)
    siblings = []
    for name in sorted(os.listdir(parent)):
        sibling = os.path.join(parent, name)
        if not (name.startswith(prefix) and os.path.isdir(sibling)):
            continue
        try:
            siblings.append(Checkout(repo_type, sibling, repository, module))
        except DirectoryMissing:
            logger.debug(f"Not a {repo_type.name} checkout, skipping: {sibling}")
    return siblings


def read_checkouts(
    filename: str,
    checkouts: CheckoutSet,
    home: str,
    search_prefix: bool = False
) -> None:
    """
    Read a checkout-list file and add its checkouts to the set.

    Args:
        filename: Path of the checkout-list file
        checkouts: The set to populate
        home: Replacement for a leading "~" in directory lines
        search_prefix: Also add sibling checkouts whose names extend a listed one

    Raises:
        OSError: if the file cannot be read
        ConfigFormatError: if the file is malformed
        DirectoryMissing: if a listed directory exists but is not a checkout
    """
    with open(filename, encoding="utf-8", errors="replace") as f:
        specs = parse_checkout_list(f, filename)

    for spec in specs:
        for entry in spec.entries:
            # The directory may not exist yet if we are about to clone it
            directory = os.path.abspath(expand_tilde(entry.directory, home))
            repository, module = spec.resolve(entry, directory)
            checkouts.add(Checkout(spec.repo_type, directory, repository, module))
            if search_prefix:
                checkouts.update(prefix_siblings(spec.repo_type, directory, repository, module))

    logger.debug("Here are the checkouts:")
    for checkout in checkouts:
        logger.debug(str(checkout))
