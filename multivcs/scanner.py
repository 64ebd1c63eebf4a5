"""
Find checkouts by walking the filesystem.

Checkouts are recognized by their marker directories (.bzr, CVS, .git,
.hg, .svn). The walk never descends into a marker directory, but it does
descend into checkouts, so a checkout nested inside another is found
too. CVS and Subversion keep a marker in every directory of a working
copy; every one of those markers is examined, and the resulting
duplicates collapse in the CheckoutSet.

Note: this can be slow, because it examines every directory under the
search root.
"""

import logging
import os
from typing import Iterable, List, Optional

from .domain.checkout import MARKER_TYPES
from .domain.checkout_set import CheckoutSet
from .identity import CheckoutIdentityBuilder

logger = logging.getLogger(__name__)


def _is_real_directory(path: str) -> bool:
    """True for directories that are not reached through a symbolic link."""
    return os.path.isdir(path) and path == os.path.realpath(path)


class FilesystemScanner:
    """
    Depth-first search for checkouts below one or more directories.

    Example:
        scanner = FilesystemScanner(ignore_dirs=["/home/u/tmp"])
        checkouts = CheckoutSet()
        scanner.scan("/home/u", checkouts)
    """

    def __init__(
        self,
        builder: Optional[CheckoutIdentityBuilder] = None,
        ignore_dirs: Iterable[str] = ()
    ):
        self.builder = builder or CheckoutIdentityBuilder()
        self.ignore_dirs = {os.path.realpath(d) for d in ignore_dirs}

    def scan(self, root: str, checkouts: CheckoutSet) -> int:
        """
        Add every checkout at or under ``root`` to ``checkouts``.

        Returns:
            Number of checkouts that were not already in the set
        """
        before = len(checkouts)
        self._walk(os.path.realpath(root), checkouts)
        return len(checkouts) - before

    def _walk(self, directory: str, checkouts: CheckoutSet) -> None:
        if not os.path.isdir(directory):
            # Deleted between listing and visiting
            logger.debug(f"find checkouts: not a directory: {directory}")
            return
        if directory in self.ignore_dirs:
            logger.debug(f"find checkouts: ignoring {directory}")
            return

        name = os.path.basename(directory)
        parent = os.path.dirname(directory)
        if name in MARKER_TYPES and parent != directory:
            # Do not descend into metadata; a stale marker yields None
            checkout = self.builder.from_marker(directory, parent)
            if checkout is not None:
                checkouts.add(checkout)
            return

        for child in self._child_directories(directory):
            self._walk(child, checkouts)

    def _child_directories(self, directory: str) -> List[str]:
        try:
            names = sorted(os.listdir(directory))
        except OSError as e:
            logger.error(f"Cannot list {directory} (permission or other I/O problem?): {e}")
            return []
        children = (os.path.join(directory, n) for n in names)
        return [c for c in children if _is_real_directory(c)]
