"""
Derive a Checkout from a version control marker directory.

Distributed systems (Git, Hg, Bzr) have a single marker at the top of a
clone. CVS and Subversion have a marker in every directory of a working
copy, so the top of the checkout and the module within the repository
are recovered by aligning the local path with the path in the
repository (see ``paths.strip_common_suffix``).
"""

import configparser
import logging
import os
from typing import Optional
from urllib.parse import unquote, urlsplit, urlunsplit

from .domain.checkout import Checkout, RepoType, MARKER_TYPES
from .exit_codes import CheckoutAlignmentError, RepositoryRootUnavailable
from .infra.git_client import GitClient
from .infra.svn_client import SvnClient, WorkingCopyError
from .paths import path_name, path_root, strip_common_suffix

logger = logging.getLogger(__name__)


def read_hg_default_path(hg_dir: str) -> Optional[str]:
    """
    Read ``paths.default`` from the hgrc inside a ``.hg`` directory.

    Returns:
        The configured default path, verbatim, or None if there is no
        hgrc or it sets no default path.
    """
    hgrc = os.path.join(hg_dir, "hgrc")
    if not os.path.isfile(hgrc):
        return None
    # allow_no_value lets "%include" lines through; ":" belongs to sub-option
    # names such as "default:pushurl"
    parser = configparser.ConfigParser(
        delimiters=("=",), interpolation=None, strict=False, allow_no_value=True
    )
    with open(hgrc, encoding="utf-8", errors="replace") as f:
        try:
            parser.read_file(f)
        except configparser.Error as e:
            logger.warning(f"Cannot parse {hgrc}: {e}")
            return None
    return parser.get("paths", "default", fallback=None) or None


def _truncate_url_path(encoded_path: str, remaining: str) -> str:
    """Cut an encoded URL path down to as many components as ``remaining`` has."""
    keep = len(remaining.rstrip("/").split("/"))
    parts = encoded_path.rstrip("/").split("/")[:keep]
    return "/".join(parts) or "/"


class CheckoutIdentityBuilder:
    """
    Turns a marker directory hit into a Checkout.

    Example:
        builder = CheckoutIdentityBuilder()
        checkout = builder.from_marker("/home/u/proj/.git", "/home/u/proj")
    """

    def __init__(
        self,
        git_client: Optional[GitClient] = None,
        svn_client: Optional[SvnClient] = None
    ):
        self.git = git_client or GitClient()
        self.svn = svn_client or SvnClient()

    def from_marker(self, marker_dir: str, parent_dir: str) -> Optional[Checkout]:
        """
        Build the Checkout for a marker directory.

        Args:
            marker_dir: A directory named .bzr, CVS, .git, .hg or .svn
            parent_dir: The directory containing it

        Returns:
            The Checkout, or None if the marker does not belong to a usable
            working copy.
        """
        repo_type = MARKER_TYPES[os.path.basename(marker_dir)]
        if repo_type is RepoType.BZR:
            return Checkout(RepoType.BZR, parent_dir)
        if repo_type is RepoType.CVS:
            return self.cvs_checkout(marker_dir, parent_dir)
        if repo_type is RepoType.GIT:
            return self.git_checkout(parent_dir)
        if repo_type is RepoType.HG:
            return self.hg_checkout(marker_dir, parent_dir)
        return self.svn_checkout(parent_dir)

    def cvs_checkout(self, cvs_dir: str, parent_dir: str) -> Optional[Checkout]:
        """Checkout for a ``CVS`` directory, from its Repository and Root files."""
        repository_file = os.path.join(cvs_dir, "Repository")
        root_file = os.path.join(cvs_dir, "Root")
        if not (os.path.exists(repository_file) and os.path.exists(root_file)):
            # apparently it wasn't a version control directory
            return None

        with open(repository_file, encoding="utf-8", errors="replace") as f:
            path_in_repo = f.read().strip()
        with open(root_file, encoding="utf-8", errors="replace") as f:
            cvs_root = f.read().strip()

        local, remote = strip_common_suffix(
            parent_dir, path_in_repo, path_root(path_in_repo), RepoType.CVS.marker
        )
        if local is None:
            raise CheckoutAlignmentError(
                f"dir ({parent_dir}) is parent of path in repo ({path_in_repo})"
            )
        module = remote if remote is not None else path_name(local)
        return Checkout(RepoType.CVS, local, cvs_root, module)

    def hg_checkout(self, hg_dir: str, parent_dir: str) -> Checkout:
        """Checkout for a ``.hg`` directory; the repository is hgrc's default path."""
        repository = read_hg_default_path(hg_dir)
        if repository is not None and repository.endswith("/"):
            repository = repository[:-1]
        return Checkout(RepoType.HG, parent_dir, repository)

    def git_checkout(self, parent_dir: str) -> Checkout:
        """Checkout for a clone; the repository is the origin remote's URL."""
        return Checkout(RepoType.GIT, parent_dir, self.git.remote_url(parent_dir))

    def svn_checkout(self, parent_dir: str) -> Optional[Checkout]:
        """
        Checkout for a directory containing ``.svn``.

        The working copy URL is cut back by the trailing components it
        shares with the local directory, but never above the repository
        root and never to a local directory that is not itself part of
        the working copy.

        Raises:
            RepositoryRootUnavailable: the working copy predates repository roots
            CheckoutAlignmentError: the local and remote paths cannot be aligned
        """
        try:
            info = self.svn.info(parent_dir)
        except WorkingCopyError as e:
            logger.error(f"Problem describing svn working copy {parent_dir}: {e.message}")
            return None

        if info.repository_root is None:
            raise RepositoryRootUnavailable(parent_dir, info.url)

        url = urlsplit(info.url)
        url_path = unquote(url.path)
        root_path = unquote(urlsplit(info.repository_root).path)
        logger.debug(f"repoRoot = {info.repository_root}")
        logger.debug(f" repoUrl = {info.url}")
        logger.debug(f"     parentDir = {parent_dir}")

        local, remote = strip_common_suffix(parent_dir, url_path, root_path, RepoType.SVN.marker)
        if local is None:
            raise CheckoutAlignmentError(
                f"dir ({parent_dir}) is parent of repository URL ({url_path})"
            )
        if remote is None:
            raise CheckoutAlignmentError(
                f"dir ({parent_dir}) is child of repository URL ({url_path})"
            )

        repository = urlunsplit(url._replace(path=_truncate_url_path(url.path, remote)))
        if not repository.startswith(info.repository_root):
            raise CheckoutAlignmentError(
                f"repoRoot={info.repository_root}, url={repository}"
            )
        logger.debug(f"    dirRelative = {local}")
        return Checkout(RepoType.SVN, local, repository)
