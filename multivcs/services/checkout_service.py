"""
Checkout collection service for multivcs.

Gathers the checkouts a run operates on: first those named in the
checkout-list file, then (with --search) those found under the search
directories. Checkouts from the file come first and win over equal
checkouts found by searching.
"""

import logging
import os
from typing import List, Optional

from ..checkout_list import read_checkouts
from ..domain.checkout import RepoType
from ..domain.checkout_set import CheckoutSet
from ..domain.options import RunOptions
from ..exit_codes import SearchDirectoryMissing
from ..identity import CheckoutIdentityBuilder
from ..infra.git_client import GitClient
from ..infra.svn_client import SvnClient
from ..scanner import FilesystemScanner

logger = logging.getLogger(__name__)

# Reading this file is skipped entirely
NO_CHECKOUTS_FILE = "/dev/null"


class CheckoutService:
    """
    Service that builds the CheckoutSet for a run.

    Example:
        service = CheckoutService(options)
        checkouts = service.collect()
    """

    def __init__(self, options: RunOptions, scanner: Optional[FilesystemScanner] = None):
        self.options = options
        self.scanner = scanner

    def collect(self) -> CheckoutSet:
        """
        Read the checkout list and, if searching, scan the search directories.

        Raises:
            ConfigFormatError: if the checkout-list file is malformed
            DirectoryMissing: if a listed directory is not a checkout
            SearchDirectoryMissing: if a search directory is not a directory
        """
        checkouts = CheckoutSet()
        self.read_checkout_list(checkouts)
        if self.options.search:
            self.search(checkouts)
        return checkouts

    def read_checkout_list(self, checkouts: CheckoutSet) -> None:
        filename = self.options.checkouts_file
        if filename == NO_CHECKOUTS_FILE:
            return
        try:
            read_checkouts(filename, checkouts, self.options.home, self.options.search_prefix)
        except OSError as e:
            # Treated like an empty list
            logger.warning(f"Problem reading file {filename}: {e.strerror or e}")

    def valid_ignore_dirs(self) -> List[str]:
        """Ignore directories that exist; the others are reported and dropped."""
        valid = []
        for ignore_dir in self.options.ignore_dirs:
            path = os.path.abspath(self.options.expand_tilde(ignore_dir))
            if not os.path.exists(path):
                logger.warning(f"Directory to ignore does not exist: {path}")
            elif not os.path.isdir(path):
                logger.warning(f"Directory to ignore is not a directory: {path}")
            else:
                valid.append(path)
        return valid

    def default_scanner(self) -> FilesystemScanner:
        """Scanner whose clients run the configured git and svn programs."""
        builder = CheckoutIdentityBuilder(
            git_client=GitClient(self.options.executable(RepoType.GIT)),
            svn_client=SvnClient(self.options.executable(RepoType.SVN)),
        )
        return FilesystemScanner(builder, ignore_dirs=self.valid_ignore_dirs())

    def search(self, checkouts: CheckoutSet) -> None:
        """Add the checkouts found under every search directory."""
        for search_dir in self.options.search_dirs:
            if not os.path.isdir(search_dir):
                raise SearchDirectoryMissing(search_dir)

        scanner = self.scanner or self.default_scanner()
        for search_dir in self.options.search_dirs:
            added = scanner.scan(search_dir, checkouts)
            logger.debug(f"Searching for checkouts under {search_dir}, {len(checkouts)} checkouts, "
                         f"{added} new")
        logger.debug(f"Here are the checkouts after searching: {checkouts!r}")
