"""
Infrastructure layer for multivcs.

Thin clients around the external programs that checkout discovery
consults:
- GitClient: origin remote URL of a clone
- SvnClient: URL and repository root of a working copy
"""

from .git_client import GitClient
from .svn_client import SvnClient, SvnInfo, WorkingCopyError

__all__ = [
    'GitClient',
    'SvnClient',
    'SvnInfo',
    'WorkingCopyError',
]
