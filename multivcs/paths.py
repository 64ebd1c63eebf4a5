"""
Path helpers shared by checkout discovery.

Paths here are plain strings. A parent of None means "no parent": the
path was the filesystem root or a single relative component.
"""

import logging
import os
from typing import Optional, Tuple

logger = logging.getLogger(__name__)


def _normalize(path: str) -> str:
    stripped = path.rstrip("/")
    if not stripped and path.startswith("/"):
        return "/"
    return stripped


def path_name(path: str) -> str:
    """Final component of a path; empty for the root."""
    return os.path.basename(_normalize(path))


def path_parent(path: str) -> Optional[str]:
    """Parent of a path, or None if it has none."""
    head, tail = os.path.split(_normalize(path))
    if not tail or not head:
        return None
    return head


def path_root(path: str) -> str:
    """Walk a path up to its topmost component."""
    while (parent := path_parent(path)) is not None:
        path = parent
    return path


def strip_common_suffix(
    local: str,
    remote: str,
    remote_limit: Optional[str] = None,
    local_contains: Optional[str] = None,
) -> Tuple[Optional[str], Optional[str]]:
    """
    Strip identical trailing components off two paths.

    Stripping stops when the final components differ, when ``remote``
    reaches ``remote_limit``, or (if ``local_contains`` is given) when the
    parent of ``local`` has no subdirectory of that name.

    Args:
        local: Local directory path
        remote: Path within a repository or URL
        remote_limit: Lower bound on ``remote``; never stripped past
        local_contains: Subdirectory every stripped local parent must have

    Returns:
        Tuple of what is left of (local, remote). Either may be None if a
        path was stripped all the way.

    Example:
        >>> strip_common_suffix("/a/b/c/d/e", "/x/c/d/e")
        ('/a/b', '/x')
    """
    logger.debug(f"strip_common_suffix({local}, {remote}, {remote_limit}, {local_contains})")
    left: Optional[str] = _normalize(local)
    right: Optional[str] = _normalize(remote)
    limit = _normalize(remote_limit) if remote_limit is not None else None

    while (left is not None
           and right is not None
           and (limit is None or right != limit)
           and path_name(left) == path_name(right)):
        if local_contains is not None:
            left_parent = path_parent(left)
            if left_parent is None or not os.path.isdir(os.path.join(left_parent, local_contains)):
                break
        left = path_parent(left)
        right = path_parent(right)

    logger.debug(f"strip_common_suffix => {left} {right}")
    return left, right


def expand_tilde(path: str, home: str) -> str:
    """Replace a leading "~" by ``home``."""
    if path.startswith("~"):
        return home + path[1:]
    return path
