"""
Subversion client infrastructure for multivcs.

Describes a working copy: its URL and the URL of its repository root,
as reported by ``svn info``.
"""

import logging
import os
import re
import subprocess
from dataclasses import dataclass
from typing import Dict, Optional

logger = logging.getLogger(__name__)

_INFO_LINE = re.compile(r"^([^:]+):\s?(.*)$")


class WorkingCopyError(Exception):
    """Raised when a directory cannot be described as a working copy."""

    def __init__(self, directory: str, message: str):
        super().__init__(f"{directory}: {message}")
        self.directory = directory
        self.message = message


@dataclass(frozen=True)
class SvnInfo:
    """Result of describing a working copy."""
    url: str
    repository_root: Optional[str] = None


def parse_info(text: str) -> Dict[str, str]:
    """Parse ``svn info`` output into a field dictionary."""
    fields = {}
    for line in text.splitlines():
        match = _INFO_LINE.match(line)
        if match:
            fields[match.group(1).strip()] = match.group(2).strip()
    return fields


class SvnClient:
    """
    Abstraction over ``svn info``.

    Example:
        client = SvnClient()
        info = client.info("/home/u/proj")
        print(info.url, info.repository_root)
    """

    def __init__(self, executable: str = "svn", timeout: int = 60):
        self.executable = executable
        self.timeout = timeout

    def info(self, path: str) -> SvnInfo:
        """
        Describe the working copy at ``path``.

        Raises:
            WorkingCopyError: if ``path`` is not a working copy or svn fails
        """
        cmd = [self.executable, "info", path]
        # svn localizes its field names
        env = dict(os.environ, LC_ALL="C")
        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                encoding="utf-8",
                errors="replace",
                timeout=self.timeout,
                env=env,
            )
        except subprocess.TimeoutExpired:
            raise WorkingCopyError(path, f"svn info timed out after {self.timeout}s")
        except OSError as e:
            raise WorkingCopyError(path, str(e))

        if result.returncode != 0:
            raise WorkingCopyError(path, result.stderr.strip() or f"svn info exited {result.returncode}")

        fields = parse_info(result.stdout)
        url = fields.get("URL")
        if not url:
            raise WorkingCopyError(path, "no URL in svn info output")
        return SvnInfo(url=url, repository_root=fields.get("Repository Root") or None)
