"""
Git client infrastructure for multivcs.

Answers the one question checkout discovery asks of Git: where was this
clone cloned from. Kept separate from command dispatch so it is easy
to mock in tests.
"""

import subprocess
import logging
from typing import List, Optional, Tuple

logger = logging.getLogger(__name__)


class GitClient:
    """
    Abstraction over the git commands used during discovery.

    Example:
        client = GitClient()
        url = client.remote_url("/path/to/repo")
    """

    def __init__(self, executable: str = "git", timeout: int = 30):
        """
        Initialize GitClient.

        Args:
            executable: Path to the git program
            timeout: Command timeout in seconds (default: 30)
        """
        self.executable = executable
        self.timeout = timeout

    def _run(self, args: List[str], cwd: str) -> Tuple[Optional[str], int]:
        """
        Run a git command.

        Args:
            args: Arguments after the executable
            cwd: Working directory

        Returns:
            Tuple of (stdout, returncode)
        """
        cmd = [self.executable, *args]
        try:
            result = subprocess.run(
                cmd,
                cwd=cwd,
                capture_output=True,
                encoding="utf-8",
                errors="replace",
                timeout=self.timeout
            )
            output = result.stdout
            return output.strip() if output else None, result.returncode

        except subprocess.TimeoutExpired:
            logger.warning(f"Git command timed out: {' '.join(cmd)}")
            return None, -1
        except OSError as e:
            logger.error(f"Git command failed: {' '.join(cmd)} - {e}")
            return None, -1

    def remote_url(self, path: str, remote: str = "origin") -> Optional[str]:
        """
        Get remote URL.

        Args:
            path: Path to git repository
            remote: Remote name (default: "origin")

        Returns:
            Remote URL or None if not configured
        """
        output, code = self._run(["config", "--get", f"remote.{remote}.url"], cwd=path)
        if code == 0 and output:
            return output
        return None
