"""
Shared fixtures for multivcs tests.
"""
import os

import pytest

from multivcs.domain.checkout import Action, RepoType
from multivcs.domain.options import RunOptions


@pytest.fixture
def make_checkout(tmp_path):
    """Create a directory containing the marker for a repository type."""
    def _make(relative, repo_type=RepoType.GIT):
        directory = tmp_path / relative
        (directory / repo_type.marker).mkdir(parents=True)
        return str(directory)
    return _make


@pytest.fixture
def make_options(tmp_path):
    """Build RunOptions with a throwaway home and no checkout list."""
    def _make(action=Action.STATUS, **kwargs):
        kwargs.setdefault('home', str(tmp_path))
        kwargs.setdefault('checkouts_file', os.devnull)
        return RunOptions(action=action, **kwargs)
    return _make


@pytest.fixture
def write_hgrc():
    """Write an hgrc with a default path into a .hg directory."""
    def _write(directory, default_path):
        hg_dir = os.path.join(directory, '.hg')
        os.makedirs(hg_dir, exist_ok=True)
        with open(os.path.join(hg_dir, 'hgrc'), 'w') as f:
            f.write(f"[paths]\ndefault = {default_path}\n")
    return _write
