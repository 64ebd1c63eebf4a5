"""
Unit tests for multivcs.config module
"""
import json
import os
import tempfile
import shutil
import unittest
from pathlib import Path
from unittest.mock import patch

from multivcs.config import (
    apply_env_overrides,
    build_options,
    get_config_path,
    get_default_config,
    load_config,
    merge_configs,
)
from multivcs.domain.checkout import Action, RepoType


class TestConfigManagement(unittest.TestCase):
    """Test settings file handling"""

    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()
        self.env = patch.dict(os.environ, {'HOME': self.temp_dir}, clear=False)
        self.env.start()
        for key in [k for k in os.environ if k.startswith('MULTIVCS_')]:
            del os.environ[key]

    def tearDown(self):
        self.env.stop()
        shutil.rmtree(self.temp_dir)

    def test_get_default_config(self):
        config = get_default_config()
        self.assertEqual(config['general']['checkouts_file'], '~/.mvc-checkouts')
        self.assertEqual(config['general']['timeout'], 600)
        self.assertTrue(config['general']['quiet'])
        self.assertEqual(config['executables']['git'], 'git')
        self.assertEqual(config['arguments']['hg'], [])
        self.assertNotIn('bzr', config['executables'])

    def test_default_path(self):
        self.assertEqual(get_config_path(), Path(self.temp_dir) / '.multivcs' / 'config.json')

    def test_load_config_no_file(self):
        self.assertEqual(load_config(), get_default_config())

    def test_load_yaml_from_env_path(self):
        path = Path(self.temp_dir) / 'settings.yaml'
        path.write_text("general:\n  timeout: 30\nexecutables:\n  git: /opt/git\n")
        os.environ['MULTIVCS_CONFIG'] = str(path)

        config = load_config()

        self.assertEqual(config['general']['timeout'], 30)
        self.assertEqual(config['general']['checkouts_file'], '~/.mvc-checkouts')
        self.assertEqual(config['executables']['git'], '/opt/git')
        self.assertEqual(config['executables']['svn'], 'svn')

    def test_load_toml(self):
        directory = Path(self.temp_dir) / '.multivcs'
        directory.mkdir()
        (directory / 'config.toml').write_text('[general]\nsearch = true\n')
        self.assertTrue(load_config()['general']['search'])

    def test_load_invalid_json_uses_defaults(self):
        directory = Path(self.temp_dir) / '.multivcs'
        directory.mkdir()
        (directory / 'config.json').write_text('{not json')
        with self.assertLogs('multivcs', level='ERROR'):
            config = load_config()
        self.assertEqual(config, get_default_config())

    def test_env_overrides(self):
        os.environ['MULTIVCS_GENERAL_TIMEOUT'] = '120'
        os.environ['MULTIVCS_GENERAL_SEARCH_PREFIX'] = 'true'
        os.environ['MULTIVCS_EXECUTABLES_HG'] = '/usr/local/bin/hg'
        config = apply_env_overrides(get_default_config())
        self.assertEqual(config['general']['timeout'], 120)
        self.assertIs(config['general']['search_prefix'], True)
        self.assertIs(config['general']['search'], False)
        self.assertEqual(config['executables']['hg'], '/usr/local/bin/hg')

    def test_merge_configs(self):
        merged = merge_configs({'a': {'x': 1, 'y': 2}, 'b': 1}, {'a': {'y': 3}, 'c': 4})
        self.assertEqual(merged, {'a': {'x': 1, 'y': 3}, 'b': 1, 'c': 4})


class TestBuildOptions:
    """Deriving RunOptions from settings and command-line values."""

    def build(self, action=Action.STATUS, config=None, **cli):
        cli.setdefault('home', '/home/u')
        return build_options(action, config or get_default_config(), **cli)

    def test_defaults(self):
        options = self.build()
        assert options.checkouts_file == '/home/u/.mvc-checkouts'
        assert options.timeout == 600
        assert options.search_dirs == ('/home/u',)
        assert options.quiet is True
        assert options.show is False
        assert options.dry_run is False
        assert options.executable(RepoType.GIT) == 'git'
        assert options.args_for(RepoType.SVN) == ()

    def test_command_line_wins(self):
        config = get_default_config()
        config['general']['timeout'] = 30
        config['executables']['git'] = '/opt/git'
        options = self.build(config=config, timeout=99, git_executable='/usr/bin/git')
        assert options.timeout == 99
        assert options.executable(RepoType.GIT) == '/usr/bin/git'

    def test_settings_used_when_command_line_silent(self):
        config = get_default_config()
        config['general']['timeout'] = 30
        config['arguments']['git'] = ['-c', 'color.ui=never']
        options = self.build(config=config, git_args=())
        assert options.timeout == 30
        assert options.args_for(RepoType.GIT) == ('-c', 'color.ui=never')

    def test_search_dirs_expand_tilde(self):
        options = self.build(search_dirs=('~/research', '/abs'))
        assert options.search_dirs == ('/home/u/research', '/abs')

    def test_clone_derivations(self, capsys):
        options = self.build(Action.CLONE, search=True)
        assert options.search is False
        assert options.show is True
        assert options.timeout == 6000
        assert options.dry_run is True
        assert options.redo_existing is True
        assert capsys.readouterr().out == ""

    def test_clone_dry_run_notice(self, capsys):
        self.build(Action.CLONE, quiet=False)
        assert capsys.readouterr().out == (
            "No --dry-run argument, so using --dry-run=true; override with --no-dry-run\n"
        )

    def test_clone_explicit_no_dry_run(self, capsys):
        options = self.build(Action.CLONE, dry_run=False, quiet=False)
        assert options.dry_run is False
        assert options.redo_existing is False
        assert options.show is True
        assert capsys.readouterr().out == ""

    def test_dry_run_implies_show_and_redo(self):
        options = self.build(Action.PULL, dry_run=True)
        assert options.show is True
        assert options.redo_existing is True

    def test_debug_implies_show(self):
        assert self.build(debug=True).show is True

    def test_config_loaded_when_not_given(self, tmp_path, monkeypatch):
        path = tmp_path / 'settings.json'
        path.write_text(json.dumps({'general': {'timeout': 7}}))
        monkeypatch.setenv('MULTIVCS_CONFIG', str(path))
        assert build_options(Action.STATUS, home=str(tmp_path)).timeout == 7
