#!/usr/bin/env python3

import os
import json
import tomllib
from pathlib import Path
from typing import Any, Dict, Optional

import logging
import sys

import click
import yaml

from .domain.checkout import Action, RepoType
from .domain.options import RunOptions
from .paths import expand_tilde

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(levelname)s: %(message)s",
    handlers=[
        logging.StreamHandler(sys.stderr) # Default to stderr
    ]
)
logger = logging.getLogger("multivcs")

CONFIG_FILENAMES = ['config.json', 'config.toml', 'config.yaml', 'config.yml']

# Programs mvc knows how to drive; Bzr is recognized but never run
PROGRAM_TYPES = (RepoType.CVS, RepoType.GIT, RepoType.HG, RepoType.SVN)


def get_config_path():
    """Get the path to the settings file.

    Checks in order:
    1. MULTIVCS_CONFIG environment variable
    2. ~/.multivcs/ directory
    """
    if 'MULTIVCS_CONFIG' in os.environ:
        path = Path(os.environ['MULTIVCS_CONFIG'])
        if path.exists():
            return path

    multivcs_dir = Path.home() / '.multivcs'
    for filename in CONFIG_FILENAMES:
        path = multivcs_dir / filename
        if path.exists():
            return path

    return multivcs_dir / 'config.json'


def load_config():
    """Load settings from file, over the defaults, then apply environment overrides."""
    config_path = get_config_path()
    config = get_default_config()

    if config_path.exists():
        try:
            if config_path.suffix.lower() in ['.toml']:
                with open(config_path, 'rb') as f:
                    file_config = tomllib.load(f)
            elif config_path.suffix.lower() in ['.yaml', '.yml']:
                with open(config_path, 'r') as f:
                    file_config = yaml.safe_load(f) or {}
            else:
                # Default to JSON format
                with open(config_path, 'r') as f:
                    file_config = json.load(f)

            config = merge_configs(config, file_config)
        except (OSError, ValueError, yaml.YAMLError) as e:
            logger.error(f"Error loading config from {config_path}: {e}")

    return apply_env_overrides(config)


def get_default_config():
    """Get default configuration."""
    return {
        "general": {
            "checkouts_file": "~/.mvc-checkouts",
            "timeout": 600,
            "search": False,
            "search_prefix": False,
            "search_dirs": [],
            "ignore_dirs": [],
            "quiet": True,
            "redo_existing": False,
            "insecure": False,
        },
        "executables": {t.value: t.value for t in PROGRAM_TYPES},
        "arguments": {t.value: [] for t in PROGRAM_TYPES},
        "logging": {
            "level": "INFO",
        },
    }


def merge_configs(base_config, override_config):
    """
    Recursively merge two configuration dictionaries.

    Args:
        base_config (dict): Base configuration
        override_config (dict): Configuration to merge/override with

    Returns:
        dict: Merged configuration
    """
    merged = base_config.copy()

    for key, value in override_config.items():
        if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
            merged[key] = merge_configs(merged[key], value)
        else:
            merged[key] = value

    return merged


def apply_env_overrides(config):
    """
    Apply environment variable overrides to configuration.
    Environment variables follow the pattern: MULTIVCS_SECTION_KEY
    For example: MULTIVCS_GENERAL_TIMEOUT=120
    """
    env_prefix = "MULTIVCS_"

    for env_key, value in os.environ.items():
        if not env_key.startswith(env_prefix) or env_key == "MULTIVCS_CONFIG":
            continue

        key_parts = env_key[len(env_prefix):].lower().split('_')

        if value.lower() in ('true', 'yes', 'on'):
            typed_value = True
        elif value.lower() in ('false', 'no', 'off'):
            typed_value = False
        elif value.isdigit():
            typed_value = int(value)
        else:
            typed_value = value

        current_level = config
        i = 0
        while i < len(key_parts):
            # Longest key in current_level that is a prefix of the remaining key_parts
            best_match_len = 0
            matched_key = None

            for config_key in current_level.keys():
                config_key_parts_from_key = config_key.split('_')
                if key_parts[i : i + len(config_key_parts_from_key)] == config_key_parts_from_key:
                    if len(config_key_parts_from_key) > best_match_len:
                        best_match_len = len(config_key_parts_from_key)
                        matched_key = config_key

            if matched_key:
                if i + best_match_len == len(key_parts):
                    current_level[matched_key] = typed_value
                    break

                if isinstance(current_level[matched_key], dict):
                    current_level = current_level[matched_key]
                    i += best_match_len
                else:
                    # Env var is longer than the path to a non-dict value
                    break
            else:
                break

    return config


def configure_logging(config: Dict[str, Any], debug: bool = False) -> None:
    """Set the package log level from settings, or DEBUG with --debug."""
    if debug:
        logger.setLevel(logging.DEBUG)
        return
    level = str(config.get("logging", {}).get("level", "INFO")).upper()
    logger.setLevel(getattr(logging, level, logging.INFO))


def _as_list(value) -> list:
    if value is None:
        return []
    if isinstance(value, str):
        return value.split()
    return list(value)


def build_options(action: Action, config: Optional[Dict[str, Any]] = None, **cli) -> RunOptions:
    """
    Combine settings and command-line values into the options for one run.

    Command-line values win over settings; a command-line value of None
    (or an empty tuple for repeatable options) means "not given".

    Args:
        action: The action being run
        config: Settings, as returned by load_config (loaded if None)
        **cli: Command-line values, named like the RunOptions fields;
            per-program values are ``<type>_executable`` and ``<type>_args``

    Returns:
        RunOptions with derived values filled in
    """
    if config is None:
        config = load_config()
    general = config.get("general", {})

    def pick(name, default=None):
        value = cli.get(name)
        if value is None:
            value = general.get(name, default)
        return value

    home = cli.get("home") or os.path.expanduser("~")
    checkouts_file = expand_tilde(pick("checkouts_file", "~/.mvc-checkouts"), home)
    timeout = int(pick("timeout", 600))
    search = bool(pick("search", False))
    quiet = bool(pick("quiet", True))
    redo_existing = bool(pick("redo_existing", False))
    show = bool(cli.get("show"))
    debug = bool(cli.get("debug"))
    dry_run = cli.get("dry_run")

    search_dirs = _as_list(cli.get("search_dirs")) or _as_list(general.get("search_dirs"))
    search_dirs = [expand_tilde(d, home) for d in search_dirs] or [home]
    ignore_dirs = _as_list(cli.get("ignore_dirs")) or _as_list(general.get("ignore_dirs"))

    executables = {}
    extra_args = {}
    for repo_type in PROGRAM_TYPES:
        name = repo_type.value
        executables[repo_type] = (cli.get(f"{name}_executable")
                                  or config.get("executables", {}).get(name)
                                  or name)
        extra_args[repo_type] = tuple(_as_list(cli.get(f"{name}_args"))
                                      or _as_list(config.get("arguments", {}).get(name)))

    if action is Action.CLONE:
        search = False
        show = True
        timeout *= 10
        if dry_run is None:
            dry_run = True
            if not quiet:
                click.echo("No --dry-run argument, so using --dry-run=true; override with --no-dry-run")
    dry_run = bool(dry_run)
    if dry_run:
        show = True
        redo_existing = True
    if debug:
        show = True

    return RunOptions(
        action=action,
        home=home,
        checkouts_file=checkouts_file,
        timeout=timeout,
        redo_existing=redo_existing,
        search=search,
        search_prefix=bool(pick("search_prefix", False)),
        search_dirs=tuple(search_dirs),
        ignore_dirs=tuple(ignore_dirs),
        executables=executables,
        extra_args=extra_args,
        insecure=bool(pick("insecure", False)),
        show=show,
        print_directory=bool(cli.get("print_directory")),
        dry_run=dry_run,
        quiet=quiet,
        debug=debug,
        debug_replacers=bool(cli.get("debug_replacers")),
        debug_process_output=bool(cli.get("debug_process_output")),
    )
