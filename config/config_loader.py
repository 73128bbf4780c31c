"""
Configuration loader for pre-commit hook settings.

Loads the repository's .pre-commit-config.yaml and extracts the file filter
of the local eslint hook, so that only matching changed files are linted.
"""

import re
import yaml
from pathlib import Path
from typing import Dict, Any, List, Optional

from git_diff_processor.errors import ConfigError

ESLINT_HOOK_ID = "eslint"
LOCAL_REPO = "local"

# YAML block scalars keep the line breaks and indentation of long regexes
_NEWLINE_INDENT = re.compile(r"\n *")


def load_pre_commit_config(config_path: Path) -> Dict[str, Any]:
    """
    Load a pre-commit configuration from YAML file.

    Args:
        config_path: Path to .pre-commit-config.yaml

    Returns:
        Dictionary containing the pre-commit configuration

    Raises:
        FileNotFoundError: If config file doesn't exist
        ConfigError: If YAML parsing fails or the document is not a mapping
    """
    if not config_path.exists():
        raise FileNotFoundError(
            f"unable to find pre-commit config file: {config_path}, "
            f"try passing in a path explicitly"
        )

    with open(config_path, 'r', encoding='utf-8') as f:
        try:
            config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"unable to parse `{config_path}`: {e}") from e

    if not isinstance(config, dict):
        raise ConfigError(f"unable to parse `{config_path}`: expected a mapping at the top level")

    return config


def _find_entry(entries: List[Any], key: str, value: str) -> Optional[Dict[str, Any]]:
    for entry in entries:
        if isinstance(entry, dict) and entry.get(key) == value:
            return entry
    return None


def get_eslint_hook(config: Dict[str, Any], config_path: Path) -> Dict[str, Any]:
    """
    Get the local eslint hook configuration.

    Args:
        config: Full pre-commit configuration dictionary
        config_path: Path the configuration was read from (for messages)

    Returns:
        The hook mapping
    """
    where = f"unable to parse `{config_path}`"

    repos = config.get('repos')
    if repos is None:
        raise ConfigError(f"{where}: no value `repos` found")
    if not isinstance(repos, list):
        raise ConfigError(f"{where}: expected `repos` to be a sequence")

    local_repo = _find_entry(repos, 'repo', LOCAL_REPO)
    if local_repo is None:
        raise ConfigError(f'{where}: no repo found with repo "{LOCAL_REPO}"')

    hooks = local_repo.get('hooks')
    if hooks is None:
        raise ConfigError(f'{where}: no value `repos[repo == "{LOCAL_REPO}"].hooks` found')
    if not isinstance(hooks, list):
        raise ConfigError(f'{where}: expected `repos[repo == "{LOCAL_REPO}"].hooks` to be a sequence')

    hook = _find_entry(hooks, 'id', ESLINT_HOOK_ID)
    if hook is None:
        raise ConfigError(f'{where}: no local hook found with id "{ESLINT_HOOK_ID}"')

    return hook


def _compile(pattern: str, key: str) -> "re.Pattern[str]":
    try:
        return re.compile(pattern)
    except re.error as e:
        raise ConfigError(f"unable to parse `{key}` as a valid regex: {e}") from e


def get_eslint_file_pattern(config: Dict[str, Any], config_path: Path) -> "re.Pattern[str]":
    """
    Build the regex that selects files for the eslint hook.

    The `exclude` filter is expected to be written as a negative lookahead
    group, e.g. `(?!vendor/)`, so it can simply be prepended to `files`.

    Args:
        config: Full pre-commit configuration dictionary
        config_path: Path the configuration was read from (for messages)

    Returns:
        Compiled pattern combining `exclude` and `files`

    Raises:
        ConfigError: If the hook or its filters are missing or invalid
    """
    hook = get_eslint_hook(config, config_path)
    key = f'repos[repo == "{LOCAL_REPO}"].hooks[id == "{ESLINT_HOOK_ID}"]'
    where = f"unable to parse `{config_path}`"

    files = hook.get('files')
    if files is None:
        raise ConfigError(
            f"{where}: no value `{key}.files` found, set a file filter for the "
            f"javascript file extensions to lint (should be a valid regex)"
        )
    if not isinstance(files, str):
        raise ConfigError(f"{where}: expected `{key}.files` to be a string")
    files = _NEWLINE_INDENT.sub("", files)
    files_pattern = _compile(files, f"{key}.files")

    exclude = hook.get('exclude')
    if exclude is None:
        return files_pattern
    if not isinstance(exclude, str):
        raise ConfigError(
            f"{where}: expected `{key}.exclude` to be a string, `exclude` should be a "
            f"negative lookahead group i.e. looks like `(?!regex-here)`"
        )
    exclude = _NEWLINE_INDENT.sub("", exclude)
    _compile(exclude, f"{key}.exclude")

    return _compile(f"{exclude}{files}", f"{key}.exclude + {key}.files")


def load_eslint_file_pattern(config_path: Path) -> "re.Pattern[str]":
    """Load the pre-commit config at `config_path` and return its eslint file filter."""
    config = load_pre_commit_config(config_path)
    return get_eslint_file_pattern(config, config_path)
