"""
ESLint runner.

ESLint works on files rather than packages: the changed files that still
exist and match the eslint hook's `files` filter from the pre-commit config
are linted in a single invocation.
"""

import re
from pathlib import Path
from typing import Iterable, List, Union

from check_runner.base import CheckRunner
from config.settings import Settings
from git_diff_processor.utils.diff_parser import ChangeRecord


def select_files(records: Iterable[ChangeRecord], pattern: "re.Pattern[str]") -> List[str]:
    """
    Pick the changed files eslint should look at.

    Args:
        records: Parsed change records
        pattern: Compiled file filter (matched anywhere in the path)

    Returns:
        Post-change paths matching the filter, in diff order
    """
    files = []
    for record in records:
        path = record.new_path
        if path is not None and pattern.search(path):
            files.append(path)
    return files


class EslintRunner(CheckRunner):
    """Runs `eslint --fix` over changed files."""

    def __init__(self, settings: Settings, cwd: Union[str, Path] = ".", dry_run: bool = False, echo: bool = False):
        super().__init__(cwd, dry_run, echo)
        self.eslint = settings.eslint_executable

    @property
    def name(self) -> str:
        return "eslint"

    def files_command(self, files: List[str]) -> List[str]:
        return [self.eslint, "--fix", *files]

    def run_files(self, files: List[str]) -> bool:
        """
        Lint `files`.

        Returns:
            False if there was nothing to lint, True otherwise

        Raises:
            CheckFailedError: If eslint reports problems
        """
        if not files:
            return False
        self.execute(self.files_command(files))
        return True
