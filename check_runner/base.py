"""Abstract base classes for check runners."""

import logging
import subprocess
from abc import ABC, abstractmethod
from pathlib import Path
from typing import List, Sequence, Union

from git_diff_processor.errors import CheckFailedError
from git_diff_processor.utils.dependency_closure import WholeWorkspace, TargetSet

logger = logging.getLogger(__name__)


class CheckRunner(ABC):
    """Abstract base class for the external verification tools.

    Output of the tool is passed straight through to the terminal; a
    non-zero exit raises CheckFailedError carrying the tool's exit code.
    """

    def __init__(self, cwd: Union[str, Path] = ".", dry_run: bool = False, echo: bool = False):
        self.cwd = Path(cwd)
        self.dry_run = dry_run
        self.echo = echo
        self.executed: List[List[str]] = []

    @property
    @abstractmethod
    def name(self) -> str:
        """Return runner name (e.g., 'clippy', 'eslint')."""
        pass

    @staticmethod
    def format_command(cmd: Sequence[str]) -> str:
        """Render a command for display."""
        return " ".join(cmd)

    def execute(self, cmd: List[str]) -> None:
        """Run `cmd`, inheriting stdout/stderr.

        Raises:
            CheckFailedError: If the command exits with a non-zero status
        """
        logger.debug("running %s", self.format_command(cmd))
        self.executed.append(cmd)
        if self.echo or self.dry_run:
            print(self.format_command(cmd))
        if self.dry_run:
            return
        proc = subprocess.run(cmd, cwd=self.cwd, check=False)
        if proc.returncode != 0:
            raise CheckFailedError(cmd, proc.returncode)

    def __repr__(self) -> str:
        """String representation."""
        return f"{self.__class__.__name__}(cwd={self.cwd}, dry_run={self.dry_run})"


class PackageCheckRunner(CheckRunner):
    """A runner that checks one package at a time or the whole workspace."""

    @abstractmethod
    def package_command(self, package: str) -> List[str]:
        """Build the command checking a single package."""
        pass

    @abstractmethod
    def workspace_command(self) -> List[str]:
        """Build the command checking the whole workspace."""
        pass

    def run_package(self, package: str) -> None:
        """Check a single package."""
        self.execute(self.package_command(package))

    def run_workspace(self) -> None:
        """Check the whole workspace."""
        self.execute(self.workspace_command())

    def run_targets(self, targets: TargetSet) -> None:
        """Check every target, stopping at the first failure.

        Args:
            targets: WHOLE_WORKSPACE or a list of package names
        """
        if isinstance(targets, WholeWorkspace):
            self.run_workspace()
            return
        for package in targets:
            self.run_package(package)
