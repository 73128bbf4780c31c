"""Cargo clippy runner."""

from pathlib import Path
from typing import List, Union

from check_runner.base import PackageCheckRunner
from config.settings import Settings


class ClippyRunner(PackageCheckRunner):
    """Runs `cargo clippy` for one package or the whole workspace."""

    def __init__(self, settings: Settings, cwd: Union[str, Path] = ".", dry_run: bool = False, echo: bool = False):
        super().__init__(cwd, dry_run, echo)
        self.cargo = settings.cargo_executable
        self.clippy_args = list(settings.clippy_args)

    @property
    def name(self) -> str:
        return "clippy"

    def package_command(self, package: str) -> List[str]:
        return [self.cargo, "clippy", "--package", package, *self.clippy_args]

    def workspace_command(self) -> List[str]:
        return [self.cargo, "clippy", *self.clippy_args]
