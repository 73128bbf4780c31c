"""Check runners: the external verification tools driven by the impact analysis."""

from check_runner.base import CheckRunner, PackageCheckRunner
from check_runner.clippy import ClippyRunner
from check_runner.eslint import EslintRunner, select_files

__all__ = [
    "CheckRunner",
    "ClippyRunner",
    "EslintRunner",
    "PackageCheckRunner",
    "select_files",
]
