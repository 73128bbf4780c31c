"""
Error types raised during change-impact analysis.

None of these are retried: every one of them points at a configuration or
environment problem the operator has to fix.
"""

from pathlib import Path
from typing import Iterable, List, Optional, Sequence


class ImpactAnalysisError(Exception):
    """Base class for all analysis failures."""


class ConfigError(ImpactAnalysisError):
    """A configuration file could not be parsed."""


class GitCommandError(ImpactAnalysisError):
    """An external git command failed."""

    def __init__(self, command: Sequence[str], returncode: int, stderr: str = ""):
        self.command = list(command)
        self.returncode = returncode
        self.stderr = stderr.strip()
        message = f"`{' '.join(self.command)}` exited with status {returncode}"
        if self.stderr:
            message = f"{message}: {self.stderr}"
        super().__init__(message)


class ResolutionError(ImpactAnalysisError):
    """No commit could be found to diff the working change set against."""


class DetachedHeadError(ResolutionError):
    """HEAD is not on a local branch."""

    def __init__(self, head: str):
        self.head = head
        super().__init__(f"unable to find base commit: HEAD is not on a branch ({head})")


class NoBaseCommitError(ResolutionError):
    """Neither the remote fast path nor the local history scan found a base."""

    def __init__(self, branch: str, message: Optional[str] = None):
        self.branch = branch
        super().__init__(message or f"unable to find base commit for branch `{branch}`")


class NoOtherBranchesError(NoBaseCommitError):
    """The current branch is the only branch, so it never meets another lineage."""

    def __init__(self, branch: str):
        super().__init__(
            branch,
            f"unable to find base commit for branch `{branch}`: "
            f"it has no remote counterpart and no other local branch exists",
        )


class ParseError(ImpactAnalysisError):
    """A name-status diff line used a status this tool does not understand."""

    def __init__(self, line: str):
        self.line = line
        super().__init__(f"unsupported git status: {line}")


class MembershipError(ImpactAnalysisError):
    """One or more changed source files live outside of every package."""

    def __init__(self, paths: Iterable[str]):
        self.paths: List[str] = sorted(paths)
        formatted = "\n - ".join(self.paths)
        super().__init__(f"source files were found outside of a package:\n - {formatted}")


class ManifestError(ImpactAnalysisError):
    """A package or workspace manifest is missing, malformed or incomplete."""

    def __init__(self, path: Path, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"cannot parse `{path}`: {reason}")


class CheckFailedError(ImpactAnalysisError):
    """The external check tool reported a failure."""

    def __init__(self, command: Sequence[str], returncode: int):
        self.command = list(command)
        self.returncode = returncode
        super().__init__(f"{self.command[0]} failed with status {returncode}")
