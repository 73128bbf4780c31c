"""
Change Impact Pipeline

Ties the pieces together:

    base commit → name-status diff → change records
        → owning packages → top-level target set

The result is either the WHOLE_WORKSPACE sentinel or an ordered,
duplicate-free list of package names. Running the check once per name (or
once for the sentinel) is both necessary and sufficient.
"""

import logging
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

from pydantic import BaseModel, Field

from config.settings import Settings
from git_diff_processor.utils.base_commit import BaseCommitResolver
from git_diff_processor.utils.dependency_closure import (
    WHOLE_WORKSPACE,
    DependencyClosureReducer,
    TargetSet,
    touches_workspace_config,
)
from git_diff_processor.utils.diff_parser import ChangeRecord, Deleted, Renamed, parse_name_status
from git_diff_processor.utils.git_commands import GitClient
from git_diff_processor.utils.package_resolver import PackageResolver
from manifests.base import ManifestReader
from manifests.registry import get_reader

logger = logging.getLogger(__name__)


class ImpactResult(BaseModel):
    """Outcome of one change-impact analysis."""
    whole_workspace: bool = False
    packages: List[str] = Field(default_factory=list)
    package_dirs: Dict[str, Path] = Field(default_factory=dict)
    changed_files: List[str] = Field(default_factory=list)
    base_commit: Optional[str] = None

    @property
    def targets(self) -> TargetSet:
        """WHOLE_WORKSPACE, or the package names to check."""
        if self.whole_workspace:
            return WHOLE_WORKSPACE
        return list(self.packages)


def _changed_files(records: List[ChangeRecord]) -> List[str]:
    files = []
    for record in records:
        path = record.new_path if record.new_path is not None else record.old_path
        files.append(path)
    return files


def find_target_packages(
    records: List[ChangeRecord],
    settings: Settings,
    workspace_root: Union[str, Path] = ".",
    reader: Optional[ManifestReader] = None,
) -> ImpactResult:
    """
    Compute the packages a set of changes requires checking.

    Args:
        records: Parsed change records
        settings: Workspace settings (manifest/lockfile names, source extension)
        workspace_root: Workspace root directory
        reader: Manifest reader (defaults to the reader for settings.manifest_kind)

    Returns:
        ImpactResult

    Raises:
        MembershipError: If changed source files live outside every package
        ManifestError: If a manifest cannot be read
    """
    changed_files = _changed_files(records)

    if touches_workspace_config(records, settings.manifest_filename, settings.lockfile_filename):
        logger.info("workspace manifest or lockfile changed, whole workspace run required")
        return ImpactResult(whole_workspace=True, changed_files=changed_files)

    reader = reader or get_reader(settings.manifest_kind)
    resolver = PackageResolver(workspace_root, settings.manifest_filename, settings.source_extension, reader)
    for record in records:
        if isinstance(record, Deleted):
            resolver.resolve(record.path, removed=True)
        elif isinstance(record, Renamed):
            resolver.resolve(record.old, removed=True)
            resolver.resolve(record.new)
        else:
            resolver.resolve(record.path)
    resolver.raise_for_unowned()

    reducer = DependencyClosureReducer(reader, workspace_root)
    packages = reducer.reduce(resolver.changed_package_dirs)
    logger.info("top-level changed packages: %s", ", ".join(packages) or "(none)")

    return ImpactResult(
        packages=packages,
        package_dirs={name: reducer.package_dirs[name] for name in packages},
        changed_files=changed_files,
    )


def load_change_records(
    settings: Settings,
    workspace_root: Union[str, Path] = ".",
    base: Optional[str] = None,
    diff_text: Optional[str] = None,
) -> Tuple[List[ChangeRecord], Optional[str]]:
    """
    Get the change records of the working tree.

    Args:
        settings: Workspace settings
        workspace_root: Root of the checkout
        base: Commit to diff against (resolved automatically when omitted)
        diff_text: Pre-computed name-status output; skips git entirely

    Returns:
        (change records, base commit or None when diff_text was given)

    Raises:
        ResolutionError: If no base commit can be found
        ParseError: If the diff contains an unsupported status
    """
    if diff_text is None:
        git = GitClient(workspace_root, settings.git_executable, settings.git_remote)
        if base is None:
            base = BaseCommitResolver(git, settings.git_remote).resolve()
        logger.info("diffing against base commit %s", base)
        diff_text = git.diff_name_status(base)

    return parse_name_status(diff_text), base


def analyze_workspace(
    settings: Settings,
    workspace_root: Union[str, Path] = ".",
    base: Optional[str] = None,
    diff_text: Optional[str] = None,
    reader: Optional[ManifestReader] = None,
) -> ImpactResult:
    """
    Run the full analysis against a git checkout.

    Args:
        settings: Workspace settings
        workspace_root: Root of the checkout / workspace
        base: Commit to diff against (resolved automatically when omitted)
        diff_text: Pre-computed name-status output; skips git entirely
        reader: Manifest reader override

    Returns:
        ImpactResult
    """
    records, base = load_change_records(settings, workspace_root, base, diff_text)
    result = find_target_packages(records, settings, workspace_root, reader)
    result.base_commit = base
    return result
