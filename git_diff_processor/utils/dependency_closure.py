"""
Dependency Closure Reduction

Reduces the set of changed packages to the minimal set of top-level packages
that still covers every change: when changed package P depends (directly or
through unchanged internal packages) on changed package Q, checking P already
re-checks Q, so Q is dropped.

Changes to the workspace manifest or lockfile can affect any package, so they
short-circuit the reduction with the WHOLE_WORKSPACE sentinel.
"""

import logging
from collections import deque
from pathlib import Path
from typing import Dict, Iterable, List, Set, Union

from git_diff_processor.errors import ManifestError
from git_diff_processor.utils.diff_parser import ChangeRecord
from manifests.base import ManifestReader
from manifests.models import PackageManifest

logger = logging.getLogger(__name__)


class WholeWorkspace:
    """Sentinel meaning "check the entire workspace"."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "WHOLE_WORKSPACE"


WHOLE_WORKSPACE = WholeWorkspace()

TargetSet = Union[WholeWorkspace, List[str]]


def touches_workspace_config(
    records: Iterable[ChangeRecord],
    manifest_filename: str = "Cargo.toml",
    lockfile_filename: str = "Cargo.lock",
) -> bool:
    """
    Check whether any change touches the workspace manifest or lockfile.

    Both the old and the new side of every record are considered, so
    deleting or renaming either file counts too.

    Args:
        records: Parsed change records
        manifest_filename: Workspace manifest at the repository root
        lockfile_filename: Lockfile at the repository root

    Returns:
        True if a whole-workspace run is required
    """
    workspace_files = {manifest_filename, lockfile_filename}
    for record in records:
        for path in (record.new_path, record.old_path):
            if path is not None and Path(path).as_posix() in workspace_files:
                return True
    return False


class DependencyClosureReducer:
    """
    Breadth-first reduction of changed packages over the internal dependency graph.

    After `reduce` has run:
        closure: Every internal package name visited
        package_dirs: Package name → directory for every manifest read
        external_dependencies: Third-party names seen along the way (not expanded)
    """

    def __init__(self, reader: ManifestReader, workspace_root: Union[str, Path]):
        self.reader = reader
        self.workspace_root = Path(workspace_root).resolve()
        self.closure: Set[str] = set()
        self.package_dirs: Dict[str, Path] = {}
        self.external_dependencies: Set[str] = set()

    def _load(self, manifests: Dict[str, PackageManifest], internal: Dict[str, Path], directory: Path) -> PackageManifest:
        manifest = self.reader.read_package(directory)
        manifests[manifest.name] = manifest
        self.package_dirs[manifest.name] = manifest.directory
        for dep_name, dep_path in manifest.path_overrides.items():
            internal.setdefault(dep_name, dep_path)
        return manifest

    def reduce(self, changed_dirs: Iterable[Path]) -> List[str]:
        """
        Compute the top-level changed packages.

        Args:
            changed_dirs: Directories of the changed packages

        Returns:
            Sorted, duplicate-free package names

        Raises:
            ManifestError: If any manifest on the way cannot be read
        """
        manifests: Dict[str, PackageManifest] = {}
        internal: Dict[str, Path] = {}
        for directory in sorted(set(changed_dirs)):
            self._load(manifests, internal, directory)

        changed_names = set(manifests)
        if not changed_names:
            return []

        workspace = self.reader.read_workspace(self.workspace_root)
        internal.update(workspace.path_overrides)
        self.external_dependencies.update(workspace.external_names)

        top_level = set(changed_names)
        queue = deque(sorted(changed_names))
        visited = set(changed_names)

        while queue:
            name = queue.popleft()
            manifest = manifests.get(name)
            if manifest is None:
                directory = internal.get(name)
                if directory is None:
                    raise ManifestError(
                        self.workspace_root / self.reader.manifest_filename,
                        f"unable to find path to package `{name}`",
                    )
                manifest = self._load(manifests, internal, directory)

            for dep_name in manifest.resolve_dependencies(workspace.aliases):
                if dep_name == name:
                    continue
                if dep_name in top_level:
                    logger.debug("%s depends on changed package %s, dropping it", name, dep_name)
                    top_level.discard(dep_name)
                if dep_name not in internal:
                    self.external_dependencies.add(dep_name)
                elif dep_name not in visited:
                    visited.add(dep_name)
                    queue.append(dep_name)

        self.closure = visited
        return sorted(top_level)
