"""
Package Membership Resolution

Maps changed files to the package directory that owns them by walking up
from the file's directory until a manifest is found. Answers are memoized per
directory, so sibling files (and files below an already resolved directory)
short-circuit without touching the filesystem again.

Files outside every package are collected rather than failing immediately,
so the operator gets every offending path in one report.
"""

import logging
from pathlib import Path
from typing import Dict, List, Optional, Set, Union

from git_diff_processor.errors import MembershipError
from manifests.base import ManifestReader

logger = logging.getLogger(__name__)


class PackageResolver:
    """
    Memoizing file → package directory resolver for one analysis run.

    The walk goes up to and including the workspace root. The root owns files
    only when `reader` says its manifest declares a package; a virtual root
    (or no reader) never does.

    Attributes:
        package_dirs: Directory → owning package directory
        no_package_dirs: Directories known to have no owning package
        unowned_paths: Changed files that belong to no package
        changed_package_dirs: Package directories of every resolved file
    """

    def __init__(
        self,
        workspace_root: Union[str, Path],
        manifest_filename: str = "Cargo.toml",
        source_extension: str = ".rs",
        reader: Optional[ManifestReader] = None,
    ):
        self.workspace_root = Path(workspace_root).resolve()
        self.manifest_filename = manifest_filename
        self.source_extension = source_extension
        self.reader = reader
        self._root_is_package: Optional[bool] = None
        self.package_dirs: Dict[Path, Path] = {}
        self.no_package_dirs: Set[Path] = set()
        self.unowned_paths: Set[str] = set()
        self.changed_package_dirs: Set[Path] = set()

    def is_eligible(self, path: str) -> bool:
        """
        Check whether a changed file takes part in package resolution.

        Only manifests and source files matter; docs, configs and the like
        are ignored.
        """
        file_path = Path(path)
        return file_path.name == self.manifest_filename or file_path.suffix == self.source_extension

    def _is_inside_workspace(self, directory: Path) -> bool:
        return directory == self.workspace_root or self.workspace_root in directory.parents

    def _is_package_dir(self, directory: Path) -> bool:
        if not (directory / self.manifest_filename).exists():
            return False
        if directory != self.workspace_root:
            return True
        # A virtual workspace root only declares the workspace
        if self._root_is_package is None:
            self._root_is_package = self.reader is not None and self.reader.declares_package(directory)
        return self._root_is_package

    def _remember(self, visited: List[Path], package_dir: Path) -> Path:
        for directory in visited:
            self.package_dirs[directory] = package_dir
        self.changed_package_dirs.add(package_dir)
        return package_dir

    def resolve(self, path: str, removed: bool = False) -> Optional[Path]:
        """
        Find the package directory owning `path`.

        Args:
            path: File path relative to the workspace root
            removed: True if the file no longer exists (deleted or renamed away).
                A removed file whose package is gone as well is not reported
                as unowned.

        Returns:
            Absolute package directory, or None if the file is ignored or unowned
        """
        if not self.is_eligible(path):
            return None

        visited: List[Path] = []
        current = (self.workspace_root / path).parent
        while self._is_inside_workspace(current):
            visited.append(current)
            if current in self.no_package_dirs:
                break

            cached = self.package_dirs.get(current)
            if cached is not None:
                logger.debug("%s: memoized package %s", path, cached)
                return self._remember(visited, cached)

            if self._is_package_dir(current):
                logger.debug("%s: found package %s", path, current)
                return self._remember(visited, current)

            current = current.parent

        self.no_package_dirs.update(visited)
        if removed:
            logger.debug("%s: removed file outside of any package", path)
        else:
            self.unowned_paths.add(path)
        return None

    def raise_for_unowned(self) -> None:
        """
        Raise if any resolved file was found outside of every package.

        Raises:
            MembershipError: Listing every unowned path
        """
        if self.unowned_paths:
            raise MembershipError(self.unowned_paths)
