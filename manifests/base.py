"""
Abstract base class for manifest readers.

Each workspace flavour (Cargo, ...) implements this interface so the
dependency closure can be computed without knowing the manifest format.
"""

from abc import ABC, abstractmethod
from pathlib import Path

from manifests.models import PackageManifest, WorkspaceManifest


class ManifestReader(ABC):
    """
    Abstract interface for reading package manifests.

    Implementations raise ManifestError, naming the offending file, for
    anything they cannot read or understand.
    """

    @property
    @abstractmethod
    def manifest_filename(self) -> str:
        """
        Return the manifest file name (e.g. 'Cargo.toml').

        Returns:
            File name looked up in every package directory
        """
        pass

    @abstractmethod
    def read_package(self, directory: Path) -> PackageManifest:
        """
        Read the manifest of the package in `directory`.

        Args:
            directory: Package directory

        Returns:
            PackageManifest with the package name, declared dependency names
            and any dependency path overrides (resolved to absolute paths)
        """
        pass

    @abstractmethod
    def read_workspace(self, root: Path) -> WorkspaceManifest:
        """
        Read the workspace root manifest.

        Args:
            root: Workspace root directory

        Returns:
            WorkspaceManifest with the workspace dependency names, path
            overrides and dependency aliases
        """
        pass

    @abstractmethod
    def declares_package(self, directory: Path) -> bool:
        """
        Check whether the manifest in `directory` declares a package.

        A workspace root manifest may declare only the workspace (a virtual
        root) or a package of its own as well.
        """
        pass

    def __repr__(self) -> str:
        """String representation."""
        return f"{self.__class__.__name__}(manifest={self.manifest_filename})"
