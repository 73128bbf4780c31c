"""Common models for package and workspace manifests."""

from pathlib import Path
from typing import Dict, List, Set
from pydantic import BaseModel, Field


class PackageManifest(BaseModel):
    """A member package's manifest."""
    name: str
    directory: Path
    dependencies: List[str] = Field(default_factory=list)
    path_overrides: Dict[str, Path] = Field(default_factory=dict)
    # Dependency keys inherited from the workspace table (`{ workspace = true }`)
    inherited: List[str] = Field(default_factory=list)

    def resolve_dependencies(self, aliases: Dict[str, str]) -> List[str]:
        """
        Get the real package names of the dependencies.

        Args:
            aliases: Workspace dependency key → real package name

        Returns:
            Dependency names, with inherited aliases mapped to their packages
        """
        inherited = set(self.inherited)
        return [
            aliases.get(name, name) if name in inherited else name
            for name in self.dependencies
        ]


class WorkspaceManifest(BaseModel):
    """The workspace root manifest."""
    root: Path
    dependencies: List[str] = Field(default_factory=list)
    path_overrides: Dict[str, Path] = Field(default_factory=dict)
    aliases: Dict[str, str] = Field(default_factory=dict)

    @property
    def internal_names(self) -> Set[str]:
        """Dependencies that live inside the workspace (declared with a path)."""
        return set(self.path_overrides)

    @property
    def external_names(self) -> Set[str]:
        """Third-party dependencies; recorded, never expanded."""
        return set(self.dependencies) - self.internal_names
