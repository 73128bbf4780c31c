"""
Manifest reader package.

This package provides:
- Abstract ManifestReader interface
- Package / workspace manifest models
- Reader registry keyed by workspace kind
- The Cargo.toml reader
"""

from manifests.base import ManifestReader
from manifests.cargo import CargoManifestReader
from manifests.models import PackageManifest, WorkspaceManifest
from manifests.registry import get_reader, register_reader, get_available_kinds

__all__ = [
    'ManifestReader',
    'CargoManifestReader',
    'PackageManifest',
    'WorkspaceManifest',
    'get_reader',
    'register_reader',
    'get_available_kinds',
]
