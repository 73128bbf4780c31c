"""
Manifest reader registry.

Maps a workspace kind (as configured by Settings.manifest_kind) to the
reader that understands its manifests.
"""

from typing import Dict, List, Type

from manifests.base import ManifestReader
from manifests.cargo import CargoManifestReader

_READERS: Dict[str, Type[ManifestReader]] = {
    "cargo": CargoManifestReader,
}


def get_reader(kind: str = "cargo") -> ManifestReader:
    """
    Create the manifest reader for a workspace kind.

    Args:
        kind: Workspace kind (e.g. 'cargo')

    Returns:
        ManifestReader instance

    Raises:
        ValueError: If the kind is not supported
    """
    reader_class = _READERS.get(kind.lower())
    if reader_class is None:
        raise ValueError(
            f"Unsupported manifest kind: {kind}. "
            f"Supported kinds: {', '.join(get_available_kinds())}"
        )
    return reader_class()


def register_reader(kind: str, reader_class: Type[ManifestReader]) -> None:
    """Register a reader class for a workspace kind."""
    _READERS[kind.lower()] = reader_class


def get_available_kinds() -> List[str]:
    """Get list of supported workspace kinds."""
    return sorted(_READERS)
