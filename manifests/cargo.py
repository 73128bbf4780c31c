"""
Cargo manifest reader.

Reads `Cargo.toml` files with tomllib:
- member packages: `package.name` and the `[dependencies]` table
- workspace root: the `[workspace.dependencies]` table, where entries with a
  `path` are internal crates and everything else is third-party
- entries renamed with `package` are recorded as aliases, so members
  inheriting them with `{ workspace = true }` resolve to the real crate
"""

import tomllib
from pathlib import Path
from typing import Any, Dict, Tuple

from git_diff_processor.errors import ManifestError
from manifests.base import ManifestReader
from manifests.models import PackageManifest, WorkspaceManifest

CARGO_MANIFEST = "Cargo.toml"


def _load_toml(path: Path) -> Dict[str, Any]:
    try:
        with open(path, 'rb') as f:
            return tomllib.load(f)
    except OSError as e:
        raise ManifestError(path, f"unable to read file: {e.strerror or e}") from e
    except tomllib.TOMLDecodeError as e:
        raise ManifestError(path, str(e)) from e


def _table(value: Any, path: Path, key: str) -> Dict[str, Any]:
    if value is None:
        raise ManifestError(path, f"missing key `{key}`")
    if not isinstance(value, dict):
        raise ManifestError(path, f"key `{key}` must be a table")
    return value


def _dependency_entry(
    name: str, spec: Any, base_dir: Path, path: Path, key: str
) -> Tuple[str, Any]:
    """
    Normalize one dependency declaration.

    Returns:
        (real package name, absolute path override or None)
    """
    if not isinstance(spec, dict):
        # `name = "1.0"` style version requirement
        return name, None

    real_name = spec.get('package', name)
    if not isinstance(real_name, str):
        raise ManifestError(path, f"key `{key}.{name}.package` must be a string")

    dep_path = spec.get('path')
    if dep_path is None:
        return real_name, None
    if not isinstance(dep_path, str):
        raise ManifestError(path, f"key `{key}.{name}.path` must be a string")
    return real_name, (base_dir / dep_path).resolve()


class CargoManifestReader(ManifestReader):
    """Manifest reader for Cargo workspaces."""

    @property
    def manifest_filename(self) -> str:
        return CARGO_MANIFEST

    def read_package(self, directory: Path) -> PackageManifest:
        directory = Path(directory)
        path = directory / CARGO_MANIFEST
        data = _load_toml(path)

        package = _table(data.get('package'), path, 'package')
        name = package.get('name')
        if name is None:
            raise ManifestError(path, "missing key `package.name`")
        if not isinstance(name, str):
            raise ManifestError(path, "key `package.name` must be a string")

        dependencies = []
        path_overrides = {}
        inherited = []
        if 'dependencies' in data:
            table = _table(data['dependencies'], path, 'dependencies')
            for dep_name, spec in table.items():
                real_name, dep_path = _dependency_entry(dep_name, spec, directory, path, 'dependencies')
                dependencies.append(real_name)
                if dep_path is not None:
                    path_overrides[real_name] = dep_path
                if isinstance(spec, dict) and spec.get('workspace') is True:
                    inherited.append(real_name)

        return PackageManifest(
            name=name,
            directory=directory.resolve(),
            dependencies=dependencies,
            path_overrides=path_overrides,
            inherited=inherited,
        )

    def read_workspace(self, root: Path) -> WorkspaceManifest:
        root = Path(root)
        path = root / CARGO_MANIFEST
        data = _load_toml(path)

        workspace = _table(data.get('workspace'), path, 'workspace')
        table = _table(workspace.get('dependencies'), path, 'workspace.dependencies')

        dependencies = []
        path_overrides = {}
        aliases = {}
        for dep_name, spec in table.items():
            real_name, dep_path = _dependency_entry(dep_name, spec, root, path, 'workspace.dependencies')
            dependencies.append(real_name)
            if dep_path is not None:
                path_overrides[real_name] = dep_path
            if real_name != dep_name:
                aliases[dep_name] = real_name

        return WorkspaceManifest(
            root=root.resolve(),
            dependencies=dependencies,
            path_overrides=path_overrides,
            aliases=aliases,
        )

    def declares_package(self, directory: Path) -> bool:
        return 'package' in _load_toml(Path(directory) / CARGO_MANIFEST)
