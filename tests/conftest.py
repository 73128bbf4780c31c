"""Pytest configuration and shared fixtures for test suite."""

import os
import shutil
import subprocess
import textwrap
from pathlib import Path
from typing import Dict, List, Optional

import pytest

from config.settings import Settings, clear_settings_cache


GIT_AVAILABLE = shutil.which("git") is not None and shutil.which("xargs") is not None


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch):
    """Keep WORKSPACE_CHECK_* variables from the outer environment out of tests."""
    for key in list(os.environ):
        if key.startswith("WORKSPACE_CHECK_"):
            monkeypatch.delenv(key, raising=False)
    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture
def settings():
    """Default settings, ignoring any .env file."""
    return Settings(_env_file=None)


def write_package(root: Path, relative_dir: str, name: str, dependencies: Optional[Dict[str, str]] = None) -> Path:
    """Create a crate with a Cargo.toml and a src/lib.rs."""
    directory = root / relative_dir
    (directory / "src").mkdir(parents=True, exist_ok=True)
    lines = ["[package]", f'name = "{name}"', 'version = "0.1.0"', ""]
    if dependencies is not None:
        lines.append("[dependencies]")
        for dep_name, spec in dependencies.items():
            lines.append(f"{dep_name} = {spec}")
    (directory / "Cargo.toml").write_text("\n".join(lines) + "\n", encoding="utf-8")
    (directory / "src" / "lib.rs").write_text("pub fn f() {}\n", encoding="utf-8")
    return directory


def write_workspace(root: Path, internal: Dict[str, str], external: Optional[List[str]] = None) -> None:
    """Create the workspace root Cargo.toml."""
    lines = ["[workspace]", "members = [\"crates/*\"]", "", "[workspace.dependencies]"]
    for name, path in internal.items():
        lines.append(f'{name} = {{ path = "{path}" }}')
    for name in external or []:
        lines.append(f'{name} = "1.0"')
    (root / "Cargo.toml").write_text("\n".join(lines) + "\n", encoding="utf-8")


@pytest.fixture
def cargo_workspace(tmp_path):
    """
    Build a small Cargo workspace.

    Dependency graph (internal edges only):
        a -> b, a -> c, c -> b, d (standalone), e -> d
    External: serde
    """
    write_workspace(
        tmp_path,
        {
            "a": "crates/a",
            "b": "crates/b",
            "c": "crates/c",
            "d": "crates/d",
            "e": "crates/e",
        },
        external=["serde"],
    )
    write_package(tmp_path, "crates/a", "a", {"b": "{ workspace = true }", "c": "{ workspace = true }", "serde": "{ workspace = true }"})
    write_package(tmp_path, "crates/b", "b", {"serde": "{ workspace = true }"})
    write_package(tmp_path, "crates/c", "c", {"b": "{ workspace = true }"})
    write_package(tmp_path, "crates/d", "d")
    write_package(tmp_path, "crates/e", "e", {"d": '{ path = "../d" }'})
    (tmp_path / "notes").mkdir()
    (tmp_path / "notes" / "readme.md").write_text("notes\n", encoding="utf-8")
    return tmp_path


@pytest.fixture
def root_package_workspace(tmp_path):
    """
    Build a workspace whose root manifest is also a package.

    Root package `app` depends on member `b`.
    """
    (tmp_path / "Cargo.toml").write_text(
        '[package]\nname = "app"\nversion = "0.1.0"\n\n'
        '[dependencies]\nb = { workspace = true }\n\n'
        '[workspace]\nmembers = ["crates/b"]\n\n'
        '[workspace.dependencies]\nb = { path = "crates/b" }\n',
        encoding="utf-8",
    )
    (tmp_path / "src").mkdir()
    (tmp_path / "src" / "main.rs").write_text("fn main() {}\n", encoding="utf-8")
    write_package(tmp_path, "crates/b", "b")
    return tmp_path


def git(cwd: Path, *args: str) -> str:
    """Run git in `cwd` and return stdout."""
    env = dict(
        os.environ,
        GIT_AUTHOR_NAME="Test",
        GIT_AUTHOR_EMAIL="test@example.com",
        GIT_COMMITTER_NAME="Test",
        GIT_COMMITTER_EMAIL="test@example.com",
    )
    proc = subprocess.run(["git", *args], cwd=cwd, capture_output=True, text=True, check=True, env=env)
    return proc.stdout.strip()


def commit_file(repo: Path, relative: str, content: str, message: str) -> str:
    """Write a file, commit it, and return the new commit hash."""
    path = repo / relative
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(textwrap.dedent(content), encoding="utf-8")
    git(repo, "add", relative)
    git(repo, "commit", "-q", "-m", message)
    return git(repo, "rev-parse", "HEAD")


@pytest.fixture
def git_repo(tmp_path):
    """Create an empty git repository on branch `main`."""
    if not GIT_AVAILABLE:
        pytest.skip("git and xargs are required")
    repo = tmp_path / "repo"
    repo.mkdir()
    git(repo, "init", "-q")
    git(repo, "symbolic-ref", "HEAD", "refs/heads/main")
    git(repo, "config", "user.name", "Test")
    git(repo, "config", "user.email", "test@example.com")
    git(repo, "config", "commit.gpgsign", "false")
    return repo


@pytest.fixture
def make_package():
    """Expose write_package to tests."""
    return write_package


@pytest.fixture
def make_workspace():
    """Expose write_workspace to tests."""
    return write_workspace


@pytest.fixture
def run_git():
    """Expose the git helper to tests."""
    return git


@pytest.fixture
def commit():
    """Expose commit_file to tests."""
    return commit_file
