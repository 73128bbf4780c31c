"""
Git Name-Status Parser

This module parses `git diff --name-status` output into change records:
- Added / Deleted / Modified / FileTypeChanged carry one path
- Renamed carries the old and the new path

Rename lines come in two shapes depending on the producing command:
    R100\told/path.rs\tnew/path.rs
    R  old/path.rs -> new/path.rs
The separator is detected positionally, whichever appears first.
"""

from pathlib import Path
from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from git_diff_processor.errors import ParseError

# Shortest line that can hold a status, a separator and a path
MIN_RECORD_LENGTH = 3

RENAME_ARROW = " -> "
RENAME_TAB = "\t"

MODIFIED_STATUSES = {"M", "MM", "AM"}


class _FileChange(BaseModel):
    model_config = ConfigDict(frozen=True)

    path: str

    @property
    def new_path(self) -> Optional[str]:
        """Path of the file after the change, None if it no longer exists."""
        return self.path

    @property
    def old_path(self) -> Optional[str]:
        """Path of the file before the change, None if it did not exist."""
        return self.path


class Added(_FileChange):
    """File added."""
    kind: Literal["added"] = "added"

    @property
    def old_path(self) -> Optional[str]:
        return None


class Deleted(_FileChange):
    """File deleted."""
    kind: Literal["deleted"] = "deleted"

    @property
    def new_path(self) -> Optional[str]:
        return None


class Modified(_FileChange):
    """File content changed."""
    kind: Literal["modified"] = "modified"


class FileTypeChanged(_FileChange):
    """File type changed (regular file, symlink, submodule)."""
    kind: Literal["file_type_changed"] = "file_type_changed"


class Renamed(BaseModel):
    """File moved from `old` to `new`."""
    model_config = ConfigDict(frozen=True)

    kind: Literal["renamed"] = "renamed"
    old: str
    new: str

    @property
    def new_path(self) -> Optional[str]:
        return self.new

    @property
    def old_path(self) -> Optional[str]:
        return self.old


ChangeRecord = Annotated[
    Union[Added, Deleted, Modified, FileTypeChanged, Renamed],
    Field(discriminator="kind"),
]


def _split_renamed(line: str, paths: str) -> Union[Renamed, Modified]:
    arrow = paths.find(RENAME_ARROW)
    tab = paths.find(RENAME_TAB)
    found = [(index, sep) for index, sep in ((arrow, RENAME_ARROW), (tab, RENAME_TAB)) if index >= 0]
    if not found:
        raise ParseError(line)

    index, separator = min(found)
    old = paths[:index].strip()
    new = paths[index + len(separator):].strip()
    if not old or not new:
        raise ParseError(line)

    # git occasionally reports a rewrite in place as a rename
    if old == new:
        return Modified(path=new)
    return Renamed(old=old, new=new)


def parse_name_status_line(line: str) -> Optional[ChangeRecord]:
    """
    Parse a single name-status line.

    Args:
        line: One line of `git diff --name-status` output

    Returns:
        ChangeRecord, or None for lines too short to be a record

    Raises:
        ParseError: If the status code is not supported
    """
    if len(line) < MIN_RECORD_LENGTH:
        return None

    parts = line.split(None, 1)
    if not parts:
        return None

    status = parts[0]
    paths = parts[1].strip() if len(parts) > 1 else ""
    if not paths:
        raise ParseError(line)

    if status == "A":
        return Added(path=paths)
    if status == "D":
        return Deleted(path=paths)
    if status in MODIFIED_STATUSES:
        return Modified(path=paths)
    if status == "T":
        return FileTypeChanged(path=paths)
    if status.startswith("R"):
        return _split_renamed(line, paths)

    raise ParseError(line)


def parse_name_status(text: str) -> List[ChangeRecord]:
    """
    Parse `git diff --name-status` output into change records.

    Args:
        text: Raw name-status output

    Returns:
        One record per non-blank line, in input order

    Raises:
        ParseError: On the first line with an unsupported status code

    Example:
        >>> records = parse_name_status("M\\tcrates/a/src/lib.rs\\nR100\\told.rs\\tnew.rs")
        >>> [record.kind for record in records]
        ['modified', 'renamed']
    """
    records = []
    for line in text.strip().split("\n"):
        record = parse_name_status_line(line)
        if record is not None:
            records.append(record)
    return records


def read_diff_file(file_path: Path) -> str:
    """
    Read saved name-status output from a file.

    Args:
        file_path: Path to the diff file

    Returns:
        Diff content as string

    Raises:
        FileNotFoundError: If file doesn't exist
    """
    if not file_path.exists():
        raise FileNotFoundError(f"Diff file not found: {file_path}")

    with open(file_path, 'r', encoding='utf-8', errors='ignore') as f:
        return f.read()
