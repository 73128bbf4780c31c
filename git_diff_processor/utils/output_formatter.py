"""
Output formatting utilities for console and JSON output.

This module provides functions to:
- Format console output with clear headers and sections
- Print lists of packages and commands in a readable format
- Serialize an impact result to JSON
"""

import json
from typing import Any, Dict, List

from git_diff_processor.impact import ImpactResult


def print_header(title: str, width: int = 50) -> None:
    """
    Print a formatted header for console output.

    Args:
        title: The title text to display
        width: Width of the header line (default: 50)

    Example:
        >>> print_header("Change Impact")
        ==================================================
        Change Impact
        ==================================================
    """
    print("=" * width)
    print(title)
    print("=" * width)


def print_section(title: str, indent: int = 2) -> None:
    """Print a section header with indentation."""
    print(" " * indent + title)


def print_item(label: str, value: Any = "", indent: int = 4) -> None:
    """
    Print a labeled item with indentation.

    Example:
        >>> print_item("Base commit:", "1a2b3c4")
            Base commit: 1a2b3c4
    """
    print(" " * indent + f"{label} {value}".rstrip())


def print_list(items: List[Any], label: str = "", max_items: int = 20, indent: int = 4) -> None:
    """
    Print a list of items, limiting the number shown.

    Args:
        items: List of items to print
        label: Optional label for the list
        max_items: Maximum number of items to show (default: 20)
        indent: Number of spaces to indent (default: 4)
    """
    if label:
        print(" " * indent + label)

    for item in items[:max_items]:
        print(" " * (indent + 2) + f"- {item}")

    if len(items) > max_items:
        remaining = len(items) - max_items
        print(" " * (indent + 2) + f"... and {remaining} more")


def display_impact(result: ImpactResult) -> None:
    """Print a human-readable summary of an impact analysis."""
    print_header("Change Impact")
    if result.base_commit:
        print_item("Base commit:", result.base_commit, indent=2)
    print_item("Changed files:", len(result.changed_files), indent=2)

    if result.whole_workspace:
        print_section("found changes in workspace manifest, requires full workspace run")
    elif not result.packages:
        print_section("no package changes found")
    else:
        print_section("found changes in these packages (and possibly in their internal dependencies):")
        print_list([
            f"{name} ({result.package_dirs[name]})" if name in result.package_dirs else name
            for name in result.packages
        ])
    print()


def impact_to_dict(result: ImpactResult) -> Dict[str, Any]:
    """Convert an impact result to a JSON-compatible dictionary."""
    return {
        "whole_workspace": result.whole_workspace,
        "packages": list(result.packages),
        "package_dirs": {name: str(path) for name, path in result.package_dirs.items()},
        "changed_files": list(result.changed_files),
        "base_commit": result.base_commit,
    }


def impact_to_json(result: ImpactResult, pretty: bool = True) -> str:
    """Serialize an impact result to JSON text."""
    return json.dumps(impact_to_dict(result), indent=2 if pretty else None, ensure_ascii=False)
