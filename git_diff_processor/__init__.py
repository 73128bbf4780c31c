"""
Git Diff Processor Package

This package processes git name-status diffs to find which workspace packages
need checking. It resolves the base commit of the current branch, maps the
changed files to packages and reduces them to the top-level changed packages
using the workspace dependency graph.
"""

__version__ = "1.0.0"
