"""
Selective Workspace Checks

This script runs a heavyweight check (clippy, eslint) only on the part of the
workspace the current change set can affect.

What it does:
1. Finds the commit the current branch should be diffed against
2. Parses `git diff --name-status` into change records
3. Maps changed files to their owning packages
4. Drops packages already covered by a changed package depending on them
5. Runs the check once per remaining package (or once for the whole
   workspace when the workspace manifest or lockfile changed)

Usage:
    workspace-check clippy [--verbose] [--dry-run]
    workspace-check eslint [.pre-commit-config.yaml] [--verbose]
    workspace-check targets [--json]
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from check_runner.clippy import ClippyRunner
from check_runner.eslint import EslintRunner, select_files
from config.config_loader import load_eslint_file_pattern
from config.logging_config import setup_logging
from config.settings import Settings, get_settings
from git_diff_processor.errors import CheckFailedError, ImpactAnalysisError
from git_diff_processor.impact import analyze_workspace, load_change_records
from git_diff_processor.utils.diff_parser import read_diff_file
from git_diff_processor.utils.output_formatter import (
    display_impact,
    impact_to_json,
    print_item,
    print_list,
)

logger = logging.getLogger(__name__)

WHOLE_WORKSPACE_MARKER = "*"


def _read_diff_text(args: argparse.Namespace) -> Optional[str]:
    if args.diff_file:
        return read_diff_file(Path(args.diff_file))
    return None


def cmd_clippy(args: argparse.Namespace, settings: Settings) -> int:
    """Run clippy on the top-level changed packages."""
    root = Path(args.workspace_root)
    result = analyze_workspace(settings, root, base=args.base, diff_text=_read_diff_text(args))

    if args.json:
        print(impact_to_json(result))
    elif args.verbose:
        display_impact(result)

    runner = ClippyRunner(settings, root, dry_run=args.dry_run, echo=args.verbose)
    runner.run_targets(result.targets)
    return 0


def cmd_eslint(args: argparse.Namespace, settings: Settings) -> int:
    """Run eslint on the changed files selected by the pre-commit eslint hook."""
    root = Path(args.workspace_root)
    config_path = Path(args.pre_commit_config_path or root / settings.pre_commit_config_path)
    pattern = load_eslint_file_pattern(config_path)
    if args.verbose:
        print_item("matching files with regex:", pattern.pattern, indent=0)

    records, _ = load_change_records(settings, root, base=args.base, diff_text=_read_diff_text(args))
    files = select_files(records, pattern)
    if args.verbose and files:
        print_list(files, "files to lint:", indent=0)

    runner = EslintRunner(settings, root, dry_run=args.dry_run, echo=args.verbose)
    if not runner.run_files(files):
        print("no files to lint")
    return 0


def cmd_targets(args: argparse.Namespace, settings: Settings) -> int:
    """Print the target set without running any check."""
    result = analyze_workspace(
        settings, Path(args.workspace_root), base=args.base, diff_text=_read_diff_text(args)
    )
    if args.json:
        print(impact_to_json(result))
    elif result.whole_workspace:
        print(WHOLE_WORKSPACE_MARKER)
    else:
        for name in result.packages:
            print(name)
    return 0


def build_parser() -> argparse.ArgumentParser:
    """Build the command line parser."""
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument('-v', '--verbose', action='store_true',
                        help='Print the analysis and commands prior to running')
    common.add_argument('--base', default=None,
                        help='Commit to diff against (default: resolved from branch history)')
    common.add_argument('--diff-file', default=None,
                        help='Read name-status diff from a file instead of git')
    common.add_argument('--workspace-root', default='.',
                        help='Workspace root directory (default: current directory)')

    parser = argparse.ArgumentParser(
        prog='workspace-check',
        description='Run checks only on the packages affected by the current change set'
    )
    subparsers = parser.add_subparsers(dest='command', required=True)

    clippy = subparsers.add_parser('clippy', parents=[common],
                                   help='Run cargo clippy on the top-level changed packages')
    clippy.add_argument('--dry-run', action='store_true',
                        help='Print the clippy commands without running them')
    clippy.add_argument('--json', action='store_true',
                        help='Print the impact analysis as JSON')
    clippy.set_defaults(handler=cmd_clippy)

    eslint = subparsers.add_parser('eslint', parents=[common],
                                   help='Run eslint on changed files matching the pre-commit filter')
    eslint.add_argument('pre_commit_config_path', nargs='?', default=None,
                        help='Path to .pre-commit-config.yaml')
    eslint.add_argument('--dry-run', action='store_true',
                        help='Print the eslint command without running it')
    eslint.set_defaults(handler=cmd_eslint)

    targets = subparsers.add_parser('targets', parents=[common],
                                    help='Print the packages that need checking')
    targets.add_argument('--json', action='store_true',
                         help='Print the impact analysis as JSON')
    targets.set_defaults(handler=cmd_targets)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main function: parse arguments, run the selected command, map errors to exit codes."""
    args = build_parser().parse_args(argv)
    settings = get_settings()
    args.verbose = args.verbose or settings.verbose
    setup_logging(settings)

    try:
        return args.handler(args, settings)
    except CheckFailedError as e:
        print(f"error: {e}", file=sys.stderr)
        return e.returncode
    except (ImpactAnalysisError, FileNotFoundError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
