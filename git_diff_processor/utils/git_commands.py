"""
Git query interface.

Thin wrapper over the git executable providing the handful of queries the
change-impact analysis needs: branch listing, remote/ancestry probes, the
first-parent containment pipeline and the name-status diff.
"""

import logging
import shlex
import subprocess
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, List, Optional, Union

from git_diff_processor.errors import GitCommandError

logger = logging.getLogger(__name__)

COMMIT_MARKER = "COMMIT: "
CURRENT_BRANCH_PREFIX = "* "


class GitClient:
    """
    Runs git commands inside a checkout.

    Commands whose exit status is the answer (existence, ancestry) go through
    `succeeds`; everything else goes through `run`, which raises
    GitCommandError on a non-zero exit.
    """

    def __init__(self, cwd: Union[str, Path] = ".", git_executable: str = "git", remote: str = "origin"):
        self.cwd = Path(cwd)
        self.git_executable = git_executable
        self.remote = remote

    def _command(self, args) -> List[str]:
        return [self.git_executable, *args]

    def run(self, *args: str) -> str:
        """
        Run a git command and return its stdout.

        Raises:
            GitCommandError: If git exits with a non-zero status
        """
        cmd = self._command(args)
        logger.debug("running %s", " ".join(cmd))
        proc = subprocess.run(cmd, cwd=self.cwd, capture_output=True, text=True, check=False)
        if proc.returncode != 0:
            raise GitCommandError(cmd, proc.returncode, proc.stderr or "")
        return proc.stdout

    def succeeds(self, *args: str) -> bool:
        """Run a git command, discarding output, and report whether it exited 0."""
        cmd = self._command(args)
        logger.debug("probing %s", " ".join(cmd))
        proc = subprocess.run(
            cmd,
            cwd=self.cwd,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
            check=False,
        )
        return proc.returncode == 0

    def current_branch(self) -> Optional[str]:
        """
        Get the checked-out branch from `git branch`.

        Returns:
            Branch name as listed (e.g. 'main', or a detached description
            such as '(HEAD detached at 1a2b3c4)'), or None if nothing is
            marked current (e.g. an unborn branch).
        """
        for line in self.run("branch").splitlines():
            if line.startswith(CURRENT_BRANCH_PREFIX):
                return line[len(CURRENT_BRANCH_PREFIX):].strip()
        return None

    def list_branches(self) -> List[str]:
        """Get all local branch names (current branch included)."""
        branches = []
        for line in self.run("branch").splitlines():
            name = line[2:].strip()
            if name:
                branches.append(name)
        return branches

    def remote_branch_exists(self, branch: str) -> bool:
        """Check whether `<remote>/<branch>` has a first-parent history."""
        return self.succeeds("rev-list", "--first-parent", f"{self.remote}/{branch}")

    def rev_parse(self, ref: str) -> str:
        """Resolve `ref` to the commit hash it points at."""
        return self.run("rev-parse", f"{ref}~0").strip()

    def is_ancestor(self, commit: str, rev: str = "HEAD") -> bool:
        """Check whether `commit` is an ancestor of `rev`."""
        return self.succeeds("merge-base", "--is-ancestor", commit, rev)

    @contextmanager
    def stream_branch_containment(self, branch: str) -> Iterator[Iterator[str]]:
        """
        Stream branch containment reports for the first-parent history of `branch`.

        One process lists commits (newest first), a second reports for each
        commit the branches containing it followed by a `COMMIT: <hash>`
        line. The caller reads lines lazily; leaving the context kills both
        processes, so a consumer can stop as soon as it has its answer.

        Yields:
            Iterator over output lines with trailing newlines removed

        Raises:
            GitCommandError: If the stream was read to the end and either
                process exited with a non-zero status
        """
        git = shlex.quote(self.git_executable)
        rev_list_cmd = self._command(["rev-list", "--first-parent", branch])
        contains_cmd = [
            "xargs", "-I", "{}",
            "sh", "-c", f"{git} branch --contains {{}} && echo '{COMMIT_MARKER}{{}}'",
        ]
        logger.debug("streaming %s | %s", " ".join(rev_list_cmd), " ".join(contains_cmd))

        rev_list = subprocess.Popen(
            rev_list_cmd, cwd=self.cwd, stdout=subprocess.PIPE, stderr=subprocess.PIPE, text=True,
        )
        try:
            branch_contains = subprocess.Popen(
                contains_cmd,
                cwd=self.cwd,
                stdin=rev_list.stdout,
                stdout=subprocess.PIPE,
                stderr=subprocess.DEVNULL,
                text=True,
            )
        except OSError:
            rev_list.kill()
            rev_list.wait()
            rev_list.stderr.close()
            raise
        # xargs holds the only read end now, so rev-list sees SIGPIPE if xargs goes away
        rev_list.stdout.close()

        exhausted = False

        def read_lines() -> Iterator[str]:
            nonlocal exhausted
            for line in branch_contains.stdout:
                yield line.rstrip("\n")
            exhausted = True

        rev_list_stderr = ""
        try:
            yield read_lines()
        finally:
            if exhausted:
                rev_list_stderr = rev_list.stderr.read()
            else:
                for proc in (rev_list, branch_contains):
                    if proc.poll() is None:
                        proc.kill()
            rev_list.stderr.close()
            branch_contains.stdout.close()
            rev_list.wait()
            branch_contains.wait()

        # Exit statuses only mean something when the stream ran to completion
        if exhausted:
            if rev_list.returncode != 0:
                raise GitCommandError(rev_list_cmd, rev_list.returncode, rev_list_stderr)
            if branch_contains.returncode != 0:
                raise GitCommandError(contains_cmd, branch_contains.returncode)

    def diff_name_status(self, base: str) -> str:
        """Get `git diff --name-status <base>` output, trimmed."""
        return self.run("diff", "--name-status", base).strip()
