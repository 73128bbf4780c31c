"""
Base Commit Resolution

This module determines which commit the current change set should be diffed
against. Two strategies are tried in order:

1. Remote fast path: if the branch has a remote counterpart whose head is an
   ancestor of HEAD, that head is the base (the branch has not diverged).
2. Local history scan: walk the first-parent history of the branch and stop
   at the first commit that some other branch also contains. That is where
   the branch split off from its parent lineage.

Usage:
    git = GitClient(".")
    text = diff_name_status_since_branched(git)
"""

import logging
from typing import Optional

from git_diff_processor.errors import DetachedHeadError, NoBaseCommitError, NoOtherBranchesError
from git_diff_processor.utils.git_commands import COMMIT_MARKER, CURRENT_BRANCH_PREFIX, GitClient

logger = logging.getLogger(__name__)


class BaseCommitResolver:
    """Finds the commit the working change set is measured from."""

    def __init__(self, git: GitClient, remote: Optional[str] = None):
        self.git = git
        self.remote = remote or git.remote

    def current_branch(self) -> str:
        """
        Get the checked-out branch name.

        Raises:
            DetachedHeadError: If HEAD is not on a branch
        """
        branch = self.git.current_branch()
        if not branch or branch.startswith("("):
            raise DetachedHeadError(branch or "no branch checked out")
        return branch

    def find_remote_branch(self, branch: str) -> Optional[str]:
        """
        Find the remote-tracking ref matching `branch`.

        A local branch literally named `<remote>/...` is treated as already
        being the remote branch.

        Args:
            branch: Current branch name

        Returns:
            Remote branch ref, or None if there is no counterpart
        """
        prefix = f"{self.remote}/"
        if len(branch) > len(prefix) and branch.startswith(prefix):
            return branch

        if self.git.remote_branch_exists(branch):
            return f"{prefix}{branch}"
        return None

    def find_remote_base(self, remote_branch: str) -> Optional[str]:
        """
        Use the remote branch head as base if HEAD has not diverged from it.

        Args:
            remote_branch: Remote-tracking ref

        Returns:
            Remote head commit if it is an ancestor of HEAD, None otherwise
        """
        head = self.git.rev_parse(remote_branch)
        if head and self.git.is_ancestor(head, "HEAD"):
            return head
        logger.debug("%s (%s) is not an ancestor of HEAD", remote_branch, head)
        return None

    def scan_local_history(self, branch: str) -> Optional[str]:
        """
        Find the newest first-parent commit that another branch also contains.

        The containment pipeline reports, per commit, the branches containing
        it followed by a `COMMIT: <hash>` line. The scan stops (and the
        pipeline is killed) at the first report naming any branch other than
        the current one.

        Args:
            branch: Current branch name

        Returns:
            Branch point commit, or None if the history never meets another branch
        """
        current = f"{CURRENT_BRANCH_PREFIX}{branch}"
        foreign_branch_seen = False

        with self.git.stream_branch_containment(branch) as lines:
            for line in lines:
                line = line.strip()
                if not line:
                    continue
                if line.startswith(COMMIT_MARKER):
                    if foreign_branch_seen:
                        return line[len(COMMIT_MARKER):].strip()
                    continue
                if line != current:
                    logger.debug("found commit contained in %s", line)
                    foreign_branch_seen = True

        return None

    def resolve(self) -> str:
        """
        Resolve the base commit.

        Returns:
            Commit hash to diff against

        Raises:
            DetachedHeadError: If HEAD is not on a branch
            NoOtherBranchesError: If there is no remote counterpart and no other branch
            NoBaseCommitError: If neither strategy found a base
        """
        branch = self.current_branch()

        remote_branch = self.find_remote_branch(branch)
        if remote_branch:
            base = self.find_remote_base(remote_branch)
            if base:
                logger.debug("base commit %s from remote branch %s", base, remote_branch)
                return base

        base = self.scan_local_history(branch)
        if base:
            logger.debug("base commit %s from local history of %s", base, branch)
            return base

        if remote_branch is None and len(self.git.list_branches()) <= 1:
            raise NoOtherBranchesError(branch)
        raise NoBaseCommitError(branch)


def diff_name_status_since_branched(git: GitClient, remote: Optional[str] = None) -> str:
    """
    Get the name-status diff of the working tree against the resolved base commit.

    Args:
        git: Git client for the checkout
        remote: Remote name (defaults to the client's remote)

    Returns:
        Trimmed `git diff --name-status` output
    """
    base = BaseCommitResolver(git, remote).resolve()
    return git.diff_name_status(base)
