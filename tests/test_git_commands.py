"""Tests for the git client, against real throwaway repositories."""

import subprocess
from unittest.mock import MagicMock, patch

import pytest

from git_diff_processor.errors import GitCommandError, NoOtherBranchesError
from git_diff_processor.utils.base_commit import BaseCommitResolver, diff_name_status_since_branched
from git_diff_processor.utils.git_commands import GitClient


class TestGitClientRun:
    """Test suite for GitClient.run / succeeds with subprocess mocked."""

    def test_run_returns_stdout(self):
        with patch('git_diff_processor.utils.git_commands.subprocess.run') as mock_run:
            mock_run.return_value = MagicMock(returncode=0, stdout="* main\n", stderr="")

            assert GitClient("/repo").run("branch") == "* main\n"
            assert mock_run.call_args[0][0] == ["git", "branch"]

    def test_run_raises_on_failure(self):
        with patch('git_diff_processor.utils.git_commands.subprocess.run') as mock_run:
            mock_run.return_value = MagicMock(returncode=128, stdout="", stderr="fatal: bad revision\n")

            with pytest.raises(GitCommandError, match="fatal: bad revision") as exc_info:
                GitClient("/repo").run("rev-parse", "nope~0")

        assert exc_info.value.returncode == 128
        assert exc_info.value.command == ["git", "rev-parse", "nope~0"]

    def test_succeeds_uses_exit_status(self):
        with patch('git_diff_processor.utils.git_commands.subprocess.run') as mock_run:
            mock_run.return_value = MagicMock(returncode=1)
            assert GitClient("/repo").succeeds("merge-base", "--is-ancestor", "a", "b") is False

            mock_run.return_value = MagicMock(returncode=0)
            assert GitClient("/repo").succeeds("merge-base", "--is-ancestor", "a", "b") is True

    def test_current_branch_parsing(self):
        client = GitClient("/repo")
        with patch.object(client, 'run', return_value="  main\n* feature/x\n  release\n"):
            assert client.current_branch() == "feature/x"
            assert client.list_branches() == ["main", "feature/x", "release"]

    def test_current_branch_none(self):
        client = GitClient("/repo")
        with patch.object(client, 'run', return_value=""):
            assert client.current_branch() is None

    def test_custom_executable(self):
        with patch('git_diff_processor.utils.git_commands.subprocess.run') as mock_run:
            mock_run.return_value = MagicMock(returncode=0, stdout="", stderr="")

            GitClient("/repo", git_executable="/usr/local/bin/git").run("status")

            assert mock_run.call_args[0][0] == ["/usr/local/bin/git", "status"]


class TestGitIntegration:
    """End-to-end resolution against real repositories."""

    def test_branch_point_found_by_local_scan(self, git_repo, run_git, commit):
        """Test a feature branch diffs against the commit it branched from."""
        commit(git_repo, "a.rs", "fn a() {}\n", "c1")
        branch_point = commit(git_repo, "b.rs", "fn b() {}\n", "c2")
        run_git(git_repo, "checkout", "-q", "-b", "feature")
        commit(git_repo, "c.rs", "fn c() {}\n", "c3")
        commit(git_repo, "a.rs", "fn a() { 1; }\n", "c4")

        git = GitClient(git_repo)
        assert git.current_branch() == "feature"
        assert BaseCommitResolver(git).resolve() == branch_point

        text = diff_name_status_since_branched(git)
        assert sorted(text.splitlines()) == ["A\tc.rs", "M\ta.rs"]

    def test_scan_ignores_later_commits_on_parent_branch(self, git_repo, run_git, commit):
        """Test the base is the branch point even when main moved on."""
        branch_point = commit(git_repo, "a.rs", "fn a() {}\n", "c1")
        run_git(git_repo, "checkout", "-q", "-b", "feature")
        commit(git_repo, "b.rs", "fn b() {}\n", "c2")
        run_git(git_repo, "checkout", "-q", "main")
        commit(git_repo, "z.rs", "fn z() {}\n", "c3")
        run_git(git_repo, "checkout", "-q", "feature")

        assert BaseCommitResolver(GitClient(git_repo)).resolve() == branch_point

    def test_single_branch_repository(self, git_repo, commit):
        """Test a repository with only one branch cannot resolve a base."""
        commit(git_repo, "a.rs", "fn a() {}\n", "c1")
        commit(git_repo, "b.rs", "fn b() {}\n", "c2")

        with pytest.raises(NoOtherBranchesError):
            BaseCommitResolver(GitClient(git_repo)).resolve()

    def test_remote_fast_path(self, git_repo, run_git, commit, tmp_path):
        """Test an undiverged branch with a pushed counterpart uses the remote head."""
        remote = tmp_path / "remote.git"
        run_git(tmp_path, "init", "-q", "--bare", str(remote))
        run_git(git_repo, "remote", "add", "origin", str(remote))

        pushed = commit(git_repo, "a.rs", "fn a() {}\n", "c1")
        run_git(git_repo, "push", "-q", "origin", "main")
        commit(git_repo, "b.rs", "fn b() {}\n", "c2")

        git = GitClient(git_repo)
        resolver = BaseCommitResolver(git)
        assert resolver.find_remote_branch("main") == "origin/main"
        assert resolver.resolve() == pushed
        assert git.diff_name_status(pushed) == "A\tb.rs"

    def test_rev_parse_and_ancestry(self, git_repo, commit):
        first = commit(git_repo, "a.rs", "fn a() {}\n", "c1")
        second = commit(git_repo, "b.rs", "fn b() {}\n", "c2")

        git = GitClient(git_repo)
        assert git.rev_parse("HEAD") == second
        assert git.is_ancestor(first) is True
        assert git.is_ancestor(second, first) is False
        assert git.remote_branch_exists("main") is False


class TestBranchContainmentStream:
    """Test suite for the rev-list | xargs containment pipeline."""

    @pytest.fixture
    def started(self):
        """Record every process the stream starts."""
        real_popen = subprocess.Popen
        processes = []

        def record(cmd, *args, **kwargs):
            proc = real_popen(cmd, *args, **kwargs)
            # subprocess.run goes through Popen too; keep only the pipeline
            if cmd[0] == "xargs" or "rev-list" in cmd:
                processes.append(proc)
            return proc

        with patch('git_diff_processor.utils.git_commands.subprocess.Popen', side_effect=record):
            yield processes

    def test_early_exit_stops_both_processes(self, git_repo, commit, started):
        """Test leaving the context after a few lines terminates the pipeline."""
        for index in range(30):
            commit(git_repo, f"f{index}.rs", f"fn f{index}() {{}}\n", f"c{index}")

        with GitClient(git_repo).stream_branch_containment("main") as lines:
            first = [next(lines) for _ in range(3)]

        assert first[0] == "* main"
        assert len(started) == 2
        assert all(proc.returncode is not None for proc in started)

    def test_full_read_reports_every_commit(self, git_repo, commit, started):
        hashes = [commit(git_repo, f"f{index}.rs", "fn f() {}\n", f"c{index}") for index in range(3)]

        with GitClient(git_repo).stream_branch_containment("main") as lines:
            output = list(lines)

        assert [line for line in output if line.startswith("COMMIT: ")] == [
            f"COMMIT: {commit_hash}" for commit_hash in reversed(hashes)
        ]
        assert [proc.returncode for proc in started] == [0, 0]

    def test_failed_rev_list_raises(self, git_repo, commit, started):
        """Test a bad ref surfaces as the git failure once the stream is drained."""
        commit(git_repo, "a.rs", "fn a() {}\n", "c1")

        with pytest.raises(GitCommandError) as exc_info:
            with GitClient(git_repo).stream_branch_containment("no-such-branch") as lines:
                assert list(lines) == []

        assert exc_info.value.command[1:] == ["rev-list", "--first-parent", "no-such-branch"]
        assert exc_info.value.returncode != 0

    def test_failed_rev_list_is_not_reported_as_missing_base(self, git_repo, commit):
        commit(git_repo, "a.rs", "fn a() {}\n", "c1")

        with pytest.raises(GitCommandError):
            BaseCommitResolver(GitClient(git_repo)).scan_local_history("no-such-branch")
