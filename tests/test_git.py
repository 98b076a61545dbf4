"""
Unit tests for git lookups.

subprocess is mocked so the tests do not depend on a git installation.
"""

import subprocess
from unittest.mock import MagicMock, patch

from session_statusline.render.git import git_branch, git_dirty


def _completed(stdout: str = "", returncode: int = 0) -> MagicMock:
    result = MagicMock()
    result.stdout = stdout
    result.returncode = returncode
    return result


class TestGitBranch:
    """Test branch lookup."""

    def test_returns_branch_name(self):
        with patch("session_statusline.render.git.subprocess.run") as mock_run:
            mock_run.return_value = _completed("main\n")

            assert git_branch("/repo", timeout=1.5) == "main"

            args, kwargs = mock_run.call_args
            assert args[0] == ["git", "rev-parse", "--abbrev-ref", "HEAD"]
            assert kwargs["cwd"] == "/repo"
            assert kwargs["timeout"] == 1.5

    def test_not_a_repository(self):
        with patch("session_statusline.render.git.subprocess.run") as mock_run:
            mock_run.return_value = _completed("", returncode=128)

            assert git_branch("/tmp") == ""

    def test_timeout_means_no_branch(self):
        with patch("session_statusline.render.git.subprocess.run") as mock_run:
            mock_run.side_effect = subprocess.TimeoutExpired(cmd="git", timeout=2)

            assert git_branch("/repo") == ""

    def test_missing_git_or_directory(self):
        with patch("session_statusline.render.git.subprocess.run") as mock_run:
            mock_run.side_effect = FileNotFoundError("git")

            assert git_branch("/repo") == ""

    def test_nonexistent_directory_without_mock(self, tmp_path):
        assert git_branch(str(tmp_path / "does-not-exist")) == ""


class TestGitDirty:
    """Test working-tree status lookup."""

    def test_changes_present(self):
        with patch("session_statusline.render.git.subprocess.run") as mock_run:
            mock_run.return_value = _completed(" M statusline.py\n")

            assert git_dirty("/repo") is True

    def test_clean_tree(self):
        with patch("session_statusline.render.git.subprocess.run") as mock_run:
            mock_run.return_value = _completed("\n")

            assert git_dirty("/repo") is False

    def test_failure_means_clean(self):
        with patch("session_statusline.render.git.subprocess.run") as mock_run:
            mock_run.side_effect = subprocess.TimeoutExpired(cmd="git", timeout=2)

            assert git_dirty("/repo") is False
