# ABOUTME: Unit tests for the git remote helper
# ABOUTME: Tests remote parsing and mutation with a patched subprocess

import subprocess
from unittest.mock import patch

import pytest

from heroku_apps.exceptions import GitError
from heroku_apps.utils.git import GitRemotes, app_remote_pattern, git_url

REMOTE_V = """\
heroku\tgit@heroku.com:myapp.git (fetch)
heroku\tgit@heroku.com:myapp.git (push)
staging\tgit@heroku.com:myapp-staging.git (fetch)
staging\tgit@heroku.com:myapp-staging.git (push)
origin\tgit@github.com:me/myapp.git (fetch)
origin\tgit@github.com:me/myapp.git (push)
"""


def completed(stdout: str = "", returncode: int = 0, stderr: str = "") -> subprocess.CompletedProcess:
    return subprocess.CompletedProcess(args=["git"], returncode=returncode, stdout=stdout, stderr=stderr)


@pytest.fixture
def repo(tmp_path):
    (tmp_path / ".git").mkdir()
    return tmp_path


@pytest.mark.unit
class TestPatterns:
    """Tests for app URL helpers."""

    def test_git_url(self):
        assert git_url("heroku.com", "myapp") == "git@heroku.com:myapp.git"

    def test_pattern_matches_app_urls_only(self):
        """Test only URLs on the configured host match."""
        pattern = app_remote_pattern("heroku.com")

        assert pattern.match("git@heroku.com:my-app.git").group(1) == "my-app"
        assert pattern.match("git@github.com:me/myapp.git") is None
        assert pattern.match("git@herokuXcom:myapp.git") is None


@pytest.mark.unit
class TestGitRemotes:
    """Tests for GitRemotes."""

    def test_remotes_maps_app_remotes(self, repo):
        """Test non-app remotes are ignored."""
        with patch("heroku_apps.utils.git.subprocess.run", return_value=completed(REMOTE_V)) as run:
            remotes = GitRemotes(repo).remotes()

        assert remotes == {"heroku": "myapp", "staging": "myapp-staging"}
        assert run.call_args.args[0] == ["git", "remote", "-v"]
        assert run.call_args.kwargs["cwd"] == repo

    def test_custom_host(self, repo):
        output = "prod\tgit@git.example.com:shop.git (fetch)\n"
        with patch("heroku_apps.utils.git.subprocess.run", return_value=completed(output)):
            assert GitRemotes(repo, host="git.example.com").remotes() == {"prod": "shop"}

    def test_outside_repository(self, tmp_path):
        """Test nothing runs outside a checkout."""
        with patch("heroku_apps.utils.git.subprocess.run") as run:
            git = GitRemotes(tmp_path)

            assert git.remotes() == {}
            assert git.names() == []
            assert git.create_remote("heroku", "git@heroku.com:x.git") is False

        run.assert_not_called()

    def test_names(self, repo):
        with patch("heroku_apps.utils.git.subprocess.run", return_value=completed("heroku\norigin\n")):
            assert GitRemotes(repo).names() == ["heroku", "origin"]

    def test_add_and_remove(self, repo):
        with patch("heroku_apps.utils.git.subprocess.run", return_value=completed()) as run:
            git = GitRemotes(repo)
            git.add("heroku", "git@heroku.com:myapp.git")
            git.remove("heroku")

        assert [c.args[0] for c in run.call_args_list] == [
            ["git", "remote", "add", "heroku", "git@heroku.com:myapp.git"],
            ["git", "remote", "rm", "heroku"],
        ]

    def test_create_remote_adds_when_missing(self, repo):
        """Test a new remote is added."""
        with patch(
            "heroku_apps.utils.git.subprocess.run",
            side_effect=[completed("origin\n"), completed()],
        ) as run:
            assert GitRemotes(repo).create_remote("heroku", "git@heroku.com:myapp.git") is True

        assert run.call_args.args[0] == ["git", "remote", "add", "heroku", "git@heroku.com:myapp.git"]

    def test_create_remote_keeps_existing(self, repo):
        """Test an existing remote of the same name is left alone."""
        with patch("heroku_apps.utils.git.subprocess.run", return_value=completed("heroku\n")) as run:
            assert GitRemotes(repo).create_remote("heroku", "git@heroku.com:myapp.git") is False

        assert run.call_count == 1

    def test_failing_command_raises(self, repo):
        """Test a non-zero exit becomes GitError."""
        failure = completed(returncode=128, stderr="fatal: No such remote: 'heroku'\n")
        with patch("heroku_apps.utils.git.subprocess.run", return_value=failure):
            with pytest.raises(GitError) as exc_info:
                GitRemotes(repo).remove("heroku")

        assert exc_info.value.returncode == 128
        assert exc_info.value.message == (
            "git remote rm heroku failed with exit status 128: fatal: No such remote: 'heroku'"
        )

    def test_missing_git_binary(self, repo):
        with patch("heroku_apps.utils.git.subprocess.run", side_effect=FileNotFoundError("git")):
            with pytest.raises(GitError) as exc_info:
                GitRemotes(repo).add("heroku", "git@heroku.com:myapp.git")

        assert exc_info.value.returncode == 127
