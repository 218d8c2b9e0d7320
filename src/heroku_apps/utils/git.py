# ABOUTME: Git remote helper for the heroku-apps CLI
# ABOUTME: Lists, adds and removes remotes that point at platform apps

"""Thin wrapper over the git binary for remote bookkeeping."""

from __future__ import annotations

import re
import subprocess
from pathlib import Path

import structlog

from heroku_apps.exceptions import GitError

logger = structlog.get_logger(__name__)


def app_remote_pattern(host: str) -> re.Pattern[str]:
    """Match `git@<host>:<app>.git` and capture the app name."""
    return re.compile(rf"^git@{re.escape(host)}:([\w-]+)\.git$")


def git_url(host: str, app: str) -> str:
    return f"git@{host}:{app}.git"


class GitRemotes:
    """Remote configuration of the git checkout at `cwd`."""

    def __init__(self, cwd: Path | str | None = None, host: str = "heroku.com") -> None:
        self._cwd = Path(cwd) if cwd is not None else Path.cwd()
        self._host = host
        self._pattern = app_remote_pattern(host)

    def _git(self, *args: str, check: bool = True) -> str:
        """Run git with `args` in the checkout and return stripped stdout."""
        log = logger.bind(args=list(args), cwd=str(self._cwd))
        log.debug("Running git")
        try:
            proc = subprocess.run(
                ["git", *args],
                cwd=self._cwd,
                capture_output=True,
                text=True,
                check=False,
            )
        except FileNotFoundError as e:
            raise GitError(list(args), 127, "git executable not found") from e

        if proc.returncode != 0:
            log.debug("git exited non-zero", returncode=proc.returncode, stderr=proc.stderr[:200])
            if check:
                raise GitError(list(args), proc.returncode, proc.stderr)
            return ""
        return proc.stdout.strip()

    def is_repository(self) -> bool:
        return (self._cwd / ".git").exists()

    def names(self) -> list[str]:
        """All configured remote names, app remotes or not."""
        if not self.is_repository():
            return []
        return [line for line in self._git("remote", check=False).splitlines() if line]

    def remotes(self) -> dict[str, str]:
        """
        Map remote name to app name for every remote whose URL points at an app.

        `git remote -v` lists each remote twice (fetch and push); both lines
        carry the same URL, so the mapping is the same either way.
        """
        if not self.is_repository():
            return {}
        mapping: dict[str, str] = {}
        for line in self._git("remote", "-v", check=False).splitlines():
            parts = line.split()
            if len(parts) < 2:
                continue
            name, url = parts[0], parts[1]
            match = self._pattern.match(url)
            if match:
                mapping[name] = match.group(1)
        return mapping

    def add(self, name: str, url: str) -> None:
        self._git("remote", "add", name, url)
        logger.info("Git remote added", remote=name, url=url)

    def remove(self, name: str) -> None:
        self._git("remote", "rm", name)
        logger.info("Git remote removed", remote=name)

    def create_remote(self, name: str, url: str) -> bool:
        """
        Add `name` -> `url` unless the remote exists or cwd is not a checkout.

        Returns:
            True if a remote was added.
        """
        if not self.is_repository():
            return False
        if name in self.names():
            return False
        self.add(name, url)
        return True
