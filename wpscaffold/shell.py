"""
shell.py

Responsibility: Run external commands (npm, composer, gh, git, openssl).

Shell commands get a scoped environment containing only PATH and HOME plus
whatever a caller adds explicitly (e.g. GH_TOKEN), so the operator's ambient
environment does not leak into child processes. git runs with the full
environment because it needs the SSH agent to reach GitHub.
"""

from __future__ import annotations

import logging
import os
import subprocess
from pathlib import Path
from typing import Mapping

from wpscaffold.github_client import RepoInfo

logger = logging.getLogger(__name__)


class CommandError(RuntimeError):
    pass


def scoped_env(extra: Mapping[str, str] | None = None) -> dict[str, str]:
    env = {
        "PATH": os.environ.get("PATH", ""),
        "HOME": os.environ.get("HOME", ""),
    }
    if extra:
        env.update(extra)
    return env


def run(
    cmd: list[str],
    *,
    cwd: str | Path | None = None,
    env: Mapping[str, str] | None = None,
    input: str | None = None,
) -> str:
    """
    Run a command and return its combined stdout/stderr, raising CommandError on failure.

    `env` defaults to `scoped_env()`.
    """
    logger.debug("running %s (cwd=%s)", " ".join(cmd), cwd)
    try:
        proc = subprocess.run(
            cmd,
            cwd=str(cwd) if cwd is not None else None,
            env=dict(env) if env is not None else scoped_env(),
            input=input,
            check=True,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
        )
    except subprocess.CalledProcessError as e:
        raise CommandError(f"Command failed: {' '.join(cmd)}\n\n{e.stdout}") from e
    except FileNotFoundError as e:
        raise CommandError(f"Command not found: {cmd[0]}") from e
    return proc.stdout


class GitCheckout:
    """A local working copy driven through the git binary."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def _git(self, *args: str) -> str:
        return run(["git", *args], cwd=self.path, env=os.environ.copy())

    @classmethod
    def clone_url(cls, url: str, destination: str | Path) -> "GitCheckout":
        run(["git", "clone", url, str(destination)], env=os.environ.copy())
        return cls(destination)

    @classmethod
    def clone(cls, repo: RepoInfo, destination: str | Path) -> "GitCheckout":
        # A template repository is empty until GitHub finishes copying it.
        if not repo.ready:
            raise CommandError(f"Repository {repo.full_name} is not ready to be cloned yet.")
        return cls.clone_url(repo.ssh_url, destination)

    def has_changes(self) -> bool:
        return bool(self._git("status", "--porcelain").strip())

    def commit_and_push(self, message: str) -> None:
        self._git("add", "-A")
        self._git("commit", "-m", message)
        self._git("push")
