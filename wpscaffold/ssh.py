"""
ssh.py

Responsibility: Talk to the remote hosting server through the system `ssh` and `scp`.

Authentication is a private key file plus user@host; BatchMode keeps a missing
or rejected key from turning into an interactive password prompt.
"""

from __future__ import annotations

import os
import shlex
from dataclasses import dataclass
from pathlib import Path

from wpscaffold import shell


class SSHError(RuntimeError):
    pass


@dataclass(frozen=True)
class SSHConnection:
    host: str
    user: str
    private_key: Path

    @property
    def target(self) -> str:
        return f"{self.user}@{self.host}"

    def _options(self) -> list[str]:
        return ["-i", str(self.private_key), "-o", "BatchMode=yes", "-o", "ConnectTimeout=15"]

    def _run(self, cmd: list[str]) -> str:
        try:
            return shell.run(cmd, env=os.environ.copy())
        except shell.CommandError as e:
            raise SSHError(str(e)) from e

    def execute(self, command: str, *, cwd: str | None = None) -> str:
        remote = f"cd {shlex.quote(cwd)} && {command}" if cwd else command
        return self._run(["ssh", *self._options(), self.target, remote])

    def check(self) -> None:
        """Open a session and run a no-op, raising SSHError if that fails."""
        self.execute("true")

    def put(self, local: str | Path, remote: str) -> None:
        self._run(["scp", *self._options(), str(local), f"{self.target}:{remote}"])
