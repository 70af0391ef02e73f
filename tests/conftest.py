from __future__ import annotations

import io
from pathlib import Path
from typing import Any, Callable, Sequence

import pytest
from rich.console import Console

from wpscaffold.commands.common import Context
from wpscaffold.config import ConfigStore
from wpscaffold.prompts import Prompt
from wpscaffold.steps import StepRunner

API = "https://api.github.com"


class ScriptedAsker:
    """Answers prompts from a script; unscripted prompts take their default."""

    def __init__(
        self,
        answers: dict[str, Any] | None = None,
        confirms: Sequence[bool] = (),
        select: Callable[[str, Any], bool] | None = None,
    ) -> None:
        self.answers = {k: list(v) if isinstance(v, list) else [v] for k, v in (answers or {}).items()}
        self.confirms = list(confirms)
        self.select = select or (lambda title, value: True)
        self.asked: list[tuple[str, Any]] = []
        self.confirmed: list[str] = []
        self.errors: list[str] = []

    def ask(self, prompt: Prompt, default: Any) -> Any:
        self.asked.append((prompt.key, default))
        queue = self.answers.get(prompt.key)
        if not queue:
            return default
        return queue.pop(0) if len(queue) > 1 else queue[0]

    def confirm(self, message: str, default: bool = False) -> bool:
        self.confirmed.append(message)
        return self.confirms.pop(0) if self.confirms else True

    def checkbox(self, message: str, choices: Sequence[tuple[str, Any]]) -> list[Any]:
        return [value for title, value in choices if self.select(title, value)]

    def error(self, message: str) -> None:
        self.errors.append(message)


class FakeCredentials:
    def __init__(self, token: str | None = None) -> None:
        self.token = token
        self.stored: list[str] = []

    def get(self) -> str | None:
        return self.token

    def set(self, token: str) -> None:
        self.stored.append(token)
        self.token = token

    def update(self, stored: str | None, token: str) -> None:
        if stored != token:
            self.set(token)


class FakeResponse:
    def __init__(self, status_code: int = 200, payload: Any = None) -> None:
        self.status_code = status_code
        self._payload = payload
        self.text = "" if payload is None else str(payload)

    def json(self) -> Any:
        if self._payload is None:
            raise ValueError("no body")
        return self._payload


class FakeHTTP:
    """
    Minimal stand-in for `requests`: routes (method, path) to queued responses.

    The last response of a queue repeats.
    """

    def __init__(self, routes: dict[tuple[str, str], list[FakeResponse]] | None = None) -> None:
        self.routes = {k: list(v) for k, v in (routes or {}).items()}
        self.calls: list[dict[str, Any]] = []

    def request(self, method: str, url: str, **kwargs: Any) -> FakeResponse:
        path = url.replace(API, "")
        self.calls.append({"method": method, "path": path, **kwargs})
        queue = self.routes.get((method, path))
        if not queue:
            return FakeResponse(404, {"message": "Not Found"})
        return queue.pop(0) if len(queue) > 1 else queue[0]

    def paths(self, method: str) -> list[str]:
        return [c["path"] for c in self.calls if c["method"] == method]


class FakeShell:
    def __init__(self, fail_on: Callable[[list[str]], bool] | None = None, output: str = "") -> None:
        self.fail_on = fail_on or (lambda cmd: False)
        self.output = output
        self.commands: list[tuple[list[str], Any]] = []

    def __call__(self, cmd: list[str], *, cwd: Any = None, env: Any = None, input: Any = None) -> str:
        self.commands.append((list(cmd), cwd))
        if self.fail_on(cmd):
            from wpscaffold.shell import CommandError

            raise CommandError(f"Command failed: {' '.join(cmd)}")
        return self.output


def make_console() -> Console:
    return Console(file=io.StringIO(), width=200, force_terminal=False, color_system=None)


def output(console: Console) -> str:
    return console.file.getvalue()  # type: ignore[attr-defined]


@pytest.fixture
def console() -> Console:
    return make_console()


@pytest.fixture
def make_ctx(tmp_path: Path) -> Callable[..., Context]:
    def factory(asker: ScriptedAsker | None = None, **overrides: Any) -> Context:
        c = make_console()
        config = ConfigStore(tmp_path / "config" / "config.yml")
        config.load()
        work = tmp_path / "work"
        work.mkdir(exist_ok=True)
        fields: dict[str, Any] = {
            "console": c,
            "asker": asker or ScriptedAsker(),
            "config": config,
            "credentials": FakeCredentials(),
            "runner": StepRunner(c),
            "cwd": work,
            "sleep": lambda seconds: None,
        }
        fields.update(overrides)
        return Context(**fields)

    return factory
