"""
steps.py

Responsibility: Execute side-effecting operations as named steps.

Two failure policies live here:
- Pipeline steps are fatal. The first failing step stops the pipeline; nothing
  after it runs and nothing before it is rolled back.
- Fan-out units are best-effort. Each target's failure is captured in its own
  result and never stops sibling targets.

Nothing in this module exits the process. `run_pipeline` returns a
`PipelineResult` and the CLI entry point turns it into an exit status.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, Callable, Generic, Iterable, Sequence, TypeVar

from rich.console import Console

from wpscaffold import console as fmt

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


class StepFailed(RuntimeError):
    """A pipeline step raised. The original exception is the `__cause__`."""

    def __init__(self, name: str, abort_message: str) -> None:
        super().__init__(f"{name}: {abort_message}")
        self.name = name
        self.abort_message = abort_message


class Aborted(RuntimeError):
    """The run stopped before (or between) steps without a step failing.

    Declined confirmations and empty selections use exit code 0, failed
    preconditions (existing repository, missing project files) use 1.
    """

    def __init__(self, message: str = "Aborted.", *, exit_code: int = 0) -> None:
        super().__init__(message)
        self.exit_code = exit_code


@dataclass(frozen=True)
class Step:
    name: str
    abort_message: str
    action: Callable[[], Any]


class StepRunner:
    def __init__(self, console: Console | None = None) -> None:
        self.console = console or fmt.make_console()

    def run(self, name: str, abort_message: str, action: Callable[[], T]) -> T:
        """
        Run `action` behind a spinner labelled `name` and return its result.

        Any exception marks the step failed and is re-raised as `StepFailed`.
        """
        logger.debug("step started: %s", name)
        try:
            with self.console.status(name):
                result = action()
        except Exception as e:  # noqa: BLE001 - every step error is fatal
            self.console.print(f"[red]✖[/red] {name}")
            logger.debug("step failed: %s", name, exc_info=True)
            raise StepFailed(name, abort_message) from e
        self.console.print(f"[green]✔[/green] {name}")
        return result


@dataclass
class PipelineResult:
    completed: list[str] = field(default_factory=list)
    failure: StepFailed | None = None

    @property
    def ok(self) -> bool:
        return self.failure is None

    @property
    def exit_code(self) -> int:
        return 0 if self.ok else 1


def run_pipeline(runner: StepRunner, steps: Iterable[Step]) -> PipelineResult:
    """Run steps strictly in order, stopping at the first failure."""
    result = PipelineResult()
    for step in steps:
        try:
            runner.run(step.name, step.abort_message, step.action)
        except StepFailed as e:
            result.failure = e
            break
        result.completed.append(step.name)
    return result


def report_failure(console: Console, failure: StepFailed) -> None:
    cause = failure.__cause__
    if cause is not None:
        console.print(str(cause), markup=False)
    console.print("\n" + fmt.error(failure.abort_message))


@dataclass(frozen=True)
class TargetResult(Generic[T]):
    target: T
    value: Any = None
    error: BaseException | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def fan_out(
    targets: Sequence[T],
    action: Callable[[T], R],
    *,
    max_workers: int | None = None,
) -> list[TargetResult[T]]:
    """
    Apply `action` to every target concurrently and collect one result per target.

    Results come back in target order. A raising target is logged and recorded;
    it never cancels or affects the others.
    """
    targets = list(targets)
    if not targets:
        return []

    with ThreadPoolExecutor(max_workers=max_workers or len(targets)) as pool:
        futures = [pool.submit(action, target) for target in targets]

    results: list[TargetResult[T]] = []
    for target, future in zip(targets, futures):
        error = future.exception()
        if error is None:
            results.append(TargetResult(target=target, value=future.result()))
        else:
            logger.warning("target %s failed: %s", target, error)
            results.append(TargetResult(target=target, error=error))
    return results
