import threading

import pytest

from conftest import make_console, output
from wpscaffold.steps import StepFailed, StepRunner, Step, fan_out, report_failure, run_pipeline


def test_run_returns_action_result() -> None:
    c = make_console()
    assert StepRunner(c).run("Adding", "Could not add.", lambda: 42) == 42
    assert "✔ Adding" in output(c)


def test_run_wraps_failure_with_cause() -> None:
    runner = StepRunner(make_console())

    def boom() -> None:
        raise OSError("disk full")

    with pytest.raises(StepFailed) as exc:
        runner.run("Writing", "Could not write.", boom)
    assert exc.value.name == "Writing"
    assert exc.value.abort_message == "Could not write."
    assert isinstance(exc.value.__cause__, OSError)


def test_pipeline_stops_at_first_failure() -> None:
    ran: list[str] = []

    def fail() -> None:
        ran.append("b")
        raise RuntimeError("nope")

    steps = [
        Step("a", "A failed.", lambda: ran.append("a")),
        Step("b", "B failed.", fail),
        Step("c", "C failed.", lambda: ran.append("c")),
    ]
    result = run_pipeline(StepRunner(make_console()), steps)

    assert ran == ["a", "b"]
    assert result.completed == ["a"]
    assert not result.ok
    assert result.exit_code == 1
    assert result.failure is not None and result.failure.name == "b"


def test_pipeline_success_exit_code_zero() -> None:
    result = run_pipeline(StepRunner(make_console()), [Step("a", "x", lambda: None)])
    assert result.ok
    assert result.exit_code == 0


def test_report_failure_prints_cause_and_abort_message() -> None:
    def push() -> None:
        raise RuntimeError("rejected")

    c = make_console()
    result = run_pipeline(StepRunner(make_console()), [Step("push", "Could not push updated files.", push)])
    assert result.failure is not None
    report_failure(c, result.failure)
    text = output(c)
    assert "rejected" in text
    assert "Could not push updated files." in text


def test_fan_out_isolates_failures_and_keeps_order() -> None:
    def action(n: int) -> int:
        if n == 2:
            raise ValueError("bad target")
        return n * 10

    results = fan_out([1, 2, 3], action)

    assert [r.target for r in results] == [1, 2, 3]
    assert [r.ok for r in results] == [True, False, True]
    assert results[0].value == 10 and results[2].value == 30
    assert isinstance(results[1].error, ValueError)


def test_fan_out_runs_targets_concurrently() -> None:
    barrier = threading.Barrier(3, timeout=5)

    # Every unit waits for the other two; this only completes if all run at once.
    results = fan_out(["a", "b", "c"], lambda t: barrier.wait())
    assert all(r.ok for r in results)


def test_fan_out_empty() -> None:
    assert fan_out([], lambda t: t) == []
