import logging
from pathlib import Path

from rich.logging import RichHandler

from wpscaffold.console import configure_logging


def test_log_file_is_truncated_per_run(tmp_path: Path) -> None:
    log_file = tmp_path / "logs" / "run.log"

    logger = configure_logging(log_file=log_file)
    logging.getLogger("wpscaffold.steps").info("first run")
    logger = configure_logging(log_file=log_file)
    logging.getLogger("wpscaffold.steps").info("second run")
    for handler in logger.handlers:
        handler.flush()

    text = log_file.read_text(encoding="utf-8")
    assert "first run" not in text
    assert "INFO wpscaffold.steps: second run" in text


def test_verbose_logs_debug_to_stderr() -> None:
    logger = configure_logging(verbose=True)

    assert logger.level == logging.DEBUG
    assert len(logger.handlers) == 1
    assert isinstance(logger.handlers[0], RichHandler)
    assert logger.propagate is False
