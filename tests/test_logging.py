from __future__ import annotations

import logging
from pathlib import Path

from portfolio_updater.logging import RedactingFilter, configure_logging, get_logger, redact


def test_get_logger_is_namespaced() -> None:
    assert get_logger().name == "portfolio_updater"
    assert get_logger("git.remote").name == "portfolio_updater.git.remote"


def test_configure_logging_resets_handlers_and_writes_file(tmp_path: Path) -> None:
    log_file = tmp_path / "updater.log"

    configure_logging()
    logger = configure_logging(verbose=True, log_file=log_file)
    get_logger("orchestrator").debug("Update requested (%d chars)", 12)

    assert logger.level == logging.DEBUG
    assert len(logger.handlers) == 2
    for handler in logger.handlers:
        handler.flush()
    assert "Update requested (12 chars)" in log_file.read_text(encoding="utf-8")

    configure_logging()
    assert len(logger.handlers) == 1


def test_redact_masks_tokens() -> None:
    text = redact("Authorization: Bearer abc.def ghp_" + "a" * 36 + " sk-" + "b" * 24)
    assert text == "Authorization: Bearer *** *** ***"


def test_redacting_filter_rewrites_formatted_message() -> None:
    record = logging.LogRecord(
        "portfolio_updater", logging.WARNING, __file__, 1, "upstream said %s", ("Bearer xyz",), None
    )

    assert RedactingFilter().filter(record) is True
    assert record.getMessage() == "upstream said Bearer ***"
