from __future__ import annotations

import json
import logging
from pathlib import Path

from mailsearch.core.logging import configure_logging, get_logger, log_files


def test_logs_carry_correlation_id(tmp_path: Path) -> None:
    log_dir = tmp_path / "logs"
    configure_logging(log_dir, correlation_id="abc123")
    logger = get_logger("mailsearch.test", "abc123")

    logger.info("Search matched %s of %s candidates", 1, 3)
    for handler in logging.getLogger().handlers:
        handler.flush()

    text_log = next(log_dir.glob("mailsearch-*.log")).read_text(encoding="utf-8")
    json_log = next(log_dir.glob("mailsearch-*.jsonl")).read_text(encoding="utf-8").splitlines()

    assert "[abc123] mailsearch.test: Search matched 1 of 3 candidates" in text_log
    record = json.loads(json_log[-1])
    assert record["correlation_id"] == "abc123"
    assert record["message"] == "Search matched 1 of 3 candidates"


def test_console_only_shows_warnings(tmp_path: Path, capsys) -> None:  # noqa: ANN001
    configure_logging(tmp_path, correlation_id="run-1")
    logger = logging.getLogger("mailsearch.test")

    logger.info("Fetched 3 candidates")
    logger.warning("Skipping UID 7")
    for handler in logging.getLogger().handlers:
        handler.flush()

    captured = capsys.readouterr()
    assert captured.out == ""
    assert "Fetched 3 candidates" not in captured.err
    assert "WARNING [run-1] mailsearch.test: Skipping UID 7" in captured.err
    text_path, _ = log_files(tmp_path)
    assert "Fetched 3 candidates" in text_path.read_text(encoding="utf-8")
