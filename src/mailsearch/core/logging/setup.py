from __future__ import annotations

import logging
from datetime import date, datetime, timezone
from pathlib import Path

from pythonjsonlogger import jsonlogger

TEXT_FORMAT = "%(asctime)s %(levelname)s [%(correlation_id)s] %(name)s: %(message)s"
JSON_FORMAT = "%(asctime)s %(levelname)s %(name)s %(correlation_id)s %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class CorrelationIdFilter(logging.Filter):
    """Stamps records that were not logged through an adapter with the run's id."""

    def __init__(self, correlation_id: str):
        super().__init__()
        self.correlation_id = correlation_id

    def filter(self, record: logging.LogRecord) -> bool:
        record.correlation_id = getattr(record, "correlation_id", self.correlation_id)
        return True


def log_files(log_dir: Path, day: date | None = None) -> tuple[Path, Path]:
    """Return the ``(text, jsonl)`` log paths for a UTC day, today by default."""
    day = day or datetime.now(timezone.utc).date()
    stem = f"mailsearch-{day.isoformat()}"
    return log_dir / f"{stem}.log", log_dir / f"{stem}.jsonl"


def _attach(
    root: logging.Logger,
    handler: logging.Handler,
    formatter: logging.Formatter,
    level: int,
    correlation_filter: CorrelationIdFilter,
) -> None:
    handler.setLevel(level)
    handler.setFormatter(formatter)
    handler.addFilter(correlation_filter)
    root.addHandler(handler)


def configure_logging(
    log_dir: Path,
    correlation_id: str,
    level: int = logging.INFO,
    console_level: int = logging.WARNING,
) -> None:
    """Route the root logger to stderr and to the daily text and JSONL files.

    Any handlers from an earlier call are dropped, so each CLI invocation
    logs under its own correlation id only.
    """
    log_dir.mkdir(parents=True, exist_ok=True)
    text_path, json_path = log_files(log_dir)

    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(min(level, console_level))

    correlation_filter = CorrelationIdFilter(correlation_id)
    text_formatter = logging.Formatter(fmt=TEXT_FORMAT, datefmt=DATE_FORMAT)

    # stderr only: stdout carries command output
    _attach(root, logging.StreamHandler(), text_formatter, console_level, correlation_filter)
    _attach(root, logging.FileHandler(text_path, encoding="utf-8"), text_formatter, level, correlation_filter)
    _attach(
        root,
        logging.FileHandler(json_path, encoding="utf-8"),
        jsonlogger.JsonFormatter(fmt=JSON_FORMAT),
        level,
        correlation_filter,
    )


def get_logger(name: str, correlation_id: str) -> logging.LoggerAdapter:
    return logging.LoggerAdapter(logging.getLogger(name), extra={"correlation_id": correlation_id})
