from __future__ import annotations

import logging
from pathlib import Path

import pytest

from mailsearch.config import Settings


@pytest.fixture()
def settings(tmp_path: Path, monkeypatch) -> Settings:  # noqa: ANN001
    root = tmp_path / "project"
    root.mkdir(parents=True, exist_ok=True)
    monkeypatch.setenv("MAILSEARCH_HOME", str(root))
    s = Settings.load(base_dir=root)
    s.ensure_directories()
    return s


@pytest.fixture()
def test_logger() -> logging.Logger:
    logger = logging.getLogger("mailsearch-test")
    logger.handlers.clear()
    logger.addHandler(logging.NullHandler())
    logger.setLevel(logging.INFO)
    return logger


@pytest.fixture(autouse=True)
def _restore_root_logging():  # noqa: ANN202
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)
