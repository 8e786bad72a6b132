"""Tests for configure_logging."""

from __future__ import annotations

import logging

import pytest
import structlog

from gp_common.logging import configure_logging


pytestmark = pytest.mark.unit_common


@pytest.fixture
def clean_root_logger():
    root = logging.getLogger()
    saved_handlers = list(root.handlers)
    saved_level = root.level
    yield root
    root.handlers[:] = saved_handlers
    root.setLevel(saved_level)
    structlog.reset_defaults()


def test_force_installs_handlers_and_level(clean_root_logger, tmp_path, monkeypatch) -> None:
    monkeypatch.delenv("GP_LOG_LEVEL", raising=False)
    log_file = tmp_path / "gp.log"
    configure_logging(level="warning", log_file=str(log_file), json=True, force=True)

    assert clean_root_logger.level == logging.WARNING
    assert any(isinstance(h, logging.FileHandler) for h in clean_root_logger.handlers)

    logging.getLogger("gp.test").warning("persist failed")
    for handler in clean_root_logger.handlers:
        handler.flush()
    assert "persist failed" in log_file.read_text()


def test_env_level_is_used(clean_root_logger, monkeypatch) -> None:
    monkeypatch.setenv("GP_LOG_LEVEL", "ERROR")
    configure_logging(force=True)
    assert clean_root_logger.level == logging.ERROR


def test_debug_wins(clean_root_logger, monkeypatch) -> None:
    monkeypatch.setenv("GP_LOG_LEVEL", "ERROR")
    configure_logging(debug=True, force=True)
    assert clean_root_logger.level == logging.DEBUG
