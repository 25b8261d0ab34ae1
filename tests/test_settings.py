"""Logging settings tests."""

from __future__ import annotations

import logging

from linktitle import settings


def test_level_comes_from_environment(monkeypatch):
    monkeypatch.setenv("LINKTITLE_LOG_LEVEL", "debug")
    config = settings.build_logging()
    assert config["root"]["level"] == "DEBUG"
    assert config["loggers"]["linktitle"]["level"] == "DEBUG"


def test_configure_logging_sets_package_level():
    settings.configure_logging("warning")
    try:
        assert logging.getLogger("linktitle").level == logging.WARNING
        assert logging.getLogger("httpx").level == logging.WARNING
    finally:
        settings.configure_logging("info")
