"""Shared fixtures for engine tests."""

from __future__ import annotations

import pytest

from linktitle.engine.config import load_config


@pytest.fixture()
def engine_config():
    """Provide the default engine configuration."""

    return load_config(None)
