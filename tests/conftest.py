"""Shared pytest fixtures."""

from __future__ import annotations

import logging

import pytest

from dtnsim.config import get_simulation_config


@pytest.fixture(autouse=True)
def reset_dtnsim_logging():
    """Undo configure_logging() so caplog sees records in every test."""
    yield
    root_logger = logging.getLogger("dtnsim")
    root_logger.handlers.clear()
    root_logger.setLevel(logging.NOTSET)
    root_logger.propagate = True


@pytest.fixture(autouse=True)
def clear_config_cache():
    """Each test sees configuration loaded from its own environment."""
    get_simulation_config.cache_clear()
    yield
    get_simulation_config.cache_clear()
