"""Shared fixtures for gantry_config tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from gantry_config.cfg import ConfigDocument, parse
from gantry_config.utils import logging_config

FIXTURES = Path(__file__).parent / "fixtures"


@pytest.fixture()
def cartesian_path() -> Path:
    """Reference cartesian printer config."""
    return FIXTURES / "example-cartesian.cfg"


@pytest.fixture()
def cartesian_text(cartesian_path: Path) -> str:
    return cartesian_path.read_text(encoding="utf-8")


@pytest.fixture()
def cartesian_doc(cartesian_text: str) -> ConfigDocument:
    return parse(cartesian_text, source_name="example-cartesian.cfg")


@pytest.fixture(autouse=True)
def _reset_logging():
    """Drop handlers and context installed by setup_logging() in a test."""
    yield
    logging_config.setup_logging(to_stderr=False, capture_warnings=False)
    logging_config.pop_context()
