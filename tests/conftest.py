from __future__ import annotations

import logging
from pathlib import Path

import pytest

from tests._fixtures.graph_builder import GraphBuilder


@pytest.fixture
def graph_builder(tmp_path: Path) -> GraphBuilder:
    """Provide a reusable snapshot builder rooted at the pytest tmp_path."""
    return GraphBuilder(tmp_path)


@pytest.fixture(autouse=True)
def _isolate_logging(monkeypatch: pytest.MonkeyPatch):
    """Undo CLI logging configuration and LOGLEVEL overrides between tests."""
    monkeypatch.delenv("LOGLEVEL", raising=False)
    yield
    logger = logging.getLogger("demodulify")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.propagate = True
    logger.setLevel(logging.NOTSET)
