from __future__ import annotations

import logging
from typing import Iterator

import pytest

from tests._fixtures.symbols import SymbolBuilder


@pytest.fixture
def symbols() -> SymbolBuilder:
    """Provide a walker stand-in backed by a fresh store."""
    return SymbolBuilder()


@pytest.fixture(autouse=True)
def _reset_tagdoc_logger() -> Iterator[None]:
    """Undo CLI logging setup so caplog keeps seeing tagdoc records."""
    yield
    logger = logging.getLogger("tagdoc")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)
