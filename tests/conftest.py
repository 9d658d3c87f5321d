from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterator

import pytest

from tests._fixtures.builders import ManifestBuilder


@pytest.fixture
def manifest_builder(tmp_path: Path) -> ManifestBuilder:
    """Provide a manifest builder rooted at the pytest tmp_path."""
    return ManifestBuilder(tmp_path)


@pytest.fixture(autouse=True)
def _reset_recgen_logger() -> Iterator[None]:
    """Undo CLI logging setup so caplog sees recgen records in every test."""
    yield
    logger = logging.getLogger("recgen")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)
    logger.propagate = True
