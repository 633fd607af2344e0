from __future__ import annotations

import logging
from pathlib import Path

import pytest

from skillgen.models import Context
from tests._fixtures.repo_builder import RepoBuilder


@pytest.fixture
def repo_builder(tmp_path: Path) -> RepoBuilder:
    """Provide a reusable workspace builder rooted at the pytest tmp_path."""
    return RepoBuilder(tmp_path)


@pytest.fixture
def context() -> Context:
    """Provide a run context with a quiet test logger."""
    return Context(logger=logging.getLogger("skillgen.tests"))
