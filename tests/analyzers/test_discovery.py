"""Tests for analyzer discovery utilities."""

from __future__ import annotations

from types import SimpleNamespace

import pytest

from skillgen.analyzers import (
    Analyzer,
    ReactAnalyzer,
    SecurityAnalyzer,
    builtin_analyzer_names,
    discover_analyzers,
)
from skillgen.models import SkillCategory


class DummyAnalyzer(Analyzer):
    """Test analyzer used for plugin discovery validation."""

    name = "dummy"
    display_name = "Dummy Analyzer"
    category = SkillCategory.SECURITY

    async def analyze(self, root, stack, context):  # pragma: no cover - unused
        return []


def test_discover_analyzers_returns_builtins_in_registration_order() -> None:
    analyzers = discover_analyzers()
    assert [analyzer.name for analyzer in analyzers][:9] == [
        "security",
        "performance",
        "react",
        "backend",
        "frontend",
        "database",
        "api",
        "testing",
        "devops",
    ]
    assert builtin_analyzer_names() == [analyzer.name for analyzer in analyzers][:9]


def test_discover_analyzers_respects_enabled_filter() -> None:
    analyzers = discover_analyzers(["react", "Security"])
    assert [type(analyzer) for analyzer in analyzers] == [SecurityAnalyzer, ReactAnalyzer]


def test_discover_analyzers_loads_entry_points(monkeypatch) -> None:
    dummy_entry = SimpleNamespace(
        name="dummy",
        load=lambda: DummyAnalyzer,
    )

    class DummyEntryPoints(list):
        def select(self, **kwargs):
            if kwargs.get("group") == "skillgen.analyzers":
                return self
            return []

    monkeypatch.setattr(
        "skillgen.analyzers.metadata.entry_points",
        lambda: DummyEntryPoints([dummy_entry]),
        raising=False,
    )

    analyzers = discover_analyzers(["dummy"])
    assert len(analyzers) == 1
    assert isinstance(analyzers[0], DummyAnalyzer)


def test_discover_analyzers_raises_for_unknown_name() -> None:
    with pytest.raises(ValueError):
        discover_analyzers(["does-not-exist"])


def _broken_entry_points(monkeypatch) -> None:
    def _load():
        raise ImportError("plugin dependency missing")

    broken_entry = SimpleNamespace(name="broken", load=_load)

    class BrokenEntryPoints(list):
        def select(self, **kwargs):
            return self

    monkeypatch.setattr(
        "skillgen.analyzers.metadata.entry_points",
        lambda: BrokenEntryPoints([broken_entry]),
        raising=False,
    )


def test_discover_analyzers_skips_plugins_that_fail_to_load(monkeypatch) -> None:
    _broken_entry_points(monkeypatch)

    analyzers = discover_analyzers()

    assert [analyzer.name for analyzer in analyzers] == builtin_analyzer_names()


def test_discover_analyzers_reports_enabled_plugin_that_fails_to_load(monkeypatch) -> None:
    _broken_entry_points(monkeypatch)

    with pytest.raises(ValueError, match="broken"):
        discover_analyzers(["security", "broken"])
