"""Analyzer plugin implementations and discovery utilities."""

from __future__ import annotations

from importlib import metadata
from typing import Callable, Iterable, List, Sequence, Set

from .api import ApiAnalyzer
from .backend import BackendAnalyzer
from .base import Analyzer
from .database import DatabaseAnalyzer
from .devops import DevOpsAnalyzer
from .frontend import FrontendAnalyzer
from .performance import PerformanceAnalyzer
from .react import ReactAnalyzer
from .security import SecurityAnalyzer
from .testing import TestingAnalyzer
from ..logging import get_logger

_ENTRY_POINT_GROUP = "skillgen.analyzers"
_LOGGER = get_logger("analyzers")

# Registration order is the report order.
_BUILTIN_FACTORIES: dict[str, Callable[[], Analyzer]] = {
    "security": SecurityAnalyzer,
    "performance": PerformanceAnalyzer,
    "react": ReactAnalyzer,
    "backend": BackendAnalyzer,
    "frontend": FrontendAnalyzer,
    "database": DatabaseAnalyzer,
    "api": ApiAnalyzer,
    "testing": TestingAnalyzer,
    "devops": DevOpsAnalyzer,
}


def builtin_analyzer_names() -> List[str]:
    return list(_BUILTIN_FACTORIES)


def discover_analyzers(enabled: Sequence[str] | None = None) -> List[Analyzer]:
    """Return instantiated analyzers in registration order, honoring optional enabled names."""

    enabled_set: Set[str] | None = None
    if enabled is not None:
        enabled_set = {name.lower() for name in enabled}

    analyzers: List[Analyzer] = []
    seen: Set[str] = set()

    def _add(name: str, factory: Callable[[], Analyzer]) -> None:
        key = name.lower()
        if enabled_set is not None and key not in enabled_set:
            return
        if key in seen:
            return
        instance = factory()
        if not isinstance(instance, Analyzer):
            raise TypeError(f"Analyzer factory for '{name}' did not return an Analyzer instance")
        analyzers.append(instance)
        seen.add(key)
        if enabled_set is not None:
            enabled_set.discard(key)

    for name, factory in _BUILTIN_FACTORIES.items():
        _add(name, factory)

    for entry in _iter_entry_points():
        key = entry.name.lower()
        if key in seen or (enabled_set is not None and key not in enabled_set):
            continue
        try:
            loaded = entry.load()
        except Exception as exc:
            # Broken plugins are skipped; the built-ins still run.
            _LOGGER.warning("Skipping analyzer plugin %s: %s", entry.name, exc)
            continue
        _add(entry.name, lambda obj=loaded: _coerce_analyzer(obj))

    if enabled_set:
        missing = ", ".join(sorted(enabled_set))
        raise ValueError(f"Unknown analyzers requested: {missing}")

    return analyzers


def _coerce_analyzer(obj: object) -> Analyzer:
    if isinstance(obj, Analyzer):
        return obj
    if isinstance(obj, type) and issubclass(obj, Analyzer):
        return obj()
    if callable(obj):
        instance = obj()
        if isinstance(instance, Analyzer):
            return instance
    raise TypeError("Analyzer entry point must be an Analyzer subclass or factory")


def _iter_entry_points() -> Iterable[metadata.EntryPoint]:
    return metadata.entry_points().select(group=_ENTRY_POINT_GROUP)


__all__ = [
    "Analyzer",
    "ApiAnalyzer",
    "BackendAnalyzer",
    "DatabaseAnalyzer",
    "DevOpsAnalyzer",
    "FrontendAnalyzer",
    "PerformanceAnalyzer",
    "ReactAnalyzer",
    "SecurityAnalyzer",
    "TestingAnalyzer",
    "builtin_analyzer_names",
    "discover_analyzers",
]
