"""Core data models shared across skillgen components."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, FrozenSet, Mapping, Optional, Tuple

from .workspace import Workspace


class SkillCategory(str, Enum):
    """Fixed set of categories a skill can belong to."""

    SECURITY = "security"
    PERFORMANCE = "performance"
    REACT = "react"
    BACKEND = "backend"
    FRONTEND = "frontend"
    DATABASE = "database"
    API = "api"
    TESTING = "testing"
    DEVOPS = "devops"


class OutcomeStatus(str, Enum):
    SUCCESS = "success"
    FAILED = "failed"


@dataclass(frozen=True)
class TechStack:
    """Immutable snapshot of the technologies detected in a workspace."""

    languages: Tuple[str, ...] = ()
    frameworks: FrozenSet[str] = frozenset()
    databases: FrozenSet[str] = frozenset()
    build_tools: FrozenSet[str] = frozenset()
    package_managers: FrozenSet[str] = frozenset()
    cloud_providers: FrozenSet[str] = frozenset()
    has_react: bool = False
    has_typescript: bool = False
    has_node: bool = False
    has_python: bool = False
    has_java: bool = False
    has_go: bool = False
    has_rust: bool = False

    def to_dict(self) -> Dict[str, Any]:
        """Return a JSON-ready mapping with set-valued fields sorted."""
        return {
            "languages": list(self.languages),
            "frameworks": sorted(self.frameworks),
            "databases": sorted(self.databases),
            "build_tools": sorted(self.build_tools),
            "package_managers": sorted(self.package_managers),
            "cloud_providers": sorted(self.cloud_providers),
            "has_react": self.has_react,
            "has_typescript": self.has_typescript,
            "has_node": self.has_node,
            "has_python": self.has_python,
            "has_java": self.has_java,
            "has_go": self.has_go,
            "has_rust": self.has_rust,
        }


def _freeze(value: Any) -> Any:
    if isinstance(value, Mapping):
        return MappingProxyType({key: _freeze(item) for key, item in value.items()})
    if isinstance(value, (list, tuple)):
        return tuple(_freeze(item) for item in value)
    if isinstance(value, (set, frozenset)):
        return tuple(sorted(_freeze(item) for item in value))
    return value


def _thaw(value: Any) -> Any:
    if isinstance(value, Mapping):
        return {key: _thaw(item) for key, item in value.items()}
    if isinstance(value, tuple):
        return [_thaw(item) for item in value]
    return value


@dataclass(frozen=True)
class Skill:
    """Best-practice document produced by an analyzer."""

    name: str
    display_name: str
    description: str
    guidelines: Tuple[str, ...]
    category: SkillCategory
    tech_stack: Tuple[str, ...] = ()
    metadata: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "guidelines", tuple(self.guidelines))
        object.__setattr__(self, "tech_stack", tuple(self.tech_stack))
        object.__setattr__(self, "category", SkillCategory(self.category))
        object.__setattr__(self, "metadata", _freeze(self.metadata or {}))

    @property
    def path_parts(self) -> Tuple[str, str]:
        """Return ``(category, name)``, the sink location of this skill."""
        return (self.category.value, self.name)

    def metadata_dict(self) -> Dict[str, Any]:
        """Return a mutable deep copy of the metadata."""
        return _thaw(self.metadata)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "display_name": self.display_name,
            "description": self.description,
            "guidelines": list(self.guidelines),
            "category": self.category.value,
            "tech_stack": list(self.tech_stack),
            "metadata": self.metadata_dict(),
        }


@dataclass(frozen=True)
class AnalyzerOutcome:
    """Per-analyzer result recorded by the orchestrator."""

    analyzer_name: str
    status: OutcomeStatus
    skills: Tuple[Skill, ...] = ()
    error: Optional[str] = None
    duration: float = 0.0

    def __post_init__(self) -> None:
        object.__setattr__(self, "skills", tuple(self.skills))
        if self.status is OutcomeStatus.FAILED:
            if not self.error:
                raise ValueError("failed outcomes must carry an error message")
            if self.skills:
                raise ValueError("failed outcomes cannot carry skills")
        elif self.error is not None:
            raise ValueError("successful outcomes cannot carry an error")

    @classmethod
    def succeeded(
        cls, analyzer_name: str, skills: Tuple[Skill, ...], duration: float = 0.0
    ) -> "AnalyzerOutcome":
        return cls(analyzer_name, OutcomeStatus.SUCCESS, tuple(skills), None, duration)

    @classmethod
    def failed(cls, analyzer_name: str, error: str, duration: float = 0.0) -> "AnalyzerOutcome":
        return cls(analyzer_name, OutcomeStatus.FAILED, (), error, duration)

    @property
    def ok(self) -> bool:
        return self.status is OutcomeStatus.SUCCESS


@dataclass(frozen=True)
class AnalyzerSummary:
    """Report entry describing one analyzer run."""

    name: str
    skills_generated: int
    status: OutcomeStatus
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "name": self.name,
            "skills_generated": self.skills_generated,
            "status": self.status.value,
        }
        if self.error is not None:
            data["error"] = self.error
        return data


@dataclass(frozen=True)
class AnalysisReport:
    """Aggregate of all analyzer outcomes for one run."""

    tech_stack: TechStack
    total_skills_generated: int
    analyzers: Tuple[AnalyzerSummary, ...]
    timestamp: str

    @property
    def failed_analyzers(self) -> Tuple[AnalyzerSummary, ...]:
        return tuple(entry for entry in self.analyzers if entry.status is OutcomeStatus.FAILED)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "tech_stack": self.tech_stack.to_dict(),
            "total_skills_generated": self.total_skills_generated,
            "analyzers": [entry.to_dict() for entry in self.analyzers],
            "timestamp": self.timestamp,
        }


@dataclass(frozen=True)
class PersistResult:
    """Outcome of writing one skill document."""

    skill_name: str
    category: str
    path: Optional[Path]
    success: bool
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "skill_name": self.skill_name,
            "category": self.category,
            "path": str(self.path) if self.path is not None else None,
            "success": self.success,
            "error": self.error,
        }


@dataclass(frozen=True)
class RunResult:
    """Everything a completed orchestration run produced."""

    report: AnalysisReport
    skills: Tuple[Skill, ...]
    persisted: Tuple[PersistResult, ...] = ()
    states: Tuple[str, ...] = ()

    @property
    def persistence_failures(self) -> Tuple[PersistResult, ...]:
        return tuple(result for result in self.persisted if not result.success)


@dataclass(frozen=True)
class Context:
    """Per-run collaborators handed to probes, analyzers and the orchestrator."""

    logger: logging.Logger
    exclude_paths: Tuple[str, ...] = ()
    content_scan_limit: int = 50

    def workspace(self, root: Path | str) -> Workspace:
        """Return a read-only workspace view honoring configured exclusions."""
        return Workspace(root, self.exclude_paths)


__all__ = [
    "AnalysisReport",
    "AnalyzerOutcome",
    "AnalyzerSummary",
    "Context",
    "OutcomeStatus",
    "PersistResult",
    "RunResult",
    "Skill",
    "SkillCategory",
    "TechStack",
]
