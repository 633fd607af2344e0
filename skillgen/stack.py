"""Tech stack construction from probe evidence."""

from __future__ import annotations

import asyncio
import os
from pathlib import Path
from typing import Iterable, List, Sequence, Set

from .errors import StackBuildError
from .models import Context, TechStack
from .probes import (
    DEFAULT_PROBES,
    GO,
    JAVA,
    NODE,
    PYTHON,
    REACT,
    RUST,
    TYPESCRIPT,
    Evidence,
    Probe,
    run_probe,
)


def build_tech_stack(evidence: Iterable[Evidence]) -> TechStack:
    """Fold probe evidence into one immutable snapshot.

    The fold is a monotonic union: evidence can only add facts. Set-valued fields
    do not depend on fold order; ``languages`` keeps the first detection of each
    language and drops later duplicates.
    """
    languages: List[str] = []
    seen_languages: Set[str] = set()
    frameworks: Set[str] = set()
    databases: Set[str] = set()
    build_tools: Set[str] = set()
    package_managers: Set[str] = set()
    cloud_providers: Set[str] = set()
    capabilities: Set[str] = set()

    for item in evidence:
        for language in item.languages:
            if language not in seen_languages:
                seen_languages.add(language)
                languages.append(language)
        frameworks.update(item.frameworks)
        databases.update(item.databases)
        build_tools.update(item.build_tools)
        package_managers.update(item.package_managers)
        cloud_providers.update(item.cloud_providers)
        capabilities.update(item.capabilities)

    return TechStack(
        languages=tuple(languages),
        frameworks=frozenset(frameworks),
        databases=frozenset(databases),
        build_tools=frozenset(build_tools),
        package_managers=frozenset(package_managers),
        cloud_providers=frozenset(cloud_providers),
        has_react=REACT in capabilities,
        has_typescript=TYPESCRIPT in capabilities,
        has_node=NODE in capabilities,
        has_python=PYTHON in capabilities,
        has_java=JAVA in capabilities,
        has_go=GO in capabilities,
        has_rust=RUST in capabilities,
    )


class TechStackDetector:
    """Runs the probe set against a workspace and builds the snapshot."""

    def __init__(self, probes: Sequence[Probe] | None = None) -> None:
        self.probes: tuple[Probe, ...] = tuple(probes) if probes is not None else DEFAULT_PROBES

    async def detect(self, root: Path | str, context: Context) -> TechStack:
        """Return the tech stack for ``root``.

        Raises ``StackBuildError`` when the workspace root cannot be inspected;
        every other failure is absorbed by the individual probes.
        """
        root_path = Path(root).expanduser()
        await asyncio.to_thread(_ensure_readable_root, root_path)

        workspace = context.workspace(root_path)
        evidence = await asyncio.gather(
            *(run_probe(probe, workspace, context) for probe in self.probes)
        )
        for probe, item in zip(self.probes, evidence):
            if not item.empty:
                context.logger.debug("Probe %s contributed evidence: %s", probe.name, item)
        return build_tech_stack(evidence)


def _ensure_readable_root(root: Path) -> None:
    if not root.exists():
        raise StackBuildError(f"Workspace path not found: {root}")
    if not root.is_dir():
        raise StackBuildError(f"Workspace path is not a directory: {root}")
    try:
        with os.scandir(root):
            pass
    except OSError as exc:
        raise StackBuildError(f"Workspace path is not readable: {root} ({exc})") from exc


__all__ = ["TechStackDetector", "build_tech_stack"]
