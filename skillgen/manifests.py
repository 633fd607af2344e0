"""Dependency manifest readers shared by probes and analyzers."""

from __future__ import annotations

import json
import re
import tomllib
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from typing import Dict, FrozenSet, List, Optional, Set

from .workspace import Workspace

_REQUIREMENT_SPLIT = re.compile(r"[<>=!~;\[\s@]")


@dataclass(frozen=True)
class NodeManifest:
    """Dependency names declared by package.json."""

    dependencies: FrozenSet[str] = frozenset()
    dev_dependencies: FrozenSet[str] = frozenset()

    @property
    def all(self) -> FrozenSet[str]:
        return self.dependencies | self.dev_dependencies

    def has(self, *names: str) -> bool:
        combined = self.all
        return any(name in combined for name in names)


@dataclass(frozen=True)
class PythonManifest:
    """Dependency names declared by requirements.txt and pyproject.toml."""

    packages: FrozenSet[str] = frozenset()
    uses_poetry: bool = False

    def has(self, *names: str) -> bool:
        return any(name in self.packages for name in names)


# Node.js


async def load_node_manifest(workspace: Workspace) -> Optional[NodeManifest]:
    """Return the parsed package.json, or None when missing or malformed."""
    text = await workspace.read_text("package.json")
    if text is None:
        return None
    try:
        data = json.loads(text)
    except json.JSONDecodeError:
        return None
    if not isinstance(data, dict):
        return None

    def _extract(key: str) -> FrozenSet[str]:
        deps = data.get(key, {})
        if isinstance(deps, dict):
            return frozenset(str(name).lower() for name in deps)
        return frozenset()

    return NodeManifest(
        dependencies=_extract("dependencies"),
        dev_dependencies=_extract("devDependencies"),
    )


async def detect_node_package_manager(workspace: Workspace) -> str:
    """Infer the preferred Node package manager based on lockfiles."""
    if await workspace.exists("pnpm-lock.yaml"):
        return "pnpm"
    if await workspace.exists("yarn.lock"):
        return "yarn"
    return "npm"


# Python


async def load_python_manifest(workspace: Workspace) -> Optional[PythonManifest]:
    """Collect Python dependencies; None when neither manifest exists."""
    requirements = await workspace.read_text("requirements.txt")
    pyproject = await workspace.read_text("pyproject.toml")
    if requirements is None and pyproject is None:
        return None

    packages: Set[str] = set()
    uses_poetry = False
    if requirements is not None:
        packages.update(parse_requirements(requirements))
    if pyproject is not None:
        names, uses_poetry = parse_pyproject(pyproject)
        packages.update(names)
    return PythonManifest(packages=frozenset(packages), uses_poetry=uses_poetry)


def parse_requirements(text: str) -> List[str]:
    packages: List[str] = []
    for line in text.splitlines():
        stripped = line.split("#", 1)[0].strip()
        if not stripped or stripped.startswith("-"):
            continue
        name = _requirement_name(stripped)
        if name:
            packages.append(name)
    return packages


def parse_pyproject(text: str) -> tuple[List[str], bool]:
    """Return ``(dependency names, uses_poetry)`` from pyproject.toml text."""
    try:
        data = tomllib.loads(text)
    except tomllib.TOMLDecodeError:
        return [], False

    dependencies: List[object] = []
    project = data.get("project")
    if isinstance(project, dict):
        dependencies.extend(project.get("dependencies", []) or [])
        optional = project.get("optional-dependencies", {}) or {}
        if isinstance(optional, dict):
            for values in optional.values():
                dependencies.extend(values or [])

    tool = data.get("tool")
    poetry = tool.get("poetry") if isinstance(tool, dict) else None
    uses_poetry = isinstance(poetry, dict)
    if isinstance(poetry, dict):
        for key in ("dependencies", "dev-dependencies"):
            section = poetry.get(key, {}) or {}
            if isinstance(section, dict):
                dependencies.extend(section.keys())
        groups = poetry.get("group", {}) or {}
        if isinstance(groups, dict):
            for group in groups.values():
                section = group.get("dependencies", {}) if isinstance(group, dict) else {}
                if isinstance(section, dict):
                    dependencies.extend(section.keys())

    names: Set[str] = set()
    for dep in dependencies:
        if isinstance(dep, str):
            name = _requirement_name(dep)
            if name and name != "python":
                names.add(name)
    return sorted(names), uses_poetry


def _requirement_name(spec: str) -> str:
    return _REQUIREMENT_SPLIT.split(spec.strip(), 1)[0].strip().lower()


# Java


async def load_java_dependencies(workspace: Workspace) -> List[str]:
    """Collect ``group:artifact`` coordinates from pom.xml and Gradle builds."""
    deps: Set[str] = set()
    pom = await workspace.read_text("pom.xml")
    if pom is not None:
        deps.update(parse_pom_dependencies(pom))

    for name in ("build.gradle", "build.gradle.kts"):
        gradle = await workspace.read_text(name)
        if gradle is not None:
            deps.update(parse_gradle_dependencies(gradle))

    return sorted(deps)


def parse_pom_dependencies(text: str) -> Set[str]:
    deps: Set[str] = set()
    try:
        root = ET.fromstring(text)
    except ET.ParseError:
        return deps

    namespace = _detect_xml_namespace(root)
    tag = f"{{{namespace}}}dependency" if namespace else "dependency"
    group_tag = f"{{{namespace}}}groupId" if namespace else "groupId"
    artifact_tag = f"{{{namespace}}}artifactId" if namespace else "artifactId"

    for dep in root.findall(f".//{tag}"):
        group = dep.findtext(group_tag, default="")
        artifact = dep.findtext(artifact_tag, default="")
        if group and artifact:
            deps.add(f"{group}:{artifact}")
    return deps


def _detect_xml_namespace(element: ET.Element) -> str | None:
    match = re.match(r"\{(.+)}", element.tag)
    return match.group(1) if match else None


def parse_gradle_dependencies(content: str) -> Set[str]:
    deps: Set[str] = set()
    pattern = re.compile(r"['\"]([\w\-.]+:[\w\-.]+)(?::[\w\-.]+)?['\"]")
    for line in content.splitlines():
        line = line.strip()
        if not line or line.startswith("//"):
            continue
        if any(token in line for token in ("implementation", "api", "compile", "runtimeOnly", "testImplementation")):
            match = pattern.search(line)
            if match:
                deps.add(match.group(1))
    return deps


def java_frameworks(dependencies: List[str]) -> Dict[str, bool]:
    lowered = [dep.lower() for dep in dependencies]
    return {
        "Spring Boot": any("spring-boot" in dep or "springframework" in dep for dep in lowered),
        "JUnit": any("junit" in dep for dep in lowered),
    }


__all__ = [
    "NodeManifest",
    "PythonManifest",
    "detect_node_package_manager",
    "java_frameworks",
    "load_java_dependencies",
    "load_node_manifest",
    "load_python_manifest",
    "parse_gradle_dependencies",
    "parse_pom_dependencies",
    "parse_pyproject",
    "parse_requirements",
]
