"""Tests for tech stack construction."""

from __future__ import annotations

import asyncio
from pathlib import Path

import pytest

from skillgen.errors import StackBuildError
from skillgen.models import Context, TechStack
from skillgen.probes import NODE, PYTHON, REACT, Evidence, Probe
from skillgen.stack import TechStackDetector, build_tech_stack
from tests._fixtures.repo_builder import RepoBuilder

NODE_EVIDENCE = Evidence(
    languages=("JavaScript",),
    frameworks=frozenset({"React", "Express"}),
    databases=frozenset({"MongoDB"}),
    package_managers=frozenset({"npm"}),
    capabilities=frozenset({NODE, REACT}),
)
PYTHON_EVIDENCE = Evidence(
    languages=("Python",),
    frameworks=frozenset({"Django"}),
    databases=frozenset({"PostgreSQL"}),
    package_managers=frozenset({"pip"}),
    capabilities=frozenset({PYTHON}),
)
CLOUD_EVIDENCE = Evidence(cloud_providers=frozenset({"Vercel"}))


def test_empty_evidence_builds_empty_stack() -> None:
    assert build_tech_stack([]) == TechStack()
    assert build_tech_stack([Evidence(), Evidence()]) == TechStack()


def test_build_is_order_independent_for_sets() -> None:
    forward = build_tech_stack([NODE_EVIDENCE, PYTHON_EVIDENCE, CLOUD_EVIDENCE])
    backward = build_tech_stack([CLOUD_EVIDENCE, PYTHON_EVIDENCE, NODE_EVIDENCE])

    assert forward.frameworks == backward.frameworks
    assert forward.databases == backward.databases
    assert forward.cloud_providers == backward.cloud_providers
    assert set(forward.languages) == set(backward.languages)
    assert forward.languages == ("JavaScript", "Python")
    assert backward.languages == ("Python", "JavaScript")


def test_build_is_monotonic() -> None:
    smaller = build_tech_stack([NODE_EVIDENCE])
    larger = build_tech_stack([NODE_EVIDENCE, PYTHON_EVIDENCE])

    assert smaller.frameworks <= larger.frameworks
    assert smaller.databases <= larger.databases
    assert set(smaller.languages) <= set(larger.languages)
    assert larger.has_react and larger.has_node and larger.has_python


def test_build_drops_duplicate_languages() -> None:
    stack = build_tech_stack([NODE_EVIDENCE, NODE_EVIDENCE])
    assert stack.languages == ("JavaScript",)


def test_to_dict_sorts_set_fields() -> None:
    data = build_tech_stack([NODE_EVIDENCE]).to_dict()
    assert data["frameworks"] == ["Express", "React"]
    assert data["has_react"] is True
    assert data["has_python"] is False


def test_detector_is_deterministic(repo_builder: RepoBuilder, context: Context) -> None:
    repo_builder.write_package_json({"react": "^18", "express": "^4", "pg": "^8"})
    repo_builder.write({"requirements.txt": "django\n", "Dockerfile": "FROM node:20\n"})
    detector = TechStackDetector()

    first = asyncio.run(detector.detect(repo_builder.path(), context))
    second = asyncio.run(detector.detect(repo_builder.path(), context))

    assert first == second
    assert first.languages == ("JavaScript", "Python")
    assert first.frameworks == frozenset({"React", "Express", "Django"})
    assert first.databases == frozenset({"PostgreSQL"})
    assert first.build_tools == frozenset({"Docker"})
    assert first.has_react and first.has_node and first.has_python
    assert not first.has_java


def test_detector_empty_workspace(repo_builder: RepoBuilder, context: Context) -> None:
    stack = asyncio.run(TechStackDetector().detect(repo_builder.path(), context))
    assert stack == TechStack()


def test_detector_absorbs_probe_failures(repo_builder: RepoBuilder, context: Context) -> None:
    async def broken(workspace, ctx):
        raise OSError("boom")

    async def python(workspace, ctx):
        return PYTHON_EVIDENCE

    detector = TechStackDetector([Probe("broken", broken), Probe("python", python)])
    stack = asyncio.run(detector.detect(repo_builder.path(), context))

    assert stack.languages == ("Python",)


def test_detector_rejects_missing_root(tmp_path: Path, context: Context) -> None:
    with pytest.raises(StackBuildError):
        asyncio.run(TechStackDetector().detect(tmp_path / "missing", context))


def test_detector_rejects_file_root(tmp_path: Path, context: Context) -> None:
    target = tmp_path / "file.txt"
    target.write_text("x", encoding="utf-8")
    with pytest.raises(StackBuildError):
        asyncio.run(TechStackDetector().detect(target, context))
