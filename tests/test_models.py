"""Tests for the shared data models."""

from __future__ import annotations

import dataclasses

import pytest

from skillgen.models import AnalyzerOutcome, OutcomeStatus, Skill, SkillCategory


def _skill(**overrides) -> Skill:
    values = dict(
        name="api-best-practices",
        display_name="API Best Practices",
        description="Guidelines for designing and implementing APIs",
        guidelines=["Implement request validation"],
        category="api",
        metadata={"frameworks": ["Express"], "nested": {"flag": True}},
    )
    values.update(overrides)
    return Skill(**values)


def test_skill_normalises_and_freezes_fields() -> None:
    skill = _skill()

    assert skill.category is SkillCategory.API
    assert skill.guidelines == ("Implement request validation",)
    assert skill.metadata["frameworks"] == ("Express",)
    with pytest.raises(TypeError):
        skill.metadata["frameworks"] = ["Koa"]  # type: ignore[index]
    with pytest.raises(dataclasses.FrozenInstanceError):
        skill.name = "other"  # type: ignore[misc]


def test_skill_to_dict_returns_plain_values() -> None:
    data = _skill().to_dict()
    assert data["category"] == "api"
    assert data["metadata"] == {"frameworks": ["Express"], "nested": {"flag": True}}


def test_skill_rejects_unknown_category() -> None:
    with pytest.raises(ValueError):
        _skill(category="mobile")


def test_outcome_invariants() -> None:
    ok = AnalyzerOutcome.succeeded("api", (_skill(),))
    assert ok.ok and ok.status is OutcomeStatus.SUCCESS

    failed = AnalyzerOutcome.failed("api", "RuntimeError: boom")
    assert not failed.ok
    assert failed.skills == ()

    with pytest.raises(ValueError):
        AnalyzerOutcome("api", OutcomeStatus.FAILED, (), None)
    with pytest.raises(ValueError):
        AnalyzerOutcome("api", OutcomeStatus.FAILED, (_skill(),), "boom")
    with pytest.raises(ValueError):
        AnalyzerOutcome("api", OutcomeStatus.SUCCESS, (), "boom")
