"""Writes skills to disk as SKILL.md documents and reads them back."""

from __future__ import annotations

import re
from pathlib import Path
from typing import List, Sequence

import yaml
from jinja2 import Environment, FileSystemLoader, TemplateError

from .errors import SkillDocumentError
from .logging import get_logger
from .models import PersistResult, Skill, SkillCategory

SKILL_FILENAME = "SKILL.md"
TEMPLATE_NAME = "skill.md.j2"

_FRONT_MATTER_DELIMITER = "---"
_GUIDELINES_HEADING = "## Guidelines"
_SLUG_RE = re.compile(r"^[a-z0-9]+(?:[-_][a-z0-9]+)*$")


class SkillWriter:
    """Renders skills with YAML front matter and a Markdown body."""

    def __init__(self, templates_dir: Path | None = None) -> None:
        directories = []
        if templates_dir is not None:
            directories.append(str(templates_dir))
        directories.append(str(Path(__file__).with_name("templates")))
        self.env = Environment(
            loader=FileSystemLoader(directories),
            autoescape=False,
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self.logger = get_logger("sink")

    @staticmethod
    def skill_path(skill: Skill, destination_root: Path) -> Path:
        """Return where ``skill`` is written under ``destination_root``."""
        category, name = skill.path_parts
        return Path(destination_root) / category / name / SKILL_FILENAME

    def render(self, skill: Skill) -> str:
        """Return the full SKILL.md document for ``skill``."""
        front_matter = yaml.safe_dump(
            {
                "name": skill.name,
                "description": skill.description,
                "display_name": skill.display_name,
                "category": skill.category.value,
                "tech_stack": list(skill.tech_stack),
                "metadata": skill.metadata_dict(),
            },
            sort_keys=False,
            allow_unicode=True,
            default_flow_style=False,
        )
        body = self.env.get_template(TEMPLATE_NAME).render(skill=skill).rstrip("\n")
        return f"{_FRONT_MATTER_DELIMITER}\n{front_matter}{_FRONT_MATTER_DELIMITER}\n\n{body}\n"

    def persist(self, skill: Skill, destination_root: Path) -> PersistResult:
        """Write one skill; failures are reported in the result, never raised."""
        category = skill.category.value
        if not _SLUG_RE.match(skill.name):
            error = f"Invalid skill name {skill.name!r}: expected a lowercase slug"
            self.logger.error("Failed to save skill %s: %s", skill.name, error)
            return PersistResult(skill.name, category, None, False, error)

        target = self.skill_path(skill, destination_root)
        try:
            document = self.render(skill)
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(document, encoding="utf-8")
        except (OSError, yaml.YAMLError, TemplateError) as exc:
            error = f"{type(exc).__name__}: {exc}"
            self.logger.error("Failed to save skill %s: %s", skill.name, error)
            return PersistResult(skill.name, category, target, False, error)

        self.logger.info("Created skill: %s/%s", category, skill.name)
        return PersistResult(skill.name, category, target, True)

    def persist_all(self, skills: Sequence[Skill], destination_root: Path) -> List[PersistResult]:
        """Persist ``skills`` in order; one failure does not stop the rest."""
        return [self.persist(skill, destination_root) for skill in skills]

    def load(self, path: Path) -> Skill:
        """Parse a SKILL.md document back into a ``Skill``."""
        try:
            text = Path(path).read_text(encoding="utf-8")
        except OSError as exc:
            raise SkillDocumentError(f"Failed to read {path}: {exc}") from exc

        front_matter, body = _split_document(text, path)
        try:
            data = yaml.safe_load(front_matter)
        except yaml.YAMLError as exc:
            raise SkillDocumentError(f"Invalid front matter in {path}: {exc}") from exc
        if not isinstance(data, dict):
            raise SkillDocumentError(f"Front matter in {path} must be a mapping")

        missing = [key for key in ("name", "description", "category") if key not in data]
        if missing:
            raise SkillDocumentError(f"Front matter in {path} is missing: {', '.join(missing)}")
        try:
            category = SkillCategory(data["category"])
        except ValueError as exc:
            raise SkillDocumentError(f"Unknown category in {path}: {data['category']!r}") from exc

        metadata = data.get("metadata") or {}
        return Skill(
            name=str(data["name"]),
            display_name=str(data.get("display_name") or data["name"]),
            description=str(data["description"]),
            guidelines=tuple(_parse_guidelines(body)),
            category=category,
            tech_stack=tuple(str(item) for item in data.get("tech_stack") or ()),
            metadata=metadata if isinstance(metadata, dict) else {},
        )


def _split_document(text: str, path: Path) -> tuple[str, str]:
    lines = text.splitlines()
    if not lines or lines[0].strip() != _FRONT_MATTER_DELIMITER:
        raise SkillDocumentError(f"{path} does not start with YAML front matter")
    for index, line in enumerate(lines[1:], start=1):
        if line.strip() == _FRONT_MATTER_DELIMITER:
            return "\n".join(lines[1:index]), "\n".join(lines[index + 1 :])
    raise SkillDocumentError(f"Unterminated front matter in {path}")


def _parse_guidelines(body: str) -> List[str]:
    guidelines: List[str] = []
    in_section = False
    for line in body.splitlines():
        if line.startswith("## "):
            in_section = line.strip() == _GUIDELINES_HEADING
            continue
        if in_section and line.startswith("- "):
            guidelines.append(line[2:])
    return guidelines


__all__ = ["SKILL_FILENAME", "SkillWriter"]
