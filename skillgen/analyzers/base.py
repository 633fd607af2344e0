"""Base classes for analyzer plugins."""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import ClassVar, Sequence

from ..models import Context, Skill, SkillCategory, TechStack


class Analyzer(ABC):
    """Contract for analyzers that turn the tech stack into skill documents.

    Implementations must treat ``stack`` as read-only, must not write to the
    workspace, and must return an empty sequence when their domain does not
    apply. Recoverable conditions such as a missing optional manifest are
    reduced to "feature absent" rather than raised.
    """

    name: ClassVar[str]
    display_name: ClassVar[str]
    category: ClassVar[SkillCategory]

    @abstractmethod
    async def analyze(self, root: Path, stack: TechStack, context: Context) -> Sequence[Skill]:
        """Produce skills for the workspace at ``root``."""
