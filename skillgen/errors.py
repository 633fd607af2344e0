"""Exception types raised across skillgen components."""


class SkillgenError(RuntimeError):
    """Base class for skillgen failures that should surface to the caller."""


class StackBuildError(SkillgenError):
    """Raised when no tech stack can be built for the workspace."""


class ConfigError(SkillgenError):
    """Raised when the configuration file cannot be parsed."""


class SkillDocumentError(SkillgenError):
    """Raised when a SKILL.md document cannot be read back."""


__all__ = ["ConfigError", "SkillDocumentError", "SkillgenError", "StackBuildError"]
