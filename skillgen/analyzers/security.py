"""Security analyzer implementation."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import List, Sequence

from .base import Analyzer
from .utils import SOURCE_EXTENSIONS, extension_glob, name_glob
from ..models import Context, Skill, SkillCategory, TechStack
from ..workspace import Workspace

_ENV_SCAN_LIMIT = 10
_ENV_MARKERS = ("process.env", "os.getenv", "os.environ")


@dataclass(frozen=True)
class SecurityFindings:
    auth_files: int = 0
    validation_files: int = 0
    security_configs: int = 0
    env_files: int = 0
    uses_env_vars: bool = False


def build_guidelines(stack: TechStack, findings: SecurityFindings) -> List[str]:
    guidelines: List[str] = []

    if stack.has_node:
        guidelines.extend(
            [
                "Always use parameterized queries or ORM methods to prevent SQL injection",
                "Validate and sanitize all user inputs before processing",
                "Use environment variables for sensitive data, never hardcode secrets",
                "Implement proper authentication and authorization checks",
                "Use HTTPS in production and secure cookies with httpOnly and secure flags",
                "Implement rate limiting on API endpoints",
                "Use Content Security Policy (CSP) headers",
                "Keep dependencies updated and scan for vulnerabilities",
            ]
        )

    if stack.has_python:
        guidelines.extend(
            [
                "Use parameterized queries with database libraries",
                "Validate inputs using libraries like pydantic or marshmallow",
                "Never use eval() or exec() with user input",
                "Use secrets management for API keys and credentials",
                "Implement proper session management",
                "Use CSRF protection for forms",
            ]
        )

    if findings.auth_files:
        guidelines.extend(
            [
                "Follow OAuth 2.0 best practices when implementing authentication",
                "Store JWT tokens securely (httpOnly cookies preferred over localStorage)",
                "Implement token refresh mechanisms",
                "Validate JWT signatures and expiration",
                "Use strong password hashing (bcrypt, argon2)",
            ]
        )

    if findings.validation_files:
        guidelines.extend(
            [
                "Validate input types, ranges, and formats",
                "Sanitize user input to prevent XSS attacks",
                "Use whitelist validation over blacklist",
                "Validate file uploads (type, size, content)",
            ]
        )

    if findings.uses_env_vars:
        guidelines.extend(
            [
                "Never commit .env files to version control",
                "Use different credentials for development, staging, and production",
                "Rotate secrets regularly",
                "Use secret management services in production",
            ]
        )

    return guidelines


class SecurityAnalyzer(Analyzer):
    """Derives security guidance from the stack and auth/validation code."""

    name = "security"
    display_name = "Security Analyzer"
    category = SkillCategory.SECURITY

    async def analyze(self, root: Path, stack: TechStack, context: Context) -> Sequence[Skill]:
        findings = await self.collect(context.workspace(root))
        context.logger.info(
            "Security analyzer: Found %d auth files, %d validation files",
            findings.auth_files,
            findings.validation_files,
        )

        guidelines = build_guidelines(stack, findings)
        if not guidelines:
            return []

        return [
            Skill(
                name="security-best-practices",
                display_name="Security Best Practices",
                description="Guidelines for writing secure code based on codebase analysis",
                guidelines=tuple(guidelines),
                category=self.category,
                tech_stack=stack.languages,
                metadata={
                    "auth_files": findings.auth_files,
                    "validation_files": findings.validation_files,
                    "security_configs": findings.security_configs,
                    "env_files": findings.env_files,
                    "uses_env_vars": findings.uses_env_vars,
                },
            )
        ]

    async def collect(self, workspace: Workspace) -> SecurityFindings:
        auth_files = await workspace.glob(
            name_glob(["auth", "login", "security", "oauth", "jwt"], SOURCE_EXTENSIONS)
        )
        validation_files = await workspace.glob(
            name_glob(["validate", "sanitize", "validator"], SOURCE_EXTENSIONS)
        )
        security_configs = await workspace.glob(
            name_glob(["security", "helmet", "cors"], ["js", "ts", "json"])
        )
        env_files = await workspace.glob("**/.env*")
        sources = await workspace.glob(extension_glob(["js", "ts", "jsx", "tsx", "py"]))
        env_usage = await workspace.first_containing(sources, _ENV_MARKERS, limit=_ENV_SCAN_LIMIT)

        return SecurityFindings(
            auth_files=len(auth_files),
            validation_files=len(validation_files),
            security_configs=len(security_configs),
            env_files=len(env_files),
            uses_env_vars=env_usage is not None,
        )
