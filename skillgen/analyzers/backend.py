"""Backend analyzer implementation."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import List, Sequence

from .base import Analyzer
from .utils import SERVER_EXTENSIONS, languages_among, name_glob
from ..models import Context, Skill, SkillCategory, TechStack
from ..workspace import Workspace

_NODE_SERVER_FRAMEWORKS = ("Express", "NestJS", "Fastify", "Koa")
_BACKEND_LANGUAGES = ("JavaScript", "TypeScript", "Python", "Java", "Go")


@dataclass(frozen=True)
class BackendFindings:
    backend_files: int = 0
    api_files: int = 0
    middleware_files: int = 0


def build_guidelines(stack: TechStack, findings: BackendFindings) -> List[str]:
    guidelines: List[str] = []
    frameworks = stack.frameworks

    if stack.has_node and frameworks.intersection(_NODE_SERVER_FRAMEWORKS):
        guidelines.extend(
            [
                "Use async/await for all async operations",
                "Implement proper error handling middleware",
                "Validate request data using libraries like Joi or Zod",
                "Use environment variables for configuration",
                "Implement request logging and monitoring",
                "Use helmet.js for security headers",
                "Implement rate limiting on API endpoints",
                "Use compression middleware for responses",
                "Structure routes logically and use route modules",
                "Implement proper CORS configuration",
            ]
        )
        if "Express" in frameworks:
            guidelines.extend(
                [
                    "Use Express Router for organizing routes",
                    "Separate route handlers from business logic",
                    "Use middleware for cross-cutting concerns",
                    "Implement proper error handling with error middleware",
                ]
            )
        if "NestJS" in frameworks:
            guidelines.extend(
                [
                    "Use dependency injection with NestJS",
                    "Organize code into modules, controllers, and services",
                    "Use DTOs for data validation",
                    "Implement guards for authentication and authorization",
                    "Use interceptors for cross-cutting concerns",
                    "Leverage NestJS decorators for clean code",
                ]
            )

    if stack.has_python:
        guidelines.extend(
            [
                "Use type hints for better code quality",
                "Implement proper exception handling",
                "Use virtual environments for dependency management",
                "Follow PEP 8 style guidelines",
                "Use async/await for I/O operations when using async frameworks",
            ]
        )
        if "Django" in frameworks:
            guidelines.extend(
                [
                    "Use Django REST Framework for APIs",
                    "Follow Django best practices: apps, models, views",
                    "Use Django middleware for cross-cutting concerns",
                    "Implement proper model relationships and migrations",
                    "Use Django signals sparingly",
                    "Optimize database queries with select_related and prefetch_related",
                ]
            )
        if "Flask" in frameworks:
            guidelines.extend(
                [
                    "Use Flask-RESTful or Flask-RESTX for APIs",
                    "Organize code into blueprints",
                    "Use Flask extensions for common functionality",
                    "Implement proper error handling",
                    "Use Flask-SQLAlchemy for database operations",
                ]
            )
        if "FastAPI" in frameworks:
            guidelines.extend(
                [
                    "Use Pydantic models for request/response validation",
                    "Leverage FastAPI dependency injection",
                    "Use async endpoints for I/O-bound operations",
                    "Implement proper OpenAPI documentation",
                    "Use background tasks for long-running operations",
                ]
            )

    if stack.has_java:
        guidelines.extend(
            [
                "Use DTOs for API contracts",
                "Implement proper logging with SLF4J",
                "Follow RESTful API design principles",
            ]
        )
        if "Spring Boot" in frameworks:
            guidelines.extend(
                [
                    "Follow Spring Boot best practices",
                    "Use dependency injection with Spring",
                    "Implement proper exception handling with @ControllerAdvice",
                    "Use Spring Data JPA for database operations",
                ]
            )

    if stack.has_go:
        guidelines.extend(
            [
                "Follow Go idioms and conventions",
                "Use interfaces for abstraction",
                "Implement proper error handling (return errors, don't panic)",
                "Use context.Context for cancellation and timeouts",
                "Organize code into packages logically",
                "Use go routines and channels appropriately",
                "Implement proper logging",
                "Use dependency injection patterns",
            ]
        )

    guidelines.extend(
        [
            "Implement proper authentication and authorization",
            "Use HTTPS in production",
            "Implement request validation and sanitization",
            "Use connection pooling for database connections",
            "Implement proper logging and monitoring",
            "Handle errors gracefully and return appropriate HTTP status codes",
            "Use environment-specific configuration",
            "Implement health check endpoints",
            "Document APIs with OpenAPI/Swagger",
            "Use proper HTTP status codes",
            "Implement pagination for list endpoints",
            "Use versioning for APIs when needed",
        ]
    )

    if findings.middleware_files:
        guidelines.extend(
            [
                "Use middleware for authentication, logging, error handling",
                "Order middleware correctly (auth before routes)",
                "Keep middleware focused and reusable",
            ]
        )

    return guidelines


class BackendAnalyzer(Analyzer):
    """Generates server-side guidance when backend sources are present."""

    name = "backend"
    display_name = "Backend Analyzer"
    category = SkillCategory.BACKEND

    async def analyze(self, root: Path, stack: TechStack, context: Context) -> Sequence[Skill]:
        findings = await self.collect(context.workspace(root))
        if not findings.backend_files:
            context.logger.info("Backend analyzer: No backend files detected")
            return []

        context.logger.info(
            "Backend analyzer: Found %d backend files, %d API files",
            findings.backend_files,
            findings.api_files,
        )
        return [
            Skill(
                name="backend-best-practices",
                display_name="Backend Best Practices",
                description="Guidelines for writing high-quality backend code based on detected frameworks",
                guidelines=tuple(build_guidelines(stack, findings)),
                category=self.category,
                tech_stack=languages_among(stack, _BACKEND_LANGUAGES),
                metadata={
                    "frameworks": sorted(stack.frameworks),
                    "has_middleware": findings.middleware_files > 0,
                    "api_files": findings.api_files,
                },
            )
        ]

    async def collect(self, workspace: Workspace) -> BackendFindings:
        backend_files = await workspace.glob(
            name_glob(["server", "api", "route", "controller", "service"], SERVER_EXTENSIONS),
            ignore=["client/", "frontend/"],
        )
        if not backend_files:
            return BackendFindings()

        api_files = await workspace.glob(
            name_glob(["api", "route", "endpoint"], SERVER_EXTENSIONS)
        )
        middleware_files = await workspace.glob(
            name_glob(["middleware", "interceptor"], SERVER_EXTENSIONS)
        )
        return BackendFindings(
            backend_files=len(backend_files),
            api_files=len(api_files),
            middleware_files=len(middleware_files),
        )
