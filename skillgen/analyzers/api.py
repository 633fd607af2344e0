"""API design analyzer implementation."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import List, Sequence

from .base import Analyzer
from .utils import SERVER_EXTENSIONS, name_glob, scan_flags
from ..manifests import NodeManifest, PythonManifest, load_node_manifest, load_python_manifest
from ..models import Context, Skill, SkillCategory, TechStack
from ..workspace import Workspace

_API_SCAN_LIMIT = 20

_API_MARKERS = (
    ("rest", ("GET", "POST", "PUT", "DELETE")),
    ("graphql", ("graphql", "GraphQL", "gql`")),
)

_NODE_GRAPHQL = ("apollo-server", "graphql", "@apollo/server")
_PYTHON_GRAPHQL = ("graphene", "strawberry-graphql", "ariadne")


@dataclass(frozen=True)
class ApiFindings:
    api_files: int = 0
    has_rest: bool = False
    has_graphql: bool = False


def build_guidelines(stack: TechStack, findings: ApiFindings) -> List[str]:
    guidelines: List[str] = []

    if findings.has_rest or findings.api_files:
        guidelines.extend(
            [
                "Use proper HTTP methods: GET for retrieval, POST for creation, PUT for updates, DELETE for removal",
                "Use RESTful URL patterns: /resources/:id for specific resources",
                "Return appropriate HTTP status codes: 200 OK, 201 Created, 400 Bad Request, 404 Not Found, 500 Server Error",
                "Implement proper error handling and return error responses consistently",
                "Use pagination for list endpoints",
                "Implement filtering, sorting, and searching capabilities",
                "Version APIs when making breaking changes",
                "Use proper Content-Type headers",
                "Implement rate limiting to prevent abuse",
                "Validate and sanitize all input data",
                "Use HTTPS in production",
                "Implement proper authentication and authorization",
                "Return consistent response formats",
                "Document APIs with OpenAPI/Swagger",
                "Use proper HTTP caching headers when appropriate",
            ]
        )

    if findings.has_graphql:
        guidelines.extend(
            [
                "Design GraphQL schema thoughtfully",
                "Use DataLoader to prevent N+1 query problems",
                "Implement proper error handling in resolvers",
                "Use GraphQL fragments for reusable query parts",
                "Implement query complexity analysis",
                "Use subscriptions for real-time features",
                "Validate and sanitize resolver inputs",
                "Use GraphQL directives for authorization",
                "Implement proper pagination with connections pattern",
                "Document schema with descriptions",
                "Use GraphQL Playground or GraphiQL for development",
            ]
        )

    guidelines.extend(
        [
            "Implement request validation",
            "Use proper error messages that are helpful but not revealing",
            "Implement logging for API requests and responses",
            "Use API keys or tokens for authentication",
            "Implement CORS properly",
            "Use compression (gzip/brotli) for responses",
            "Implement request timeouts",
            "Use proper content negotiation",
            "Implement health check endpoints",
            "Monitor API performance and errors",
            "Use API gateway patterns when appropriate",
            "Implement proper request/response logging",
            "Use idempotency keys for critical operations",
        ]
    )

    return guidelines


class ApiAnalyzer(Analyzer):
    """Detects REST and GraphQL usage and emits API design guidance."""

    name = "api"
    display_name = "API Analyzer"
    category = SkillCategory.API

    async def analyze(self, root: Path, stack: TechStack, context: Context) -> Sequence[Skill]:
        findings = await self.collect(context.workspace(root))
        context.logger.info(
            "API analyzer: Found %d API files, REST: %s, GraphQL: %s",
            findings.api_files,
            findings.has_rest,
            findings.has_graphql,
        )
        return [
            Skill(
                name="api-best-practices",
                display_name="API Best Practices",
                description="Guidelines for designing and implementing APIs",
                guidelines=tuple(build_guidelines(stack, findings)),
                category=self.category,
                tech_stack=stack.languages,
                metadata={
                    "has_rest": findings.has_rest,
                    "has_graphql": findings.has_graphql,
                    "api_files": findings.api_files,
                },
            )
        ]

    async def collect(self, workspace: Workspace) -> ApiFindings:
        api_files = await workspace.glob(
            name_glob(["api", "route", "endpoint", "controller"], SERVER_EXTENSIONS)
        )
        flags = await scan_flags(workspace, api_files, _API_MARKERS, limit=_API_SCAN_LIMIT)

        node = await load_node_manifest(workspace) or NodeManifest()
        python = await load_python_manifest(workspace) or PythonManifest()
        has_graphql = flags["graphql"] or node.has(*_NODE_GRAPHQL) or python.has(*_PYTHON_GRAPHQL)

        return ApiFindings(
            api_files=len(api_files),
            has_rest=flags["rest"],
            has_graphql=has_graphql,
        )
