"""Filesystem probes that contribute evidence toward the tech stack.

Each probe answers a narrow question about the workspace and returns an
``Evidence`` value. Probes never depend on one another and never raise:
``run_probe`` converts any failure into empty evidence.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Awaitable, Callable, FrozenSet, Sequence, Tuple

from .manifests import (
    detect_node_package_manager,
    java_frameworks,
    load_java_dependencies,
    load_node_manifest,
    load_python_manifest,
)
from .models import Context
from .workspace import Workspace

# Capability names understood by the stack builder.
REACT = "react"
TYPESCRIPT = "typescript"
NODE = "node"
PYTHON = "python"
JAVA = "java"
GO = "go"
RUST = "rust"


@dataclass(frozen=True)
class Evidence:
    """Facts contributed by a single probe."""

    languages: Tuple[str, ...] = ()
    frameworks: FrozenSet[str] = frozenset()
    databases: FrozenSet[str] = frozenset()
    build_tools: FrozenSet[str] = frozenset()
    package_managers: FrozenSet[str] = frozenset()
    cloud_providers: FrozenSet[str] = frozenset()
    capabilities: FrozenSet[str] = frozenset()

    @property
    def empty(self) -> bool:
        return not any(
            (
                self.languages,
                self.frameworks,
                self.databases,
                self.build_tools,
                self.package_managers,
                self.cloud_providers,
                self.capabilities,
            )
        )


NO_EVIDENCE = Evidence()

ProbeFn = Callable[[Workspace, Context], Awaitable[Evidence]]


@dataclass(frozen=True)
class Probe:
    name: str
    check: ProbeFn


def _matching(names: Sequence[str], mapping: Sequence[Tuple[Tuple[str, ...], str]]) -> FrozenSet[str]:
    present = set(names)
    return frozenset(label for keys, label in mapping if present.intersection(keys))


_NODE_FRAMEWORKS: Tuple[Tuple[Tuple[str, ...], str], ...] = (
    (("react", "react-dom"), "React"),
    (("next",), "Next.js"),
    (("vue",), "Vue.js"),
    (("angular", "@angular/core"), "Angular"),
    (("express",), "Express"),
    (("@nestjs/core",), "NestJS"),
    (("fastify",), "Fastify"),
    (("koa",), "Koa"),
)

_NODE_DATABASES: Tuple[Tuple[Tuple[str, ...], str], ...] = (
    (("mongoose", "mongodb"), "MongoDB"),
    (("sequelize", "typeorm"), "SQL"),
    (("pg", "pg-native"), "PostgreSQL"),
    (("mysql", "mysql2"), "MySQL"),
    (("redis", "ioredis"), "Redis"),
    (("@prisma/client",), "Prisma"),
)

_NODE_BUILD_TOOLS: Tuple[Tuple[Tuple[str, ...], str], ...] = (
    (("webpack",), "Webpack"),
    (("vite",), "Vite"),
    (("rollup",), "Rollup"),
    (("esbuild",), "esbuild"),
)

_PYTHON_FRAMEWORKS: Tuple[Tuple[Tuple[str, ...], str], ...] = (
    (("django", "djangorestframework"), "Django"),
    (("flask",), "Flask"),
    (("fastapi",), "FastAPI"),
)

_PYTHON_DATABASES: Tuple[Tuple[Tuple[str, ...], str], ...] = (
    (("sqlalchemy", "flask-sqlalchemy"), "SQL"),
    (("psycopg", "psycopg2", "psycopg2-binary", "asyncpg"), "PostgreSQL"),
    (("pymysql", "mysqlclient"), "MySQL"),
    (("pymongo", "motor", "mongoengine"), "MongoDB"),
    (("redis",), "Redis"),
)


async def probe_node(workspace: Workspace, context: Context) -> Evidence:
    manifest = await load_node_manifest(workspace)
    if manifest is None:
        return NO_EVIDENCE

    names = sorted(manifest.all)
    capabilities = {NODE}
    if manifest.has("react", "react-dom"):
        capabilities.add(REACT)
    if manifest.has("typescript") or await workspace.exists("tsconfig.json"):
        capabilities.add(TYPESCRIPT)

    languages: Tuple[str, ...] = ("JavaScript",)
    if TYPESCRIPT in capabilities:
        languages += ("TypeScript",)

    return Evidence(
        languages=languages,
        frameworks=_matching(names, _NODE_FRAMEWORKS),
        databases=_matching(names, _NODE_DATABASES),
        build_tools=_matching(names, _NODE_BUILD_TOOLS),
        package_managers=frozenset({await detect_node_package_manager(workspace)}),
        capabilities=frozenset(capabilities),
    )


async def probe_python(workspace: Workspace, context: Context) -> Evidence:
    manifest = await load_python_manifest(workspace)
    if manifest is None:
        return NO_EVIDENCE

    names = sorted(manifest.packages)
    package_managers = {"pip"}
    if manifest.uses_poetry:
        package_managers.add("Poetry")
    return Evidence(
        languages=("Python",),
        frameworks=_matching(names, _PYTHON_FRAMEWORKS),
        databases=_matching(names, _PYTHON_DATABASES),
        package_managers=frozenset(package_managers),
        capabilities=frozenset({PYTHON}),
    )


async def probe_java(workspace: Workspace, context: Context) -> Evidence:
    if await workspace.exists("pom.xml"):
        manager = "Maven"
    elif await workspace.exists_any(("build.gradle", "build.gradle.kts")):
        manager = "Gradle"
    else:
        return NO_EVIDENCE

    detected = java_frameworks(await load_java_dependencies(workspace))
    frameworks = frozenset({"Spring Boot"}) if detected["Spring Boot"] else frozenset()
    return Evidence(
        languages=("Java",),
        frameworks=frameworks,
        package_managers=frozenset({manager}),
        capabilities=frozenset({JAVA}),
    )


async def probe_go(workspace: Workspace, context: Context) -> Evidence:
    if not await workspace.exists("go.mod"):
        return NO_EVIDENCE
    return Evidence(
        languages=("Go",),
        package_managers=frozenset({"Go modules"}),
        capabilities=frozenset({GO}),
    )


async def probe_rust(workspace: Workspace, context: Context) -> Evidence:
    if not await workspace.exists("Cargo.toml"):
        return NO_EVIDENCE
    return Evidence(
        languages=("Rust",),
        package_managers=frozenset({"Cargo"}),
        capabilities=frozenset({RUST}),
    )


async def probe_cloud(workspace: Workspace, context: Context) -> Evidence:
    files = await workspace.glob(
        [
            "**/{vercel.json,netlify.toml,serverless.yml,serverless.yaml}",
            "**/.github/workflows/*.{yml,yaml}",
        ]
    )
    providers = set()
    if any("vercel" in path for path in files):
        providers.add("Vercel")
    if any("netlify" in path for path in files):
        providers.add("Netlify")
    if any("serverless" in path for path in files):
        providers.add("AWS Lambda")
    if any(".github/workflows" in path for path in files):
        providers.add("GitHub Actions")
    return Evidence(cloud_providers=frozenset(providers))


async def probe_docker(workspace: Workspace, context: Context) -> Evidence:
    if not await workspace.exists("Dockerfile"):
        return NO_EVIDENCE
    return Evidence(build_tools=frozenset({"Docker"}))


_KUBERNETES_MARKERS = (
    "kind: Deployment",
    "kind: StatefulSet",
    "kind: DaemonSet",
    "kind: Service",
    "kind: Ingress",
)


async def probe_kubernetes(workspace: Workspace, context: Context) -> Evidence:
    manifests = await workspace.glob("**/*.{yaml,yml}")
    if any("k8s" in path or "kubernetes" in path for path in manifests):
        return Evidence(cloud_providers=frozenset({"Kubernetes"}))

    # Workflow and compose files never declare workload kinds.
    candidates = [
        path
        for path in manifests
        if not path.startswith(".github/") and "docker-compose" not in path
    ]
    hit = await workspace.first_containing(
        candidates,
        _KUBERNETES_MARKERS,
        limit=context.content_scan_limit,
        required=("apiVersion:",),
    )
    if hit is None:
        return NO_EVIDENCE
    return Evidence(cloud_providers=frozenset({"Kubernetes"}))


DEFAULT_PROBES: Tuple[Probe, ...] = (
    Probe("node", probe_node),
    Probe("python", probe_python),
    Probe("java", probe_java),
    Probe("go", probe_go),
    Probe("rust", probe_rust),
    Probe("cloud", probe_cloud),
    Probe("docker", probe_docker),
    Probe("kubernetes", probe_kubernetes),
)


async def run_probe(probe: Probe, workspace: Workspace, context: Context) -> Evidence:
    """Run one probe, treating any failure as negative evidence."""
    try:
        evidence = await probe.check(workspace, context)
    except Exception as exc:  # probes report absence, never errors
        context.logger.debug("Probe %s failed; treating as no evidence: %s", probe.name, exc)
        return NO_EVIDENCE
    if not isinstance(evidence, Evidence):
        context.logger.debug("Probe %s returned %r; treating as no evidence", probe.name, evidence)
        return NO_EVIDENCE
    return evidence


__all__ = [
    "DEFAULT_PROBES",
    "Evidence",
    "NO_EVIDENCE",
    "Probe",
    "probe_cloud",
    "probe_docker",
    "probe_go",
    "probe_java",
    "probe_kubernetes",
    "probe_node",
    "probe_python",
    "probe_rust",
    "run_probe",
]
