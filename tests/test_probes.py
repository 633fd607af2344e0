"""Tests for the filesystem probes."""

from __future__ import annotations

import asyncio

from skillgen.models import Context
from skillgen.probes import (
    NO_EVIDENCE,
    NODE,
    PYTHON,
    REACT,
    TYPESCRIPT,
    Evidence,
    Probe,
    probe_cloud,
    probe_docker,
    probe_go,
    probe_java,
    probe_kubernetes,
    probe_node,
    probe_python,
    probe_rust,
    run_probe,
)
from skillgen.workspace import Workspace
from tests._fixtures.repo_builder import RepoBuilder


def _run(probe, repo_builder: RepoBuilder, context: Context) -> Evidence:
    return asyncio.run(probe(Workspace(repo_builder.path()), context))


def test_probe_node_detects_frameworks_and_databases(
    repo_builder: RepoBuilder, context: Context
) -> None:
    repo_builder.write_package_json(
        {"react": "^18", "next": "^14", "express": "^4", "mongoose": "^8", "redis": "^4"},
        {"vite": "^5", "typescript": "^5"},
    )
    repo_builder.write({"yarn.lock": ""})

    evidence = _run(probe_node, repo_builder, context)

    assert evidence.languages == ("JavaScript", "TypeScript")
    assert evidence.frameworks == frozenset({"React", "Next.js", "Express"})
    assert evidence.databases == frozenset({"MongoDB", "Redis"})
    assert evidence.build_tools == frozenset({"Vite"})
    assert evidence.package_managers == frozenset({"yarn"})
    assert evidence.capabilities == frozenset({NODE, REACT, TYPESCRIPT})


def test_probe_node_uses_tsconfig_for_typescript(
    repo_builder: RepoBuilder, context: Context
) -> None:
    repo_builder.write_package_json({"express": "^4"})
    repo_builder.write({"tsconfig.json": "{}"})

    evidence = _run(probe_node, repo_builder, context)

    assert TYPESCRIPT in evidence.capabilities
    assert REACT not in evidence.capabilities


def test_probe_node_without_manifest_reports_nothing(
    repo_builder: RepoBuilder, context: Context
) -> None:
    assert _run(probe_node, repo_builder, context) == NO_EVIDENCE


def test_probe_python_detects_frameworks(repo_builder: RepoBuilder, context: Context) -> None:
    repo_builder.write({"requirements.txt": "flask\nflask-sqlalchemy\npsycopg2-binary\n"})

    evidence = _run(probe_python, repo_builder, context)

    assert evidence.languages == ("Python",)
    assert evidence.frameworks == frozenset({"Flask"})
    assert evidence.databases == frozenset({"SQL", "PostgreSQL"})
    assert evidence.package_managers == frozenset({"pip"})
    assert evidence.capabilities == frozenset({PYTHON})


def test_probe_python_reports_poetry(repo_builder: RepoBuilder, context: Context) -> None:
    repo_builder.write(
        {"pyproject.toml": '[tool.poetry.dependencies]\npython = "^3.11"\nfastapi = "*"\n'}
    )

    evidence = _run(probe_python, repo_builder, context)

    assert evidence.frameworks == frozenset({"FastAPI"})
    assert evidence.package_managers == frozenset({"pip", "Poetry"})


def test_probe_java_detects_maven_and_spring(repo_builder: RepoBuilder, context: Context) -> None:
    repo_builder.write(
        {
            "pom.xml": """
            <project>
              <dependencies>
                <dependency>
                  <groupId>org.springframework.boot</groupId>
                  <artifactId>spring-boot-starter-web</artifactId>
                </dependency>
              </dependencies>
            </project>
            """
        }
    )

    evidence = _run(probe_java, repo_builder, context)

    assert evidence.languages == ("Java",)
    assert evidence.frameworks == frozenset({"Spring Boot"})
    assert evidence.package_managers == frozenset({"Maven"})


def test_probe_java_detects_gradle(repo_builder: RepoBuilder, context: Context) -> None:
    repo_builder.write({"build.gradle": "dependencies {}\n"})

    evidence = _run(probe_java, repo_builder, context)

    assert evidence.package_managers == frozenset({"Gradle"})
    assert evidence.frameworks == frozenset()


def test_probe_go_and_rust(repo_builder: RepoBuilder, context: Context) -> None:
    assert _run(probe_go, repo_builder, context) == NO_EVIDENCE
    assert _run(probe_rust, repo_builder, context) == NO_EVIDENCE

    repo_builder.write({"go.mod": "module example.com/app\n", "Cargo.toml": "[package]\n"})

    assert _run(probe_go, repo_builder, context).package_managers == frozenset({"Go modules"})
    assert _run(probe_rust, repo_builder, context).package_managers == frozenset({"Cargo"})


def test_probe_cloud_detects_providers(repo_builder: RepoBuilder, context: Context) -> None:
    repo_builder.write(
        {
            "vercel.json": "{}",
            "infra/serverless.yml": "service: api\n",
            ".github/workflows/ci.yml": "on: push\n",
        }
    )

    evidence = _run(probe_cloud, repo_builder, context)

    assert evidence.cloud_providers == frozenset({"Vercel", "AWS Lambda", "GitHub Actions"})


def test_probe_docker(repo_builder: RepoBuilder, context: Context) -> None:
    repo_builder.write({"Dockerfile": "FROM python:3.12\n"})
    assert _run(probe_docker, repo_builder, context).build_tools == frozenset({"Docker"})


def test_probe_kubernetes_by_path(repo_builder: RepoBuilder, context: Context) -> None:
    repo_builder.write({"deploy/k8s/app.yaml": "replicas: 2\n"})
    assert _run(probe_kubernetes, repo_builder, context).cloud_providers == frozenset(
        {"Kubernetes"}
    )


def test_probe_kubernetes_by_content(repo_builder: RepoBuilder, context: Context) -> None:
    repo_builder.write(
        {
            "deploy/app.yaml": """
            apiVersion: apps/v1
            kind: Deployment
            metadata:
              name: web
            """
        }
    )
    assert _run(probe_kubernetes, repo_builder, context).cloud_providers == frozenset(
        {"Kubernetes"}
    )


def test_probe_kubernetes_skips_yaml_without_api_version(
    repo_builder: RepoBuilder, context: Context
) -> None:
    repo_builder.write(
        {
            "a-config.yaml": "kind: Service\nname: not-k8s\n",
            "deploy/web.yaml": """
            apiVersion: apps/v1
            kind: Deployment
            metadata:
              name: web
            """,
        }
    )
    assert _run(probe_kubernetes, repo_builder, context).cloud_providers == frozenset(
        {"Kubernetes"}
    )


def test_probe_kubernetes_ignores_plain_yaml(repo_builder: RepoBuilder, context: Context) -> None:
    repo_builder.write(
        {
            "config/settings.yaml": "kind: Service\n",
            ".github/workflows/ci.yml": "apiVersion: v1\nkind: Deployment\n",
        }
    )
    assert _run(probe_kubernetes, repo_builder, context) == NO_EVIDENCE


def test_run_probe_converts_failures_to_no_evidence(
    repo_builder: RepoBuilder, context: Context
) -> None:
    async def broken(workspace: Workspace, ctx: Context) -> Evidence:
        raise PermissionError("denied")

    async def wrong_type(workspace: Workspace, ctx: Context) -> Evidence:
        return "React"  # type: ignore[return-value]

    workspace = Workspace(repo_builder.path())

    assert asyncio.run(run_probe(Probe("broken", broken), workspace, context)) == NO_EVIDENCE
    assert asyncio.run(run_probe(Probe("wrong", wrong_type), workspace, context)) == NO_EVIDENCE
