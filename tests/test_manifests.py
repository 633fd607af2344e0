"""Tests for dependency manifest readers."""

from __future__ import annotations

import asyncio

from skillgen.manifests import (
    detect_node_package_manager,
    java_frameworks,
    load_java_dependencies,
    load_node_manifest,
    load_python_manifest,
    parse_gradle_dependencies,
    parse_pom_dependencies,
    parse_pyproject,
    parse_requirements,
)
from skillgen.workspace import Workspace
from tests._fixtures.repo_builder import RepoBuilder


def test_parse_requirements_extracts_names() -> None:
    text = """
    # web
    Flask==3.0.0
    SQLAlchemy>=2.0  # orm
    requests[socks]~=2.31
    -r dev.txt
    pytest ; python_version >= "3.11"
    """
    assert parse_requirements(text) == ["flask", "sqlalchemy", "requests", "pytest"]


def test_parse_pyproject_reads_pep621_and_poetry() -> None:
    text = """
[project]
dependencies = ["fastapi>=0.110", "uvicorn[standard]"]

[project.optional-dependencies]
test = ["pytest"]

[tool.poetry.dependencies]
python = "^3.11"
redis = "^5"

[tool.poetry.group.dev.dependencies]
mypy = "*"
"""
    names, uses_poetry = parse_pyproject(text)
    assert names == ["fastapi", "mypy", "pytest", "redis", "uvicorn"]
    assert uses_poetry is True


def test_parse_pyproject_tolerates_invalid_toml() -> None:
    assert parse_pyproject("[project\n") == ([], False)


def test_parse_pom_dependencies_handles_namespace() -> None:
    pom = """<?xml version="1.0"?>
<project xmlns="http://maven.apache.org/POM/4.0.0">
  <dependencies>
    <dependency>
      <groupId>org.springframework.boot</groupId>
      <artifactId>spring-boot-starter-web</artifactId>
    </dependency>
    <dependency>
      <groupId>org.junit.jupiter</groupId>
      <artifactId>junit-jupiter</artifactId>
    </dependency>
  </dependencies>
</project>
"""
    assert parse_pom_dependencies(pom) == {
        "org.springframework.boot:spring-boot-starter-web",
        "org.junit.jupiter:junit-jupiter",
    }


def test_parse_gradle_dependencies_skips_comments() -> None:
    gradle = """
dependencies {
    implementation 'org.springframework.boot:spring-boot-starter:3.2.0'
    // implementation 'com.example:ignored:1.0'
    testImplementation "junit:junit:4.13.2"
}
"""
    assert parse_gradle_dependencies(gradle) == {
        "org.springframework.boot:spring-boot-starter",
        "junit:junit",
    }


def test_java_frameworks_flags() -> None:
    detected = java_frameworks(["org.springframework.boot:spring-boot-starter", "junit:junit"])
    assert detected == {"Spring Boot": True, "JUnit": True}
    assert java_frameworks([]) == {"Spring Boot": False, "JUnit": False}


def test_load_node_manifest_lowercases_and_merges(repo_builder: RepoBuilder) -> None:
    repo_builder.write_package_json({"React": "^18.0.0"}, {"jest": "^29.0.0"})
    manifest = asyncio.run(load_node_manifest(Workspace(repo_builder.path())))

    assert manifest is not None
    assert manifest.dependencies == frozenset({"react"})
    assert manifest.has("jest")
    assert manifest.all == frozenset({"react", "jest"})


def test_load_node_manifest_returns_none_for_malformed_json(repo_builder: RepoBuilder) -> None:
    repo_builder.write({"package.json": "{not json"})
    assert asyncio.run(load_node_manifest(Workspace(repo_builder.path()))) is None


def test_detect_node_package_manager_prefers_lockfiles(repo_builder: RepoBuilder) -> None:
    workspace = Workspace(repo_builder.path())
    assert asyncio.run(detect_node_package_manager(workspace)) == "npm"

    repo_builder.write({"yarn.lock": ""})
    assert asyncio.run(detect_node_package_manager(workspace)) == "yarn"

    repo_builder.write({"pnpm-lock.yaml": ""})
    assert asyncio.run(detect_node_package_manager(workspace)) == "pnpm"


def test_load_python_manifest_combines_sources(repo_builder: RepoBuilder) -> None:
    repo_builder.write(
        {
            "requirements.txt": "django==5.0\n",
            "pyproject.toml": '[project]\ndependencies = ["celery"]\n',
        }
    )
    manifest = asyncio.run(load_python_manifest(Workspace(repo_builder.path())))

    assert manifest is not None
    assert manifest.packages == frozenset({"django", "celery"})
    assert manifest.uses_poetry is False


def test_load_python_manifest_missing_returns_none(repo_builder: RepoBuilder) -> None:
    assert asyncio.run(load_python_manifest(Workspace(repo_builder.path()))) is None


def test_load_java_dependencies_reads_gradle(repo_builder: RepoBuilder) -> None:
    repo_builder.write(
        {"build.gradle.kts": 'dependencies {\n    implementation("io.ktor:ktor-server:2.3.0")\n}\n'}
    )
    deps = asyncio.run(load_java_dependencies(Workspace(repo_builder.path())))
    assert deps == ["io.ktor:ktor-server"]
