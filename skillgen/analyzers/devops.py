"""DevOps analyzer implementation."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import List, Sequence

from .base import Analyzer
from .utils import name_glob
from ..models import Context, Skill, SkillCategory, TechStack
from ..workspace import Workspace

_WORKFLOW_GLOB = "**/.github/workflows/*.{yml,yaml}"
_COMPOSE_FILES = ("docker-compose.yml", "docker-compose.yaml", "compose.yml", "compose.yaml")


@dataclass(frozen=True)
class DevOpsFindings:
    has_github_actions: bool = False
    has_docker: bool = False
    has_docker_compose: bool = False
    has_kubernetes: bool = False
    has_terraform: bool = False
    has_env_files: bool = False


def build_guidelines(stack: TechStack, findings: DevOpsFindings) -> List[str]:
    guidelines: List[str] = [
        "Use version control for all code and configuration",
        "Implement proper branching strategies (GitFlow, GitHub Flow)",
        "Use semantic versioning for releases",
        "Keep dependencies updated and secure",
        "Use environment variables for configuration",
        "Never commit secrets or credentials",
        "Implement proper logging and monitoring",
        "Use infrastructure as code when possible",
        "Automate deployment processes",
        "Implement proper backup and disaster recovery",
    ]

    if findings.has_github_actions:
        guidelines.extend(
            [
                "Use GitHub Actions for CI/CD pipelines",
                "Organize workflows into reusable actions",
                "Use matrix builds for testing multiple versions",
                "Cache dependencies to speed up builds",
                "Run tests before deployment",
                "Use environment secrets for sensitive data",
                "Implement proper workflow permissions",
                "Use conditionals and job dependencies effectively",
            ]
        )

    guidelines.extend(
        [
            "Run tests in CI pipeline",
            "Lint and format code in CI",
            "Build and test on multiple platforms when needed",
            "Use deployment pipelines for different environments",
            "Implement proper rollback strategies",
            "Notify team of deployment status",
        ]
    )

    if findings.has_docker:
        guidelines.extend(
            [
                "Use multi-stage builds to reduce image size",
                "Use .dockerignore to exclude unnecessary files",
                "Use specific version tags, avoid latest",
                "Run containers as non-root user",
                "Minimize number of layers in Dockerfile",
                "Use health checks in Dockerfiles",
                "Optimize Dockerfile for caching",
                "Scan images for vulnerabilities",
            ]
        )

    if findings.has_docker_compose:
        guidelines.extend(
            [
                "Use docker-compose for local development",
                "Define services and dependencies clearly",
                "Use environment files for configuration",
                "Use volumes for persistent data",
                "Define networks for service communication",
            ]
        )

    if findings.has_kubernetes:
        guidelines.extend(
            [
                "Use Kubernetes for container orchestration",
                "Define resources (CPU, memory) for pods",
                "Use ConfigMaps and Secrets for configuration",
                "Implement proper health checks (liveness, readiness)",
                "Use namespaces for environment separation",
                "Implement proper resource quotas",
                "Use HorizontalPodAutoscaler for scaling",
                "Implement proper service discovery",
                "Use Ingress for external access",
                "Monitor and log Kubernetes resources",
            ]
        )

    if findings.has_terraform:
        guidelines.extend(
            [
                "Use Terraform for infrastructure provisioning",
                "Organize Terraform code into modules",
                "Use remote state for team collaboration",
                "Version Terraform state files",
                "Use variables and outputs effectively",
                "Implement proper resource tagging",
                "Use Terraform workspaces for environments",
                "Review Terraform plans before applying",
            ]
        )

    if findings.has_env_files:
        guidelines.extend(
            [
                "Use .env.example as a template",
                "Never commit .env files",
                "Use different configurations for different environments",
                "Use secret management services in production",
                "Rotate secrets regularly",
                "Document required environment variables",
            ]
        )

    if stack.cloud_providers:
        guidelines.extend(
            [
                f"Configure for cloud providers: {', '.join(sorted(stack.cloud_providers))}",
                "Use cloud-native services when appropriate",
                "Implement proper IAM and security policies",
                "Use cloud monitoring and logging services",
                "Implement auto-scaling when needed",
                "Use CDN for static assets",
                "Implement proper backup strategies",
            ]
        )

    return guidelines


class DevOpsAnalyzer(Analyzer):
    """Emits CI/CD, container and infrastructure guidance."""

    name = "devops"
    display_name = "DevOps Analyzer"
    category = SkillCategory.DEVOPS

    async def analyze(self, root: Path, stack: TechStack, context: Context) -> Sequence[Skill]:
        findings = await self.collect(context.workspace(root))
        context.logger.info(
            "DevOps analyzer: Docker: %s, K8s: %s, CI/CD: %s",
            findings.has_docker,
            findings.has_kubernetes,
            findings.has_github_actions,
        )
        return [
            Skill(
                name="devops-best-practices",
                display_name="DevOps Best Practices",
                description="Guidelines for DevOps and deployment based on detected infrastructure",
                guidelines=tuple(build_guidelines(stack, findings)),
                category=self.category,
                tech_stack=stack.languages,
                metadata={
                    "has_docker": findings.has_docker,
                    "has_docker_compose": findings.has_docker_compose,
                    "has_kubernetes": findings.has_kubernetes,
                    "has_terraform": findings.has_terraform,
                    "has_github_actions": findings.has_github_actions,
                    "cloud_providers": sorted(stack.cloud_providers),
                },
            )
        ]

    async def collect(self, workspace: Workspace) -> DevOpsFindings:
        workflows = await workspace.glob(_WORKFLOW_GLOB)
        k8s_files = await workspace.glob(name_glob(["k8s", "kubernetes"], ("yaml", "yml")))
        terraform_files = await workspace.glob("**/*.{tf,tf.json}")
        env_files = await workspace.glob("**/.env*")
        return DevOpsFindings(
            has_github_actions=bool(workflows),
            has_docker=await workspace.exists("Dockerfile"),
            has_docker_compose=await workspace.exists_any(_COMPOSE_FILES) is not None,
            has_kubernetes=bool(k8s_files),
            has_terraform=bool(terraform_files),
            has_env_files=bool(env_files),
        )
