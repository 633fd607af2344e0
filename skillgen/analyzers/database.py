"""Database analyzer implementation."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import List, Sequence

from .base import Analyzer
from .utils import SERVER_EXTENSIONS, first_label, name_glob
from ..manifests import NodeManifest, PythonManifest, load_node_manifest, load_python_manifest
from ..models import Context, Skill, SkillCategory, TechStack
from ..workspace import Workspace

_SQL_DATABASES = ("SQL", "PostgreSQL", "MySQL")


@dataclass(frozen=True)
class DatabaseFindings:
    db_files: int = 0
    uses_mongoose: bool = False
    uses_sequelize: bool = False
    uses_typeorm: bool = False
    uses_prisma: bool = False
    uses_sqlalchemy: bool = False

    @property
    def orm(self) -> str:
        return first_label(
            [
                (self.uses_prisma, "Prisma"),
                (self.uses_mongoose, "Mongoose"),
                (self.uses_sequelize, "Sequelize"),
                (self.uses_typeorm, "TypeORM"),
                (self.uses_sqlalchemy, "SQLAlchemy"),
            ],
            "None",
        )


def build_guidelines(stack: TechStack, findings: DatabaseFindings) -> List[str]:
    guidelines: List[str] = []
    databases = stack.databases

    if "MongoDB" in databases or findings.uses_mongoose:
        guidelines.extend(
            [
                "Use Mongoose for MongoDB operations in Node.js",
                "Define schemas with proper validation",
                "Use indexes for frequently queried fields",
                "Implement proper error handling for database operations",
                "Use transactions for multi-document operations",
                "Avoid deep nesting in documents",
                "Use aggregation pipeline for complex queries",
                "Implement proper connection handling and pooling",
            ]
        )

    if databases.intersection(_SQL_DATABASES):
        guidelines.extend(
            [
                "Use parameterized queries to prevent SQL injection",
                "Create indexes on frequently queried columns",
                "Use transactions for multi-step operations",
                "Implement proper connection pooling",
                "Use database migrations for schema changes",
                "Avoid N+1 query problems",
                "Use EXPLAIN to analyze query performance",
                "Normalize database schema appropriately",
            ]
        )
        if findings.uses_prisma:
            guidelines.extend(
                [
                    "Use Prisma Client for type-safe database access",
                    "Define schema in schema.prisma file",
                    "Use Prisma migrations for schema changes",
                    "Leverage Prisma relations for data relationships",
                    "Use Prisma Studio for database inspection",
                    "Generate Prisma Client after schema changes",
                ]
            )
        if findings.uses_sequelize:
            guidelines.extend(
                [
                    "Define models with Sequelize",
                    "Use migrations for schema changes",
                    "Use Sequelize associations for relationships",
                    "Implement proper error handling",
                    "Use transactions for complex operations",
                ]
            )
        if findings.uses_typeorm:
            guidelines.extend(
                [
                    "Use TypeORM decorators for entity definitions",
                    "Use migrations for schema changes",
                    "Leverage TypeORM relations",
                    "Use repositories for data access",
                    "Implement proper transaction handling",
                ]
            )
        if findings.uses_sqlalchemy:
            guidelines.extend(
                [
                    "Use SQLAlchemy ORM for database operations",
                    "Define models with SQLAlchemy",
                    "Use Alembic for migrations",
                    "Implement proper session management",
                    "Use SQLAlchemy relationships for associations",
                ]
            )

    if "Redis" in databases:
        guidelines.extend(
            [
                "Use Redis for caching and session storage",
                "Set appropriate expiration times for cached data",
                "Use Redis pub/sub for real-time features",
                "Implement cache invalidation strategies",
                "Use Redis pipelines for batch operations",
                "Monitor Redis memory usage",
            ]
        )

    guidelines.extend(
        [
            "Always handle database errors gracefully",
            "Use connection pooling for better performance",
            "Implement proper logging for database operations",
            "Use database transactions for data consistency",
            "Backup databases regularly",
            "Monitor database performance and slow queries",
            "Use database indexes strategically",
            "Avoid storing sensitive data in plain text",
            "Implement proper data validation at the database level",
            "Use database constraints for data integrity",
        ]
    )

    return guidelines


class DatabaseAnalyzer(Analyzer):
    """Generates data-access guidance; inert unless a database was detected."""

    name = "database"
    display_name = "Database Analyzer"
    category = SkillCategory.DATABASE

    async def analyze(self, root: Path, stack: TechStack, context: Context) -> Sequence[Skill]:
        if not stack.databases:
            context.logger.info("Database analyzer: No databases detected")
            return []

        findings = await self.collect(context.workspace(root))
        databases = sorted(stack.databases)
        context.logger.info(
            "Database analyzer: Found %d database files, DBs: %s",
            findings.db_files,
            ", ".join(databases),
        )
        return [
            Skill(
                name="database-best-practices",
                display_name="Database Best Practices",
                description="Guidelines for working with databases based on detected database technologies",
                guidelines=tuple(build_guidelines(stack, findings)),
                category=self.category,
                tech_stack=stack.languages,
                metadata={"databases": databases, "orm": findings.orm},
            )
        ]

    async def collect(self, workspace: Workspace) -> DatabaseFindings:
        db_files = await workspace.glob(
            name_glob(["model", "schema", "migration", "db", "database"], SERVER_EXTENSIONS)
        )
        node = await load_node_manifest(workspace) or NodeManifest()
        python = await load_python_manifest(workspace) or PythonManifest()
        return DatabaseFindings(
            db_files=len(db_files),
            uses_mongoose=node.has("mongoose"),
            uses_sequelize=node.has("sequelize"),
            uses_typeorm=node.has("typeorm"),
            uses_prisma=node.has("@prisma/client"),
            uses_sqlalchemy=python.has("sqlalchemy", "flask-sqlalchemy"),
        )
