"""Tests for the database analyzer."""

from __future__ import annotations

import asyncio

from skillgen.analyzers.database import DatabaseAnalyzer, DatabaseFindings, build_guidelines
from skillgen.models import Context, SkillCategory, TechStack
from tests._fixtures.repo_builder import RepoBuilder


def test_without_databases_returns_no_skills(
    repo_builder: RepoBuilder, context: Context
) -> None:
    repo_builder.write({"models/user.py": ""})

    assert asyncio.run(DatabaseAnalyzer().analyze(repo_builder.path(), TechStack(), context)) == []


def test_mongo_and_redis_with_mongoose(repo_builder: RepoBuilder, context: Context) -> None:
    repo_builder.write_package_json({"mongoose": "^8", "redis": "^4"})
    repo_builder.write({"src/models/userModel.js": "", "src/db.js": ""})
    stack = TechStack(
        languages=("JavaScript",),
        databases=frozenset({"Redis", "MongoDB"}),
        has_node=True,
    )

    skills = asyncio.run(DatabaseAnalyzer().analyze(repo_builder.path(), stack, context))

    assert len(skills) == 1
    skill = skills[0]
    assert skill.name == "database-best-practices"
    assert skill.category is SkillCategory.DATABASE
    assert skill.metadata_dict() == {"databases": ["MongoDB", "Redis"], "orm": "Mongoose"}
    assert skill.guidelines[0] == "Use Mongoose for MongoDB operations in Node.js"
    assert "Use Redis pub/sub for real-time features" in skill.guidelines
    assert "Use parameterized queries to prevent SQL injection" not in skill.guidelines


def test_sql_with_sqlalchemy(repo_builder: RepoBuilder, context: Context) -> None:
    repo_builder.write({"requirements.txt": "flask\nsqlalchemy\npsycopg2\n"})
    stack = TechStack(
        languages=("Python",),
        databases=frozenset({"SQL", "PostgreSQL"}),
        has_python=True,
    )

    skills = asyncio.run(DatabaseAnalyzer().analyze(repo_builder.path(), stack, context))

    assert skills[0].metadata_dict()["orm"] == "SQLAlchemy"
    assert "Use Alembic for migrations" in skills[0].guidelines


def test_prisma_guidelines_follow_sql_block() -> None:
    stack = TechStack(databases=frozenset({"PostgreSQL"}))
    guidelines = build_guidelines(stack, DatabaseFindings(uses_prisma=True))

    sql = guidelines.index("Normalize database schema appropriately")
    prisma = guidelines.index("Use Prisma Client for type-safe database access")
    assert prisma == sql + 1
    assert guidelines[-1] == "Use database constraints for data integrity"
