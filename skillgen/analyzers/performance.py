"""Performance analyzer implementation."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import List, Sequence

from .base import Analyzer
from .utils import SCRIPT_EXTENSIONS, SOURCE_EXTENSIONS, extension_glob, name_glob
from ..models import Context, Skill, SkillCategory, TechStack
from ..workspace import Workspace

_ASYNC_SCAN_LIMIT = 20
_ASYNC_MARKERS = ("async", "await", "Promise")


@dataclass(frozen=True)
class PerformanceFindings:
    db_files: int = 0
    cache_files: int = 0
    has_async_patterns: bool = False


def build_guidelines(stack: TechStack, findings: PerformanceFindings) -> List[str]:
    guidelines: List[str] = [
        "Optimize database queries: use indexes, avoid N+1 queries, use pagination",
        "Implement caching for frequently accessed data",
        "Use lazy loading for images and heavy resources",
        "Minimize bundle size: code splitting, tree shaking, dynamic imports",
        "Optimize API responses: pagination, filtering, field selection",
        "Use debouncing and throttling for user input handlers",
        "Implement proper error boundaries to prevent full app crashes",
        "Profile and measure before optimizing",
    ]

    if stack.has_node:
        guidelines.extend(
            [
                "Use async/await or Promises for I/O operations, never block the event loop",
                "Implement connection pooling for database connections",
                "Use streaming for large file operations",
                "Enable gzip/brotli compression for HTTP responses",
                "Use worker threads for CPU-intensive tasks",
                "Implement request queuing for rate-limited APIs",
            ]
        )

    if stack.has_react:
        guidelines.extend(
            [
                "Use React.memo() for expensive components",
                "Implement code splitting with React.lazy() and Suspense",
                "Avoid unnecessary re-renders: use useMemo() and useCallback()",
                "Virtualize long lists with react-window or react-virtualized",
                "Optimize images: use next/image, WebP format, lazy loading",
                "Use production builds with optimizations enabled",
                "Profile with React DevTools Profiler",
            ]
        )

    if stack.has_typescript:
        guidelines.extend(
            [
                "Use TypeScript for better tree-shaking and dead code elimination",
                "Avoid any types that prevent optimizations",
            ]
        )

    if findings.db_files:
        guidelines.extend(
            [
                "Use database indexes on frequently queried columns",
                "Implement query result caching",
                "Use database connection pooling",
                "Avoid SELECT * - only fetch needed columns",
                "Use batch operations instead of individual queries",
                "Implement database query logging and monitoring",
            ]
        )

    if findings.cache_files or "Redis" in stack.databases:
        guidelines.extend(
            [
                "Cache expensive computations and API responses",
                "Set appropriate cache expiration times",
                "Use cache invalidation strategies",
                "Implement cache warming for critical data",
            ]
        )

    if findings.has_async_patterns:
        guidelines.extend(
            [
                "Use Promise.all() for parallel async operations when possible",
                "Avoid sequential await calls when operations are independent",
                "Handle errors properly in async code to prevent unhandled rejections",
            ]
        )

    return guidelines


class PerformanceAnalyzer(Analyzer):
    """Suggests performance practices from data access, caching and async usage."""

    name = "performance"
    display_name = "Performance Analyzer"
    category = SkillCategory.PERFORMANCE

    async def analyze(self, root: Path, stack: TechStack, context: Context) -> Sequence[Skill]:
        findings = await self.collect(context.workspace(root))
        context.logger.info(
            "Performance analyzer: Found %d DB files, %d cache files",
            findings.db_files,
            findings.cache_files,
        )
        return [
            Skill(
                name="performance-optimization",
                display_name="Performance Optimization",
                description="Guidelines for writing performant code based on codebase patterns",
                guidelines=tuple(build_guidelines(stack, findings)),
                category=self.category,
                tech_stack=stack.languages,
                metadata={
                    "db_files": findings.db_files,
                    "cache_files": findings.cache_files,
                    "has_async_patterns": findings.has_async_patterns,
                },
            )
        ]

    async def collect(self, workspace: Workspace) -> PerformanceFindings:
        db_files = await workspace.glob(
            name_glob(["db", "database", "model", "query"], SOURCE_EXTENSIONS)
        )
        cache_files = await workspace.glob(
            name_glob(["cache", "redis", "memcached"], SOURCE_EXTENSIONS)
        )
        scripts = await workspace.glob(extension_glob(SCRIPT_EXTENSIONS))
        async_hit = await workspace.first_containing(
            scripts, _ASYNC_MARKERS, limit=_ASYNC_SCAN_LIMIT
        )
        return PerformanceFindings(
            db_files=len(db_files),
            cache_files=len(cache_files),
            has_async_patterns=async_hit is not None,
        )
