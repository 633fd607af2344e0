"""Read-only filesystem access shared by probes and analyzers.

Every operation treats a missing or unreadable path as negative evidence: lookups
return ``False``, ``None`` or an empty list instead of raising. Blocking calls are
pushed to worker threads so that the event loop only suspends on real I/O.
"""

from __future__ import annotations

import asyncio
import os
import re
from dataclasses import dataclass
from fnmatch import fnmatchcase
from pathlib import Path
from typing import Iterator, List, Optional, Sequence, Tuple

_EXCLUDED_DIRS = {
    ".git",
    ".hg",
    ".svn",
    ".venv",
    "venv",
    "node_modules",
    "dist",
    "build",
    "__pycache__",
    ".pytest_cache",
    ".mypy_cache",
    ".tox",
    ".next",
    ".idea",
}

DEFAULT_MAX_BYTES = 256 * 1024

_BRACE_RE = re.compile(r"\{([^{}]*)\}")


@dataclass(frozen=True)
class IgnoreRule:
    """Represents a gitignore-style exclusion pattern."""

    pattern: str
    directory_only: bool
    anchored: bool
    negate: bool
    has_slash: bool

    def matches(self, rel_path: str, is_dir: bool) -> bool:
        if not self.pattern:
            return False
        if self.directory_only and not is_dir:
            return False

        target = rel_path
        if self.anchored or self.has_slash:
            if fnmatchcase(target, self.pattern):
                return True
            if self.directory_only and target.startswith(f"{self.pattern}/"):
                return True
            return False

        for part in target.split("/"):
            if fnmatchcase(part, self.pattern):
                return True
        return False


def build_ignore_rule(pattern: str) -> IgnoreRule | None:
    """Parse one exclusion pattern; blank patterns yield ``None``."""
    pattern = pattern.strip()
    if not pattern or pattern.startswith("#"):
        return None

    negate = pattern.startswith("!")
    if negate:
        pattern = pattern[1:]

    directory_only = pattern.endswith("/")
    if directory_only:
        pattern = pattern[:-1]

    anchored = pattern.startswith("/")
    if anchored:
        pattern = pattern[1:]

    if not pattern:
        return None

    return IgnoreRule(
        pattern=pattern,
        directory_only=directory_only,
        anchored=anchored,
        negate=negate,
        has_slash="/" in pattern,
    )


def build_ignore_rules(patterns: Sequence[str]) -> Tuple[IgnoreRule, ...]:
    rules: List[IgnoreRule] = []
    for pattern in patterns:
        rule = build_ignore_rule(pattern)
        if rule is not None:
            rules.append(rule)
    return tuple(rules)


def _should_ignore(rel_path: str, is_dir: bool, rules: Sequence[IgnoreRule]) -> bool:
    ignored = False
    for rule in rules:
        if rule.matches(rel_path, is_dir):
            ignored = not rule.negate
    return ignored


def expand_braces(pattern: str) -> List[str]:
    """Expand ``{a,b}`` alternatives into plain fnmatch patterns.

    >>> expand_braces("**/*.{js,ts}")
    ['**/*.js', '**/*.ts']
    """
    match = _BRACE_RE.search(pattern)
    if match is None:
        return [pattern]

    head, tail = pattern[: match.start()], pattern[match.end() :]
    expanded: List[str] = []
    for option in match.group(1).split(","):
        for candidate in expand_braces(f"{head}{option}{tail}"):
            if candidate not in expanded:
                expanded.append(candidate)
    return expanded


@dataclass(frozen=True)
class _GlobMatcher:
    pattern: str
    recursive: bool
    basename_only: bool

    def matches(self, rel_path: str) -> bool:
        if self.basename_only:
            return fnmatchcase(rel_path.rsplit("/", 1)[-1], self.pattern)
        if fnmatchcase(rel_path, self.pattern):
            return True
        return self.recursive and fnmatchcase(rel_path, f"*/{self.pattern}")


def _compile_globs(patterns: Sequence[str]) -> Tuple[_GlobMatcher, ...]:
    matchers: List[_GlobMatcher] = []
    for raw in patterns:
        for pattern in expand_braces(raw):
            recursive = pattern.startswith("**/")
            body = pattern[3:] if recursive else pattern
            matchers.append(
                _GlobMatcher(
                    pattern=body,
                    recursive=recursive,
                    basename_only=recursive and "/" not in body,
                )
            )
    return tuple(matchers)


class Workspace:
    """Read-only view over a workspace root honoring an ignore list."""

    def __init__(self, root: Path | str, exclude_paths: Sequence[str] = ()) -> None:
        self.root = Path(root)
        self._rules = build_ignore_rules(exclude_paths)

    async def exists(self, relative: str) -> bool:
        """Return True when ``relative`` exists under the workspace root."""
        return await asyncio.to_thread(self._exists, relative)

    async def exists_any(self, candidates: Sequence[str]) -> Optional[str]:
        """Return the first existing candidate, in the given order."""
        for candidate in candidates:
            if await self.exists(candidate):
                return candidate
        return None

    async def glob(
        self, patterns: str | Sequence[str], *, ignore: Sequence[str] = ()
    ) -> List[str]:
        """Return sorted relative paths of files matching any pattern."""
        if isinstance(patterns, str):
            patterns = [patterns]
        matchers = _compile_globs(patterns)
        rules = self._rules + build_ignore_rules(ignore)
        return await asyncio.to_thread(self._glob, matchers, rules)

    async def read_text(
        self, relative: str, *, max_bytes: int = DEFAULT_MAX_BYTES
    ) -> Optional[str]:
        """Return up to ``max_bytes`` of a file decoded as UTF-8, or None."""
        return await asyncio.to_thread(self._read_text, relative, max_bytes)

    async def first_containing(
        self,
        paths: Sequence[str],
        markers: Sequence[str],
        *,
        limit: int,
        required: Sequence[str] = (),
    ) -> Optional[str]:
        """Return the first of at most ``limit`` files containing any marker.

        A file only matches when it also contains every string in ``required``.
        """
        for path in paths[:limit]:
            content = await self.read_text(path)
            if content is None:
                continue
            if not all(needle in content for needle in required):
                continue
            if any(marker in content for marker in markers):
                return path
        return None

    # ------------------------------------------------------------------
    # Blocking helpers executed in worker threads

    def _exists(self, relative: str) -> bool:
        try:
            return (self.root / relative).exists()
        except OSError:
            return False

    def _read_text(self, relative: str, max_bytes: int) -> Optional[str]:
        try:
            with (self.root / relative).open("rb") as handle:
                payload = handle.read(max_bytes)
        except OSError:
            return None
        return payload.decode("utf-8", errors="replace")

    def _glob(
        self, matchers: Sequence[_GlobMatcher], rules: Sequence[IgnoreRule]
    ) -> List[str]:
        matches = [
            rel_path
            for rel_path in self._iter_files(rules)
            if any(matcher.matches(rel_path) for matcher in matchers)
        ]
        return sorted(matches)

    def _iter_files(self, rules: Sequence[IgnoreRule]) -> Iterator[str]:
        for dirpath, dirnames, filenames in os.walk(self.root):
            current_dir = Path(dirpath)
            rel_dir = current_dir.relative_to(self.root).as_posix() if current_dir != self.root else ""

            filtered_dirs = []
            for name in sorted(dirnames):
                if name in _EXCLUDED_DIRS:
                    continue
                rel_path = f"{rel_dir}/{name}" if rel_dir else name
                if _should_ignore(rel_path, True, rules):
                    continue
                filtered_dirs.append(name)
            dirnames[:] = filtered_dirs

            for filename in sorted(filenames):
                rel_path = f"{rel_dir}/{filename}" if rel_dir else filename
                if _should_ignore(rel_path, False, rules):
                    continue
                yield rel_path


__all__ = [
    "DEFAULT_MAX_BYTES",
    "IgnoreRule",
    "Workspace",
    "build_ignore_rule",
    "build_ignore_rules",
    "expand_braces",
]
