"""Shared helper utilities for analyzer implementations."""

from __future__ import annotations

from typing import Iterable, List, Sequence, Tuple

from ..models import TechStack
from ..workspace import Workspace

SOURCE_EXTENSIONS = ("js", "ts", "jsx", "tsx", "py", "java", "go")
SERVER_EXTENSIONS = ("js", "ts", "py", "java", "go")
SCRIPT_EXTENSIONS = ("js", "ts", "jsx", "tsx")


def name_glob(fragments: Sequence[str], extensions: Sequence[str]) -> str:
    """Build a recursive glob matching file names containing any fragment.

    >>> name_glob(["auth", "login"], ["js", "py"])
    '**/*{auth,login}*.{js,py}'
    """
    return f"**/*{{{','.join(fragments)}}}*.{{{','.join(extensions)}}}"


def extension_glob(extensions: Sequence[str]) -> str:
    return f"**/*.{{{','.join(extensions)}}}"


async def scan_flags(
    workspace: Workspace,
    paths: Sequence[str],
    markers: Sequence[Tuple[str, Sequence[str]]],
    *,
    limit: int,
) -> dict[str, bool]:
    """Report which marker groups appear in the first ``limit`` files.

    Each entry in ``markers`` is ``(flag, substrings)``; a flag is set when any
    of its substrings occurs in any inspected file. Scanning stops early once
    every flag is set.
    """
    flags = {flag: False for flag, _ in markers}
    for path in paths[:limit]:
        content = await workspace.read_text(path)
        if content is None:
            continue
        for flag, needles in markers:
            if not flags[flag] and any(needle in content for needle in needles):
                flags[flag] = True
        if all(flags.values()):
            break
    return flags


def first_label(candidates: Iterable[Tuple[bool, str]], default: str) -> str:
    """Return the label of the first true candidate, else ``default``."""
    for present, label in candidates:
        if present:
            return label
    return default


def languages_among(stack: TechStack, allowed: Sequence[str]) -> Tuple[str, ...]:
    """Return detected languages from ``allowed``, in detection order."""
    return tuple(language for language in stack.languages if language in allowed)


def labels(candidates: Iterable[Tuple[bool, str]]) -> List[str]:
    return [label for present, label in candidates if present]


__all__ = [
    "SCRIPT_EXTENSIONS",
    "SERVER_EXTENSIONS",
    "SOURCE_EXTENSIONS",
    "extension_glob",
    "first_label",
    "labels",
    "languages_among",
    "name_glob",
    "scan_flags",
]
