"""Helper utilities for constructing temporary workspaces in tests."""

from __future__ import annotations

import json
import textwrap
from pathlib import Path
from typing import Any, Mapping


class RepoBuilder:
    """Utility for writing files into a throwaway workspace."""

    def __init__(self, tmp_path: Path) -> None:
        self.root = tmp_path / "repo"
        self.root.mkdir()

    def write(self, files: Mapping[str, str]) -> None:
        """Write `path -> contents` entries into the workspace."""
        for relative, content in files.items():
            path = self.root / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            normalised = textwrap.dedent(content).lstrip("\n")
            path.write_text(normalised, encoding="utf-8")

    def write_package_json(
        self,
        dependencies: Mapping[str, str] | None = None,
        dev_dependencies: Mapping[str, str] | None = None,
    ) -> None:
        """Write a package.json declaring the given dependencies."""
        payload: dict[str, Any] = {"name": "fixture", "version": "1.0.0"}
        if dependencies:
            payload["dependencies"] = dict(dependencies)
        if dev_dependencies:
            payload["devDependencies"] = dict(dev_dependencies)
        (self.root / "package.json").write_text(json.dumps(payload, indent=2), encoding="utf-8")

    def path(self) -> Path:
        """Return the workspace root path."""
        return self.root


__all__ = ["RepoBuilder"]
