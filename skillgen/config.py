"""Configuration loading for skillgen (.skillgen.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

from .errors import ConfigError

CONFIG_FILENAME = ".skillgen.yml"
DEFAULT_OUTPUT_DIR = Path(".claude") / "skills"
DEFAULT_CONTENT_SCAN_LIMIT = 50


@dataclass
class AnalyzerConfig:
    """Analyzer enablement and per-analyzer timeout."""

    enabled: List[str] = field(default_factory=list)
    timeout: Optional[float] = None


@dataclass
class ProbeConfig:
    """Limits applied to content-reading probes."""

    content_scan_limit: int = DEFAULT_CONTENT_SCAN_LIMIT


@dataclass
class SkillgenConfig:
    """Represents the high-level settings defined in .skillgen.yml."""

    root: Path
    analyzers: AnalyzerConfig = field(default_factory=AnalyzerConfig)
    probes: ProbeConfig = field(default_factory=ProbeConfig)
    exclude_paths: List[str] = field(default_factory=list)
    output_dir: Optional[Path] = None

    def resolved_output_dir(self) -> Path:
        """Return the directory skills are written to."""
        if self.output_dir is not None:
            return self.output_dir
        return self.root / DEFAULT_OUTPUT_DIR


def load_config(config_path: Path) -> SkillgenConfig:
    """Load configuration from disk, returning defaults when the file is absent."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return SkillgenConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    analyzer_data = _as_dict(data.get("analyzers"))
    analyzers = AnalyzerConfig()
    if analyzer_data:
        analyzers.enabled = _as_str_list(analyzer_data.get("enabled"))
        timeout = _as_float(analyzer_data.get("timeout"))
        if timeout is not None and timeout <= 0:
            raise ConfigError("analyzers.timeout must be a positive number of seconds")
        analyzers.timeout = timeout

    probe_data = _as_dict(data.get("probes"))
    probes = ProbeConfig()
    if probe_data:
        limit = _as_int(probe_data.get("content_scan_limit"))
        if limit is not None:
            if limit < 1:
                raise ConfigError("probes.content_scan_limit must be at least 1")
            probes.content_scan_limit = limit

    output_data = _as_dict(data.get("output"))
    output_dir_str = _as_str(output_data.get("directory")) if output_data else None
    output_dir = root / output_dir_str if output_dir_str else None

    return SkillgenConfig(
        root=root,
        analyzers=analyzers,
        probes=probes,
        exclude_paths=_as_str_list(data.get("exclude_paths")),
        output_dir=output_dir,
    )


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    if config_path.name != CONFIG_FILENAME:
        return (config_path.parent / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Failed to read {path.name}: {exc}") from exc
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded or {}


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float, bool)) else None


def _as_float(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return None
    return None


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return None
    return None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float, bool))]
    return []


__all__ = [
    "AnalyzerConfig",
    "CONFIG_FILENAME",
    "ConfigError",
    "ProbeConfig",
    "SkillgenConfig",
    "load_config",
]
