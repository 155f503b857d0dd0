"""Configuration loading and validation."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

from civic_requests.common.errors import ConfigError
from civic_requests.common.fs import read_yaml
from civic_requests.common.schema import validate_analysis_config

ANALYSIS_CONFIG_FILENAME = "analysis.yml"


@dataclass(frozen=True)
class AnalysisConfig:
    enabled: bool
    endpoint: str
    model: str
    timeout_seconds: float
    connect_timeout_seconds: float = 10.0
    response_field: str = "response"
    api_key_env: str | None = None


def _deep_merge(base: Any, overlay: Any) -> Any:
    if isinstance(base, dict) and isinstance(overlay, dict):
        merged = dict(base)
        for key, value in overlay.items():
            if key in merged:
                merged[key] = _deep_merge(merged[key], value)
            else:
                merged[key] = value
        return merged
    return overlay


def _load_yaml_with_overlay(path: Path, overlay_path: Path | None) -> dict:
    if not path.exists():
        raise ConfigError(f"Missing config file: {path}")
    base = read_yaml(path)
    if overlay_path is None or not overlay_path.exists():
        return base
    overlay = read_yaml(overlay_path)
    if overlay is None:
        return base
    if not isinstance(overlay, dict):
        raise ConfigError(f"Overlay config must be a mapping: {overlay_path}")
    return _deep_merge(base, overlay)


def load_analysis_config(
    config_dir: Path,
    *,
    allow_unknown: bool = False,
    overlay_config_dir: Path | None = None,
) -> AnalysisConfig:
    overlay_path = None
    if overlay_config_dir is not None:
        overlay_path = overlay_config_dir / ANALYSIS_CONFIG_FILENAME
    cfg = validate_analysis_config(
        _load_yaml_with_overlay(config_dir / ANALYSIS_CONFIG_FILENAME, overlay_path),
        allow_unknown=allow_unknown,
    )
    section = cfg["analysis"]
    return AnalysisConfig(
        enabled=bool(section["enabled"]),
        endpoint=str(section["endpoint"] or ""),
        model=str(section["model"] or ""),
        timeout_seconds=float(section["timeout_seconds"]),
        connect_timeout_seconds=float(section.get("connect_timeout_seconds", 10.0)),
        response_field=str(section.get("response_field") or "response"),
        api_key_env=section.get("api_key_env") or None,
    )
