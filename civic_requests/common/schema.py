"""Minimal strict schemas for YAML config validation."""

from __future__ import annotations

from civic_requests.common.errors import ConfigError

ANALYSIS_REQUIRED_KEYS = {"enabled", "endpoint", "model", "timeout_seconds"}
ANALYSIS_OPTIONAL_KEYS = {"response_field", "api_key_env", "connect_timeout_seconds"}


def _assert_required_keys(obj: dict, required: set[str], ctx: str) -> None:
    missing = required - set(obj)
    if missing:
        missing_str = ", ".join(sorted(missing))
        raise ConfigError(f"Missing keys in {ctx}: {missing_str}")


def _assert_no_unknown_keys(obj: dict, known: set[str], ctx: str, allow_unknown: bool) -> None:
    if allow_unknown:
        return
    unknown = set(obj) - known
    if unknown:
        unknown_str = ", ".join(sorted(unknown))
        raise ConfigError(f"Unknown keys in {ctx}: {unknown_str}")


def validate_analysis_config(cfg: dict, *, allow_unknown: bool = False) -> dict:
    if not isinstance(cfg, dict):
        raise ConfigError("analysis config must be a mapping")
    _assert_required_keys(cfg, {"analysis"}, "analysis config")
    _assert_no_unknown_keys(cfg, {"analysis"}, "analysis config", allow_unknown)

    section = cfg["analysis"]
    if not isinstance(section, dict):
        raise ConfigError("analysis must be a mapping")
    _assert_required_keys(section, ANALYSIS_REQUIRED_KEYS, "analysis")
    _assert_no_unknown_keys(section, ANALYSIS_REQUIRED_KEYS | ANALYSIS_OPTIONAL_KEYS, "analysis", allow_unknown)

    try:
        timeout = float(section["timeout_seconds"])
    except (TypeError, ValueError) as exc:
        raise ConfigError("analysis.timeout_seconds must be a number") from exc
    if timeout <= 0:
        raise ConfigError("analysis.timeout_seconds must be positive")

    return cfg
