"""Helpers for resolving the exporter configuration file and settings."""

import json
import os
from typing import Any, Dict, Optional

from transcript.settings import ExportSettings

DEFAULT_CONFIG_NAME = "config.json"
CONFIG_ENV_VAR = "CONVERSATION_EXPORTER_CONFIG"


class ConfigError(Exception):
    """Raised when runtime configuration cannot be loaded."""


def _resolve_config_path(path: Optional[str]) -> Optional[str]:
    """Return the absolute config path, honoring overrides and defaults.

    An explicit path or environment override that cannot be found raises
    ``ConfigError``; a missing default ``config.json`` yields ``None``.
    """
    env_override = os.environ.get(CONFIG_ENV_VAR)
    explicit = path or env_override
    candidate = explicit or DEFAULT_CONFIG_NAME
    expanded = os.path.expanduser(candidate)
    if os.path.isabs(expanded) and os.path.isfile(expanded):
        return expanded

    search_roots = [os.getcwd(), os.path.dirname(os.path.abspath(__file__))]
    for root in search_roots:
        resolved = os.path.abspath(os.path.join(root, expanded))
        if os.path.isfile(resolved):
            return resolved

    if explicit:
        raise ConfigError(f"Configuration file not found: {candidate}")
    return None


def _resolve_path(value: str, base_dir: str) -> str:
    """Resolve ``value`` into an absolute path relative to ``base_dir``."""
    expanded = os.path.expanduser(value)
    if os.path.isabs(expanded):
        return expanded
    return os.path.abspath(os.path.join(base_dir, expanded))


def load_config(path: Optional[str] = None) -> Dict[str, Any]:
    """Load a JSON config file and normalize any filesystem paths."""
    config_path = _resolve_config_path(path)
    if config_path is None:
        return {}

    try:
        with open(config_path, "r", encoding="utf-8") as config_file:
            data = json.load(config_file)
    except json.JSONDecodeError as exc:
        raise ConfigError(f"Invalid JSON in {config_path}: {exc}") from exc

    if not isinstance(data, dict):
        raise ConfigError(f"Configuration must be a JSON object: {config_path}")

    base_dir = os.path.dirname(config_path)
    resolved: Dict[str, Any] = {}
    for key, value in data.items():
        if isinstance(value, str) and key.endswith(("_dir", "_path")):
            resolved[key] = _resolve_path(value, base_dir)
        else:
            resolved[key] = value

    return resolved


def resolve_export_settings(
    config_path: Optional[str] = None, **overrides: Any
) -> ExportSettings:
    """Combine CLI overrides with config file values and defaults."""
    config = load_config(config_path)
    merged: Dict[str, Any] = dict(config)
    for key, value in overrides.items():
        if value is not None:
            merged[key] = value

    try:
        settings = ExportSettings.from_mapping(merged)
    except KeyError as exc:
        raise ConfigError(f"Unknown configuration keys: {exc.args[0]}") from exc
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"Invalid configuration value: {exc}") from exc

    if settings.base_font_size <= 6:
        raise ConfigError("base_font_size must be greater than 6")
    if settings.read_retries < 0:
        raise ConfigError("read_retries must be zero or positive")
    return settings
