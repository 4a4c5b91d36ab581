"""Startup configuration helpers.

Provides strict/non-strict loading of YAML settings files, environment
flags, and the plugin parameter string that ``protoc`` forwards verbatim
from ``--<plugin>_opt``.
"""

from __future__ import annotations

import logging
import os
from typing import Any, Optional

import yaml

logger = logging.getLogger(__name__)

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


class ConfigValidationError(RuntimeError):
    """Raised when strict startup validation fails."""


def _env_flag(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in _TRUE_VALUES


def resolve_strict_config_validation(default: bool = False) -> bool:
    """Resolve strict validation mode from ``STRICT_CONFIG_VALIDATION`` env."""
    return _env_flag("STRICT_CONFIG_VALIDATION", default=default)


def load_yaml_config(
    config_path: str,
    strict: bool = False,
) -> dict[str, Any]:
    """Load a YAML settings file into a dict.

    In non-strict mode this returns an empty dict on read/parse failures.
    In strict mode this raises ``ConfigValidationError``.
    """
    try:
        with open(config_path, "r", encoding="utf-8") as f:
            payload = yaml.safe_load(f)
    except FileNotFoundError as exc:
        msg = f"Settings file not found: {config_path}"
        if strict:
            raise ConfigValidationError(msg) from exc
        logger.warning("%s; continuing with defaults", msg)
        return {}
    except yaml.YAMLError as exc:
        msg = f"Failed to parse settings YAML at {config_path}: {exc}"
        if strict:
            raise ConfigValidationError(msg) from exc
        logger.warning("%s; continuing with defaults", msg)
        return {}

    if payload is None:
        return {}

    if not isinstance(payload, dict):
        msg = f"Unexpected settings payload type: {type(payload).__name__}"
        if strict:
            raise ConfigValidationError(msg)
        logger.warning("%s; continuing with defaults", msg)
        return {}

    return payload


def parse_plugin_parameter(parameter: Optional[str]) -> dict[str, str]:
    """Split a plugin parameter string into an ordered key/value mapping.

    ``"a=1,flag,b=x=y"`` becomes ``{"a": "1", "flag": "", "b": "x=y"}``.
    Later duplicates win.
    """
    result: dict[str, str] = {}
    if not parameter:
        return result
    for item in parameter.split(","):
        item = item.strip()
        if not item:
            continue
        key, _, value = item.partition("=")
        key = key.strip()
        if key:
            result[key] = value.strip()
    return result


def coerce_bool(
    value: Any,
    name: str,
    default: bool = False,
    strict: bool = False,
) -> bool:
    """Interpret a YAML/parameter value as a boolean setting.

    A bare flag (empty string) counts as true.
    """
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text == "" or text in _TRUE_VALUES:
        return True
    if text in _FALSE_VALUES:
        return False
    msg = f"Setting '{name}' expects a boolean, got {value!r}"
    if strict:
        raise ConfigValidationError(msg)
    logger.warning("%s; using default %s", msg, default)
    return default
