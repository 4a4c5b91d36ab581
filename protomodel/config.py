"""
Configuration constants for the descriptor semantic model.

Structural path field numbers are read from the generated ``descriptor_pb2``
classes, which are the source of truth for ``SourceCodeInfo`` paths.
"""

import logging
import os
from dataclasses import dataclass
from typing import Any, Optional

from google.protobuf import descriptor_pb2

from core.startup_config import (
    ConfigValidationError,
    coerce_bool,
    load_yaml_config,
    parse_plugin_parameter,
    resolve_strict_config_validation,
)

logger = logging.getLogger(__name__)

_File = descriptor_pb2.FileDescriptorProto
_Message = descriptor_pb2.DescriptorProto
_Enum = descriptor_pb2.EnumDescriptorProto
_Service = descriptor_pb2.ServiceDescriptorProto
_FieldProto = descriptor_pb2.FieldDescriptorProto

# ---------------------------------------------------------------------------
# SourceCodeInfo path components
# ---------------------------------------------------------------------------
PATH_SEPARATOR: str = ","

FILE_PACKAGE_PATH: int = _File.PACKAGE_FIELD_NUMBER            # 2
FILE_MESSAGE_TYPE_PATH: int = _File.MESSAGE_TYPE_FIELD_NUMBER  # 4
FILE_ENUM_TYPE_PATH: int = _File.ENUM_TYPE_FIELD_NUMBER        # 5
FILE_SERVICE_PATH: int = _File.SERVICE_FIELD_NUMBER            # 6

MESSAGE_FIELD_PATH: int = _Message.FIELD_FIELD_NUMBER              # 2
MESSAGE_NESTED_TYPE_PATH: int = _Message.NESTED_TYPE_FIELD_NUMBER  # 3
MESSAGE_ENUM_TYPE_PATH: int = _Message.ENUM_TYPE_FIELD_NUMBER      # 4
MESSAGE_ONEOF_DECL_PATH: int = _Message.ONEOF_DECL_FIELD_NUMBER    # 8

ENUM_VALUE_PATH: int = _Enum.VALUE_FIELD_NUMBER          # 2
SERVICE_METHOD_PATH: int = _Service.METHOD_FIELD_NUMBER  # 2

# ---------------------------------------------------------------------------
# Field type names
# ---------------------------------------------------------------------------
SCALAR_TYPE_NAMES: dict[int, str] = {
    _FieldProto.TYPE_DOUBLE: "double",
    _FieldProto.TYPE_FLOAT: "float",
    _FieldProto.TYPE_INT64: "int64",
    _FieldProto.TYPE_UINT64: "uint64",
    _FieldProto.TYPE_INT32: "int32",
    _FieldProto.TYPE_FIXED64: "fixed64",
    _FieldProto.TYPE_FIXED32: "fixed32",
    _FieldProto.TYPE_BOOL: "bool",
    _FieldProto.TYPE_STRING: "string",
    _FieldProto.TYPE_GROUP: "group",
    _FieldProto.TYPE_MESSAGE: "message",
    _FieldProto.TYPE_BYTES: "bytes",
    _FieldProto.TYPE_UINT32: "uint32",
    _FieldProto.TYPE_ENUM: "enum",
    _FieldProto.TYPE_SFIXED32: "sfixed32",
    _FieldProto.TYPE_SFIXED64: "sfixed64",
    _FieldProto.TYPE_SINT32: "sint32",
    _FieldProto.TYPE_SINT64: "sint64",
}

SCALAR_TYPES_BY_NAME: dict[str, int] = {v: k for k, v in SCALAR_TYPE_NAMES.items()}

REPEATED_PREFIX: str = "[]"

# ---------------------------------------------------------------------------
# Model settings
# ---------------------------------------------------------------------------
DEFAULT_SYNTAX: str = "proto2"
CONFIG_PATH_ENV: str = "PROTOMODEL_CONFIG"
LEGACY_ENUM_DEPRECATION_ENV: str = "PROTOMODEL_LEGACY_ENUM_DEPRECATION"

_SETTING_KEYS = ("legacy_enum_deprecation", "default_syntax")


@dataclass(frozen=True)
class ModelSettings:
    """Behavior switches applied while building and querying one registry."""

    legacy_enum_deprecation: bool = False
    """Reproduce the historical enum check that treats a *visible* file or
    parent as deprecated. Off by default."""

    default_syntax: str = DEFAULT_SYNTAX
    """Syntax reported for files that do not declare one."""


def _merge_raw_settings(
    target: dict[str, Any],
    source: dict[str, Any],
    origin: str,
    strict: bool,
) -> None:
    for key, value in source.items():
        if key not in _SETTING_KEYS:
            msg = f"Unknown setting '{key}' in {origin}"
            if strict:
                raise ConfigValidationError(msg)
            logger.debug("%s; ignoring", msg)
            continue
        target[key] = value


def load_model_settings(
    config_path: Optional[str] = None,
    parameter: Optional[str] = None,
    strict: Optional[bool] = None,
) -> ModelSettings:
    """Resolve ``ModelSettings`` from env, YAML file and plugin parameter.

    Precedence, lowest to highest: defaults, ``PROTOMODEL_LEGACY_ENUM_DEPRECATION``
    env flag, YAML file (``config_path`` or ``PROTOMODEL_CONFIG`` env), plugin
    parameter keys.

    Args:
        config_path: Optional YAML settings file.
        parameter: Raw plugin parameter string from the request.
        strict: Raise ``ConfigValidationError`` on bad input instead of
            falling back. Defaults to ``STRICT_CONFIG_VALIDATION`` env.

    Returns:
        Frozen ModelSettings.
    """
    if strict is None:
        strict = resolve_strict_config_validation(default=False)

    raw: dict[str, Any] = {}
    env_value = os.getenv(LEGACY_ENUM_DEPRECATION_ENV)
    if env_value is not None:
        raw["legacy_enum_deprecation"] = env_value

    path = config_path or os.getenv(CONFIG_PATH_ENV)
    if path:
        _merge_raw_settings(raw, load_yaml_config(path, strict=strict), path, strict)

    if parameter:
        params = {
            k: v for k, v in parse_plugin_parameter(parameter).items() if k in _SETTING_KEYS
        }
        _merge_raw_settings(raw, params, "plugin parameter", strict)

    syntax = str(raw.get("default_syntax") or DEFAULT_SYNTAX).strip()
    settings = ModelSettings(
        legacy_enum_deprecation=coerce_bool(
            raw.get("legacy_enum_deprecation"),
            "legacy_enum_deprecation",
            default=False,
            strict=strict,
        ),
        default_syntax=syntax,
    )
    logger.debug("Resolved model settings: %s", settings)
    return settings
