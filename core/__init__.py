"""Core shared contracts and utilities."""

from core.identifier_contract import (
    MEMBER_SEPARATOR,
    SCOPE_PREFIX,
    TYPE_SEPARATOR,
    file_identifier,
    is_fully_qualified,
    member_identifier,
    parse_member_identifier,
    type_identifier,
)
from core.structured_logging import (
    configure_structured_logging,
    get_phase,
    get_run_id,
    phase_scope,
    set_run_id,
)
from core.startup_config import (
    ConfigValidationError,
    coerce_bool,
    load_yaml_config,
    parse_plugin_parameter,
    resolve_strict_config_validation,
)

__all__ = [
    "MEMBER_SEPARATOR",
    "SCOPE_PREFIX",
    "TYPE_SEPARATOR",
    "file_identifier",
    "is_fully_qualified",
    "member_identifier",
    "parse_member_identifier",
    "type_identifier",
    "configure_structured_logging",
    "get_phase",
    "get_run_id",
    "phase_scope",
    "set_run_id",
    "ConfigValidationError",
    "coerce_bool",
    "load_yaml_config",
    "parse_plugin_parameter",
    "resolve_strict_config_validation",
]
