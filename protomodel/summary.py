"""
Plain-data rendering of a registry, used by ``run_dump.py`` and in tests.

The output only contains dicts, lists, strings, ints and bools so it can be
written with ``json.dump`` or ``yaml.safe_dump`` without custom encoders.
Declaration order is preserved everywhere.
"""

from typing import Any

from protomodel.enums import Enum
from protomodel.messages import Field, Message
from protomodel.registry import Registry
from protomodel.services import Service


def _flags(entity) -> dict[str, Any]:
    out: dict[str, Any] = {
        "id": entity.id,
        "visible": entity.is_visible(),
        "deprecated": entity.is_deprecated(),
    }
    if entity.comments.leading:
        out["comment"] = entity.comments.leading.strip()
    return out


def _describe_field(field: Field) -> dict[str, Any]:
    out = _flags(field)
    out["number"] = field.number
    out["type"] = field.type_name_string()
    if field.oneof_id:
        out["oneof"] = field.oneof_id
    return out


def _describe_enum(enum: Enum) -> dict[str, Any]:
    out = _flags(enum)
    out["values"] = [
        {**_flags(value), "number": value.number} for value in enum.values()
    ]
    return out


def _describe_message(message: Message) -> dict[str, Any]:
    out = _flags(message)
    out["fields"] = [_describe_field(f) for f in message.fields()]
    oneofs = message.oneofs()
    if oneofs:
        out["oneofs"] = [
            {**_flags(oneof), "fields": list(oneof.fields().ids())} for oneof in oneofs
        ]
    nested = message.messages()
    if nested:
        out["messages"] = [_describe_message(m) for m in nested]
    enums = message.enums()
    if enums:
        out["enums"] = [_describe_enum(e) for e in enums]
    return out


def _describe_service(service: Service) -> dict[str, Any]:
    out = _flags(service)
    out["methods"] = [
        {
            **_flags(method),
            "input": method.input_type_id,
            "output": method.output_type_id,
            "client_streaming": method.client_streaming,
            "server_streaming": method.server_streaming,
        }
        for method in service.methods()
    ]
    return out


def describe_registry(registry: Registry, to_generate_only: bool = False) -> dict[str, Any]:
    """Render the registry as nested plain data.

    Args:
        registry: Sealed registry from ``build_registry``.
        to_generate_only: Only include files selected for generation.

    Returns:
        ``{"parameter": ..., "packages_to_generate": [...], "counts": {...},
        "files": [...]}`` where each file lists its top-level messages,
        enums and services recursively.
    """
    files = registry.files()
    if to_generate_only:
        files = files.to_generate()

    return {
        "parameter": registry.parameter,
        "packages_to_generate": list(registry.packages_to_generate()),
        "counts": registry.counts(),
        "files": [
            {
                "id": f.id,
                "name": f.name,
                "package": f.package,
                "syntax": f.syntax,
                "generate": f.generate,
                "visible": f.is_visible(),
                "deprecated": f.is_deprecated(),
                "dependencies": list(f.dependencies),
                "messages": [_describe_message(m) for m in f.messages()],
                "enums": [_describe_enum(e) for e in f.enums()],
                "services": [_describe_service(s) for s in f.services()],
            }
            for f in files
        ],
    }
