"""
Custom metadata extensions (visibility, tags, extra) for descriptor options.

The schema mirrors ``protomodel/proto/protoc_template/meta.proto`` (pass
``META_PROTO_INCLUDE_DIR`` to ``protoc -I`` to import it) and is registered
into the default protobuf descriptor pool when this module is imported, so requests
parsed afterwards resolve the extensions natively. A declaration without the
extension is the common case and yields ``None`` from ``find_metadata``.
"""

import enum
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Literal, Optional

from google.protobuf import descriptor_pb2, descriptor_pool, message_factory
from google.protobuf.message import Message as ProtoMessage

logger = logging.getLogger(__name__)

META_PROTO_NAME = "protoc_template/meta.proto"
META_PACKAGE = "protoc_template"
META_PROTO_INCLUDE_DIR = Path(__file__).resolve().parent / "proto"
META_PROTO_PATH = META_PROTO_INCLUDE_DIR / META_PROTO_NAME

MetadataKind = Literal[
    "file",
    "message",
    "field",
    "enum",
    "enum_value",
    "oneof",
    "service",
    "method",
]


class Visibility(enum.IntEnum):
    """Values of ``protoc_template.Visibility``."""

    PUBLIC = 0
    PRIVATE = 1


@dataclass(frozen=True)
class _MetadataSpec:
    message_name: str
    extension_name: str
    extension_number: int
    extendee: str


_SPECS: dict[str, _MetadataSpec] = {
    "file": _MetadataSpec("FileMetadata", "file_meta", 51230, "FileOptions"),
    "message": _MetadataSpec("MessageMetadata", "message_meta", 51231, "MessageOptions"),
    "field": _MetadataSpec("FieldMetadata", "field_meta", 51232, "FieldOptions"),
    "enum": _MetadataSpec("EnumMetadata", "enum_meta", 51233, "EnumOptions"),
    "enum_value": _MetadataSpec(
        "EnumValueMetadata", "enum_value_meta", 51234, "EnumValueOptions"
    ),
    "oneof": _MetadataSpec("OneofMetadata", "oneof_meta", 51235, "OneofOptions"),
    "service": _MetadataSpec("ServiceMetadata", "service_meta", 51236, "ServiceOptions"),
    "method": _MetadataSpec("MethodMetadata", "method_meta", 51237, "MethodOptions"),
}


def build_meta_file_proto() -> descriptor_pb2.FileDescriptorProto:
    """Build the ``FileDescriptorProto`` equivalent of ``meta.proto``."""
    FieldProto = descriptor_pb2.FieldDescriptorProto

    file_proto = descriptor_pb2.FileDescriptorProto(
        name=META_PROTO_NAME,
        package=META_PACKAGE,
        syntax="proto2",
        dependency=["google/protobuf/descriptor.proto"],
    )

    visibility = file_proto.enum_type.add(name="Visibility")
    for member in Visibility:
        visibility.value.add(name=member.name, number=member.value)

    for spec in _SPECS.values():
        msg = file_proto.message_type.add(name=spec.message_name)
        msg.field.add(
            name="visibility",
            number=1,
            label=FieldProto.LABEL_OPTIONAL,
            type=FieldProto.TYPE_ENUM,
            type_name=f".{META_PACKAGE}.Visibility",
            json_name="visibility",
        )
        msg.field.add(
            name="tags",
            number=2,
            label=FieldProto.LABEL_REPEATED,
            type=FieldProto.TYPE_STRING,
            json_name="tags",
        )

        entry = msg.nested_type.add(name="ExtraEntry")
        entry.options.map_entry = True
        entry.field.add(
            name="key",
            number=1,
            label=FieldProto.LABEL_OPTIONAL,
            type=FieldProto.TYPE_STRING,
            json_name="key",
        )
        entry.field.add(
            name="value",
            number=2,
            label=FieldProto.LABEL_OPTIONAL,
            type=FieldProto.TYPE_STRING,
            json_name="value",
        )
        msg.field.add(
            name="extra",
            number=3,
            label=FieldProto.LABEL_REPEATED,
            type=FieldProto.TYPE_MESSAGE,
            type_name=f".{META_PACKAGE}.{spec.message_name}.ExtraEntry",
            json_name="extra",
        )

        file_proto.extension.add(
            name=spec.extension_name,
            number=spec.extension_number,
            label=FieldProto.LABEL_OPTIONAL,
            type=FieldProto.TYPE_MESSAGE,
            type_name=f".{META_PACKAGE}.{spec.message_name}",
            extendee=f".google.protobuf.{spec.extendee}",
        )

    return file_proto


def _register_meta_file(pool: descriptor_pool.DescriptorPool) -> None:
    try:
        pool.FindFileByName(META_PROTO_NAME)
        return
    except KeyError:
        pass
    pool.AddSerializedFile(build_meta_file_proto().SerializeToString())
    logger.debug("Registered %s in the default descriptor pool", META_PROTO_NAME)


_POOL = descriptor_pool.Default()
_register_meta_file(_POOL)

METADATA_CLASSES: dict[str, type] = {
    kind: message_factory.GetMessageClass(
        _POOL.FindMessageTypeByName(f"{META_PACKAGE}.{spec.message_name}")
    )
    for kind, spec in _SPECS.items()
}

EXTENSIONS = {
    kind: _POOL.FindExtensionByName(f"{META_PACKAGE}.{spec.extension_name}")
    for kind, spec in _SPECS.items()
}


def find_metadata(
    options: Optional[ProtoMessage],
    kind: MetadataKind,
) -> Optional[ProtoMessage]:
    """Return a copy of the metadata extension on ``options``, if present.

    Args:
        options: A ``descriptor_pb2.*Options`` message, or None when the
            declaration carries no options at all.
        kind: Entity kind selecting the extension.

    Returns:
        The metadata message, or None when the extension is absent.
    """
    if options is None:
        return None
    extension = EXTENSIONS[kind]
    if not options.HasExtension(extension):
        return None
    found = METADATA_CLASSES[kind]()
    found.CopyFrom(options.Extensions[extension])
    return found


def metadata_or_default(
    options: Optional[ProtoMessage],
    kind: MetadataKind,
) -> ProtoMessage:
    """Like ``find_metadata`` but falls back to an all-default message."""
    found = find_metadata(options, kind)
    if found is None:
        return METADATA_CLASSES[kind]()
    return found


def is_public(metadata: ProtoMessage) -> bool:
    """True when the metadata's visibility is ``PUBLIC``."""
    return metadata.visibility == Visibility.PUBLIC


def detached_copy(message: ProtoMessage) -> ProtoMessage:
    """Fresh copy of ``message`` sharing no state with it."""
    copied = type(message)()
    copied.CopyFrom(message)
    return copied


class DeclaredOptionsMixin:
    """Exposes an entity's stored ``_options``/``_meta`` messages as copies.

    Protobuf messages are mutable, so the registry keeps its own instances
    private and every read returns a new copy. Editing a returned copy never
    changes visibility or deprecation seen by other readers.
    """

    __slots__ = ()

    @property
    def options(self) -> ProtoMessage:
        """Copy of the declaration's ``descriptor_pb2.*Options``."""
        return detached_copy(self._options)

    @property
    def meta(self) -> ProtoMessage:
        """Copy of the declaration's metadata (all defaults when absent)."""
        return detached_copy(self._meta)
