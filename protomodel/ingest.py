"""
Descriptor ingest: turn a ``CodeGeneratorRequest`` into a linked ``Registry``.

Files are walked once, in request order. Within a file, registration is
pre-order so that every child identifier can be derived from its parent's:

    file -> messages (oneofs, fields, nested messages, nested enums)
         -> enums (values)
         -> services (methods)

Type references are linked inline. Field references are taken as given
(protoc always emits fully-qualified names); method input/output types must
already be registered, otherwise the build aborts with
``UnresolvedTypeError``.
"""

import itertools
import logging
from dataclasses import dataclass
from typing import Iterator, Mapping, Optional

from google.protobuf import descriptor_pb2
from google.protobuf.compiler import plugin_pb2

from core.identifier_contract import (
    file_identifier,
    is_fully_qualified,
    member_identifier,
    type_identifier,
)
from core.structured_logging import phase_scope
from protomodel.comments import Comments, build_comment_index, child_path, lookup_comments
from protomodel.config import (
    ENUM_VALUE_PATH,
    FILE_ENUM_TYPE_PATH,
    FILE_MESSAGE_TYPE_PATH,
    FILE_PACKAGE_PATH,
    FILE_SERVICE_PATH,
    MESSAGE_ENUM_TYPE_PATH,
    MESSAGE_FIELD_PATH,
    MESSAGE_NESTED_TYPE_PATH,
    MESSAGE_ONEOF_DECL_PATH,
    SERVICE_METHOD_PATH,
    ModelSettings,
)
from protomodel.enums import Enum, EnumValue
from protomodel.errors import UnresolvedTypeError
from protomodel.files import File
from protomodel.messages import Field, Message, Oneof
from protomodel.meta import metadata_or_default
from protomodel.registry import ENTITY_KINDS, Registry
from protomodel.services import Method, Service

logger = logging.getLogger(__name__)

_FieldProto = descriptor_pb2.FieldDescriptorProto


@dataclass(frozen=True)
class _FileScope:
    """Per-file state shared by every registration in that file."""

    file_id: str
    package: str
    comment_index: Mapping[str, Comments]

    def comments(self, path: str) -> Comments:
        return lookup_comments(self.comment_index, path)


def _copy_options(desc, options_cls):
    """Detached copy of ``desc.options``, or a default instance when unset."""
    copied = options_cls()
    if desc.HasField("options"):
        copied.CopyFrom(desc.options)
    return copied


def _declared_options(desc):
    return desc.options if desc.HasField("options") else None


class RegistryBuilder:
    """Single-use builder that registers every declaration of a request."""

    def __init__(
        self,
        settings: Optional[ModelSettings] = None,
        files_to_generate=(),
        parameter: str = "",
    ) -> None:
        self.settings = settings or ModelSettings()
        self.registry = Registry(
            settings=self.settings,
            files_to_generate=files_to_generate,
            parameter=parameter,
        )
        self._counters: dict[str, Iterator[int]] = {
            kind: itertools.count() for kind in ENTITY_KINDS
        }

    def _next_index(self, kind: str) -> int:
        return next(self._counters[kind])

    # -- files ---------------------------------------------------------------

    def add_file(self, desc: descriptor_pb2.FileDescriptorProto) -> str:
        """Register a file and everything declared in it."""
        idx = self._next_index("file")
        package = desc.package
        scope = _FileScope(
            file_id=file_identifier(package, desc.name),
            package=package,
            comment_index=build_comment_index(desc.source_code_info),
        )

        message_ids = tuple(
            self._add_message(scope, "", dsc, child_path("", FILE_MESSAGE_TYPE_PATH, i))
            for i, dsc in enumerate(desc.message_type)
        )
        enum_ids = tuple(
            self._add_enum(scope, "", dsc, child_path("", FILE_ENUM_TYPE_PATH, i))
            for i, dsc in enumerate(desc.enum_type)
        )
        service_ids = tuple(
            self._add_service(scope, dsc, child_path("", FILE_SERVICE_PATH, i))
            for i, dsc in enumerate(desc.service)
        )

        entity = File(
            id=scope.file_id,
            idx=idx,
            name=desc.name,
            package=package,
            syntax=desc.syntax or self.settings.default_syntax,
            dependencies=tuple(desc.dependency),
            generate=desc.name in self.registry.files_to_generate,
            # File-level comments are attached to the package statement.
            comments=scope.comments(str(FILE_PACKAGE_PATH)),
            _meta=metadata_or_default(_declared_options(desc), "file"),
            _options=_copy_options(desc, descriptor_pb2.FileOptions),
            message_ids=message_ids,
            enum_ids=enum_ids,
            service_ids=service_ids,
            _registry=self.registry,
        )
        self.registry._register("file", entity)
        logger.debug(
            "Registered file %s: %d messages, %d enums, %d services (generate=%s)",
            entity.name,
            len(message_ids),
            len(enum_ids),
            len(service_ids),
            entity.generate,
        )
        return entity.id

    # -- messages ------------------------------------------------------------

    def _add_message(
        self,
        scope: _FileScope,
        parent_id: str,
        desc: descriptor_pb2.DescriptorProto,
        path: str,
    ) -> str:
        idx = self._next_index("message")
        message_id = type_identifier(scope.package, desc.name, parent_id)

        # Oneofs first: fields refer to them by position.
        oneof_ids = [member_identifier(message_id, o.name) for o in desc.oneof_decl]
        oneof_indexes = [self._next_index("oneof") for _ in oneof_ids]
        oneof_members: dict[str, list[str]] = {oid: [] for oid in oneof_ids}

        field_ids = tuple(
            self._add_field(
                scope,
                message_id,
                dsc,
                child_path(path, MESSAGE_FIELD_PATH, i),
                oneof_ids,
                oneof_members,
            )
            for i, dsc in enumerate(desc.field)
        )

        for i, dsc in enumerate(desc.oneof_decl):
            self._add_oneof(
                scope,
                message_id,
                dsc,
                child_path(path, MESSAGE_ONEOF_DECL_PATH, i),
                oneof_ids[i],
                oneof_indexes[i],
                tuple(oneof_members[oneof_ids[i]]),
            )

        nested_ids = tuple(
            self._add_message(
                scope, message_id, dsc, child_path(path, MESSAGE_NESTED_TYPE_PATH, i)
            )
            for i, dsc in enumerate(desc.nested_type)
        )
        enum_ids = tuple(
            self._add_enum(scope, message_id, dsc, child_path(path, MESSAGE_ENUM_TYPE_PATH, i))
            for i, dsc in enumerate(desc.enum_type)
        )

        entity = Message(
            id=message_id,
            idx=idx,
            name=desc.name,
            file_id=scope.file_id,
            parent_id=parent_id,
            comments=scope.comments(path),
            _meta=metadata_or_default(_declared_options(desc), "message"),
            _options=_copy_options(desc, descriptor_pb2.MessageOptions),
            field_ids=field_ids,
            message_ids=nested_ids,
            enum_ids=enum_ids,
            oneof_ids=tuple(oneof_ids),
            reserved_ranges=tuple((r.start, r.end) for r in desc.reserved_range),
            reserved_names=tuple(desc.reserved_name),
            _registry=self.registry,
        )
        return self.registry._register("message", entity)

    def _add_field(
        self,
        scope: _FileScope,
        message_id: str,
        desc: descriptor_pb2.FieldDescriptorProto,
        path: str,
        oneof_ids: list[str],
        oneof_members: dict[str, list[str]],
    ) -> str:
        field_id = member_identifier(message_id, desc.name)

        oneof_id = ""
        if desc.HasField("oneof_index"):
            oneof_id = oneof_ids[desc.oneof_index]
            oneof_members[oneof_id].append(field_id)

        type_message_id, type_enum_id = _link_field_type(field_id, desc)

        entity = Field(
            id=field_id,
            idx=self._next_index("field"),
            name=desc.name,
            parent_id=message_id,
            oneof_id=oneof_id,
            type_message_id=type_message_id,
            type_enum_id=type_enum_id,
            number=desc.number,
            label=desc.label,
            type=desc.type,
            type_name=desc.type_name,
            default_value=desc.default_value,
            json_name=desc.json_name,
            comments=scope.comments(path),
            _meta=metadata_or_default(_declared_options(desc), "field"),
            _options=_copy_options(desc, descriptor_pb2.FieldOptions),
            _registry=self.registry,
        )
        return self.registry._register("field", entity)

    def _add_oneof(
        self,
        scope: _FileScope,
        message_id: str,
        desc: descriptor_pb2.OneofDescriptorProto,
        path: str,
        oneof_id: str,
        idx: int,
        field_ids: tuple[str, ...],
    ) -> str:
        entity = Oneof(
            id=oneof_id,
            idx=idx,
            name=desc.name,
            parent_id=message_id,
            field_ids=field_ids,
            comments=scope.comments(path),
            _meta=metadata_or_default(_declared_options(desc), "oneof"),
            _options=_copy_options(desc, descriptor_pb2.OneofOptions),
            _registry=self.registry,
        )
        return self.registry._register("oneof", entity)

    # -- enums ---------------------------------------------------------------

    def _add_enum(
        self,
        scope: _FileScope,
        parent_id: str,
        desc: descriptor_pb2.EnumDescriptorProto,
        path: str,
    ) -> str:
        idx = self._next_index("enum")
        enum_id = type_identifier(scope.package, desc.name, parent_id)

        value_ids = tuple(
            self._add_enum_value(scope, enum_id, dsc, child_path(path, ENUM_VALUE_PATH, i))
            for i, dsc in enumerate(desc.value)
        )

        entity = Enum(
            id=enum_id,
            idx=idx,
            name=desc.name,
            file_id=scope.file_id,
            parent_id=parent_id,
            value_ids=value_ids,
            comments=scope.comments(path),
            _meta=metadata_or_default(_declared_options(desc), "enum"),
            _options=_copy_options(desc, descriptor_pb2.EnumOptions),
            _registry=self.registry,
        )
        return self.registry._register("enum", entity)

    def _add_enum_value(
        self,
        scope: _FileScope,
        enum_id: str,
        desc: descriptor_pb2.EnumValueDescriptorProto,
        path: str,
    ) -> str:
        entity = EnumValue(
            id=member_identifier(enum_id, desc.name),
            idx=self._next_index("enum_value"),
            name=desc.name,
            number=desc.number,
            parent_id=enum_id,
            comments=scope.comments(path),
            _meta=metadata_or_default(_declared_options(desc), "enum_value"),
            _options=_copy_options(desc, descriptor_pb2.EnumValueOptions),
            _registry=self.registry,
        )
        return self.registry._register("enum_value", entity)

    # -- services ------------------------------------------------------------

    def _add_service(
        self,
        scope: _FileScope,
        desc: descriptor_pb2.ServiceDescriptorProto,
        path: str,
    ) -> str:
        idx = self._next_index("service")
        service_id = type_identifier(scope.package, desc.name)

        method_ids = tuple(
            self._add_method(scope, service_id, dsc, child_path(path, SERVICE_METHOD_PATH, i))
            for i, dsc in enumerate(desc.method)
        )

        entity = Service(
            id=service_id,
            idx=idx,
            name=desc.name,
            file_id=scope.file_id,
            method_ids=method_ids,
            comments=scope.comments(path),
            _meta=metadata_or_default(_declared_options(desc), "service"),
            _options=_copy_options(desc, descriptor_pb2.ServiceOptions),
            _registry=self.registry,
        )
        return self.registry._register("service", entity)

    def _add_method(
        self,
        scope: _FileScope,
        service_id: str,
        desc: descriptor_pb2.MethodDescriptorProto,
        path: str,
    ) -> str:
        method_id = member_identifier(service_id, desc.name)
        input_type_id = self._link_method_type(method_id, desc.input_type)
        output_type_id = self._link_method_type(method_id, desc.output_type)

        entity = Method(
            id=method_id,
            idx=self._next_index("method"),
            name=desc.name,
            parent_id=service_id,
            input_type_id=input_type_id,
            output_type_id=output_type_id,
            client_streaming=desc.client_streaming,
            server_streaming=desc.server_streaming,
            comments=scope.comments(path),
            _meta=metadata_or_default(_declared_options(desc), "method"),
            _options=_copy_options(desc, descriptor_pb2.MethodOptions),
            _registry=self.registry,
        )
        return self.registry._register("method", entity)

    def _link_method_type(self, method_id: str, type_name: str) -> str:
        """Resolve a method's input/output type, which must be registered."""
        if not self.registry._contains("message", type_name):
            known = self.registry.counts()["message"]
            logger.error(
                "Method %s references unregistered message %s", method_id, type_name
            )
            raise UnresolvedTypeError(method_id, type_name, known)
        return type_name

    # -- completion ----------------------------------------------------------

    def finish(self) -> Registry:
        """Seal the registry; the builder must not be used afterwards."""
        self.registry._seal()
        return self.registry


def _link_field_type(
    field_id: str,
    desc: descriptor_pb2.FieldDescriptorProto,
) -> tuple[str, str]:
    """Return ``(message_id, enum_id)`` referenced by a field."""
    if desc.type not in (_FieldProto.TYPE_MESSAGE, _FieldProto.TYPE_ENUM):
        return "", ""
    type_name = desc.type_name
    if not is_fully_qualified(type_name):
        # Relative names are only produced by hand-built descriptors.
        logger.warning(
            "Field %s has relative type name %r; scope search is not supported",
            field_id,
            type_name,
        )
    if desc.type == _FieldProto.TYPE_MESSAGE:
        return type_name, ""
    return "", type_name


def build_registry(
    request: plugin_pb2.CodeGeneratorRequest,
    settings: Optional[ModelSettings] = None,
) -> Registry:
    """Build the linked, sealed semantic model for a plugin request.

    Args:
        request: Decoded request from protoc.
        settings: Behavior switches; defaults to ``ModelSettings()``.

    Returns:
        Sealed Registry.

    Raises:
        UnresolvedTypeError: If a method references an unknown message.
        DuplicateIdentifierError: If two declarations share an identifier.

    Example:
        >>> registry = build_registry(request)
        >>> [m.id for m in registry.messages().to_generate().not_nested()]
        ['.pkg.Request', '.pkg.Response']
    """
    builder = RegistryBuilder(
        settings=settings,
        files_to_generate=request.file_to_generate,
        parameter=request.parameter,
    )
    with phase_scope("ingest"):
        if not request.file_to_generate:
            logger.warning("Request selects no files to generate")
        for file_proto in request.proto_file:
            builder.add_file(file_proto)
        registry = builder.finish()
        logger.info(
            "Linked %d files (%d to generate): %s",
            len(request.proto_file),
            len(registry.files_to_generate),
            ", ".join(f"{kind}={n}" for kind, n in registry.counts().items()),
        )
    return registry


def parse_request(data: bytes) -> plugin_pb2.CodeGeneratorRequest:
    """Decode a serialized ``CodeGeneratorRequest``.

    Importing this module registers the metadata extensions first, so
    they are resolved during parsing.
    """
    request = plugin_pb2.CodeGeneratorRequest()
    request.ParseFromString(data)
    return request
