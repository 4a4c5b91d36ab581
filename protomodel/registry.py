"""
Registry: the per-request arena holding every entity of the model.

Entities keep identifiers of their relatives and resolve them through the
registry handle they were built with, so there are no object cycles. Once
``protomodel.ingest`` finishes, the registry is sealed and its maps become
read-only views; queries return tuple slices sorted by registration order.
"""

import logging
from types import MappingProxyType
from typing import Any, Iterable, Mapping, Optional

from protomodel.config import ModelSettings
from protomodel.enums import Enum, EnumValue
from protomodel.errors import DuplicateIdentifierError
from protomodel.files import File
from protomodel.messages import Field, Message, Oneof, is_group_field
from protomodel.services import Method, Service
from protomodel.slices import (
    EnumSlice,
    EnumValueSlice,
    FieldSlice,
    FileSlice,
    MessageSlice,
    MethodSlice,
    OneofSlice,
    ServiceSlice,
    sorted_by_index,
)

logger = logging.getLogger(__name__)

ENTITY_KINDS = (
    "file",
    "message",
    "field",
    "oneof",
    "enum",
    "enum_value",
    "service",
    "method",
)


class Registry:
    """Read-only query facade over one linked request."""

    def __init__(
        self,
        settings: Optional[ModelSettings] = None,
        files_to_generate: Iterable[str] = (),
        parameter: str = "",
    ) -> None:
        self._settings = settings or ModelSettings()
        self._files_to_generate = frozenset(files_to_generate)
        self._parameter = parameter
        self._entities: dict[str, Mapping[str, Any]] = {kind: {} for kind in ENTITY_KINDS}
        self._sealed = False

    # -- construction (used by protomodel.ingest) ---------------------------

    def _register(self, kind: str, entity: Any) -> str:
        if self._sealed:
            raise RuntimeError("Registry is sealed; entities cannot be added")
        bucket = self._entities[kind]
        if entity.id in bucket:
            raise DuplicateIdentifierError(kind, entity.id)
        bucket[entity.id] = entity  # type: ignore[index]
        return entity.id

    def _contains(self, kind: str, identifier: str) -> bool:
        return identifier in self._entities[kind]

    def _seal(self) -> None:
        self._entities = {
            kind: MappingProxyType(bucket) for kind, bucket in self._entities.items()
        }
        self._sealed = True

    # -- request-level properties ------------------------------------------

    @property
    def settings(self) -> ModelSettings:
        return self._settings

    @property
    def files_to_generate(self) -> frozenset[str]:
        return self._files_to_generate

    @property
    def parameter(self) -> str:
        """Raw plugin parameter string from the request."""
        return self._parameter

    @property
    def sealed(self) -> bool:
        return self._sealed

    def counts(self) -> dict[str, int]:
        """Number of registered entities per kind."""
        return {kind: len(bucket) for kind, bucket in self._entities.items()}

    # -- O(1) lookups --------------------------------------------------------

    def file(self, identifier: str) -> Optional[File]:
        return self._entities["file"].get(identifier)

    def message(self, identifier: str) -> Optional[Message]:
        return self._entities["message"].get(identifier)

    def field(self, identifier: str) -> Optional[Field]:
        return self._entities["field"].get(identifier)

    def oneof(self, identifier: str) -> Optional[Oneof]:
        return self._entities["oneof"].get(identifier)

    def enum(self, identifier: str) -> Optional[Enum]:
        return self._entities["enum"].get(identifier)

    def enum_value(self, identifier: str) -> Optional[EnumValue]:
        return self._entities["enum_value"].get(identifier)

    def service(self, identifier: str) -> Optional[Service]:
        return self._entities["service"].get(identifier)

    def method(self, identifier: str) -> Optional[Method]:
        return self._entities["method"].get(identifier)

    # -- ordered queries -----------------------------------------------------

    def _ordered(self, kind: str) -> list[Any]:
        return sorted_by_index(self._entities[kind].values())

    def files(self) -> FileSlice:
        return FileSlice(self._ordered("file"))

    def messages(self) -> MessageSlice:
        return MessageSlice(self._ordered("message"))

    def fields(self) -> FieldSlice:
        """All fields in registration order. Legacy group fields are never
        returned, whatever filters are applied afterwards."""
        return FieldSlice(f for f in self._ordered("field") if not is_group_field(f))

    def oneofs(self) -> OneofSlice:
        return OneofSlice(self._ordered("oneof"))

    def enums(self) -> EnumSlice:
        return EnumSlice(self._ordered("enum"))

    def enum_values(self) -> EnumValueSlice:
        return EnumValueSlice(self._ordered("enum_value"))

    def services(self) -> ServiceSlice:
        return ServiceSlice(self._ordered("service"))

    def methods(self) -> MethodSlice:
        return MethodSlice(self._ordered("method"))

    def packages_to_generate(self) -> tuple[str, ...]:
        """Distinct packages of the files selected for generation, in file
        order."""
        return self.files().to_generate().packages()

    def __repr__(self) -> str:
        counts = ", ".join(f"{kind}={count}" for kind, count in self.counts().items())
        return f"Registry({counts}, sealed={self._sealed})"
