"""Service and method entities."""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from google.protobuf import descriptor_pb2

from protomodel.comments import Comments
from protomodel.meta import DeclaredOptionsMixin, is_public
from protomodel.slices import MethodSlice, sorted_by_index

if TYPE_CHECKING:
    from protomodel.files import File
    from protomodel.messages import Message
    from protomodel.registry import Registry


@dataclass(frozen=True, eq=False)
class Service(DeclaredOptionsMixin):
    id: str
    idx: int
    name: str
    file_id: str
    method_ids: tuple[str, ...]
    comments: Comments
    _meta: Any = field(repr=False)
    _options: descriptor_pb2.ServiceOptions = field(repr=False)
    _registry: "Registry" = field(repr=False)

    def __str__(self) -> str:
        return self.id

    def is_visible(self) -> bool:
        """True if the file is visible and the service's own visibility
        metadata is ``PUBLIC``."""
        if not self.file().is_visible():
            return False
        return is_public(self._meta)

    def is_deprecated(self) -> bool:
        if self.file().is_deprecated():
            return True
        return self._options.deprecated

    def file(self) -> "File":
        return self._registry.file(self.file_id)

    def methods(self) -> MethodSlice:
        lookup = self._registry.method
        return MethodSlice(sorted_by_index(lookup(i) for i in self.method_ids))


@dataclass(frozen=True, eq=False)
class Method(DeclaredOptionsMixin):
    """An RPC method. Input and output types are linked at registration."""

    id: str
    idx: int
    name: str
    parent_id: str
    input_type_id: str
    output_type_id: str
    client_streaming: bool
    server_streaming: bool
    comments: Comments
    _meta: Any = field(repr=False)
    _options: descriptor_pb2.MethodOptions = field(repr=False)
    _registry: "Registry" = field(repr=False)

    def __str__(self) -> str:
        return self.id

    def is_visible(self) -> bool:
        """True if the service and both message types are visible and the
        method's own visibility metadata is ``PUBLIC``."""
        if not self.parent().is_visible():
            return False
        if not self.input_type().is_visible():
            return False
        if not self.output_type().is_visible():
            return False
        return is_public(self._meta)

    def is_deprecated(self) -> bool:
        if self.parent().is_deprecated():
            return True
        if self.input_type().is_deprecated():
            return True
        if self.output_type().is_deprecated():
            return True
        return self._options.deprecated

    def parent(self) -> Service:
        return self._registry.service(self.parent_id)

    def file(self) -> "File":
        return self.parent().file()

    def input_type(self) -> "Message":
        return self._registry.message(self.input_type_id)

    def output_type(self) -> "Message":
        return self._registry.message(self.output_type_id)
