"""Message, field and oneof entities."""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Optional

from google.protobuf import descriptor_pb2

from protomodel.comments import Comments
from protomodel.config import REPEATED_PREFIX, SCALAR_TYPE_NAMES, SCALAR_TYPES_BY_NAME
from protomodel.meta import DeclaredOptionsMixin, is_public
from protomodel.slices import (
    EnumSlice,
    FieldSlice,
    MessageSlice,
    OneofSlice,
    sorted_by_index,
)

if TYPE_CHECKING:
    from protomodel.enums import Enum
    from protomodel.files import File
    from protomodel.registry import Registry

_FieldProto = descriptor_pb2.FieldDescriptorProto


def is_group_field(item: "Field") -> bool:
    return item.type == _FieldProto.TYPE_GROUP


def _field_slice(registry: "Registry", field_ids: tuple[str, ...]) -> FieldSlice:
    fields = (registry.field(i) for i in field_ids)
    return FieldSlice(sorted_by_index(f for f in fields if not is_group_field(f)))


@dataclass(frozen=True, eq=False)
class Message(DeclaredOptionsMixin):
    """A message declaration, top-level or nested."""

    id: str
    idx: int
    name: str
    file_id: str
    parent_id: str  # empty for top-level messages
    comments: Comments
    _meta: Any = field(repr=False)
    _options: descriptor_pb2.MessageOptions = field(repr=False)
    field_ids: tuple[str, ...]
    message_ids: tuple[str, ...]
    enum_ids: tuple[str, ...]
    oneof_ids: tuple[str, ...]
    reserved_ranges: tuple[tuple[int, int], ...]
    reserved_names: tuple[str, ...]
    _registry: "Registry" = field(repr=False)

    def __str__(self) -> str:
        return self.id

    def is_visible(self) -> bool:
        """True if the file and any enclosing message are visible and the
        message's own visibility metadata is ``PUBLIC``."""
        if not self.file().is_visible():
            return False
        parent = self.parent()
        if parent is not None and not parent.is_visible():
            return False
        return is_public(self._meta)

    def is_deprecated(self) -> bool:
        """True if the file or any enclosing message is deprecated, or the
        message's own ``deprecated`` option is set."""
        if self.file().is_deprecated():
            return True
        parent = self.parent()
        if parent is not None and parent.is_deprecated():
            return True
        return self._options.deprecated

    def file(self) -> "File":
        return self._registry.file(self.file_id)

    def parent(self) -> Optional["Message"]:
        """Enclosing message when nested, else None."""
        if not self.parent_id:
            return None
        return self._registry.message(self.parent_id)

    def is_nested(self) -> bool:
        return bool(self.parent_id)

    def root(self) -> "Message":
        """Outermost enclosing message, or this message if top-level."""
        current = self
        while current.parent_id:
            current = self._registry.message(current.parent_id)
        return current

    def fields(self) -> FieldSlice:
        """Fields in declaration order, excluding legacy groups."""
        return _field_slice(self._registry, self.field_ids)

    def messages(self) -> MessageSlice:
        lookup = self._registry.message
        return MessageSlice(sorted_by_index(lookup(i) for i in self.message_ids))

    def enums(self) -> EnumSlice:
        lookup = self._registry.enum
        return EnumSlice(sorted_by_index(lookup(i) for i in self.enum_ids))

    def oneofs(self) -> OneofSlice:
        lookup = self._registry.oneof
        return OneofSlice(sorted_by_index(lookup(i) for i in self.oneof_ids))


@dataclass(frozen=True, eq=False)
class Field(DeclaredOptionsMixin):
    """A message field.

    ``type_message_id``/``type_enum_id`` hold the linked type identifier for
    message- and enum-typed fields; at most one of them is non-empty.
    """

    id: str
    idx: int
    name: str
    parent_id: str
    oneof_id: str  # empty unless the field is a oneof member
    type_message_id: str
    type_enum_id: str
    number: int
    label: int
    type: int
    type_name: str
    default_value: str
    json_name: str
    comments: Comments
    _meta: Any = field(repr=False)
    _options: descriptor_pb2.FieldOptions = field(repr=False)
    _registry: "Registry" = field(repr=False)

    def __str__(self) -> str:
        return self.id

    def is_visible(self) -> bool:
        """True if the parent message and the field's type are visible and
        the field's own visibility metadata is ``PUBLIC``."""
        if not self.parent().is_visible():
            return False
        type_message = self.type_message()
        if type_message is not None and not type_message.is_visible():
            return False
        type_enum = self.type_enum()
        if type_enum is not None and not type_enum.is_visible():
            return False
        return is_public(self._meta)

    def is_deprecated(self) -> bool:
        """True if the parent message or the field's type is deprecated, or
        the field's own ``deprecated`` option is set."""
        if self.parent().is_deprecated():
            return True
        type_message = self.type_message()
        if type_message is not None and type_message.is_deprecated():
            return True
        type_enum = self.type_enum()
        if type_enum is not None and type_enum.is_deprecated():
            return True
        return self._options.deprecated

    def parent(self) -> Message:
        return self._registry.message(self.parent_id)

    def file(self) -> "File":
        return self.parent().file()

    def oneof(self) -> Optional["Oneof"]:
        if not self.oneof_id:
            return None
        return self._registry.oneof(self.oneof_id)

    def is_oneof(self) -> bool:
        return bool(self.oneof_id)

    def type_message(self) -> Optional[Message]:
        """Linked message type, or None for non-message fields."""
        if not self.type_message_id:
            return None
        return self._registry.message(self.type_message_id)

    def type_enum(self) -> Optional["Enum"]:
        """Linked enum type, or None for non-enum fields."""
        if not self.type_enum_id:
            return None
        return self._registry.enum(self.type_enum_id)

    def is_repeated(self) -> bool:
        return self.label == _FieldProto.LABEL_REPEATED

    def is_required(self) -> bool:
        return self.label == _FieldProto.LABEL_REQUIRED

    def is_type(self, name: str) -> bool:
        """Check the field type by its schema keyword, e.g. ``"string"``.

        Raises:
            ValueError: If ``name`` is not a known type keyword.
        """
        try:
            return self.type == SCALAR_TYPES_BY_NAME[name]
        except KeyError:
            raise ValueError(f"Unknown field type keyword: {name}") from None

    def is_type_message(self) -> bool:
        return self.type == _FieldProto.TYPE_MESSAGE

    def is_type_enum(self) -> bool:
        return self.type == _FieldProto.TYPE_ENUM

    def is_type_group(self) -> bool:
        return self.type == _FieldProto.TYPE_GROUP

    def scalar_type_name(self) -> str:
        """Schema keyword for the field type (``"message"`` for messages)."""
        return SCALAR_TYPE_NAMES.get(self.type, str(self.type))

    def type_name_string(self) -> str:
        """Readable type description.

        Examples::

            string, OPTIONAL        -> "string"
            string, REPEATED        -> "[]string"
            .pkg.Msg, OPTIONAL      -> "pkg.Msg"
            .pkg.Enm, REPEATED      -> "[]pkg.Enm"
        """
        if self.type_message_id:
            name = self.type_message_id.lstrip(".")
        elif self.type_enum_id:
            name = self.type_enum_id.lstrip(".")
        else:
            name = self.scalar_type_name()
        if self.is_repeated():
            return f"{REPEATED_PREFIX}{name}"
        return name


@dataclass(frozen=True, eq=False)
class Oneof(DeclaredOptionsMixin):
    """A oneof group; it owns the ordered list of its member fields."""

    id: str
    idx: int
    name: str
    parent_id: str
    field_ids: tuple[str, ...]
    comments: Comments
    _meta: Any = field(repr=False)
    _options: descriptor_pb2.OneofOptions = field(repr=False)
    _registry: "Registry" = field(repr=False)

    def __str__(self) -> str:
        return self.id

    def is_visible(self) -> bool:
        if not self.parent().is_visible():
            return False
        return is_public(self._meta)

    def is_deprecated(self) -> bool:
        # OneofOptions has no deprecated flag of its own.
        return self.parent().is_deprecated()

    def parent(self) -> Message:
        return self._registry.message(self.parent_id)

    def file(self) -> "File":
        return self.parent().file()

    def fields(self) -> FieldSlice:
        """Member fields in declaration order, excluding legacy groups."""
        return _field_slice(self._registry, self.field_ids)
