"""Enum and enum value entities."""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Optional

from google.protobuf import descriptor_pb2

from protomodel.comments import Comments
from protomodel.meta import DeclaredOptionsMixin, is_public
from protomodel.slices import EnumValueSlice, sorted_by_index

if TYPE_CHECKING:
    from protomodel.files import File
    from protomodel.messages import Message
    from protomodel.registry import Registry


@dataclass(frozen=True, eq=False)
class Enum(DeclaredOptionsMixin):
    """An enum declaration, top-level or nested in a message."""

    id: str
    idx: int
    name: str
    file_id: str
    parent_id: str  # empty for top-level enums
    value_ids: tuple[str, ...]
    comments: Comments
    _meta: Any = field(repr=False)
    _options: descriptor_pb2.EnumOptions = field(repr=False)
    _registry: "Registry" = field(repr=False)

    def __str__(self) -> str:
        return self.id

    def is_visible(self) -> bool:
        """True if the file and any enclosing message are visible and the
        enum's own visibility metadata is ``PUBLIC``."""
        if not self.file().is_visible():
            return False
        parent = self.parent()
        if parent is not None and not parent.is_visible():
            return False
        return is_public(self._meta)

    def is_deprecated(self) -> bool:
        """True if the file or any enclosing message is deprecated, or the
        enum's own ``deprecated`` option is set.

        With ``ModelSettings.legacy_enum_deprecation`` the historical check is
        used instead, where a *visible* file or parent marks the enum as
        deprecated.
        """
        if self._registry.settings.legacy_enum_deprecation:
            return self._legacy_is_deprecated()
        if self.file().is_deprecated():
            return True
        parent = self.parent()
        if parent is not None and parent.is_deprecated():
            return True
        return self._options.deprecated

    def _legacy_is_deprecated(self) -> bool:
        if self.file().is_visible():
            return True
        parent = self.parent()
        if parent is not None and parent.is_visible():
            return True
        return self._options.deprecated

    def file(self) -> "File":
        return self._registry.file(self.file_id)

    def parent(self) -> Optional["Message"]:
        if not self.parent_id:
            return None
        return self._registry.message(self.parent_id)

    def is_nested(self) -> bool:
        return bool(self.parent_id)

    def values(self) -> EnumValueSlice:
        lookup = self._registry.enum_value
        return EnumValueSlice(sorted_by_index(lookup(i) for i in self.value_ids))


@dataclass(frozen=True, eq=False)
class EnumValue(DeclaredOptionsMixin):
    id: str
    idx: int
    name: str
    number: int
    parent_id: str
    comments: Comments
    _meta: Any = field(repr=False)
    _options: descriptor_pb2.EnumValueOptions = field(repr=False)
    _registry: "Registry" = field(repr=False)

    def __str__(self) -> str:
        return self.id

    def is_visible(self) -> bool:
        if not self.parent().is_visible():
            return False
        return is_public(self._meta)

    def is_deprecated(self) -> bool:
        if self.parent().is_deprecated():
            return True
        return self._options.deprecated

    def parent(self) -> Enum:
        return self._registry.enum(self.parent_id)

    def file(self) -> "File":
        return self.parent().file()
