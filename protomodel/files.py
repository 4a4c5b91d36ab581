"""File entity."""

import posixpath
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from google.protobuf import descriptor_pb2

from protomodel.comments import Comments
from protomodel.meta import DeclaredOptionsMixin, is_public
from protomodel.slices import EnumSlice, MessageSlice, ServiceSlice, sorted_by_index

if TYPE_CHECKING:
    from protomodel.registry import Registry


@dataclass(frozen=True, eq=False)
class File(DeclaredOptionsMixin):
    """A schema source file from the request.

    Attributes:
        id: ``.package:name`` identifier.
        idx: Registration order among files.
        name: File name relative to the protoc include path.
        package: Declared package, empty when the file has none.
        syntax: ``proto2``/``proto3``/``editions``.
        dependencies: Imported file names in declaration order.
        generate: True when the file is in ``file_to_generate``.
    """

    id: str
    idx: int
    name: str
    package: str
    syntax: str
    dependencies: tuple[str, ...]
    generate: bool
    comments: Comments
    _meta: Any = field(repr=False)
    _options: descriptor_pb2.FileOptions = field(repr=False)
    message_ids: tuple[str, ...]
    enum_ids: tuple[str, ...]
    service_ids: tuple[str, ...]
    _registry: "Registry" = field(repr=False)

    def __str__(self) -> str:
        return self.id

    def file(self) -> "File":
        return self

    def is_visible(self) -> bool:
        """True if the file's visibility metadata is ``PUBLIC``."""
        return is_public(self._meta)

    def is_deprecated(self) -> bool:
        """True if the file's ``deprecated`` option is set."""
        return self._options.deprecated

    def go_package_name(self) -> str:
        """Package name for importing the file from Go.

        1. ``go_package`` containing ``;``: the part after it.
        2. ``go_package`` set: its basename.
        3. Otherwise the basename of the file name.
        """
        go_package = self._options.go_package
        if not go_package:
            return posixpath.basename(self.name)
        _, sep, name = go_package.partition(";")
        if sep:
            return name
        return posixpath.basename(go_package)

    def go_package_import(self) -> str:
        """Go import path for the file's package.

        1. ``go_package`` set: the part before any ``;``.
        2. Otherwise the directory of the file name, or the name itself for
           files at the include root.
        """
        go_package = self._options.go_package
        if go_package:
            return go_package.split(";", 1)[0]
        directory = posixpath.dirname(self.name)
        return directory or self.name

    def messages(self) -> MessageSlice:
        """Top-level messages declared in this file."""
        lookup = self._registry.message
        return MessageSlice(sorted_by_index(lookup(i) for i in self.message_ids))

    def enums(self) -> EnumSlice:
        """Top-level enums declared in this file."""
        lookup = self._registry.enum
        return EnumSlice(sorted_by_index(lookup(i) for i in self.enum_ids))

    def services(self) -> ServiceSlice:
        lookup = self._registry.service
        return ServiceSlice(sorted_by_index(lookup(i) for i in self.service_ids))
