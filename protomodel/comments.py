"""
Source comment mapping keyed by structural path.

``SourceCodeInfo.location`` entries identify declarations by a vector of
field numbers and indexes into the serialized ``FileDescriptorProto``.
Ingest recomputes the same vector while it descends and looks it up here.
"""

from dataclasses import dataclass
from typing import Iterable, Mapping

from google.protobuf import descriptor_pb2

from protomodel.config import PATH_SEPARATOR


@dataclass(frozen=True)
class Comments:
    """Comments attached to one declaration."""

    leading: str = ""
    trailing: str = ""
    leading_detached: tuple[str, ...] = ()

    def __str__(self) -> str:
        return self.leading

    def is_empty(self) -> bool:
        return not (self.leading or self.trailing or self.leading_detached)


EMPTY_COMMENTS = Comments()


def join_path(parts: Iterable[int]) -> str:
    """Render a path vector in its canonical comma-joined form."""
    return PATH_SEPARATOR.join(str(part) for part in parts)


def child_path(path: str, field_number: int, index: int) -> str:
    """Extend ``path`` with a repeated-field element."""
    if not path:
        return f"{field_number}{PATH_SEPARATOR}{index}"
    return f"{path}{PATH_SEPARATOR}{field_number}{PATH_SEPARATOR}{index}"


def build_comment_index(
    source_code_info: descriptor_pb2.SourceCodeInfo,
) -> dict[str, Comments]:
    """Index a file's comment locations by joined path.

    Locations without any comment text are skipped. When a path appears more
    than once, the first location carrying comments wins.
    """
    index: dict[str, Comments] = {}
    for location in source_code_info.location:
        comments = Comments(
            leading=location.leading_comments,
            trailing=location.trailing_comments,
            leading_detached=tuple(location.leading_detached_comments),
        )
        if comments.is_empty():
            continue
        index.setdefault(join_path(location.path), comments)
    return index


def lookup_comments(index: Mapping[str, Comments], path: str) -> Comments:
    """Return the comments at ``path``; a miss is an empty record."""
    return index.get(path, EMPTY_COMMENTS)
