"""
Immutable, chainable entity sequences returned by every query.

Slices are tuples, so callers receive value copies and can never reach the
registry's internal maps. Filters return a new slice of the same type::

    registry.messages().to_generate().not_nested().visible()
"""

from typing import Any, Callable, Iterable, TypeVar

S = TypeVar("S", bound="EntitySlice")


class EntitySlice(tuple):
    """Ordered tuple of entities with composable filters."""

    __slots__ = ()

    def __new__(cls, items: Iterable[Any] = ()):
        return super().__new__(cls, items)

    def where(self: S, predicate: Callable[[Any], bool]) -> S:
        """Keep entities for which ``predicate`` returns True."""
        return type(self)(item for item in self if predicate(item))

    def visible(self: S) -> S:
        """Keep entities whose computed visibility is true."""
        return self.where(lambda item: item.is_visible())

    def not_deprecated(self: S) -> S:
        """Keep entities that are not deprecated, directly or by inheritance."""
        return self.where(lambda item: not item.is_deprecated())

    def to_generate(self: S) -> S:
        """Keep entities declared in files selected for generation."""
        return self.where(lambda item: item.file().generate)

    def ids(self) -> tuple[str, ...]:
        return tuple(item.id for item in self)

    def names(self) -> tuple[str, ...]:
        return tuple(item.name for item in self)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({list(self.ids())!r})"


class NestableSlice(EntitySlice):
    """Slice of declarations that may be nested inside a message."""

    __slots__ = ()

    def not_nested(self: S) -> S:
        """Keep top-level declarations only."""
        return self.where(lambda item: not item.is_nested())


class FileSlice(EntitySlice):
    __slots__ = ()

    def to_generate(self: S) -> S:
        return self.where(lambda item: item.generate)

    def packages(self) -> tuple[str, ...]:
        """Distinct package names in slice order."""
        return tuple(dict.fromkeys(item.package for item in self))


class MessageSlice(NestableSlice):
    __slots__ = ()


class EnumSlice(NestableSlice):
    __slots__ = ()


class FieldSlice(EntitySlice):
    __slots__ = ()


class EnumValueSlice(EntitySlice):
    __slots__ = ()


class OneofSlice(EntitySlice):
    __slots__ = ()


class ServiceSlice(EntitySlice):
    __slots__ = ()


class MethodSlice(EntitySlice):
    __slots__ = ()


def sorted_by_index(items: Iterable[Any]) -> list[Any]:
    """Sort entities by their registration counter."""
    return sorted(items, key=lambda item: item.idx)
