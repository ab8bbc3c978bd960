"""Shape model: how the codec sees a type annotation.

The decoder never inspects the input to decide what to build; it asks the
target annotation for its shape and dispatches on it. Every annotation maps
to exactly one variant of the Shape union:

| Annotation                                  | Shape          |
|---------------------------------------------|----------------|
| None, NoneType                              | UnitShape      |
| Any, object                                 | AnyShape       |
| registered scalar (int, str, Char, UUID...) | ScalarShape    |
| Optional[X]                                 | OptionShape    |
| Enum subclass                               | EnumShape      |
| Literal[...]                                | LiteralShape   |
| union of struct classes                     | VariantShape   |
| list[X], tuple[X, ...], set[X], Sequence[X] | SequenceShape  |
| tuple[K, V], NamedTuple item                | TupleShape     |
| dict[K, V], Mapping[K, V]                   | MapShape       |
| dataclass, TypedDict, top-level NamedTuple  | StructShape    |

``type`` aliases, NewTypes without a registered conversion and Annotated
are unwrapped. Anything else raises UnsupportedTypeError.
"""

from __future__ import annotations

import collections.abc
import dataclasses
import enum
import types
import typing
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Literal

from urlform._errors import UnsupportedTypeError

if TYPE_CHECKING:
    from urlform._registry import Registry

type StructKind = Literal["dataclass", "typeddict", "namedtuple"]


@dataclass(frozen=True, slots=True)
class UnitShape:
    """The empty value: decodes only from zero pairs."""


@dataclass(frozen=True, slots=True)
class AnyShape:
    """No declared type; text passes through unchanged."""


@dataclass(frozen=True, slots=True)
class ScalarShape:
    """A type with a registered text conversion."""

    tp: Any


@dataclass(frozen=True, slots=True)
class OptionShape:
    """An optional value. Presence on the wire always means "some"."""

    inner: Shape


@dataclass(frozen=True, slots=True)
class EnumShape:
    """An Enum whose members are written as their names."""

    tp: type[enum.Enum]


@dataclass(frozen=True, slots=True)
class LiteralShape:
    """A closed set of literal values."""

    values: tuple[Any, ...]


@dataclass(frozen=True, slots=True)
class VariantShape:
    """A union of data-carrying classes. Never representable as one value."""

    members: tuple[Any, ...]


@dataclass(frozen=True, slots=True)
class SequenceShape:
    """A homogeneous collection; built as container from decoded items."""

    item: Shape
    container: type = list


@dataclass(frozen=True, slots=True)
class TupleShape:
    """A fixed-length tuple; tp is the NamedTuple class when there is one."""

    items: tuple[Shape, ...]
    tp: type = tuple

    def build(self, values: list[Any]) -> Any:
        if self.tp is tuple:
            return tuple(values)
        return self.tp(*values)


@dataclass(frozen=True, slots=True)
class MapShape:
    """A mapping from decoded keys to decoded values."""

    key: Shape
    value: Shape


@dataclass(frozen=True, slots=True)
class FieldShape:
    """One named field of a struct.

    has_default is True when the struct fills the field itself when absent
    (a dataclass default, or a non-required TypedDict key).
    """

    name: str
    shape: Shape
    has_default: bool = False


@dataclass(frozen=True, slots=True)
class StructShape:
    """A dataclass, TypedDict or NamedTuple with named fields."""

    tp: type
    kind: StructKind
    fields: tuple[FieldShape, ...]

    def field(self, name: str) -> FieldShape | None:
        for f in self.fields:
            if f.name == name:
                return f
        return None

    def build(self, values: dict[str, Any]) -> Any:
        if self.kind == "typeddict":
            return dict(values)
        return self.tp(**values)


type Shape = (
    UnitShape
    | AnyShape
    | ScalarShape
    | OptionShape
    | EnumShape
    | LiteralShape
    | VariantShape
    | SequenceShape
    | TupleShape
    | MapShape
    | StructShape
)

_SEQUENCE_ORIGINS: dict[Any, type] = {
    list: list,
    collections.abc.Sequence: list,
    collections.abc.MutableSequence: list,
    collections.abc.Collection: list,
    collections.abc.Iterable: list,
    set: set,
    collections.abc.Set: frozenset,
    collections.abc.MutableSet: set,
    frozenset: frozenset,
}

_MAP_ORIGINS = frozenset({dict, collections.abc.Mapping, collections.abc.MutableMapping})


def shape_of(tp: Any, registry: Registry) -> Shape:
    """Describe a type annotation as a Shape.

    Raises:
        UnsupportedTypeError: The annotation has no shape.
    """
    return _describe(tp, registry, set())


def named_tuple_struct(shape: TupleShape) -> StructShape:
    """The named-field view of a NamedTuple shape.

    A NamedTuple is written as its fields at the top level, so it is read
    back field by field there. Fields with a class default may be absent.
    """
    defaults = shape.tp._field_defaults
    fields = tuple(
        FieldShape(name=name, shape=item, has_default=name in defaults)
        for name, item in zip(shape.tp._fields, shape.items, strict=True)
    )
    return StructShape(shape.tp, "namedtuple", fields)


def is_unit_struct(value: Any) -> bool:
    """True for dataclass instances without fields."""
    return (
        dataclasses.is_dataclass(value)
        and not isinstance(value, type)
        and not dataclasses.fields(value)
    )


def _describe(tp: Any, registry: Registry, building: set[Any]) -> Shape:
    if tp is None or tp is types.NoneType:
        return UnitShape()
    if tp is Any or tp is object:
        return AnyShape()
    if isinstance(tp, typing.TypeAliasType):
        return _describe(tp.__value__, registry, building)
    if registry.contains(tp):
        return ScalarShape(tp)
    if isinstance(tp, typing.NewType):
        return _describe(tp.__supertype__, registry, building)

    origin = typing.get_origin(tp)
    args = typing.get_args(tp)

    if origin is typing.Annotated:
        return _describe(args[0], registry, building)
    if origin is Literal:
        return LiteralShape(args)
    if origin is typing.Union or origin is types.UnionType:
        return _describe_union(tp, args, registry, building)
    if isinstance(origin, typing.TypeAliasType):
        return _describe(origin.__value__[args], registry, building)

    if isinstance(tp, type):
        if issubclass(tp, enum.Enum):
            return EnumShape(tp)
        if dataclasses.is_dataclass(tp):
            return _describe_dataclass(tp, registry, building)
        if typing.is_typeddict(tp):
            return _describe_typeddict(tp, registry, building)
        if issubclass(tp, tuple) and hasattr(tp, "_fields"):
            hints = typing.get_type_hints(tp, include_extras=True)
            items = tuple(
                _describe(hints.get(name, Any), registry, building) for name in tp._fields
            )
            return TupleShape(items, tp)

    if origin is tuple or tp is tuple:
        if not args:
            return SequenceShape(AnyShape(), tuple)
        if len(args) == 2 and args[1] is Ellipsis:
            return SequenceShape(_describe(args[0], registry, building), tuple)
        return TupleShape(tuple(_describe(a, registry, building) for a in args))

    container = _SEQUENCE_ORIGINS.get(origin if origin is not None else tp)
    if container is not None:
        item = _describe(args[0], registry, building) if args else AnyShape()
        return SequenceShape(item, container)

    if (origin if origin is not None else tp) in _MAP_ORIGINS:
        if args:
            key, value = args
            return MapShape(
                _describe(key, registry, building), _describe(value, registry, building)
            )
        return MapShape(AnyShape(), AnyShape())

    raise UnsupportedTypeError(tp, registry.scalar_names())


def _describe_union(
    tp: Any, args: tuple[Any, ...], registry: Registry, building: set[Any]
) -> Shape:
    members = tuple(a for a in args if a is not types.NoneType)
    if len(members) < len(args):
        inner = members[0] if len(members) == 1 else typing.Union[members]  # noqa: UP007
        return OptionShape(_describe(inner, registry, building))
    if all(_is_struct_class(m) for m in members):
        return VariantShape(members)
    raise UnsupportedTypeError(tp, registry.scalar_names())


def _is_struct_class(tp: Any) -> bool:
    return isinstance(tp, type) and (
        dataclasses.is_dataclass(tp)
        or typing.is_typeddict(tp)
        or (issubclass(tp, tuple) and hasattr(tp, "_fields"))
    )


def _describe_dataclass(tp: type, registry: Registry, building: set[Any]) -> StructShape:
    if tp in building:
        # Recursive reference; a nested struct is never read field by field.
        return StructShape(tp, "dataclass", ())
    building.add(tp)
    try:
        hints = typing.get_type_hints(tp, include_extras=True)
        fields = tuple(
            FieldShape(
                name=f.name,
                shape=_describe(hints.get(f.name, Any), registry, building),
                has_default=(
                    f.default is not dataclasses.MISSING
                    or f.default_factory is not dataclasses.MISSING
                ),
            )
            for f in dataclasses.fields(tp)
            if f.init
        )
    finally:
        building.discard(tp)
    return StructShape(tp, "dataclass", fields)


def _describe_typeddict(tp: type, registry: Registry, building: set[Any]) -> StructShape:
    if tp in building:
        return StructShape(tp, "typeddict", ())
    building.add(tp)
    try:
        hints = typing.get_type_hints(tp)
        required = getattr(tp, "__required_keys__", frozenset(hints))
        fields = tuple(
            FieldShape(
                name=name,
                shape=_describe(hint, registry, building),
                has_default=name not in required,
            )
            for name, hint in hints.items()
        )
    finally:
        building.discard(tp)
    return StructShape(tp, "typeddict", fields)
