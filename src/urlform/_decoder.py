"""Decoder: build a typed value from a pair stream.

Dispatch is driven by the target's Shape, never by the input:
- StructShape / MapShape (and a NamedTuple, read as a struct): each pair is a key then a value; a value whose
  target is a sequence is appended to that key's group, every other value
  is taken exactly once (see DecodeOptions.duplicates)
- SequenceShape of 2-tuples: each pair becomes one tuple, never grouped
- UnitShape: the stream must be empty
- OptionShape: always "some"; only an absent key means None

A failure while parsing a value is reported with the key it belongs to:
``failed to parse value for key 'second': invalid digit found in string``.
"""

from __future__ import annotations

import enum
from typing import TYPE_CHECKING, Any

from structlog import get_logger

from urlform._config import DecodeOptions
from urlform._errors import (
    DuplicateKeyError,
    InvalidLengthError,
    MissingFieldError,
    ParseError,
    TopLevelError,
    UnitVariantError,
    UnsupportedKeyError,
    UnsupportedValueError,
)
from urlform._pairs import QueryPairs
from urlform._registry import DEFAULT_REGISTRY
from urlform._shapes import (
    AnyShape,
    EnumShape,
    LiteralShape,
    MapShape,
    OptionShape,
    ScalarShape,
    SequenceShape,
    StructShape,
    TupleShape,
    UnitShape,
    VariantShape,
    named_tuple_struct,
    shape_of,
)

if TYPE_CHECKING:
    from collections.abc import Iterator

    from urlform._pairs import Part
    from urlform._registry import Registry
    from urlform._shapes import Shape
    from urlform._types import PairSource

logger = get_logger()


class Decoder:
    """Decode one pair stream into one value.

    A Decoder wraps a single PairSource and is used for a single decode()
    call; the source is consumed as it goes.
    """

    def __init__(
        self,
        source: PairSource,
        *,
        options: DecodeOptions | None = None,
        registry: Registry | None = None,
    ) -> None:
        self._pairs: Iterator[tuple[Part, Part]] = iter(source)
        self._consumed = 0
        self._options = options or DecodeOptions()
        self._registry = registry or DEFAULT_REGISTRY
        self.log = logger.new()

    def decode(self, into: Any) -> Any:
        """Decode the whole stream into the annotation ``into``.

        Raises:
            TopLevelError: into is not a struct, map, sequence of pairs or None
            UnsupportedTypeError: into (or a part of it) has no shape
            CodecError: any failure while decoding pairs
        """
        shape = shape_of(into, self._registry)
        while isinstance(shape, OptionShape):
            shape = shape.inner

        match shape:
            case StructShape():
                return self.decode_struct(shape)
            case TupleShape(tp=tp) if tp is not tuple:
                return self.decode_struct(named_tuple_struct(shape))
            case MapShape():
                return self.decode_map(shape)
            case SequenceShape(item=TupleShape() as item):
                return self.decode_pairs(shape, item)
            case SequenceShape(item=AnyShape()):
                return self.decode_pairs(shape, TupleShape((AnyShape(), AnyShape())))
            case UnitShape():
                self.decode_unit()
                return None
        raise TopLevelError(_describe_target(into))

    # ── Top-level shapes ───────────────────────────────────────────────────

    def decode_unit(self) -> None:
        """Require an exhausted stream.

        Raises:
            InvalidLengthError: with the total number of pairs in the stream
        """
        remaining = sum(1 for _ in self._pairs)
        if remaining:
            raise InvalidLengthError(self._consumed + remaining, "0 elements in sequence")

    def decode_pairs(self, shape: SequenceShape, item: TupleShape) -> Any:
        """Decode every pair into one 2-tuple, preserving repeats and order."""
        if len(item.items) != 2:
            raise InvalidLengthError(len(item.items), "a pair of values")
        key_shape, value_shape = item.items
        items = [
            item.build([self._key(key_shape, key), self._value(value_shape, key, value)])
            for key, value in self._next_pairs()
        ]
        return items if shape.container is list else shape.container(items)

    def decode_map(self, shape: MapShape) -> dict[Any, Any]:
        """Decode pairs into a dict, grouping keys whose value is a sequence."""
        result: dict[Any, Any] = {}
        for key, value in self._next_pairs():
            self._accept(result, self._key(shape.key, key), shape.value, key, value)
        return {k: _finish(shape.value, v) for k, v in result.items()}

    def decode_struct(self, shape: StructShape) -> Any:
        """Decode pairs into the fields of a dataclass, TypedDict or NamedTuple.

        Keys that name no field are skipped.
        """
        values: dict[str, Any] = {}
        for key, value in self._next_pairs():
            field = shape.field(key.text)
            if field is None:
                self.log.debug(
                    "skipping unknown field", struct=shape.tp.__name__, key=key.text
                )
                continue
            self._accept(values, field.name, field.shape, key, value)

        kwargs: dict[str, Any] = {}
        for field in shape.fields:
            if field.name in values:
                kwargs[field.name] = _finish(field.shape, values[field.name])
            elif field.has_default:
                continue
            elif isinstance(field.shape, OptionShape):
                kwargs[field.name] = None
            elif isinstance(field.shape, SequenceShape):
                kwargs[field.name] = field.shape.container()
            else:
                raise MissingFieldError(field.name)
        return shape.build(kwargs)

    # ── Pair-level helpers ─────────────────────────────────────────────────

    def _next_pairs(self) -> Iterator[tuple[Part, Part]]:
        for pair in self._pairs:
            self._consumed += 1
            yield pair

    def _accept(
        self, into: dict[Any, Any], slot: Any, shape: Shape, key: Part, value: Part
    ) -> None:
        """Store one value under slot, grouping or applying the duplicate policy."""
        group = _group_shape(shape)
        if group is not None:
            into.setdefault(slot, []).append(self._value(group.item, key, value))
            return

        if slot in into:
            match self._options.duplicates:
                case "first":
                    self.log.debug("keeping first occurrence", key=key.text)
                    return
                case "last":
                    self.log.debug("keeping last occurrence", key=key.text)
                case _:
                    raise DuplicateKeyError(key.text)
        into[slot] = self._value(shape, key, value)

    def _key(self, shape: Shape, key: Part) -> Any:
        """Decode a map key or pair key, reporting parse failures as key failures."""
        match shape:
            case OptionShape(inner=inner):
                return self._key(inner, key)
            case AnyShape() | ScalarShape() | EnumShape() | LiteralShape():
                try:
                    return self._visit(shape, key, key.text)
                except ParseError as e:
                    raise ParseError(e.reason, key=key.text, part="key") from e
        raise UnsupportedKeyError(type(shape).__name__)

    def _value(self, shape: Shape, key: Part, value: Part) -> Any:
        """Decode a single value, attaching the key to parse failures."""
        try:
            return self._visit(shape, key, value.text)
        except ParseError as e:
            raise ParseError(e.reason, key=key.text) from e

    def _visit(self, shape: Shape, key: Part, text: str) -> Any:
        match shape:
            case AnyShape():
                return text
            case ScalarShape(tp=tp):
                return self._registry.parse(tp, text)
            case OptionShape(inner=inner):
                return self._visit(inner, key, text)
            case EnumShape(tp=tp):
                return _enum_member(tp, text)
            case LiteralShape(values=values):
                return self._literal(values, text)
            case VariantShape(members=members):
                found = " | ".join(m.__name__ for m in members)
                raise UnitVariantError(key.text, found)
        raise UnsupportedValueError(key.text, _shape_name(shape))

    def _literal(self, values: tuple[Any, ...], text: str) -> Any:
        for candidate in values:
            if _literal_text(candidate, self._registry) == text:
                return candidate
        expected = ", ".join(f"`{_literal_text(v, self._registry)}`" for v in values)
        msg = f"unknown variant `{text}`, expected one of {expected}"
        raise ParseError(msg)


def _enum_member(tp: Any, text: str) -> Any:
    try:
        return tp[text]
    except KeyError:
        expected = ", ".join(f"`{name}`" for name in tp.__members__)
        msg = f"unknown variant `{text}`, expected one of {expected}"
        raise ParseError(msg) from None


def _literal_text(value: Any, registry: Registry) -> str | None:
    if isinstance(value, enum.Enum):
        return value.name
    return registry.format(value)


def _group_shape(shape: Shape) -> SequenceShape | None:
    """The sequence shape a value is grouped into, looking through options."""
    while isinstance(shape, OptionShape):
        shape = shape.inner
    return shape if isinstance(shape, SequenceShape) else None


def _finish(shape: Shape, value: Any) -> Any:
    """Turn a collected group into the field's container type."""
    group = _group_shape(shape)
    if group is None or group.container is list:
        return value
    return group.container(value)


def _shape_name(shape: Shape) -> str:
    match shape:
        case SequenceShape():
            return "nested sequence"
        case MapShape():
            return "nested map"
        case StructShape(tp=tp):
            return f"nested struct {tp.__name__}"
        case TupleShape():
            return "tuple"
        case UnitShape():
            return "unit"
    return type(shape).__name__


def _describe_target(into: Any) -> str:
    return getattr(into, "__name__", None) or repr(into)


def decode(
    data: bytes | str,
    into: Any = list[tuple[str, str]],
    *,
    options: DecodeOptions | None = None,
    registry: Registry | None = None,
) -> Any:
    """Decode an application/x-www-form-urlencoded string or bytes.

    ``into`` is the annotation to build: a dataclass, TypedDict, NamedTuple,
    ``dict[K, V]``, ``list[tuple[K, V]]`` or ``None``. The default keeps
    every pair as a ``(str, str)`` tuple.

    >>> decode("first=23&last=42", list[tuple[str, int]])
    [('first', 23), ('last', 42)]

    Raises:
        CodecError: The input does not decode into ``into``.
    """
    options = options or DecodeOptions()
    source = QueryPairs(data, options)
    return Decoder(source, options=options, registry=registry).decode(into)
