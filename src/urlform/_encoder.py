"""Encoder: write a value as a pair stream.

Dispatch is driven by the runtime shape of the value:
- top level: a struct (dataclass with fields, NamedTuple), a mapping, an
  iterable of (key, value) tuples, or None for no pairs
- key: a scalar, an Enum member (its name) or a unit struct (its class name)
- value: None writes nothing, a scalar/Enum member/unit struct writes one
  pair, a sequence writes one pair per element under the same key

Keys go through a pending slot that the next value consumes, so a map can
also be written one key() and value() at a time.
"""

from __future__ import annotations

import dataclasses
import enum
from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING, Any

from structlog import get_logger

from urlform._config import EncodeOptions
from urlform._errors import (
    NoKeyError,
    TopLevelError,
    UnsupportedKeyError,
    UnsupportedPairError,
    UnsupportedValueError,
)
from urlform._pairs import FormSink
from urlform._registry import DEFAULT_REGISTRY
from urlform._shapes import is_unit_struct

if TYPE_CHECKING:
    from urlform._registry import Registry
    from urlform._types import PairSink

logger = get_logger()

_TEXT_TYPES = (str, bytes, bytearray, memoryview)


class Encoder:
    """Write values into one PairSink.

    Without an explicit sink, pairs go to a FormSink built from the options
    and finish() returns the encoded string.
    """

    def __init__(
        self,
        sink: PairSink | None = None,
        *,
        options: EncodeOptions | None = None,
        registry: Registry | None = None,
    ) -> None:
        options = options or EncodeOptions()
        self._sink: PairSink = sink if sink is not None else FormSink(options)
        self._registry = registry or DEFAULT_REGISTRY
        self._pending: str | None = None
        self.log = logger.new()

    def encode(self, value: Any) -> None:
        """Write a top-level value.

        Raises:
            TopLevelError: value is a scalar, text, Enum member, unit struct,
                plain tuple, or a sequence of scalars
            CodecError: any failure while writing its pairs
        """
        match value:
            case None:
                return
            case enum.Enum() | str() | bytes() | bytearray() | memoryview():
                raise TopLevelError(_type_name(value))
            case Mapping():
                for key, item in value.items():
                    self.entry(key, item)
            case _ if _is_struct(value):
                for name, item in _struct_items(value):
                    self.entry(name, item)
            case tuple():
                raise TopLevelError(_type_name(value))
            case Iterable() if not is_unit_struct(value):
                for item in value:
                    self.pair(item)
            case _:
                raise TopLevelError(_type_name(value))

    def finish(self) -> str:
        """Render everything written so far."""
        return self._sink.finish()

    # ── Pair protocol ──────────────────────────────────────────────────────

    def key(self, key: Any) -> None:
        """Set the pending key.

        Raises:
            UnsupportedKeyError: key is not a scalar, Enum member or unit struct
        """
        text = self._scalar_text(key)
        if text is None:
            self._pending = None
            raise UnsupportedKeyError(_type_name(key))
        self._pending = text

    def value(self, value: Any) -> None:
        """Write value under the pending key and clear it.

        Raises:
            NoKeyError: no key is pending
            UnsupportedValueError: value is a map, struct or nested sequence
        """
        if self._pending is None:
            raise NoKeyError()
        key, self._pending = self._pending, None
        self._write(key, value)

    def entry(self, key: Any, value: Any) -> None:
        """Write one map entry."""
        self.key(key)
        self.value(value)

    def pair(self, item: Any) -> None:
        """Write one element of a top-level sequence.

        None elements are skipped; anything else must be a 2-tuple.

        Raises:
            TopLevelError: item is a scalar, so the sequence is not one of pairs
            UnsupportedPairError: item is a container but not a (key, value) tuple
        """
        if item is None:
            return
        if not isinstance(item, tuple):
            if isinstance(item, Mapping) or _is_struct(item) or _is_sequence(item):
                raise UnsupportedPairError(_type_name(item))
            raise TopLevelError(f"sequence of {_type_name(item)}")
        if len(item) != 2:
            raise UnsupportedPairError(_type_name(item))
        key, value = item
        self.entry(key, value)

    # ── Private writing methods ────────────────────────────────────────────

    def _write(self, key: str, value: Any) -> None:
        if value is None:
            self.log.debug("skipping empty value", key=key)
            return

        text = self._scalar_text(value)
        if text is not None:
            self._sink.append(key, text)
            return

        if not _is_sequence(value):
            raise UnsupportedValueError(key, _type_name(value))
        for element in value:
            if element is None:
                continue
            element_text = self._scalar_text(element)
            if element_text is None:
                raise UnsupportedValueError(key, f"nested {_type_name(element)}")
            self._sink.append(key, element_text)

    def _scalar_text(self, value: Any) -> str | None:
        """Text of a scalar, Enum member or unit struct; None for anything else."""
        if isinstance(value, enum.Enum):
            return value.name
        if is_unit_struct(value):
            return type(value).__name__
        if isinstance(value, memoryview):
            value = bytes(value)
        return self._registry.format(value)


def _is_named_tuple(value: Any) -> bool:
    return isinstance(value, tuple) and hasattr(type(value), "_fields")


def _is_struct(value: Any) -> bool:
    if _is_named_tuple(value):
        return True
    return (
        dataclasses.is_dataclass(value)
        and not isinstance(value, type)
        and bool(dataclasses.fields(value))
    )


def _struct_items(value: Any) -> list[tuple[str, Any]]:
    if _is_named_tuple(value):
        return list(zip(type(value)._fields, value, strict=True))
    return [(f.name, getattr(value, f.name)) for f in dataclasses.fields(value)]


def _is_sequence(value: Any) -> bool:
    if isinstance(value, (*_TEXT_TYPES, Mapping)) or _is_struct(value):
        return False
    return isinstance(value, Iterable)


def _type_name(value: Any) -> str:
    return type(value).__name__


def encode(
    value: Any,
    *,
    options: EncodeOptions | None = None,
    registry: Registry | None = None,
) -> str:
    """Encode a value as an application/x-www-form-urlencoded string.

    >>> encode([("first", 23), ("middle", None), ("last", 42)])
    'first=23&last=42'

    Raises:
        CodecError: The value has no flat pair representation.
    """
    encoder = Encoder(options=options, registry=registry)
    encoder.encode(value)
    return encoder.finish()
