"""Scalar registry: the type conversions the codec knows about.

Architecture:
- RegistryBuilder → .build() → Registry (immutable)
- A conversion is a pair of plain callables: parse(text) and format(value)
- The shape model asks contains(tp); the decoder asks parse(tp, text);
  the encoder asks format(value)

Example::

    builder = register_builtin_scalars(RegistryBuilder())
    builder.scalar(IPv4Address, IPv4Address, str)
    registry = builder.build()

    decode("host=10.0.0.1", dict[str, IPv4Address], registry=registry)
"""

from __future__ import annotations

import datetime
import decimal
import uuid
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from urlform import _scalars
from urlform._errors import ParseError, UnsupportedTypeError

if TYPE_CHECKING:
    from collections.abc import Callable

type ParseFn[T] = Callable[[str], T]
type FormatFn[T] = Callable[[T], str]


@dataclass(frozen=True, slots=True)
class Conversion[T]:
    """How one scalar type reads from and writes to pair text."""

    parse: ParseFn[T]
    format: FormatFn[T]


# ═══════════════════════════════════════════════════════════════════════════════
# Builder
# ═══════════════════════════════════════════════════════════════════════════════


class RegistryBuilder:
    """Builder for constructing a Registry.

    Register conversions keyed by type (or NewType), then call build() to
    produce an immutable Registry. A later registration for the same key
    replaces the earlier one.
    """

    def __init__(self) -> None:
        self._conversions: dict[Any, Conversion[Any]] = {}

    def scalar[T](
        self, tp: Any, parse: ParseFn[T], format: FormatFn[T]
    ) -> RegistryBuilder:
        """Register a conversion for a scalar type."""
        self._conversions[tp] = Conversion(parse=parse, format=format)
        return self

    def build(self) -> Registry:
        """Freeze the registry. No further registration is possible."""
        return Registry(_conversions=MappingProxyType(dict(self._conversions)))


def register_builtin_scalars(builder: RegistryBuilder) -> RegistryBuilder:
    """Register str, int, float, bool, bytes, Char and the sized integers."""
    builder.scalar(str, _scalars.parse_text, _scalars.format_text)
    builder.scalar(int, _scalars.parse_int, _scalars.format_int)
    builder.scalar(float, _scalars.parse_float, _scalars.format_float)
    builder.scalar(bool, _scalars.parse_bool, _scalars.format_bool)
    builder.scalar(bytes, _scalars.parse_bytes, _scalars.format_bytes)
    builder.scalar(bytearray, _parse_bytearray, _scalars.format_bytes)
    builder.scalar(_scalars.Char, _scalars.parse_char, _scalars.format_text)
    for tp, (low, high) in _scalars.INTEGER_BOUNDS.items():
        builder.scalar(tp, _scalars.bounded_int_parser(low, high), _scalars.format_int)
    return builder


def register_standard_scalars(builder: RegistryBuilder) -> RegistryBuilder:
    """Register Decimal, UUID and the ISO 8601 date/time types."""
    builder.scalar(decimal.Decimal, _parse_decimal, str)
    builder.scalar(uuid.UUID, uuid.UUID, str)
    builder.scalar(datetime.date, datetime.date.fromisoformat, datetime.date.isoformat)
    builder.scalar(
        datetime.datetime, datetime.datetime.fromisoformat, datetime.datetime.isoformat
    )
    builder.scalar(datetime.time, datetime.time.fromisoformat, datetime.time.isoformat)
    return builder


def _parse_bytearray(text: str) -> bytearray:
    return bytearray(_scalars.parse_bytes(text))


def _parse_decimal(text: str) -> decimal.Decimal:
    try:
        return decimal.Decimal(text)
    except decimal.InvalidOperation as e:
        msg = f"invalid decimal literal: {text!r}"
        raise ValueError(msg) from e


# ═══════════════════════════════════════════════════════════════════════════════
# Registry
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class Registry:
    """Immutable table of scalar conversions.

    Constructed via RegistryBuilder. Safe to share between calls and threads.
    """

    _conversions: MappingProxyType[Any, Conversion[Any]] = field(
        default_factory=lambda: MappingProxyType({})
    )

    def contains(self, tp: Any) -> bool:
        """Check if a conversion is registered for exactly this type."""
        try:
            return tp in self._conversions
        except TypeError:  # unhashable annotation
            return False

    def parse(self, tp: Any, text: str) -> Any:
        """Parse text with the conversion registered for tp.

        Raises:
            UnsupportedTypeError: tp is not registered
            ParseError: the text does not parse; ValueError and TypeError
                from a registered parse function are reported the same way
        """
        conversion = self._conversions.get(tp)
        if conversion is None:
            raise UnsupportedTypeError(tp, self.scalar_names())
        try:
            return conversion.parse(text)
        except ParseError:
            raise
        except (ValueError, TypeError) as e:
            raise ParseError(str(e)) from e

    def format(self, value: Any) -> str | None:
        """Format value with the conversion of the nearest class in its MRO.

        Returns None when no conversion applies.
        """
        for cls in type(value).__mro__:
            conversion = self._conversions.get(cls)
            if conversion is not None:
                return conversion.format(value)
        return None

    @property
    def scalar_count(self) -> int:
        """Number of registered conversions."""
        return len(self._conversions)

    def scalar_names(self) -> list[str]:
        """Names of all registered scalar types (sorted)."""
        return sorted(getattr(tp, "__name__", repr(tp)) for tp in self._conversions)


DEFAULT_REGISTRY = register_standard_scalars(
    register_builtin_scalars(RegistryBuilder())
).build()
