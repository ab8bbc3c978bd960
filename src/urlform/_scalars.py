"""Scalar codec: the textual grammar of every built-in scalar.

Formatting is lossless and parses back to the identical value:
- bool: ``true`` / ``false``
- int: exact decimal with an optional sign, any size
- float: shortest round-trippable decimal, always with a ``.`` or exponent
  for finite values; ``inf``, ``-inf`` and ``NaN`` otherwise
- Char: exactly one code point
- bytes: UTF-8 text

Grammars are checked with ``google-re2`` before conversion, because
``int()`` and ``float()`` also accept whitespace and ``_`` separators which
are not part of the wire format.
"""

from __future__ import annotations

import math
from collections.abc import Callable
from typing import NewType

import re2

from urlform._errors import EncodingError, ParseError

_SIGNED_INT = re2.compile(r"[+-]?[0-9]+")
_UNSIGNED_INT = re2.compile(r"\+?[0-9]+")
_FLOAT = re2.compile(
    r"(?i)[+-]?(?:inf|infinity|nan|(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:e[+-]?[0-9]+)?)"
)

TRUE = "true"
FALSE = "false"

# ═══════════════════════════════════════════════════════════════════════════════
# Width-checked integers and characters
# ═══════════════════════════════════════════════════════════════════════════════

Int8 = NewType("Int8", int)
Int16 = NewType("Int16", int)
Int32 = NewType("Int32", int)
Int64 = NewType("Int64", int)
Int128 = NewType("Int128", int)
UInt8 = NewType("UInt8", int)
UInt16 = NewType("UInt16", int)
UInt32 = NewType("UInt32", int)
UInt64 = NewType("UInt64", int)
UInt128 = NewType("UInt128", int)

Char = NewType("Char", str)

INTEGER_BOUNDS: dict[object, tuple[int, int]] = {
    Int8: (-(2**7), 2**7 - 1),
    Int16: (-(2**15), 2**15 - 1),
    Int32: (-(2**31), 2**31 - 1),
    Int64: (-(2**63), 2**63 - 1),
    Int128: (-(2**127), 2**127 - 1),
    UInt8: (0, 2**8 - 1),
    UInt16: (0, 2**16 - 1),
    UInt32: (0, 2**32 - 1),
    UInt64: (0, 2**64 - 1),
    UInt128: (0, 2**128 - 1),
}


# ═══════════════════════════════════════════════════════════════════════════════
# Formatting
# ═══════════════════════════════════════════════════════════════════════════════


def format_bool(value: bool) -> str:
    return TRUE if value else FALSE


def format_int(value: int) -> str:
    # int.__repr__ so IntEnum and bool subclasses still format as digits.
    return int.__repr__(value)


def format_float(value: float) -> str:
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "inf" if value > 0 else "-inf"
    return float.__repr__(value)


def format_text(value: str) -> str:
    return str.__str__(value)


def format_bytes(value: bytes | bytearray | memoryview) -> str:
    """Decode bytes as strict UTF-8.

    Raises:
        EncodingError: If the bytes are not valid UTF-8.
    """
    try:
        return bytes(value).decode("utf-8")
    except UnicodeDecodeError as e:
        raise EncodingError(e) from e


# ═══════════════════════════════════════════════════════════════════════════════
# Parsing
# ═══════════════════════════════════════════════════════════════════════════════


def parse_bool(text: str) -> bool:
    if text == TRUE:
        return True
    if text == FALSE:
        return False
    msg = "provided string was not `true` or `false`"
    raise ParseError(msg)


def parse_int(text: str) -> int:
    return _parse_integer(text, _SIGNED_INT)


def parse_float(text: str) -> float:
    if not text:
        msg = "cannot parse float from empty string"
        raise ParseError(msg)
    if _FLOAT.fullmatch(text) is None:
        msg = "invalid float literal"
        raise ParseError(msg)
    return float(text)


def parse_char(text: str) -> str:
    if not text:
        msg = "cannot parse char from empty string"
        raise ParseError(msg)
    if len(text) > 1:
        msg = "too many characters in string"
        raise ParseError(msg)
    return text


def parse_text(text: str) -> str:
    return text


def parse_bytes(text: str) -> bytes:
    return text.encode("utf-8")


def bounded_int_parser(low: int, high: int) -> Callable[[str], int]:
    """Build a parser that rejects integers outside [low, high].

    A parser for an unsigned range also rejects a leading ``-``, even on
    ``-0``.
    """
    grammar = _UNSIGNED_INT if low >= 0 else _SIGNED_INT

    def parse(text: str) -> int:
        value = _parse_integer(text, grammar)
        if value > high:
            msg = "number too large to fit in target type"
            raise ParseError(msg)
        if value < low:
            msg = "number too small to fit in target type"
            raise ParseError(msg)
        return value

    return parse


def _parse_integer(text: str, grammar: re2.Pattern[str]) -> int:
    if not text:
        msg = "cannot parse integer from empty string"
        raise ParseError(msg)
    if grammar.fullmatch(text) is None:
        msg = "invalid digit found in string"
        raise ParseError(msg)
    try:
        return int(text)
    except ValueError as e:
        # Only reachable past the interpreter's int string-conversion limit.
        raise ParseError(str(e)) from e
