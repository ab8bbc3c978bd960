"""Error types for urlform.

Every failure raised while decoding or encoding derives from CodecError:

| Error                  | Kind                                         |
|------------------------|----------------------------------------------|
| ShapeError             | top-level shape, length, key/value/pair shape |
| ParseError             | scalar text did not parse (carries the key)  |
| EncodingError          | bytes that are not valid UTF-8               |
| UnsupportedTypeError   | annotation the shape model cannot describe   |

The first error aborts the current call; nothing is retried.
"""

from __future__ import annotations

from typing import Any, Literal


class CodecError(Exception):
    """Base class for all urlform errors."""


# ═══════════════════════════════════════════════════════════════════════════════
# Shape errors
# ═══════════════════════════════════════════════════════════════════════════════


class ShapeError(CodecError):
    """The value or target type does not fit the flat pair format."""


class TopLevelError(ShapeError):
    """The top-level value is not a map, struct, sequence of pairs or unit."""

    def __init__(self, found: str) -> None:
        self.found = found
        super().__init__(
            "top-level serializer supports only maps, structs and sequences "
            f"of pairs, got {found}"
        )


class InvalidLengthError(ShapeError):
    """A sequence had a different number of elements than required."""

    def __init__(self, length: int, expected: str) -> None:
        self.length = length
        self.expected = expected
        super().__init__(f"invalid length {length}, expected {expected}")


class DuplicateKeyError(ShapeError):
    """A key that maps to a single value occurred more than once."""

    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(f"duplicate key {key!r}")


class MissingFieldError(ShapeError):
    """A required struct field had no pair in the input."""

    def __init__(self, field: str) -> None:
        self.field = field
        super().__init__(f"missing field {field!r}")


class UnsupportedKeyError(ShapeError):
    """A key of a shape that cannot be written as pair text."""

    def __init__(self, found: str) -> None:
        self.found = found
        super().__init__(f"unsupported key: {found}")


class UnsupportedValueError(ShapeError):
    """A value of a shape that cannot be written as pair text."""

    def __init__(self, key: str, found: str) -> None:
        self.key = key
        self.found = found
        super().__init__(f"unsupported value for key {key!r}: {found}")


class UnsupportedPairError(ShapeError):
    """A sequence element that is not a (key, value) pair."""

    def __init__(self, found: str) -> None:
        self.found = found
        super().__init__(f"unsupported pair: {found}")


class NoKeyError(ShapeError):
    """A value was submitted while no key was pending."""

    def __init__(self) -> None:
        super().__init__("tried to serialize a value before serializing a key")


class UnitVariantError(ShapeError):
    """A data-carrying variant was requested where only unit variants fit."""

    def __init__(self, key: str, found: str) -> None:
        self.key = key
        self.found = found
        super().__init__(f"expected unit variant for key {key!r}, got {found}")


# ═══════════════════════════════════════════════════════════════════════════════
# Scalar errors
# ═══════════════════════════════════════════════════════════════════════════════


class ParseError(CodecError):
    """Scalar text did not parse into the requested type.

    Raised without a key by the scalar codec; the decoder re-raises it with
    the key of the offending pair attached. part tells whether the key text
    itself or the value under it failed to parse.
    """

    def __init__(
        self, reason: str, key: str | None = None, *, part: Literal["key", "value"] = "value"
    ) -> None:
        self.reason = reason
        self.key = key
        self.part = part
        if key is None:
            super().__init__(reason)
        elif part == "key":
            super().__init__(f"failed to parse key '{key}': {reason}")
        else:
            super().__init__(f"failed to parse value for key '{key}': {reason}")


class EncodingError(CodecError):
    """Bytes that are required to be text are not valid UTF-8."""

    def __init__(self, source: UnicodeDecodeError) -> None:
        self.source = source
        super().__init__(f"invalid UTF-8: {source}")


class UnsupportedTypeError(CodecError):
    """A type annotation the shape model cannot describe."""

    def __init__(self, tp: Any, registered: list[str] | None = None) -> None:
        self.tp = tp
        self.registered = sorted(registered or [])
        name = getattr(tp, "__name__", None) or repr(tp)
        if self.registered:
            msg = (
                f"no conversion for type {name} "
                f"(registered scalars: {', '.join(self.registered)})"
            )
        else:
            msg = f"no conversion for type {name}"
        super().__init__(msg)
