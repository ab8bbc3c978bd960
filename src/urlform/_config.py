"""Codec options and their dict form.

Options are frozen dataclasses so a single instance can be shared between
calls. The same shape loads from JSON/YAML/TOML dicts:
  dict → parse_codec_config() → CodecConfig → decode()/encode()

Example::

    config = parse_codec_config({
        "decode": {"duplicates": "last"},
        "encode": {"space": "%20"},
    })
    decode(data, Query, options=config.decode)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal

type DuplicatePolicy = Literal["error", "first", "last"]
type SpaceEscape = Literal["+", "%20"]

_DUPLICATE_POLICIES = frozenset({"error", "first", "last"})
_SPACE_ESCAPES = frozenset({"+", "%20"})
# Characters that already mean something inside a pair.
_RESERVED_SEPARATORS = frozenset({"=", "%", "+"})


class ConfigParseError(Exception):
    """Error parsing a config dict into option types."""


def _check_separator(separator: object) -> None:
    if not isinstance(separator, str) or len(separator) != 1:
        msg = f"separator must be a single character, got {separator!r}"
        raise ConfigParseError(msg)
    if separator in _RESERVED_SEPARATORS or separator.isalnum():
        msg = f"separator {separator!r} is reserved inside pairs"
        raise ConfigParseError(msg)


# ═══════════════════════════════════════════════════════════════════════════════
# Option types
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class DecodeOptions:
    """Options for decode().

    duplicates decides what a repeated key does when its target holds a
    single value: "error" raises DuplicateKeyError, "first" keeps the first
    occurrence, "last" keeps the last. Sequence targets always collect
    every occurrence.
    """

    separator: str = "&"
    duplicates: DuplicatePolicy = "error"

    def __post_init__(self) -> None:
        _check_separator(self.separator)
        if self.duplicates not in _DUPLICATE_POLICIES:
            expected = sorted(_DUPLICATE_POLICIES)
            msg = f"duplicates must be one of {expected}, got {self.duplicates!r}"
            raise ConfigParseError(msg)


@dataclass(frozen=True, slots=True)
class EncodeOptions:
    """Options for encode().

    space selects how a space is escaped: "+" (form style) or "%20".
    """

    separator: str = "&"
    space: SpaceEscape = "+"

    def __post_init__(self) -> None:
        _check_separator(self.separator)
        if self.space not in _SPACE_ESCAPES:
            expected = sorted(_SPACE_ESCAPES)
            msg = f"space must be one of {expected}, got {self.space!r}"
            raise ConfigParseError(msg)


@dataclass(frozen=True, slots=True)
class CodecConfig:
    """Decode and encode options loaded together."""

    decode: DecodeOptions = field(default_factory=DecodeOptions)
    encode: EncodeOptions = field(default_factory=EncodeOptions)


# ═══════════════════════════════════════════════════════════════════════════════
# Parsing (dict → option types)
# ═══════════════════════════════════════════════════════════════════════════════


def parse_codec_config(data: dict[str, Any]) -> CodecConfig:
    """Parse a dict into a CodecConfig.

    Both sections are optional; missing keys take their defaults.

    Raises:
        ConfigParseError: If the dict is malformed.
    """
    if not isinstance(data, dict):
        msg = f"expected dict, got {type(data).__name__}"
        raise ConfigParseError(msg)
    _reject_unknown("config", data, {"decode", "encode"})

    decode = _parse_decode_options(data.get("decode", {}))
    encode = _parse_encode_options(data.get("encode", {}))
    return CodecConfig(decode=decode, encode=encode)


def _parse_decode_options(data: dict[str, Any]) -> DecodeOptions:
    """Parse the 'decode' section."""
    if not isinstance(data, dict):
        msg = f"'decode' must be a dict, got {type(data).__name__}"
        raise ConfigParseError(msg)
    _reject_unknown("decode", data, {"separator", "duplicates"})

    separator = _string_field(data, "decode", "separator", "&")
    duplicates = _string_field(data, "decode", "duplicates", "error")
    return DecodeOptions(separator=separator, duplicates=duplicates)  # type: ignore[arg-type]


def _parse_encode_options(data: dict[str, Any]) -> EncodeOptions:
    """Parse the 'encode' section."""
    if not isinstance(data, dict):
        msg = f"'encode' must be a dict, got {type(data).__name__}"
        raise ConfigParseError(msg)
    _reject_unknown("encode", data, {"separator", "space"})

    separator = _string_field(data, "encode", "separator", "&")
    space = _string_field(data, "encode", "space", "+")
    return EncodeOptions(separator=separator, space=space)  # type: ignore[arg-type]


def _string_field(data: dict[str, Any], section: str, name: str, default: str) -> str:
    value = data.get(name, default)
    if not isinstance(value, str):
        msg = f"'{section}.{name}' must be a string, got {type(value).__name__}"
        raise ConfigParseError(msg)
    return value


def _reject_unknown(section: str, data: dict[str, Any], known: set[str]) -> None:
    unknown = sorted(str(k) for k in data if k not in known)
    if unknown:
        msg = f"unknown {section} field(s): {unknown} (expected {sorted(known)})"
        raise ConfigParseError(msg)
