"""Pair source and sink over the application/x-www-form-urlencoded format.

Only splitting and joining happen here; byte-level escaping is delegated to
``urllib.parse``. A segment without ``%`` or ``+`` is passed through as-is
(a borrowed part); only escaped segments are unquoted into new text.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from urllib.parse import quote, quote_plus, unquote_plus, unquote_to_bytes

from urlform._config import DecodeOptions, EncodeOptions
from urlform._types import Pair

# Bytes left unescaped besides ASCII alphanumerics (the WHATWG
# urlencoded byte serializer keeps "*-._").
_SAFE = "*"


@dataclass(frozen=True, slots=True)
class Part:
    """One decoded key or value.

    borrowed is True when text is the input segment verbatim, False when
    unescaping produced new text.
    """

    text: str
    borrowed: bool = True

    def __str__(self) -> str:
        return self.text


class QueryPairs:
    """Split encoded bytes or text into (key, value) parts.

    Empty segments are skipped and a segment without ``=`` has an empty
    value, so ``""``, ``"&"`` and ``"&&"`` all hold zero pairs.

    >>> [(k.text, v.text) for k, v in QueryPairs("a=1&b=x+y")]
    [('a', '1'), ('b', 'x y')]
    """

    __slots__ = ("_data", "_separator")

    def __init__(self, data: bytes | str, options: DecodeOptions | None = None) -> None:
        self._data = data
        self._separator = (options or DecodeOptions()).separator

    def __iter__(self) -> Iterator[tuple[Part, Part]]:
        if isinstance(self._data, str):
            return self._iter_text(self._data)
        return self._iter_bytes(bytes(self._data))

    def _iter_text(self, qs: str) -> Iterator[tuple[Part, Part]]:
        for segment in qs.split(self._separator):
            if not segment:
                continue
            key, _, value = segment.partition("=")
            yield _text_part(key), _text_part(value)

    def _iter_bytes(self, qs: bytes) -> Iterator[tuple[Part, Part]]:
        for segment in qs.split(self._separator.encode()):
            if not segment:
                continue
            key, _, value = segment.partition(b"=")
            yield _bytes_part(key), _bytes_part(value)


def _text_part(raw: str) -> Part:
    if "%" in raw or "+" in raw:
        return Part(unquote_plus(raw, errors="replace"), borrowed=False)
    return Part(raw)


def _bytes_part(raw: bytes) -> Part:
    if b"%" in raw or b"+" in raw:
        unescaped = unquote_to_bytes(raw.replace(b"+", b" "))
        return Part(unescaped.decode("utf-8", errors="replace"), borrowed=False)
    return Part(raw.decode("utf-8", errors="replace"))


@dataclass(slots=True)
class FormSink:
    """Collect pairs and render them as an encoded form string."""

    options: EncodeOptions = field(default_factory=EncodeOptions)
    _pairs: list[Pair] = field(default_factory=list, init=False, repr=False)

    def append(self, key: str, value: str, /) -> None:
        self._pairs.append((key, value))

    def pairs(self) -> list[Pair]:
        """Pairs appended so far, unescaped, in append order."""
        return list(self._pairs)

    def __len__(self) -> int:
        return len(self._pairs)

    def finish(self) -> str:
        escape = quote_plus if self.options.space == "+" else quote
        return self.options.separator.join(
            f"{escape(k, safe=_SAFE)}={escape(v, safe=_SAFE)}" for k, v in self._pairs
        )
