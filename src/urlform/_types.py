"""Core protocols and type aliases for urlform.

The codec sits between two ports:
- PairSource yields decoded (key, value) parts from the wire format
- PairSink accepts (key, value) text and produces the wire format

QueryPairs and FormSink are the implementations used by decode() and
encode(); anything that satisfies the protocols can be plugged into
Decoder and Encoder instead.
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from urlform._pairs import Part

# A scalar after formatting or before parsing is always text.
type Pair = tuple[str, str]


@runtime_checkable
class PairSource(Protocol):
    """Produce (key, value) parts in input order.

    Iteration is single-pass; the decoder never looks ahead.
    """

    def __iter__(self) -> Iterator[tuple[Part, Part]]: ...


@runtime_checkable
class PairSink(Protocol):
    """Accumulate (key, value) pairs and render them in append order."""

    def append(self, key: str, value: str, /) -> None: ...

    def finish(self) -> str: ...
