"""Shared test types and conformance fixture loader for urlform.

Loads YAML fixtures from tests/fixtures/ and converts them into decode and
encode cases for parametrized testing. Each YAML document names a target
type from TARGETS and may carry an ``options`` dict in the
parse_codec_config() format.
"""

from __future__ import annotations

import dataclasses
import enum
from dataclasses import dataclass
from pathlib import Path
from typing import Any, NamedTuple, NotRequired, TypedDict

import pytest
import yaml

import urlform
from urlform import CodecConfig, parse_codec_config

FIXTURE_DIR = Path(__file__).resolve().parent / "fixtures"


# ─── Sample types ───────────────────────────────────────────────────────────


class Letter(enum.Enum):
    A = 1
    B = 2
    C = 3


@dataclass
class User:
    first_name: str
    last_name: str


@dataclass
class Numbers:
    first: int
    second: int


@dataclass
class Customer:
    first_name: str
    last_name: str
    emails: list[str]


@dataclass
class QueryParameters:
    page: int
    name: str


@dataclass
class Search:
    q: str
    page: int = 1
    lang: str | None = None
    tags: tuple[str, ...] = ()


@dataclass
class Marker:
    """A unit struct: a dataclass without fields."""


Movie = TypedDict("Movie", {"title": str, "year": NotRequired[int]})


class Entry(NamedTuple):
    key: str
    value: int


TARGETS: dict[str, Any] = {
    "pairs_str_str": list[tuple[str, str]],
    "pairs_str_int": list[tuple[str, int]],
    "pairs_str_bool": list[tuple[str, bool]],
    "pairs_str_float": list[tuple[str, float]],
    "pairs_str_letter": list[tuple[str, Letter]],
    "pairs_str_optional_int": list[tuple[str, int | None]],
    "unit": None,
    "map_str_str": dict[str, str],
    "map_int_str": dict[int, str],
    "map_str_list_int": dict[str, list[int]],
    "user": User,
    "numbers": Numbers,
    "customer": Customer,
    "query": QueryParameters,
    "search": Search,
}


def normalize(value: Any) -> Any:
    """Reduce a decoded value to the plain YAML-comparable form."""
    if isinstance(value, enum.Enum):
        return value.name
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {f.name: normalize(getattr(value, f.name)) for f in dataclasses.fields(value)}
    if isinstance(value, (list, tuple)):
        return [normalize(v) for v in value]
    if isinstance(value, dict):
        return {normalize(k): normalize(v) for k, v in value.items()}
    return value


# ─── Fixture loading ────────────────────────────────────────────────────────


@dataclass
class DecodeCase:
    """A single decode case from a conformance fixture."""

    fixture_name: str
    case_name: str
    into: Any
    config: CodecConfig
    input: str
    expect: Any = None
    error: type[Exception] | None = None
    match: str | None = None

    @property
    def id(self) -> str:
        return f"{self.fixture_name}::{self.case_name}"


@dataclass
class EncodeCase:
    """A single encode case from a conformance fixture."""

    fixture_name: str
    case_name: str
    config: CodecConfig
    value: Any
    expect: str | None = None
    error: type[Exception] | None = None
    match: str | None = None

    @property
    def id(self) -> str:
        return f"{self.fixture_name}::{self.case_name}"


def load_decode_fixtures() -> list[DecodeCase]:
    """Load every document of decode.yaml."""
    cases: list[DecodeCase] = []
    for doc in _load_documents(FIXTURE_DIR / "decode.yaml"):
        config = parse_codec_config(doc.get("options", {}))
        into = TARGETS[doc["into"]]
        for case in doc["cases"]:
            cases.append(
                DecodeCase(
                    fixture_name=doc["name"],
                    case_name=case["name"],
                    into=into,
                    config=config,
                    input=case["input"],
                    expect=case.get("expect"),
                    error=_error_type(case.get("error")),
                    match=case.get("match"),
                )
            )
    return cases


def load_encode_fixtures() -> list[EncodeCase]:
    """Load every document of encode.yaml.

    A case gives either ``pairs`` (a list of lists, encoded as a list of
    tuples) or ``map`` (a mapping, encoded as-is).
    """
    cases: list[EncodeCase] = []
    for doc in _load_documents(FIXTURE_DIR / "encode.yaml"):
        config = parse_codec_config(doc.get("options", {}))
        for case in doc["cases"]:
            if "pairs" in case:
                value = [tuple(p) if isinstance(p, list) else p for p in case["pairs"]]
            else:
                value = case["map"]
            cases.append(
                EncodeCase(
                    fixture_name=doc["name"],
                    case_name=case["name"],
                    config=config,
                    value=value,
                    expect=case.get("expect"),
                    error=_error_type(case.get("error")),
                    match=case.get("match"),
                )
            )
    return cases


def _load_documents(path: Path) -> list[dict[str, Any]]:
    with path.open(encoding="utf-8") as f:
        return [doc for doc in yaml.safe_load_all(f) if doc is not None]


def _error_type(name: str | None) -> type[Exception] | None:
    if name is None:
        return None
    error = getattr(urlform, name)
    assert issubclass(error, Exception), f"{name} is not an error type"
    return error


# ─── Shared fixtures ────────────────────────────────────────────────────────


@pytest.fixture
def registry() -> urlform.Registry:
    """The default registry plus an IPv4 address conversion."""
    from ipaddress import IPv4Address

    builder = urlform.register_standard_scalars(
        urlform.register_builtin_scalars(urlform.RegistryBuilder())
    )
    builder.scalar(IPv4Address, IPv4Address, str)
    return builder.build()
