"""Tests for the shape model (urlform._shapes)."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Annotated, Any, Literal, NewType, Optional

import pytest
from conftest import Entry, Letter, Marker, Movie, Numbers, Search, User

from urlform import DEFAULT_REGISTRY, Int32, UnsupportedTypeError, shape_of
from urlform._shapes import (
    AnyShape,
    EnumShape,
    FieldShape,
    LiteralShape,
    MapShape,
    OptionShape,
    ScalarShape,
    SequenceShape,
    StructShape,
    TupleShape,
    UnitShape,
    VariantShape,
    is_unit_struct,
    named_tuple_struct,
)

Score = NewType("Score", float)

type Pairs = list[tuple[str, int]]
type Box[T] = list[T]


@dataclass
class Node:
    name: str
    children: list[Node]


def _shape(tp: Any):  # noqa: ANN202
    return shape_of(tp, DEFAULT_REGISTRY)


class TestScalarShapes:
    @pytest.mark.parametrize("tp", [str, int, float, bool, bytes, Int32])
    def test_registered(self, tp: Any) -> None:
        assert _shape(tp) == ScalarShape(tp)

    def test_unregistered_newtype(self) -> None:
        assert _shape(Score) == ScalarShape(float)

    def test_annotated(self) -> None:
        assert _shape(Annotated[int, "doc"]) == ScalarShape(int)

    def test_unit_and_any(self) -> None:
        assert _shape(None) == UnitShape()
        assert _shape(type(None)) == UnitShape()
        assert _shape(Any) == AnyShape()
        assert _shape(object) == AnyShape()

    def test_enum_and_literal(self) -> None:
        assert _shape(Letter) == EnumShape(Letter)
        assert _shape(Literal["a", "b"]) == LiteralShape(("a", "b"))


class TestOptionShapes:
    def test_pipe_and_optional(self) -> None:
        assert _shape(int | None) == OptionShape(ScalarShape(int))
        assert _shape(Optional[int]) == OptionShape(ScalarShape(int))  # noqa: UP045

    def test_optional_union_of_structs(self) -> None:
        assert _shape(User | Numbers | None) == OptionShape(VariantShape((User, Numbers)))

    def test_union_of_scalars(self) -> None:
        with pytest.raises(UnsupportedTypeError):
            _shape(int | str)


class TestCollectionShapes:
    def test_sequences(self) -> None:
        assert _shape(list[int]) == SequenceShape(ScalarShape(int), list)
        assert _shape(Sequence[str]) == SequenceShape(ScalarShape(str), list)
        assert _shape(set[int]) == SequenceShape(ScalarShape(int), set)
        assert _shape(frozenset[int]) == SequenceShape(ScalarShape(int), frozenset)
        assert _shape(tuple[int, ...]) == SequenceShape(ScalarShape(int), tuple)
        assert _shape(list) == SequenceShape(AnyShape(), list)

    def test_fixed_tuples(self) -> None:
        assert _shape(tuple[str, int]) == TupleShape((ScalarShape(str), ScalarShape(int)))
        assert _shape(Entry) == TupleShape((ScalarShape(str), ScalarShape(int)), Entry)

    def test_maps(self) -> None:
        assert _shape(dict[str, int]) == MapShape(ScalarShape(str), ScalarShape(int))
        assert _shape(Mapping[Letter, bool]) == MapShape(EnumShape(Letter), ScalarShape(bool))
        assert _shape(dict) == MapShape(AnyShape(), AnyShape())

    def test_type_aliases(self) -> None:
        assert _shape(Pairs) == _shape(list[tuple[str, int]])
        assert _shape(Box[int]) == SequenceShape(ScalarShape(int), list)


class TestStructShapes:
    def test_dataclass_fields(self) -> None:
        shape = _shape(Search)
        assert isinstance(shape, StructShape)
        assert shape.kind == "dataclass"
        assert [f.name for f in shape.fields] == ["q", "page", "lang", "tags"]
        assert shape.field("q") == FieldShape("q", ScalarShape(str), has_default=False)
        assert shape.field("lang") == FieldShape(
            "lang", OptionShape(ScalarShape(str)), has_default=True
        )
        assert shape.field("missing") is None

    def test_typeddict_fields(self) -> None:
        shape = _shape(Movie)
        assert shape.kind == "typeddict"
        assert shape.field("title").has_default is False
        assert shape.field("year") == FieldShape("year", ScalarShape(int), has_default=True)
        assert shape.build({"title": "Up"}) == {"title": "Up"}

    def test_named_tuple_struct_view(self) -> None:
        shape = named_tuple_struct(_shape(Entry))
        assert shape == StructShape(
            Entry,
            "namedtuple",
            (
                FieldShape("key", ScalarShape(str)),
                FieldShape("value", ScalarShape(int)),
            ),
        )
        assert shape.build({"value": 1, "key": "a"}) == Entry("a", 1)

    def test_recursive_dataclass(self) -> None:
        shape = _shape(Node)
        children = shape.field("children").shape
        assert children == SequenceShape(StructShape(Node, "dataclass", ()), list)

    def test_unit_struct(self) -> None:
        assert _shape(Marker) == StructShape(Marker, "dataclass", ())
        assert is_unit_struct(Marker())
        assert not is_unit_struct(Marker)
        assert not is_unit_struct(User("a", "b"))


class TestUnsupported:
    @pytest.mark.parametrize("tp", [complex, bytes | str, type], ids=["complex", "union", "type"])
    def test_rejected(self, tp: Any) -> None:
        with pytest.raises(UnsupportedTypeError, match="no conversion for type"):
            _shape(tp)

    def test_lists_registered_scalars(self) -> None:
        with pytest.raises(UnsupportedTypeError) as exc_info:
            _shape(complex)
        assert "int" in exc_info.value.registered
        assert exc_info.value.registered == sorted(exc_info.value.registered)
