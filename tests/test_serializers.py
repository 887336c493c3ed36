"""Tests for deterministic JSON serialization."""

import json
import math
from dataclasses import dataclass
from enum import Enum

import pytest

from evolution_insight.serializers import dumps, to_jsonable


class Color(str, Enum):
    RED = "red"


@dataclass(frozen=True)
class Point:
    x: int
    label: Color
    tags: frozenset


class TestToJsonable:
    """Tests for to_jsonable."""

    def test_dataclass_and_enum(self):
        assert to_jsonable(Point(1, Color.RED, frozenset({"b", "a"}))) == {
            "x": 1,
            "label": "red",
            "tags": ["a", "b"],
        }

    def test_tuple_keys_flattened(self):
        assert to_jsonable({("src/a.js", "f"): 2}) == {"src/a.js::f": 2}

    def test_non_finite_floats(self):
        assert to_jsonable([1.5, math.nan, math.inf]) == [1.5, None, None]

    def test_unknown_types_rejected(self):
        with pytest.raises(TypeError):
            to_jsonable(object())


class TestDumps:
    """Tests for dumps."""

    def test_insertion_order_irrelevant(self):
        first = dumps({"b": {2, 1}, "a": [Color.RED]})
        second = dumps({"a": [Color.RED], "b": {1, 2}})
        assert first == second
        assert json.loads(first) == {"a": ["red"], "b": [1, 2]}

    def test_non_ascii_kept(self):
        assert "é" in dumps({"author": "José"})
