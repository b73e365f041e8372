"""Tests for the value model: kind_of, deep_equal, deep_copy."""

from fieldstate import NodeKind, deep_copy, deep_equal, kind_of


class TestKindOf:
    def test_kinds(self):
        assert kind_of({"a": 1}) is NodeKind.MAPPING
        assert kind_of([1, 2]) is NodeKind.SEQUENCE
        assert kind_of((1, 2)) is NodeKind.SEQUENCE
        assert kind_of(3) is NodeKind.SCALAR
        assert kind_of(None) is NodeKind.SCALAR

    def test_strings_are_scalars(self):
        assert kind_of("abc") is NodeKind.SCALAR
        assert kind_of(b"abc") is NodeKind.SCALAR


class TestDeepEqual:
    def test_nested_equal(self):
        a = {"user": {"name": "J", "tags": ["x", "y"]}}
        b = {"user": {"tags": ["x", "y"], "name": "J"}}
        assert deep_equal(a, b)

    def test_different_leaf(self):
        assert not deep_equal({"a": [1, 2]}, {"a": [1, 3]})

    def test_different_keys(self):
        assert not deep_equal({"a": 1}, {"b": 1})
        assert not deep_equal({"a": 1}, {"a": 1, "b": 2})

    def test_different_lengths(self):
        assert not deep_equal([1, 2], [1, 2, 3])

    def test_list_and_tuple_compare_equal(self):
        assert deep_equal([1, (2, 3)], (1, [2, 3]))

    def test_different_kinds_never_equal(self):
        assert not deep_equal({"a": 1}, [("a", 1)])
        assert not deep_equal([], {})
        assert not deep_equal("ab", ["a", "b"])

    def test_scalars_use_own_equality(self):
        assert deep_equal(1, 1.0)
        assert not deep_equal(1, "1")
        assert deep_equal(None, None)

    def test_identity_short_circuit(self):
        nan = float("nan")
        assert deep_equal(nan, nan)


class TestDeepCopy:
    def test_copy_is_equal(self):
        tree = {"users": [{"age": 30, "tags": ("a", "b")}, {"age": 25}], "n": None}
        assert deep_equal(tree, deep_copy(tree))

    def test_copy_is_independent(self):
        tree = {"users": [{"age": 30}]}
        copy = deep_copy(tree)
        copy["users"][0]["age"] = 99
        copy["users"].append({"age": 1})
        assert tree == {"users": [{"age": 30}]}

    def test_tuples_stay_tuples(self):
        assert deep_copy({"t": (1, [2])}) == {"t": (1, [2])}
        assert isinstance(deep_copy((1, 2)), tuple)

    def test_scalars_are_shared(self):
        marker = object()
        assert deep_copy({"m": marker})["m"] is marker
