"""Tests for hierarchical key helpers."""

from fieldstate import keys


class TestKeys:
    def test_create_and_parts(self):
        assert keys.create(["checkout", "cart"]) == "checkout.cart"
        assert keys.parts("checkout.cart.items") == ["checkout", "cart", "items"]

    def test_parent(self):
        assert keys.parent("checkout.cart.items") == "checkout.cart"
        assert keys.parent("checkout") is None

    def test_name(self):
        assert keys.name("checkout.cart.items") == "items"
        assert keys.name("checkout") == "checkout"

    def test_is_child_of(self):
        assert keys.is_child_of("checkout.cart", "checkout")
        assert keys.is_child_of("checkout.cart.items", "checkout")
        assert not keys.is_child_of("checkoutx.cart", "checkout")
        assert not keys.is_child_of("checkout", "checkout")

    def test_feature_keys(self):
        assert keys.for_feature("todo", "items") == "todo.items"
        assert keys.for_subfeature("todo", "filters", "active") == "todo.filters.active"
