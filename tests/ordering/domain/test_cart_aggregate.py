"""Tests for the Cart aggregate: merging, absolute updates and serialization."""

import pytest
from ordering.cart.cart import Cart
from shared.errors import InvalidQuantity, ItemNotFound


def _cart():
    return Cart.empty("buyer-001")


class TestCartLines:
    def test_re_adding_a_product_merges_quantity(self):
        cart = _cart()
        cart.add_line("maize", "farm-a", 2, 10.0)
        cart.add_line("maize", "farm-a", 3, 10.0)

        assert len(cart.lines) == 1
        assert cart.line_for("maize").quantity == 5

    def test_merge_keeps_first_frozen_price(self):
        cart = _cart()
        cart.add_line("maize", "farm-a", 1, 10.0)
        cart.add_line("maize", "farm-a", 1, 12.0)

        assert cart.line_for("maize").unit_price == 10.0

    def test_lines_keep_insertion_order(self):
        cart = _cart()
        cart.add_line("tomato", "farm-b", 1, 2.25)
        cart.add_line("maize", "farm-a", 1, 10.0)
        cart.add_line("okra", "farm-b", 1, 3.0)

        assert [str(line.product_id) for line in cart.ordered_lines] == ["tomato", "maize", "okra"]

    @pytest.mark.parametrize("quantity", [0, -1, 1.5, "2", True, None])
    def test_add_rejects_non_positive_or_non_integer_quantities(self, quantity):
        with pytest.raises(InvalidQuantity):
            _cart().add_line("maize", "farm-a", quantity, 10.0)

    def test_set_quantity_is_absolute(self):
        cart = _cart()
        cart.add_line("maize", "farm-a", 2, 10.0)
        cart.set_quantity("maize", 7)

        assert cart.line_for("maize").quantity == 7

    def test_set_quantity_zero_removes_line(self):
        cart = _cart()
        cart.add_line("maize", "farm-a", 2, 10.0)
        cart.set_quantity("maize", 0)

        assert cart.is_empty

    def test_set_quantity_on_absent_product_fails(self):
        with pytest.raises(ItemNotFound):
            _cart().set_quantity("maize", 3)

    def test_set_quantity_rejects_negative(self):
        cart = _cart()
        cart.add_line("maize", "farm-a", 2, 10.0)
        with pytest.raises(InvalidQuantity):
            cart.set_quantity("maize", -2)

    def test_remove_is_idempotent(self):
        cart = _cart()
        cart.add_line("maize", "farm-a", 2, 10.0)

        assert cart.remove_line("maize") is True
        assert cart.remove_line("maize") is False
        assert cart.is_empty


class TestCartBookkeeping:
    def test_every_mutation_moves_updated_at_forward(self):
        cart = _cart()
        stamps = []
        for quantity in range(1, 6):
            cart.add_line("maize", "farm-a", quantity, 10.0)
            stamps.append(cart.updated_at)

        assert all(earlier < later for earlier, later in zip(stamps, stamps[1:]))
        assert cart.revision == 5

    def test_summary(self):
        cart = _cart()
        cart.add_line("maize", "farm-a", 2, 10.0)
        cart.add_line("tomato", "farm-b", 4, 2.25)

        assert cart.summary() == {"line_count": 2, "total_quantity": 6, "estimated_total": 29.0}

    def test_payload_round_trip_preserves_lines_and_clock(self):
        cart = _cart()
        cart.add_line("maize", "farm-a", 2, 10.0)
        cart.add_line("tomato", "farm-b", 1, 2.25)

        restored = Cart.from_payload(cart.to_payload())

        assert restored.to_payload() == cart.to_payload()
        assert restored.updated_at == cart.updated_at

    def test_remove_products_drops_only_named_lines(self):
        cart = _cart()
        cart.add_line("maize", "farm-a", 2, 10.0)
        cart.add_line("tomato", "farm-b", 1, 2.25)

        cart.remove_products(["maize"])

        assert [str(line.product_id) for line in cart.ordered_lines] == ["tomato"]
