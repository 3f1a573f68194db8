"""
Cart tests
==========
Charged price, line composition, the cart store and the wishlist batch.
"""

import pytest

from storefront.api.services.cart_service import (
    CartRegistry,
    CartStore,
    add_to_cart,
    add_wishlist_to_cart,
    compose_cart_line,
    resolve_charged_price,
)
from storefront.api.services.variant_selection import VariantSelection


@pytest.fixture
def cart():
    return CartStore()


# ═══════════════════════════════════════════════════════════
# PRICE
# ═══════════════════════════════════════════════════════════

class TestChargedPrice:

    @pytest.mark.parametrize("price, sale_price, expected", [
        (100, 0, 100),
        (100, 150, 100),
        (100, 80, 80),
        (100, None, 100),
        (100, 100, 100),
    ])
    def test_sale_applies_only_when_positive_and_lower(self, price, sale_price, expected):
        assert resolve_charged_price(price, sale_price) == expected

    def test_line_uses_sale_price(self, make_product):
        product = make_product(salePrice=80)
        line = compose_cart_line(VariantSelection(product))
        assert line.price == 80
        assert line.sale_price == 80

    def test_line_ignores_higher_sale_price(self, make_product):
        product = make_product(salePrice=150)
        line = compose_cart_line(VariantSelection(product))
        assert line.price == 100
        assert line.sale_price is None


# ═══════════════════════════════════════════════════════════
# LINE COMPOSITION
# ═══════════════════════════════════════════════════════════

class TestComposeLine:

    def test_variant_line(self, combination_product):
        selection = VariantSelection.from_choices(combination_product, "L", "blue", 3)
        line = compose_cart_line(selection)

        assert line.product_id == "p1"
        assert line.name_ar == "قميص كتان"
        assert line.image == "/img/linen.jpg"
        assert line.quantity == 3
        assert line.selected_size == "L"
        assert line.selected_color == "blue"
        assert line.variant_stock == 5
        assert line.stock_quantity == 10

    def test_plain_line_has_no_variant_stock(self, plain_product):
        line = compose_cart_line(VariantSelection(plain_product))
        assert line.selected_size is None
        assert line.selected_color is None
        assert line.variant_stock is None
        assert line.available_stock == 3


# ═══════════════════════════════════════════════════════════
# ADD TO CART
# ═══════════════════════════════════════════════════════════

class TestAddToCart:

    def test_success_resets_selection(self, combination_product, cart):
        selection = VariantSelection.from_choices(combination_product, "M", "red", 2)
        result = add_to_cart(selection, cart)

        assert result.success is True
        assert result.message_key == "added_to_cart"
        assert cart.total_items() == 2
        assert (selection.size, selection.color, selection.quantity) == ("", "", 1)

    def test_incomplete_selection(self, combination_product, cart):
        selection = VariantSelection(combination_product)
        selection.select_size("M")
        result = add_to_cart(selection, cart)

        assert result.success is False
        assert result.message_key == "select_options"
        assert cart.lines == []

    def test_stale_stock_fails_silently(self, combination_product, cart):
        selection = VariantSelection.from_choices(combination_product, "M", "red")
        # stock changed under the shopper
        combination_product.variant_combinations[0].stock = 0

        result = add_to_cart(selection, cart)
        assert result.success is False
        assert result.message_key is None
        assert cart.lines == []
        assert selection.size == "M"

    def test_same_variant_merges(self, combination_product, cart):
        add_to_cart(VariantSelection.from_choices(combination_product, "L", "blue", 2), cart)
        add_to_cart(VariantSelection.from_choices(combination_product, "L", "blue", 1), cart)

        assert len(cart.lines) == 1
        assert cart.lines[0].quantity == 3

    def test_merge_over_stock_rejected(self, combination_product, cart):
        add_to_cart(VariantSelection.from_choices(combination_product, "M", "red", 2), cart)
        result = add_to_cart(VariantSelection.from_choices(combination_product, "M", "red", 1), cart)

        assert result.success is False
        assert result.message_key == "only_n_available"
        assert result.params == {"count": 2}
        assert cart.total_items() == 2


# ═══════════════════════════════════════════════════════════
# CART STORE
# ═══════════════════════════════════════════════════════════

class TestCartStore:

    def test_update_quantity_clamps_to_stock(self, plain_product, cart):
        line = cart.add(compose_cart_line(VariantSelection(plain_product))).line
        cart.update_quantity(line.id, 10)
        assert cart.find(line.id).quantity == 3

    def test_update_quantity_zero_removes(self, plain_product, cart):
        line = cart.add(compose_cart_line(VariantSelection(plain_product))).line
        assert cart.update_quantity(line.id, 0) is None
        assert cart.lines == []

    def test_totals(self, make_product, plain_product, cart):
        sale = make_product(id="p9", slug="sale", salePrice=80)
        cart.add(compose_cart_line(VariantSelection(sale)))
        cart.add(compose_cart_line(VariantSelection.from_choices(plain_product, quantity=2)))

        assert cart.total_items() == 3
        assert cart.total_price() == 80 + 2 * 100
        assert cart.is_in_cart("p9") is True

    def test_remove_and_clear(self, plain_product, cart):
        line = cart.add(compose_cart_line(VariantSelection(plain_product))).line
        assert cart.remove(line.id) is True
        assert cart.remove(line.id) is False

        cart.add(compose_cart_line(VariantSelection(plain_product)))
        cart.clear()
        assert cart.lines == []

    def test_registry_reuses_known_ids(self):
        registry = CartRegistry()
        cart_id, cart = registry.get_or_create(None)

        assert registry.get_or_create(cart_id) == (cart_id, cart)
        assert registry.get_or_create("unknown")[0] != cart_id


# ═══════════════════════════════════════════════════════════
# CART REGISTRY
# ═══════════════════════════════════════════════════════════

class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


class TestCartRegistry:

    def test_reads_never_register(self):
        registry = CartRegistry()

        assert registry.get(None) is None
        assert registry.get("unknown") is None
        assert len(registry) == 0

    def test_least_recently_used_evicted_when_full(self):
        registry = CartRegistry(max_carts=2)
        first_id, _ = registry.get_or_create(None)
        second_id, _ = registry.get_or_create(None)

        registry.get(first_id)
        third_id, _ = registry.get_or_create(None)

        assert len(registry) == 2
        assert registry.get(second_id) is None
        assert registry.get(first_id) is not None
        assert registry.get(third_id) is not None

    def test_idle_carts_evicted(self):
        clock = FakeClock()
        registry = CartRegistry(idle_seconds=60, clock=clock)
        idle_id, _ = registry.get_or_create(None)
        active_id, _ = registry.get_or_create(None)

        clock.now += 45
        registry.get(active_id)
        clock.now += 30

        assert registry.get(idle_id) is None
        assert registry.get(active_id) is not None
        assert len(registry) == 1


# ═══════════════════════════════════════════════════════════
# WISHLIST
# ═══════════════════════════════════════════════════════════

class TestWishlistToCart:

    def test_mixed_batch(self, combination_product, plain_product, make_product, cart):
        sold_out = make_product(id="p3", slug="sold-out", stockQuantity=0)
        outcome = add_wishlist_to_cart([combination_product, plain_product, sold_out], cart)

        assert outcome.added == ["plain-tee"]
        assert outcome.needs_selection == ["linen-shirt"]
        assert outcome.skipped == ["sold-out"]
        assert outcome.message_key == "added_many_to_cart"
        assert cart.total_items() == 1

    def test_nothing_in_stock(self, make_product, cart):
        outcome = add_wishlist_to_cart([make_product(stockQuantity=0)], cart)
        assert outcome.added_count == 0
        assert outcome.message_key == "no_items_in_stock"
