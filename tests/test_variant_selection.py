"""
Variant selection tests
=======================
Size/color transitions, the quantity stepper and the availability output.
"""

from storefront.api.services.variant_selection import VariantSelection


class TestSizeColorTransitions:

    def test_size_resets_incompatible_color(self, combination_product):
        selection = VariantSelection(combination_product)
        assert selection.select_size("L")
        assert selection.select_color("blue")

        # blue is sold out in M
        assert selection.select_size("M")
        assert selection.size == "M"
        assert selection.color == ""

    def test_size_keeps_compatible_color(self, combination_product):
        selection = VariantSelection(combination_product)
        selection.select_color("red")
        selection.select_size("M")
        assert selection.color == "red"

    def test_color_never_resets_size(self, make_product):
        product = make_product(variantCombinations=[
            {"size": "M", "color": "red", "stock": 1},
            {"size": "L", "color": "blue", "stock": 1},
        ])
        selection = VariantSelection(product)
        selection.select_size("M")

        # blue does not exist in M: rejected, size untouched
        assert selection.select_color("blue") is False
        assert selection.size == "M"
        assert selection.color == ""

    def test_sold_out_size_rejected(self, legacy_product):
        selection = VariantSelection(legacy_product)
        assert selection.select_size("S") is False
        assert selection.size == ""

    def test_new_choice_resets_quantity(self, combination_product):
        selection = VariantSelection(combination_product)
        selection.select_size("L")
        selection.select_color("blue")
        selection.set_quantity(4)

        selection.select_size("M")
        assert selection.quantity == 1


class TestQuantityStepper:

    def test_increment_stops_at_available_stock(self, combination_product):
        selection = VariantSelection.from_choices(combination_product, "M", "red")
        assert selection.increment() is True
        assert selection.quantity == 2

        assert selection.increment() is False
        assert selection.quantity == 2

    def test_decrement_below_one_rejected(self, combination_product):
        selection = VariantSelection.from_choices(combination_product, "M", "red")
        assert selection.decrement() is False
        assert selection.quantity == 1

    def test_set_quantity_out_of_bounds(self, combination_product):
        selection = VariantSelection.from_choices(combination_product, "M", "red")
        assert selection.set_quantity(3) is False
        assert selection.set_quantity(0) is False
        assert selection.quantity == 1


class TestAvailability:

    def test_blue_disabled_red_selectable_in_m(self, combination_product):
        selection = VariantSelection(combination_product)
        selection.select_size("M")

        assert selection.select_color("blue") is False
        assert selection.color == ""

        colors = {option.value: option for option in selection.color_choices()}
        assert colors["blue"].available is False
        assert colors["red"].available is True

        assert selection.select_color("red") is True
        assert selection.available_stock() == 2

    def test_from_choices_drops_incompatible_color(self, combination_product):
        out = VariantSelection.from_choices(combination_product, "M", "blue").to_out()
        assert out.selected_size == "M"
        assert out.selected_color is None
        assert out.requires_selection is True

    def test_to_out_includes_color_hex(self, combination_product):
        out = VariantSelection.from_choices(combination_product, "L", "blue").to_out()
        colors = {option.value: option for option in out.colors}
        assert colors["blue"].hex == "#0000FF"
        assert out.in_stock is True
        assert out.available_stock == 5

    def test_is_complete(self, combination_product, plain_product):
        selection = VariantSelection(combination_product)
        selection.select_size("M")
        assert selection.is_complete() is False
        selection.select_color("red")
        assert selection.is_complete() is True

        assert VariantSelection(plain_product).is_complete() is True
