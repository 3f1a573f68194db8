# storefront/api/services/stock_resolver.py
"""
Variant Stock Resolution
========================

One shared set of pure functions answering "is this selection in stock?"
and "how many can be bought?" for a product, used by the product page,
the wishlist modal and the cart.

Two stock sources exist:

- `variant_combinations`: size x color rows with their own stock. When the
  list is non-empty it is authoritative.
- `variants` (legacy): flat SIZE/COLOR values where stock may sit on either
  axis. Consulted only when there are no combinations.
"""

from typing import NamedTuple, Optional

from storefront.api.schemas.product.product import LegacyVariant, Product, VariantCombination
from storefront.api.schemas.shared.base import VariantType

# Legacy records may carry stock on both the SIZE and the COLOR variant.
# The SIZE variant is consulted first; the first one that defines `stock`
# decides. Changing this order changes which products look sold out.
LEGACY_STOCK_PRIORITY = (VariantType.SIZE, VariantType.COLOR)


class VariantValue(NamedTuple):
    value: str
    value_ar: Optional[str] = None


# ═══════════════════════════════════════════════════════════
# LOOKUPS
# ═══════════════════════════════════════════════════════════

def _find_legacy_variant(product: Product, variant_type: VariantType, value: str) -> Optional[LegacyVariant]:
    return next(
        (v for v in product.variants if v.type == variant_type and v.value == value),
        None,
    )


def _matching_combinations(
        product: Product,
        size: Optional[str],
        color: Optional[str],
) -> list[VariantCombination]:
    """Rows matching every axis that is given, in record order"""
    return [
        combo for combo in product.variant_combinations
        if (not size or combo.size == size) and (not color or combo.color == color)
    ]


# ═══════════════════════════════════════════════════════════
# STOCK
# ═══════════════════════════════════════════════════════════

def has_stock(product: Product, size: Optional[str] = None, color: Optional[str] = None) -> bool:
    """
    Whether the (possibly partial) selection can be bought.

    Args:
        product: Product with its variant data
        size: Selected size, or None/'' when not chosen
        color: Selected color, or None/'' when not chosen

    Returns:
        - no selection: whole-product `stock_quantity > 0`
        - combinations, both axes: the exact row has stock (no row -> False)
        - combinations, one axis: any row on that axis has stock
        - legacy: the first variant in LEGACY_STOCK_PRIORITY order that
          defines stock decides, else `stock_quantity > 0`
    """
    if not size and not color:
        return product.stock_quantity > 0

    if product.uses_combinations:
        matches = _matching_combinations(product, size, color)
        if size and color:
            return bool(matches) and matches[0].stock > 0
        return any(combo.stock > 0 for combo in matches)

    selected = {VariantType.SIZE: size, VariantType.COLOR: color}
    for variant_type in LEGACY_STOCK_PRIORITY:
        value = selected[variant_type]
        if not value:
            continue
        variant = _find_legacy_variant(product, variant_type, value)
        if variant is not None and variant.stock is not None:
            return variant.stock > 0

    return product.stock_quantity > 0


def available_stock(product: Product, size: Optional[str] = None, color: Optional[str] = None) -> int:
    """
    Upper bound for the quantity stepper.

    Combinations: the exact row's stock when both axes are selected (the
    FIRST matching row when records are duplicated), the SUM over matching
    rows when one axis is selected, 0 when nothing matches or nothing is
    selected. Legacy: the first variant in record order matching the size
    or the color; its stock when defined, otherwise `stock_quantity`.
    """
    if product.uses_combinations:
        if not size and not color:
            return 0

        matches = _matching_combinations(product, size, color)
        if not matches:
            return 0
        if size and color:
            return matches[0].stock
        return sum(combo.stock for combo in matches)

    if size or color:
        variant = next(
            (
                v for v in product.variants
                if (size and v.type == VariantType.SIZE and v.value == size)
                or (color and v.type == VariantType.COLOR and v.value == color)
            ),
            None,
        )
        if variant is not None and variant.stock is not None:
            return variant.stock

    return product.stock_quantity


# ═══════════════════════════════════════════════════════════
# OPTIONS
# ═══════════════════════════════════════════════════════════

def _options(product: Product, variant_type: VariantType) -> list[VariantValue]:
    legacy = product.variants_of(variant_type)
    if legacy:
        return [VariantValue(v.value, v.value_ar) for v in legacy]

    # Records with combinations only: derive the axis from the rows
    attr = "size" if variant_type == VariantType.SIZE else "color"
    seen: dict[str, VariantValue] = {}
    for combo in sorted(product.variant_combinations, key=lambda c: c.sort_order):
        value = getattr(combo, attr)
        if value and value not in seen:
            seen[value] = VariantValue(value)
    return list(seen.values())


def size_options(product: Product) -> list[VariantValue]:
    return _options(product, VariantType.SIZE)


def color_options(product: Product) -> list[VariantValue]:
    return _options(product, VariantType.COLOR)


def requires_selection(product: Product) -> bool:
    """Products exposing any size or color must be added through a selection"""
    return bool(size_options(product) or color_options(product))
