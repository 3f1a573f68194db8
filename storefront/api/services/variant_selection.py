# storefront/api/services/variant_selection.py
import logging
from typing import Optional

from storefront.api.schemas.product.product import Product, ProductAvailabilityOut, ProductOption
from storefront.api.services import stock_resolver
from storefront.core.utils.colors import color_hex

logger = logging.getLogger(__name__)


class VariantSelection:
    """
    The shopper's (size, color, quantity) choice for one product.

    Transitions:
    - choosing a size the current color is not stocked in clears the color
    - choosing a color never touches the size (the reverse reset does not
      exist; kept as-is pending a product decision)
    - any new size/color puts the quantity back to 1
    """

    def __init__(self, product: Product):
        self.product = product
        self.size = ""
        self.color = ""
        self.quantity = 1

    @classmethod
    def from_choices(
            cls,
            product: Product,
            size: Optional[str] = None,
            color: Optional[str] = None,
            quantity: int = 1,
    ) -> "VariantSelection":
        """Replays the choices in UI order: size first, then color, then quantity"""
        selection = cls(product)
        if size:
            selection.select_size(size)
        if color:
            selection.select_color(color)
        selection.set_quantity(quantity)
        return selection

    # ═══════════════════════════════════════════════════════════
    # TRANSITIONS
    # ═══════════════════════════════════════════════════════════

    def select_size(self, size: str) -> bool:
        """Returns False (and changes nothing) when the size is sold out"""
        if not stock_resolver.has_stock(self.product, size, None):
            return False

        self.size = size
        self.quantity = 1

        if self.color and not stock_resolver.has_stock(self.product, size, self.color):
            logger.debug(f"Color '{self.color}' unavailable in size '{size}', clearing it")
            self.color = ""

        return True

    def select_color(self, color: str) -> bool:
        """Returns False (and changes nothing) when the color is sold out for the current size"""
        if not stock_resolver.has_stock(self.product, self.size or None, color):
            return False

        self.color = color
        self.quantity = 1
        return True

    def available_stock(self) -> int:
        return stock_resolver.available_stock(self.product, self.size or None, self.color or None)

    def increment(self) -> bool:
        """No-op returning False once the quantity reaches the available stock"""
        if self.quantity >= self.available_stock():
            return False
        self.quantity += 1
        return True

    def decrement(self) -> bool:
        """No-op returning False at quantity 1"""
        if self.quantity <= 1:
            return False
        self.quantity -= 1
        return True

    def set_quantity(self, quantity: int) -> bool:
        if quantity == self.quantity:
            return True
        if quantity < 1 or quantity > self.available_stock():
            return False
        self.quantity = quantity
        return True

    def reset(self):
        self.size = ""
        self.color = ""
        self.quantity = 1

    # ═══════════════════════════════════════════════════════════
    # STATE
    # ═══════════════════════════════════════════════════════════

    def is_complete(self) -> bool:
        """Every axis that has options must be chosen"""
        if stock_resolver.size_options(self.product) and not self.size:
            return False
        if stock_resolver.color_options(self.product) and not self.color:
            return False
        return True

    def size_choices(self) -> list[ProductOption]:
        return [
            ProductOption(
                value=option.value,
                value_ar=option.value_ar,
                available=stock_resolver.has_stock(self.product, option.value, None),
            )
            for option in stock_resolver.size_options(self.product)
        ]

    def color_choices(self) -> list[ProductOption]:
        return [
            ProductOption(
                value=option.value,
                value_ar=option.value_ar,
                available=stock_resolver.has_stock(self.product, self.size or None, option.value),
                hex=color_hex(option.value),
            )
            for option in stock_resolver.color_options(self.product)
        ]

    def in_stock(self) -> bool:
        return stock_resolver.has_stock(self.product, self.size or None, self.color or None)

    def to_out(self) -> ProductAvailabilityOut:
        return ProductAvailabilityOut(
            product_id=self.product.id,
            selected_size=self.size or None,
            selected_color=self.color or None,
            sizes=self.size_choices(),
            colors=self.color_choices(),
            in_stock=self.in_stock(),
            available_stock=self.available_stock(),
            requires_selection=stock_resolver.requires_selection(self.product),
        )
