# storefront/api/services/cart_service.py
import logging
import time
import uuid
from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Callable, Iterable, Optional

from storefront.api.schemas.cart.cart import CartLine
from storefront.api.schemas.product.product import Product
from storefront.api.services import stock_resolver
from storefront.api.services.variant_selection import VariantSelection

logger = logging.getLogger(__name__)

MAX_CARTS = 10_000
CART_IDLE_SECONDS = 60 * 60 * 24


@dataclass
class CartOperation:
    """Outcome of a cart mutation; `message_key` resolves through the i18n catalog"""
    success: bool
    message_key: Optional[str] = None
    params: dict = field(default_factory=dict)
    line: Optional[CartLine] = None


@dataclass
class WishlistOutcome:
    added: list[str] = field(default_factory=list)
    needs_selection: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    message_key: str = "added_many_to_cart"

    @property
    def added_count(self) -> int:
        return len(self.added)


# ═══════════════════════════════════════════════════════════
# PRICE / LINE COMPOSITION
# ═══════════════════════════════════════════════════════════

def resolve_charged_price(price: float, sale_price: Optional[float]) -> float:
    """
    The price the shopper pays.

    The sale price applies only when it is positive AND below the regular
    price; otherwise the regular price is used unmodified.

    Examples:
        >>> resolve_charged_price(100, 0)
        100
        >>> resolve_charged_price(100, 150)
        100
        >>> resolve_charged_price(100, 80)
        80
    """
    if sale_price is not None and 0 < sale_price < price:
        return sale_price
    return price


def compose_cart_line(selection: VariantSelection) -> CartLine:
    product = selection.product
    charged = resolve_charged_price(product.price, product.sale_price)
    has_choice = bool(selection.size or selection.color)

    return CartLine(
        product_id=product.id,
        name=product.name,
        name_ar=product.name_ar,
        price=charged,
        sale_price=charged if charged != product.price else None,
        image=product.image,
        quantity=selection.quantity,
        selected_size=selection.size or None,
        selected_color=selection.color or None,
        stock_quantity=product.stock_quantity,
        variant_stock=selection.available_stock() if has_choice else None,
    )


# ═══════════════════════════════════════════════════════════
# CART STORE
# ═══════════════════════════════════════════════════════════

class CartStore:
    """
    In-memory cart. Lines are unique per (product, size, color); adding an
    existing combination sums the quantities.
    """

    def __init__(self):
        self.lines: list[CartLine] = []

    def find(self, line_id: str) -> Optional[CartLine]:
        return next((line for line in self.lines if line.id == line_id), None)

    def add(self, line: CartLine) -> CartOperation:
        available = line.available_stock

        if available is not None and available <= 0:
            return CartOperation(success=False, message_key="out_of_stock")

        existing = next((item for item in self.lines if item.key == line.key), None)

        if existing is not None:
            new_quantity = existing.quantity + line.quantity
            if available is not None and new_quantity > available:
                return CartOperation(success=False, message_key="only_n_available", params={"count": available})

            existing.quantity = new_quantity
            existing.variant_stock = line.variant_stock
            return CartOperation(success=True, line=existing)

        if available is not None and line.quantity > available:
            return CartOperation(success=False, message_key="only_n_available", params={"count": available})

        stored = line.model_copy(update={
            "id": f"{line.product_id}-{line.selected_size or 'no-size'}-"
                  f"{line.selected_color or 'no-color'}-{uuid.uuid4().hex[:8]}",
        })
        self.lines.append(stored)
        return CartOperation(success=True, line=stored)

    def update_quantity(self, line_id: str, quantity: int) -> Optional[CartLine]:
        """Quantity <= 0 removes the line; larger than stock is clamped to stock"""
        line = self.find(line_id)
        if line is None:
            return None

        if quantity <= 0:
            self.remove(line_id)
            return None

        available = line.available_stock
        if available is not None and quantity > available:
            quantity = available

        line.quantity = max(1, quantity)
        return line

    def remove(self, line_id: str) -> bool:
        before = len(self.lines)
        self.lines = [line for line in self.lines if line.id != line_id]
        return len(self.lines) < before

    def clear(self):
        self.lines = []

    def total_items(self) -> int:
        return sum(line.quantity for line in self.lines)

    def total_price(self) -> float:
        return sum(line.unit_price * line.quantity for line in self.lines)

    def is_in_cart(self, product_id: str) -> bool:
        return any(line.product_id == product_id for line in self.lines)


class CartRegistry:
    """
    Carts keyed by the shopper's cart-id cookie.

    Reads never register a cart. Carts untouched for `idle_seconds` are
    evicted, and past `max_carts` the least recently used one goes first.
    """

    def __init__(
            self,
            max_carts: int = MAX_CARTS,
            idle_seconds: float = CART_IDLE_SECONDS,
            clock: Callable[[], float] = time.monotonic,
    ):
        self.max_carts = max(1, max_carts)
        self.idle_seconds = idle_seconds
        self._clock = clock
        # cart id -> (cart, last access), least recently used first
        self._carts: OrderedDict[str, tuple[CartStore, float]] = OrderedDict()

    def __len__(self) -> int:
        return len(self._carts)

    def get(self, cart_id: Optional[str]) -> Optional[CartStore]:
        self._evict_idle()
        if not cart_id or cart_id not in self._carts:
            return None
        cart, _ = self._carts.pop(cart_id)
        self._carts[cart_id] = (cart, self._clock())
        return cart

    def get_or_create(self, cart_id: Optional[str]) -> tuple[str, CartStore]:
        cart = self.get(cart_id)
        if cart is not None:
            return cart_id, cart

        while len(self._carts) >= self.max_carts:
            evicted_id, _ = self._carts.popitem(last=False)
            logger.info(f"🛒 Cart {evicted_id} evicted (registry full)")

        new_id = uuid.uuid4().hex
        cart = CartStore()
        self._carts[new_id] = (cart, self._clock())
        return new_id, cart

    def _evict_idle(self):
        deadline = self._clock() - self.idle_seconds
        while self._carts:
            cart_id, (_, last_access) = next(iter(self._carts.items()))
            if last_access > deadline:
                break
            del self._carts[cart_id]
            logger.info(f"🛒 Cart {cart_id} evicted after inactivity")


# ═══════════════════════════════════════════════════════════
# ADD TO CART
# ═══════════════════════════════════════════════════════════

def add_to_cart(selection: VariantSelection, cart: CartStore) -> CartOperation:
    """
    Adds the current selection to the cart.

    - every axis with options must be chosen (`select_options`)
    - stock is re-checked right before dispatch; when it fails the cart is
      left untouched and no message is attached (caller decides)
    - on success the selection is reset (no size, no color, quantity 1)
    """
    if not selection.is_complete():
        return CartOperation(success=False, message_key="select_options")

    if not stock_resolver.has_stock(selection.product, selection.size or None, selection.color or None):
        logger.info(f"🛒 Stale selection rejected for product {selection.product.id}")
        return CartOperation(success=False)

    line = compose_cart_line(selection)
    result = cart.add(line)

    if not result.success:
        return result

    selection.reset()
    result.message_key = "added_to_cart"
    return result


def add_wishlist_to_cart(products: Iterable[Product], cart: CartStore) -> WishlistOutcome:
    """
    Adds every in-stock wishlist product to the cart, one after the other.

    Products that expose sizes or colors cannot be added blind; their slugs
    come back in `needs_selection` so the UI can open the variant picker.
    """
    outcome = WishlistOutcome()
    available = []
    for product in products:
        if product.stock_quantity > 0:
            available.append(product)
        else:
            outcome.skipped.append(product.slug)

    if not available:
        outcome.message_key = "no_items_in_stock"
        return outcome

    for product in available:
        if stock_resolver.requires_selection(product):
            outcome.needs_selection.append(product.slug)
            continue

        result = cart.add(compose_cart_line(VariantSelection(product)))
        if result.success:
            outcome.added.append(product.slug)
        else:
            outcome.skipped.append(product.slug)

    logger.info(
        f"🛒 Wishlist → cart: {outcome.added_count} added, "
        f"{len(outcome.needs_selection)} need selection, {len(outcome.skipped)} skipped"
    )
    return outcome
