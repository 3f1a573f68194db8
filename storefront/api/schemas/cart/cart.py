# storefront/api/schemas/cart/cart.py

from typing import Optional

from pydantic import Field

from storefront.api.schemas.shared.base import AppBaseModel


class CartLine(AppBaseModel):
    """A line in the shopper's cart; transient, never persisted here"""
    id: str = ""
    product_id: str
    name: str
    name_ar: str
    price: float
    sale_price: Optional[float] = None
    image: str = ""
    quantity: int = Field(1, ge=1)
    selected_size: Optional[str] = None
    selected_color: Optional[str] = None
    stock_quantity: Optional[int] = None
    variant_stock: Optional[int] = None

    @property
    def key(self) -> tuple:
        return self.product_id, self.selected_size, self.selected_color

    @property
    def available_stock(self) -> Optional[int]:
        return self.variant_stock if self.variant_stock is not None else self.stock_quantity

    @property
    def unit_price(self) -> float:
        # `price` already holds the charged price (sale price when it applied)
        return self.price


class AddToCartRequest(AppBaseModel):
    slug: str
    size: Optional[str] = None
    color: Optional[str] = None
    quantity: int = Field(1, ge=1)


class UpdateCartItemRequest(AppBaseModel):
    quantity: int


class AddToCartResult(AppBaseModel):
    success: bool
    message: Optional[str] = None
    line: Optional[CartLine] = None


class CartOut(AppBaseModel):
    items: list[CartLine]
    total_items: int
    total_price: float


class WishlistAddRequest(AppBaseModel):
    slugs: list[str] = Field(..., min_length=1, max_length=100)


class WishlistAddResult(AppBaseModel):
    added_count: int
    added: list[str]
    needs_selection: list[str]
    skipped: list[str]
    message: str
