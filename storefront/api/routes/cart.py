# storefront/api/routes/cart.py
import logging
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Request, Response, status

from storefront.api.routes.products import load_product
from storefront.api.schemas.cart.cart import (
    AddToCartRequest,
    AddToCartResult,
    CartOut,
    UpdateCartItemRequest,
    WishlistAddRequest,
    WishlistAddResult,
)
from storefront.api.services.backend_client import BackendError
from storefront.api.services.cart_service import CartStore, add_to_cart, add_wishlist_to_cart
from storefront.api.services.variant_selection import VariantSelection
from storefront.core.config import config
from storefront.core.dependencies import (
    GetBackendClientDep,
    GetCartRegistryDep,
    GetCSRFTokenDep,
    GetLanguageDep,
)
from storefront.core.i18n import localized_http_exception, translate

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Cart"])


def get_cart(request: Request, response: Response, registry: GetCartRegistryDep) -> CartStore:
    """The shopper's cart, identified by the cart-id cookie (created on first use)"""
    cart_id, cart = registry.get_or_create(request.cookies.get(config.CART_COOKIE_NAME))
    response.set_cookie(
        key=config.CART_COOKIE_NAME,
        value=cart_id,
        httponly=True,
        secure=config.is_production,
        samesite="lax",
        path="/",
    )
    return cart


def find_cart(request: Request, registry: GetCartRegistryDep) -> Optional[CartStore]:
    """The shopper's cart if one was already created; never registers a new one"""
    return registry.get(request.cookies.get(config.CART_COOKIE_NAME))


GetCartDep = Annotated[CartStore, Depends(get_cart)]
GetExistingCartDep = Annotated[Optional[CartStore], Depends(find_cart)]


def cart_out(cart: Optional[CartStore]) -> CartOut:
    if cart is None:
        return CartOut(items=[], total_items=0, total_price=0)
    return CartOut(items=cart.lines, total_items=cart.total_items(), total_price=cart.total_price())


# ═══════════════════════════════════════════════════════════
# CART
# ═══════════════════════════════════════════════════════════

@router.get("/cart", response_model=CartOut)
async def read_cart(cart: GetExistingCartDep):
    return cart_out(cart)


@router.post("/cart/items", response_model=AddToCartResult)
async def add_cart_item(
        payload: AddToCartRequest,
        _csrf: GetCSRFTokenDep,
        cart: GetCartDep,
        backend: GetBackendClientDep,
        language: GetLanguageDep,
):
    product = await load_product(backend, payload.slug, language)
    selection = VariantSelection.from_choices(product, payload.size, payload.color)

    if (payload.size and selection.size != payload.size) or (payload.color and selection.color != payload.color):
        raise localized_http_exception(status.HTTP_409_CONFLICT, "option_unavailable", language)

    if not selection.set_quantity(payload.quantity):
        raise localized_http_exception(
            status.HTTP_409_CONFLICT, "only_n_available", language, count=selection.available_stock(),
        )

    result = add_to_cart(selection, cart)

    if not result.success:
        if result.message_key == "select_options":
            raise localized_http_exception(status.HTTP_400_BAD_REQUEST, "select_options", language)
        raise localized_http_exception(
            status.HTTP_409_CONFLICT, result.message_key or "out_of_stock", language, **result.params,
        )

    return AddToCartResult(
        success=True,
        message=translate(result.message_key, language),
        line=result.line,
    )


@router.patch("/cart/items/{line_id}", response_model=CartOut)
async def update_cart_item(
        line_id: str,
        payload: UpdateCartItemRequest,
        cart: GetExistingCartDep,
        language: GetLanguageDep,
        _csrf: GetCSRFTokenDep,
):
    if cart is None or cart.find(line_id) is None:
        raise localized_http_exception(status.HTTP_404_NOT_FOUND, "cart_item_not_found", language)

    cart.update_quantity(line_id, payload.quantity)
    return cart_out(cart)


@router.delete("/cart/items/{line_id}", response_model=CartOut)
async def remove_cart_item(
        line_id: str,
        cart: GetExistingCartDep,
        language: GetLanguageDep,
        _csrf: GetCSRFTokenDep,
):
    if cart is None or not cart.remove(line_id):
        raise localized_http_exception(status.HTTP_404_NOT_FOUND, "cart_item_not_found", language)
    return cart_out(cart)


@router.delete("/cart", response_model=CartOut)
async def clear_cart(cart: GetExistingCartDep, _csrf: GetCSRFTokenDep):
    if cart is not None:
        cart.clear()
    return cart_out(cart)


# ═══════════════════════════════════════════════════════════
# WISHLIST
# ═══════════════════════════════════════════════════════════

@router.post("/wishlist/add-to-cart", response_model=WishlistAddResult)
async def add_wishlist_items(
        payload: WishlistAddRequest,
        _csrf: GetCSRFTokenDep,
        cart: GetCartDep,
        backend: GetBackendClientDep,
        language: GetLanguageDep,
):
    """
    Adds every in-stock wishlist item to the cart.

    Products are fetched and added strictly one after the other; items with
    sizes or colors are returned in `needsSelection` for the variant picker.
    """
    products = []
    missing = []
    for slug in payload.slugs:
        try:
            products.append(await backend.get_product(slug))
        except BackendError as e:
            if e.status_code != status.HTTP_404_NOT_FOUND:
                raise
            logger.info(f"🛒 Wishlist product '{slug}' no longer exists")
            missing.append(slug)

    outcome = add_wishlist_to_cart(products, cart)

    return WishlistAddResult(
        added_count=outcome.added_count,
        added=outcome.added,
        needs_selection=outcome.needs_selection,
        skipped=outcome.skipped + missing,
        message=translate(outcome.message_key, language, count=outcome.added_count),
    )
