# storefront/api/routes/products.py

from typing import Optional

from fastapi import APIRouter, Query, status

from storefront.api.schemas.product.product import Product, ProductAvailabilityOut
from storefront.api.services.backend_client import BackendError, StorefrontBackendClient
from storefront.api.services.variant_selection import VariantSelection
from storefront.core.dependencies import GetBackendClientDep, GetLanguageDep
from storefront.core.i18n import Language, localized_http_exception

router = APIRouter(prefix="/products", tags=["Products"])


async def load_product(backend: StorefrontBackendClient, slug: str, language: Language) -> Product:
    """Fetches a product fresh from the backend; 404 becomes a localized error"""
    try:
        return await backend.get_product(slug)
    except BackendError as e:
        if e.status_code == status.HTTP_404_NOT_FOUND:
            raise localized_http_exception(status.HTTP_404_NOT_FOUND, "product_not_found", language)
        raise


@router.get("/{slug}", response_model=Product)
async def get_product(slug: str, backend: GetBackendClientDep, language: GetLanguageDep):
    return await load_product(backend, slug, language)


@router.get("/{slug}/availability", response_model=ProductAvailabilityOut)
async def get_availability(
        slug: str,
        backend: GetBackendClientDep,
        language: GetLanguageDep,
        size: Optional[str] = None,
        color: Optional[str] = None,
        quantity: int = Query(1, ge=1),
):
    """
    Option flags and the quantity ceiling for a selection.

    The choices are replayed in UI order, so a color that is not stocked in
    the chosen size comes back cleared (`selectedColor` is null).
    """
    product = await load_product(backend, slug, language)
    return VariantSelection.from_choices(product, size, color, quantity).to_out()
