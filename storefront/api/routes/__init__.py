from fastapi import APIRouter

from storefront.api.routes.account import router as account_router
from storefront.api.routes.admin import router as admin_router
from storefront.api.routes.cart import router as cart_router
from storefront.api.routes.csrf import router as csrf_router
from storefront.api.routes.products import router as products_router
from storefront.api.routes.reviews import router as reviews_router

router = APIRouter()

router.include_router(csrf_router)
router.include_router(products_router)
router.include_router(cart_router)  # cart + wishlist
router.include_router(reviews_router)
router.include_router(account_router)
router.include_router(admin_router)
