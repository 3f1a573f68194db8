"""
Shared fixtures
===============
Environment is set before any storefront module is imported, because the
settings object is built at import time.
"""

import os

os.environ.setdefault("USER_JWT_SECRET", "test-secret-key-with-at-least-32-characters")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("BACKEND_API_URL", "http://backend.test")

import pytest

from storefront.api.schemas.product.product import Product


# ═══════════════════════════════════════════════════════════
# PRODUCTS
# ═══════════════════════════════════════════════════════════

@pytest.fixture
def make_product():
    """Builds a Product from a backend-shaped payload"""

    def _make(**overrides):
        payload = {
            "id": "p1",
            "name": "Linen Shirt",
            "nameAr": "قميص كتان",
            "price": 100,
            "stockQuantity": 10,
            "slug": "linen-shirt",
            "images": ["/img/linen.jpg"],
        }
        payload.update(overrides)
        return Product.model_validate(payload)

    return _make


@pytest.fixture
def combination_product(make_product):
    """M/red (2), M/blue (0), L/blue (5)"""
    return make_product(variantCombinations=[
        {"id": "c1", "size": "M", "color": "red", "stock": 2, "sortOrder": 1},
        {"id": "c2", "size": "M", "color": "blue", "stock": 0, "sortOrder": 2},
        {"id": "c3", "size": "L", "color": "blue", "stock": 5, "sortOrder": 3},
    ])


@pytest.fixture
def legacy_product(make_product):
    """Flat variants: S sold out, M without stock field, red 4, blue 0"""
    return make_product(variants=[
        {"type": "SIZE", "value": "S", "valueAr": "صغير", "stock": 0},
        {"type": "SIZE", "value": "M", "valueAr": "وسط"},
        {"type": "COLOR", "value": "red", "valueAr": "أحمر", "stock": 4},
        {"type": "COLOR", "value": "blue", "valueAr": "أزرق", "stock": 0},
    ])


@pytest.fixture
def plain_product(make_product):
    return make_product(id="p2", slug="plain-tee", name="Plain Tee", nameAr="تيشيرت", stockQuantity=3)
