# storefront/api/schemas/product/product.py

from typing import Any, Optional

from pydantic import Field, field_validator, model_validator

from storefront.api.schemas.shared.base import AppBaseModel, VariantType


def _non_negative(value: Optional[int]) -> Optional[int]:
    if value is None:
        return None
    return max(0, int(value))


class CategoryRef(AppBaseModel):
    name: str = ""
    name_ar: str = ""

    @model_validator(mode="before")
    @classmethod
    def default_arabic_name(cls, data: Any):
        if isinstance(data, dict) and not data.get("nameAr") and not data.get("name_ar"):
            data = {**data, "nameAr": data.get("name", "")}
        return data


class LegacyVariant(AppBaseModel):
    """Flat SIZE/COLOR variant from older product records"""
    type: VariantType
    value: str
    value_ar: Optional[str] = None
    stock: Optional[int] = None

    @field_validator("stock")
    @classmethod
    def clamp_stock(cls, value):
        return _non_negative(value)


class VariantCombination(AppBaseModel):
    """size x color row carrying its own stock; authoritative when present"""
    id: str = ""
    size: Optional[str] = None
    color: Optional[str] = None
    stock: int = 0
    sort_order: int = 0

    @field_validator("stock")
    @classmethod
    def clamp_stock(cls, value):
        return _non_negative(value)


class Product(AppBaseModel):
    id: str
    name: str = ""
    name_ar: str = ""
    price: float = 0
    sale_price: Optional[float] = None
    stock_quantity: int = 0
    slug: str = ""
    image: str = ""
    category: CategoryRef = Field(default_factory=CategoryRef)
    variants: list[LegacyVariant] = Field(default_factory=list)
    variant_combinations: list[VariantCombination] = Field(default_factory=list)

    @field_validator("stock_quantity")
    @classmethod
    def clamp_stock(cls, value):
        return _non_negative(value)

    @model_validator(mode="before")
    @classmethod
    def normalize_backend_payload(cls, data: Any):
        """
        Accepts the raw backend product: `_id` as id, `images[0]` (string
        or `{url}`) as image, string category ids, missing Arabic names and
        null lists.
        """
        if not isinstance(data, dict):
            return data
        data = dict(data)

        if not data.get("id"):
            data["id"] = str(data.get("_id") or "")
        else:
            data["id"] = str(data["id"])

        if not data.get("image"):
            images = data.get("images")
            if isinstance(images, list) and images:
                first = images[0]
                data["image"] = first if isinstance(first, str) else (first or {}).get("url", "")

        if not isinstance(data.get("category"), dict):
            data["category"] = {}

        if not data.get("nameAr") and not data.get("name_ar"):
            data["nameAr"] = data.get("name", "")

        for key in ("variants", "variantCombinations"):
            if data.get(key) is None:
                data.pop(key, None)

        for key in ("price", "stockQuantity"):
            if data.get(key) is None:
                data.pop(key, None)

        return data

    @property
    def uses_combinations(self) -> bool:
        return len(self.variant_combinations) > 0

    def variants_of(self, variant_type: VariantType) -> list[LegacyVariant]:
        return [v for v in self.variants if v.type == variant_type]


class ProductOption(AppBaseModel):
    value: str
    value_ar: Optional[str] = None
    available: bool
    hex: Optional[str] = None


class ProductAvailabilityOut(AppBaseModel):
    product_id: str
    selected_size: Optional[str] = None
    selected_color: Optional[str] = None
    sizes: list[ProductOption]
    colors: list[ProductOption]
    in_stock: bool
    available_stock: int
    requires_selection: bool
