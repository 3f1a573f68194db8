# storefront/api/schemas/shared/base.py

import enum

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class AppBaseModel(BaseModel):
    """
    Global schema configuration.

    The storefront and the commerce backend speak camelCase JSON
    (`salePrice`, `variantCombinations`), Python code uses snake_case.
    - alias_generator=to_camel maps one onto the other
    - populate_by_name accepts either spelling on input
    - extra='ignore' tolerates backend fields this service does not use
    - numeric ids from older records are read as strings
    """
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        coerce_numbers_to_str=True,
        from_attributes=True,
        extra='ignore',
    )


class VariantType(str, enum.Enum):
    SIZE = "SIZE"
    COLOR = "COLOR"
