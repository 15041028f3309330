from typing import Optional
from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class CartItemIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    product_id: int = Field(validation_alias=AliasChoices("productId", "product_id"), ge=1)
    variant: Optional[str] = Field(default=None, max_length=100)  # "M", "Black", ...
