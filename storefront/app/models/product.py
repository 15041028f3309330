import json
from typing import Annotated, Any, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field as PydField, field_validator
from sqlalchemy import JSON, Column
from sqlmodel import Field, SQLModel

# NaN and Infinity are legal JSON numbers for Python's parser; never a price
Price = Annotated[float, PydField(allow_inf_nan=False)]


class Product(SQLModel, table=True):
    """Catalog row. `variants` is an ordered list of labels stored as a JSON array."""

    __tablename__ = "product"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(index=True)
    category: str = Field(index=True)
    price: float = Field(default=0.0, ge=0)
    image: Optional[str] = None
    in_stock: bool = Field(default=True)
    variants: List[str] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    description: Optional[str] = None


def _coerce_variants(v: Any) -> Any:
    # older clients send variants JSON-encoded, e.g. '["S","M"]'
    if isinstance(v, str):
        if not v.strip():
            return []
        try:
            v = json.loads(v)
        except json.JSONDecodeError:
            raise ValueError("variants must be a list of strings or a JSON array")
    if v is None:
        return []
    if not isinstance(v, list):
        raise ValueError("variants must be a list of strings")
    out: List[str] = []
    for item in v:
        if not isinstance(item, str) or not item.strip():
            raise ValueError("variants must be non-empty strings")
        if item.strip() not in out:
            out.append(item.strip())
    return out


class ProductCreate(BaseModel):
    # name/category/price are Optional here so a missing one yields the
    # catalog's own 400 instead of a pydantic 422.
    model_config = ConfigDict(populate_by_name=True)

    name: Optional[str] = None
    category: Optional[str] = None
    price: Optional[Price] = None
    image: Optional[str] = None
    in_stock: Optional[bool] = PydField(
        default=None, validation_alias=AliasChoices("inStock", "in_stock")
    )
    variants: Optional[List[str]] = None
    description: Optional[str] = None

    @field_validator("variants", mode="before")
    @classmethod
    def _check_variants(cls, v: Any) -> Any:
        return _coerce_variants(v)


class ProductUpdate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: Optional[str] = None
    category: Optional[str] = None
    price: Optional[Price] = None
    image: Optional[str] = None
    in_stock: Optional[bool] = PydField(
        default=None, validation_alias=AliasChoices("inStock", "in_stock")
    )
    variants: Optional[List[str]] = None
    description: Optional[str] = None

    @field_validator("variants", mode="before")
    @classmethod
    def _check_variants(cls, v: Any) -> Any:
        return _coerce_variants(v)


class ProductRead(BaseModel):
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: int
    name: str
    category: str
    price: float
    image: Optional[str] = None
    in_stock: bool = PydField(serialization_alias="inStock")
    variants: List[str] = PydField(default_factory=list)
    description: Optional[str] = None
