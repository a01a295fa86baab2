# backend/schemas/product.py
from pydantic import BaseModel, Field, ConfigDict
from typing import Optional, List

from schemas.category import CategoryOut

# Upper bound of the INTEGER columns behind stock and quantity
INT32_MAX = 2_147_483_647


# Base configuration for ORM compatibility
class ORMBase(BaseModel):
    model_config = ConfigDict(from_attributes=True)


# Constraints checked before a product row is written
class ProductCreate(BaseModel):
    name: str = Field(min_length=3, max_length=100)
    description: str = Field(min_length=10, max_length=500)
    price: float = Field(ge=0, allow_inf_nan=False)
    stock: int = Field(ge=0, le=INT32_MAX)
    category_id: int


# Partial update; unset fields are left untouched
class ProductUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=3, max_length=100)
    description: Optional[str] = Field(None, min_length=10, max_length=500)
    price: Optional[float] = Field(None, ge=0, allow_inf_nan=False)
    stock: Optional[int] = Field(None, ge=0, le=INT32_MAX)
    is_available: Optional[bool] = None
    category_id: Optional[int] = None


class ProductSeller(ORMBase):
    id: int
    name: str


class ProductOut(ORMBase):
    id: int
    name: str
    description: str
    price: float
    stock: int
    is_available: bool
    img: Optional[str] = None
    category_id: int
    user_id: int
    category: Optional[CategoryOut] = None
    user: Optional[ProductSeller] = None


# Paginated response for product listings
class ProductListPage(ORMBase):
    items: List[ProductOut]
    total: int
    page: int
    page_size: int


class ProductResponse(BaseModel):
    ok: bool = True
    message: Optional[str] = None
    product: ProductOut


class ProductListResponse(BaseModel):
    ok: bool = True
    products: ProductListPage
