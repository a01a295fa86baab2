from pydantic import BaseModel, Field
from typing import List, Optional

from schemas.product import INT32_MAX, ProductOut

# Request schema for adding an item to the cart
class CartAddItem(BaseModel):
    quantity: int = Field(ge=1, le=INT32_MAX)

# Response schema for a single cart line item
class CartItemOut(BaseModel):
    product_id: int
    name: str
    quantity: int
    price: float
    line_total: float
    product: ProductOut

# Response schema for the entire cart summary
class CartOut(BaseModel):
    id: int
    products: List[CartItemOut]
    total: float

class CartResponse(BaseModel):
    ok: bool = True
    message: Optional[str] = None
    cart: Optional[CartOut] = None
    # Only present when the user has no cart yet
    products: Optional[List[CartItemOut]] = None

class MessageResponse(BaseModel):
    ok: bool = True
    message: str
