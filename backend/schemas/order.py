from pydantic import BaseModel
from typing import List, Optional
from datetime import datetime


# Output schema for an individual order line item
class OrderItemOut(BaseModel):
    product_id: Optional[int] = None
    product_name: str
    quantity: int
    price: float
    line_total: float


# Output schema representing the full order details
class OrderOut(BaseModel):
    id: int
    user_id: int
    status: str
    total_price: float
    created_at: Optional[datetime] = None
    items: List[OrderItemOut]

# Schema for paginated order lists
class OrdersPage(BaseModel):
    items: List[OrderOut]
    total: int
    page: int
    page_size: int

class OrderResponse(BaseModel):
    ok: bool = True
    message: Optional[str] = None
    order: OrderOut

class OrdersResponse(BaseModel):
    ok: bool = True
    orders: OrdersPage
