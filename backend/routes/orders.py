# backend/routes/orders.py
from typing import List
from fastapi import APIRouter, Depends, HTTPException, Request, Query, status
from sqlalchemy.orm import Session, joinedload
import logging

from database import get_db
from utils.tokenJWT import get_current_user
from utils.audit import write_log, client_ip
from utils.rate_limit import api_limit
from models.users import User
from models.product import Product
from models.cart import Cart, CartItem
from models.order import Order, OrderItem, OrderStatus
from schemas.order import OrderOut, OrderItemOut, OrderResponse, OrdersResponse

router = APIRouter(tags=["Orders"])
logger = logging.getLogger(__name__)

ORDERS_PER_PAGE = 10

# Map Order model to OrderOut schema
def _order_to_out(order: Order) -> OrderOut:
    items: List[OrderItemOut] = []
    for it in order.items:
        items.append(OrderItemOut(
            product_id=it.product_id,
            product_name=it.product_name,
            quantity=it.quantity,
            price=it.price,
            line_total=round(it.quantity * it.price, 2)
        ))
    return OrderOut(
        id=order.id,
        user_id=order.user_id,
        status=order.status,
        total_price=round(order.total_price, 2),
        created_at=order.created_at,
        items=items
    )

def _decrement_stock(db: Session, product_id: int, quantity: int) -> bool:
    # Conditional update: two checkouts racing for the last units cannot both win
    updated = db.query(Product).filter(
        Product.id == product_id, Product.stock >= quantity
    ).update({Product.stock: Product.stock - quantity}, synchronize_session=False)
    return updated == 1

def _place_order(db: Session, user: User) -> Order:
    """
    Turns the user's cart into an order: freezes line prices, takes the goods
    out of stock and empties the cart. Nothing is committed here; the caller
    owns the transaction.
    """
    cart = db.query(Cart).options(
        joinedload(Cart.items).joinedload(CartItem.product)
    ).filter(Cart.user_id == user.id).first()
    if not cart or not cart.items:
        raise HTTPException(status_code=422, detail="Cart is empty")

    # 1. Total from the prices captured when the lines were added
    total = round(sum(ci.price * ci.quantity for ci in cart.items), 2)

    # 2. Order header
    order = Order(user_id=user.id, status=OrderStatus.PENDING.value, total_price=total)
    db.add(order)

    # 3. Frozen line items and stock deduction
    for ci in cart.items:
        order.items.append(OrderItem(
            product_id=ci.product_id,
            product_name=ci.product.name,
            quantity=ci.quantity,
            price=ci.price,
        ))
        if not _decrement_stock(db, ci.product_id, ci.quantity):
            raise HTTPException(status_code=422, detail=f"Insufficient stock for: {ci.product.name}")

    # 4. Empty the cart, keep the cart row
    cart.items.clear()
    db.flush()
    return order

# Convert the cart into an order in a single transaction
@router.post("/checkout", response_model=OrderResponse, status_code=status.HTTP_201_CREATED)
@api_limit
def checkout(
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    try:
        order = _place_order(db, current_user)
        # Audit row goes out with the order or not at all
        write_log(
            db, user_id=current_user.id, action="CHECKOUT", resource="orders", status="SUCCESS",
            ip=client_ip(request), meta={"order_id": order.id, "total": order.total_price, "lines": len(order.items)},
            commit=False,
        )
        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(order)
    out = _order_to_out(order)
    logger.info("Order %s placed by user %s, total %.2f", order.id, current_user.id, out.total_price)
    return {"ok": True, "message": "Order created", "order": out}


# List the caller's orders, newest first
@router.get("/orders", response_model=OrdersResponse)
@api_limit
def list_my_orders(
    request: Request,
    page: int = Query(1, ge=1),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    q = db.query(Order).filter(Order.user_id == current_user.id)
    total = q.count()
    rows = q.options(joinedload(Order.items)).order_by(
        Order.created_at.desc(), Order.id.desc()
    ).offset((page - 1) * ORDERS_PER_PAGE).limit(ORDERS_PER_PAGE).all()
    items = [_order_to_out(o) for o in rows]
    return {"ok": True, "orders": {"items": items, "total": total, "page": page, "page_size": ORDERS_PER_PAGE}}


# Get details of a specific order
@router.get("/orders/{order_id}", response_model=OrderResponse)
@api_limit
def get_order_detail(
    order_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    o = db.query(Order).options(joinedload(Order.items)).filter(Order.id == order_id).first()

    # Same answer for foreign and missing orders so ids cannot be probed
    if not o or o.user_id != current_user.id:
        raise HTTPException(status_code=403, detail="Forbidden")
    return {"ok": True, "order": _order_to_out(o)}
