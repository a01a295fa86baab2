# backend/routes/cart.py
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status, Request
from sqlalchemy.orm import Session, joinedload
from database import get_db
from utils.tokenJWT import get_current_user
from utils.audit import write_log, client_ip
from utils.rate_limit import api_limit
from models.users import User
from models.product import Product
from models.cart import Cart, CartItem
from schemas.cart import CartAddItem, CartOut, CartItemOut, CartResponse, MessageResponse
from schemas.product import ProductOut

router = APIRouter(prefix="/cart", tags=["Cart"])

def _find_cart(db: Session, user_id: int) -> Optional[Cart]:
    # Lines come with their product, its category and seller in one go
    return db.query(Cart).options(
        joinedload(Cart.items).joinedload(CartItem.product).joinedload(Product.category),
        joinedload(Cart.items).joinedload(CartItem.product).joinedload(Product.user),
    ).filter(Cart.user_id == user_id).first()

def _get_or_create_cart(db: Session, user_id: int) -> Cart:
    # Carts are created on first use, not at registration
    cart = db.query(Cart).filter(Cart.user_id == user_id).first()
    if not cart:
        cart = Cart(user_id=user_id)
        db.add(cart)
        db.flush()
    return cart

def _cart_to_out(cart: Cart) -> CartOut:
    items_out = []
    for it in cart.items:
        items_out.append(CartItemOut(
            product_id=it.product_id,
            name=it.product.name,
            quantity=it.quantity,
            price=it.price, # Price captured when the line was added
            line_total=round(it.price * it.quantity, 2),
            product=ProductOut.model_validate(it.product),
        ))
    return CartOut(id=cart.id, products=items_out, total=cart.total)

@router.get("", response_model=CartResponse)
@api_limit
def get_cart(
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    cart = _find_cart(db, current_user.id)
    if not cart:
        return {"ok": True, "message": "Cart is empty", "products": []}
    return {"ok": True, "cart": _cart_to_out(cart)}

@router.post("/add/{product_id}", response_model=CartResponse, status_code=status.HTTP_201_CREATED)
@api_limit
def add_to_cart(
    product_id: int,
    payload: CartAddItem,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    product = db.query(Product).filter(Product.id == product_id).first()
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    if not product.is_available:
        raise HTTPException(status_code=422, detail="Product is not available")

    cart = _get_or_create_cart(db, current_user.id)
    item = db.query(CartItem).filter(
        CartItem.cart_id == cart.id, CartItem.product_id == product.id
    ).first()

    # Upsert: a repeated add overwrites quantity and refreshes the price snapshot
    if item:
        item.quantity = payload.quantity
        item.price = product.price
    else:
        db.add(CartItem(
            cart_id=cart.id,
            product_id=product.id,
            quantity=payload.quantity,
            price=product.price,
        ))

    db.commit()

    out = _cart_to_out(_find_cart(db, current_user.id))
    write_log(
        db,
        user_id=current_user.id,
        action="CART_ADD",
        resource="cart",
        status="SUCCESS",
        ip=client_ip(request),
        meta={"product_id": product.id, "quantity": payload.quantity, "total": out.total},
    )
    return {"ok": True, "message": "Product added to cart", "cart": out}

@router.delete("/remove/{product_id}", response_model=MessageResponse)
@api_limit
def remove_from_cart(
    product_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    cart = db.query(Cart).filter(Cart.user_id == current_user.id).first()
    if cart:
        # Nothing to do when the product is not in the cart
        db.query(CartItem).filter(
            CartItem.cart_id == cart.id, CartItem.product_id == product_id
        ).delete(synchronize_session=False)
        db.commit()
    return {"ok": True, "message": "Product removed from cart"}

@router.delete("/clear", response_model=MessageResponse)
@api_limit
def clear_cart(
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    cart = db.query(Cart).filter(Cart.user_id == current_user.id).first()
    if cart:
        db.query(CartItem).filter(CartItem.cart_id == cart.id).delete(synchronize_session=False)
        db.commit()
        write_log(db, user_id=current_user.id, action="CART_CLEAR", resource="cart",
                  status="SUCCESS", ip=client_ip(request))
    return {"ok": True, "message": "Cart cleared"}
