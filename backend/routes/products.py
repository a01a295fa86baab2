# backend/routes/products.py
from typing import Optional
from fastapi import (
    APIRouter, Depends, HTTPException, Query, Request, Response,
    UploadFile, File, Form, status
)
from fastapi.exceptions import RequestValidationError
from sqlalchemy.orm import Session, joinedload
from pydantic import ValidationError

from database import get_db
from utils.tokenJWT import get_current_user
from utils.audit import write_log, client_ip
from utils.rate_limit import api_limit
from utils.storage import save_image, delete_image
from models.users import User
from models.category import Category
from models.product import Product
from schemas.product import (
    ProductCreate, ProductUpdate, ProductOut, ProductResponse, ProductListResponse
)

router = APIRouter(prefix="/products", tags=["Products"])

# ---- HELPERS ----
def _validated(schema, **fields):
    """Run the schema constraints on multipart fields before touching the database."""
    try:
        return schema(**fields)
    except ValidationError as exc:
        raise RequestValidationError(exc.errors())

def _product_query(db: Session):
    return db.query(Product).options(joinedload(Product.user), joinedload(Product.category))

def _get_product(db: Session, product_id: int) -> Product:
    product = _product_query(db).filter(Product.id == product_id).first()
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    return product

def _ensure_owner(product: Product, user: User):
    if product.user_id != user.id:
        raise HTTPException(status_code=403, detail="Forbidden")

def _ensure_category_available(db: Session, category_id: int):
    category = db.query(Category).filter(
        Category.id == category_id, Category.is_available.is_(True)
    ).first()
    if not category:
        raise HTTPException(status_code=422, detail="The selected category is invalid.")


# =========================
# PRODUCT LIST
# =========================
@router.get("", response_model=ProductListResponse)
@api_limit
def list_products(
    request: Request,
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    query = _product_query(db).order_by(Product.id.asc())
    total = query.count()
    rows = query.offset((page - 1) * page_size).limit(page_size).all()
    items = [ProductOut.model_validate(p) for p in rows]
    return {"ok": True, "products": {"items": items, "total": total, "page": page, "page_size": page_size}}


# =========================
# CREATE
# =========================
@router.post("", response_model=ProductResponse, status_code=status.HTTP_201_CREATED)
@api_limit
def create_product(
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    img: UploadFile = File(...),
    name: str = Form(...),
    description: str = Form(...),
    price: float = Form(...),
    stock: int = Form(...),
    category_id: int = Form(...),
):
    data = _validated(
        ProductCreate, name=name, description=description, price=price, stock=stock, category_id=category_id
    )
    _ensure_category_available(db, data.category_id)

    img_path = save_image(img)
    product = Product(**data.model_dump(), is_available=True, img=img_path, user_id=current_user.id)
    db.add(product)
    try:
        db.commit()
    except Exception:
        db.rollback()
        delete_image(img_path)
        raise

    write_log(
        db, user_id=current_user.id, action="PRODUCT_CREATE", resource="products",
        status="SUCCESS", ip=client_ip(request), meta={"id": product.id}
    )
    return {"ok": True, "message": "Product added", "product": ProductOut.model_validate(_get_product(db, product.id))}


# =========================
# SINGLE PRODUCT
# =========================
@router.get("/{product_id}", response_model=ProductResponse)
@api_limit
def get_product(
    product_id: int, request: Request,
    db: Session = Depends(get_db), current_user: User = Depends(get_current_user),
):
    return {"ok": True, "product": ProductOut.model_validate(_get_product(db, product_id))}


# =========================
# UPDATE (multipart, every field optional)
# =========================
@router.put("/{product_id}", response_model=ProductResponse)
@api_limit
def update_product(
    product_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    img: Optional[UploadFile] = File(None),
    name: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    price: Optional[float] = Form(None),
    stock: Optional[int] = Form(None),
    is_available: Optional[bool] = Form(None),
    category_id: Optional[int] = Form(None),
):
    product = _get_product(db, product_id)
    _ensure_owner(product, current_user)

    submitted = {
        "name": name, "description": description, "price": price,
        "stock": stock, "is_available": is_available, "category_id": category_id,
    }
    data = _validated(ProductUpdate, **{k: v for k, v in submitted.items() if v is not None})
    changes = data.model_dump(exclude_unset=True)
    if "category_id" in changes:
        _ensure_category_available(db, changes["category_id"])

    # New picture replaces the stored one; the old file goes once the row is saved
    old_img, new_img = product.img, None
    if img is not None and img.filename:
        new_img = save_image(img)
        changes["img"] = new_img

    for key, value in changes.items():
        setattr(product, key, value)

    try:
        db.commit()
    except Exception:
        db.rollback()
        delete_image(new_img)
        raise
    if new_img:
        delete_image(old_img)

    write_log(
        db, user_id=current_user.id, action="PRODUCT_UPDATE", resource="products",
        status="SUCCESS", ip=client_ip(request), meta={"id": product_id, "fields": sorted(changes)}
    )
    return {"ok": True, "message": "Product updated", "product": ProductOut.model_validate(_get_product(db, product_id))}


# =========================
# DELETE
# =========================
@router.delete("/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
@api_limit
def delete_product(
    product_id: int, request: Request, db: Session = Depends(get_db), current_user: User = Depends(get_current_user),
):
    product = _get_product(db, product_id)
    _ensure_owner(product, current_user)

    img_path = product.img
    db.delete(product)
    db.commit()
    delete_image(img_path)

    write_log(db, user_id=current_user.id, action="PRODUCT_DELETE", resource="products",
              status="SUCCESS", ip=client_ip(request), meta={"id": product_id})
    return Response(status_code=status.HTTP_204_NO_CONTENT)
