# backend/routes/categories.py
from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from database import get_db
from utils.tokenJWT import get_current_user
from utils.audit import write_log, client_ip
from utils.rate_limit import api_limit
from models.users import User
from models.category import Category
from schemas.category import (
    CategoryCreate, CategoryUpdate, CategoryOut, CategoryResponse, CategoryListResponse
)

router = APIRouter(prefix="/categories", tags=["Categories"])

def _get_category(db: Session, category_id: int) -> Category:
    category = db.query(Category).filter(Category.id == category_id).first()
    if not category:
        raise HTTPException(status_code=404, detail="Category not found")
    return category

def _ensure_unique_name(db: Session, name: str, exclude_id: int = None):
    query = db.query(Category).filter(Category.name == name)
    if exclude_id is not None:
        query = query.filter(Category.id != exclude_id)
    if query.first():
        raise HTTPException(status_code=422, detail="The name has already been taken.")

# List categories split into available and disabled ones
@router.get("", response_model=CategoryListResponse)
@api_limit
def list_categories(
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    rows = db.query(Category).order_by(Category.name.asc()).all()
    return {
        "ok": True,
        "categories_available": [CategoryOut.model_validate(c) for c in rows if c.is_available],
        "categories_unavailable": [CategoryOut.model_validate(c) for c in rows if not c.is_available],
    }

@router.post("", response_model=CategoryResponse, status_code=status.HTTP_201_CREATED)
@api_limit
def create_category(
    request: Request,
    payload: CategoryCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    _ensure_unique_name(db, payload.name)

    category = Category(name=payload.name, is_available=True)
    db.add(category)
    db.commit()
    db.refresh(category)

    write_log(db, user_id=current_user.id, action="CATEGORY_CREATE", resource="categories",
              status="SUCCESS", ip=client_ip(request), meta={"id": category.id, "name": category.name})
    return {"ok": True, "message": "Category created successfully", "category": CategoryOut.model_validate(category)}

@router.get("/{category_id}", response_model=CategoryResponse)
@api_limit
def get_category(
    category_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return {"ok": True, "category": CategoryOut.model_validate(_get_category(db, category_id))}

@router.put("/{category_id}", response_model=CategoryResponse)
@api_limit
def update_category(
    category_id: int,
    payload: CategoryUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    category = _get_category(db, category_id)

    if payload.name is not None:
        _ensure_unique_name(db, payload.name, exclude_id=category.id)
        category.name = payload.name
    if payload.is_available is not None:
        category.is_available = payload.is_available

    db.commit()
    db.refresh(category)

    write_log(db, user_id=current_user.id, action="CATEGORY_UPDATE", resource="categories",
              status="SUCCESS", ip=client_ip(request), meta={"id": category.id})
    return {"ok": True, "message": "Category updated successfully", "category": CategoryOut.model_validate(category)}

# Soft delete: the row stays and shows up under categories_unavailable
@router.delete("/{category_id}", response_model=CategoryResponse)
@api_limit
def delete_category(
    category_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    category = _get_category(db, category_id)
    category.is_available = False
    db.commit()
    db.refresh(category)

    write_log(db, user_id=current_user.id, action="CATEGORY_DISABLE", resource="categories",
              status="SUCCESS", ip=client_ip(request), meta={"id": category.id})
    return {"ok": True, "message": "Category deleted successfully", "category": CategoryOut.model_validate(category)}
