# backend/models/product.py
from sqlalchemy import Column, Integer, String, Float, Boolean, ForeignKey, DateTime, CheckConstraint, func
from sqlalchemy.orm import relationship
from database import Base

# Model Product
# A catalog item offered by a user (the seller), tagged with one category.
# Stock and price are guarded by check constraints; the image is kept in the
# content store and only its relative path lives on the row.
class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False, index=True)
    description = Column(String(500), nullable=False)

    price = Column(Float, CheckConstraint("price >= 0"), nullable=False)
    stock = Column(Integer, CheckConstraint("stock >= 0"), nullable=False, default=0)
    is_available = Column(Boolean, nullable=False, default=True, server_default="1")

    # Relative path inside the content store, e.g. products/images/<uuid>.png
    img = Column(String, nullable=True)

    category_id = Column(Integer, ForeignKey("categories.id"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    category = relationship("Category", back_populates="products")
    user = relationship("User", back_populates="products")

    # Deleting a product drops it from carts...
    cart_items = relationship("CartItem", back_populates="product", cascade="all, delete-orphan")
    # ...while order lines keep their copied values and lose only the reference
    order_items = relationship("OrderItem", back_populates="product")
