"""
Product and product attribute value models
"""
from sqlalchemy import (
    Column, Integer, String, Text, Float, DateTime, ForeignKey,
    UniqueConstraint, CheckConstraint, Enum as SQLEnum,
)
from sqlalchemy.sql import func
from catalog.database import Base
from enum import Enum


class ProductStatus(str, Enum):
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    DRAFT = "DRAFT"


class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=False, index=True)

    sku = Column(String, unique=True, nullable=False, index=True)
    name = Column(String, nullable=False, index=True)
    description = Column(Text, nullable=False, default="")

    # Pricing
    price = Column(Float, nullable=False, default=0)
    currency = Column(String(3), nullable=False, default="INR")

    status = Column(SQLEnum(ProductStatus, native_enum=False), nullable=False, default=ProductStatus.ACTIVE)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        CheckConstraint("price >= 0", name="ck_products_price"),
    )


class ProductAttributeValue(Base):
    """One stored value per (product, attribute), in canonical text form."""
    __tablename__ = "product_attribute_values"

    id = Column(Integer, primary_key=True, index=True)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="CASCADE"), nullable=False, index=True)
    attribute_id = Column(Integer, ForeignKey("attributes.id"), nullable=False, index=True)
    value_text = Column(Text, nullable=False)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        UniqueConstraint("product_id", "attribute_id", name="uq_product_attribute_values_pair"),
    )
