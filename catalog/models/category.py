"""
Category and category-attribute binding models
"""
from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime, JSON, ForeignKey, CheckConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from catalog.database import Base


class Category(Base):
    """Product category. Deletion is soft: is_active flips to False."""
    __tablename__ = "categories"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, unique=True, nullable=False, index=True)
    description = Column(Text, nullable=False, default="")
    is_active = Column(Boolean, default=True, nullable=False)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())


class CategoryAttribute(Base):
    """Binds an attribute to a category with per-category rules."""
    __tablename__ = "category_attributes"

    category_id = Column(Integer, ForeignKey("categories.id"), primary_key=True)
    attribute_id = Column(Integer, ForeignKey("attributes.id"), primary_key=True, index=True)

    is_required = Column(Boolean, default=False, nullable=False)
    is_unique = Column(Boolean, default=False, nullable=False)
    default_value = Column(JSON, nullable=True)  # scalar, kept with its JSON type
    position = Column(Integer, default=0, nullable=False)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    attribute = relationship("Attribute", lazy="joined")

    __table_args__ = (
        CheckConstraint("position >= 0", name="ck_category_attributes_position"),
    )
