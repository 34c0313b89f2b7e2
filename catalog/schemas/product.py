"""
Product request/response schemas
"""
from datetime import datetime
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, Field

from catalog.models.product import ProductStatus


class AttributeValueItem(BaseModel):
    attribute_id: Optional[int] = Field(None, gt=0)
    name: Optional[str] = None
    value: Any = None


AttributesPayload = Union[Dict[str, Any], List[AttributeValueItem]]


class ProductCreate(BaseModel):
    category_id: int = Field(gt=0)
    sku: str = Field(min_length=1)
    name: str = Field(min_length=1)
    description: str = ""
    price: float = Field(0, ge=0)
    currency: Optional[str] = Field(None, min_length=3, max_length=3)
    status: ProductStatus = ProductStatus.ACTIVE
    attributes: AttributesPayload = Field(default_factory=dict)


class ProductUpdate(BaseModel):
    category_id: Optional[int] = Field(None, gt=0)
    sku: Optional[str] = Field(None, min_length=1)
    name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    price: Optional[float] = Field(None, ge=0)
    currency: Optional[str] = Field(None, min_length=3, max_length=3)
    status: Optional[ProductStatus] = None
    attributes: Optional[AttributesPayload] = None


class ProductResponse(BaseModel):
    id: int
    category_id: int
    sku: str
    name: str
    description: str
    price: float
    currency: str
    status: ProductStatus
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    attributes: Dict[str, Any] = {}


class ProductListResponse(BaseModel):
    page: int
    page_size: int
    total: int
    items: List[ProductResponse]
