"""
Category and binding request/response schemas
"""
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from catalog.schemas.attribute import AttributeCreate, AttributeResponse, Scalar


class CategoryCreate(BaseModel):
    name: str = Field(min_length=1)
    description: str = ""
    is_active: bool = True


class CategoryUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    is_active: Optional[bool] = None


class BindingCreate(BaseModel):
    """Bind an existing attribute (attribute_id) or define one inline (attribute)"""
    attribute_id: Optional[int] = Field(None, gt=0)
    attribute: Optional[AttributeCreate] = None
    is_required: bool = False
    is_unique: bool = False
    default_value: Optional[Scalar] = None
    position: int = Field(0, ge=0)


class BindingUpdate(BaseModel):
    is_required: Optional[bool] = None
    is_unique: Optional[bool] = None
    default_value: Optional[Scalar] = None
    position: Optional[int] = Field(None, ge=0)


class BindingResponse(BaseModel):
    category_id: int
    attribute: AttributeResponse
    is_required: bool
    is_unique: bool
    default_value: Optional[Scalar] = None
    position: int

    model_config = ConfigDict(from_attributes=True)


class CategoryResponse(BaseModel):
    id: int
    name: str
    description: str
    is_active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    attributes: Optional[List[BindingResponse]] = None

    model_config = ConfigDict(from_attributes=True)
