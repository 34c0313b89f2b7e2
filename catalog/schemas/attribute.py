"""
Attribute request/response schemas
"""
from datetime import datetime
from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from catalog.models.attribute import DataType

Scalar = Union[bool, int, float, str]


class AttributeCreate(BaseModel):
    name: str = Field(min_length=1)
    data_type: DataType
    allowed_values: Optional[List[Scalar]] = None
    validation_regex: Optional[str] = None
    is_active: bool = True


class AttributeUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    data_type: Optional[DataType] = None
    allowed_values: Optional[List[Scalar]] = None
    validation_regex: Optional[str] = None
    is_active: Optional[bool] = None


class AttributeResponse(BaseModel):
    id: int
    name: str
    data_type: DataType
    allowed_values: Optional[List[Scalar]] = None
    validation_regex: Optional[str] = None
    is_active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
