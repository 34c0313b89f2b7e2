"""
Attribute definition API endpoints
"""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List

from catalog.database import get_db
from catalog.schemas.attribute import AttributeCreate, AttributeResponse, AttributeUpdate
from catalog.services import attribute_service

router = APIRouter()


@router.get("/", response_model=List[AttributeResponse])
async def list_attributes(
    active_only: bool = False,
    db: AsyncSession = Depends(get_db),
):
    """List attribute definitions by name"""
    return await attribute_service.list_attributes(db, active_only=active_only)


@router.get("/by-name/{name}", response_model=AttributeResponse)
async def get_attribute_by_name(
    name: str,
    db: AsyncSession = Depends(get_db),
):
    return await attribute_service.get_attribute(db, name)


@router.get("/{attribute_id}", response_model=AttributeResponse)
async def get_attribute(
    attribute_id: int,
    db: AsyncSession = Depends(get_db),
):
    return await attribute_service.get_attribute(db, attribute_id)


@router.post("/", response_model=AttributeResponse, status_code=201)
async def create_attribute(
    data: AttributeCreate,
    db: AsyncSession = Depends(get_db),
):
    """Define a new attribute"""
    return await attribute_service.define_attribute(db, data)


@router.put("/{attribute_id}", response_model=AttributeResponse)
async def update_attribute(
    attribute_id: int,
    data: AttributeUpdate,
    db: AsyncSession = Depends(get_db),
):
    """Update an attribute; a type change re-validates stored values"""
    return await attribute_service.update_attribute(db, attribute_id, data)


@router.delete("/{attribute_id}")
async def delete_attribute(
    attribute_id: int,
    db: AsyncSession = Depends(get_db),
):
    """Delete an attribute that is neither mapped nor holding values"""
    await attribute_service.delete_attribute(db, attribute_id)
    return {"deleted": True}
