"""
Category and category-attribute mapping API endpoints
"""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional

from catalog.database import get_db
from catalog.models.category import Category, CategoryAttribute
from catalog.schemas.category import (
    BindingCreate,
    BindingResponse,
    BindingUpdate,
    CategoryCreate,
    CategoryResponse,
    CategoryUpdate,
)
from catalog.services import category_service

router = APIRouter()


# --- Helper ---

def _build_category_response(
    category: Category,
    bindings: Optional[List[CategoryAttribute]] = None,
) -> CategoryResponse:
    return CategoryResponse(
        id=category.id,
        name=category.name,
        description=category.description or "",
        is_active=category.is_active,
        created_at=category.created_at,
        updated_at=category.updated_at,
        attributes=(
            [BindingResponse.model_validate(b) for b in bindings]
            if bindings is not None else None
        ),
    )


# --- Categories ---

@router.get("/", response_model=List[CategoryResponse], response_model_exclude_none=True)
async def list_categories(
    include_attributes: bool = False,
    db: AsyncSession = Depends(get_db),
):
    """List categories, optionally with their attribute mappings"""
    listing = await category_service.list_categories(db, include_attributes=include_attributes)
    return [_build_category_response(c, bindings) for c, bindings in listing]


@router.get("/{category_id}", response_model=CategoryResponse, response_model_exclude_none=True)
async def get_category(
    category_id: int,
    db: AsyncSession = Depends(get_db),
):
    category = await category_service.get_category(db, category_id)
    return _build_category_response(category)


@router.post("/", response_model=CategoryResponse, status_code=201, response_model_exclude_none=True)
async def create_category(
    data: CategoryCreate,
    db: AsyncSession = Depends(get_db),
):
    category = await category_service.define_category(db, data)
    return _build_category_response(category)


@router.put("/{category_id}", response_model=CategoryResponse, response_model_exclude_none=True)
async def update_category(
    category_id: int,
    data: CategoryUpdate,
    db: AsyncSession = Depends(get_db),
):
    category = await category_service.update_category(db, category_id, data)
    return _build_category_response(category)


@router.delete("/{category_id}", response_model=CategoryResponse, response_model_exclude_none=True)
async def delete_category(
    category_id: int,
    db: AsyncSession = Depends(get_db),
):
    """Deactivate a category (soft delete)"""
    category = await category_service.deactivate_category(db, category_id)
    return _build_category_response(category)


# --- Attribute mappings ---

@router.get("/{category_id}/attributes", response_model=List[BindingResponse])
async def list_category_attributes(
    category_id: int,
    db: AsyncSession = Depends(get_db),
):
    """Attribute mappings ordered by position, then attribute name"""
    return await category_service.list_bindings(db, category_id)


@router.post("/{category_id}/attributes", response_model=List[BindingResponse], status_code=201)
async def map_attribute(
    category_id: int,
    data: BindingCreate,
    db: AsyncSession = Depends(get_db),
):
    return await category_service.bind_attribute(db, category_id, data)


@router.put("/{category_id}/attributes/{attribute_id}", response_model=List[BindingResponse])
async def update_attribute_mapping(
    category_id: int,
    attribute_id: int,
    data: BindingUpdate,
    db: AsyncSession = Depends(get_db),
):
    return await category_service.update_binding(db, category_id, attribute_id, data)


@router.delete("/{category_id}/attributes/{attribute_id}")
async def unmap_attribute(
    category_id: int,
    attribute_id: int,
    force: bool = False,
    db: AsyncSession = Depends(get_db),
):
    """Remove a mapping; force=true also deletes the products' stored values"""
    return await category_service.unbind_attribute(db, category_id, attribute_id, force=force)
