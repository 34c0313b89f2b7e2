"""
Product API endpoints
"""
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional

from catalog.database import get_db
from catalog.models.product import ProductStatus
from catalog.schemas.product import ProductCreate, ProductListResponse, ProductResponse, ProductUpdate
from catalog.services import product_service

router = APIRouter()


@router.get("/", response_model=ProductListResponse)
async def list_products(
    page: int = Query(1, ge=1),
    page_size: Optional[int] = Query(None, ge=1),
    category_id: Optional[int] = None,
    status: Optional[ProductStatus] = None,
    q: Optional[str] = None,
    db: AsyncSession = Depends(get_db),
):
    """List products with pagination, category/status filters and name/SKU search"""
    return await product_service.list_products(
        db,
        category_id=category_id,
        status=status,
        q=q,
        page=page,
        page_size=page_size,
    )


@router.get("/{product_id}", response_model=ProductResponse)
async def get_product(
    product_id: int,
    db: AsyncSession = Depends(get_db),
):
    return await product_service.get_product(db, product_id)


@router.post("/", response_model=ProductResponse, status_code=201)
async def create_product(
    data: ProductCreate,
    db: AsyncSession = Depends(get_db),
):
    """Create a product with its attribute values"""
    return await product_service.create_product(db, data)


@router.put("/{product_id}", response_model=ProductResponse)
async def update_product(
    product_id: int,
    data: ProductUpdate,
    db: AsyncSession = Depends(get_db),
):
    """Update a product; supplied attributes are merged into stored values"""
    return await product_service.update_product(db, product_id, data)


@router.delete("/{product_id}", response_model=ProductResponse)
async def delete_product(
    product_id: int,
    db: AsyncSession = Depends(get_db),
):
    """Deactivate a product (soft delete)"""
    return await product_service.deactivate_product(db, product_id)
