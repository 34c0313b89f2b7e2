"""
Product write and read paths.

Create: active category -> normalize -> coerce -> enforce -> insert product
and its values in one transaction.

Update: merge scalar fields; when attributes are supplied, normalize and
coerce them, overlay them on the product's stored values, enforce over that
full state, then upsert only the supplied values. Scalar changes and value
upserts commit together.
"""
from typing import Any, Dict, Optional

from sqlalchemy import select, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from catalog.config import get_settings
from catalog.errors import ConflictError, NotFoundError, ValidationError
from catalog.models.product import Product, ProductStatus
from catalog.schemas.product import ProductCreate, ProductUpdate
from catalog.services import value_store
from catalog.services.constraints import enforce
from catalog.services.normalizer import normalize
from catalog.services.schema_resolver import CategorySchema, get_category_or_404, resolve_category_schema
from catalog.utils.db_compat import contains
from catalog.utils.logger import get_logger
from catalog.utils.validators import coerce

settings = get_settings()
logger = get_logger(__name__)


def _serialize(product: Product, attributes: Dict[str, Any]) -> dict:
    return {
        "id": product.id,
        "category_id": product.category_id,
        "sku": product.sku,
        "name": product.name,
        "description": product.description or "",
        "price": product.price,
        "currency": product.currency,
        "status": product.status,
        "created_at": product.created_at,
        "updated_at": product.updated_at,
        "attributes": attributes,
    }


def _coerce_all(schema: CategorySchema, normalized: Dict[int, Any]) -> Dict[int, Any]:
    return {
        attribute_id: coerce(schema.by_id[attribute_id].attribute, raw)
        for attribute_id, raw in normalized.items()
    }


async def _get_product_or_404(db: AsyncSession, product_id: int) -> Product:
    result = await db.execute(
        select(Product)
        .where(Product.id == product_id)
        .execution_options(populate_existing=True)
    )
    product = result.scalar_one_or_none()
    if not product:
        raise NotFoundError(f"Product {product_id} not found")
    return product


async def _sku_taken(db: AsyncSession, sku: str, exclude_id: Optional[int] = None) -> bool:
    query = select(Product.id).where(Product.sku == sku)
    if exclude_id is not None:
        query = query.where(Product.id != exclude_id)
    result = await db.execute(query)
    return result.first() is not None


async def _require_active_category(db: AsyncSession, category_id: int) -> None:
    category = await get_category_or_404(db, category_id)
    if not category.is_active:
        raise ValidationError(f"Category {category_id} is inactive")


async def get_product(db: AsyncSession, product_id: int) -> dict:
    product = await _get_product_or_404(db, product_id)
    attributes = await value_store.load_named_values(db, [product.id])
    return _serialize(product, attributes[product.id])


async def list_products(
    db: AsyncSession,
    category_id: Optional[int] = None,
    status: Optional[ProductStatus] = None,
    q: Optional[str] = None,
    page: int = 1,
    page_size: Optional[int] = None,
) -> dict:
    """Paginated products, most recently updated first; ``q`` matches name or SKU"""
    page = max(page, 1)
    page_size = min(max(page_size or settings.DEFAULT_PAGE_SIZE, 1), settings.MAX_PAGE_SIZE)

    filters = []
    if category_id:
        filters.append(Product.category_id == category_id)
    if status:
        filters.append(Product.status == status)
    if q:
        filters.append(contains(Product.name, q) | contains(Product.sku, q))

    total_result = await db.execute(select(func.count(Product.id)).where(*filters))
    total = total_result.scalar() or 0

    result = await db.execute(
        select(Product)
        .where(*filters)
        .order_by(Product.updated_at.desc(), Product.id.desc())
        .offset((page - 1) * page_size)
        .limit(page_size)
        .execution_options(populate_existing=True)
    )
    products = list(result.scalars().all())
    attributes = await value_store.load_named_values(db, [p.id for p in products])

    return {
        "page": page,
        "page_size": page_size,
        "total": total,
        "items": [_serialize(p, attributes[p.id]) for p in products],
    }


async def create_product(db: AsyncSession, data: ProductCreate) -> dict:
    await _require_active_category(db, data.category_id)

    schema = await resolve_category_schema(db, data.category_id)
    payload = data.model_dump()
    values = _coerce_all(schema, normalize(schema, payload["attributes"]))
    await enforce(db, data.category_id, None, values)

    if await _sku_taken(db, data.sku):
        raise ConflictError(f"SKU '{data.sku}' already exists")

    product = Product(
        category_id=data.category_id,
        sku=data.sku,
        name=data.name,
        description=data.description or "",
        price=data.price or 0,
        currency=data.currency or settings.DEFAULT_CURRENCY,
        status=data.status or ProductStatus.ACTIVE,
    )
    try:
        db.add(product)
        await db.flush()
        await value_store.insert_values(db, product.id, values)
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ConflictError(f"SKU '{data.sku}' already exists") from None
    except Exception:
        await db.rollback()
        raise

    logger.info(f"Created product '{data.sku}' id={product.id} with {len(values)} attribute values")
    return await get_product(db, product.id)


async def update_product(db: AsyncSession, product_id: int, data: ProductUpdate) -> dict:
    """
    Update scalar fields and merge attribute values.

    Moving a product to another category does not re-check values that are
    not part of this update.
    """
    product = await _get_product_or_404(db, product_id)
    updates = data.model_dump(exclude_unset=True)
    attrs = updates.pop("attributes", None)
    scalars = {k: v for k, v in updates.items() if v is not None}

    if "category_id" in scalars and scalars["category_id"] != product.category_id:
        await _require_active_category(db, scalars["category_id"])
    if "sku" in scalars and scalars["sku"] != product.sku:
        if await _sku_taken(db, scalars["sku"], exclude_id=product_id):
            raise ConflictError(f"SKU '{scalars['sku']}' already exists")

    category_id = scalars.get("category_id", product.category_id)
    try:
        for key, value in scalars.items():
            setattr(product, key, value)

        if attrs is not None:
            schema = await resolve_category_schema(db, category_id)
            values = _coerce_all(schema, normalize(schema, attrs))

            full_state = await value_store.load_values(db, product_id)
            full_state.update(values)
            await enforce(db, category_id, product_id, full_state)

            await value_store.upsert_values(db, product_id, values)
            product.updated_at = func.now()

        await db.commit()
    except IntegrityError:
        await db.rollback()
        if "sku" in scalars:
            raise ConflictError(f"SKU '{scalars['sku']}' already exists") from None
        raise ConflictError(f"Update of product {product_id} conflicts with existing data") from None
    except Exception:
        await db.rollback()
        raise

    logger.info(f"Updated product id={product_id}")
    return await get_product(db, product_id)


async def deactivate_product(db: AsyncSession, product_id: int) -> dict:
    """Soft delete: status becomes INACTIVE"""
    product = await _get_product_or_404(db, product_id)
    product.status = ProductStatus.INACTIVE
    await db.commit()
    logger.info(f"Deactivated product id={product_id}")
    return await get_product(db, product_id)
