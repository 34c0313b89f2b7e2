"""
Category store and category-attribute bindings
"""
from typing import Any, List, Optional, Tuple

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from catalog.errors import ConflictError, NotFoundError, ValidationError
from catalog.models.attribute import Attribute
from catalog.models.category import Category, CategoryAttribute
from catalog.schemas.category import BindingCreate, BindingUpdate, CategoryCreate, CategoryUpdate
from catalog.services import attribute_service, value_store
from catalog.services.schema_resolver import get_category_or_404, resolve_category_schema
from catalog.utils.logger import get_logger
from catalog.utils.validators import coerce

logger = get_logger(__name__)


async def _name_taken(db: AsyncSession, name: str, exclude_id: Optional[int] = None) -> bool:
    query = select(Category.id).where(Category.name == name)
    if exclude_id is not None:
        query = query.where(Category.id != exclude_id)
    result = await db.execute(query)
    return result.first() is not None


# ---------------------------------------------------------------------------
# Categories
# ---------------------------------------------------------------------------

async def define_category(db: AsyncSession, data: CategoryCreate) -> Category:
    if await _name_taken(db, data.name):
        raise ConflictError(f"Category '{data.name}' already exists")

    category = Category(name=data.name, description=data.description or "", is_active=data.is_active)
    db.add(category)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ConflictError(f"Category '{data.name}' already exists") from None

    await db.refresh(category)
    logger.info(f"Defined category '{category.name}' id={category.id}")
    return category


async def get_category(db: AsyncSession, category_id: int) -> Category:
    return await get_category_or_404(db, category_id)


async def list_categories(
    db: AsyncSession,
    include_attributes: bool = False,
) -> List[Tuple[Category, Optional[List[CategoryAttribute]]]]:
    """All categories by name, each paired with its bindings when requested"""
    result = await db.execute(select(Category).order_by(Category.name))
    categories = list(result.scalars().all())
    if not include_attributes:
        return [(category, None) for category in categories]

    listing = []
    for category in categories:
        schema = await resolve_category_schema(db, category.id)
        listing.append((category, schema.bindings))
    return listing


async def update_category(db: AsyncSession, category_id: int, data: CategoryUpdate) -> Category:
    category = await get_category_or_404(db, category_id)
    updates = {k: v for k, v in data.model_dump(exclude_unset=True).items() if v is not None}

    if "name" in updates and updates["name"] != category.name:
        if await _name_taken(db, updates["name"], exclude_id=category.id):
            raise ConflictError(f"Category '{updates['name']}' already exists")

    for key, value in updates.items():
        setattr(category, key, value)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ConflictError(f"Category '{updates.get('name')}' already exists") from None

    await db.refresh(category)
    logger.info(f"Updated category id={category.id}")
    return category


async def deactivate_category(db: AsyncSession, category_id: int) -> Category:
    """Soft delete: the row and its bindings stay, is_active becomes False"""
    category = await get_category_or_404(db, category_id)
    category.is_active = False
    await db.commit()
    await db.refresh(category)
    logger.info(f"Deactivated category id={category.id}")
    return category


# ---------------------------------------------------------------------------
# Bindings
# ---------------------------------------------------------------------------

def _check_default(attribute: Attribute, default_value: Any) -> None:
    if default_value is None:
        return
    try:
        coerce(attribute, default_value)
    except ValidationError as e:
        raise ValidationError(f"Invalid default_value for '{attribute.name}': {e.message}") from e


async def _get_binding(db: AsyncSession, category_id: int, attribute_id: int) -> CategoryAttribute:
    result = await db.execute(
        select(CategoryAttribute).where(
            CategoryAttribute.category_id == category_id,
            CategoryAttribute.attribute_id == attribute_id,
        )
    )
    binding = result.scalar_one_or_none()
    if not binding:
        raise NotFoundError(f"Attribute {attribute_id} is not mapped to category {category_id}")
    return binding


async def list_bindings(db: AsyncSession, category_id: int) -> List[CategoryAttribute]:
    schema = await resolve_category_schema(db, category_id)
    return schema.bindings


async def bind_attribute(db: AsyncSession, category_id: int, data: BindingCreate) -> List[CategoryAttribute]:
    """
    Map an attribute onto a category.

    ``data.attribute_id`` binds an existing attribute; otherwise
    ``data.attribute`` is defined first, in the same transaction.
    Returns the category's bindings after the change.
    """
    await get_category_or_404(db, category_id)

    try:
        if data.attribute_id:
            attribute = await attribute_service.get_attribute(db, data.attribute_id)
        elif data.attribute is not None:
            attribute = await attribute_service.define_attribute(db, data.attribute, commit=False)
        else:
            raise ValidationError("attribute_id or attribute required")

        _check_default(attribute, data.default_value)

        existing = await db.execute(
            select(CategoryAttribute.attribute_id).where(
                CategoryAttribute.category_id == category_id,
                CategoryAttribute.attribute_id == attribute.id,
            )
        )
        if existing.first() is not None:
            raise ConflictError("Attribute already mapped to this category")

        db.add(CategoryAttribute(
            category_id=category_id,
            attribute_id=attribute.id,
            is_required=data.is_required,
            is_unique=data.is_unique,
            default_value=data.default_value,
            position=data.position,
        ))
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ConflictError("Attribute already mapped to this category") from None
    except Exception:
        await db.rollback()
        raise

    logger.info(f"Mapped attribute '{attribute.name}' to category {category_id}")
    return await list_bindings(db, category_id)


async def update_binding(
    db: AsyncSession,
    category_id: int,
    attribute_id: int,
    data: BindingUpdate,
) -> List[CategoryAttribute]:
    """Partially update a binding; omitted fields keep their values"""
    binding = await _get_binding(db, category_id, attribute_id)
    updates = data.model_dump(exclude_unset=True)
    for flag in ("is_required", "is_unique", "position"):
        if flag in updates and updates[flag] is None:
            updates.pop(flag)

    try:
        if "default_value" in updates:
            _check_default(binding.attribute, updates["default_value"])
        for key, value in updates.items():
            setattr(binding, key, value)
        await db.commit()
    except Exception:
        await db.rollback()
        raise

    logger.info(f"Updated mapping of attribute {attribute_id} in category {category_id}")
    return await list_bindings(db, category_id)


async def unbind_attribute(db: AsyncSession, category_id: int, attribute_id: int, force: bool = False) -> dict:
    """
    Remove a binding.

    Refused while products of the category hold values for the attribute,
    unless ``force`` is set, in which case those values are deleted first.
    """
    await get_category_or_404(db, category_id)
    binding = await _get_binding(db, category_id, attribute_id)

    held = await value_store.count_category_values(db, category_id, attribute_id)
    if held and not force:
        logger.warning(
            f"Refused to unmap attribute {attribute_id} from category {category_id}: {held} stored values"
        )
        raise ConflictError("Attribute has product values. Use force=true to remove along with values.")

    try:
        removed = 0
        if force:
            removed = await value_store.delete_category_values(db, category_id, attribute_id)
        await db.delete(binding)
        await db.commit()
    except Exception:
        await db.rollback()
        raise

    logger.info(
        f"Unmapped attribute {attribute_id} from category {category_id} (removed {removed} values)"
    )
    return {"unmapped": True, "values_removed": removed}
