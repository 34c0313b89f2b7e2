"""
Attribute definition store
"""
from typing import List, Optional, Union

from sqlalchemy import select, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from catalog.errors import ConflictError, NotFoundError, ValidationError
from catalog.models.attribute import Attribute, DataType
from catalog.models.category import CategoryAttribute
from catalog.models.product import Product
from catalog.schemas.attribute import AttributeCreate, AttributeUpdate
from catalog.services import value_store
from catalog.utils.logger import get_logger
from catalog.utils.validators import coerce, validate_regex_pattern

logger = get_logger(__name__)

DEFINITION_FIELDS = ("data_type", "allowed_values", "validation_regex")


def _validate_definition(data_type: DataType, allowed_values: Optional[list], validation_regex: Optional[str]) -> None:
    if data_type == DataType.ENUM and not allowed_values:
        raise ValidationError("ENUM attributes require a non-empty allowed_values list")
    validate_regex_pattern(validation_regex)


async def _name_taken(db: AsyncSession, name: str, exclude_id: Optional[int] = None) -> bool:
    query = select(Attribute.id).where(Attribute.name == name)
    if exclude_id is not None:
        query = query.where(Attribute.id != exclude_id)
    result = await db.execute(query)
    return result.first() is not None


async def define_attribute(db: AsyncSession, data: AttributeCreate, commit: bool = True) -> Attribute:
    """Create an attribute definition"""
    _validate_definition(data.data_type, data.allowed_values, data.validation_regex)
    if await _name_taken(db, data.name):
        raise ConflictError(f"Attribute with name '{data.name}' already exists")

    attribute = Attribute(
        name=data.name,
        data_type=data.data_type,
        allowed_values=data.allowed_values,
        validation_regex=data.validation_regex,
        is_active=data.is_active,
    )
    db.add(attribute)
    try:
        await db.flush()
    except IntegrityError:
        await db.rollback()
        raise ConflictError(f"Attribute with name '{data.name}' already exists") from None

    if commit:
        await db.commit()
    await db.refresh(attribute)
    logger.info(f"Defined attribute '{attribute.name}' ({attribute.data_type.value}) id={attribute.id}")
    return attribute


async def get_attribute(db: AsyncSession, ref: Union[int, str]) -> Attribute:
    """Look up an attribute by id or by name"""
    if isinstance(ref, int):
        query = select(Attribute).where(Attribute.id == ref)
    else:
        query = select(Attribute).where(Attribute.name == ref)
    result = await db.execute(query)
    attribute = result.scalar_one_or_none()
    if not attribute:
        raise NotFoundError(f"Attribute {ref!r} not found")
    return attribute


async def list_attributes(db: AsyncSession, active_only: bool = False) -> List[Attribute]:
    query = select(Attribute).order_by(Attribute.name)
    if active_only:
        query = query.where(Attribute.is_active == True)  # noqa: E712
    result = await db.execute(query)
    return list(result.scalars().all())


async def _migrate_stored_values(db: AsyncSession, attribute: Attribute, old_type: DataType) -> int:
    """Re-validate and re-encode stored values after a definition change"""
    rows = await value_store.list_attribute_values(db, attribute.id)
    if not rows:
        return 0

    unique_result = await db.execute(
        select(CategoryAttribute.category_id).where(
            CategoryAttribute.attribute_id == attribute.id,
            CategoryAttribute.is_unique == True,  # noqa: E712
        )
    )
    unique_categories = set(unique_result.scalars().all())
    category_result = await db.execute(
        select(Product.id, Product.category_id).where(Product.id.in_([row.product_id for row in rows]))
    )
    product_categories = dict(category_result.all())

    seen = {}
    for row in rows:
        previous = value_store.decode_value(old_type, row.value_text)
        try:
            canonical = coerce(attribute, previous)
        except ValidationError as e:
            raise ConflictError(
                f"Attribute '{attribute.name}' has a stored value on product {row.product_id} "
                f"that the new definition rejects: {e.message}"
            ) from e
        row.value_text = value_store.encode_value(attribute.data_type, canonical)

        category_id = product_categories.get(row.product_id)
        if category_id not in unique_categories:
            continue
        key = (category_id, row.value_text)
        if key in seen:
            raise ConflictError(
                f"Attribute '{attribute.name}' is unique in category {category_id} but products "
                f"{seen[key]} and {row.product_id} would share the value {row.value_text!r}"
            )
        seen[key] = row.product_id
    return len(rows)


async def update_attribute(db: AsyncSession, attribute_id: int, data: AttributeUpdate) -> Attribute:
    """
    Update an attribute definition.

    Changing data_type, allowed_values or validation_regex while products hold
    values re-validates every stored value under the new definition and
    rewrites it canonically; one rejected value aborts the whole update.
    """
    attribute = await get_attribute(db, attribute_id)
    updates = data.model_dump(exclude_unset=True)

    if updates.get("name") is None:
        updates.pop("name", None)
    if updates.get("data_type") is None:
        updates.pop("data_type", None)
    if updates.get("is_active") is None:
        updates.pop("is_active", None)

    merged = {f: updates.get(f, getattr(attribute, f)) for f in DEFINITION_FIELDS}
    _validate_definition(merged["data_type"], merged["allowed_values"], merged["validation_regex"])

    if "name" in updates and updates["name"] != attribute.name:
        if await _name_taken(db, updates["name"], exclude_id=attribute.id):
            raise ConflictError(f"Attribute with name '{updates['name']}' already exists")

    definition_changed = any(merged[f] != getattr(attribute, f) for f in DEFINITION_FIELDS)
    old_type = attribute.data_type

    try:
        for key, value in updates.items():
            setattr(attribute, key, value)
        if definition_changed:
            migrated = await _migrate_stored_values(db, attribute, old_type)
            if migrated:
                logger.info(f"Re-encoded {migrated} stored values of attribute '{attribute.name}'")
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ConflictError(f"Attribute with name '{updates.get('name')}' already exists") from None
    except Exception:
        await db.rollback()
        raise

    await db.refresh(attribute)
    logger.info(f"Updated attribute id={attribute.id}")
    return attribute


async def delete_attribute(db: AsyncSession, attribute_id: int) -> None:
    """Hard-delete an attribute that no category binds and no product holds"""
    attribute = await get_attribute(db, attribute_id)

    bound = await db.execute(
        select(func.count()).select_from(CategoryAttribute).where(CategoryAttribute.attribute_id == attribute_id)
    )
    if bound.scalar():
        logger.warning(f"Refused to delete attribute '{attribute.name}': still mapped")
        raise ConflictError("Cannot delete attribute that is mapped to a category. Unmap first.")

    if await value_store.count_attribute_values(db, attribute_id):
        logger.warning(f"Refused to delete attribute '{attribute.name}': products hold values")
        raise ConflictError("Cannot delete attribute that has product values. Remove values first.")

    await db.delete(attribute)
    await db.commit()
    logger.info(f"Deleted attribute id={attribute_id}")
