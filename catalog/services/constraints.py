"""
Required and unique constraint enforcement over a category's full binding set.

Uniqueness is checked read-then-decide against stored values. Two writers
racing on the same unique value can both pass the check; nothing at the
storage level closes that window.
"""
from typing import Any, Dict, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from catalog.errors import ConflictError, ValidationError
from catalog.services.schema_resolver import resolve_category_schema
from catalog.services.value_store import encode_value, find_product_with_value
from catalog.utils.logger import get_logger
from catalog.utils.validators import coerce

logger = get_logger(__name__)


async def enforce(
    db: AsyncSession,
    category_id: int,
    product_id: Optional[int],
    values: Dict[int, Any],
) -> Dict[int, Any]:
    """
    Apply required/default and unique rules to ``values`` (attribute id -> canonical value).

    Missing required attributes take the binding's default (coerced to the
    attribute type) or fail. Unique attributes must not share their encoded
    value with another product of the same category; ``product_id`` is
    excluded so an update does not conflict with itself.

    ``values`` is mutated in place and returned.
    """
    schema = await resolve_category_schema(db, category_id)

    for binding in schema.bindings:
        if not binding.is_required or binding.attribute_id in values:
            continue
        if binding.default_value is None:
            raise ValidationError(f"Missing required attribute '{binding.attribute.name}'")
        values[binding.attribute_id] = coerce(binding.attribute, binding.default_value)

    for binding in schema.bindings:
        if not binding.is_unique or binding.attribute_id not in values:
            continue
        attribute = binding.attribute
        encoded = encode_value(attribute.data_type, values[binding.attribute_id])
        clash = await find_product_with_value(
            db, category_id, attribute.id, encoded, exclude_product_id=product_id or 0
        )
        if clash is not None:
            logger.warning(
                f"Unique attribute '{attribute.name}' value {encoded!r} already held by product {clash}"
            )
            raise ConflictError(
                f"Value for unique attribute '{attribute.name}' already exists on another product"
            )

    return values
