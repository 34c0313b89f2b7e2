"""
Product attribute value storage.

Values are stored as text. Each data type has a StorageCodec that encodes a
canonical value to text and decodes it back; composite values go through the
JSON codec. Decoding always uses the attribute's *current* data type.
"""
import json
from typing import Any, Dict, Iterable, List, Mapping

from sqlalchemy import select, delete, func
from sqlalchemy.ext.asyncio import AsyncSession

from catalog.models.attribute import Attribute, DataType
from catalog.models.product import Product, ProductAttributeValue
from catalog.utils.db_compat import upsert
from catalog.utils.logger import get_logger
from catalog.utils.validators import stringify

logger = get_logger(__name__)


class StorageCodec:
    def encode(self, value: Any) -> str:
        return stringify(value)

    def decode(self, text: str) -> Any:
        return text


class TextCodec(StorageCodec):
    def decode(self, text: str) -> str:
        return str(text)


class NumberCodec(StorageCodec):
    def decode(self, text: str):
        try:
            return int(text)
        except ValueError:
            pass
        try:
            number = float(text)
        except ValueError:
            logger.warning(f"Stored value {text!r} is not a number; returning raw text")
            return text
        return int(number) if number.is_integer() else number


class BooleanCodec(StorageCodec):
    def decode(self, text: str) -> bool:
        return text in ("true", "1")


class PassthroughCodec(StorageCodec):
    """ENUM, DATE and DATETIME are stored and read back as strings"""


class JsonCodec(StorageCodec):
    def encode(self, value: Any) -> str:
        return json.dumps(value, ensure_ascii=True)

    def decode(self, text: str) -> Any:
        return json.loads(text)


CODECS: Dict[DataType, StorageCodec] = {
    DataType.TEXT: TextCodec(),
    DataType.NUMBER: NumberCodec(),
    DataType.BOOLEAN: BooleanCodec(),
    DataType.ENUM: PassthroughCodec(),
    DataType.DATE: PassthroughCodec(),
    DataType.DATETIME: PassthroughCodec(),
}
JSON_CODEC = JsonCodec()


def encode_value(data_type: DataType, value: Any) -> str:
    """Canonical storage text for a value"""
    if isinstance(value, (dict, list)):
        return JSON_CODEC.encode(value)
    return CODECS.get(data_type, JSON_CODEC).encode(value)


def decode_value(data_type: DataType, text: str) -> Any:
    codec = CODECS.get(data_type)
    if codec is None:
        return text
    return codec.decode(text)


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------

async def load_values(db: AsyncSession, product_id: int) -> Dict[int, Any]:
    """Decoded values of a product keyed by attribute id"""
    result = await db.execute(
        select(ProductAttributeValue.attribute_id, ProductAttributeValue.value_text, Attribute.data_type)
        .join(Attribute, Attribute.id == ProductAttributeValue.attribute_id)
        .where(ProductAttributeValue.product_id == product_id)
    )
    return {
        attribute_id: decode_value(data_type, value_text)
        for attribute_id, value_text, data_type in result.all()
    }


async def load_named_values(db: AsyncSession, product_ids: Iterable[int]) -> Dict[int, Dict[str, Any]]:
    """Decoded values for several products, keyed by product id then attribute name"""
    ids = list(product_ids)
    values: Dict[int, Dict[str, Any]] = {pid: {} for pid in ids}
    if not ids:
        return values

    result = await db.execute(
        select(
            ProductAttributeValue.product_id,
            Attribute.name,
            Attribute.data_type,
            ProductAttributeValue.value_text,
        )
        .join(Attribute, Attribute.id == ProductAttributeValue.attribute_id)
        .where(ProductAttributeValue.product_id.in_(ids))
        .order_by(Attribute.name)
    )
    for product_id, name, data_type, value_text in result.all():
        values[product_id][name] = decode_value(data_type, value_text)
    return values


async def find_product_with_value(
    db: AsyncSession,
    category_id: int,
    attribute_id: int,
    value_text: str,
    exclude_product_id: int = 0,
):
    """Id of another product in the category storing exactly ``value_text``, if any"""
    result = await db.execute(
        select(ProductAttributeValue.product_id)
        .join(Product, Product.id == ProductAttributeValue.product_id)
        .where(
            Product.category_id == category_id,
            ProductAttributeValue.attribute_id == attribute_id,
            ProductAttributeValue.value_text == value_text,
            ProductAttributeValue.product_id != exclude_product_id,
        )
        .limit(1)
    )
    return result.scalar_one_or_none()


async def count_category_values(db: AsyncSession, category_id: int, attribute_id: int) -> int:
    result = await db.execute(
        select(func.count(ProductAttributeValue.id))
        .join(Product, Product.id == ProductAttributeValue.product_id)
        .where(
            Product.category_id == category_id,
            ProductAttributeValue.attribute_id == attribute_id,
        )
    )
    return result.scalar() or 0


async def count_attribute_values(db: AsyncSession, attribute_id: int) -> int:
    result = await db.execute(
        select(func.count(ProductAttributeValue.id))
        .where(ProductAttributeValue.attribute_id == attribute_id)
    )
    return result.scalar() or 0


async def list_attribute_values(db: AsyncSession, attribute_id: int) -> List[ProductAttributeValue]:
    result = await db.execute(
        select(ProductAttributeValue)
        .where(ProductAttributeValue.attribute_id == attribute_id)
        .order_by(ProductAttributeValue.id)
    )
    return list(result.scalars().all())


# ---------------------------------------------------------------------------
# Writes (callers own the transaction)
# ---------------------------------------------------------------------------

async def _data_types(db: AsyncSession, attribute_ids: Iterable[int]) -> Dict[int, DataType]:
    result = await db.execute(
        select(Attribute.id, Attribute.data_type).where(Attribute.id.in_(list(attribute_ids)))
    )
    return dict(result.all())


async def insert_values(db: AsyncSession, product_id: int, values: Mapping[int, Any]) -> None:
    """Insert values for a freshly created product"""
    if not values:
        return
    types = await _data_types(db, values.keys())
    db.add_all([
        ProductAttributeValue(
            product_id=product_id,
            attribute_id=attribute_id,
            value_text=encode_value(types[attribute_id], value),
        )
        for attribute_id, value in values.items()
    ])
    await db.flush()


async def upsert_values(db: AsyncSession, product_id: int, values: Mapping[int, Any]) -> None:
    """Insert or replace values; attributes not in ``values`` keep their stored rows"""
    if not values:
        return
    types = await _data_types(db, values.keys())
    rows = [
        {
            "product_id": product_id,
            "attribute_id": attribute_id,
            "value_text": encode_value(types[attribute_id], value),
        }
        for attribute_id, value in values.items()
    ]
    await db.execute(
        upsert(
            db,
            ProductAttributeValue,
            rows,
            index_elements=["product_id", "attribute_id"],
            update_columns=["value_text"],
            extra_set={"updated_at": func.now()},
        )
    )


async def delete_category_values(db: AsyncSession, category_id: int, attribute_id: int) -> int:
    """Delete every value of an attribute held by products of a category"""
    product_ids = select(Product.id).where(Product.category_id == category_id)
    result = await db.execute(
        delete(ProductAttributeValue)
        .where(
            ProductAttributeValue.attribute_id == attribute_id,
            ProductAttributeValue.product_id.in_(product_ids),
        )
        .execution_options(synchronize_session=False)
    )
    return result.rowcount
