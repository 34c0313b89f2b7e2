"""
Seed the demo catalog: Dresses and Shoes with their attribute mappings and one product each.
Safe to run repeatedly.
"""
import asyncio

from sqlalchemy import select

from catalog.database import engine, Base, AsyncSessionLocal
from catalog.errors import CatalogError, NotFoundError
from catalog.models import Category, CategoryAttribute, DataType
from catalog.schemas.attribute import AttributeCreate
from catalog.schemas.category import BindingCreate, CategoryCreate
from catalog.schemas.product import ProductCreate
from catalog.services import attribute_service, category_service, product_service


async def ensure_attribute(session, name, data_type, allowed_values=None):
    try:
        return await attribute_service.get_attribute(session, name)
    except NotFoundError:
        return await attribute_service.define_attribute(
            session, AttributeCreate(name=name, data_type=data_type, allowed_values=allowed_values)
        )


async def ensure_category(session, name, description):
    result = await session.execute(select(Category).where(Category.name == name))
    category = result.scalar_one_or_none()
    if category:
        return category
    return await category_service.define_category(session, CategoryCreate(name=name, description=description))


async def map_if_not_mapped(session, category_id, attribute_id, **rules):
    result = await session.execute(
        select(CategoryAttribute).where(
            CategoryAttribute.category_id == category_id,
            CategoryAttribute.attribute_id == attribute_id,
        )
    )
    if not result.scalar_one_or_none():
        await category_service.bind_attribute(
            session, category_id, BindingCreate(attribute_id=attribute_id, **rules)
        )


async def seed():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with AsyncSessionLocal() as session:
        dresses = await ensure_category(session, "Dresses", "Women dresses")
        shoes = await ensure_category(session, "Shoes", "Footwear")

        size = await ensure_attribute(session, "Size", DataType.ENUM, ["XS", "S", "M", "L", "XL"])
        color = await ensure_attribute(session, "Color", DataType.TEXT)
        fabric = await ensure_attribute(session, "Fabric", DataType.TEXT)

        await map_if_not_mapped(session, dresses.id, size.id, is_required=True, position=1)
        await map_if_not_mapped(session, dresses.id, color.id, is_required=True, position=2)
        await map_if_not_mapped(session, dresses.id, fabric.id, position=3)

        shoe_size = await ensure_attribute(session, "Shoe Size", DataType.NUMBER)
        material = await ensure_attribute(session, "Material", DataType.TEXT)
        gender = await ensure_attribute(session, "Gender", DataType.ENUM, ["Men", "Women", "Unisex"])

        await map_if_not_mapped(session, shoes.id, shoe_size.id, is_required=True, position=1)
        await map_if_not_mapped(session, shoes.id, material.id, position=2)
        await map_if_not_mapped(session, shoes.id, gender.id, is_required=True, position=3)

        demo_products = [
            ProductCreate(
                category_id=dresses.id,
                sku="DRS-1001",
                name="Red Summer Dress",
                price=1299,
                currency="INR",
                attributes={"Size": "M", "Color": "Red", "Fabric": "Cotton"},
            ),
            ProductCreate(
                category_id=shoes.id,
                sku="SHO-2001",
                name="Running Shoe",
                price=2499,
                currency="INR",
                attributes={"Shoe Size": 9, "Material": "Mesh", "Gender": "Men"},
            ),
        ]
        for data in demo_products:
            try:
                await product_service.create_product(session, data)
                print(f"Created product {data.sku}")
            except CatalogError as e:
                print(f"Skipped product {data.sku}: {e.message}")

    print("Seed complete.")


if __name__ == "__main__":
    asyncio.run(seed())
