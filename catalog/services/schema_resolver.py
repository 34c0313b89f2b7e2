"""
Schema resolution: the ordered attribute bindings of a category.

Resolved from the database on every call. Bindings change while the service
runs, so nothing here is cached.
"""
from dataclasses import dataclass, field
from typing import Dict, List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import contains_eager

from catalog.errors import NotFoundError
from catalog.models.attribute import Attribute
from catalog.models.category import Category, CategoryAttribute


@dataclass
class CategorySchema:
    category: Category
    bindings: List[CategoryAttribute]
    by_name: Dict[str, CategoryAttribute] = field(default_factory=dict)
    by_id: Dict[int, CategoryAttribute] = field(default_factory=dict)

    def __post_init__(self):
        for binding in self.bindings:
            self.by_name[binding.attribute.name] = binding
            self.by_id[binding.attribute_id] = binding


async def get_category_or_404(db: AsyncSession, category_id: int) -> Category:
    result = await db.execute(select(Category).where(Category.id == category_id))
    category = result.scalar_one_or_none()
    if not category:
        raise NotFoundError(f"Category {category_id} not found")
    return category


async def resolve_category_schema(db: AsyncSession, category_id: int) -> CategorySchema:
    """Bindings of a category joined with their attributes, ordered by position then name"""
    category = await get_category_or_404(db, category_id)

    result = await db.execute(
        select(CategoryAttribute)
        .join(Attribute, Attribute.id == CategoryAttribute.attribute_id)
        .options(contains_eager(CategoryAttribute.attribute))
        .where(CategoryAttribute.category_id == category_id)
        .order_by(CategoryAttribute.position, Attribute.name)
        .execution_options(populate_existing=True)
    )
    return CategorySchema(category=category, bindings=list(result.scalars().unique().all()))
