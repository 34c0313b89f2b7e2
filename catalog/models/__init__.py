from catalog.models.attribute import Attribute, DataType
from catalog.models.category import Category, CategoryAttribute
from catalog.models.product import Product, ProductStatus, ProductAttributeValue

__all__ = [
    "Attribute",
    "DataType",
    "Category",
    "CategoryAttribute",
    "Product",
    "ProductStatus",
    "ProductAttributeValue",
]
