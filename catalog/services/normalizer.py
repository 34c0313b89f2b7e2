"""
Normalizes caller attribute payloads into {attribute_id: raw value}.

Two payload shapes are accepted:

* a mapping of attribute name to value, ``{"Size": "M"}``
* a list of items, ``[{"attribute_id": 3, "value": "M"}, {"name": "Color", "value": "Red"}]``

Every reference is resolved against the category schema; references that
do not resolve to a bound attribute are rejected.
"""
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Tuple, Union

from catalog.errors import ValidationError
from catalog.services.schema_resolver import CategorySchema


@dataclass(frozen=True)
class ById:
    attribute_id: int


@dataclass(frozen=True)
class ByName:
    name: str


AttributeRef = Union[ById, ByName]


def _item_ref(item: Mapping[str, Any]) -> AttributeRef:
    if item.get("attribute_id"):
        try:
            return ById(int(item["attribute_id"]))
        except (TypeError, ValueError):
            raise ValidationError(f"Invalid attribute_id {item['attribute_id']!r}") from None
    if item.get("name"):
        return ByName(item["name"])
    raise ValidationError("Each attribute item needs attribute_id or name")


def parse_attribute_refs(attrs: Any) -> List[Tuple[AttributeRef, Any]]:
    """Split a payload into (reference, value) pairs, preserving order"""
    if attrs is None:
        return []
    if isinstance(attrs, Mapping):
        return [(ByName(name), value) for name, value in attrs.items()]
    if isinstance(attrs, (list, tuple)):
        pairs = []
        for item in attrs:
            if not isinstance(item, Mapping):
                raise ValidationError("Attribute items must be objects")
            pairs.append((_item_ref(item), item.get("value")))
        return pairs
    raise ValidationError("attributes must be an object or a list")


def resolve_ref(schema: CategorySchema, ref: AttributeRef) -> int:
    if isinstance(ref, ByName):
        binding = schema.by_name.get(ref.name)
        if binding is None:
            raise ValidationError(f"Unknown attribute '{ref.name}' for this category")
        return binding.attribute_id
    if ref.attribute_id not in schema.by_id:
        raise ValidationError(f"Attribute id {ref.attribute_id} not mapped to this category")
    return ref.attribute_id


def normalize(schema: CategorySchema, attrs: Any) -> Dict[int, Any]:
    """Map a payload onto attribute ids; a repeated attribute keeps its last value"""
    normalized: Dict[int, Any] = {}
    for ref, value in parse_attribute_refs(attrs):
        normalized[resolve_ref(schema, ref)] = value
    return normalized
