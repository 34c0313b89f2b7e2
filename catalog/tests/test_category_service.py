"""
Category store and binding tests.
"""
import pytest

from catalog.errors import ConflictError, NotFoundError, ValidationError
from catalog.models import DataType, Product
from catalog.schemas.attribute import AttributeCreate
from catalog.schemas.category import BindingCreate, BindingUpdate, CategoryCreate, CategoryUpdate
from catalog.services import category_service, value_store


async def test_define_category(db_session):
    category = await category_service.define_category(db_session, CategoryCreate(name="Bags"))
    assert category.id is not None
    assert category.description == ""
    assert category.is_active is True


async def test_define_duplicate_category(db_session, seed_data):
    with pytest.raises(ConflictError):
        await category_service.define_category(db_session, CategoryCreate(name="Shoes"))


async def test_update_and_deactivate_category(db_session, seed_data):
    updated = await category_service.update_category(
        db_session, seed_data["dresses"], CategoryUpdate(description="Party and casual dresses")
    )
    assert updated.name == "Dresses"
    assert updated.description == "Party and casual dresses"

    deactivated = await category_service.deactivate_category(db_session, seed_data["dresses"])
    assert deactivated.is_active is False

    # soft delete keeps the bindings
    bindings = await category_service.list_bindings(db_session, seed_data["dresses"])
    assert len(bindings) == 2


async def test_list_categories_with_bindings(db_session, seed_data):
    plain = await category_service.list_categories(db_session)
    assert [(c.name, b) for c, b in plain] == [("Dresses", None), ("Shoes", None)]

    detailed = await category_service.list_categories(db_session, include_attributes=True)
    names = {c.name: [b.attribute.name for b in bindings] for c, bindings in detailed}
    assert names == {"Dresses": ["Size", "Color"], "Shoes": ["Shoe Size", "Material", "Gender"]}


async def test_get_unknown_category(db_session):
    with pytest.raises(NotFoundError):
        await category_service.get_category(db_session, 77)


async def test_bind_existing_attribute(db_session, seed_data):
    bindings = await category_service.bind_attribute(
        db_session,
        seed_data["dresses"],
        BindingCreate(attribute_id=seed_data["material"], position=3, default_value="Cotton"),
    )
    assert [b.attribute.name for b in bindings] == ["Size", "Color", "Material"]
    assert bindings[-1].default_value == "Cotton"


async def test_bind_inline_attribute(db_session, seed_data):
    bindings = await category_service.bind_attribute(
        db_session,
        seed_data["dresses"],
        BindingCreate(
            attribute=AttributeCreate(name="Sleeve", data_type=DataType.ENUM, allowed_values=["Short", "Long"]),
            is_required=True,
            default_value="Short",
            position=0,
        ),
    )
    assert bindings[0].attribute.name == "Sleeve"
    assert bindings[0].is_required is True


async def test_bind_twice_conflicts(db_session, seed_data):
    with pytest.raises(ConflictError, match="already mapped"):
        await category_service.bind_attribute(
            db_session, seed_data["shoes"], BindingCreate(attribute_id=seed_data["gender"])
        )


async def test_bind_invalid_default(db_session, seed_data):
    with pytest.raises(ValidationError, match="Invalid default_value"):
        await category_service.bind_attribute(
            db_session,
            seed_data["dresses"],
            BindingCreate(attribute_id=seed_data["shoe_size"], default_value="large"),
        )


async def test_inline_attribute_rolled_back_with_failed_binding(db_session, seed_data):
    from catalog.services import attribute_service

    with pytest.raises(ValidationError):
        await category_service.bind_attribute(
            db_session,
            seed_data["dresses"],
            BindingCreate(
                attribute=AttributeCreate(name="Length", data_type=DataType.NUMBER),
                default_value="long",
            ),
        )
    with pytest.raises(NotFoundError):
        await attribute_service.get_attribute(db_session, "Length")


async def test_bind_unknown_attribute_or_category(db_session, seed_data):
    with pytest.raises(NotFoundError):
        await category_service.bind_attribute(db_session, seed_data["dresses"], BindingCreate(attribute_id=999))
    with pytest.raises(NotFoundError):
        await category_service.bind_attribute(db_session, 999, BindingCreate(attribute_id=seed_data["color"]))


async def test_update_binding_is_partial(db_session, seed_data):
    bindings = await category_service.update_binding(
        db_session, seed_data["shoes"], seed_data["material"], BindingUpdate(is_unique=True)
    )
    material = next(b for b in bindings if b.attribute_id == seed_data["material"])
    assert material.is_unique is True
    assert material.is_required is False
    assert material.position == 2


async def test_update_binding_reorders(db_session, seed_data):
    bindings = await category_service.update_binding(
        db_session, seed_data["shoes"], seed_data["gender"], BindingUpdate(position=0)
    )
    assert [b.attribute.name for b in bindings] == ["Gender", "Shoe Size", "Material"]


async def test_update_unmapped_binding(db_session, seed_data):
    with pytest.raises(NotFoundError):
        await category_service.update_binding(
            db_session, seed_data["shoes"], seed_data["color"], BindingUpdate(is_required=True)
        )


async def _product_with(db_session, category_id, sku, values):
    product = Product(category_id=category_id, sku=sku, name=sku, price=1, currency="INR")
    db_session.add(product)
    await db_session.flush()
    await value_store.insert_values(db_session, product.id, values)
    await db_session.commit()
    return product.id


async def test_unbind_without_values(db_session, seed_data):
    result = await category_service.unbind_attribute(db_session, seed_data["dresses"], seed_data["color"])
    assert result == {"unmapped": True, "values_removed": 0}

    bindings = await category_service.list_bindings(db_session, seed_data["dresses"])
    assert [b.attribute.name for b in bindings] == ["Size"]


async def test_unbind_with_values_requires_force(db_session, seed_data):
    pid = await _product_with(db_session, seed_data["dresses"], "DRS-1", {
        seed_data["size"]: "M",
        seed_data["color"]: "Red",
    })

    with pytest.raises(ConflictError, match="force=true"):
        await category_service.unbind_attribute(db_session, seed_data["dresses"], seed_data["color"])

    result = await category_service.unbind_attribute(
        db_session, seed_data["dresses"], seed_data["color"], force=True
    )
    assert result == {"unmapped": True, "values_removed": 1}
    assert await value_store.load_values(db_session, pid) == {seed_data["size"]: "M"}


async def test_forced_unbind_leaves_other_categories(db_session, seed_data):
    await category_service.bind_attribute(
        db_session, seed_data["shoes"], BindingCreate(attribute_id=seed_data["color"], position=4)
    )
    shoe = await _product_with(db_session, seed_data["shoes"], "SHO-1", {seed_data["color"]: "Black"})

    result = await category_service.unbind_attribute(
        db_session, seed_data["dresses"], seed_data["color"], force=True
    )
    assert result["values_removed"] == 0
    assert (await value_store.load_values(db_session, shoe))[seed_data["color"]] == "Black"
