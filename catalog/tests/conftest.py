"""
Test fixtures - in-memory SQLite database + HTTP client
"""
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool

from catalog.database import Base, get_db, enable_sqlite_foreign_keys
from catalog.main import app
from catalog.models import Attribute, Category, CategoryAttribute, DataType


@pytest_asyncio.fixture()
async def db_session():
    """Create a fresh in-memory SQLite database for each test"""
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", echo=False, poolclass=StaticPool)
    enable_sqlite_foreign_keys(engine)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async with session_factory() as session:
        yield session

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture()
async def seed_data(db_session):
    """
    Baseline catalog: Shoes and Dresses with their attribute mappings.

    Returns plain ids so tests stay valid after a service rolls the session back.
    """
    shoes = Category(name="Shoes", description="Footwear", is_active=True)
    dresses = Category(name="Dresses", description="Women dresses", is_active=True)

    shoe_size = Attribute(name="Shoe Size", data_type=DataType.NUMBER, is_active=True)
    material = Attribute(name="Material", data_type=DataType.TEXT, is_active=True)
    gender = Attribute(
        name="Gender", data_type=DataType.ENUM, allowed_values=["Men", "Women", "Unisex"], is_active=True
    )
    size = Attribute(
        name="Size", data_type=DataType.ENUM, allowed_values=["XS", "S", "M", "L", "XL"], is_active=True
    )
    color = Attribute(name="Color", data_type=DataType.TEXT, is_active=True)

    db_session.add_all([shoes, dresses, shoe_size, material, gender, size, color])
    await db_session.flush()

    db_session.add_all([
        CategoryAttribute(category_id=shoes.id, attribute_id=shoe_size.id, is_required=True, position=1),
        CategoryAttribute(category_id=shoes.id, attribute_id=material.id, position=2),
        CategoryAttribute(category_id=shoes.id, attribute_id=gender.id, is_required=True, position=3),
        CategoryAttribute(category_id=dresses.id, attribute_id=size.id, is_required=True, position=1),
        CategoryAttribute(category_id=dresses.id, attribute_id=color.id, position=2),
    ])
    await db_session.commit()

    return {
        "shoes": shoes.id,
        "dresses": dresses.id,
        "shoe_size": shoe_size.id,
        "material": material.id,
        "gender": gender.id,
        "size": size.id,
        "color": color.id,
    }


@pytest_asyncio.fixture()
async def client(db_session, seed_data):
    """httpx AsyncClient bound to the FastAPI app"""

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test", follow_redirects=True) as ac:
        yield ac

    app.dependency_overrides.clear()
