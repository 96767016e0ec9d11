import os

# Settings are read at import time
os.environ.setdefault("JWT_SECRET", "test-secret-key")
os.environ["DB_TYPE"] = "sqlite"
os.environ["SQLITE_URL"] = "sqlite+aiosqlite:///:memory:"

from decimal import Decimal

import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from main import app
from pavilion.core.db import Base, get_db, enable_sqlite_foreign_keys
from pavilion.core.security import hash_password
from pavilion.models.catalog_models import Category, SubCategory, Brand, Product
from pavilion.models.customer_models import Customer, CustomerType
from pavilion.models.user_models import User
from pavilion.services.auth_services.auth_service import create_token_for

ADMIN_PASSWORD = "admin-pass-123"


@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    event.listen(engine.sync_engine, "connect", enable_sqlite_foreign_keys)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, class_=AsyncSession, autoflush=False, expire_on_commit=False)


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
async def client(session_factory):
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


# --------------------------
# Users
# --------------------------
@pytest.fixture
async def admin_user(db):
    user = User(
        email="admin@pavilionsports.in",
        name="Back Office",
        password_hash=hash_password(ADMIN_PASSWORD),
        role="superadmin",
        is_active=True,
        token_version=0,
    )
    db.add(user)
    await db.commit()
    return user


@pytest.fixture
def admin_headers(admin_user):
    return {"Authorization": f"Bearer {create_token_for(admin_user)}"}


# --------------------------
# Catalog
# --------------------------
@pytest.fixture
async def catalog(db, admin_user):
    cricket = Category(name="Cricket", slug="cricket")
    bats = SubCategory(name="Bats", slug="bats", category=cricket)
    sg = Brand(name="SG", slug="sg")
    db.add_all([cricket, bats, sg])
    await db.flush()

    products = {
        "bat": Product(
            sku="SG-BAT-01", name="SG English Willow Bat", slug="sg-english-willow-bat",
            mrp_price=Decimal("1500.00"), dealer_price=Decimal("1000.00"), gst_rate=Decimal("12"),
            stock=10, category_id=cricket.id, sub_category_id=bats.id, brand_id=sg.id,
            images=["/static/bat.jpg"], created_by=admin_user.id,
        ),
        "ball": Product(
            sku="SG-BALL-01", name="SG Test Ball", slug="sg-test-ball",
            mrp_price=Decimal("2000.00"), dealer_price=Decimal("1200.00"), gst_rate=Decimal("18"),
            stock=50, category_id=cricket.id, brand_id=sg.id, created_by=admin_user.id,
        ),
        "pads": Product(
            sku="SG-PAD-01", name="SG Batting Pads", slug="sg-batting-pads",
            mrp_price=Decimal("1800.00"), shop_price=Decimal("1500.00"), gst_rate=Decimal("12"),
            stock=5, category_id=cricket.id, brand_id=sg.id, is_quote_hidden=True, created_by=admin_user.id,
        ),
    }
    db.add_all(products.values())
    await db.commit()
    return products


# --------------------------
# Customers
# --------------------------
@pytest.fixture
async def customer_types(db):
    types = {
        "dealer": CustomerType(name="Dealer", base_price_type="dealer", percentage=Decimal("10")),
        "retail": CustomerType(name="Retail", base_price_type="mrp", percentage=Decimal("15")),
    }
    db.add_all(types.values())
    await db.commit()
    return types


@pytest.fixture
async def dealer_customer(db, customer_types):
    customer = Customer(
        name="Ravi Kumar",
        company_name="Kumar Sports",
        email="ravi@kumarsports.in",
        phone="9800000001",
        customer_type_id=customer_types["dealer"].id,
        status="approved",
        is_active=True,
    )
    db.add(customer)
    await db.commit()
    return customer


@pytest.fixture
async def retail_customer(db, customer_types):
    customer = Customer(
        name="Anita Shah",
        email="anita@shahacademy.in",
        customer_type_id=customer_types["retail"].id,
        status="approved",
        is_active=True,
    )
    db.add(customer)
    await db.commit()
    return customer
