import os

os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ.setdefault("DATABASE_URL", "sqlite://")

from decimal import Decimal

import pytest
from sqlalchemy import create_engine, text
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from tallyra.core.enums import Role
from tallyra.db.schema import create_schema
from tallyra.schemas.catalog import CatalogItem
from tallyra.schemas.session import OperatorSession, ShopProfile


@pytest.fixture
def make_item():
    def _make(name: str, base_price, **fields) -> CatalogItem:
        fields.setdefault("id", name.lower().replace(" ", "-"))
        return CatalogItem(name=name, base_price=Decimal(str(base_price)), **fields)

    return _make


@pytest.fixture
def tea(make_item):
    return make_item("Tea", 20, stock_quantity=10, min_stock_alert=2)


@pytest.fixture
def samosa(make_item):
    return make_item("Samosa", 10, stock_quantity=50, min_stock_alert=5)


@pytest.fixture
def shop():
    return ShopProfile(id="shop-1", name="Corner Chai", currency="INR", upi_id="cornerchai@upi")


@pytest.fixture
def staff_session(shop):
    return OperatorSession(shop=shop, role=Role.STAFF, staff_id="staff-1")


@pytest.fixture
def owner_session(shop):
    return OperatorSession(shop=shop, role=Role.OWNER)


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    with engine.begin() as conn:
        create_schema(conn)
        conn.execute(
            text(
                """
                INSERT INTO shops (id, name, currency, upi_id)
                VALUES ('shop-1', 'Corner Chai', 'INR', 'cornerchai@upi')
                """
            )
        )
    yield engine
    engine.dispose()


@pytest.fixture
def db(engine):
    session = sessionmaker(bind=engine, autoflush=False)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def add_item(engine):
    def _add(item_id: str, name: str, base_price: str, stock: int = 10, min_alert: int = 0,
             max_pct: str = "0", max_fixed: str = "0", active: bool = True) -> None:
        with engine.begin() as conn:
            conn.execute(
                text(
                    """
                    INSERT INTO items (
                      id, shop_id, name, base_price, stock_quantity, min_stock_alert,
                      max_discount_percentage, max_discount_fixed, is_active
                    )
                    VALUES (
                      :id, 'shop-1', :name, :base_price, :stock, :min_alert,
                      :max_pct, :max_fixed, :active
                    )
                    """
                ),
                {
                    "id": item_id,
                    "name": name,
                    "base_price": float(base_price),
                    "stock": stock,
                    "min_alert": min_alert,
                    "max_pct": float(max_pct),
                    "max_fixed": float(max_fixed),
                    "active": active,
                },
            )

    return _add
