"""Pytest configuration and fixtures"""
import os

# Set test environment variables before the app reads its settings
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SEED_DEMO_CATALOG", "false")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest
from sqlmodel import Session, SQLModel

from storefront.app.core.database import get_engine, init_db
from storefront.app.core.metrics import REGISTRY
from storefront.app.models.product import Product
from storefront.app.services.sessions import reset_registry


@pytest.fixture(autouse=True)
def fresh_state():
    """Empty catalog, no UI sessions and zeroed metrics for every test."""
    engine = get_engine()
    SQLModel.metadata.drop_all(engine)
    init_db(engine)
    reset_registry()
    REGISTRY.reset()
    yield


@pytest.fixture
def db_session():
    with Session(get_engine()) as session:
        yield session


@pytest.fixture
def make_product(db_session):
    """Insert a product row directly and return it."""
    def _make(**fields) -> Product:
        data = {"name": "Tee", "category": "Apparel", "price": 10.0, "in_stock": True, "variants": []}
        data.update(fields)
        product = Product(**data)
        db_session.add(product)
        db_session.commit()
        db_session.refresh(product)
        return product

    return _make
