# storefront/app/services/catalog_service.py
from __future__ import annotations

import logging
import math
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy import func
from sqlmodel import Session, select

from storefront.app.core.config import settings
from storefront.app.models.product import Product, ProductCreate, ProductUpdate
from storefront.app.services.errors import ProductNotFound, ProductValidationError

logger = logging.getLogger(__name__)

DEMO_PRODUCTS: List[Dict[str, Any]] = [
    {"name": "Linen Shirt", "category": "Apparel", "price": 39.90, "variants": ["S", "M", "L"],
     "description": "Breathable summer shirt"},
    {"name": "Trail Sneakers", "category": "Footwear", "price": 89.00, "variants": ["40", "41", "42", "43"]},
    {"name": "Wireless Earbuds", "category": "Tech", "price": 59.99, "variants": ["Black", "White"]},
    {"name": "Ceramic Mug", "category": "Home", "price": 12.50, "variants": []},
    {"name": "Pruning Shears", "category": "Garden", "price": 18.75, "variants": [], "in_stock": False},
]


def _clean_str(v: Optional[str]) -> Optional[str]:
    if v is None:
        return None
    v = v.strip()
    return v or None


def _price_ok(price: float) -> bool:
    return math.isfinite(price) and price >= 0


class ProductCatalogService:
    """
    Product records over a SQLModel session.

    The service never commits on read paths; writes commit and refresh so the
    returned row carries its database id.
    """

    def __init__(self, session: Session):
        self.session = session

    # ---------- queries ----------

    def list_products(self, category: Optional[str] = None, q: Optional[str] = None) -> List[Product]:
        stmt = select(Product)
        category = _clean_str(category)
        if category:
            stmt = stmt.where(func.lower(Product.category) == category.lower())
        q = _clean_str(q)
        if q:
            stmt = stmt.where(Product.name.icontains(q, autoescape=True))
        stmt = stmt.order_by(Product.id)
        return list(self.session.exec(stmt).all())

    def get_product(self, product_id: int) -> Optional[Product]:
        return self.session.get(Product, product_id)

    def require_product(self, product_id: int) -> Product:
        product = self.get_product(product_id)
        if product is None:
            raise ProductNotFound(product_id)
        return product

    def list_categories(self) -> List[str]:
        used = self.session.exec(select(Product.category).distinct()).all()
        # case-insensitive merge; the configured spelling wins
        by_key: Dict[str, str] = {c.lower(): c for c in used if c}
        by_key.update({c.lower(): c for c in settings.default_categories})
        return sorted(by_key.values(), key=str.lower)

    # ---------- writes ----------

    def create_product(self, data: ProductCreate) -> Product:
        name = _clean_str(data.name)
        category = _clean_str(data.category)
        if not name or not category or data.price is None:
            raise ProductValidationError("Missing required fields")
        if not _price_ok(data.price):
            raise ProductValidationError("price must be a finite number >= 0")

        product = Product(
            name=name,
            category=category,
            price=float(data.price),
            image=_clean_str(data.image),
            in_stock=True if data.in_stock is None else bool(data.in_stock),
            variants=list(data.variants or []),
            description=_clean_str(data.description),
        )
        self.session.add(product)
        self.session.commit()
        self.session.refresh(product)
        logger.info("product created id=%s name=%r category=%s", product.id, product.name, product.category)
        return product

    def update_product(self, product_id: int, patch: ProductUpdate) -> Product:
        product = self.require_product(product_id)
        changes = patch.model_dump(exclude_unset=True)

        for key in ("name", "category"):
            if key in changes:
                value = _clean_str(changes[key])
                if not value:
                    raise ProductValidationError(f"{key} must be a non-empty string")
                setattr(product, key, value)
        if "price" in changes:
            if changes["price"] is None or not _price_ok(changes["price"]):
                raise ProductValidationError("price must be a finite number >= 0")
            product.price = float(changes["price"])
        if "in_stock" in changes:
            if changes["in_stock"] is None:
                raise ProductValidationError("inStock must be boolean")
            product.in_stock = bool(changes["in_stock"])
        if "variants" in changes:
            product.variants = list(changes["variants"] or [])
        for key in ("image", "description"):
            if key in changes:
                setattr(product, key, _clean_str(changes[key]))

        self.session.add(product)
        self.session.commit()
        self.session.refresh(product)
        logger.info("product updated id=%s fields=%s", product_id, sorted(changes))
        return product

    def delete_product(self, product_id: int) -> bool:
        product = self.get_product(product_id)
        if product is None:
            return False
        self.session.delete(product)
        self.session.commit()
        logger.info("product deleted id=%s", product_id)
        return True

    def seed_catalog(self, items: Iterable[Dict[str, Any]] = DEMO_PRODUCTS) -> int:
        """Insert `items` only when the catalog is empty. Returns rows inserted."""
        existing = self.session.exec(select(func.count()).select_from(Product)).one()
        if existing:
            return 0
        inserted = 0
        for raw in items:
            self.session.add(Product(**{**raw, "variants": list(raw.get("variants") or [])}))
            inserted += 1
        self.session.commit()
        logger.info("seeded demo catalog with %d products", inserted)
        return inserted
