import pytest
from pydantic import ValidationError

from storefront.app.models.product import ProductCreate, ProductUpdate
from storefront.app.services.catalog_service import DEMO_PRODUCTS, ProductCatalogService
from storefront.app.services.errors import ProductNotFound, ProductValidationError


def test_create_applies_defaults(db_session):
    catalog = ProductCatalogService(db_session)
    p = catalog.create_product(ProductCreate(name=" Hoodie ", category="Apparel", price=45))

    assert p.id is not None
    assert p.name == "Hoodie"
    assert p.in_stock is True
    assert p.variants == []
    assert p.image is None


@pytest.mark.parametrize(
    "payload",
    [
        {"category": "Apparel", "price": 1},
        {"name": "X", "price": 1},
        {"name": "X", "category": "Apparel"},
        {"name": "  ", "category": "Apparel", "price": 1},
    ],
)
def test_create_missing_required_fields(db_session, payload):
    with pytest.raises(ProductValidationError, match="Missing required fields"):
        ProductCatalogService(db_session).create_product(ProductCreate(**payload))


def test_create_rejects_negative_price(db_session):
    with pytest.raises(ProductValidationError):
        ProductCatalogService(db_session).create_product(ProductCreate(name="X", category="Tech", price=-1))


def test_variants_accept_json_string(db_session):
    data = ProductCreate.model_validate(
        {"name": "Cap", "category": "Apparel", "price": 9, "variants": '["S", "M", "S"]', "inStock": False}
    )
    p = ProductCatalogService(db_session).create_product(data)

    assert p.variants == ["S", "M"]
    assert p.in_stock is False


def test_list_filters(db_session, make_product):
    make_product(name="Blue Shirt", category="Apparel")
    make_product(name="Red Shirt", category="apparel")
    make_product(name="Desk Lamp", category="Home")
    catalog = ProductCatalogService(db_session)

    assert [p.name for p in catalog.list_products()] == ["Blue Shirt", "Red Shirt", "Desk Lamp"]
    assert [p.name for p in catalog.list_products(category="APPAREL")] == ["Blue Shirt", "Red Shirt"]
    assert [p.name for p in catalog.list_products(q="shirt")] == ["Blue Shirt", "Red Shirt"]
    assert [p.name for p in catalog.list_products(category="apparel", q="red")] == ["Red Shirt"]
    assert catalog.list_products(q="100%") == []


def test_update_and_delete(db_session, make_product):
    p = make_product(name="Mug", price=10)
    catalog = ProductCatalogService(db_session)

    updated = catalog.update_product(p.id, ProductUpdate(price=12.5, variants=["Blue"]))
    assert updated.price == 12.5
    assert updated.variants == ["Blue"]
    assert updated.name == "Mug"

    with pytest.raises(ProductValidationError):
        catalog.update_product(p.id, ProductUpdate(name=""))

    assert catalog.delete_product(p.id) is True
    assert catalog.delete_product(p.id) is False
    with pytest.raises(ProductNotFound):
        catalog.update_product(p.id, ProductUpdate(price=1))


def test_categories_merge_defaults(db_session, make_product):
    make_product(category="Toys")
    make_product(category="tech")

    cats = ProductCatalogService(db_session).list_categories()

    assert cats == ["Apparel", "Footwear", "Garden", "Home", "Tech", "Toys"]


def test_seed_only_into_empty_catalog(db_session):
    catalog = ProductCatalogService(db_session)

    assert catalog.seed_catalog() == len(DEMO_PRODUCTS)
    assert catalog.seed_catalog() == 0
    assert len(catalog.list_products()) == len(DEMO_PRODUCTS)


@pytest.mark.parametrize("price", [float("nan"), float("inf"), float("-inf")])
def test_non_finite_price_is_rejected(db_session, price):
    with pytest.raises(ValidationError):
        ProductCreate(name="X", category="Tech", price=price)
    with pytest.raises(ValidationError):
        ProductUpdate(price=price)

    # callers that skip schema validation still hit the catalog's own check
    catalog = ProductCatalogService(db_session)
    with pytest.raises(ProductValidationError, match="finite"):
        catalog.create_product(ProductCreate.model_construct(name="X", category="Tech", price=price))
    p = catalog.create_product(ProductCreate(name="Y", category="Tech", price=5))
    with pytest.raises(ProductValidationError, match="finite"):
        catalog.update_product(p.id, ProductUpdate.model_construct(price=price))
