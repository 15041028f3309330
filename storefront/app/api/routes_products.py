# storefront/app/api/routes_products.py
from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Path as PathParam, Query, Response

from storefront.app.api.deps import get_catalog
from storefront.app.core.metrics import products_created
from storefront.app.models.product import ProductCreate, ProductRead, ProductUpdate
from storefront.app.services.catalog_service import ProductCatalogService
from storefront.app.services.errors import ProductNotFound, ProductValidationError

router = APIRouter(prefix="/api", tags=["products"])


@router.get("/products", response_model=List[ProductRead])
def list_products(
    category: Optional[str] = Query(default=None, description="Category filter (case-insensitive)"),
    q: Optional[str] = Query(default=None, description="Free text in product name"),
    catalog: ProductCatalogService = Depends(get_catalog),
):
    return catalog.list_products(category=category, q=q)


@router.get("/products/categories")
def list_categories(catalog: ProductCatalogService = Depends(get_catalog)) -> List[str]:
    return catalog.list_categories()


@router.get("/products/{product_id}", response_model=ProductRead)
def get_product(
    product_id: int = PathParam(..., ge=1),
    catalog: ProductCatalogService = Depends(get_catalog),
):
    product = catalog.get_product(product_id)
    if product is None:
        raise HTTPException(status_code=404, detail="Product not found")
    return product


@router.post("/products", status_code=201, response_model=ProductRead)
def create_product(
    payload: ProductCreate = Body(...),
    catalog: ProductCatalogService = Depends(get_catalog),
):
    """
    Body: { "name": str, "category": str, "price": number, "image"?: str,
            "inStock"?: bool (default true), "variants"?: [str], "description"?: str }
    """
    try:
        product = catalog.create_product(payload)
    except ProductValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    products_created.inc()
    return product


@router.put("/products/{product_id}", response_model=ProductRead)
def update_product(
    product_id: int = PathParam(..., ge=1),
    payload: ProductUpdate = Body(...),
    catalog: ProductCatalogService = Depends(get_catalog),
):
    try:
        return catalog.update_product(product_id, payload)
    except ProductNotFound:
        raise HTTPException(status_code=404, detail="Product not found")
    except ProductValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.delete("/products/{product_id}", status_code=204)
def delete_product(
    product_id: int = PathParam(..., ge=1),
    catalog: ProductCatalogService = Depends(get_catalog),
) -> Response:
    if not catalog.delete_product(product_id):
        raise HTTPException(status_code=404, detail="Product not found")
    return Response(status_code=204)
