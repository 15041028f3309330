from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, Path as PathParam, Request, Response

from storefront.app.api.deps import find_shop_session, get_catalog, open_shop_session
from storefront.app.services.catalog_service import ProductCatalogService
from storefront.app.services.sessions import SessionRegistry, ShopSession, get_registry

router = APIRouter(prefix="/api", tags=["favorites"])


@router.get("/favorites")
def list_favorites(shop: Optional[ShopSession] = Depends(find_shop_session)) -> Dict[str, Any]:
    return {"productIds": shop.favorites.ids() if shop is not None else []}


@router.post("/favorites/{product_id}")
def toggle_favorite(
    request: Request,
    response: Response,
    product_id: int = PathParam(..., ge=1),
    shop: Optional[ShopSession] = Depends(find_shop_session),
    registry: SessionRegistry = Depends(get_registry),
    catalog: ProductCatalogService = Depends(get_catalog),
) -> Dict[str, Any]:
    # un-favoriting a product that has since been deleted is still allowed
    known = shop is not None and shop.favorites.contains(product_id)
    if not known and catalog.get_product(product_id) is None:
        raise HTTPException(status_code=404, detail="Product not found")
    if shop is None:
        shop = open_shop_session(request, response, registry)
    return {"productId": product_id, "favorite": shop.favorites.toggle(product_id)}
