# storefront/app/api/routes_cart.py
from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Path as PathParam, Query, Request, Response

from storefront.app.api.deps import find_shop_session, get_catalog, open_shop_session
from storefront.app.api.models import CartItemIn
from storefront.app.core.config import settings
from storefront.app.core.metrics import cart_mutations
from storefront.app.models.product import Product
from storefront.app.services.cart_store import CartStore
from storefront.app.services.catalog_service import ProductCatalogService
from storefront.app.services.errors import UnknownVariant
from storefront.app.services.sessions import SessionRegistry, ShopSession, get_registry

router = APIRouter(prefix="/api", tags=["cart"])

logger = logging.getLogger(__name__)

_CENTS = Decimal("0.01")


def _money(v: Decimal) -> str:
    return str(v.quantize(_CENTS))


def _norm_variant(variant: Optional[str]) -> Optional[str]:
    if variant is None:
        return None
    v = variant.strip()
    return v or None


def cart_view(cart: CartStore) -> Dict[str, Any]:
    return {
        "lines": [
            {
                "productId": line.product.id,
                "name": line.product.name,
                "category": line.product.category,
                "image": line.product.image,
                "variant": line.variant,
                "quantity": line.quantity,
                "unitPrice": _money(line.product.price),
                "lineTotal": _money(line.line_total),
            }
            for line in cart.lines
        ],
        "totalItems": cart.total_items(),
        "totalPrice": _money(cart.total_price()),
        "currency": settings.currency,
    }


def resolve_variant(product: Product, variant: Optional[str]) -> Optional[str]:
    """
    Pick the variant a storefront add refers to: the requested one if the
    product offers it, else the first listed variant, else None.
    """
    variant = _norm_variant(variant)
    options = list(product.variants or [])
    if variant is None:
        return options[0] if options else None
    if variant not in options:
        raise UnknownVariant(int(product.id), variant)
    return variant


def _remove_key_variant(
    catalog: ProductCatalogService, product_id: int, variant: Optional[str]
) -> Optional[str]:
    # an omitted variant means the same line an add without one would have filled
    variant = _norm_variant(variant)
    if variant is not None:
        return variant
    product = catalog.get_product(product_id)
    if product is None:
        return None
    options = list(product.variants or [])
    return options[0] if options else None


@router.get("/cart")
def get_cart(shop: Optional[ShopSession] = Depends(find_shop_session)) -> Dict[str, Any]:
    return cart_view(shop.cart if shop is not None else CartStore())


@router.post("/cart/items")
def add_to_cart(
    request: Request,
    response: Response,
    payload: CartItemIn = Body(...),
    registry: SessionRegistry = Depends(get_registry),
    catalog: ProductCatalogService = Depends(get_catalog),
) -> Dict[str, Any]:
    """
    Add one unit of a product. Body: { "productId": int, "variant"?: str }
    """
    product = catalog.get_product(payload.product_id)
    if product is None:
        raise HTTPException(status_code=404, detail="Product not found")
    if not product.in_stock:
        raise HTTPException(status_code=409, detail="Product is out of stock")
    try:
        variant = resolve_variant(product, payload.variant)
    except UnknownVariant as e:
        raise HTTPException(status_code=400, detail=str(e))

    shop = open_shop_session(request, response, registry)
    shop.cart.add(product, variant)
    cart_mutations.inc({"op": "add"})
    logger.debug("cart add session=%s product=%s variant=%s", shop.session_id, product.id, variant)
    return cart_view(shop.cart)


@router.delete("/cart/items/{product_id}")
def remove_from_cart(
    product_id: int = PathParam(..., ge=1),
    variant: Optional[str] = Query(default=None, description="Variant label of the line"),
    shop: Optional[ShopSession] = Depends(find_shop_session),
    catalog: ProductCatalogService = Depends(get_catalog),
) -> Dict[str, Any]:
    """
    Remove one unit of the (product, variant) line; unknown lines are ignored.
    Without `variant` the product's first variant is meant, as on add.
    """
    if shop is None:
        return cart_view(CartStore())
    shop.cart.remove(product_id, _remove_key_variant(catalog, product_id, variant))
    cart_mutations.inc({"op": "remove"})
    return cart_view(shop.cart)


@router.delete("/cart")
def clear_cart(shop: Optional[ShopSession] = Depends(find_shop_session)) -> Dict[str, Any]:
    if shop is None:
        return cart_view(CartStore())
    shop.cart.clear()
    cart_mutations.inc({"op": "clear"})
    logger.debug("cart cleared session=%s", shop.session_id)
    return cart_view(shop.cart)
