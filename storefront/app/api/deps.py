from __future__ import annotations

from typing import Optional

from fastapi import Depends, Request, Response
from sqlmodel import Session

from storefront.app.core.config import settings
from storefront.app.core.database import get_session
from storefront.app.services.catalog_service import ProductCatalogService
from storefront.app.services.sessions import SessionRegistry, ShopSession, get_registry


def get_catalog(session: Session = Depends(get_session)) -> ProductCatalogService:
    return ProductCatalogService(session)


def find_shop_session(
    request: Request,
    registry: SessionRegistry = Depends(get_registry),
) -> Optional[ShopSession]:
    """The caller's UI session if the cookie names one we hold; never opens one."""
    return registry.get(request.cookies.get(settings.session_cookie_name))


def open_shop_session(request: Request, response: Response, registry: SessionRegistry) -> ShopSession:
    """
    Resolve the caller's UI session, opening a new one (and setting the cookie)
    when the cookie is missing or names a session we do not hold.

    Called by write routes once their input checks have passed, so rejected
    requests never leave a session behind.
    """
    cookie_name = settings.session_cookie_name
    sess, created = registry.get_or_create(request.cookies.get(cookie_name))
    if created:
        response.set_cookie(cookie_name, sess.session_id, httponly=True, samesite="lax")
    return sess
