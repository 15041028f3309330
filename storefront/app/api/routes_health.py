from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlmodel import Session

from storefront.app.core.config import settings
from storefront.app.core.database import get_session

router = APIRouter(prefix="/api", tags=["health"])


def _db_probe(session: Session) -> str:
    try:
        session.connection().execute(text("SELECT 1"))
        return "ok"
    except Exception:
        return "fail"


@router.get("/health")
def health(session: Session = Depends(get_session)):
    return {
        "service": settings.service_name,
        "version": settings.version,
        "env": {
            "environment": settings.environment,
            "database": "sqlite" if settings.is_sqlite else "other",
            "currency": settings.currency,
        },
        "status": "ok",
        "probes": {
            "database": _db_probe(session),
        },
    }
