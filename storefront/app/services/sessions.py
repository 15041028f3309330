# storefront/app/services/sessions.py
from __future__ import annotations

import logging
import threading
import time
import uuid
from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Set, Tuple

from storefront.app.core.config import settings
from storefront.app.core.metrics import sessions_active
from storefront.app.services.cart_store import CartStore

logger = logging.getLogger(__name__)


class Favorites:
    """Set of favorite product ids for one session."""

    def __init__(self) -> None:
        self._ids: Set[int] = set()

    def toggle(self, product_id: int) -> bool:
        """Flip membership; returns True when the product is now a favorite."""
        pid = int(product_id)
        if pid in self._ids:
            self._ids.discard(pid)
            return False
        self._ids.add(pid)
        return True

    def contains(self, product_id: int) -> bool:
        return int(product_id) in self._ids

    def ids(self) -> List[int]:
        return sorted(self._ids)

    def clear(self) -> None:
        self._ids.clear()

    def __len__(self) -> int:
        return len(self._ids)


@dataclass
class ShopSession:
    session_id: str
    cart: CartStore = field(default_factory=CartStore)
    favorites: Favorites = field(default_factory=Favorites)


def new_session_id() -> str:
    return uuid.uuid4().hex


def _id_ok(s: Optional[str]) -> bool:
    # ids we hand out are 32 lowercase hex chars
    return isinstance(s, str) and len(s) == 32 and all(ch in "0123456789abcdef" for ch in s)


class SessionRegistry:
    """
    session id -> ShopSession, held in process memory.

    Only ids minted here are ever stored; a cookie naming an id we do not hold
    gets a fresh session instead. The map is bounded two ways: sessions idle for
    longer than `idle_seconds` are dropped, and past `max_sessions` the least
    recently used one goes first.

    The map is shared by the request threadpool, so lookups and inserts are
    locked; the ShopSession contents are not.
    """

    def __init__(
        self,
        max_sessions: int = 10000,
        idle_seconds: float = 24 * 3600,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._lock = threading.Lock()
        self._sessions: "OrderedDict[str, ShopSession]" = OrderedDict()
        self._seen: Dict[str, float] = {}
        self.max_sessions = max(1, int(max_sessions))
        self.idle_seconds = idle_seconds
        self._clock = clock

    def _touch(self, sid: str) -> None:
        self._sessions.move_to_end(sid)
        self._seen[sid] = self._clock()

    def _evict(self, room_for: int = 0) -> List[str]:
        # oldest-touched first; caller holds the lock
        evicted: List[str] = []
        now = self._clock()
        while self._sessions:
            sid = next(iter(self._sessions))
            idle = self.idle_seconds and now - self._seen[sid] > self.idle_seconds
            if not idle and len(self._sessions) + room_for <= self.max_sessions:
                break
            del self._sessions[sid]
            del self._seen[sid]
            evicted.append(sid)
        return evicted

    def get_or_create(self, session_id: Optional[str]) -> Tuple[ShopSession, bool]:
        """Return (session, created). Missing, invalid or unknown ids get a fresh session."""
        with self._lock:
            evicted = self._evict()
            if _id_ok(session_id) and session_id in self._sessions:
                self._touch(session_id)
                sess, created = self._sessions[session_id], False
            else:
                evicted += self._evict(room_for=1)
                sess, created = ShopSession(session_id=new_session_id()), True
                self._sessions[sess.session_id] = sess
                self._touch(sess.session_id)
            sessions_active.set(len(self._sessions))
        if evicted:
            logger.debug("sessions evicted count=%d", len(evicted))
        if created:
            logger.debug("session opened id=%s", sess.session_id)
        return sess, created

    def get(self, session_id: Optional[str]) -> Optional[ShopSession]:
        """Look a session up without ever creating one."""
        if not _id_ok(session_id):
            return None
        with self._lock:
            self._evict()
            sessions_active.set(len(self._sessions))
            sess = self._sessions.get(session_id)
            if sess is not None:
                self._touch(session_id)
            return sess

    def drop(self, session_id: str) -> bool:
        with self._lock:
            removed = self._sessions.pop(session_id, None) is not None
            self._seen.pop(session_id, None)
            sessions_active.set(len(self._sessions))
        if removed:
            logger.debug("session closed id=%s", session_id)
        return removed

    def clear(self) -> None:
        with self._lock:
            self._sessions.clear()
            self._seen.clear()
            sessions_active.set(0)

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)


_REGISTRY: Optional[SessionRegistry] = None


def _new_registry() -> SessionRegistry:
    return SessionRegistry(
        max_sessions=settings.session_max_count,
        idle_seconds=settings.session_idle_seconds,
    )


def get_registry() -> SessionRegistry:
    global _REGISTRY
    if _REGISTRY is None:
        _REGISTRY = _new_registry()
    return _REGISTRY


def reset_registry() -> SessionRegistry:
    """
    Replace the process-wide registry with an empty one.
    Useful for tests.
    """
    global _REGISTRY
    _REGISTRY = _new_registry()
    sessions_active.set(0)
    return _REGISTRY
