from __future__ import annotations
import threading
from collections import defaultdict
from typing import Dict, Iterable, Optional, Tuple

_LabelKey = Tuple[Tuple[str, str], ...]


def _label_key(labels: Optional[Dict[str, str]]) -> _LabelKey:
    return tuple(sorted((labels or {}).items()))


def _render_samples(name: str, values: Dict[_LabelKey, float]) -> Iterable[str]:
    for labels, v in sorted(values.items()):
        if labels:
            label_str = ",".join(f'{k}="{v_}"' for k, v_ in labels)
            yield f"{name}{{{label_str}}} {v}\n"
        else:
            yield f"{name} {v}\n"


# ---------- Primitives ----------

class Counter:
    def __init__(self, name: str, help_: str = ""):
        self.name = name
        self.help = help_
        self._lock = threading.Lock()
        self._values: Dict[_LabelKey, int] = defaultdict(int)

    def inc(self, labels: Optional[Dict[str, str]] = None, by: int = 1) -> None:
        key = _label_key(labels)
        with self._lock:
            self._values[key] += by

    def value(self, labels: Optional[Dict[str, str]] = None) -> int:
        with self._lock:
            return self._values.get(_label_key(labels), 0)

    def reset(self) -> None:
        with self._lock:
            self._values.clear()

    def render(self) -> Iterable[str]:
        if self.help:
            yield f"# HELP {self.name} {self.help}\n# TYPE {self.name} counter\n"
        with self._lock:
            snapshot = dict(self._values)
        yield from _render_samples(self.name, snapshot)


class Gauge:
    def __init__(self, name: str, help_: str = ""):
        self.name = name
        self.help = help_
        self._lock = threading.Lock()
        self._values: Dict[_LabelKey, float] = defaultdict(float)

    def set(self, value: float, labels: Optional[Dict[str, str]] = None) -> None:
        key = _label_key(labels)
        with self._lock:
            self._values[key] = value

    def inc(self, labels: Optional[Dict[str, str]] = None, by: float = 1.0) -> None:
        key = _label_key(labels)
        with self._lock:
            self._values[key] += by

    def dec(self, labels: Optional[Dict[str, str]] = None, by: float = 1.0) -> None:
        self.inc(labels=labels, by=-by)

    def value(self, labels: Optional[Dict[str, str]] = None) -> float:
        with self._lock:
            return self._values.get(_label_key(labels), 0.0)

    def reset(self) -> None:
        with self._lock:
            self._values.clear()

    def render(self) -> Iterable[str]:
        if self.help:
            yield f"# HELP {self.name} {self.help}\n# TYPE {self.name} gauge\n"
        with self._lock:
            snapshot = dict(self._values)
        yield from _render_samples(self.name, snapshot)


# ---------- Registry ----------

class MetricsRegistry:
    def __init__(self):
        self._items: list = []

    def counter(self, name: str, help_: str = "") -> Counter:
        c = Counter(name, help_)
        self._items.append(c)
        return c

    def gauge(self, name: str, help_: str = "") -> Gauge:
        g = Gauge(name, help_)
        self._items.append(g)
        return g

    def render_prometheus(self) -> str:
        out: list[str] = []
        for it in self._items:
            out.extend(it.render())
        return "".join(out)

    def reset(self) -> None:
        """Zero every metric; the metric objects themselves stay registered."""
        for it in self._items:
            it.reset()


REGISTRY = MetricsRegistry()

# ---------- App metrics ----------

products_created = REGISTRY.counter(
    "storefront_products_created_total", "Count of products created through the API"
)
cart_mutations = REGISTRY.counter(
    "storefront_cart_mutations_total", "Count of cart mutations by operation (add/remove/clear)"
)
sessions_active = REGISTRY.gauge(
    "storefront_sessions_active", "Number of UI sessions currently held in memory"
)
