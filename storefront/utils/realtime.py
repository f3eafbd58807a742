# storefront/utils/realtime.py
"""Order status change feed.

Admin status writes publish an event here; websocket consumers subscribe and
get a handle they must release when they go away.
"""
import logging
import threading
from typing import Callable, Dict, Iterable, List, Optional

logger = logging.getLogger(__name__)


class Subscription:
    def __init__(self, feed: "OrderStatusFeed", callback: Callable[[dict], None]):
        self._feed = feed
        self.callback = callback
        self.active = True

    def unsubscribe(self):
        if self.active:
            self.active = False
            self._feed._discard(self)

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.unsubscribe()


class OrderStatusFeed:
    def __init__(self):
        self._lock = threading.Lock()
        self._subscribers: List[Subscription] = []

    def subscribe(self, callback: Callable[[dict], None]) -> Subscription:
        sub = Subscription(self, callback)
        with self._lock:
            self._subscribers.append(sub)
        return sub

    def _discard(self, sub: Subscription):
        with self._lock:
            if sub in self._subscribers:
                self._subscribers.remove(sub)

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscribers)

    def publish(self, event: dict):
        with self._lock:
            targets = list(self._subscribers)
        for sub in targets:
            try:
                sub.callback(event)
            except Exception:
                logger.exception("Order status subscriber failed for order %s", event.get("id"))


class OrderBoard:
    """Orders keyed by id, updated in place from feed events."""

    MERGED_FIELDS = ("status", "updated_at")

    def __init__(self, orders: Iterable[dict] = ()):
        self._orders: Dict[int, dict] = {o["id"]: dict(o) for o in orders}

    def apply(self, event: dict) -> Optional[dict]:
        order = self._orders.get(event.get("id"))
        if order is None:
            return None
        for field in self.MERGED_FIELDS:
            if field in event:
                order[field] = event[field]
        return order

    def orders(self) -> List[dict]:
        return list(self._orders.values())


order_feed = OrderStatusFeed()
