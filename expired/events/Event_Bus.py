"""Simple Event Bus / Observer implementation for product store updates.

Event names used so far:
  products.reloaded -> payload {"count": int, "products": [Product]}
  products.expiring_snapshot -> payload {"count": int, "items": [dict]}
    (published by GET /api/products/summary for external listeners; nothing
    in this package subscribes to it)

Subscribers are callables taking (event_name, payload).
"""
from __future__ import annotations
import logging
from collections import defaultdict
from typing import Callable, Any, Dict, List

logger = logging.getLogger(__name__)

# --- Event name constants (used across modules) ---
PRODUCTS_RELOADED = "products.reloaded"
PRODUCTS_EXPIRING_SNAPSHOT = "products.expiring_snapshot"


class EventBus:
    def __init__(self):
        self._subscribers: Dict[str, List[Callable[[str, Any], None]]] = defaultdict(list)

    def subscribe(self, event_name: str, callback: Callable[[str, Any], None]):
        if callback not in self._subscribers[event_name]:
            self._subscribers[event_name].append(callback)

    def unsubscribe(self, event_name: str, callback: Callable[[str, Any], None]):
        try:
            self._subscribers[event_name].remove(callback)
        except (ValueError, KeyError):
            pass

    def publish(self, event_name: str, payload: Any):
        for cb in list(self._subscribers.get(event_name, [])):
            try:
                cb(event_name, payload)
            except Exception as e:
                logger.error("Error delivering %s to %r: %s", event_name, cb, e)


# A singleton-like instance (can be imported)
GLOBAL_EVENT_BUS = EventBus()

__all__ = [
    'EventBus', 'GLOBAL_EVENT_BUS',
    'PRODUCTS_RELOADED', 'PRODUCTS_EXPIRING_SNAPSHOT'
]
