"""Event helper utilities.

Quick import:
    from expired.events.event_helpers import (
        publish_products_reloaded, publish_expiring_snapshot,
        PRODUCTS_RELOADED, PRODUCTS_EXPIRING_SNAPSHOT
    )
"""
from __future__ import annotations
from typing import Iterable, Optional, Sequence
from .Event_Bus import (
    EventBus, GLOBAL_EVENT_BUS,
    PRODUCTS_RELOADED, PRODUCTS_EXPIRING_SNAPSHOT
)

__all__ = [
    'publish_products_reloaded', 'publish_expiring_snapshot',
    'PRODUCTS_RELOADED', 'PRODUCTS_EXPIRING_SNAPSHOT'
]


def publish_products_reloaded(products: Sequence, bus: Optional[EventBus] = None):
    """Publish a products.reloaded event with the freshly fetched list."""
    (bus or GLOBAL_EVENT_BUS).publish(PRODUCTS_RELOADED, {
        'count': len(products),
        'products': list(products)
    })


def publish_expiring_snapshot(items: Iterable[dict], bus: Optional[EventBus] = None):
    """Publish a snapshot of products that are expired or will expire soon.

    Payload structure:
        {
          'count': <int>,
          'items': [ { id, title, exp, days_left }, ... ]
        }
    """
    items_list = list(items) if not isinstance(items, list) else items
    (bus or GLOBAL_EVENT_BUS).publish(PRODUCTS_EXPIRING_SNAPSHOT, {
        'count': len(items_list),
        'items': items_list
    })
