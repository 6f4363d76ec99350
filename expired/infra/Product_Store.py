"""Product store: the active (non-archived) products, kept in sync with the persistence context."""
import logging
from typing import Any, Callable, List, Optional

from expired.domain.Product import Product
from expired.events.Event_Bus import GLOBAL_EVENT_BUS, PRODUCTS_RELOADED, EventBus
from expired.events.event_helpers import publish_products_reloaded
from expired.infra.Persistence_Context import (
    FetchRequest,
    PersistenceContext,
    PersistenceError,
    SortDescriptor,
)

logger = logging.getLogger(__name__)


class ProductStore:
    def __init__(self, context: PersistenceContext, event_bus: Optional[EventBus] = None):
        self.context = context
        self.products: List[Product] = []
        self.popover_product: Optional[Product] = None
        self.showing_memo_popover = False
        self._event_bus = event_bus or GLOBAL_EVENT_BUS
        self.reload_products()

    # --- Observer helpers -------------------------------------------------
    def subscribe(self, callback: Callable[[str, Any], None]):
        self._event_bus.subscribe(PRODUCTS_RELOADED, callback)
        return self

    def unsubscribe(self, callback: Callable[[str, Any], None]):
        self._event_bus.unsubscribe(PRODUCTS_RELOADED, callback)
        return self

    # --- Loading -----------------------------------------------------------
    def reload_products(self) -> List[Product]:
        self.products = self.fetch_products()
        publish_products_reloaded(self.products, self._event_bus)
        return self.products

    def fetch_products(self) -> List[Product]:
        '''
        Returns non-archived products sorted by expiry date (ascending).
        Errors are logged and degrade to an empty list.
        '''
        try:
            return self.context.fetch(self._fetch_request())
        except PersistenceError as e:
            logger.error("Unresolved error fetching products: %s", e)
        return []

    @staticmethod
    def _fetch_request() -> FetchRequest:
        return FetchRequest(
            predicate=lambda p: p.archived is not True,
            sort_descriptors=[SortDescriptor("expiry_date"), SortDescriptor("title")],
        )

    # --- Saving ------------------------------------------------------------
    def save(self) -> bool:
        '''
        Persists pending changes and reloads. Returns False when there was
        nothing to save or the save failed (failures are only logged).
        '''
        if not self.context.has_changes:
            return False
        try:
            self.context.save()
        except PersistenceError as e:
            logger.error("Unresolved error saving products: %s", e)
            return False
        self.reload_products()
        return True

    # --- Memo popover ------------------------------------------------------
    def show_memo(self, product: Product):
        self.popover_product = product
        self.showing_memo_popover = True
        return self

    def dismiss_memo(self):
        self.popover_product = None
        self.showing_memo_popover = False
        return self
