"""Product list view state: selected filter, filtered products and the delete confirmation flow."""
from __future__ import annotations
import logging
from datetime import date as _date
from typing import Any, Dict, Iterable, List, Optional, Set

from expired.domain.Product import Product
from expired.domain.Product_Filter import ProductFilter, filter_products
from expired.infra.Product_Store import ProductStore
from expired.utilities.config import EXPIRING_SOON_DAYS
from expired.utilities.constants import (
    DATE_FORMAT,
    DELETE_CANCEL_LABEL,
    DELETE_CONFIRM_LABEL,
    DELETE_PROMPT,
    EMPTY_LIST_MESSAGE,
)

logger = logging.getLogger(__name__)


class ProductListView:
    def __init__(self, store: ProductStore, window: Optional[int] = None):
        self.store = store
        self.window = window if window is not None else EXPIRING_SOON_DAYS
        self.selected_filter = ProductFilter.ALL
        self.showing_delete_alert = False
        self.delete_index_set: Optional[Set[int]] = None
        self.delete_targets: List[Product] = []

    def select_filter(self, value) -> ProductFilter:
        self.selected_filter = ProductFilter.parse(value)
        return self.selected_filter

    @property
    def filtered_products(self) -> List[Product]:
        return filter_products(self.store.products, self.selected_filter, window=self.window)

    @property
    def is_empty(self) -> bool:
        return not self.filtered_products

    @property
    def empty_message(self) -> Optional[str]:
        return EMPTY_LIST_MESSAGE if self.is_empty else None

    # --- Delete flow -------------------------------------------------------
    def _resolve(self, index_set: Iterable[int]) -> List[Product]:
        '''Maps positions of the filtered list to products; IndexError if one is out of range.'''
        visible = self.filtered_products
        indexes = sorted(set(index_set))
        for i in indexes:
            if not 0 <= i < len(visible):
                raise IndexError(f"Product index out of range: {i}")
        return [visible[i] for i in indexes]

    def request_delete(self, index_set: Iterable[int]):
        '''
        Captures the index set and the products it points at, then shows the
        confirmation prompt. Confirming deletes those products even if the
        filter or the list changes in between.
        '''
        targets = self._resolve(index_set)
        self.delete_index_set = set(index_set)
        self.delete_targets = targets
        self.showing_delete_alert = True
        return self

    def confirm_delete(self) -> List[Product]:
        '''Deletes the captured products; does nothing when no index set was captured.'''
        deleted: List[Product] = []
        try:
            if self.delete_index_set is not None:
                deleted = self._delete(self.delete_targets)
        finally:
            self.cancel_delete()
        return deleted

    def cancel_delete(self):
        self.delete_index_set = None
        self.delete_targets = []
        self.showing_delete_alert = False
        return self

    def delete_products(self, index_set: Iterable[int]) -> List[Product]:
        '''
        Deletes the products at the given positions of the filtered list,
        then saves through the store. Raises IndexError before deleting
        anything if an index is out of range.
        '''
        return self._delete(self._resolve(index_set))

    def _delete(self, targets: List[Product]) -> List[Product]:
        # Products removed since the prompt was shown are skipped
        present = [p for p in targets if self.store.context.get(p.id) is not None]
        for product in present:
            self.store.context.delete(product)
        self.store.save()
        logger.info("Deleted %d product(s) from the %s list", len(present), self.selected_filter.value)
        return present

    # --- Serialization -----------------------------------------------------
    def product_row(self, product: Product, today: Optional[_date] = None) -> Dict[str, Any]:
        today = today or _date.today()
        return {
            'id': product.id,
            'title': product.title,
            'expiry_date': product.expiry_date.strftime(DATE_FORMAT) if product.expiry_date else "",
            'memo': product.memo,
            'archived': product.archived,
            'days_left': product.days_left(today),
            'is_expired': product.is_expired(today),
            'is_expiring_soon': product.is_expiring_soon(today, self.window),
            'is_good': product.is_good(today, self.window),
        }

    def snapshot(self) -> Dict[str, Any]:
        today = _date.today()
        products = self.filtered_products
        snapshot: Dict[str, Any] = {
            'filter': self.selected_filter.value,
            'filters': ProductFilter.labels(),
            'count': len(products),
            'products': [self.product_row(p, today) for p in products],
            'empty_message': EMPTY_LIST_MESSAGE if not products else None,
            'delete_alert': None,
        }
        if self.showing_delete_alert:
            snapshot['delete_alert'] = {
                'message': DELETE_PROMPT,
                'indexes': sorted(self.delete_index_set or []),
                'products': [p.id for p in self.delete_targets],
                'actions': [DELETE_CANCEL_LABEL, DELETE_CONFIRM_LABEL],
            }
        return snapshot
