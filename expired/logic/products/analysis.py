"""Product expiry analysis helpers (bucket counts, expiring-soon rows)."""
from __future__ import annotations
from datetime import date as _date
from typing import Dict, Iterable, List, Any, Optional

from expired.domain.Product import Product
from expired.domain.Product_Filter import ProductFilter, filter_product
from expired.utilities.config import EXPIRING_SOON_DAYS
from expired.utilities.constants import DATE_FORMAT

__all__ = ["count_by_status", "compute_expiring_soon"]


def count_by_status(products: Iterable[Product], *, today: Optional[_date] = None,
                    window: Optional[int] = None) -> Dict[str, int]:
    """Return the number of products per filter label ("All" counts everything)."""
    window = window if window is not None else EXPIRING_SOON_DAYS
    items = list(products)
    return {
        f.value: sum(1 for p in items if filter_product(p, f, today, window))
        for f in ProductFilter
    }


def compute_expiring_soon(products: Iterable[Product], *, today: Optional[_date] = None,
                          window: Optional[int] = None) -> List[Dict[str, Any]]:
    """Return products expiring in <= window days (including already expired)."""
    expiring_window = window if window is not None else EXPIRING_SOON_DAYS
    today = today or _date.today()
    result: List[Dict[str, Any]] = []
    for product in products:
        days_left = product.days_left(today)
        if days_left is None or days_left > expiring_window:
            continue
        result.append({
            'id': product.id,
            'title': product.title,
            'exp': product.expiry_date.strftime(DATE_FORMAT),
            'days_left': days_left,
        })
    result.sort(key=lambda x: (x['days_left'], x['title']))
    return result
