"""Expiry bucket filter used by the product list: All / Expired / Expiring Soon / Good."""
from datetime import date
from enum import Enum
from typing import Iterable, List, Optional

from expired.domain.Product import Product


class ProductFilter(Enum):
    ALL = "All"
    EXPIRED = "Expired"
    EXPIRING_SOON = "Expiring Soon"
    GOOD = "Good"

    @classmethod
    def parse(cls, value) -> "ProductFilter":
        '''Accepts a member, its label ("Expiring Soon") or its name ("expiring_soon").'''
        if isinstance(value, cls):
            return value
        text = str(value).strip()
        for member in cls:
            if text.lower() in (member.value.lower(), member.name.lower()):
                return member
        raise ValueError(f"Unknown product filter: {value!r}")

    @classmethod
    def labels(cls) -> List[str]:
        return [member.value for member in cls]


def filter_product(product: Product, selected_filter: ProductFilter,
                   today: Optional[date] = None, window: Optional[int] = None) -> bool:
    if selected_filter is ProductFilter.ALL:
        return True
    if selected_filter is ProductFilter.EXPIRED:
        return product.is_expired(today)
    if selected_filter is ProductFilter.EXPIRING_SOON:
        return product.is_expiring_soon(today, window)
    if selected_filter is ProductFilter.GOOD:
        return product.is_good(today, window)
    raise ValueError(f"Unknown product filter: {selected_filter!r}")


def filter_products(products: Iterable[Product], selected_filter: ProductFilter,
                    today: Optional[date] = None, window: Optional[int] = None) -> List[Product]:
    """Return the products matching ``selected_filter``, keeping their order.

    ``ALL`` returns every product untouched.
    """
    if selected_filter is ProductFilter.ALL:
        return list(products)
    return [p for p in products if filter_product(p, selected_filter, today, window)]
