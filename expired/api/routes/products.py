import logging
from datetime import datetime
from threading import Lock
from typing import Optional

from fastapi import APIRouter, HTTPException, Query

from expired.domain.Product import Product
from expired.domain.Product_Filter import ProductFilter
from expired.events.event_helpers import publish_expiring_snapshot
from expired.infra.Persistence_Context import PersistenceContext
from expired.infra.Product_Store import ProductStore
from expired.logic.products.analysis import compute_expiring_soon, count_by_status
from expired.logic.products.list_view import ProductListView
from expired.utilities.config import PRODUCTS_FILE
from expired.utilities.constants import DATE_FORMAT
from expired.utilities.validators import (
    DeleteRequestInput,
    FilterInput,
    ProductInput,
    ProductUpdateInput,
)

router = APIRouter(prefix="/api")
logger = logging.getLogger(__name__)

# One store/view per process; sync endpoints run in a thread pool
_lock = Lock()
_list_view: Optional[ProductListView] = None


def get_list_view() -> ProductListView:
    global _list_view
    if _list_view is None:
        store = ProductStore(PersistenceContext(PRODUCTS_FILE))
        _list_view = ProductListView(store)
        logger.info("Product store opened at %s (%d active products)", PRODUCTS_FILE, len(store.products))
    return _list_view


def reset_list_view() -> None:
    """Drop the cached view so the next request reopens the store file."""
    global _list_view
    with _lock:
        _list_view = None


# === Helpers ===
def _parse_date(value: str):
    return datetime.strptime(value, DATE_FORMAT).date()


def _commit(store: ProductStore) -> None:
    if not store.context.has_changes:
        return
    if not store.save():
        store.context.rollback()
        raise HTTPException(status_code=500, detail='Could not save products')


def _get_product(view: ProductListView, product_id: str) -> Product:
    product = view.store.context.get(product_id)
    if product is None:
        raise HTTPException(status_code=404, detail='Product not found')
    return product


def _popover_state(store: ProductStore) -> dict:
    product = store.popover_product
    return {
        "showing": store.showing_memo_popover,
        "title": product.title if product else "",
        "memo": product.memo if product else "",
    }


# === Filters / list ===
@router.get('/filters')
def list_filters():
    return {"filters": ProductFilter.labels()}


@router.get('/products')
def list_products(filter: Optional[str] = Query(default=None, description="Filter label, e.g. 'Expiring Soon'")):
    with _lock:
        view = get_list_view()
        if filter:
            try:
                view.select_filter(filter)
            except ValueError as e:
                raise HTTPException(status_code=400, detail=str(e))
        return view.snapshot()


@router.put('/products/filter')
def select_filter(payload: FilterInput):
    with _lock:
        view = get_list_view()
        try:
            view.select_filter(payload.filter)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        return view.snapshot()


@router.get('/products/summary')
def products_summary():
    with _lock:
        view = get_list_view()
        products = view.store.products
        counts = count_by_status(products, window=view.window)
        expiring = compute_expiring_soon(products, window=view.window)
    publish_expiring_snapshot(expiring)
    return {"counts": counts, "expiring_soon": expiring, "window": view.window}


# === Delete flow (swipe -> confirm) ===
@router.post('/products/delete-request')
def request_delete(payload: DeleteRequestInput):
    with _lock:
        view = get_list_view()
        size = len(view.filtered_products)
        out_of_range = [i for i in payload.indexes if i >= size]
        if out_of_range:
            raise HTTPException(status_code=400, detail=f'Product index out of range: {out_of_range}')
        view.request_delete(payload.indexes)
        return view.snapshot()


@router.post('/products/delete-request/confirm')
def confirm_delete():
    with _lock:
        view = get_list_view()
        deleted = view.confirm_delete()
        if view.store.context.has_changes:
            view.store.context.rollback()
            raise HTTPException(status_code=500, detail='Could not save products')
        snapshot = view.snapshot()
        snapshot["deleted"] = [p.id for p in deleted]
        return snapshot


@router.post('/products/delete-request/cancel')
def cancel_delete():
    with _lock:
        view = get_list_view()
        view.cancel_delete()
        return view.snapshot()


# === Add / edit / archive ===
@router.post('/products')
def add_product(payload: ProductInput):
    with _lock:
        view = get_list_view()
        product = Product(payload.title, _parse_date(payload.expiry_date), payload.memo)
        view.store.context.insert(product)
        _commit(view.store)
        return {"success": True, "product": view.product_row(product)}


@router.get('/products/{product_id}')
def get_product(product_id: str):
    with _lock:
        view = get_list_view()
        return view.product_row(_get_product(view, product_id))


@router.put('/products/{product_id}')
def edit_product(product_id: str, payload: ProductUpdateInput):
    with _lock:
        view = get_list_view()
        product = _get_product(view, product_id)
        changes = payload.model_dump(exclude_none=True)
        if 'expiry_date' in changes:
            changes['expiry_date'] = _parse_date(changes['expiry_date'])
        for key, value in changes.items():
            setattr(product, key, value)
        _commit(view.store)
        return {"success": True, "product": view.product_row(product)}


@router.post('/products/{product_id}/archive')
def archive_product(product_id: str):
    with _lock:
        view = get_list_view()
        product = _get_product(view, product_id)
        product.archived = True
        _commit(view.store)
        return {"success": True, "product": view.product_row(product)}


@router.post('/products/{product_id}/unarchive')
def unarchive_product(product_id: str):
    with _lock:
        view = get_list_view()
        product = _get_product(view, product_id)
        product.archived = False
        _commit(view.store)
        return {"success": True, "product": view.product_row(product)}


# === Memo popover ===
@router.post('/products/{product_id}/memo')
def show_memo(product_id: str):
    with _lock:
        view = get_list_view()
        view.store.show_memo(_get_product(view, product_id))
        return _popover_state(view.store)


@router.get('/popover')
def get_popover():
    with _lock:
        return _popover_state(get_list_view().store)


@router.delete('/popover')
def dismiss_popover():
    with _lock:
        view = get_list_view()
        view.store.dismiss_memo()
        return _popover_state(view.store)
