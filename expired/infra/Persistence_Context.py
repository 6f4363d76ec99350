"""Object context over the products JSON file (fetch / insert / delete / save).

Rows live in a JSON array on disk. Fetched rows are registered in an identity
map, so repeated fetches hand back the same Product instances and include
pending (unsaved) edits, insertions and deletions.
"""
import json
import logging
import os
import shutil
import tempfile
from collections import Counter
from datetime import date, timedelta
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple
from uuid import NAMESPACE_URL, uuid5

from expired.domain.Product import Product

logger = logging.getLogger(__name__)


class PersistenceError(Exception):
    """Raised when the store file cannot be read or written."""


class SortDescriptor:
    def __init__(self, key: str, ascending: bool = True):
        self.key = key
        self.ascending = ascending

    def __repr__(self) -> str:
        return f"SortDescriptor({self.key!r}, ascending={self.ascending})"


class FetchRequest:
    def __init__(self, predicate: Optional[Callable[[Product], bool]] = None,
                 sort_descriptors: Optional[Sequence[SortDescriptor]] = None):
        self.predicate = predicate
        self.sort_descriptors = list(sort_descriptors or [])


def _apply_sort(products: List[Product], descriptors: Sequence[SortDescriptor]) -> List[Product]:
    # Least significant key first; sort is stable. Missing values go last.
    result = list(products)
    for desc in reversed(descriptors):
        present = [p for p in result if getattr(p, desc.key, None) is not None]
        missing = [p for p in result if getattr(p, desc.key, None) is None]
        present.sort(key=lambda p: getattr(p, desc.key), reverse=not desc.ascending)
        result = present + missing
    return result


def _derived_id(row: dict, seen: Counter) -> str:
    # Rows without an id: stable while the row is unchanged; identical rows are told apart by order
    digest = uuid5(NAMESPACE_URL, json.dumps(row, sort_keys=True, ensure_ascii=False, default=str)).hex
    count = seen[digest]
    seen[digest] += 1
    return digest if count == 0 else f"{digest}-{count}"


class PersistenceContext:
    def __init__(self, store_file: Optional[Path] = None):
        self.store_file = Path(store_file) if store_file is not None else None
        self._memory_rows: List[Any] = []
        self._registered: Dict[str, Product] = {}
        self._snapshots: Dict[str, dict] = {}
        self._inserted: Dict[str, Product] = {}
        self._deleted: Dict[str, Product] = {}

    @classmethod
    def in_memory(cls) -> "PersistenceContext":
        return cls(None)

    # --- Raw rows ----------------------------------------------------------
    def _read_rows(self) -> List[Tuple[Optional[str], Any]]:
        '''
        Returns (id, raw row) pairs in file order without ever writing.
        Rows that are not JSON objects get a None id and are kept untouched.
        '''
        if self.store_file is None:
            raw_rows = [dict(r) if isinstance(r, dict) else r for r in self._memory_rows]
        elif not self.store_file.exists():
            return []
        else:
            try:
                with open(self.store_file, 'r', encoding='utf-8') as f:
                    raw_rows = json.load(f)
            except (OSError, json.JSONDecodeError) as e:
                raise PersistenceError(f"Cannot read {self.store_file}: {e}") from e
            if not isinstance(raw_rows, list):
                raise PersistenceError(f"Invalid store file {self.store_file}: expected a JSON array")
        pairs: List[Tuple[Optional[str], Any]] = []
        seen: Counter = Counter()
        for row in raw_rows:
            if not isinstance(row, dict):
                pairs.append((None, row))
                continue
            pairs.append((row.get('id') or _derived_id(row, seen), row))
        return pairs

    def _write_rows(self, rows: List[Any]) -> None:
        if self.store_file is None:
            self._memory_rows = [dict(r) if isinstance(r, dict) else r for r in rows]
            return
        try:
            self.store_file.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(
                dir=str(self.store_file.parent), prefix=".products_", suffix=".json"
            )
            try:
                with os.fdopen(fd, 'w', encoding='utf-8') as tmp:
                    json.dump(rows, tmp, indent=2, ensure_ascii=False)
                shutil.move(tmp_path, str(self.store_file))
            finally:
                if os.path.exists(tmp_path):
                    os.remove(tmp_path)
        except OSError as e:
            raise PersistenceError(f"Cannot write {self.store_file}: {e}") from e

    def _register(self, pid: str, row: dict) -> Product:
        existing = self._registered.get(pid)
        if existing is not None:
            return existing
        product = Product.from_dict(dict(row, id=pid))
        self._registered[pid] = product
        self._snapshots[pid] = product.to_dict()
        return product

    # --- Queries -----------------------------------------------------------
    def fetch(self, request: Optional[FetchRequest] = None) -> List[Product]:
        '''
        Returns the products matching the request, pending changes included.
        Raises PersistenceError when the store file cannot be read.
        '''
        request = request or FetchRequest()
        products: List[Product] = []
        for pid, row in self._read_rows():
            if pid is None or pid in self._deleted:
                continue
            products.append(self._register(pid, row))
        seen = {p.id for p in products}
        products.extend(p for pid, p in self._inserted.items() if pid not in seen)
        if request.predicate is not None:
            products = [p for p in products if request.predicate(p)]
        return _apply_sort(products, request.sort_descriptors)

    def get(self, product_id: str) -> Optional[Product]:
        matches = self.fetch(FetchRequest(predicate=lambda p: p.id == product_id))
        return matches[0] if matches else None

    # --- Mutations ---------------------------------------------------------
    def insert(self, product: Product) -> Product:
        if product.id in self._deleted:
            del self._deleted[product.id]
            return product
        if product.id not in self._registered:
            self._inserted[product.id] = product
            self._registered[product.id] = product
        return product

    def delete(self, product: Product) -> None:
        if product.id in self._inserted:
            del self._inserted[product.id]
            self._registered.pop(product.id, None)
            return
        self._deleted[product.id] = product

    @property
    def has_changes(self) -> bool:
        if self._inserted or self._deleted:
            return True
        return any(p.to_dict() != self._snapshots.get(pid) for pid, p in self._registered.items())

    def save(self) -> None:
        '''
        Writes pending changes to the store file.
        Unchanged rows are written back as read; on failure raises
        PersistenceError and keeps the pending changes.
        '''
        if not self.has_changes:
            return
        rows_out: List[Any] = []
        written = set()
        for pid, row in self._read_rows():
            if pid is None:
                rows_out.append(row)
                continue
            if pid in self._deleted:
                continue
            product = self._registered.get(pid)
            if product is not None and product.to_dict() != self._snapshots.get(pid):
                rows_out.append(product.to_dict())
            else:
                rows_out.append(row)
            written.add(pid)
        rows_out.extend(p.to_dict() for pid, p in self._inserted.items() if pid not in written)
        self._write_rows(rows_out)

        for pid in self._deleted:
            self._registered.pop(pid, None)
        logger.info("Saved products: %d inserted, %d deleted, %d rows total",
                    len(self._inserted), len(self._deleted), len(rows_out))
        self._inserted.clear()
        self._deleted.clear()
        self._snapshots = {pid: p.to_dict() for pid, p in self._registered.items()}

    def rollback(self) -> None:
        '''Discards pending changes and restores registered products to their saved state.'''
        for pid in self._inserted:
            self._registered.pop(pid, None)
        self._inserted.clear()
        self._deleted.clear()
        for pid, product in self._registered.items():
            saved = Product.from_dict(self._snapshots[pid])
            product.title = saved.title
            product.expiry_date = saved.expiry_date
            product.memo = saved.memo
            product.archived = saved.archived


def preview_context() -> PersistenceContext:
    """In-memory context seeded with a few sample products (demos and tests)."""
    today = date.today()
    context = PersistenceContext.in_memory()
    context.insert(Product("Milk", today - timedelta(days=2), "Top shelf"))
    context.insert(Product("Yogurt", today + timedelta(days=2), "Strawberry"))
    context.insert(Product("Cheddar", today + timedelta(days=30), "Opened"))
    context.insert(Product("Bread", today + timedelta(days=1), "Finished", archived=True))
    context.save()
    return context
