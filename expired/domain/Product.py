"""Product domain entity: a tracked perishable item with an expiry date, memo and archived flag."""
from datetime import date, datetime
from typing import Optional
from uuid import uuid4

from expired.utilities.config import EXPIRING_SOON_DAYS
from expired.utilities.constants import DATE_FORMAT


def _as_bool(value) -> bool:
    # Hand-edited files may hold "false" / "0" strings
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return bool(value)


class Product:
    def __init__(self, title: str = "", expiry_date: Optional[date] = None, memo: str = "",
                 archived: bool = False, id: Optional[str] = None):
        self.id = id or uuid4().hex
        self.title = title
        self.expiry_date = expiry_date
        self.memo = memo
        self.archived = archived

    # --- Expiry status -----------------------------------------------------
    def days_left(self, today: Optional[date] = None) -> Optional[int]:
        '''Days until expiry (negative once expired), None without an expiry date.'''
        if self.expiry_date is None:
            return None
        today = today or date.today()
        return (self.expiry_date - today).days

    def is_expired(self, today: Optional[date] = None) -> bool:
        days = self.days_left(today)
        return days is not None and days < 0

    def is_expiring_soon(self, today: Optional[date] = None, window: Optional[int] = None) -> bool:
        window = window if window is not None else EXPIRING_SOON_DAYS
        days = self.days_left(today)
        return days is not None and 0 <= days <= window

    def is_good(self, today: Optional[date] = None, window: Optional[int] = None) -> bool:
        return not self.is_expired(today) and not self.is_expiring_soon(today, window)

    def __str__(self) -> str:
        parts = [self.title]
        if self.expiry_date:
            parts.append(f"Exp: {self.expiry_date.strftime(DATE_FORMAT)}")
        if self.archived:
            parts.append("archived")
        return " - ".join(parts)

    __repr__ = __str__

    @staticmethod
    def from_dict(data):
        '''Creates a Product object from a dictionary. Ignores unknown keys.'''
        d = dict(data) if isinstance(data, dict) else {}
        exp = d.get("expiry_date")
        if isinstance(exp, datetime):
            d["expiry_date"] = exp.date()
        elif exp and not isinstance(exp, date):
            try:
                d["expiry_date"] = datetime.strptime(exp, DATE_FORMAT).date()
            except (TypeError, ValueError):
                d["expiry_date"] = None
        else:
            d["expiry_date"] = exp or None
        allowed = {"id", "title", "expiry_date", "memo", "archived"}
        filtered = {k: v for k, v in d.items() if k in allowed}
        filtered["archived"] = _as_bool(filtered.get("archived", False))
        filtered.setdefault("title", "")
        filtered.setdefault("memo", "")
        return Product(**filtered)

    def to_dict(self):
        '''Converts the Product object to a dictionary for JSON persistence.'''
        exp_val = self.expiry_date.strftime(DATE_FORMAT) if isinstance(self.expiry_date, date) else ""
        return {
            "id": self.id,
            "title": self.title,
            "expiry_date": exp_val,
            "memo": self.memo,
            "archived": self.archived,
        }
