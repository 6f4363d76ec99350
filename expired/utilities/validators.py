"""
Input validation schemas using Pydantic for better data integrity.
"""
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from expired.utilities.constants import DATE_FORMAT


def _check_date(v):
    """Accept DD-MM-YYYY (stored format) or ISO YYYY-MM-DD, normalized to DD-MM-YYYY."""
    if v is None:
        return v
    v = v.strip()
    for fmt in (DATE_FORMAT, "%Y-%m-%d"):
        try:
            return datetime.strptime(v, fmt).strftime(DATE_FORMAT)
        except ValueError:
            continue
    raise ValueError('expiry_date must be DD-MM-YYYY or YYYY-MM-DD')


class ProductInput(BaseModel):
    """Schema for adding a product."""
    title: str = Field(..., min_length=1, max_length=200)
    expiry_date: str
    memo: str = Field(default="", max_length=2000)

    @field_validator('title')
    @classmethod
    def strip_title(cls, v):
        """Remove leading/trailing whitespace; reject blank titles."""
        if not v.strip():
            raise ValueError('Product title cannot be empty')
        return v.strip()

    @field_validator('expiry_date')
    @classmethod
    def validate_expiry_date(cls, v):
        return _check_date(v)


class ProductUpdateInput(BaseModel):
    """Schema for editing a product (only the provided fields change)."""
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    expiry_date: Optional[str] = None
    memo: Optional[str] = Field(None, max_length=2000)
    archived: Optional[bool] = None

    @field_validator('title')
    @classmethod
    def strip_title(cls, v):
        if v is not None and not v.strip():
            raise ValueError('Product title cannot be empty')
        return v.strip() if v is not None else v

    @field_validator('expiry_date')
    @classmethod
    def validate_expiry_date(cls, v):
        return _check_date(v)


class FilterInput(BaseModel):
    """Schema for selecting the list filter."""
    filter: str = Field(..., min_length=1)


class DeleteRequestInput(BaseModel):
    """Schema for the swipe-to-delete index set (positions in the filtered list)."""
    indexes: List[int] = Field(..., min_length=1)

    @field_validator('indexes')
    @classmethod
    def validate_indexes(cls, v):
        """Ensure indexes are not negative."""
        if any(i < 0 for i in v):
            raise ValueError('Indexes cannot be negative')
        return v
