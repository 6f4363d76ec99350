from typing import Final

DATE_FORMAT: Final[str] = "%d-%m-%Y"
DAYS_BEFORE_EXPIRY: Final[int] = 5
EMPTY_LIST_MESSAGE: Final[str] = "No product found\nPress + to add your first product!"
DELETE_PROMPT: Final[str] = "Are you sure you want to delete this product?"
DELETE_CONFIRM_LABEL: Final[str] = "Yes"
DELETE_CANCEL_LABEL: Final[str] = "Maybe Later"
