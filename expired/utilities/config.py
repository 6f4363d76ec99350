"""Configuration management for the Expired application."""
import os
from typing import Final
from pathlib import Path

from dotenv import load_dotenv

from expired.utilities.constants import DAYS_BEFORE_EXPIRY

# Load environment variables from .env file if it exists
env_path = Path(__file__).parent.parent / '.env'
if env_path.exists():
    load_dotenv(env_path)

# Application Settings
APP_HOST: Final[str] = os.getenv('APP_HOST', '0.0.0.0')
APP_PORT: Final[int] = int(os.getenv('APP_PORT', '8000'))
DEBUG: Final[bool] = os.getenv('DEBUG', 'False').lower() == 'true'
LOG_LEVEL: Final[str] = os.getenv('LOG_LEVEL', 'INFO').upper()

# Expiry buckets
EXPIRING_SOON_DAYS: Final[int] = int(os.getenv('EXPIRING_SOON_DAYS', str(DAYS_BEFORE_EXPIRY)))

# File Paths
BASE_DIR: Final[Path] = Path(__file__).parent.parent
DATA_DIR: Final[Path] = BASE_DIR / 'data'
PRODUCTS_FILE: Final[Path] = Path(os.getenv('PRODUCTS_FILE', str(DATA_DIR / 'products.json'))).resolve()
