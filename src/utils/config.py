# runtime settings, read from the environment once at import
import os
from decimal import Decimal
from typing import Optional


def _env_flag(name: str) -> bool:
    return os.getenv(name, "").strip().lower() in {"1", "true", "yes", "on"}


DEBUG = bool(os.getenv("DEBUG"))

DB_PATH = os.getenv("STORE_DB_PATH", "data/store.sqlite")
PREFS_PATH = os.getenv("STORE_PREFS_PATH", "data/prefs.json")
LOG_FILE: Optional[str] = os.getenv("STORE_LOG_FILE") or None

# out-of-band provisioning of the first admin account
ADMIN_EMAIL: Optional[str] = os.getenv("STORE_ADMIN_EMAIL") or None
ADMIN_PASSWORD: Optional[str] = os.getenv("STORE_ADMIN_PASSWORD") or None

# only clear the cart once the order is stored
STRICT_CHECKOUT = _env_flag("STORE_STRICT_CHECKOUT")

TAX_RATE = Decimal("0.20")
MIN_PASSWORD_LENGTH = 6
