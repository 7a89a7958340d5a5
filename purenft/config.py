# config.py
from functools import lru_cache
from pathlib import Path
from dotenv import load_dotenv
import os

load_dotenv(Path(__file__).parent.parent / ".env")


def _optional_float(name: str) -> float | None:
    raw = os.getenv(name, "")
    return float(raw) if raw else None


@lru_cache
def settings():
    return {
        "STORE_URL": os.getenv("STORE_URL", "http://localhost:54321"),
        "STORE_KEY": os.getenv("STORE_KEY", "dev-anon-key"),
        # None → requests waits for the store as long as it takes
        "REQUEST_TIMEOUT": _optional_float("REQUEST_TIMEOUT"),
        "TRANSACTIONS_LIMIT": int(os.getenv("TRANSACTIONS_LIMIT", "10")),
        "REDIRECT_DELAY_SECONDS": float(os.getenv("REDIRECT_DELAY_SECONDS", "1.5")),
        # 0 disables the marketplace auto-refresh
        "REFRESH_SECONDS": int(os.getenv("REFRESH_SECONDS", "60")),
        "CURRENCY": os.getenv("CURRENCY", "ETH"),
        "SUPPORT_CONTACT": os.getenv("SUPPORT_CONTACT", "our support team on Telegram"),
        "LOG_LEVEL": os.getenv("LOG_LEVEL", "INFO"),
        "LOCAL_TZ": os.getenv("LOCAL_TZ", "UTC"),  # e.g. "Europe/Berlin"
    }
