"""Public service API."""
from purenft.config import settings

from .api import StoreClient
from .auth import ANONYMOUS, AuthClient, Viewer
from .cache import CachedStore, QueryCache
from .market import MarketService, purchasability_state
from .model import NFT, Transaction, UserProfile
from .wallet import WalletService


def build_store(access_token: str | None = None) -> CachedStore:
    """Row store for one session, configured from ``settings()``."""
    cfg = settings()
    client = StoreClient(
        cfg["STORE_URL"],
        cfg["STORE_KEY"],
        access_token=access_token,
        timeout=cfg["REQUEST_TIMEOUT"],
    )
    return CachedStore(client)


def build_auth() -> AuthClient:
    cfg = settings()
    return AuthClient(cfg["STORE_URL"], cfg["STORE_KEY"], timeout=cfg["REQUEST_TIMEOUT"])


__all__ = [
    "ANONYMOUS",
    "AuthClient",
    "CachedStore",
    "MarketService",
    "NFT",
    "QueryCache",
    "StoreClient",
    "Transaction",
    "UserProfile",
    "Viewer",
    "WalletService",
    "build_auth",
    "build_store",
    "purchasability_state",
]
