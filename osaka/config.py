# osaka/config.py
import os
import logging
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional

from dotenv import load_dotenv

# Load environment variables (optional for local dev)
load_dotenv()

logger = logging.getLogger(__name__)

DEFAULT_ADMIN_PASSWORD = "osaka2026"


@dataclass(frozen=True)
class Settings:
    store_backend: str = "memory"
    supabase_url: Optional[str] = None
    supabase_key: Optional[str] = None
    admin_password: str = DEFAULT_ADMIN_PASSWORD
    session_secret: str = "osaka-dev-secret"
    log_level: str = "INFO"
    port: int = 8085
    public_base_url: str = "http://localhost:8085/media"


def load_settings() -> Settings:
    backend = os.getenv("OSAKA_STORE_BACKEND", "memory").strip().lower()
    if backend not in {"memory", "supabase"}:
        raise ValueError(f"OSAKA_STORE_BACKEND must be 'memory' or 'supabase', got {backend!r}")

    password = os.getenv("OSAKA_ADMIN_PASSWORD") or DEFAULT_ADMIN_PASSWORD
    if password == DEFAULT_ADMIN_PASSWORD:
        logger.warning("OSAKA_ADMIN_PASSWORD not set, using the built-in default password")

    return Settings(
        store_backend=backend,
        supabase_url=(os.getenv("SUPABASE_URL") or "").rstrip("/") or None,
        supabase_key=os.getenv("SUPABASE_KEY") or None,
        admin_password=password,
        session_secret=os.getenv("OSAKA_SESSION_SECRET", "osaka-dev-secret"),
        log_level=os.getenv("OSAKA_LOG_LEVEL", "INFO").upper(),
        port=int(os.getenv("PORT", 8085)),
        public_base_url=os.getenv("OSAKA_MEDIA_URL", "http://localhost:8085/media"),
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return load_settings()
