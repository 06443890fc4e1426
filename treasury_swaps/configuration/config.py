from __future__ import annotations

import os


def _as_bool(value: str | None, default: bool = False) -> bool:
    """Parse a truthy/falsey string into a boolean."""
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "y", "on"}


class Settings:
    # API
    API_HOST: str = os.getenv("API_HOST", "0.0.0.0")
    API_PORT: int = int(os.getenv("API_PORT", "8000"))
    CORS_ORIGINS: str = os.getenv("CORS_ORIGINS", "http://localhost:3000,http://127.0.0.1:3000")

    # Debug / logging
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "WARNING").upper()
    LOG_LEVEL_TREASURY_SWAPS: str = os.getenv("LOG_LEVEL_TREASURY_SWAPS", "INFO").upper()
    LOG_LEVEL_LIB_HTTPX: str = os.getenv("LOG_LEVEL_LIB_HTTPX", "WARNING").upper()
    LOG_LEVEL_LIB_HTTPCORE: str = os.getenv("LOG_LEVEL_LIB_HTTPCORE", "WARNING").upper()
    LOG_LEVEL_LIB_ASYNCIO: str = os.getenv("LOG_LEVEL_LIB_ASYNCIO", "WARNING").upper()
    LOG_LEVEL_LIB_WEB3: str = os.getenv("LOG_LEVEL_LIB_WEB3", "WARNING").upper()
    NO_COLOR: bool = _as_bool(os.getenv("NO_COLOR"), False)

    # CoW Protocol
    COW_API_BASE_URL: str = os.getenv("COW_API_BASE_URL", "https://api.cow.fi")
    COW_HTTP_TIMEOUT_SECONDS: float = float(os.getenv("COW_HTTP_TIMEOUT_SECONDS", "12"))

    # Covalent
    COVALENT_API_BASE_URL: str = os.getenv("COVALENT_API_BASE_URL", "https://api.covalenthq.com")
    COVALENT_API_KEY: str = os.getenv("COVALENT_API_KEY", "")
    COVALENT_QUOTE_CURRENCY: str = os.getenv("COVALENT_QUOTE_CURRENCY", "USD").upper()
    COVALENT_HTTP_TIMEOUT_SECONDS: float = float(os.getenv("COVALENT_HTTP_TIMEOUT_SECONDS", "15"))

    # Swap quotes
    SWAP_QUOTE_CONCURRENT_LOOKUPS: bool = _as_bool(os.getenv("SWAP_QUOTE_CONCURRENT_LOOKUPS"), True)


settings = Settings()
