from typing import Dict

from treasury_swaps.configuration.config import settings

BASE_URL: str = settings.COW_API_BASE_URL.rstrip("/")
HTTP_TIMEOUT_SECONDS: float = float(settings.COW_HTTP_TIMEOUT_SECONDS)

# {base}/{network}/api/v1/...
QUOTE_PATH: str = "/{network}/api/v1/quote"
NATIVE_PRICE_PATH: str = "/{network}/api/v1/token/{address}/native_price"
ACCOUNT_ORDERS_PATH: str = "/{network}/api/v1/account/{address}/orders"

# CAIP-2 eip155 reference -> CoW network path segment
COW_NETWORK_NAMES: Dict[str, str] = {
    "1": "mainnet",
}
