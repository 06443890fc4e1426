from treasury_swaps.configuration.config import settings

BASE_URL: str = settings.COVALENT_API_BASE_URL.rstrip("/")
HTTP_TIMEOUT_SECONDS: float = float(settings.COVALENT_HTTP_TIMEOUT_SECONDS)
QUOTE_CURRENCY: str = settings.COVALENT_QUOTE_CURRENCY

HISTORICAL_PRICES_PATH: str = "/v1/pricing/historical_by_addresses_v2/{chain}/{currency}/{address}/"
BALANCES_PATH: str = "/v1/{chain}/address/{address}/balances_v2/"

# Covalent reports price history per calendar day
PRICE_LOOKBACK_DAYS: int = 1

NATIVE_ETHER_CONTRACT_NAME: str = "Ether"
