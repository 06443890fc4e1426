from __future__ import annotations

from datetime import datetime, timedelta
from typing import Dict, List, Mapping, Optional, Protocol

import httpx

from treasury_swaps.configuration.config import settings
from treasury_swaps.core.structures.structures import AccountID, TreasuryBalance
from treasury_swaps.core.utils.dict_utils import JSON, _read_path
from treasury_swaps.integrations.covalent.covalent_constants import (
    BALANCES_PATH,
    BASE_URL,
    HISTORICAL_PRICES_PATH,
    HTTP_TIMEOUT_SECONDS,
    PRICE_LOOKBACK_DAYS,
    QUOTE_CURRENCY,
)
from treasury_swaps.integrations.covalent.covalent_structures import TokenPriceHistory, balance_from_json
from treasury_swaps.logging.logger import get_logger

log = get_logger(__name__)


class CovalentApiError(Exception):
    """Transport failure, non-2xx status or an `error: true` envelope from Covalent."""


class PriceOracle(Protocol):
    async def token_price(self, chain_reference: str, token_address: str, as_of: datetime) -> Optional[TokenPriceHistory]:
        ...


class BalanceProvider(Protocol):
    async def balances(self, account_id: AccountID) -> List[TreasuryBalance]:
        ...


class CovalentClient:
    """Covalent REST client: historical token prices and wallet balances."""

    def __init__(
            self,
            api_key: Optional[str] = None,
            base_url: Optional[str] = None,
            quote_currency: Optional[str] = None,
            timeout_seconds: Optional[float] = None,
            transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._api_key = api_key if api_key is not None else settings.COVALENT_API_KEY
        self._base_url = (base_url or BASE_URL).rstrip("/")
        self._quote_currency = (quote_currency or QUOTE_CURRENCY).upper()
        self._timeout = httpx.Timeout(timeout_seconds or HTTP_TIMEOUT_SECONDS, connect=6.0)
        self._transport = transport

    async def _get_data(self, url: str, params: Optional[Mapping[str, str]] = None) -> JSON:
        """GET a Covalent endpoint and return its `data` member."""
        auth = httpx.BasicAuth(self._api_key, "") if self._api_key else None
        try:
            async with httpx.AsyncClient(timeout=self._timeout, auth=auth, transport=self._transport) as client:
                response = await client.get(url, params=params)
                response.raise_for_status()
                payload: JSON = response.json()
        except httpx.HTTPStatusError as exc:
            log.warning(
                "[COVALENT][HTTP] GET fails: url=%s status=%s body=%s",
                url,
                exc.response.status_code,
                exc.response.text[:256],
            )
            raise CovalentApiError(f"GET {url} returned HTTP {exc.response.status_code}") from exc
        except httpx.RequestError as exc:
            log.warning("[COVALENT][HTTP] GET request error: url=%s error=%s", url, str(exc))
            raise CovalentApiError(f"GET {url} failed") from exc
        except ValueError as exc:
            raise CovalentApiError(f"GET {url} returned a non-JSON body") from exc

        if _read_path(payload, ("error",)) is True:
            message = _read_path(payload, ("error_message",))
            log.warning("[COVALENT][HTTP] Error envelope: url=%s message=%s", url, message)
            raise CovalentApiError(str(message or "covalent error"))
        return _read_path(payload, ("data",))

    async def token_price(self, chain_reference: str, token_address: str, as_of: datetime) -> Optional[TokenPriceHistory]:
        """
        Daily price history of `token_address` up to `as_of`.

        Returns:
            The history for the token, or None when Covalent has no data for it.
        """
        url = self._base_url + HISTORICAL_PRICES_PATH.format(
            chain=chain_reference,
            currency=self._quote_currency,
            address=token_address,
        )
        params: Dict[str, str] = {
            "from": (as_of - timedelta(days=PRICE_LOOKBACK_DAYS)).date().isoformat(),
            "to": as_of.date().isoformat(),
        }
        data = await self._get_data(url, params)

        first = _read_path(data, (0,))
        if not isinstance(first, dict):
            log.debug("[COVALENT][PRICE] No price data: chain=%s token=%s", chain_reference, token_address)
            return None

        history = TokenPriceHistory.from_json(first, quote_currency=self._quote_currency)
        log.debug(
            "[COVALENT][PRICE][RECEIVE] chain=%s token=%s points=%d",
            chain_reference,
            token_address,
            len(history.prices),
        )
        return history

    async def balances(self, account_id: AccountID) -> List[TreasuryBalance]:
        url = self._base_url + BALANCES_PATH.format(chain=account_id.chain_id.reference, address=account_id.address)
        data = await self._get_data(url, {"quote-currency": self._quote_currency})

        items = _read_path(data, ("items",))
        if not isinstance(items, list):
            return []
        balances = [balance_from_json(item) for item in items if isinstance(item, dict)]
        log.info("[COVALENT][BALANCES] account=%s items=%d", account_id, len(balances))
        return balances
