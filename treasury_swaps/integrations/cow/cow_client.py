from __future__ import annotations

from typing import List, Optional, Protocol

import httpx
from pydantic import TypeAdapter, ValidationError

from treasury_swaps.core.structures.structures import AccountID, ChainID
from treasury_swaps.integrations.cow.cow_constants import (
    ACCOUNT_ORDERS_PATH,
    BASE_URL,
    HTTP_TIMEOUT_SECONDS,
    NATIVE_PRICE_PATH,
    QUOTE_PATH,
)
from treasury_swaps.integrations.cow.cow_helpers import (
    CowApiError,
    _chain_id_to_network_name,
    _ensure_success,
    _http_request_json,
    _raise_for_quote_error,
    _read_error_payload,
)
from treasury_swaps.integrations.cow.cow_structures import (
    NativePriceResponse,
    Order,
    QuoteRequest,
    QuoteResponse,
)
from treasury_swaps.logging.logger import get_logger

log = get_logger(__name__)

_ORDERS_ADAPTER: TypeAdapter[List[Order]] = TypeAdapter(List[Order])


class QuoteGateway(Protocol):
    """Capability interface over the order-matching protocol."""

    async def quote(self, chain_id: ChainID, request: QuoteRequest) -> QuoteResponse:
        ...

    async def native_price(self, token_id: AccountID) -> NativePriceResponse:
        ...

    async def orders(self, chain_id: ChainID, address: str) -> List[Order]:
        ...


class CowClient:
    """
    CoW Protocol REST client.

    Every call resolves the CoW network name first, so an unsupported chain fails
    with `UnsupportedChainError` before any request is sent. Retries are left to
    the transport.
    """

    def __init__(
            self,
            base_url: Optional[str] = None,
            timeout_seconds: Optional[float] = None,
            transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._base_url = (base_url or BASE_URL).rstrip("/")
        self._timeout = httpx.Timeout(timeout_seconds or HTTP_TIMEOUT_SECONDS, connect=6.0)
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self._timeout, transport=self._transport)

    async def quote(self, chain_id: ChainID, request: QuoteRequest) -> QuoteResponse:
        network = _chain_id_to_network_name(chain_id)
        url = self._base_url + QUOTE_PATH.format(network=network)

        log.debug(
            "[COW][QUOTE][REQUEST] network=%s sell=%s buy=%s amount=%s",
            network,
            request.sell_token,
            request.buy_token,
            request.sell_amount_before_fee,
        )

        async with self._client() as client:
            status_code, body = await _http_request_json(client, "POST", url, request.to_payload())

        error = _read_error_payload(body)
        if error is not None:
            log.info("[COW][QUOTE][REJECTED] network=%s errorType=%s", network, error.error_type)
            _raise_for_quote_error(error)
        _ensure_success(status_code, url, body)

        try:
            response = QuoteResponse.model_validate(body)
        except ValidationError as exc:
            log.warning("[COW][QUOTE][PAYLOAD] Malformed quote payload: %s", exc)
            raise CowApiError("malformed quote payload") from exc

        log.info(
            "[COW][QUOTE][RECEIVE] network=%s buy=%s buyAmount=%s validTo=%s",
            network,
            response.quote.buy_token,
            response.quote.buy_amount,
            response.quote.valid_to,
        )
        return response

    async def native_price(self, token_id: AccountID) -> NativePriceResponse:
        network = _chain_id_to_network_name(token_id.chain_id)
        url = self._base_url + NATIVE_PRICE_PATH.format(network=network, address=token_id.address)

        async with self._client() as client:
            status_code, body = await _http_request_json(client, "GET", url)

        error = _read_error_payload(body)
        if error is not None:
            log.info("[COW][PRICE][REJECTED] token=%s errorType=%s", token_id, error.error_type)
            raise CowApiError(error.description or error.error_type, error.error_type, error.description)
        _ensure_success(status_code, url, body)

        try:
            price = NativePriceResponse.model_validate(body)
        except ValidationError as exc:
            raise CowApiError("malformed native price payload") from exc

        log.debug("[COW][PRICE][RECEIVE] token=%s price=%s", token_id, price.price)
        return price

    async def orders(self, chain_id: ChainID, address: str) -> List[Order]:
        network = _chain_id_to_network_name(chain_id)
        account = AccountID(chain_id=chain_id, address=address)
        url = self._base_url + ACCOUNT_ORDERS_PATH.format(network=network, address=account.address)

        async with self._client() as client:
            status_code, body = await _http_request_json(client, "GET", url)

        if status_code == 404 or body is None:
            return []
        _ensure_success(status_code, url, body)

        try:
            orders = _ORDERS_ADAPTER.validate_python(body)
        except ValidationError as exc:
            raise CowApiError("malformed orders payload") from exc

        log.debug("[COW][ORDERS][RECEIVE] account=%s count=%d", account, len(orders))
        return orders
