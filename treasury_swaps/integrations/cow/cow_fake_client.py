from __future__ import annotations

from typing import List, Optional

from treasury_swaps.core.structures.structures import AccountID, ChainID
from treasury_swaps.integrations.cow.cow_helpers import (
    _chain_id_to_network_name,
    _raise_for_quote_error,
)
from treasury_swaps.integrations.cow.cow_structures import (
    CowErrorPayload,
    NativePriceResponse,
    Order,
    Quote,
    QuoteRequest,
    QuoteResponse,
)

DEFAULT_QUOTE_RESPONSE = QuoteResponse(
    quote=Quote(
        sellToken="0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48",
        buyToken="0xC02aaA39b223FE8D0A0e5C4F27eAD9083C756Cc2",
        sellAmount="500000000",
        buyAmount="250000000000000000",
        validTo=1700000000,
        feeAmount="10000",
        kind="sell",
    ),
)


class FakeCowClient:
    """
    Deterministic QuoteGateway double returning canned responses.

    Error payloads go through the same classification as `CowClient`, and every
    call is recorded so tests can assert on call counts.
    """

    def __init__(self, quote_response: QuoteResponse = DEFAULT_QUOTE_RESPONSE) -> None:
        self.quote_response = quote_response
        self.native_price_response = NativePriceResponse()
        self.order_list: List[Order] = []
        self.quote_calls: List[tuple[ChainID, QuoteRequest]] = []
        self.native_price_calls: List[AccountID] = []
        self.orders_calls: List[tuple[ChainID, str]] = []
        self._quote_error: Optional[CowErrorPayload] = None
        self._quote_exception: Optional[Exception] = None

    def set_quote_error(self, error_type: str = "SellAmountDoesNotCoverFee", description: Optional[str] = None) -> None:
        self._quote_error = CowErrorPayload(errorType=error_type, description=description)

    def set_quote_exception(self, exception: Exception) -> None:
        self._quote_exception = exception

    async def quote(self, chain_id: ChainID, request: QuoteRequest) -> QuoteResponse:
        _chain_id_to_network_name(chain_id)
        self.quote_calls.append((chain_id, request))
        if self._quote_exception is not None:
            raise self._quote_exception
        if self._quote_error is not None:
            _raise_for_quote_error(self._quote_error)
        return self.quote_response

    async def native_price(self, token_id: AccountID) -> NativePriceResponse:
        _chain_id_to_network_name(token_id.chain_id)
        self.native_price_calls.append(token_id)
        return self.native_price_response

    async def orders(self, chain_id: ChainID, address: str) -> List[Order]:
        _chain_id_to_network_name(chain_id)
        self.orders_calls.append((chain_id, address))
        return list(self.order_list)
