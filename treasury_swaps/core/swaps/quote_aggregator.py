from __future__ import annotations

import asyncio
from datetime import datetime
from typing import Callable, Optional, Union

from treasury_swaps.configuration.config import settings
from treasury_swaps.core.errors import InternalError, InvalidArgumentError, QuotingError
from treasury_swaps.core.structures.structures import AccountID, ChainID, SwapQuote, SwapToken
from treasury_swaps.core.token_registry import TokenRegistry, swap_token_registry
from treasury_swaps.core.utils.date_utils import epoch_seconds_to_utc_datetime, utc_now
from treasury_swaps.core.utils.format_utils import _format, _tail
from treasury_swaps.core.utils.uint_utils import parse_uint256
from treasury_swaps.integrations.covalent.covalent_client import PriceOracle
from treasury_swaps.integrations.covalent.covalent_structures import TokenPriceHistory
from treasury_swaps.integrations.cow.cow_client import QuoteGateway
from treasury_swaps.integrations.cow.cow_helpers import is_supported_chain
from treasury_swaps.integrations.cow.cow_structures import QuoteRequest, QuoteResponse
from treasury_swaps.logging.logger import get_logger

log = get_logger(__name__)


def _parse_quote_amount(raw: str, field: str) -> int:
    try:
        return parse_uint256(raw, field)
    except ValueError as error:
        log.error("[SWAP][QUOTE][PARSE] Malformed %s in CoW quote: %r", field, raw)
        raise InternalError(f"parsing quote {field}") from error


class QuoteAggregator:
    """
    Builds a `SwapQuote` for a treasury from a CoW Protocol quote and a Covalent buy-token price.

    Only the buy token is checked against the registry. The sell token is
    trusted to have been vetted by the caller (see `list_available_swaps`).

    With concurrent lookups the quote and the price are fetched together, but
    the quote outcome is always awaited first: a quote failure cancels the price
    lookup and wins over anything the price lookup would have reported.
    """

    def __init__(
            self,
            gateway: QuoteGateway,
            oracle: PriceOracle,
            registry: TokenRegistry = swap_token_registry,
            concurrent_lookups: Optional[bool] = None,
            clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._gateway = gateway
        self._oracle = oracle
        self._registry = registry
        self._concurrent_lookups = (
            settings.SWAP_QUOTE_CONCURRENT_LOOKUPS if concurrent_lookups is None else concurrent_lookups
        )
        self._clock = clock

    def _resolve_buy_token(self, chain_id: ChainID, buy_token_address: str) -> SwapToken:
        if not is_supported_chain(chain_id):
            raise InvalidArgumentError(f"swaps are not available on chain {chain_id}")
        buy_token = self._registry.lookup(AccountID(chain_id=chain_id, address=buy_token_address))
        if buy_token is None:
            log.info("[SWAP][QUOTE] Buy token not available: chain=%s token=%s", chain_id, buy_token_address)
            raise InvalidArgumentError("buy token not available")
        return buy_token

    async def _request_quote(self, chain_id: ChainID, request: QuoteRequest) -> QuoteResponse:
        try:
            return await self._gateway.quote(chain_id, request)
        except QuotingError as error:
            log.info("[SWAP][QUOTE] CoW rejected the quote: kind=%s", error.kind.value)
            raise
        except Exception as error:
            log.exception("[SWAP][QUOTE] Getting CoW quote failed")
            raise InternalError("getting swap quote") from error

    async def _lookup_buy_token_price(self, buy_token: SwapToken) -> Optional[TokenPriceHistory]:
        try:
            return await self._oracle.token_price(buy_token.id.chain_id.reference, buy_token.id.address, self._clock())
        except Exception as error:
            log.exception("[SWAP][PRICE] Getting buy token price failed: token=%s", buy_token.symbol)
            raise InternalError("getting buy token price") from error

    async def _fetch_quote_and_price(
            self,
            chain_id: ChainID,
            request: QuoteRequest,
            buy_token: SwapToken,
    ) -> tuple[QuoteResponse, Optional[TokenPriceHistory]]:
        if not self._concurrent_lookups:
            quote_response = await self._request_quote(chain_id, request)
            return quote_response, await self._lookup_buy_token_price(buy_token)

        quote_task = asyncio.ensure_future(self._request_quote(chain_id, request))
        price_task = asyncio.ensure_future(self._lookup_buy_token_price(buy_token))
        try:
            quote_response = await quote_task
        except BaseException:
            price_task.cancel()
            await asyncio.gather(price_task, return_exceptions=True)
            raise
        return quote_response, await price_task

    async def get_swap_quote(
            self,
            chain_id: ChainID,
            sell_token_address: str,
            buy_token_address: str,
            from_address: str,
            sell_amount: Union[str, int],
    ) -> SwapQuote:
        """
        Quote selling `sell_amount` (pre-fee, smallest unit) of the sell token for the buy token.

        Raises:
            InvalidArgumentError: unsupported chain, unknown buy token or malformed input.
            QuotingError: the sell amount does not cover the CoW fee.
            InternalError: any gateway, oracle or parsing failure.
        """
        buy_token = self._resolve_buy_token(chain_id, buy_token_address)
        sell_token = AccountID(chain_id=chain_id, address=sell_token_address)
        treasury = AccountID(chain_id=chain_id, address=from_address)
        try:
            sell_amount_before_fee = parse_uint256(str(sell_amount), "sellAmount")
        except ValueError as error:
            raise InvalidArgumentError(str(error)) from error

        request = QuoteRequest(
            sell_token=sell_token.address,
            buy_token=buy_token.id.address,
            from_address=treasury.address,
            sell_amount_before_fee=str(sell_amount_before_fee),
        )
        log.debug(
            "[SWAP][QUOTE][REQUEST] chain=%s sell=…%s buy=%s amount=%s",
            chain_id,
            _tail(sell_token.address),
            buy_token.symbol,
            sell_amount_before_fee,
        )

        quote_response, price_history = await self._fetch_quote_and_price(chain_id, request, buy_token)
        quote = quote_response.quote

        buy_token_quote_rate = price_history.last_price() if price_history is not None else None
        swap_quote = SwapQuote(
            buy_amount=_parse_quote_amount(quote.buy_amount, "buyAmount"),
            sell_amount=_parse_quote_amount(quote.sell_amount, "sellAmount"),
            fee_amount=_parse_quote_amount(quote.fee_amount, "feeAmount"),
            buy_token_quote_rate=buy_token_quote_rate,
            valid_to=epoch_seconds_to_utc_datetime(quote.valid_to),
        )

        log.info(
            "[SWAP][QUOTE][READY] buy=%s buyAmount=%s fee=%s rate=%s validTo=%s",
            buy_token.symbol,
            swap_quote.buy_amount,
            swap_quote.fee_amount,
            _format(buy_token_quote_rate),
            swap_quote.valid_to.isoformat(),
        )
        return swap_quote
