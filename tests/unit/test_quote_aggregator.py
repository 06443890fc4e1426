"""Tests for QuoteAggregator

Coverage:
- USDC -> WETH happy path
- Buy token / chain / input eligibility (no external calls)
- SellAmountDoesNotCoverFee propagation, sequential and concurrent
- Internal error wrapping (gateway, oracle, malformed amounts)
- Absent oracle price
"""

import asyncio
from datetime import datetime, timezone

import pytest

from treasury_swaps.core.errors import InternalError, InvalidArgumentError, QuotingError, QuotingErrorKind
from treasury_swaps.core.structures.structures import ChainID, SwapQuote
from treasury_swaps.core.swaps.quote_aggregator import QuoteAggregator
from treasury_swaps.integrations.covalent.covalent_client import CovalentApiError
from treasury_swaps.integrations.covalent.covalent_structures import CovalentPricePoint, TokenPriceHistory
from treasury_swaps.integrations.cow.cow_helpers import CowApiError
from treasury_swaps.integrations.cow.cow_structures import Quote, QuoteResponse

from token_addresses import TREASURY, UNI, USDC, WETH

pytestmark = pytest.mark.asyncio

FIXED_NOW = datetime(2023, 11, 14, 20, 0, 0, tzinfo=timezone.utc)


def _quote_response(**overrides) -> QuoteResponse:
    fields = {
        "sellToken": USDC,
        "buyToken": WETH,
        "sellAmount": "500000000",
        "buyAmount": "250000000000000000",
        "validTo": 1700000000,
        "feeAmount": "10000",
    }
    fields.update(overrides)
    return QuoteResponse(quote=Quote(**fields))


# =============================================================================
# FIXTURES
# =============================================================================


@pytest.fixture(params=[True, False], ids=["concurrent", "sequential"])
def aggregator(request, fake_cow, fake_covalent) -> QuoteAggregator:
    return QuoteAggregator(fake_cow, fake_covalent, concurrent_lookups=request.param, clock=lambda: FIXED_NOW)


@pytest.fixture
def sequential_aggregator(fake_cow, fake_covalent) -> QuoteAggregator:
    return QuoteAggregator(fake_cow, fake_covalent, concurrent_lookups=False, clock=lambda: FIXED_NOW)


# =============================================================================
# HAPPY PATH
# =============================================================================


async def test_usdc_to_weth_quote(aggregator, mainnet):
    quote = await aggregator.get_swap_quote(mainnet, USDC, WETH, TREASURY, "500000000")

    assert quote == SwapQuote(
        buy_amount=250000000000000000,
        sell_amount=500000000,
        fee_amount=10000,
        buy_token_quote_rate=1800.50,
        valid_to=datetime(2023, 11, 14, 22, 13, 20, tzinfo=timezone.utc),
    )


async def test_quote_request_is_a_sell_order_from_the_treasury(aggregator, mainnet, fake_cow):
    await aggregator.get_swap_quote(mainnet, USDC.lower(), WETH.lower(), TREASURY, 500000000)

    assert len(fake_cow.quote_calls) == 1
    chain_id, request = fake_cow.quote_calls[0]
    assert chain_id == mainnet
    assert request.kind == "sell"
    assert request.sell_token == USDC
    assert request.buy_token == WETH
    assert request.sell_amount_before_fee == "500000000"
    assert request.from_address.lower() == TREASURY
    assert request.to_payload()["from"] == request.from_address


async def test_oracle_is_asked_for_the_buy_token_now(aggregator, mainnet, fake_covalent):
    await aggregator.get_swap_quote(mainnet, USDC, WETH, TREASURY, "500000000")

    assert fake_covalent.token_price_calls == [("1", WETH, FIXED_NOW)]


async def test_amounts_wider_than_64_bits_are_exact(mainnet, fake_cow, fake_covalent):
    huge = str(2 ** 200 + 7)
    fake_cow.quote_response = _quote_response(buyAmount=huge)
    aggregator = QuoteAggregator(fake_cow, fake_covalent)

    quote = await aggregator.get_swap_quote(mainnet, USDC, WETH, TREASURY, "500000000")

    assert quote.buy_amount == 2 ** 200 + 7


# =============================================================================
# ABSENT PRICE
# =============================================================================


async def test_missing_price_history_leaves_rate_absent(aggregator, mainnet, fake_covalent):
    fake_covalent.price_history = None

    quote = await aggregator.get_swap_quote(mainnet, USDC, WETH, TREASURY, "500000000")

    assert quote.buy_token_quote_rate is None
    assert quote.buy_amount == 250000000000000000
    assert quote.sell_amount == 500000000
    assert quote.fee_amount == 10000


async def test_history_without_prices_leaves_rate_absent(aggregator, mainnet, fake_covalent):
    fake_covalent.price_history = TokenPriceHistory(
        contract_address=WETH,
        contract_ticker_symbol="WETH",
        quote_currency="USD",
        prices=[CovalentPricePoint(date="2023-11-14", price=None)],
    )

    quote = await aggregator.get_swap_quote(mainnet, USDC, WETH, TREASURY, "500000000")

    assert quote.buy_token_quote_rate is None


# =============================================================================
# ELIGIBILITY (no external calls)
# =============================================================================


async def test_unregistered_buy_token_is_rejected_without_calls(aggregator, mainnet, fake_cow, fake_covalent):
    with pytest.raises(InvalidArgumentError, match="buy token not available"):
        await aggregator.get_swap_quote(mainnet, USDC, UNI, TREASURY, "500000000")

    assert fake_cow.quote_calls == []
    assert fake_covalent.token_price_calls == []


@pytest.mark.parametrize("chain_id", [ChainID("eip155", "137"), ChainID("eip155", "5"), ChainID("solana", "mainnet")])
async def test_unsupported_chain_is_rejected_without_calls(aggregator, chain_id, fake_cow, fake_covalent):
    with pytest.raises(InvalidArgumentError):
        await aggregator.get_swap_quote(chain_id, USDC, WETH, TREASURY, "500000000")

    assert fake_cow.quote_calls == []
    assert fake_covalent.token_price_calls == []


@pytest.mark.parametrize(
    "sell_token, from_address, sell_amount",
    [
        ("0x1234", TREASURY, "500000000"),
        (USDC, "treasury", "500000000"),
        (USDC, TREASURY, "-1"),
        (USDC, TREASURY, "5.5"),
        (USDC, TREASURY, str(2 ** 256)),
    ],
)
async def test_malformed_caller_input_is_rejected_without_calls(
        aggregator, mainnet, fake_cow, fake_covalent, sell_token, from_address, sell_amount
):
    with pytest.raises(InvalidArgumentError):
        await aggregator.get_swap_quote(mainnet, sell_token, WETH, from_address, sell_amount)

    assert fake_cow.quote_calls == []
    assert fake_covalent.token_price_calls == []


# =============================================================================
# QUOTING FAILURES
# =============================================================================


async def test_sell_amount_not_covering_fee_propagates_unchanged(aggregator, mainnet, fake_cow):
    fake_cow.set_quote_error("SellAmountDoesNotCoverFee", "sell amount does not cover fee")

    with pytest.raises(QuotingError) as excinfo:
        await aggregator.get_swap_quote(mainnet, USDC, WETH, TREASURY, "1")

    assert excinfo.value.kind is QuotingErrorKind.SELL_AMOUNT_DOES_NOT_COVER_FEE
    assert str(excinfo.value) == "SellAmountDoesNotCoverFee"


async def test_sequential_quote_failure_never_consults_the_oracle(sequential_aggregator, mainnet, fake_cow, fake_covalent):
    fake_cow.set_quote_error("SellAmountDoesNotCoverFee")

    with pytest.raises(QuotingError):
        await sequential_aggregator.get_swap_quote(mainnet, USDC, WETH, TREASURY, "1")

    assert fake_covalent.token_price_calls == []


async def test_concurrent_quote_failure_wins_over_oracle_failure(mainnet, fake_cow, fake_covalent):
    fake_cow.set_quote_error("SellAmountDoesNotCoverFee")
    fake_covalent.set_price_exception(CovalentApiError("down"))
    aggregator = QuoteAggregator(fake_cow, fake_covalent, concurrent_lookups=True)

    with pytest.raises(QuotingError):
        await aggregator.get_swap_quote(mainnet, USDC, WETH, TREASURY, "1")


async def test_concurrent_quote_failure_cancels_a_slow_price_lookup(mainnet, fake_cow):
    class SlowOracle:
        cancelled = False

        async def token_price(self, chain_reference, token_address, as_of):
            try:
                await asyncio.sleep(10)
            except asyncio.CancelledError:
                SlowOracle.cancelled = True
                raise

    async def failing_quote(chain_id, request):
        await asyncio.sleep(0.01)
        raise CowApiError("boom")

    fake_cow.quote = failing_quote
    aggregator = QuoteAggregator(fake_cow, SlowOracle(), concurrent_lookups=True)

    with pytest.raises(InternalError, match="getting swap quote"):
        await aggregator.get_swap_quote(mainnet, USDC, WETH, TREASURY, "500000000")

    assert SlowOracle.cancelled is True


async def test_other_quote_error_types_become_internal(aggregator, mainnet, fake_cow):
    fake_cow.set_quote_error("NoLiquidity", "no route found")

    with pytest.raises(InternalError) as excinfo:
        await aggregator.get_swap_quote(mainnet, USDC, WETH, TREASURY, "500000000")

    assert str(excinfo.value) == "getting swap quote"
    assert isinstance(excinfo.value.__cause__, CowApiError)
    assert excinfo.value.__cause__.error_type == "NoLiquidity"


async def test_gateway_transport_failure_becomes_internal(aggregator, mainnet, fake_cow):
    fake_cow.set_quote_exception(CowApiError("POST failed"))

    with pytest.raises(InternalError, match="getting swap quote"):
        await aggregator.get_swap_quote(mainnet, USDC, WETH, TREASURY, "500000000")


# =============================================================================
# ORACLE AND PARSING FAILURES
# =============================================================================


async def test_oracle_failure_becomes_internal(aggregator, mainnet, fake_covalent):
    fake_covalent.set_price_exception(CovalentApiError("HTTP 503"))

    with pytest.raises(InternalError, match="getting buy token price"):
        await aggregator.get_swap_quote(mainnet, USDC, WETH, TREASURY, "500000000")


@pytest.mark.parametrize("field", ["buyAmount", "sellAmount", "feeAmount"])
async def test_malformed_quote_amount_names_the_field(aggregator, mainnet, fake_cow, field):
    fake_cow.quote_response = _quote_response(**{field: "12.5"})

    with pytest.raises(InternalError, match=field):
        await aggregator.get_swap_quote(mainnet, USDC, WETH, TREASURY, "500000000")


async def test_empty_quote_amount_is_not_coerced_to_zero(aggregator, mainnet, fake_cow):
    fake_cow.quote_response = _quote_response(feeAmount="")

    with pytest.raises(InternalError, match="feeAmount"):
        await aggregator.get_swap_quote(mainnet, USDC, WETH, TREASURY, "500000000")
