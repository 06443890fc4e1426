from __future__ import annotations

import pytest

from treasury_swaps.core.structures.structures import ChainID
from treasury_swaps.integrations.covalent.covalent_fake_client import FakeCovalentClient
from treasury_swaps.integrations.covalent.covalent_structures import CovalentPricePoint, TokenPriceHistory
from treasury_swaps.integrations.cow.cow_fake_client import FakeCowClient

from token_addresses import WETH


@pytest.fixture
def mainnet() -> ChainID:
    return ChainID("eip155", "1")


@pytest.fixture
def weth_price_history() -> TokenPriceHistory:
    return TokenPriceHistory(
        contract_address=WETH.lower(),
        contract_ticker_symbol="WETH",
        quote_currency="USD",
        prices=[
            CovalentPricePoint(date="2023-11-13", price=1750.25),
            CovalentPricePoint(date="2023-11-14", price=1800.50),
        ],
    )


@pytest.fixture
def fake_cow() -> FakeCowClient:
    return FakeCowClient()


@pytest.fixture
def fake_covalent(weth_price_history: TokenPriceHistory) -> FakeCovalentClient:
    return FakeCovalentClient(price_history=weth_price_history)
