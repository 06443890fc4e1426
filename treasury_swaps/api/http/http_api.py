from __future__ import annotations

from typing import Any, Dict, List

from fastapi import APIRouter, Depends, Query, Request

from treasury_swaps.api.models import OrderModel, SwapAssetsModel, SwapQuoteModel
from treasury_swaps.core.errors import InternalError, SwapError
from treasury_swaps.core.structures.structures import ChainID
from treasury_swaps.core.swaps.available_swaps import list_available_swaps
from treasury_swaps.core.swaps.quote_aggregator import QuoteAggregator
from treasury_swaps.core.utils.date_utils import utc_now
from treasury_swaps.integrations.covalent.covalent_client import BalanceProvider
from treasury_swaps.integrations.cow.cow_client import QuoteGateway
from treasury_swaps.logging.logger import get_logger

router = APIRouter()
log = get_logger(__name__)


def get_quote_aggregator(request: Request) -> QuoteAggregator:
    return request.app.state.quote_aggregator


def get_quote_gateway(request: Request) -> QuoteGateway:
    return request.app.state.quote_gateway


def get_balance_provider(request: Request) -> BalanceProvider:
    return request.app.state.balance_provider


@router.get("/api/health", tags=["health"])
async def get_health() -> Dict[str, Any]:
    return {"status": "ok", "timestamp": utc_now().isoformat()}


@router.get("/api/swaps/quote", tags=["swaps"], response_model=SwapQuoteModel)
async def get_swap_quote(
        chain_id: str = Query(..., alias="chainId", description="CAIP-2 chain id, e.g. eip155:1."),
        sell_token: str = Query(..., alias="sellToken"),
        buy_token: str = Query(..., alias="buyToken"),
        from_address: str = Query(..., alias="from", description="Treasury address."),
        sell_amount: str = Query(..., alias="sellAmount", description="Pre-fee amount, decimal uint256."),
        aggregator: QuoteAggregator = Depends(get_quote_aggregator),
) -> SwapQuoteModel:
    quote = await aggregator.get_swap_quote(
        ChainID.parse(chain_id),
        sell_token,
        buy_token,
        from_address,
        sell_amount,
    )
    return SwapQuoteModel.from_quote(quote)


@router.get("/api/swaps/assets", tags=["swaps"], response_model=SwapAssetsModel)
async def get_available_swaps(
        chain_id: str = Query(..., alias="chainId"),
        treasury: str = Query(..., description="Treasury address."),
        balance_provider: BalanceProvider = Depends(get_balance_provider),
) -> SwapAssetsModel:
    assets = await list_available_swaps(ChainID.parse(chain_id), treasury, balance_provider)
    return SwapAssetsModel.from_available_swaps(assets)


@router.get("/api/swaps/orders", tags=["swaps"], response_model=List[OrderModel])
async def get_orders(
        chain_id: str = Query(..., alias="chainId"),
        address: str = Query(...),
        gateway: QuoteGateway = Depends(get_quote_gateway),
) -> List[OrderModel]:
    try:
        orders = await gateway.orders(ChainID.parse(chain_id), address)
    except SwapError:
        raise
    except Exception as error:
        log.exception("[HTTP][ORDERS] Listing CoW orders failed: address=%s", address)
        raise InternalError("listing orders") from error
    return [OrderModel.from_order(order) for order in orders]
