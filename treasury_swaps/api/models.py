from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from treasury_swaps.core.structures.structures import AvailableSwaps, SwapQuote, SwapToken, TreasuryBalance
from treasury_swaps.integrations.cow.cow_structures import Order


class SwapQuoteModel(BaseModel):
    """Swap quote with uint256 amounts serialized as decimal strings."""
    buyAmount: str = Field(..., description="Buy amount, smallest unit.")
    sellAmount: str = Field(..., description="Sell amount after fee, smallest unit.")
    feeAmount: str = Field(..., description="CoW fee, in sell token smallest unit.")
    buyTokenQuoteRate: Optional[float] = Field(None, description="Last known buy token price; null when unknown.")
    validTo: datetime = Field(..., description="Quote expiry, UTC.")

    @staticmethod
    def from_quote(quote: SwapQuote) -> "SwapQuoteModel":
        return SwapQuoteModel(
            buyAmount=str(quote.buy_amount),
            sellAmount=str(quote.sell_amount),
            feeAmount=str(quote.fee_amount),
            buyTokenQuoteRate=quote.buy_token_quote_rate,
            validTo=quote.valid_to,
        )


class SwapTokenModel(BaseModel):
    id: str
    address: str
    symbol: str
    name: str
    decimals: int
    logo: str

    @staticmethod
    def from_token(token: SwapToken) -> "SwapTokenModel":
        return SwapTokenModel(
            id=str(token.id),
            address=token.address,
            symbol=token.symbol,
            name=token.name,
            decimals=token.decimals,
            logo=token.logo,
        )


class TreasuryBalanceModel(BaseModel):
    contractAddress: str
    contractName: str
    symbol: str
    decimals: int
    balance: str
    quoteRate: Optional[float] = None
    logo: Optional[str] = None

    @staticmethod
    def from_balance(balance: TreasuryBalance) -> "TreasuryBalanceModel":
        return TreasuryBalanceModel(
            contractAddress=balance.contract_address,
            contractName=balance.contract_name,
            symbol=balance.contract_ticker_symbol,
            decimals=balance.contract_decimals,
            balance=str(balance.balance),
            quoteRate=balance.quote_rate,
            logo=balance.logo_url,
        )


class SwapAssetsModel(BaseModel):
    sell: List[TreasuryBalanceModel] = Field(default_factory=list)
    buy: List[SwapTokenModel] = Field(default_factory=list)

    @staticmethod
    def from_available_swaps(assets: AvailableSwaps) -> "SwapAssetsModel":
        return SwapAssetsModel(
            sell=[TreasuryBalanceModel.from_balance(balance) for balance in assets.sell],
            buy=[SwapTokenModel.from_token(token) for token in assets.buy],
        )


class OrderModel(BaseModel):
    uid: str
    status: str
    buyAmount: str

    @staticmethod
    def from_order(order: Order) -> "OrderModel":
        return OrderModel(uid=order.uid, status=order.status, buyAmount=order.buy_amount)
