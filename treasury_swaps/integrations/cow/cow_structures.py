from __future__ import annotations

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class CowModel(BaseModel):
    """Base for CoW payloads: camelCase on the wire, unknown keys ignored."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)


class QuoteRequest(CowModel):
    sell_token: str = Field(..., alias="sellToken")
    buy_token: str = Field(..., alias="buyToken")
    from_address: str = Field(..., alias="from", description="Address that will own the order (the treasury).")
    kind: Literal["sell"] = "sell"
    partially_fillable: bool = Field(False, alias="partiallyFillable")
    sell_amount_before_fee: str = Field(..., alias="sellAmountBeforeFee", description="Decimal uint256 string.")

    def to_payload(self) -> dict:
        return self.model_dump(by_alias=True)


class Quote(CowModel):
    sell_token: str = Field(..., alias="sellToken")
    buy_token: str = Field(..., alias="buyToken")
    sell_amount: str = Field(..., alias="sellAmount")
    buy_amount: str = Field(..., alias="buyAmount")
    valid_to: int = Field(..., alias="validTo", ge=0, le=2 ** 32 - 1, description="Unix timestamp, seconds (uint32).")
    app_data: Optional[str] = Field(None, alias="appData")
    fee_amount: str = Field(..., alias="feeAmount")
    kind: str = "sell"
    partially_fillable: bool = Field(False, alias="partiallyFillable")
    sell_token_balance: Optional[str] = Field(None, alias="sellTokenBalance")
    buy_token_balance: Optional[str] = Field(None, alias="buyTokenBalance")
    signing_scheme: Optional[str] = Field(None, alias="signingScheme")


class QuoteResponse(CowModel):
    """A successful quote. Error payloads never make it into this model."""
    quote: Quote
    from_address: Optional[str] = Field(None, alias="from")
    expiration: Optional[datetime] = None
    id: Optional[int] = None


class CowErrorPayload(CowModel):
    error_type: str = Field(..., alias="errorType")
    description: Optional[str] = None


class NativePriceResponse(CowModel):
    price: Optional[float] = None


class Order(CowModel):
    uid: str
    status: str
    buy_amount: str = Field(..., alias="buyAmount")
