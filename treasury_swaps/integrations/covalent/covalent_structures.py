from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional

from treasury_swaps.core.structures.structures import TreasuryBalance
from treasury_swaps.core.utils.dict_utils import JSON


def _to_optional_float(value: JSON) -> Optional[float]:
    """Convert a JSON scalar into an optional float, returning None on failure."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return None
    return None


def _to_int_or_zero(value: JSON) -> int:
    """Convert a JSON scalar into an int, returning 0 on failure."""
    if isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return 0
    return 0


def _to_str(value: JSON) -> str:
    return str(value) if value is not None else ""


@dataclass(frozen=True)
class CovalentPricePoint:
    date: str
    price: Optional[float]

    @staticmethod
    def from_json(payload: Dict[str, JSON]) -> "CovalentPricePoint":
        return CovalentPricePoint(
            date=_to_str(payload.get("date")),
            price=_to_optional_float(payload.get("price")),
        )


@dataclass(frozen=True)
class TokenPriceHistory:
    """Daily price history of one contract, as returned by the Covalent pricing endpoint."""
    contract_address: str
    contract_ticker_symbol: str
    quote_currency: str
    prices: List[CovalentPricePoint]

    def last_price(self) -> Optional[float]:
        """Most recent dated price, or None when no point carries a price."""
        priced = [point for point in self.prices if point.price is not None and point.date]
        if not priced:
            return None
        latest = max(priced, key=lambda point: point.date)
        return latest.price

    @staticmethod
    def from_json(payload: Dict[str, JSON], quote_currency: str = "") -> "TokenPriceHistory":
        raw_prices = payload.get("prices")
        prices = [
            CovalentPricePoint.from_json(item)
            for item in (raw_prices if isinstance(raw_prices, list) else [])
            if isinstance(item, dict)
        ]
        return TokenPriceHistory(
            contract_address=_to_str(payload.get("contract_address")),
            contract_ticker_symbol=_to_str(payload.get("contract_ticker_symbol")),
            quote_currency=_to_str(payload.get("quote_currency")) or quote_currency,
            prices=prices,
        )


def balance_from_json(payload: Dict[str, JSON]) -> TreasuryBalance:
    """Build a TreasuryBalance from one `balances_v2` item."""
    logo = payload.get("logo_url")
    return TreasuryBalance(
        contract_address=_to_str(payload.get("contract_address")),
        contract_name=_to_str(payload.get("contract_name")),
        contract_ticker_symbol=_to_str(payload.get("contract_ticker_symbol")),
        contract_decimals=_to_int_or_zero(payload.get("contract_decimals")),
        balance=_to_int_or_zero(payload.get("balance")),
        quote_rate=_to_optional_float(payload.get("quote_rate")),
        logo_url=str(logo) if logo else None,
        native_token=payload.get("native_token") is True,
    )
