from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from treasury_swaps.core.structures.structures import AccountID, TreasuryBalance
from treasury_swaps.integrations.covalent.covalent_structures import TokenPriceHistory


class FakeCovalentClient:
    """Deterministic PriceOracle/BalanceProvider double with call recording."""

    def __init__(self, price_history: Optional[TokenPriceHistory] = None) -> None:
        self.price_history = price_history
        self.balance_list: List[TreasuryBalance] = []
        self.token_price_calls: List[tuple[str, str, datetime]] = []
        self.balances_calls: List[AccountID] = []
        self._price_exception: Optional[Exception] = None

    def set_price_exception(self, exception: Exception) -> None:
        self._price_exception = exception

    async def token_price(self, chain_reference: str, token_address: str, as_of: datetime) -> Optional[TokenPriceHistory]:
        self.token_price_calls.append((chain_reference, token_address, as_of))
        if self._price_exception is not None:
            raise self._price_exception
        return self.price_history

    async def balances(self, account_id: AccountID) -> List[TreasuryBalance]:
        self.balances_calls.append(account_id)
        return list(self.balance_list)
