from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from web3 import Web3

from treasury_swaps.core.errors import InvalidArgumentError
from treasury_swaps.core.utils.format_utils import _tail

EIP155_NAMESPACE: str = "eip155"


@dataclass(frozen=True)
class ChainID:
    """CAIP-2 chain identifier, e.g. `eip155:1`."""
    namespace: str
    reference: str

    def __post_init__(self) -> None:
        if not self.namespace or not self.reference:
            raise InvalidArgumentError(f"invalid chain id '{self.namespace}:{self.reference}'")
        if ":" in self.namespace or ":" in self.reference:
            raise InvalidArgumentError(f"invalid chain id '{self.namespace}:{self.reference}'")

    @staticmethod
    def parse(value: str) -> "ChainID":
        namespace, separator, reference = (value or "").strip().partition(":")
        if not separator:
            raise InvalidArgumentError(f"invalid chain id '{value}'")
        return ChainID(namespace=namespace, reference=reference)

    def __str__(self) -> str:
        return f"{self.namespace}:{self.reference}"


@dataclass(frozen=True)
class AccountID:
    """
    CAIP-10 account identifier, e.g. `eip155:1:0xA0b8...eB48`.

    The address is validated and stored in its EIP-55 checksum form, so two
    spellings of the same address yield equal identifiers.
    """
    chain_id: ChainID
    address: str

    def __post_init__(self) -> None:
        if self.chain_id.namespace != EIP155_NAMESPACE:
            raise InvalidArgumentError(f"unsupported chain namespace '{self.chain_id.namespace}'")
        if not isinstance(self.address, str) or not Web3.is_address(self.address):
            raise InvalidArgumentError(f"invalid address '{self.address}' on chain {self.chain_id}")
        object.__setattr__(self, "address", Web3.to_checksum_address(self.address))

    @staticmethod
    def parse(value: str) -> "AccountID":
        chain, separator, address = (value or "").strip().rpartition(":")
        if not separator:
            raise InvalidArgumentError(f"invalid account id '{value}'")
        return AccountID(chain_id=ChainID.parse(chain), address=address)

    def __str__(self) -> str:
        return f"{self.chain_id}:{self.address}"


@dataclass(frozen=True)
class SwapToken:
    address: str
    id: AccountID
    symbol: str
    name: str
    decimals: int
    logo: str

    def __str__(self) -> str:
        return f"[symbol={self.symbol} chain={self.id.chain_id} address=…{_tail(self.address)}]"


@dataclass(frozen=True)
class SwapQuote:
    """Normalized quote handed back to the presentation layer."""
    buy_amount: int
    sell_amount: int
    fee_amount: int
    buy_token_quote_rate: Optional[float]
    valid_to: datetime


@dataclass(frozen=True)
class TreasuryBalance:
    """One token balance held by a treasury, as reported by the balance provider."""
    contract_address: str
    contract_name: str
    contract_ticker_symbol: str
    contract_decimals: int
    balance: int
    quote_rate: Optional[float] = None
    logo_url: Optional[str] = None
    native_token: bool = False


@dataclass(frozen=True)
class AvailableSwaps:
    sell: tuple[TreasuryBalance, ...]
    buy: tuple[SwapToken, ...]
