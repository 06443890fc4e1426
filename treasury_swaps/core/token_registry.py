from __future__ import annotations

from types import MappingProxyType
from typing import Iterable, Iterator, List, Mapping, NamedTuple, Optional, Union

from treasury_swaps.core.errors import InvalidArgumentError
from treasury_swaps.core.structures.structures import AccountID, ChainID, EIP155_NAMESPACE, SwapToken
from treasury_swaps.logging.logger import get_logger

log = get_logger(__name__)

ETHEREUM_MAINNET: ChainID = ChainID(EIP155_NAMESPACE, "1")


class SwapTokenEntry(NamedTuple):
    symbol: str
    name: str
    address: str
    decimals: int
    logo: str


# Tokens that can be bought through CoW Protocol from a treasury.
SWAP_TOKEN_ENTRIES: tuple[SwapTokenEntry, ...] = (
    SwapTokenEntry(
        "USDC",
        "USD Coin",
        "0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48",
        6,
        "https://tokens.1inch.io/0xa0b86991c6218b36c1d19d4a2e9eb0ce3606eb48.png",
    ),
    SwapTokenEntry(
        "WETH",
        "Wrapped Ether",
        "0xC02aaA39b223FE8D0A0e5C4F27eAD9083C756Cc2",
        18,
        "https://tokens.1inch.io/0xc02aaa39b223fe8d0a0e5c4f27ead9083c756cc2.png",
    ),
    SwapTokenEntry(
        "USDT",
        "Tether USD",
        "0xdAC17F958D2ee523a2206206994597C13D831ec7",
        6,
        "https://tokens.1inch.io/0xdac17f958d2ee523a2206206994597c13d831ec7.png",
    ),
    SwapTokenEntry(
        "DAI",
        "Dai Stablecoin",
        "0x6B175474E89094C44Da98b954EedeAC495271d0F",
        18,
        "https://tokens.1inch.io/0x6b175474e89094c44da98b954eedeac495271d0f.png",
    ),
)


class TokenRegistry:
    """
    Read-only table of swappable tokens keyed by CAIP-10 account id.

    The table is resolved once at construction time. Entries whose address does
    not resolve to a valid account id on `chain_id` are logged and left out;
    nothing mutates the table afterwards, so concurrent readers need no locking.
    """

    def __init__(self, entries: Iterable[SwapTokenEntry], chain_id: ChainID) -> None:
        tokens: dict[str, SwapToken] = {}
        for entry in entries:
            try:
                account_id = AccountID(chain_id=chain_id, address=entry.address)
            except InvalidArgumentError as error:
                log.error("[REGISTRY][BUILD] Skipping token %s: %s", entry.symbol, error)
                continue
            tokens[str(account_id)] = SwapToken(
                address=entry.address,
                id=account_id,
                symbol=entry.symbol,
                name=entry.name,
                decimals=int(entry.decimals),
                logo=entry.logo,
            )
        self._tokens: Mapping[str, SwapToken] = MappingProxyType(tokens)
        log.debug("[REGISTRY][BUILD] %d swap tokens registered on %s.", len(tokens), chain_id)

    def lookup(self, token_id: Union[AccountID, str]) -> Optional[SwapToken]:
        """Return the registered token for a CAIP-10 id, or None when it is not swappable."""
        if isinstance(token_id, AccountID):
            return self._tokens.get(str(token_id))
        try:
            return self._tokens.get(str(AccountID.parse(token_id)))
        except InvalidArgumentError:
            return None

    def list_for_chain(self, chain_id: ChainID) -> List[SwapToken]:
        return [token for token in self._tokens.values() if token.id.chain_id == chain_id]

    def __contains__(self, token_id: object) -> bool:
        if not isinstance(token_id, (AccountID, str)):
            return False
        return self.lookup(token_id) is not None

    def __iter__(self) -> Iterator[SwapToken]:
        return iter(self._tokens.values())

    def __len__(self) -> int:
        return len(self._tokens)


swap_token_registry = TokenRegistry(SWAP_TOKEN_ENTRIES, ETHEREUM_MAINNET)
