from __future__ import annotations

from typing import List

from treasury_swaps.core.errors import InternalError, InvalidArgumentError
from treasury_swaps.core.structures.structures import AccountID, AvailableSwaps, ChainID, TreasuryBalance
from treasury_swaps.core.token_registry import TokenRegistry, swap_token_registry
from treasury_swaps.integrations.covalent.covalent_client import BalanceProvider
from treasury_swaps.integrations.covalent.covalent_constants import NATIVE_ETHER_CONTRACT_NAME
from treasury_swaps.logging.logger import get_logger

log = get_logger(__name__)


def _is_native_ether(balance: TreasuryBalance) -> bool:
    return balance.native_token or balance.contract_name == NATIVE_ETHER_CONTRACT_NAME


async def list_available_swaps(
        chain_id: ChainID,
        treasury_address: str,
        balance_provider: BalanceProvider,
        registry: TokenRegistry = swap_token_registry,
) -> AvailableSwaps:
    """
    List what a treasury can sell and what it can buy.

    Sellable: balances held by the treasury whose token is registered, plus native Ether.
    Buyable: every registered token on the treasury's chain.
    """
    treasury = AccountID(chain_id=chain_id, address=treasury_address)

    try:
        balances = await balance_provider.balances(treasury)
    except Exception as error:
        log.exception("[SWAP][ASSETS] Getting treasury balances failed: treasury=%s", treasury)
        raise InternalError("getting treasury balances") from error

    sell: List[TreasuryBalance] = []
    for balance in balances:
        if _is_native_ether(balance):
            sell.append(balance)
            continue
        try:
            token_id = AccountID(chain_id=chain_id, address=balance.contract_address)
        except InvalidArgumentError as error:
            log.error("[SWAP][ASSETS] Malformed balance item: %s", error)
            raise InternalError("reading treasury balances") from error
        if token_id in registry:
            sell.append(balance)

    buy = registry.list_for_chain(chain_id)
    log.debug("[SWAP][ASSETS] treasury=%s sell=%d buy=%d", treasury, len(sell), len(buy))
    return AvailableSwaps(sell=tuple(sell), buy=tuple(buy))
