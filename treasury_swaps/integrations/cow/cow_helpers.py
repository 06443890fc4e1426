from __future__ import annotations

from typing import Mapping, NoReturn, Optional

import httpx
from pydantic import ValidationError

from treasury_swaps.core.errors import QuotingError, QuotingErrorKind, UnsupportedChainError
from treasury_swaps.core.structures.structures import ChainID, EIP155_NAMESPACE
from treasury_swaps.core.utils.dict_utils import JSON
from treasury_swaps.integrations.cow.cow_constants import COW_NETWORK_NAMES
from treasury_swaps.integrations.cow.cow_structures import CowErrorPayload
from treasury_swaps.logging.logger import get_logger

log = get_logger(__name__)


class CowApiError(Exception):
    """Opaque CoW Protocol failure: transport, unexpected status, malformed payload or unclassified errorType."""

    def __init__(self, message: str, error_type: Optional[str] = None, description: Optional[str] = None) -> None:
        super().__init__(message)
        self.error_type = error_type
        self.description = description


def _chain_id_to_network_name(chain_id: ChainID) -> str:
    """
    Map a CAIP-2 chain id to the CoW API network path segment.

    Raises:
        UnsupportedChainError before any network I/O when CoW has no deployment for the chain.
    """
    if chain_id.namespace == EIP155_NAMESPACE:
        network = COW_NETWORK_NAMES.get(chain_id.reference)
        if network is not None:
            return network
    log.debug("[COW][CHAIN][RESOLVE] Unsupported chain '%s'", chain_id)
    raise UnsupportedChainError(str(chain_id))


def is_supported_chain(chain_id: ChainID) -> bool:
    try:
        _chain_id_to_network_name(chain_id)
    except UnsupportedChainError:
        return False
    return True


def _read_error_payload(payload: JSON) -> Optional[CowErrorPayload]:
    """Return the error envelope when the payload carries a non-empty errorType, else None."""
    if not isinstance(payload, Mapping):
        return None
    error_type = payload.get("errorType")
    if not isinstance(error_type, str) or not error_type:
        return None
    try:
        return CowErrorPayload.model_validate(payload)
    except ValidationError:
        return CowErrorPayload(errorType=error_type)


def _raise_for_quote_error(error: CowErrorPayload) -> NoReturn:
    """Turn a quote error envelope into the matching exception."""
    if error.error_type == QuotingErrorKind.SELL_AMOUNT_DOES_NOT_COVER_FEE.value:
        raise QuotingError(QuotingErrorKind.SELL_AMOUNT_DOES_NOT_COVER_FEE, error.description)
    raise CowApiError(
        f"quote rejected with errorType={error.error_type}",
        error_type=error.error_type,
        description=error.description,
    )


async def _http_request_json(
        client: httpx.AsyncClient,
        method: str,
        url: str,
        payload: Optional[Mapping[str, object]] = None,
) -> tuple[int, JSON]:
    """
    Perform a request and return (status_code, parsed JSON body).

    The status is returned rather than raised because CoW reports classified
    failures as a JSON error envelope on 4xx responses.

    Raises:
        CowApiError on connection/timeout errors or a body that is not JSON.
    """
    try:
        response = await client.request(method, url, json=payload)
    except httpx.RequestError as exc:
        log.warning("[COW][HTTP] %s request error: url=%s error=%s", method, url, str(exc))
        raise CowApiError(f"{method} {url} failed") from exc

    if not response.content:
        return response.status_code, None

    try:
        body: JSON = response.json()
    except ValueError as exc:
        log.warning(
            "[COW][HTTP] %s non-JSON body: url=%s status=%s body=%s",
            method,
            url,
            response.status_code,
            response.text[:256],
        )
        raise CowApiError(f"{method} {url} returned a non-JSON body") from exc

    return response.status_code, body


def _ensure_success(status_code: int, url: str, body: JSON) -> None:
    if 200 <= status_code < 300:
        return
    log.warning("[COW][HTTP] Unexpected status: url=%s status=%s body=%s", url, status_code, str(body)[:256])
    raise CowApiError(f"{url} returned HTTP {status_code}")
