from __future__ import annotations

from enum import Enum
from typing import Optional


class SwapError(Exception):
    """Base class for every failure surfaced by the swap quoting core."""


class InvalidArgumentError(SwapError):
    """The caller supplied input that can never succeed as-is."""


class UnsupportedChainError(InvalidArgumentError):
    """The chain has no CoW Protocol deployment we can talk to."""

    def __init__(self, chain: str) -> None:
        super().__init__(f"unsupported chain '{chain}'")
        self.chain = chain


class QuotingErrorKind(str, Enum):
    SELL_AMOUNT_DOES_NOT_COVER_FEE = "SellAmountDoesNotCoverFee"


class QuotingError(SwapError):
    """
    Expected, user-correctable quoting failure reported by the order-matching protocol.

    The `kind` is stable and is what callers branch on; `description` is the
    protocol's free text and is only meant for diagnostics.
    """

    def __init__(self, kind: QuotingErrorKind, description: Optional[str] = None) -> None:
        super().__init__(kind.value)
        self.kind = kind
        self.description = description


class InternalError(SwapError):
    """Opaque failure. The message is generic, the cause is chained and logged."""
