from typing import Optional


def _format(value: Optional[float]) -> str:
    """Format a float for logs, or 'NA' if missing."""
    return "NA" if value is None else f"{value:.2f}"


def _tail(address: str, n: int = 6) -> str:
    """Return the last n characters of a lowercased address (for concise logs)."""
    addr = (address or "").lower()
    return addr[-n:] if len(addr) >= n else addr
