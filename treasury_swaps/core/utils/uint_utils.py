import re

UINT256_MAX: int = 2 ** 256 - 1

_DECIMAL_DIGITS = re.compile(r"[0-9]+")


def parse_uint256(raw: object, field: str = "value") -> int:
    """
    Parse the decimal-string encoding of an unsigned 256-bit integer.

    Only ASCII digits are accepted: no sign, no exponent, no whitespace and no
    fractional part. The result is exact for every value in [0, 2**256 - 1].

    Raises:
        ValueError naming `field` when the input is not such an encoding.
    """
    if not isinstance(raw, str) or _DECIMAL_DIGITS.fullmatch(raw) is None:
        raise ValueError(f"{field}: expected a decimal unsigned integer string, got {raw!r}")
    value = int(raw)
    if value > UINT256_MAX:
        raise ValueError(f"{field}: {raw} overflows uint256")
    return value
