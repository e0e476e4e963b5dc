"""Integer helpers that follow truncating (round-toward-zero) division."""


def trunc_div(a: int, b: int) -> int:
    """Divide and truncate toward zero."""
    quotient = abs(a) // abs(b)
    return quotient if (a < 0) == (b < 0) else -quotient


def clip(lo: int, hi: int, val: int) -> int:
    """Limit ``val`` to the range ``[lo, hi]``."""
    return max(lo, min(hi, val))


def ceil_div(a: int, b: int) -> int:
    """Divide, rounding up for positive operands."""
    return trunc_div(a + b - 1, b)


def round_div(a: int, b: int) -> int:
    """Divide, rounding half up for positive operands."""
    return trunc_div(a + trunc_div(b, 2), b)