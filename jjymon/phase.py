"""Shared receiver definitions: precision, bit values and phase arithmetic."""

from enum import Enum, IntEnum

from .intmath import trunc_div

PREC = 12
ONE = 1 << PREC
PHASE_PERIOD = ONE


class Frequency(Enum):
    """Transmitter carrier."""

    WEST_60KHZ = 0
    EAST_40KHZ = 1


class JjyBit(IntEnum):
    """A decoded time-code symbol."""

    ZERO = 0
    ONE = 1
    MARKER = 2
    ERROR = 3


def _c_mod(a: int, b: int) -> int:
    return a - b * trunc_div(a, b)


def gcd(a: int, b: int) -> int:
    """Greatest common divisor by Euclid's algorithm."""
    while b != 0:
        a, b = b, _c_mod(a, b)
    return a


def lcm(a: int, b: int) -> int:
    """Least common multiple."""
    return trunc_div(a, gcd(a, b)) * b


def phase_add(x: int, delta: int) -> int:
    """Add ``delta`` to phase ``x`` and wrap into ``[0, PHASE_PERIOD)``."""
    return (x + delta) % PHASE_PERIOD


def phase_diff(a: int, b: int) -> int:
    """Signed phase difference ``a - b`` in ``[-PHASE_PERIOD/2, PHASE_PERIOD/2)``."""
    half = PHASE_PERIOD // 2
    return (a - b + half) % PHASE_PERIOD - half


def phase_follow(x: int, goal: int, ratio: int) -> int:
    """Step phase ``x`` toward ``goal`` by ``ratio``, at least by one."""
    diff = phase_diff(goal, x)
    if diff == 0:
        return x
    step = trunc_div(diff * ratio, ONE)
    if step == 0:
        step = 1 if diff >= 0 else -1
    return phase_add(x, step)


def fast_sqrt(x: int) -> int:
    """Approximate square root of an unsigned 32-bit integer."""
    if not 0 <= x < 1 << 32:
        raise ValueError("fast_sqrt takes an unsigned 32-bit integer")
    if x < 2:
        return x
    if x <= 38408:
        ret = (x >> 7) + 11
    elif x <= 1411319:
        ret = (x >> 10) + 210
    elif x <= 70459124:
        ret = (x >> 13) + 1414
    elif x <= 794112116:
        ret = (x >> 15) + 7863
    else:
        ret = (x >> 17) + 26038
    ret = (ret + x // ret) >> 1
    ret = (ret + x // ret) >> 1
    return ret