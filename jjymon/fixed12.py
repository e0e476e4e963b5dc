"""Fixed-point arithmetic with 12 fractional bits and a 4096-step phase circle."""

import math

from .intmath import trunc_div

PREC = 12
ONE = 1 << PREC

PHASE_PREC = 12
PHASE_PERIOD = 1 << PHASE_PREC

SIN_TABLE: list[int] = []


def _round_half_away(value: float) -> int:
    magnitude = math.floor(abs(value) + 0.5)
    return magnitude if value >= 0 else -magnitude


def init_tables() -> None:
    """Fill the sine table once."""
    if SIN_TABLE:
        return
    SIN_TABLE.extend(
        _round_half_away(math.sin(a * 2 * math.pi / PHASE_PERIOD) * ONE)
        for a in range(PHASE_PERIOD)
    )


def fast_sin(a: int) -> int:
    """Sine of phase ``a`` as a fixed-point value."""
    init_tables()
    return SIN_TABLE[phase_norm(a)]


def fast_cos(a: int) -> int:
    """Cosine of phase ``a`` as a fixed-point value."""
    init_tables()
    return SIN_TABLE[phase_norm(a + PHASE_PERIOD // 4)]


def log2(x: int) -> int:
    """Base-2 logarithm of a fixed-point value, as a fixed-point value."""
    if x <= 1:
        return -0x80000000

    tmp = x
    ret = 0
    if tmp > ONE * 2:
        while tmp > ONE * 2:
            tmp //= 2
            ret += 1
    elif tmp < ONE:
        while tmp < ONE:
            tmp *= 2
            ret -= 1

    for _ in range(PREC):
        tmp = tmp * tmp // ONE
        ret *= 2
        if tmp >= 2 * ONE:
            ret += 1
            tmp //= 2
    return ret


def to_int(x: int) -> int:
    """Integer part (floor) of a fixed-point value."""
    return x >> PREC


def round_to_int(x: int) -> int:
    """Nearest integer to a fixed-point value."""
    return to_int(x + ONE // 2)


def interp(value: int, goal: int, ratio: int) -> int:
    """Move ``value`` a fraction ``ratio`` of the way to ``goal``, at least by one."""
    diff = goal - value
    if diff == 0:
        return value
    step = trunc_div(diff * ratio, ONE)
    if step == 0:
        step = 1 if diff >= 0 else -1
    return value + step


def phase_norm(x: int, offset: int = 0) -> int:
    """Wrap a phase into ``[0, PHASE_PERIOD)``."""
    return (x + offset) & (PHASE_PERIOD - 1)


def phase_add(x: int, delta: int) -> int:
    """Add ``delta`` to phase ``x`` and wrap."""
    return phase_norm(x + delta)


def phase_diff(a: int, b: int) -> int:
    """Phase difference ``a - b``, offset by half a period and wrapped."""
    return phase_norm(a - b, -PHASE_PERIOD // 2)


def phase_follow(x: int, goal: int, ratio: int) -> int:
    """Step phase ``x`` toward ``goal`` by ``ratio``, at least by one."""
    diff = phase_diff(goal, x)
    if diff == 0:
        return x
    step = trunc_div(diff * ratio, ONE)
    if step == 0:
        step = 1 if diff >= 0 else -1
    return phase_add(x, step)