"""Small signal-history containers: peak hold, ring history and ring scope."""

from dataclasses import dataclass

from .intmath import round_div, trunc_div


class PeakHold:
    """Tracks the minimum (base) and maximum (peak) of entered values."""

    def __init__(self, default: int = 0) -> None:
        self.default = default
        self._empty = True
        self.base = default
        self.peak = default

    def clear(self, value: int | None = None) -> None:
        """Forget all values; base and peak read ``value`` until the next entry."""
        if value is None:
            value = self.default
        self.base = self.peak = value
        self._empty = True

    def enter(self, value: int) -> None:
        """Record a value."""
        if self._empty:
            self.base = self.peak = value
            self._empty = False
        else:
            self.base = min(self.base, value)
            self.peak = max(self.peak, value)

    def amplitude(self) -> int:
        """Distance between peak and base."""
        return self.peak - self.base


class RingHistory:
    """Fixed-size circular buffer of integers with simple statistics."""

    def __init__(self, period: int) -> None:
        if period <= 0:
            raise ValueError("period must be positive")
        self.period = period
        self._history = [0] * period
        self._cursor = 0
        self._size = 0

    def clear(self, value: int = 0, fill: bool = False) -> None:
        """Set every slot to ``value``; count them as filled when ``fill``."""
        self._history = [value] * self.period
        self._cursor = 0
        self._size = self.period if fill else 0

    def push(self, value: int) -> bool:
        """Store a value; returns True when the cursor wraps around."""
        self._history[self._cursor] = value
        if self._size < self.period:
            self._size += 1
        if self._cursor < self.period - 1:
            self._cursor += 1
            return False
        self._cursor = 0
        return True

    def __len__(self) -> int:
        return self._size

    def _values(self) -> list[int]:
        return self._history[: self._size]

    def sum(self) -> int:
        """Sum of the filled slots."""
        return sum(self._values())

    def ave(self, default: int = 0) -> int:
        """Truncated mean of the filled slots, or ``default`` when empty."""
        if self._size == 0:
            return default
        return trunc_div(self.sum(), self._size)

    def min(self, default: int = 0) -> int:
        """Smallest filled value, or ``default`` when empty."""
        if self._size == 0:
            return default
        return min(self._values())

    def max(self, default: int = 0) -> int:
        """Largest filled value, or ``default`` when empty."""
        if self._size == 0:
            return default
        return max(self._values())


@dataclass
class _ScopeEntry:
    valid: bool = False
    min: int = 0
    max: int = 0
    ave: int = 0


class RingScope:
    """Time-bucketed min/max/average of a signal over one repeating period."""

    def __init__(self, default: int = 0, period: int = 1000, resolution: int = 1) -> None:
        size = period // resolution
        if size * resolution != period:
            raise ValueError("period must be a multiple of resolution")
        self.default = default
        self.period = period
        self.resolution = resolution
        self.history_size = size
        self._history = [_ScopeEntry() for _ in range(size)]
        self._first_cursor = 0
        self._last_cursor = 0
        self._size = 0
        self._accum_value = default
        self._accum_count = 0

    def clear(self, now: int, value: int | None = None) -> None:
        """Invalidate every bucket, seeding them with ``value``."""
        if value is None:
            value = self.default
        self._history = [_ScopeEntry(False, value, value, value) for _ in range(self.history_size)]
        self._first_cursor = self._last_cursor = now % self.period
        self._size = 0
        self._accum_value = 0
        self._accum_count = 0

    def write(self, now: int, value: int) -> bool:
        """Record a sample at time ``now``; returns True on wrap-around."""
        cursor = (now % self.period) // self.resolution
        entry = self._history[cursor]

        if not entry.valid:
            self._size += 1

        if self._last_cursor == cursor:
            self._accum_value += value
            self._accum_count += 1
            entry.valid = True
            entry.min = min(entry.min, value)
            entry.max = max(entry.max, value)
            entry.ave = round_div(self._accum_value, self._accum_count)
        else:
            entry.valid = True
            entry.min = entry.max = entry.ave = value
            self._accum_value = value
            self._accum_count = 1

        wrap_around = cursor < self._last_cursor
        self._last_cursor = cursor
        return wrap_around

    def __len__(self) -> int:
        return self._size

    def empty(self) -> bool:
        """Whether no bucket holds data."""
        return self._size == 0

    def full(self) -> bool:
        """Whether every bucket holds data."""
        return self._size == self.history_size

    def min_max(self, default: int | None = None, use_ave: bool = False) -> tuple[int, int]:
        """Overall (min, max) over valid buckets, starting from ``default``."""
        if default is None:
            default = self.default
        min_hold = max_hold = default
        for i, entry in enumerate(self._history):
            if not entry.valid:
                continue
            this_min = entry.ave if use_ave else entry.min
            this_max = entry.ave if use_ave else entry.max
            if i == 0:
                min_hold, max_hold = this_min, this_max
            else:
                min_hold = min(min_hold, this_min)
                max_hold = max(max_hold, this_max)
        return min_hold, max_hold

    def min(self, default: int | None = None, use_ave: bool = False) -> int:
        """Overall minimum."""
        return self.min_max(default, use_ave)[0]

    def max(self, default: int | None = None, use_ave: bool = False) -> int:
        """Overall maximum."""
        return self.min_max(default, use_ave)[1]

    def total_amplitude(self, default: int | None = None, use_ave: bool = False) -> int:
        """Overall maximum minus overall minimum."""
        lo, hi = self.min_max(default, use_ave)
        return hi - lo

    def total_average(self, default: int | None = None) -> int:
        """Rounded mean of the bucket averages."""
        if self._size == 0:
            return self.default if default is None else default
        accum = sum(entry.ave for entry in self._history if entry.valid)
        return round_div(accum, self._size)

    def average_amplitude(self, default: int | None = None) -> int:
        """Rounded mean of per-bucket amplitudes."""
        if self._size == 0:
            return self.default if default is None else default
        accum = sum(entry.max - entry.min for entry in self._history if entry.valid)
        return round_div(accum, self._size)