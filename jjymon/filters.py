"""Sample-by-sample conditioning stages: DC removal, AGC, debouncing, hysteresis."""

from .history import RingHistory
from .intmath import clip, round_div, trunc_div
from .phase import ONE


class DcBias:
    """Removes the midpoint of the recent min/max as a DC offset."""

    def __init__(self, period: int, init_bias: int = 0) -> None:
        self.init_bias = init_bias
        self.bias = init_bias
        self.peak_hi = 0
        self.peak_lo = 0
        self.out = 0
        self._history = RingHistory(period)

    def reset(self) -> None:
        """Return to the initial state."""
        self._history.clear(self.init_bias)
        self.peak_hi = self.peak_lo = self.bias = self.init_bias
        self.out = 0

    def process(self, value: int) -> int:
        """Feed a sample; returns it with the bias removed."""
        self._history.push(value)
        self.peak_hi = self._history.max()
        self.peak_lo = self._history.min()
        self.bias = round_div(self.peak_hi + self.peak_lo, 2)
        self.out = value - self.bias
        return self.out


class Agc:
    """Derives a gain that normalises the recent peak amplitude to ``ONE``."""

    def __init__(
        self,
        period: int,
        init_val: int = 0,
        min_gain: int = ONE // 100,
        max_gain: int = ONE * 100,
        init_gain: int | None = None,
    ) -> None:
        self.init_val = init_val
        self.min_gain = min_gain
        self.max_gain = max_gain
        self.init_gain = min_gain if init_gain is None else init_gain
        self.gain = self.init_gain
        self.amplitude_peak = 0
        self.out = init_val
        self._history = RingHistory(period)

    def reset(self) -> None:
        """Return to the initial state."""
        self._history.clear(self.init_val)
        self.gain = self.init_gain
        self.amplitude_peak = 0
        self.out = self.init_val

    def process(self, value: int) -> int:
        """Feed a sample; updates the gain and returns the amplified sample."""
        self._history.push(abs(value))
        self.amplitude_peak = self._history.max()
        if self.amplitude_peak > 0:
            self.gain = clip(self.min_gain, self.max_gain, round_div(ONE * ONE, self.amplitude_peak))
        else:
            self.gain = self.max_gain
        self.out = value * self.gain
        return self.out


class AntiChattering:
    """Changes output only after ``depth`` consecutive equal inputs."""

    def __init__(self, depth: int) -> None:
        self.depth = depth
        self._mask = (1 << depth) - 1
        self.sreg = 0
        self.out = 0

    def reset(self) -> None:
        """Clear the shift register and output."""
        self.sreg = 0
        self.out = 0

    def process(self, value: int) -> int:
        """Shift in a bit; returns the debounced output."""
        self.sreg = ((self.sreg << 1) & self._mask) | value
        if self.sreg == 0:
            self.out = 0
        elif self.sreg == self._mask:
            self.out = 1
        return self.out


class Hysteresis:
    """Binarises a signal against an adaptive threshold with a hysteresis band."""

    def __init__(self, history_size: int, init_val: int = 0, hyst_ratio: int = ONE // 10) -> None:
        self.init_val = init_val
        self.hyst_ratio = hyst_ratio
        self.peak_hi = init_val
        self.peak_lo = init_val
        self.threshold = init_val
        self.hysteresis = 0
        self.out_anl = init_val
        self.out_dig = 0
        self._history = RingHistory(history_size)

    def reset(self) -> None:
        """Return to the initial state."""
        self._history.clear(self.init_val)
        self.peak_hi = self.peak_lo = self.threshold = self.init_val
        self.hysteresis = 0
        self.out_anl = self.init_val
        self.out_dig = 0

    def process(self, value: int) -> int:
        """Feed a sample; returns the binary output."""
        self._history.push(value)
        self.out_anl = value + (-self.hysteresis if self.out_dig else self.hysteresis)
        self.out_dig = 1 if self.out_anl >= self.threshold else 0
        self.peak_hi = self._history.max()
        self.peak_lo = self._history.min()
        self.threshold = trunc_div(self.peak_hi + self.peak_lo, 2)
        self.hysteresis = trunc_div((self.peak_hi - self.peak_lo) * self.hyst_ratio, ONE)
        return self.out_dig