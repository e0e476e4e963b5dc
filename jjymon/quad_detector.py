"""Quadrature envelope detector and its sampling constants."""

from collections.abc import Sequence

from . import fixed12
from .intmath import clip, round_div, trunc_div
from .phase import ONE, Frequency, fast_sqrt

FREQ_60KHZ = 60 * 1000
DETECTION_INPUT_SPS = 480 * 1000
DETECTION_RESOLUTION = DETECTION_INPUT_SPS // FREQ_60KHZ
DETECTION_OUTPUT_SPS = 100
DETECTION_BLOCK_SIZE = DETECTION_INPUT_SPS // DETECTION_OUTPUT_SPS


class QuadDetector:
    """Mixes each block with sine and cosine and averages the magnitude.

    Also records a persistence-style scope of the input over four carrier periods.
    """

    SCOPE_RESOLUTION = 8
    SCOPE_NUM_PHASES = 4
    SCOPE_SIZE = SCOPE_RESOLUTION * SCOPE_NUM_PHASES

    STEP_60KHZ = fixed12.PHASE_PERIOD * 60000 // DETECTION_INPUT_SPS
    STEP_40KHZ = fixed12.PHASE_PERIOD * 40000 // DETECTION_INPUT_SPS

    def __init__(self) -> None:
        self.freq = Frequency.EAST_40KHZ
        self._phase_sin = 0
        self._scope_phase = 0
        self._scope = [0] * self.SCOPE_SIZE
        fixed12.init_tables()

    def init(self, freq: Frequency, t_now_ms: int) -> None:
        """Select the carrier and reset the oscillator and scope."""
        self.freq = freq
        self._phase_sin = 0
        self._scope = [0] * self.SCOPE_SIZE

    def process(self, t_now_ms: int, samples: Sequence[int]) -> int:
        """Detect one block of samples; returns the mean envelope magnitude."""
        if not samples:
            raise ValueError("samples must not be empty")
        self._scope = [0] * self.SCOPE_SIZE
        step = self.STEP_40KHZ if self.freq == Frequency.EAST_40KHZ else self.STEP_60KHZ
        scope_mask = fixed12.PHASE_PERIOD * self.SCOPE_NUM_PHASES - 1
        phase_sin = self._phase_sin
        phase_cos = fixed12.phase_norm(phase_sin + fixed12.PHASE_PERIOD // 4)

        total = 0
        for sample in samples:
            level = clip(0, 31, round_div((trunc_div(sample, 2) + ONE) * 31, ONE * 2))
            self._scope_phase = (self._scope_phase + step) & scope_mask
            column = (self._scope_phase * self.SCOPE_RESOLUTION) >> fixed12.PHASE_PREC
            self._scope[column] |= 1 << level

            u = (fixed12.fast_sin(phase_sin) * sample) >> fixed12.PREC
            v = (fixed12.fast_sin(phase_cos) * sample) >> fixed12.PREC
            phase_sin = fixed12.phase_norm(phase_sin + step)
            phase_cos = fixed12.phase_norm(phase_cos + step)
            total += fast_sqrt((u * u + v * v) & 0xFFFFFFFF)

        self._phase_sin = phase_sin
        return total // len(samples)

    def read_scope(self) -> list[int]:
        """Copy of the scope columns; bit ``n`` marks input level ``n`` of 32."""
        return list(self._scope)