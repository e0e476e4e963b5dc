"""RF front end: DC removal, AGC, quadrature detection and binarisation."""

from collections.abc import Sequence
from dataclasses import dataclass

from .filters import Agc, DcBias
from .history import PeakHold, RingHistory, RingScope
from .intmath import clip, round_div, trunc_div
from .phase import ONE, Frequency
from .quad_detector import (
    DETECTION_BLOCK_SIZE,
    DETECTION_INPUT_SPS,
    DETECTION_OUTPUT_SPS,
    QuadDetector,
)
from .timing import LazyTimer

# pi/2 in fixed point, truncated as a compile-time constant would be.
_HALF_PI = int(3.1415926535 * ONE / 2)

_INT32_MAX = 0x7FFFFFFF


def _ratio(num: int, den: int) -> int:
    """Truncating division that yields 0 for a zero divisor."""
    if den == 0:
        return 0
    return trunc_div(num, den)


@dataclass
class RfStatus:
    """Snapshot of the RF front end after the last processed block."""

    timestamp_ms: int = 0
    det_delay_ms: int = 0
    anti_chat_delay_ms: int = 0
    agc_gain: int = 0
    adc_amplitude_raw: int = 0
    adc_amplitude_peak: int = 0
    adc_min: int = 0
    adc_max: int = 0
    hyst_dig_out: int = 0
    digital_out: int = 0
    signal_quality: int = 0
    det_anl_out_raw: int = 0
    det_anl_out_norm: int = 0
    beat_detected: bool = False
    det_anl_out_beat_det: int = 0
    det_anl_out_base: int = 0
    det_anl_out_peak: int = 0

    def reset(self, t_now_ms: int, det_delay_ms: int, anti_chat_delay_ms: int) -> None:
        """Zero every measurement and record the pipeline delays."""
        self.timestamp_ms = t_now_ms
        self.det_delay_ms = det_delay_ms
        self.anti_chat_delay_ms = anti_chat_delay_ms
        self.agc_gain = 0
        self.adc_amplitude_raw = 0
        self.adc_amplitude_peak = 0
        self.adc_min = 0
        self.adc_max = 0
        self.hyst_dig_out = 0
        self.det_anl_out_raw = 0
        self.digital_out = 0
        self.signal_quality = 0
        self.det_anl_out_base = 0
        self.det_anl_out_peak = 0
        self.det_anl_out_norm = 0
        self.beat_detected = False
        self.det_anl_out_beat_det = 0


class HysteresisDebouncer:
    """Threshold comparator with hysteresis followed by a 3-sample debouncer."""

    ANTI_CHAT_CYCLES = 3

    def __init__(self) -> None:
        self._mask = (1 << self.ANTI_CHAT_CYCLES) - 1
        self.hyst_out = 0
        self.sreg = 0
        self.out = 0

    def init(self, t_now_ms: int) -> None:
        """Clear the comparator and debouncer."""
        self.hyst_out = 0
        self.sreg = 0
        self.out = 0

    def process(self, t_now_ms: int, thresh: int, hysteresis: int, value: int) -> int:
        """Compare ``value`` with the threshold and return the debounced bit."""
        biased = thresh - hysteresis if self.sreg & 1 else thresh + hysteresis
        self.hyst_out = 1 if value > biased else 0

        self.sreg = ((self.sreg << 1) & self._mask) | self.hyst_out
        if self.sreg == 0:
            self.out = 0
        elif self.sreg == self._mask:
            self.out = 1
        return self.out


class Binarizer:
    """Turns the detector envelope into a pulse train, tracking level and quality."""

    PEAK_HISTORY_STEP_MS = 100
    PEAK_HISTORY_SIZE = (1000 + PEAK_HISTORY_STEP_MS - 1) // PEAK_HISTORY_STEP_MS

    HYSTERESIS_RATIO = ONE // 10

    BEAT_DET_AMP_SCOPE_PERIOD_MS = 100
    BEAT_DET_AMP_SCOPE_RESO_MS = 20
    BEAT_DET_PERIOD_MS = 3000
    BEAT_DET_EDGE_THRESH = 20

    PULSE_WIDTH_LIMIT_MS = 1000

    QUALITY_HISTORY_SIZE = 100
    QUALITY_HISTORY_STEP_MS = 1000 // QUALITY_HISTORY_SIZE

    def __init__(self) -> None:
        self.det_base = 0
        self.det_peak = 0
        self.hyst_out = 0
        self._base_history = RingHistory(self.PEAK_HISTORY_SIZE)
        self._peak_history = RingHistory(self.PEAK_HISTORY_SIZE)
        self._before_smooth = HysteresisDebouncer()
        self._after_smooth = HysteresisDebouncer()
        self._thresh_update_timer = LazyTimer(self.PEAK_HISTORY_STEP_MS)
        self._beat_amp_scope = RingScope(
            ONE // 2, self.BEAT_DET_AMP_SCOPE_PERIOD_MS, self.BEAT_DET_AMP_SCOPE_RESO_MS
        )
        self._beat_amp_peak_hold = PeakHold()
        self._beat_det_timer = LazyTimer(self.BEAT_DET_PERIOD_MS)
        self._pulse_width_limit_timer = LazyTimer(self.PULSE_WIDTH_LIMIT_MS, auto_loop=False)
        self._quality_history_update_timer = LazyTimer(self.QUALITY_HISTORY_STEP_MS)
        self._quality_history = RingHistory(self.QUALITY_HISTORY_SIZE)
        self.init(0)

    def init(self, t_now_ms: int) -> None:
        """Reset thresholds, beat detection, pulse limiting and quality tracking."""
        self._base_history.clear(ONE // 2)
        self._peak_history.clear(ONE // 2)

        self.thresh = ONE // 2
        self.hysteresis = trunc_div((ONE // 4) * self.HYSTERESIS_RATIO, ONE)

        self._accum_base = _INT32_MAX
        self._accum_peak = 0

        self.beat_det_last_in_dig = 0
        self.beat_det_edge_count = 0
        self._beat_amp_scope.clear(t_now_ms)
        self.beat_amp = 0
        self._beat_amp_peak_hold.clear()
        self.beat_amp_hold = 0
        self.beat_detected = False
        self.beat_det_out = 0

        self.pulse_width_limited_out = 0

        self._thresh_update_timer.start(t_now_ms)
        self._beat_det_timer.start(t_now_ms)
        self._pulse_width_limit_timer.set_expired()

        self._accum_quality_value = 0
        self._accum_quality_count = 0
        self._quality_history_update_timer.start(t_now_ms)
        self._quality_history.clear(0)
        self.quality = 0

    def process(self, t_now_ms: int, value: int) -> int:
        """Feed one envelope sample; returns the binary output."""
        self._accum_base = min(self._accum_base, value)
        self._accum_peak = max(self._accum_peak, value)

        # Beat amplitude.
        self._beat_amp_scope.write(t_now_ms, value)
        self.beat_amp = self._beat_amp_scope.total_amplitude()
        self._beat_amp_peak_hold.enter(self.beat_amp)

        # Beat edges.
        self._before_smooth.process(t_now_ms, self.thresh, self.hysteresis, value)
        self.hyst_out = self._before_smooth.hyst_out
        if self.hyst_out != self.beat_det_last_in_dig:
            self.beat_det_edge_count += 1
        self.beat_det_last_in_dig = self.hyst_out

        if self._beat_det_timer.is_expired(t_now_ms):
            self.beat_detected = self.beat_det_edge_count >= self.BEAT_DET_EDGE_THRESH
            self.beat_det_edge_count = 0
            self.beat_amp_hold = self._beat_amp_peak_hold.amplitude()
            self._beat_amp_peak_hold.clear()

        # While beating, the beat amplitude stands in for the envelope.
        if self.beat_detected:
            value = self.det_base + _ratio(
                self.beat_amp * (self.det_peak - self.det_base), self.beat_amp_hold
            )
        self.beat_det_out = value

        anti_chat_out = self._after_smooth.process(t_now_ms, self.thresh, self.hysteresis, value)

        # Pulse width limit.
        if not anti_chat_out:
            self.pulse_width_limited_out = 0
            self._pulse_width_limit_timer.start(t_now_ms)
        elif self._pulse_width_limit_timer.is_expired(t_now_ms):
            self.pulse_width_limited_out = 0
        else:
            self.pulse_width_limited_out = 1

        if self._thresh_update_timer.is_expired(t_now_ms):
            self.update_thresh()

        # Signal quality.
        level_range = self.det_peak - self.det_base
        mid = trunc_div(self.det_peak + self.det_base, 2)
        qty = clip(0, ONE, _ratio(abs(value - mid) * ONE, trunc_div(level_range, 2)))
        self._accum_quality_value += qty
        self._accum_quality_count += 1
        if self._quality_history_update_timer.is_expired(t_now_ms):
            self._quality_history.push(
                trunc_div(self._accum_quality_value, self._accum_quality_count)
            )
            self.quality = self._quality_history.ave()
            self._accum_quality_value = 0
            self._accum_quality_count = 0

        return self.pulse_width_limited_out

    def update_thresh(self) -> None:
        """Commit the current window's extremes and recompute the threshold."""
        self._base_history.push(self._accum_base)
        self._peak_history.push(self._accum_peak)
        self._accum_base = _INT32_MAX
        self._accum_peak = 0

        if len(self._base_history) > 0:
            self.det_base = self._base_history.min()
            self.det_peak = self._peak_history.max()

        self.thresh = trunc_div(self.det_base + self.det_peak, 2)
        self.hysteresis = trunc_div((self.det_peak - self.det_base) * self.HYSTERESIS_RATIO, ONE)


class Rf:
    """Complete RF chain from raw ADC blocks to a digital pulse signal."""

    def __init__(self) -> None:
        self.det_delay_ms = 1000 * DETECTION_BLOCK_SIZE // DETECTION_INPUT_SPS
        self.anti_chat_delay_ms = self.det_delay_ms * (HysteresisDebouncer.ANTI_CHAT_CYCLES - 1)
        self.pre_bias = DcBias(DETECTION_OUTPUT_SPS, ONE // 2)
        self.pre_agc = Agc(DETECTION_OUTPUT_SPS, ONE // 2, ONE // 10, ONE * 100)
        self.det = QuadDetector()
        self.bin = Binarizer()
        self.status = RfStatus(det_delay_ms=self.det_delay_ms, anti_chat_delay_ms=self.anti_chat_delay_ms)
        self._agc_out: list[int] = []

    def init(self, freq: Frequency, t_now_ms: int) -> None:
        """Reset every stage and select the carrier."""
        self.pre_bias.reset()
        self.pre_agc.reset()
        self.det.init(freq, t_now_ms)
        self.bin.init(t_now_ms)
        self.status.reset(t_now_ms, self.det_delay_ms, self.anti_chat_delay_ms)

    def process(self, t_now_ms: int, samples: Sequence[int]) -> int:
        """Process one block of ADC samples; returns the digital output bit."""
        if not samples:
            raise ValueError("samples must not be empty")
        self._pre_bias_agc(samples)

        det_anl_out_raw = self.det.process(t_now_ms, self._agc_out)
        out = self.bin.process(t_now_ms, det_anl_out_raw)

        b = self.bin
        sts = self.status
        level_range = b.det_peak - b.det_base
        sts.timestamp_ms = t_now_ms
        sts.det_anl_out_raw = det_anl_out_raw
        sts.det_anl_out_base = b.det_base
        sts.det_anl_out_peak = b.det_peak
        sts.det_anl_out_norm = _ratio((det_anl_out_raw - b.det_base) * ONE, level_range)
        sts.det_anl_out_beat_det = _ratio((b.beat_det_out - b.det_base) * ONE, level_range)
        sts.beat_detected = b.beat_detected
        sts.hyst_dig_out = b.hyst_out
        sts.signal_quality = b.quality
        sts.digital_out = out
        return out

    def _pre_bias_agc(self, samples: Sequence[int]) -> None:
        bias = self.pre_bias.bias
        gain = self.pre_agc.gain
        total = 0
        amp = 0
        agc_out = []
        for sample in samples:
            total += sample
            biased = sample - bias
            amp += abs(biased)
            agc_out.append(trunc_div(biased * gain, ONE))
        self._agc_out = agc_out

        count = len(samples)
        ave = round_div(total, count)
        amp = round_div(amp, count)
        amp = round_div(amp * _HALF_PI, ONE)

        self.pre_bias.process(ave)
        self.pre_agc.process(amp)

        self.status.adc_amplitude_raw = amp
        self.status.adc_amplitude_peak = self.pre_agc.amplitude_peak
        self.status.agc_gain = self.pre_agc.gain