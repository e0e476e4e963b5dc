import math

import pytest

from jjymon.phase import ONE, Frequency
from jjymon.quad_detector import DETECTION_BLOCK_SIZE
from jjymon.radio import Binarizer, HysteresisDebouncer, Rf, RfStatus

HIGH = 3000
LOW = 500


def _square(t_ms):
    return HIGH if t_ms % 1000 < 200 else LOW


def _carrier_block(amplitude, size=DETECTION_BLOCK_SIZE):
    return [
        2048 + round(amplitude * math.sin(2 * math.pi * 60000 * i / 480000))
        for i in range(size)
    ]


def test_rf_status_reset_zeroes_and_records_delays():
    sts = RfStatus(agc_gain=5, det_anl_out_raw=7, beat_detected=True, digital_out=1)
    sts.reset(123, 4, 8)
    assert sts.timestamp_ms == 123
    assert sts.det_delay_ms == 4
    assert sts.anti_chat_delay_ms == 8
    assert sts.agc_gain == 0
    assert sts.det_anl_out_raw == 0
    assert sts.beat_detected is False
    assert sts.digital_out == 0


def test_debouncer_needs_three_consecutive_highs():
    deb = HysteresisDebouncer()
    outs = [deb.process(t, 100, 0, 200) for t in range(3)]
    assert outs == [0, 0, 1]
    outs = [deb.process(t, 100, 0, 0) for t in range(3)]
    assert outs == [1, 1, 0]


def test_debouncer_hysteresis_depends_on_last_bit():
    fresh = HysteresisDebouncer()
    fresh.process(0, 100, 10, 95)
    assert fresh.hyst_out == 0

    primed = HysteresisDebouncer()
    primed.process(0, 100, 10, 200)
    primed.process(1, 100, 10, 95)
    assert primed.hyst_out == 1


def test_debouncer_init_clears_state():
    deb = HysteresisDebouncer()
    for t in range(3):
        deb.process(t, 0, 0, 10)
    deb.init(0)
    assert (deb.sreg, deb.out, deb.hyst_out) == (0, 0, 0)


def test_binarizer_initial_state():
    b = Binarizer()
    b.init(0)
    assert b.thresh == ONE // 2
    assert b.quality == 0
    assert b.beat_detected is False


def test_binarizer_follows_square_wave():
    b = Binarizer()
    b.init(0)
    outputs = {}
    for t in range(0, 5000, 10):
        outputs[t] = b.process(t, _square(t))
    assert b.det_base == LOW
    assert b.det_peak == HIGH
    assert b.thresh == (LOW + HIGH) // 2
    for second in (3000, 4000):
        assert outputs[second + 100] == 1
        assert outputs[second + 500] == 0
        assert outputs[second + 900] == 0
    assert b.quality == ONE
    assert b.beat_detected is False


def test_binarizer_detects_beat_on_fast_toggling():
    b = Binarizer()
    b.init(0)
    for t in range(0, 3200, 10):
        b.process(t, HIGH if (t // 10) % 2 else LOW)
    assert b.beat_detected is True


def test_binarizer_output_ends_on_long_high():
    b = Binarizer()
    b.init(0)
    outputs = [b.process(t, LOW if t < 1000 else HIGH) for t in range(0, 3000, 10)]
    assert outputs[50] == 0
    assert outputs[150] == 1
    assert outputs[250] == 0


def test_rf_pipeline_delays():
    rf = Rf()
    assert rf.det_delay_ms == 10
    assert rf.anti_chat_delay_ms == 20
    assert rf.status.det_delay_ms == rf.det_delay_ms


def test_rf_constant_input_gives_zero_envelope():
    rf = Rf()
    rf.init(Frequency.WEST_60KHZ, 0)
    rf.process(10, [ONE // 2] * DETECTION_BLOCK_SIZE)
    assert rf.status.timestamp_ms == 10
    assert rf.status.det_anl_out_raw == 0
    assert rf.status.adc_amplitude_raw == 0
    assert rf.status.agc_gain == ONE * 100


def test_rf_stronger_carrier_gives_larger_envelope():
    weak = Rf()
    weak.init(Frequency.WEST_60KHZ, 0)
    weak.process(10, _carrier_block(500))
    strong = Rf()
    strong.init(Frequency.WEST_60KHZ, 0)
    strong.process(10, _carrier_block(1000))
    assert weak.status.det_anl_out_raw > 0
    assert strong.status.det_anl_out_raw > weak.status.det_anl_out_raw
    assert strong.status.adc_amplitude_raw > weak.status.adc_amplitude_raw


def test_rf_status_tracks_agc():
    rf = Rf()
    rf.init(Frequency.WEST_60KHZ, 0)
    for t in (10, 20, 30):
        out = rf.process(t, _carrier_block(800, 800))
        assert out in (0, 1)
        assert rf.status.digital_out == out
        assert rf.status.agc_gain == rf.pre_agc.gain
        assert rf.status.adc_amplitude_peak >= rf.status.adc_amplitude_raw
    assert rf.status.det_anl_out_base == rf.bin.det_base


def test_rf_rejects_empty_block():
    rf = Rf()
    rf.init(Frequency.WEST_60KHZ, 0)
    with pytest.raises(ValueError):
        rf.process(10, [])