from jjymon.filters import Agc, AntiChattering, DcBias, Hysteresis
from jjymon.phase import ONE


def test_dc_bias_first_sample_is_zeroed():
    dc = DcBias(4, ONE // 2)
    dc.reset()
    assert dc.bias == ONE // 2
    assert dc.process(ONE // 2 + 100) == 0


def test_dc_bias_tracks_midpoint():
    dc = DcBias(4)
    dc.reset()
    dc.process(0)
    out = dc.process(100)
    assert dc.peak_lo == 0
    assert dc.peak_hi == 100
    assert 0 < dc.bias < 100
    assert out == 100 - dc.bias
    assert dc.out == out


def test_agc_initial_and_zero_input():
    agc = Agc(4)
    agc.reset()
    assert agc.gain == agc.min_gain
    assert agc.process(0) == 0
    assert agc.gain == agc.max_gain


def test_agc_normalises_peak():
    agc = Agc(4)
    agc.reset()
    out = agc.process(-ONE)
    assert agc.amplitude_peak == ONE
    assert agc.gain == ONE
    assert out == -ONE * ONE


def test_agc_gain_is_clipped():
    agc = Agc(4, min_gain=ONE // 10, max_gain=ONE * 100)
    agc.reset()
    agc.process(ONE * ONE * 10)
    assert agc.gain == ONE // 10


def test_anti_chattering_sequence():
    ac = AntiChattering(3)
    ac.reset()
    outputs = [ac.process(v) for v in [1, 1, 1, 0, 0, 0]]
    assert outputs == [0, 0, 1, 1, 1, 0]


def test_anti_chattering_ignores_glitch():
    ac = AntiChattering(3)
    ac.reset()
    outputs = [ac.process(v) for v in [1, 0, 1, 1, 0, 1]]
    assert set(outputs) == {0}


def test_hysteresis_sequence():
    hy = Hysteresis(4)
    hy.reset()
    outputs = [hy.process(v) for v in [0, 100, 0, 55, 45]]
    assert outputs == [1, 1, 0, 1, 0]
    assert hy.threshold == 50
    assert 0 < hy.hysteresis < hy.threshold
    assert hy.peak_lo == 0
    assert hy.peak_hi == 100


def test_hysteresis_reset():
    hy = Hysteresis(4, init_val=7)
    hy.process(500)
    hy.reset()
    assert hy.threshold == 7
    assert hy.out_dig == 0
    assert hy.hysteresis == 0