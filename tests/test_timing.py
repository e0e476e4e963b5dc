from jjymon.timing import LazyTimer


def test_fresh_timer_expires_immediately_and_rearms():
    timer = LazyTimer(10)
    assert timer.is_expired(0)
    assert not timer.is_expired(5)
    assert timer.is_expired(10)


def test_start_sets_next_expiry():
    timer = LazyTimer(10)
    timer.start(100)
    assert not timer.is_expired(109)
    assert timer.is_expired(110)


def test_start_with_phase():
    timer = LazyTimer(10)
    timer.start(100, phase=3)
    assert not timer.is_expired(106)
    assert timer.is_expired(107)


def test_late_check_catches_up():
    timer = LazyTimer(10)
    timer.start(0)
    assert timer.is_expired(1000)
    assert not timer.is_expired(1000)
    assert timer.is_expired(1001)


def test_one_shot_stays_expired():
    timer = LazyTimer(10, auto_loop=False)
    timer.start(0)
    assert not timer.is_expired(9)
    assert timer.is_expired(10)
    assert timer.is_expired(20)
    assert timer.t_next == 10


def test_set_expired():
    timer = LazyTimer(50, auto_loop=False)
    timer.start(1000)
    timer.set_expired()
    assert timer.is_expired(0)


def test_elapsed():
    timer = LazyTimer(10)
    timer.start(50)
    assert timer.elapsed(50) == 0
    assert timer.elapsed(57) == 7


def test_phase_folds_into_period():
    timer = LazyTimer(10)
    timer.start(0)
    assert timer.phase(25) == 5
    assert 0 <= timer.phase(123) < timer.period