import calendar
import datetime

import pytest

from jjymon.phase import JjyBit
from jjymon.timecode import (
    DayOfWeek,
    JjyDateTime,
    LeapSecondType,
    ParseError,
    check_even_parity,
    days_in_month,
    is_leap_year,
    read_int,
    separate_day_of_year,
)


def _put(bits, offset, width, value):
    for i in range(width):
        bits[offset + i] = JjyBit.ONE if (value >> (width - 1 - i)) & 1 else JjyBit.ZERO


def _ones(bits, start, stop):
    return sum(1 for b in bits[start:stop] if b == JjyBit.ONE)


def _encode(dt, ls1=False, ls2=False):
    bits = [JjyBit.ZERO] * 60
    for pos in (0, 9, 19, 29, 39, 49, 59):
        bits[pos] = JjyBit.MARKER
    _put(bits, 1, 3, dt.minute // 10)
    _put(bits, 5, 4, dt.minute % 10)
    _put(bits, 12, 2, dt.hour // 10)
    _put(bits, 15, 4, dt.hour % 10)
    doy = dt.timetuple().tm_yday
    _put(bits, 22, 2, doy // 100)
    _put(bits, 25, 4, doy // 10 % 10)
    _put(bits, 30, 4, doy % 10)
    bits[36] = JjyBit.ONE if _ones(bits, 12, 19) % 2 else JjyBit.ZERO
    bits[37] = JjyBit.ONE if _ones(bits, 1, 9) % 2 else JjyBit.ZERO
    yy = dt.year % 100
    _put(bits, 41, 4, yy // 10)
    _put(bits, 45, 4, yy % 10)
    _put(bits, 50, 3, dt.isoweekday() % 7)
    bits[53] = JjyBit.ONE if ls1 else JjyBit.ZERO
    bits[54] = JjyBit.ONE if ls2 else JjyBit.ZERO
    return bits


SAMPLES = [
    datetime.datetime(2024, 2, 29, 13, 45),
    datetime.datetime(2023, 3, 1, 0, 0),
    datetime.datetime(2099, 12, 31, 23, 59),
    datetime.datetime(2000, 1, 1, 7, 8),
]


@pytest.mark.parametrize("dt", SAMPLES)
def test_parse_round_trip(dt):
    parsed = JjyDateTime()
    result = parsed.parse(_encode(dt), 2000)
    assert result == ParseError.NONE
    assert (parsed.year, parsed.month, parsed.day) == (dt.year, dt.month, dt.day)
    assert (parsed.hours, parsed.minutes, parsed.second) == (dt.hour, dt.minute, 0)
    assert parsed.day_of_week == DayOfWeek(dt.isoweekday() % 7)


def test_parse_leap_second_bits():
    parsed = JjyDateTime()
    result = parsed.parse(_encode(SAMPLES[0], ls1=True, ls2=True), 2000)
    assert result == ParseError.NONE
    assert parsed.leap_second_at_end_of_month is True
    assert parsed.leap_second_type == LeapSecondType.INSERT


def test_parse_bad_frame_marker():
    bits = _encode(SAMPLES[0])
    bits[0] = JjyBit.ZERO
    assert JjyDateTime().parse(bits, 2000) == ParseError.BAD_MARKER


def test_parse_bad_position_marker():
    bits = _encode(SAMPLES[0])
    bits[29] = JjyBit.ONE
    assert JjyDateTime().parse(bits, 2000) == ParseError.BAD_POSITION_MARKER


def test_parse_bad_minute_parity():
    bits = _encode(SAMPLES[0])
    bits[37] = JjyBit.ONE if bits[37] == JjyBit.ZERO else JjyBit.ZERO
    assert JjyDateTime().parse(bits, 2000) == ParseError.BAD_MINUTE_PARITY


def test_parse_bad_hour_parity():
    bits = _encode(SAMPLES[0])
    bits[36] = JjyBit.ONE if bits[36] == JjyBit.ZERO else JjyBit.ZERO
    assert JjyDateTime().parse(bits, 2000) == ParseError.BAD_HOUR_PARITY


def test_parse_minute_out_of_range():
    bits = _encode(SAMPLES[0])
    _put(bits, 1, 3, 6)
    assert ParseError.BAD_MINUTE in JjyDateTime().parse(bits, 2000)


def test_parse_error_bit_in_year():
    bits = _encode(SAMPLES[0])
    bits[45] = JjyBit.ERROR
    assert ParseError.BAD_YEAR_OF_CENTURY in JjyDateTime().parse(bits, 2000)


def test_parse_nonzero_filler_bits_flag_date():
    bits = _encode(SAMPLES[0])
    bits[34] = JjyBit.ONE
    assert ParseError.BAD_DAY_OR_YEAR in JjyDateTime().parse(bits, 2000)


def test_parse_day_of_year_zero():
    bits = _encode(SAMPLES[0])
    for pos in (22, 23, 25, 26, 27, 28, 30, 31, 32, 33):
        bits[pos] = JjyBit.ZERO
    assert ParseError.BAD_DAY_OR_YEAR in JjyDateTime().parse(bits, 2000)


def test_parse_reserved_bits():
    bits = _encode(SAMPLES[0])
    bits[55] = JjyBit.ONE
    assert JjyDateTime().parse(bits, 2000) == ParseError.BAD_RESERVED_BITS


def test_parse_short_frame_raises():
    with pytest.raises(ValueError):
        JjyDateTime().parse([JjyBit.MARKER] * 10, 2000)


@pytest.mark.parametrize(
    "start,seconds",
    [
        (datetime.datetime(2023, 12, 31, 23, 59, 30), 60),
        (datetime.datetime(2024, 2, 28, 23, 59, 0), 60),
        (datetime.datetime(2023, 2, 28, 23, 59, 0), 60),
        (datetime.datetime(2024, 1, 31, 12, 0, 0), 86400),
        (datetime.datetime(2024, 6, 15, 8, 30, 15), 3 * 86400 + 4000),
        (datetime.datetime(2024, 11, 30, 23, 0, 0), 3600),
    ],
)
def test_add_seconds_matches_datetime(start, seconds):
    value = JjyDateTime(
        year=start.year,
        month=start.month,
        day=start.day,
        hours=start.hour,
        minutes=start.minute,
        second=start.second,
    )
    value.add_seconds(seconds)
    expected = start + datetime.timedelta(seconds=seconds)
    assert (value.year, value.month, value.day) == (expected.year, expected.month, expected.day)
    assert (value.hours, value.minutes, value.second) == (expected.hour, expected.minute, expected.second)


def test_add_negative_seconds_raises():
    with pytest.raises(ValueError):
        JjyDateTime().add_seconds(-1)


@pytest.mark.parametrize("year", [1900, 1999, 2000, 2023, 2024, 2100, 2400])
def test_is_leap_year(year):
    assert is_leap_year(year) == calendar.isleap(year)


@pytest.mark.parametrize("year", [2023, 2024])
def test_days_in_month(year):
    for month in range(1, 13):
        assert days_in_month(month, calendar.isleap(year)) == calendar.monthrange(year, month)[1]


@pytest.mark.parametrize("month", [0, 13])
def test_days_in_month_invalid(month):
    with pytest.raises(ValueError):
        days_in_month(month, False)


@pytest.mark.parametrize("year", [2023, 2024])
def test_separate_day_of_year(year):
    leap = calendar.isleap(year)
    for doy in range(1, (366 if leap else 365) + 1):
        date = datetime.date(year, 1, 1) + datetime.timedelta(days=doy - 1)
        assert separate_day_of_year(doy, leap) == (date.month, date.day)


@pytest.mark.parametrize("doy", [0, 366])
def test_separate_day_of_year_out_of_range(doy):
    with pytest.raises(ValueError):
        separate_day_of_year(doy, False)


def test_read_int_value():
    assert read_int([JjyBit.ONE, JjyBit.ZERO, JjyBit.ONE], 0, 3, 0, 7) == (5, True)


def test_read_int_marker_is_error():
    _, ok = read_int([JjyBit.ONE, JjyBit.MARKER], 0, 2, 0, 3)
    assert ok is False


def test_read_int_range_error():
    _, ok = read_int([JjyBit.ONE, JjyBit.ONE], 0, 2, 0, 2)
    assert ok is False


def test_read_int_outside_frame():
    with pytest.raises(ValueError):
        read_int([JjyBit.ONE], 0, 2, 0, 3)


def test_check_even_parity():
    data = [JjyBit.ONE, JjyBit.ONE, JjyBit.ZERO]
    assert check_even_parity(data + [JjyBit.ZERO], 0, 3, 3)
    assert not check_even_parity(data + [JjyBit.ONE], 0, 3, 3)
    assert not check_even_parity(data + [JjyBit.ERROR], 0, 3, 3)