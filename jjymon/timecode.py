"""JJY time-code frame parsing and calendar helpers."""

from collections.abc import Sequence
from dataclasses import dataclass
from enum import IntEnum, IntFlag

from .phase import JjyBit

MONTH_OFFSET = 1
DAY_OFFSET = 1

_POSITION_MARKERS = (9, 19, 29, 39, 49, 59)


class DayOfWeek(IntEnum):
    """Day of the week as carried in the time code."""

    SUNDAY = 0
    MONDAY = 1
    TUESDAY = 2
    WEDNESDAY = 3
    THURSDAY = 4
    FRIDAY = 5
    SATURDAY = 6


class LeapSecondType(IntEnum):
    """Kind of pending leap second."""

    SKIP = 0
    INSERT = 1


class ParseError(IntFlag):
    """Problems found while parsing a frame; ``NONE`` means success."""

    NONE = 0
    EMPTY = 1 << 0
    BAD_MARKER = 1 << 1
    BAD_POSITION_MARKER = 1 << 2
    BAD_SECOND = 1 << 3
    BAD_MINUTE = 1 << 4
    BAD_HOUR = 1 << 5
    BAD_DAY_OR_YEAR = 1 << 6
    BAD_HOUR_PARITY = 1 << 7
    BAD_MINUTE_PARITY = 1 << 8
    BAD_YEAR_OF_CENTURY = 1 << 9
    BAD_DAY_OF_WEEK = 1 << 10
    BAD_LS1 = 1 << 11
    BAD_LS2 = 1 << 12
    BAD_RESERVED_BITS = 1 << 13


_DAYS_IN_MONTH = (31, 28, 31, 30, 31, 30, 31, 31, 30, 31, 30, 31)


def is_leap_year(year: int) -> bool:
    """Gregorian leap-year rule."""
    return year % 400 == 0 or (year % 100 != 0 and year % 4 == 0)


def days_in_month(month: int, leap_year: bool) -> int:
    """Number of days in ``month``; raises ValueError for an invalid month."""
    index = month - MONTH_OFFSET
    if not 0 <= index < 12:
        raise ValueError(f"invalid month: {month}")
    if index == 1 and leap_year:
        return 29
    return _DAYS_IN_MONTH[index]


def separate_day_of_year(day_of_year: int, leap_year: bool) -> tuple[int, int]:
    """Split a day of the year into ``(month, day)``."""
    d = day_of_year - DAY_OFFSET
    if d >= 0:
        for month in range(MONTH_OFFSET, MONTH_OFFSET + 12):
            length = days_in_month(month, leap_year)
            if d < length:
                return month, DAY_OFFSET + d
            d -= length
    raise ValueError(f"invalid day of year: {day_of_year}")


def read_int(
    bits: Sequence[JjyBit], offset: int, width: int, min_val: int, max_val: int
) -> tuple[int, bool]:
    """Read ``width`` bits MSB first; returns ``(value, ok)``.

    ``ok`` is False when a bit is neither ZERO nor ONE or the value is out of range.
    """
    if offset < 0 or offset + width > len(bits):
        raise ValueError("bit field lies outside the frame")
    value = 0
    ok = True
    for bit in bits[offset : offset + width]:
        value <<= 1
        if bit == JjyBit.ONE:
            value |= 1
        elif bit != JjyBit.ZERO:
            ok = False
    if value < min_val or max_val < value:
        ok = False
    return value, ok


def check_even_parity(
    bits: Sequence[JjyBit], data_offset: int, data_width: int, parity_offset: int
) -> bool:
    """Whether the data bits plus the parity bit hold an even number of ones."""
    data, data_ok = read_int(bits, data_offset, data_width, 0, (1 << data_width) - 1)
    parity, parity_ok = read_int(bits, parity_offset, 1, 0, 1)
    return data_ok and parity_ok and (bin(data).count("1") + parity) % 2 == 0


@dataclass
class JjyDateTime:
    """Date and time as broadcast, plus leap-second information."""

    year: int = 2000
    month: int = MONTH_OFFSET
    day: int = DAY_OFFSET
    hours: int = 0
    minutes: int = 0
    second: int = 0
    day_of_week: DayOfWeek = DayOfWeek.SATURDAY
    leap_second_at_end_of_month: bool = False
    leap_second_type: LeapSecondType = LeapSecondType.SKIP

    def parse(self, bits: Sequence[JjyBit], year_offset: int = 2000) -> ParseError:
        """Decode a 60-bit frame into this object; returns the problems found."""
        if len(bits) < 60:
            raise ValueError("a frame holds 60 bits")
        flags = ParseError.NONE

        if bits[0] != JjyBit.MARKER:
            flags |= ParseError.BAD_MARKER
        if any(bits[pos] != JjyBit.MARKER for pos in _POSITION_MARKERS):
            flags |= ParseError.BAD_POSITION_MARKER

        tens, ok_tens = read_int(bits, 1, 3, 0, 5)
        units, ok_units = read_int(bits, 4, 5, 0, 9)
        self.minutes = tens * 10 + units
        if not (ok_tens and ok_units):
            flags |= ParseError.BAD_MINUTE

        tens, ok_tens = read_int(bits, 10, 4, 0, 2)
        units, ok_units = read_int(bits, 14, 5, 0, 9)
        self.hours = tens * 10 + units
        if not (ok_tens and ok_units) or self.hours > 23:
            flags |= ParseError.BAD_HOUR

        tens, ok_tens = read_int(bits, 41, 4, 0, 9)
        units, ok_units = read_int(bits, 45, 4, 0, 9)
        self.year = year_offset + tens * 10 + units
        if not (ok_tens and ok_units):
            flags |= ParseError.BAD_YEAR_OF_CENTURY
        leap_year = is_leap_year(self.year)

        hundreds, ok_h = read_int(bits, 20, 4, 0, 3)
        tens, ok_t = read_int(bits, 24, 5, 0, 9)
        units, ok_u = read_int(bits, 30, 4, 0, 9)
        day_of_year = hundreds * 100 + tens * 10 + units
        date_ok = ok_h and ok_t and ok_u
        if 1 <= day_of_year <= (366 if leap_year else 365):
            self.month, self.day = separate_day_of_year(day_of_year, leap_year)
        else:
            date_ok = False
        if bits[34] != JjyBit.ZERO or bits[35] != JjyBit.ZERO:
            date_ok = False
        if not date_ok:
            flags |= ParseError.BAD_DAY_OR_YEAR

        if not check_even_parity(bits, 12, 7, 36):
            flags |= ParseError.BAD_HOUR_PARITY
        if not check_even_parity(bits, 1, 8, 37):
            flags |= ParseError.BAD_MINUTE_PARITY

        dow, ok = read_int(bits, 50, 3, 0, 6)
        if dow <= DayOfWeek.SATURDAY:
            self.day_of_week = DayOfWeek(dow)
        if not ok:
            flags |= ParseError.BAD_DAY_OF_WEEK

        ls1, ok = read_int(bits, 53, 1, 0, 1)
        self.leap_second_at_end_of_month = bool(ls1)
        if not ok:
            flags |= ParseError.BAD_LS1

        ls2, ok = read_int(bits, 54, 1, 0, 1)
        self.leap_second_type = LeapSecondType.SKIP if ls2 == 0 else LeapSecondType.INSERT
        if not ok:
            flags |= ParseError.BAD_LS2

        reserved_ok = all(
            read_int(bits, offset, width, 0, max_val)[1]
            for offset, width, max_val in ((38, 1, 1), (40, 1, 1), (55, 4, 0))
        )
        if not reserved_ok:
            flags |= ParseError.BAD_RESERVED_BITS

        self.second = 0
        return flags

    def add_seconds(self, seconds: int) -> None:
        """Advance the date and time by a non-negative number of seconds."""
        if seconds < 0:
            raise ValueError("seconds must not be negative")
        s = seconds + self.second
        self.second = s % 60
        s = s // 60 + self.minutes
        self.minutes = s % 60
        s = s // 60 + self.hours
        self.hours = s % 24
        s = s // 24 + (self.day - DAY_OFFSET)

        while True:
            length = days_in_month(self.month, is_leap_year(self.year))
            if s < length:
                self.day = s + DAY_OFFSET
                return
            s -= length
            if self.month < MONTH_OFFSET + 11:
                self.month += 1
            else:
                self.month = MONTH_OFFSET
                self.year += 1