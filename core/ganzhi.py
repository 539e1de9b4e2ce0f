"""Sexagenary (stem-branch) labels and the day-of-year solar-term approximation."""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import UTC, date, datetime, timedelta
from typing import NamedTuple, Tuple

__all__ = [
    "HEAVENLY_STEMS",
    "EARTHLY_BRANCHES",
    "SOLAR_TERMS",
    "GanZhi",
    "SolarTerm",
    "CalendarLabels",
    "as_utc",
    "year_label",
    "month_label",
    "day_label",
    "solar_term_index",
    "solar_term",
    "solar_term_start",
    "calendar_labels",
]

HEAVENLY_STEMS: Tuple[str, ...] = ("甲", "乙", "丙", "丁", "戊", "己", "庚", "辛", "壬", "癸")
EARTHLY_BRANCHES: Tuple[str, ...] = (
    "子", "丑", "寅", "卯", "辰", "巳", "午", "未", "申", "酉", "戌", "亥",
)

CYCLE_LENGTH = 60
YEAR_EPOCH = 4  # 4 CE is 甲子.
DAY_ANCHOR = datetime(1949, 10, 1, tzinfo=UTC)
DAY_ANCHOR_OFFSET = 10
TERMS_PER_YEAR = 24
DAYS_PER_YEAR = 365

_ONE_DAY = timedelta(days=1)


class GanZhi(NamedTuple):
    """A stem-branch pair; stem and branch always share parity."""

    stem: int
    branch: int

    @classmethod
    def from_offset(cls, offset: int) -> "GanZhi":
        offset %= CYCLE_LENGTH
        return cls(offset % 10, offset % 12)

    @classmethod
    def from_name(cls, name: str) -> "GanZhi":
        """Parse a two-character name such as ``甲子``.

        Raises
        ------
        ValueError
            If *name* is not one of the sixty cycle names.
        """

        if not isinstance(name, str) or len(name) != 2:
            raise ValueError(f"Not a sexagenary name: {name!r}")
        try:
            stem = HEAVENLY_STEMS.index(name[0])
            branch = EARTHLY_BRANCHES.index(name[1])
        except ValueError as exc:
            raise ValueError(f"Not a sexagenary name: {name!r}") from exc
        if (stem - branch) % 2:
            raise ValueError(f"Stem and branch parity differ in {name!r}")
        return cls(stem, branch)

    @property
    def name(self) -> str:
        return HEAVENLY_STEMS[self.stem] + EARTHLY_BRANCHES[self.branch]

    @property
    def cycle_index(self) -> int:
        # Solves i = stem (mod 10), i = branch (mod 12).
        return (6 * self.stem - 5 * self.branch) % CYCLE_LENGTH

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class SolarTerm:
    """One of the 24 terms; ``longitude_deg`` is its nominal solar longitude."""

    index: int
    name: str
    code: str
    longitude_deg: float


_TERM_TABLE = (
    ("立春", "J1", 315.0),
    ("雨水", "Z1", 330.0),
    ("惊蛰", "J2", 345.0),
    ("春分", "Z2", 0.0),
    ("清明", "J3", 15.0),
    ("谷雨", "Z3", 30.0),
    ("立夏", "J4", 45.0),
    ("小满", "Z4", 60.0),
    ("芒种", "J5", 75.0),
    ("夏至", "Z5", 90.0),
    ("小暑", "J6", 105.0),
    ("大暑", "Z6", 120.0),
    ("立秋", "J7", 135.0),
    ("处暑", "Z7", 150.0),
    ("白露", "J8", 165.0),
    ("秋分", "Z8", 180.0),
    ("寒露", "J9", 195.0),
    ("霜降", "Z9", 210.0),
    ("立冬", "J10", 225.0),
    ("小雪", "Z10", 240.0),
    ("大雪", "J11", 255.0),
    ("冬至", "Z11", 270.0),
    ("小寒", "J12", 285.0),
    ("大寒", "Z12", 300.0),
)

SOLAR_TERMS: Tuple[SolarTerm, ...] = tuple(
    SolarTerm(index=i, name=name, code=code, longitude_deg=lon)
    for i, (name, code, lon) in enumerate(_TERM_TABLE)
)


@dataclass(frozen=True)
class CalendarLabels:
    """Year/month/day labels and the current term for one instant."""

    year: GanZhi
    month: GanZhi
    day: GanZhi
    solar_term_index: int

    @property
    def solar_term(self) -> SolarTerm:
        return SOLAR_TERMS[self.solar_term_index]


def as_utc(moment: datetime) -> datetime:
    """Return *moment* as an aware datetime; naive values are taken as UTC."""

    if moment.tzinfo is None:
        return moment.replace(tzinfo=UTC)
    return moment


def year_label(year: int) -> GanZhi:
    return GanZhi.from_offset(year - YEAR_EPOCH)


def month_label(year: int, month: int) -> GanZhi:
    """Month pillar from the year stem and the civil month number.

    This is the simplified scheme used by the visualization: the month
    boundaries follow the civil calendar rather than the solar terms.
    """

    year_stem = (year - YEAR_EPOCH) % 10
    stem = ((year_stem % 5) * 2 + (month - 1)) % 10
    branch = (month - 1) % 12
    return GanZhi(stem, branch)


def day_label(moment: datetime) -> GanZhi:
    days = (as_utc(moment) - DAY_ANCHOR) // _ONE_DAY
    return GanZhi.from_offset(days + DAY_ANCHOR_OFFSET)


def _day_of_year(moment: datetime) -> int:
    # Days since "January 0", i.e. midnight opening Dec 31 of the prior year,
    # in the moment's own civil time.
    jan0 = datetime(moment.year, 1, 1, tzinfo=moment.tzinfo) - _ONE_DAY
    return (moment - jan0) // _ONE_DAY


def solar_term_index(moment: datetime) -> int:
    """Linear day-of-year approximation of the current solar term (0 = 立春)."""

    return (_day_of_year(moment) * TERMS_PER_YEAR // DAYS_PER_YEAR) % TERMS_PER_YEAR


def solar_term(moment: datetime) -> SolarTerm:
    return SOLAR_TERMS[solar_term_index(moment)]


def solar_term_start(year: int, index: int) -> date:
    """First civil date of *year* on which :func:`solar_term_index` equals *index*."""

    if not 0 <= index < TERMS_PER_YEAR:
        raise ValueError(f"Solar term index out of range: {index}")
    day_of_year = max(1, math.ceil(index * DAYS_PER_YEAR / TERMS_PER_YEAR))
    return date(year, 1, 1) + timedelta(days=day_of_year - 1)


def calendar_labels(moment: datetime) -> CalendarLabels:
    return CalendarLabels(
        year=year_label(moment.year),
        month=month_label(moment.year, moment.month),
        day=day_label(moment),
        solar_term_index=solar_term_index(moment),
    )
