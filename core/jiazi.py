"""The sixty-name cycle table and its body affinities."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import datetime
from functools import lru_cache
from typing import Dict, Optional, Tuple

from .bodies import CelestialBody
from .ganzhi import CYCLE_LENGTH, YEAR_EPOCH, GanZhi

__all__ = [
    "CycleEntry",
    "CYCLE_AFFINITY",
    "generate_cycle",
    "cycle_table",
    "current_cycle",
    "anchor_year",
    "resolve_body_for_cycle_name",
    "resolve_cycle",
]

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class CycleEntry:
    label: GanZhi
    cycle_index: int
    anchor_year: int

    @property
    def name(self) -> str:
        return self.label.name


_STEM_PAIRS = ("甲乙", "丙丁", "戊己", "庚辛", "壬癸")
_BRANCH_PAIRS = ("子丑", "寅卯", "辰巳", "午未", "申酉", "戌亥")

# Names ending in 子 or 丑 go to Mercury; every other name follows its stem pair.
_STEM_PAIR_BODIES: Dict[str, CelestialBody] = {
    "甲乙": CelestialBody.mercury,
    "丙丁": CelestialBody.mars,
    "戊己": CelestialBody.saturn,
    "庚辛": CelestialBody.venus,
    "壬癸": CelestialBody.jupiter,
}


def _affinity_table() -> Dict[str, CelestialBody]:
    table: Dict[str, CelestialBody] = {}
    for stems in _STEM_PAIRS:
        for branches in _BRANCH_PAIRS:
            body = CelestialBody.mercury if branches == "子丑" else _STEM_PAIR_BODIES[stems]
            for stem, branch in zip(stems, branches):
                table[stem + branch] = body
    return table

CYCLE_AFFINITY: Dict[str, CelestialBody] = _affinity_table()
DEFAULT_BODY = CelestialBody.earth


def anchor_year(label: GanZhi, reference_year: int) -> int:
    """Most recent year not after *reference_year* whose year label is *label*."""

    candidate = YEAR_EPOCH + label.cycle_index
    candidate += (reference_year - YEAR_EPOCH) // CYCLE_LENGTH * CYCLE_LENGTH
    if candidate > reference_year:
        candidate -= CYCLE_LENGTH
    return candidate


def generate_cycle(reference_year: int) -> Tuple[CycleEntry, ...]:
    """Build the 60 entries of the cycle, anchored relative to *reference_year*."""

    entries = []
    for index in range(CYCLE_LENGTH):
        label = GanZhi.from_offset(index)
        entries.append(
            CycleEntry(label=label, cycle_index=index, anchor_year=anchor_year(label, reference_year))
        )
    return tuple(entries)


@lru_cache(maxsize=8)
def cycle_table(reference_year: int) -> Tuple[CycleEntry, ...]:
    return generate_cycle(reference_year)


def current_cycle(now: Optional[datetime] = None) -> Tuple[CycleEntry, ...]:
    """Cycle table re-based on the year of *now* (defaults to the system clock)."""

    if now is None:
        now = datetime.now()
    return cycle_table(now.year)


def resolve_body_for_cycle_name(name: str) -> CelestialBody:
    body = CYCLE_AFFINITY.get(name)
    if body is None:
        LOGGER.warning(json.dumps({"event": "cycle_affinity_fallback", "name": name}))
        return DEFAULT_BODY
    return body


def resolve_cycle(name: str, reference_year: int) -> Tuple[int, CelestialBody]:
    """Resolve *name* to ``(anchor_year, body)``.

    Raises
    ------
    ValueError
        If *name* is not one of the sixty cycle names.
    """

    label = GanZhi.from_name(name)
    return anchor_year(label, reference_year), resolve_body_for_cycle_name(label.name)
