"""Everything the scene needs for one instant: world positions, labels and term markers."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Dict, Optional, Tuple

from .astro import horizon_positions
from .bodies import CelestialBody
from .ganzhi import SOLAR_TERMS, CalendarLabels, SolarTerm, calendar_labels
from .locations import Observer
from .orbits import Position3, positions, solar_term_markers

__all__ = ["PositionMode", "TermMarker", "Snapshot", "compute_snapshot"]

LOGGER = logging.getLogger(__name__)


class PositionMode(str, Enum):
    """How body positions are derived."""

    orbital = "orbital"
    horizon = "horizon"


@dataclass(frozen=True)
class TermMarker:
    term: SolarTerm
    position: Position3
    current: bool

    @property
    def label(self) -> str:
        return f"{self.term.name}(当前)" if self.current else self.term.name


@dataclass(frozen=True)
class Snapshot:
    moment: datetime
    mode: PositionMode
    labels: CalendarLabels
    bodies: Dict[CelestialBody, Position3]
    skipped: Tuple[CelestialBody, ...]
    term_markers: Tuple[TermMarker, ...]

    def focus_point(self, body: CelestialBody) -> Optional[Position3]:
        return self.bodies.get(body)


def compute_snapshot(
    moment: datetime,
    observer: Optional[Observer] = None,
    mode: PositionMode = PositionMode.orbital,
) -> Snapshot:
    """Compute the world state at *moment*.

    The Moon is composited onto Earth here. Bodies whose coordinates are not
    finite are left out of ``bodies`` and listed in ``skipped`` so the frame
    can still be drawn.

    Raises
    ------
    ValueError
        If horizon mode is requested without an observer.
    """

    mode = PositionMode(mode)
    if mode is PositionMode.horizon:
        if observer is None:
            raise ValueError("horizon mode requires an observer location")
        raw = horizon_positions(moment, observer)
    else:
        raw = positions(moment)

    world = dict(raw)
    world[CelestialBody.moon] = raw[CelestialBody.moon].translated(raw[CelestialBody.earth])

    bodies: Dict[CelestialBody, Position3] = {}
    skipped = []
    for body, point in world.items():
        if point.is_finite():
            bodies[body] = point
        else:
            skipped.append(body)
    if skipped:
        LOGGER.warning(
            json.dumps(
                {
                    "event": "bodies_skipped",
                    "moment": moment.isoformat(),
                    "bodies": [body.value for body in skipped],
                }
            )
        )

    labels = calendar_labels(moment)
    markers = tuple(
        TermMarker(term=term, position=point, current=term.index == labels.solar_term_index)
        for term, point in zip(SOLAR_TERMS, solar_term_markers())
    )
    return Snapshot(
        moment=moment,
        mode=mode,
        labels=labels,
        bodies=bodies,
        skipped=tuple(skipped),
        term_markers=markers,
    )
