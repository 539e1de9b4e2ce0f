"""Circular orbit model: angular position as a linear function of time."""

from __future__ import annotations

import json
import logging
import math
from datetime import UTC, datetime, timedelta
from typing import Dict, List, NamedTuple, Union

import numpy as np

from .bodies import ORBITING_BODIES, ORBITS, CelestialBody, OrbitalParameters, parse_body

__all__ = [
    "REFERENCE_EPOCH",
    "Position3",
    "days_since_epoch",
    "orbital_parameters",
    "position",
    "position_from_days",
    "positions",
    "orbit_path",
    "solar_term_markers",
]

LOGGER = logging.getLogger(__name__)

REFERENCE_EPOCH = datetime(2000, 1, 1, tzinfo=UTC)
TWO_PI = 2.0 * math.pi

BodyLike = Union[CelestialBody, str]


class Position3(NamedTuple):
    x: float
    y: float
    z: float

    def translated(self, other: "Position3") -> "Position3":
        return Position3(self.x + other[0], self.y + other[1], self.z + other[2])

    @property
    def norm(self) -> float:
        return math.sqrt(self.x * self.x + self.y * self.y + self.z * self.z)

    def is_finite(self) -> bool:
        return math.isfinite(self.x) and math.isfinite(self.y) and math.isfinite(self.z)


ORIGIN = Position3(0.0, 0.0, 0.0)


def days_since_epoch(moment: datetime) -> float:
    """Signed fractional days between *moment* and :data:`REFERENCE_EPOCH`."""

    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=UTC)
    return (moment - REFERENCE_EPOCH) / timedelta(days=1)


def orbital_parameters(body: BodyLike) -> OrbitalParameters:
    """Look up *body*; unknown identifiers fall back to Earth's orbit."""

    member = parse_body(body)
    params = ORBITS.get(member) if member is not None else None
    if params is None:
        LOGGER.warning(
            json.dumps({"event": "orbit_fallback", "body": str(body), "fallback": "earth"})
        )
        return ORBITS[CelestialBody.earth]
    return params


def position_from_days(body: BodyLike, days: float) -> Position3:
    if parse_body(body) is CelestialBody.sun:
        return ORIGIN
    params = orbital_parameters(body)
    angle = days / params.period_days * TWO_PI
    # Non-finite days propagate as NaN coordinates instead of raising.
    with np.errstate(invalid="ignore"):
        x, z = np.cos(angle), np.sin(angle)
    return Position3(float(params.radius_units * x), 0.0, float(params.radius_units * z))


def position(body: BodyLike, moment: datetime) -> Position3:
    """Position of *body* at *moment* in scene units.

    The Sun sits at the origin. The Moon is returned relative to Earth;
    callers add Earth's position to place it in the scene.
    """

    return position_from_days(body, days_since_epoch(moment))


def positions(moment: datetime) -> Dict[CelestialBody, Position3]:
    """All orbiting bodies at *moment*, Moon still relative to Earth."""

    days = days_since_epoch(moment)
    periods = np.array([ORBITS[body].period_days for body in ORBITING_BODIES])
    radii = np.array([ORBITS[body].radius_units for body in ORBITING_BODIES])
    angles = days / periods * TWO_PI
    xs = radii * np.cos(angles)
    zs = radii * np.sin(angles)
    result = {CelestialBody.sun: ORIGIN}
    for body, x, z in zip(ORBITING_BODIES, xs, zs):
        result[body] = Position3(float(x), 0.0, float(z))
    return result


def _ring(radius: float, count: int, closed: bool) -> List[Position3]:
    stop = count + 1 if closed else count
    angles = np.arange(stop) / count * TWO_PI
    return [
        Position3(float(radius * np.cos(a)), 0.0, float(radius * np.sin(a))) for a in angles
    ]


def orbit_path(body: BodyLike, segments: int = 128) -> List[Position3]:
    """Closed polyline (first point repeated last) tracing the orbit of *body*."""

    if segments < 3:
        raise ValueError("segments must be at least 3")
    return _ring(orbital_parameters(body).radius_units, segments, closed=True)


def solar_term_markers(radius: float | None = None) -> List[Position3]:
    """24 marker points on Earth's orbit, term ``i`` at angle ``i / 24 * 2pi``."""

    if radius is None:
        radius = ORBITS[CelestialBody.earth].radius_units
    return _ring(radius, 24, closed=False)
