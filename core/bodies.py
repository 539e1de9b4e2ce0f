"""Tracked bodies and their circular-orbit parameters."""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional


class CelestialBody(str, Enum):
    """Enumeration of the bodies shown in the orrery."""

    sun = "sun"
    mercury = "mercury"
    venus = "venus"
    earth = "earth"
    moon = "moon"
    mars = "mars"
    jupiter = "jupiter"
    saturn = "saturn"

    @property
    def display_name(self) -> str:
        return DISPLAY_NAMES[self]


DISPLAY_NAMES: Dict[CelestialBody, str] = {
    CelestialBody.sun: "太阳",
    CelestialBody.mercury: "水星",
    CelestialBody.venus: "金星",
    CelestialBody.earth: "地球",
    CelestialBody.moon: "月球",
    CelestialBody.mars: "火星",
    CelestialBody.jupiter: "木星",
    CelestialBody.saturn: "土星",
}


@dataclass(frozen=True)
class OrbitalParameters:
    """Period in days and display radius in scene units."""

    period_days: float
    radius_units: float

    def __post_init__(self) -> None:
        if not (math.isfinite(self.period_days) and self.period_days > 0):
            raise ValueError(f"period_days must be positive, got {self.period_days}")
        if not (math.isfinite(self.radius_units) and self.radius_units > 0):
            raise ValueError(f"radius_units must be positive, got {self.radius_units}")


# The Moon's radius is measured from Earth, not from the Sun.
ORBITS: Dict[CelestialBody, OrbitalParameters] = {
    CelestialBody.mercury: OrbitalParameters(87.969, 12.0),
    CelestialBody.venus: OrbitalParameters(224.701, 18.0),
    CelestialBody.earth: OrbitalParameters(365.256, 24.0),
    CelestialBody.moon: OrbitalParameters(27.3217, 2.0),
    CelestialBody.mars: OrbitalParameters(686.980, 30.0),
    CelestialBody.jupiter: OrbitalParameters(4332.59, 45.0),
    CelestialBody.saturn: OrbitalParameters(10759.22, 60.0),
}

ORBITING_BODIES = tuple(body for body in CelestialBody if body is not CelestialBody.sun)


@dataclass(frozen=True)
class BodyInfo:
    """Details shown when a body is selected."""

    kind: str
    period: Optional[str] = None
    distance: Optional[str] = None
    mass: Optional[str] = None


BODY_INFO: Dict[CelestialBody, BodyInfo] = {
    CelestialBody.sun: BodyInfo(kind="star", mass="1.989 × 10^30 kg"),
    CelestialBody.mercury: BodyInfo(kind="planet", period="87.97 天", distance="0.39 AU"),
    CelestialBody.venus: BodyInfo(kind="planet", period="224.70 天", distance="0.72 AU"),
    CelestialBody.earth: BodyInfo(kind="planet", period="365.25 天", distance="1 AU"),
    CelestialBody.moon: BodyInfo(kind="satellite", period="27.3 天"),
    CelestialBody.mars: BodyInfo(kind="planet", period="686.98 天", distance="1.52 AU"),
    CelestialBody.jupiter: BodyInfo(kind="planet", period="11.86 年", distance="5.20 AU"),
    CelestialBody.saturn: BodyInfo(kind="planet", period="29.46 年", distance="9.58 AU"),
}


def parse_body(value: object) -> Optional[CelestialBody]:
    """Return the member named by *value*, or ``None`` when it is not tracked."""

    if isinstance(value, CelestialBody):
        return value
    try:
        return CelestialBody(str(value).lower())
    except ValueError:
        return None
