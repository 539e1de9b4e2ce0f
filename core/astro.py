"""Horizon-coordinate placement of bodies as seen by a ground observer."""

from __future__ import annotations

import json
import logging
import math
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Dict, Optional, Tuple

import erfa
import numpy as np

from .bodies import ORBITING_BODIES, CelestialBody, parse_body
from .locations import Observer
from .orbits import ORIGIN, Position3, orbital_parameters

__all__ = ["HorizonError", "altaz", "horizon_position", "horizon_positions"]

LOGGER = logging.getLogger(__name__)

# ERFA planet numbers for plan94.
_PLAN94_INDEX: Dict[CelestialBody, int] = {
    CelestialBody.mercury: 1,
    CelestialBody.venus: 2,
    CelestialBody.mars: 4,
    CelestialBody.jupiter: 5,
    CelestialBody.saturn: 6,
}


class HorizonError(RuntimeError):
    """Raised when a body has no usable direction from the observer."""


@dataclass(frozen=True)
class _TimeScales:
    """Container for time-scale representations of a UTC instant."""

    utc: Tuple[float, float]
    ut1: Tuple[float, float]
    tt: Tuple[float, float]


def _datetime_to_timescales(dt: datetime) -> _TimeScales:
    """Convert a datetime (naive values taken as UTC) into ERFA two-part dates."""

    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    dt_utc = dt.astimezone(UTC)
    utc1, utc2 = erfa.dtf2d(
        "UTC",
        dt_utc.year,
        dt_utc.month,
        dt_utc.day,
        dt_utc.hour,
        dt_utc.minute,
        dt_utc.second + dt_utc.microsecond / 1_000_000,
    )
    tai1, tai2 = erfa.utctai(utc1, utc2)
    tt1, tt2 = erfa.taitt(tai1, tai2)
    ut11, ut12 = erfa.utcut1(utc1, utc2, 0.0)
    return _TimeScales(utc=(utc1, utc2), ut1=(ut11, ut12), tt=(tt1, tt2))


def _geocentric_vector(body: CelestialBody, times: _TimeScales) -> np.ndarray:
    """Approximate geocentric equatorial vector of *body* in AU."""

    if body is CelestialBody.moon:
        pv = erfa.moon98(*times.tt)
        return np.array(pv["p"], dtype=float)
    if body is CelestialBody.earth:
        return np.zeros(3)
    pvh, _ = erfa.epv00(*times.tt)
    earth = np.array(pvh["p"], dtype=float)
    if body is CelestialBody.sun:
        return -earth
    pv = erfa.plan94(*times.tt, _PLAN94_INDEX[body])
    return np.array(pv["p"], dtype=float) - earth


def altaz(body: CelestialBody, moment: datetime, observer: Observer) -> Tuple[float, float]:
    """Return ``(altitude, azimuth)`` in radians; azimuth is from north through east.

    Raises
    ------
    HorizonError
        If the body coincides with the observer's planet.
    """

    times = _datetime_to_timescales(moment)
    vector = _geocentric_vector(body, times)
    if np.linalg.norm(vector) == 0:
        raise HorizonError(f"Degenerate geocentric vector for {body.value}")
    ra, dec = erfa.c2s(vector)
    sidereal = erfa.gmst06(*times.ut1, *times.tt) + math.radians(observer.longitude)
    hour_angle = erfa.anp(sidereal - ra)
    azimuth, altitude = erfa.hd2ae(hour_angle, dec, math.radians(observer.latitude))
    return float(altitude), float(azimuth)


def horizon_position(
    body: CelestialBody | str,
    moment: datetime,
    observer: Observer,
    distance: Optional[float] = None,
) -> Position3:
    """Place *body* on a sphere of *distance* along its direction in the observer's sky.

    The distance defaults to the body's orbit radius, so the Moon again sits
    close to Earth once the caller composites it. Bodies without a usable
    direction are parked at ``(distance, 0, 0)``.
    """

    member = parse_body(body) or CelestialBody.earth
    if member is CelestialBody.sun:
        return ORIGIN
    if distance is None:
        distance = orbital_parameters(member).radius_units
    try:
        altitude, azimuth = altaz(member, moment, observer)
    except HorizonError:
        LOGGER.debug(json.dumps({"event": "horizon_fallback", "body": member.value}))
        return Position3(float(distance), 0.0, 0.0)
    return Position3(
        distance * math.cos(altitude) * math.sin(azimuth),
        distance * math.sin(altitude),
        distance * math.cos(altitude) * math.cos(azimuth),
    )


def horizon_positions(moment: datetime, observer: Observer) -> Dict[CelestialBody, Position3]:
    result = {CelestialBody.sun: ORIGIN}
    for body in ORBITING_BODIES:
        result[body] = horizon_position(body, moment, observer)
    return result
