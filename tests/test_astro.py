from __future__ import annotations

import math
import sys
from datetime import UTC, datetime
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

import pytest

from core.astro import HorizonError, altaz, horizon_position, horizon_positions
from core.bodies import ORBITS, CelestialBody
from core.locations import CITIES

BEIJING = CITIES["北京"]


def test_sun_high_in_the_south_at_beijing_summer_noon() -> None:
    # Local apparent noon in Beijing is close to 04:15 UTC around the solstice.
    altitude, azimuth = altaz(CelestialBody.sun, datetime(2025, 6, 21, 4, 15, tzinfo=UTC), BEIJING)
    assert math.degrees(altitude) == pytest.approx(73.5, abs=1.5)
    assert math.degrees(azimuth) == pytest.approx(180.0, abs=10.0)


def test_sun_below_horizon_at_beijing_midnight() -> None:
    altitude, _ = altaz(CelestialBody.sun, datetime(2025, 6, 21, 16, 15, tzinfo=UTC), BEIJING)
    assert altitude < 0


def test_earth_has_no_direction_from_earth() -> None:
    with pytest.raises(HorizonError):
        altaz(CelestialBody.earth, datetime(2025, 6, 21, tzinfo=UTC), BEIJING)


def test_earth_is_parked_on_the_x_axis() -> None:
    point = horizon_position(CelestialBody.earth, datetime(2025, 6, 21, tzinfo=UTC), BEIJING)
    assert point == (ORBITS[CelestialBody.earth].radius_units, 0.0, 0.0)


def test_sun_stays_at_origin() -> None:
    point = horizon_position(CelestialBody.sun, datetime(2025, 6, 21, tzinfo=UTC), BEIJING)
    assert point == (0.0, 0.0, 0.0)


@pytest.mark.parametrize(
    "body",
    [
        CelestialBody.mercury,
        CelestialBody.venus,
        CelestialBody.moon,
        CelestialBody.mars,
        CelestialBody.jupiter,
        CelestialBody.saturn,
    ],
)
def test_horizon_positions_lie_on_display_sphere(body: CelestialBody) -> None:
    point = horizon_position(body, datetime(2024, 2, 10, 12, 0, tzinfo=UTC), BEIJING)
    assert point.norm == pytest.approx(ORBITS[body].radius_units, rel=1e-9)


def test_explicit_distance_and_naive_time() -> None:
    naive = datetime(2024, 2, 10, 12, 0)
    point = horizon_position("mars", naive, BEIJING, distance=5.0)
    assert point.norm == pytest.approx(5.0)
    assert point == horizon_position(CelestialBody.mars, naive.replace(tzinfo=UTC), BEIJING, 5.0)


def test_altitude_sign_matches_height() -> None:
    moment = datetime(2024, 2, 10, 12, 0, tzinfo=UTC)
    altitude, _ = altaz(CelestialBody.jupiter, moment, BEIJING)
    point = horizon_position(CelestialBody.jupiter, moment, BEIJING)
    assert point.y == pytest.approx(45.0 * math.sin(altitude))


def test_horizon_positions_cover_every_body() -> None:
    result = horizon_positions(datetime(2024, 2, 10, tzinfo=UTC), BEIJING)
    assert set(result) == set(CelestialBody)
    assert all(point.is_finite() for point in result.values())
