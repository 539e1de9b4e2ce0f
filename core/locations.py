"""Observer locations, including the preset cities offered by the viewer."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict


@dataclass(frozen=True)
class Observer:
    """Geographic observer position in degrees (east-positive longitude)."""

    latitude: float
    longitude: float
    name: str = "自定义"

    def __post_init__(self) -> None:
        if not (math.isfinite(self.latitude) and -90.0 <= self.latitude <= 90.0):
            raise ValueError(f"latitude must be within ±90 degrees, got {self.latitude}")
        if not (math.isfinite(self.longitude) and -180.0 <= self.longitude <= 180.0):
            raise ValueError(f"longitude must be within ±180 degrees, got {self.longitude}")


CITIES: Dict[str, Observer] = {
    "北京": Observer(39.9, 116.4, "北京"),
    "上海": Observer(31.2, 121.5, "上海"),
    "西安": Observer(34.3, 108.9, "西安"),
    "南京": Observer(32.1, 118.8, "南京"),
    "洛阳": Observer(34.6, 112.4, "洛阳"),
    "成都": Observer(30.7, 104.1, "成都"),
}

DEFAULT_CITY = "北京"


def city(name: str) -> Observer:
    try:
        return CITIES[name]
    except KeyError as exc:
        raise KeyError(f"Unknown city: {name}") from exc
