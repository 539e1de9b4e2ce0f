"""Pydantic models for API requests and responses."""

from __future__ import annotations

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from core.bodies import CelestialBody
from core.snapshot import PositionMode


class SnapshotQueryParams(BaseModel):
    """Validated query parameters for the ``/snapshot`` endpoint."""

    model_config = ConfigDict(populate_by_name=True)

    time: Optional[datetime] = Field(
        None, description="Instant to render (ISO-8601); naive values are UTC, default now"
    )
    lat: Optional[float] = Field(None, ge=-90.0, le=90.0, description="Latitude in degrees")
    lon: Optional[float] = Field(None, ge=-180.0, le=180.0, description="Longitude in degrees")
    city: Optional[str] = Field(None, description="Preset city name, e.g. 北京")
    mode: PositionMode = Field(PositionMode.orbital, description="Position model")

    @model_validator(mode="after")
    def validate_location(self) -> "SnapshotQueryParams":
        if (self.lat is None) != (self.lon is None):
            raise ValueError("lat and lon must be given together")
        if self.city is not None and self.lat is not None:
            raise ValueError("give either city or lat/lon, not both")
        return self


class Vector3(BaseModel):
    x: float
    y: float
    z: float


class BodyPosition(BaseModel):
    body: CelestialBody
    name: str = Field(..., description="Display name")
    position: Vector3


class SolarTermModel(BaseModel):
    index: int = Field(..., ge=0, le=23)
    name: str
    code: str


class CalendarResponse(BaseModel):
    """Sexagenary labels for one instant."""

    ok: bool = True
    time: datetime
    year: str = Field(..., description="Year label, e.g. 甲辰")
    month: str
    day: str
    solar_term: SolarTermModel


class TermMarkerModel(BaseModel):
    label: str
    current: bool
    position: Vector3


class ObserverModel(BaseModel):
    name: str
    latitude: float
    longitude: float


class SnapshotResponse(BaseModel):
    ok: bool = True
    mode: PositionMode
    observer: ObserverModel
    calendar: CalendarResponse
    bodies: List[BodyPosition]
    skipped: List[CelestialBody] = Field(default_factory=list)
    term_markers: List[TermMarkerModel]


class CycleEntryModel(BaseModel):
    name: str
    cycle_index: int = Field(..., ge=0, le=59)
    anchor_year: int
    body: CelestialBody


class CycleTableResponse(BaseModel):
    ok: bool = True
    reference_year: int
    entries: List[CycleEntryModel]


class CycleResolutionResponse(BaseModel):
    ok: bool = True
    name: str
    anchor_year: int
    body: CelestialBody


class HealthResponse(BaseModel):
    """Health-check response."""

    ok: bool = True
    bodies: List[CelestialBody]
    reference_epoch: datetime
    source: Literal["circular-orbits"] = "circular-orbits"


class ErrorResponse(BaseModel):
    """Error payload."""

    ok: bool = False
    code: str
    error: str
