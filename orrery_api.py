"""FastAPI application exposing orrery positions and sexagenary calendar labels."""

from __future__ import annotations

import json
import logging
import os
import time
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from typing import Annotated, List, Optional

from fastapi import FastAPI, HTTPException, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from core.bodies import CelestialBody
from core.ganzhi import CalendarLabels, calendar_labels
from core.jiazi import current_cycle, cycle_table, resolve_body_for_cycle_name, resolve_cycle
from core.locations import CITIES, Observer
from core.orbits import REFERENCE_EPOCH, Position3
from core.snapshot import compute_snapshot
from models import (
    BodyPosition,
    CalendarResponse,
    CycleEntryModel,
    CycleResolutionResponse,
    CycleTableResponse,
    ErrorResponse,
    HealthResponse,
    ObserverModel,
    SnapshotQueryParams,
    SnapshotResponse,
    SolarTermModel,
    TermMarkerModel,
    Vector3,
)

LOG_LEVEL = os.environ.get("ORRERY_LOG_LEVEL", "INFO").upper()
ALLOWED_ORIGINS = [
    origin.strip()
    for origin in os.environ.get("ORRERY_ALLOWED_ORIGINS", "http://localhost:3000").split(",")
    if origin.strip()
]
DEFAULT_CITY = os.environ.get("ORRERY_DEFAULT_CITY", "北京")

logging.basicConfig(level=LOG_LEVEL, format="%(message)s")
LOGGER = logging.getLogger("orrery-api")

APP_DESCRIPTION = (
    "Solar system positions on circular orbits alongside the sexagenary calendar "
    "and the 24 solar terms"
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if DEFAULT_CITY not in CITIES:
        LOGGER.error(json.dumps({"event": "config_invalid", "default_city": DEFAULT_CITY}))
        raise RuntimeError(f"ORRERY_DEFAULT_CITY is not a preset city: {DEFAULT_CITY}")
    table = current_cycle()
    LOGGER.info(
        json.dumps(
            {
                "event": "startup",
                "default_city": DEFAULT_CITY,
                "cycle_entries": len(table),
                "reference_epoch": REFERENCE_EPOCH.isoformat(),
            }
        )
    )
    yield


app = FastAPI(
    title="Orrery API",
    description=APP_DESCRIPTION,
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _now() -> datetime:
    return datetime.now(UTC)


def _vector(point: Position3) -> Vector3:
    return Vector3(x=point.x, y=point.y, z=point.z)


def _calendar_payload(moment: datetime, labels: CalendarLabels) -> CalendarResponse:
    term = labels.solar_term
    return CalendarResponse(
        time=moment,
        year=labels.year.name,
        month=labels.month.name,
        day=labels.day.name,
        solar_term=SolarTermModel(index=term.index, name=term.name, code=term.code),
    )


def _resolve_observer(params: SnapshotQueryParams) -> Observer:
    if params.lat is not None and params.lon is not None:
        return Observer(params.lat, params.lon)
    name = params.city or DEFAULT_CITY
    try:
        return CITIES[name]
    except KeyError:
        raise HTTPException(status_code=404, detail=f"Unknown city: {name}")


def _error_response(status_code: int, code: str, message: str) -> JSONResponse:
    payload = ErrorResponse(code=code, error=message)
    LOGGER.error(json.dumps({"event": "error", "code": code, "message": message}))
    return JSONResponse(status_code=status_code, content=payload.model_dump())


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    messages = ", ".join(error["msg"] for error in exc.errors())
    return _error_response(422, "validation_error", messages)


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    detail = exc.detail
    if isinstance(detail, dict):
        message = detail.get("error") or detail.get("message") or str(detail)
    elif isinstance(detail, list):
        message = ", ".join(str(item) for item in detail)
    else:
        message = str(detail)
    return _error_response(exc.status_code, f"http_{exc.status_code}", message)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    LOGGER.exception("Unhandled exception", exc_info=exc)
    return _error_response(500, "internal_error", "Unhandled server error")


@app.get("/health", response_model=HealthResponse)
def health() -> HealthResponse:
    return HealthResponse(ok=True, bodies=list(CelestialBody), reference_epoch=REFERENCE_EPOCH)


@app.get("/cities", response_model=List[ObserverModel])
def cities() -> List[ObserverModel]:
    return [
        ObserverModel(name=name, latitude=observer.latitude, longitude=observer.longitude)
        for name, observer in CITIES.items()
    ]


@app.get(
    "/calendar",
    response_model=CalendarResponse,
    responses={422: {"model": ErrorResponse}},
)
def calendar_endpoint(
    time_: Annotated[Optional[datetime], Query(alias="time")] = None,
) -> CalendarResponse:
    moment = time_ or _now()
    return _calendar_payload(moment, calendar_labels(moment))


@app.get(
    "/snapshot",
    response_model=SnapshotResponse,
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)
def snapshot_endpoint(params: Annotated[SnapshotQueryParams, Query()]) -> SnapshotResponse:
    start_time = time.perf_counter()
    moment = params.time or _now()
    try:
        observer = _resolve_observer(params)
        snapshot = compute_snapshot(moment, observer, params.mode)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))

    response = SnapshotResponse(
        mode=snapshot.mode,
        observer=ObserverModel(
            name=observer.name, latitude=observer.latitude, longitude=observer.longitude
        ),
        calendar=_calendar_payload(moment, snapshot.labels),
        bodies=[
            BodyPosition(body=body, name=body.display_name, position=_vector(point))
            for body, point in snapshot.bodies.items()
        ],
        skipped=list(snapshot.skipped),
        term_markers=[
            TermMarkerModel(label=marker.label, current=marker.current, position=_vector(marker.position))
            for marker in snapshot.term_markers
        ],
    )

    duration_ms = (time.perf_counter() - start_time) * 1000.0
    LOGGER.info(
        json.dumps(
            {
                "event": "snapshot",
                "time": moment.isoformat(),
                "mode": snapshot.mode.value,
                "observer": observer.name,
                "skipped": [body.value for body in snapshot.skipped],
                "duration_ms": round(duration_ms, 3),
            }
        )
    )
    return response


@app.get("/jiazi", response_model=CycleTableResponse)
def jiazi_table(reference_year: Optional[int] = None) -> CycleTableResponse:
    year = reference_year if reference_year is not None else _now().year
    entries = [
        CycleEntryModel(
            name=entry.name,
            cycle_index=entry.cycle_index,
            anchor_year=entry.anchor_year,
            body=resolve_body_for_cycle_name(entry.name),
        )
        for entry in cycle_table(year)
    ]
    return CycleTableResponse(reference_year=year, entries=entries)


@app.get(
    "/jiazi/{name}",
    response_model=CycleResolutionResponse,
    responses={400: {"model": ErrorResponse}},
)
def jiazi_resolve(name: str, reference_year: Optional[int] = None) -> CycleResolutionResponse:
    year = reference_year if reference_year is not None else _now().year
    try:
        anchor, body = resolve_cycle(name, year)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    LOGGER.info(
        json.dumps(
            {"event": "jiazi_resolve", "name": name, "anchor_year": anchor, "body": body.value}
        )
    )
    return CycleResolutionResponse(name=name, anchor_year=anchor, body=body)

