"""Viewer state and the transitions the viewer's controls perform on it."""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime, timedelta
from typing import Optional

from .bodies import CelestialBody
from .camera import CameraFocusController
from .ganzhi import CYCLE_LENGTH
from .jiazi import resolve_cycle
from .locations import CITIES, DEFAULT_CITY, Observer, city
from .snapshot import PositionMode, Snapshot, compute_snapshot

PLAYBACK_STEP = timedelta(days=1)
PLAYBACK_INTERVAL_MS = 100


@dataclass(frozen=True)
class ViewState:
    moment: datetime
    observer: Observer = CITIES[DEFAULT_CITY]
    playing: bool = False
    focus_body: Optional[CelestialBody] = None
    selected_body: Optional[CelestialBody] = None
    mode: PositionMode = PositionMode.orbital

    def snapshot(self) -> Snapshot:
        return compute_snapshot(self.moment, self.observer, self.mode)


def toggle_playback(state: ViewState) -> ViewState:
    return replace(state, playing=not state.playing)


def advance(state: ViewState, ticks: int = 1) -> ViewState:
    """Move time forward one playback step per tick while playing."""

    if not state.playing or ticks <= 0:
        return state
    return replace(state, moment=state.moment + PLAYBACK_STEP * ticks)


def set_moment(state: ViewState, moment: datetime) -> ViewState:
    return replace(state, moment=moment)


def reset_to_now(state: ViewState, now: Optional[datetime] = None) -> ViewState:
    if now is None:
        now = datetime.now(state.moment.tzinfo)
    return replace(state, moment=now, focus_body=None, playing=False)


def select_cycle(state: ViewState, name: str) -> ViewState:
    """Jump to 1 January of the latest year named *name* and focus its body.

    Anchors before year 1 cannot be represented as a ``datetime``; those move
    forward to the earliest representable year carrying the same name.

    Raises
    ------
    ValueError
        If *name* is not a cycle name.
    """

    year, body = resolve_cycle(name, state.moment.year)
    while year < datetime.min.year:
        year += CYCLE_LENGTH
    moment = datetime(year, 1, 1, tzinfo=state.moment.tzinfo)
    return replace(state, moment=moment, playing=False, focus_body=body)


def select_body(state: ViewState, body: Optional[CelestialBody]) -> ViewState:
    return replace(state, selected_body=body)


def move_to_city(state: ViewState, name: str) -> ViewState:
    return replace(state, observer=city(name))


def set_observer(state: ViewState, latitude: float, longitude: float) -> ViewState:
    return replace(state, observer=Observer(latitude, longitude))


def apply_focus(
    state: ViewState,
    controller: CameraFocusController,
    now_ms: Optional[float] = None,
) -> bool:
    """Start a camera transition toward the focused body; ``False`` if nothing to frame."""

    if state.focus_body is None:
        return False
    point = state.snapshot().focus_point(state.focus_body)
    if point is None:
        return False
    controller.focus(point, now_ms)
    return True
