"""Core time-to-position and sexagenary calendar engine for the orrery."""

from .bodies import ORBITS, CelestialBody, OrbitalParameters
from .camera import CameraFocusController, ease_in_out_cubic
from .ganzhi import (
    GanZhi,
    calendar_labels,
    day_label,
    month_label,
    solar_term_index,
    year_label,
)
from .jiazi import generate_cycle, resolve_body_for_cycle_name, resolve_cycle
from .orbits import Position3, position
from .snapshot import PositionMode, Snapshot, compute_snapshot
from .state import (
    ViewState,
    advance,
    apply_focus,
    move_to_city,
    reset_to_now,
    select_body,
    select_cycle,
    set_moment,
    set_observer,
    toggle_playback,
)

__all__ = [
    "CelestialBody",
    "OrbitalParameters",
    "ORBITS",
    "GanZhi",
    "year_label",
    "month_label",
    "day_label",
    "solar_term_index",
    "calendar_labels",
    "Position3",
    "position",
    "generate_cycle",
    "resolve_body_for_cycle_name",
    "resolve_cycle",
    "CameraFocusController",
    "ease_in_out_cubic",
    "PositionMode",
    "Snapshot",
    "compute_snapshot",
    "ViewState",
    "toggle_playback",
    "advance",
    "set_moment",
    "reset_to_now",
    "select_cycle",
    "select_body",
    "move_to_city",
    "set_observer",
    "apply_focus",
]
