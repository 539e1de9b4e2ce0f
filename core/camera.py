"""Eased camera transitions toward a focus point.

The controller is a two-state machine (idle / transitioning) advanced by the
host's frame primitive. Manual camera input and frame scheduling are external
collaborators described by :class:`ManualInput` and :class:`FrameScheduler`.
"""

from __future__ import annotations

import itertools
import json
import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Hashable, Optional, Protocol, Sequence, Tuple

import numpy as np

from .orbits import Position3

__all__ = [
    "FOCUS_DISTANCE",
    "FOCUS_DIRECTION",
    "TRANSITION_MS",
    "ease_in_out_cubic",
    "ManualInput",
    "FrameScheduler",
    "ManualFrameScheduler",
    "CameraTransition",
    "ControllerState",
    "CameraFocusController",
]

LOGGER = logging.getLogger(__name__)

FOCUS_DISTANCE = 15.0
FOCUS_DIRECTION = np.array([1.0, 0.6, 1.0])
TRANSITION_MS = 1200.0

FrameCallback = Callable[[float], None]


def ease_in_out_cubic(t: float) -> float:
    if t < 0.5:
        return 4.0 * t * t * t
    return 1.0 - (-2.0 * t + 2.0) ** 3 / 2.0


class ManualInput(Protocol):
    """Pan/zoom/rotate input owned by the viewer."""

    def suspend(self) -> None: ...

    def resume(self) -> None: ...


class FrameScheduler(Protocol):
    """Host primitive that runs a callback on the next rendered frame."""

    def request_frame(self, callback: FrameCallback) -> Hashable: ...

    def cancel_frame(self, handle: Hashable) -> None: ...


class ManualFrameScheduler:
    """Scheduler for hosts that pump frames themselves.

    Callbacks requested while a frame runs are deferred to the next frame.
    """

    def __init__(self) -> None:
        self._pending: Dict[int, FrameCallback] = {}
        self._ids = itertools.count(1)

    @property
    def pending(self) -> int:
        return len(self._pending)

    def request_frame(self, callback: FrameCallback) -> int:
        handle = next(self._ids)
        self._pending[handle] = callback
        return handle

    def cancel_frame(self, handle: Hashable) -> None:
        self._pending.pop(handle, None)  # type: ignore[arg-type]

    def run_frame(self, now_ms: float) -> int:
        """Run every callback pending at the start of this frame; return how many ran.

        A callback cancelled by an earlier callback of the same frame is skipped.
        """

        ran = 0
        for handle in list(self._pending):
            callback = self._pending.pop(handle, None)
            if callback is None:
                continue
            callback(now_ms)
            ran += 1
        return ran


def _vector(value: Sequence[float]) -> np.ndarray:
    vector = np.asarray(value, dtype=float)
    if vector.shape != (3,):
        raise ValueError(f"Expected a 3-vector, got shape {vector.shape}")
    return vector


def _position(vector: np.ndarray) -> Position3:
    return Position3(float(vector[0]), float(vector[1]), float(vector[2]))


@dataclass(frozen=True)
class CameraTransition:
    """Start and end poses of one focus animation."""

    start_pos: np.ndarray
    start_target: np.ndarray
    end_pos: np.ndarray
    end_target: np.ndarray
    start_ms: float
    duration_ms: float

    def progress(self, now_ms: float) -> float:
        return min(max((now_ms - self.start_ms) / self.duration_ms, 0.0), 1.0)

    def pose_at(self, progress: float) -> Tuple[np.ndarray, np.ndarray]:
        eased = ease_in_out_cubic(progress)
        position = self.start_pos + (self.end_pos - self.start_pos) * eased
        target = self.start_target + (self.end_target - self.start_target) * eased
        return position, target


class ControllerState(str, Enum):
    idle = "idle"
    transitioning = "transitioning"


class CameraFocusController:
    """Drive the camera pose toward focus points with a cubic ease.

    A focus request that arrives during a transition replaces it; the new
    transition starts from the pose reached so far.
    """

    def __init__(
        self,
        position: Sequence[float],
        target: Sequence[float] = (0.0, 0.0, 0.0),
        *,
        manual_input: Optional[ManualInput] = None,
        scheduler: Optional[FrameScheduler] = None,
        clock: Optional[Callable[[], float]] = None,
        duration_ms: float = TRANSITION_MS,
        distance: float = FOCUS_DISTANCE,
    ) -> None:
        if duration_ms <= 0:
            raise ValueError("duration_ms must be positive")
        self._position = _vector(position)
        self._target = _vector(target)
        self._manual_input = manual_input
        self._scheduler = scheduler
        self._clock = clock or (lambda: time.perf_counter() * 1000.0)
        self.duration_ms = float(duration_ms)
        self.distance = float(distance)
        self._transition: Optional[CameraTransition] = None
        self._frame_handle: Optional[Hashable] = None
        self._frame_token: Optional[object] = None
        self._input_suspended = False

    @property
    def state(self) -> ControllerState:
        if self._transition is None:
            return ControllerState.idle
        return ControllerState.transitioning

    @property
    def active(self) -> bool:
        return self._transition is not None

    @property
    def transition(self) -> Optional[CameraTransition]:
        return self._transition

    @property
    def position(self) -> Position3:
        return _position(self._position)

    @property
    def target(self) -> Position3:
        return _position(self._target)

    def framing_position(self, target: Sequence[float]) -> Position3:
        """Camera position used to frame *target* at the end of a transition."""

        return _position(_vector(target) + FOCUS_DIRECTION * self.distance)

    def focus(self, target: Sequence[float], now_ms: Optional[float] = None) -> None:
        end_target = _vector(target)
        now = self._clock() if now_ms is None else now_ms
        self._cancel_frame()
        self._transition = CameraTransition(
            start_pos=self._position.copy(),
            start_target=self._target.copy(),
            end_pos=end_target + FOCUS_DIRECTION * self.distance,
            end_target=end_target,
            start_ms=now,
            duration_ms=self.duration_ms,
        )
        self._suspend_input()
        LOGGER.debug(
            json.dumps({"event": "camera_focus", "target": end_target.tolist(), "start_ms": now})
        )
        self._request_frame()

    def tick(self, now_ms: Optional[float] = None) -> bool:
        """Advance the transition; return ``True`` while it is still running."""

        transition = self._transition
        if transition is None:
            return False
        now = self._clock() if now_ms is None else now_ms
        progress = transition.progress(now)
        if progress >= 1.0:
            self._position = transition.end_pos.copy()
            self._target = transition.end_target.copy()
            self._finish()
            LOGGER.debug(json.dumps({"event": "camera_settled", "now_ms": now}))
            return False
        self._position, self._target = transition.pose_at(progress)
        return True

    def cancel(self) -> None:
        """Stop any transition where it is and hand the camera back to manual input."""

        if self._transition is not None:
            LOGGER.debug(json.dumps({"event": "camera_cancelled"}))
        self._finish()

    close = cancel

    def _request_frame(self) -> None:
        if self._scheduler is None:
            return
        token = object()
        self._frame_token = token
        self._frame_handle = self._scheduler.request_frame(
            lambda now_ms: self._on_frame(token, now_ms)
        )

    def _on_frame(self, token: object, now_ms: float) -> None:
        # Stale callbacks from a replaced request must not reschedule.
        if token is not self._frame_token:
            return
        self._frame_handle = None
        self._frame_token = None
        if self.tick(now_ms):
            self._request_frame()

    def _finish(self) -> None:
        self._transition = None
        self._cancel_frame()
        self._resume_input()

    def _cancel_frame(self) -> None:
        if self._frame_handle is not None and self._scheduler is not None:
            self._scheduler.cancel_frame(self._frame_handle)
        self._frame_handle = None
        self._frame_token = None

    def _suspend_input(self) -> None:
        if self._manual_input is not None and not self._input_suspended:
            self._manual_input.suspend()
        self._input_suspended = True

    def _resume_input(self) -> None:
        if self._manual_input is not None and self._input_suspended:
            self._manual_input.resume()
        self._input_suspended = False
