"""
sociogram/viz/camera.py — Camera state and time-based animations.

The camera is {x, y, ratio}: the graph-space point at the viewport centre and
a zoom ratio (ratio < 1 is zoomed in). Animations are tweened against a clock
and advanced by tick(); there is no timer thread. Starting an animation
replaces whatever animation was in flight.
"""

import logging
import time
from dataclasses import dataclass, replace
from typing import Callable, Optional

from sociogram.config import DEFAULT_CONFIG, SociogramConfig

logger = logging.getLogger(__name__)

Clock = Callable[[], float]


@dataclass(frozen=True)
class CameraState:
    x: float = 0.0
    y: float = 0.0
    ratio: float = 1.0


def ease_in_out_quad(t: float) -> float:
    if t < 0.5:
        return 2 * t * t
    return -1 + (4 - 2 * t) * t


@dataclass
class _Animation:
    start: CameraState
    end: CameraState
    started_at: float
    duration: float


class Camera:
    """
    Pan/zoom camera with animated transitions.

    Args:
        config: SociogramConfig (ratio bounds, zoom factor, duration).
        clock:  Monotonic seconds source; injectable for tests.
    """

    def __init__(
        self,
        config: SociogramConfig = DEFAULT_CONFIG,
        clock: Optional[Clock] = None,
    ) -> None:
        self._config = config
        self._clock = clock or time.monotonic
        self._state = CameraState()
        self._animation: Optional[_Animation] = None
        self._enabled = True

    @property
    def state(self) -> CameraState:
        return self._state

    @property
    def enabled(self) -> bool:
        return self._enabled

    @property
    def animating(self) -> bool:
        return self._animation is not None

    def enable(self) -> None:
        self._enabled = True

    def disable(self) -> None:
        """Freeze the camera where it is; a running animation is dropped."""
        self._enabled = False
        self._animation = None

    def clamp_ratio(self, ratio: float) -> float:
        return max(self._config.min_camera_ratio, min(self._config.max_camera_ratio, ratio))

    def set_state(self, state: CameraState) -> None:
        """Jump to `state` immediately, cancelling any animation."""
        self._animation = None
        self._state = replace(state, ratio=self.clamp_ratio(state.ratio))

    # ── Animations ────────────────────────────────────────────────────────────

    def animate(self, target: CameraState, duration_ms: Optional[int] = None) -> bool:
        """
        Tween from the current state to `target`.

        Ignored (returns False) while the camera is disabled. Overrides any
        animation already running.
        """
        if not self._enabled:
            logger.debug("Camera disabled; ignoring animation request.")
            return False
        duration = (duration_ms if duration_ms is not None else self._config.animation_duration_ms) / 1000.0
        target = replace(target, ratio=self.clamp_ratio(target.ratio))
        if duration <= 0:
            self.set_state(target)
            return True
        self._animation = _Animation(
            start=self._state,
            end=target,
            started_at=self._clock(),
            duration=duration,
        )
        return True

    def animated_zoom(self, factor: Optional[float] = None) -> bool:
        factor = factor or self._config.zoom_factor
        return self.animate(replace(self._state, ratio=self._state.ratio / factor))

    def animated_unzoom(self, factor: Optional[float] = None) -> bool:
        factor = factor or self._config.zoom_factor
        return self.animate(replace(self._state, ratio=self._state.ratio * factor))

    def animated_reset(self, home: CameraState = CameraState()) -> bool:
        return self.animate(home)

    def tick(self, now: Optional[float] = None) -> bool:
        """
        Advance the running animation to `now`.

        Returns True while an animation is still in flight after this tick.
        """
        anim = self._animation
        if anim is None:
            return False
        now = self._clock() if now is None else now
        progress = min(1.0, max(0.0, (now - anim.started_at) / anim.duration))
        eased = ease_in_out_quad(progress)
        self._state = CameraState(
            x=anim.start.x + (anim.end.x - anim.start.x) * eased,
            y=anim.start.y + (anim.end.y - anim.start.y) * eased,
            ratio=anim.start.ratio + (anim.end.ratio - anim.start.ratio) * eased,
        )
        if progress >= 1.0:
            self._state = anim.end
            self._animation = None
            return False
        return True

    # ── Direct manipulation (pan / wheel) ─────────────────────────────────────

    def pan_by(self, dx: float, dy: float) -> None:
        if not self._enabled:
            return
        self._animation = None
        self._state = replace(self._state, x=self._state.x + dx, y=self._state.y + dy)

    def zoom_about(self, gx: float, gy: float, factor: float) -> None:
        """Zoom by `factor` keeping graph point (gx, gy) fixed on screen."""
        if not self._enabled:
            return
        self._animation = None
        old = self._state
        ratio = self.clamp_ratio(old.ratio / factor)
        scale = ratio / old.ratio
        self._state = CameraState(
            x=gx + (old.x - gx) * scale,
            y=gy + (old.y - gy) * scale,
            ratio=ratio,
        )
