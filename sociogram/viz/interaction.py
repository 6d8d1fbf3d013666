"""
sociogram/viz/interaction.py — Interaction Controller: pointer → drag / click / camera.

The controller is an explicit state machine:

    Idle ──down on node──▶ Dragging(node) ──up──▶ Idle   (+ on_evaluate if not moved)
    Idle ──down on empty─▶ Panning        ──up──▶ Idle

While Dragging the camera is disabled and the node is held in the store, so
neither a camera animation nor a concurrent sync() can move it. A press and
release that never travels further than drag_threshold_px is a click: it
fires on_evaluate exactly once. A press that crossed the threshold is a drag
and never fires the callback.

MatplotlibBinding adapts matplotlib canvas events to the controller so the
view works under any interactive matplotlib backend.
"""

import logging
import math
from dataclasses import dataclass, replace
from typing import Callable, Optional, Union

from sociogram.config import DEFAULT_CONFIG, SociogramConfig
from sociogram.graph.store import GraphStore
from sociogram.viz.renderer import Renderer

logger = logging.getLogger(__name__)

EvaluateCallback = Callable[[str], None]


@dataclass(frozen=True)
class Idle:
    pass


@dataclass(frozen=True)
class Dragging:
    node_id: str
    press_x: float
    press_y: float
    moved: bool = False


@dataclass(frozen=True)
class Panning:
    last_x: float
    last_y: float


InteractionState = Union[Idle, Dragging, Panning]


class InteractionController:
    """
    Binds pointer input to node dragging, node clicks and camera control.

    Args:
        store:       The view's GraphStore (drag writes node positions here).
        renderer:    Renderer providing hit-testing, coordinate mapping, camera.
        on_evaluate: Called with a member id when a node is clicked.
        config:      SociogramConfig (drag threshold, zoom factor).
    """

    def __init__(
        self,
        store: GraphStore,
        renderer: Renderer,
        on_evaluate: Optional[EvaluateCallback] = None,
        config: SociogramConfig = DEFAULT_CONFIG,
    ) -> None:
        self._store = store
        self._renderer = renderer
        self._camera = renderer.camera
        self._on_evaluate = on_evaluate
        self._config = config
        self._state: InteractionState = Idle()

    @property
    def state(self) -> InteractionState:
        return self._state

    @property
    def dragging(self) -> bool:
        return isinstance(self._state, Dragging)

    def _end_drag(self, state: Dragging) -> None:
        self._store.release(state.node_id)
        self._camera.enable()
        self._state = Idle()

    # ── Pointer events (viewport pixels, origin top-left) ─────────────────────

    def pointer_down(self, px: float, py: float) -> None:
        if not isinstance(self._state, Idle):
            logger.debug("pointer_down ignored in state %s.", self._state)
            return
        node_id = self._renderer.node_at(px, py)
        if node_id is not None:
            self._state = Dragging(node_id=node_id, press_x=px, press_y=py)
            self._store.hold(node_id)
            self._camera.disable()
        elif self._camera.enabled:
            self._state = Panning(last_x=px, last_y=py)

    def pointer_move(self, px: float, py: float) -> None:
        state = self._state

        if isinstance(state, Dragging):
            if not state.moved:
                travelled = math.hypot(px - state.press_x, py - state.press_y)
                if travelled <= self._config.drag_threshold_px:
                    return
                state = replace(state, moved=True)
                self._state = state
            gx, gy = self._renderer.viewport_to_graph(px, py)
            if not self._store.move_node(state.node_id, gx, gy):
                # The node was removed by a sync mid-drag.
                self._end_drag(state)
            return

        if isinstance(state, Panning):
            s = self._renderer.pixels_per_unit()
            self._camera.pan_by(-(px - state.last_x) / s, (py - state.last_y) / s)
            self._state = Panning(last_x=px, last_y=py)
            return

        self._renderer.hovered = self._renderer.node_at(px, py)

    def pointer_up(self, px: float, py: float) -> None:
        state = self._state

        if isinstance(state, Dragging):
            self._end_drag(state)
            if not state.moved and self._store.has_node(state.node_id):
                self._fire_evaluate(state.node_id)
            return

        self._state = Idle()

    def wheel(self, px: float, py: float, steps: float) -> None:
        """Zoom about the cursor; positive steps zoom in."""
        if not isinstance(self._state, Idle) or steps == 0:
            return
        gx, gy = self._renderer.viewport_to_graph(px, py)
        self._camera.zoom_about(gx, gy, self._config.zoom_factor ** steps)

    def _fire_evaluate(self, node_id: str) -> None:
        logger.debug("Node '%s' clicked; requesting evaluation.", node_id)
        if self._on_evaluate is not None:
            self._on_evaluate(node_id)

    def reconcile(self) -> None:
        """Drop an in-progress drag whose node no longer exists (after a sync)."""
        state = self._state
        if isinstance(state, Dragging) and not self._store.has_node(state.node_id):
            logger.debug("Dragged node '%s' removed by sync; ending drag.", state.node_id)
            self._end_drag(state)

    # ── Toolbar operations ────────────────────────────────────────────────────

    def zoom_in(self) -> bool:
        return False if self.dragging else self._renderer.zoom_in()

    def zoom_out(self) -> bool:
        return False if self.dragging else self._renderer.zoom_out()

    def center(self) -> bool:
        return False if self.dragging else self._renderer.center()


class MatplotlibBinding:
    """
    Connect a matplotlib Figure's canvas events to an InteractionController.

    A canvas timer (event-loop driven, not a thread) advances camera
    animations and redraws while one is running.
    """

    FRAME_INTERVAL_MS = 16

    def __init__(self, controller: InteractionController, renderer: Renderer) -> None:
        self._controller = controller
        self._renderer = renderer
        self._figure = None
        self._cids: list[int] = []
        self._timer = None

    def _to_viewport(self, event) -> tuple[float, float]:
        ratio = self._renderer.pixel_ratio
        return event.x / ratio, self._renderer.height - event.y / ratio

    def _on_press(self, event) -> None:
        if event.button != 1:
            return
        self._controller.pointer_down(*self._to_viewport(event))
        self._renderer.refresh()

    def _on_motion(self, event) -> None:
        hovered = self._renderer.hovered
        self._controller.pointer_move(*self._to_viewport(event))
        state = self._controller.state
        if isinstance(state, (Dragging, Panning)) or self._renderer.hovered != hovered:
            self._renderer.refresh()

    def _on_release(self, event) -> None:
        if event.button != 1:
            return
        self._controller.pointer_up(*self._to_viewport(event))
        self._renderer.refresh()

    def _on_scroll(self, event) -> None:
        self._controller.wheel(*self._to_viewport(event), event.step)
        self._renderer.refresh()

    def _on_frame(self) -> None:
        if self._renderer.camera.animating:
            self._renderer.step()

    def connect(self, figure) -> None:
        canvas = figure.canvas
        self._figure = figure
        self._cids = [
            canvas.mpl_connect("button_press_event", self._on_press),
            canvas.mpl_connect("motion_notify_event", self._on_motion),
            canvas.mpl_connect("button_release_event", self._on_release),
            canvas.mpl_connect("scroll_event", self._on_scroll),
        ]
        self._timer = canvas.new_timer(interval=self.FRAME_INTERVAL_MS)
        self._timer.add_callback(self._on_frame)
        self._timer.start()

    def disconnect(self) -> None:
        if self._figure is None:
            return
        for cid in self._cids:
            self._figure.canvas.mpl_disconnect(cid)
        if self._timer is not None:
            self._timer.stop()
        self._cids = []
        self._timer = None
        self._figure = None
