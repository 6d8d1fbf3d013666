"""
sociogram/viz/renderer.py — Retained-mode matplotlib renderer for the store.

The renderer maps graph space to a W×H pixel viewport through the camera and
draws the store in five layers, back to front:

    edges       straight or quadratic-Bézier arrows, colored by score band
    nodes       one scatter marker per member, sized/colored by the Score Model
    edgeLabels  the integer score at each arrow's midpoint
    labels      member names beside their node
    hovers      a ring around the node under the pointer

draw(ax) paints into any Axes (the live one or the export composer's
off-screen one) so both outputs come from the same code path.

Pixel conventions: viewport coordinates have their origin at the top-left,
y growing downwards, in logical (CSS-like) pixels. A node's `size` is its
radius in logical pixels.
"""

import logging
from typing import Optional

from matplotlib.artist import Artist
from matplotlib.axes import Axes
from matplotlib.patches import Circle, FancyArrowPatch
from matplotlib.path import Path
import numpy as np

from sociogram.config import DEFAULT_CONFIG, SociogramConfig
from sociogram.graph.edges import curve_control_point
from sociogram.graph.store import GraphStore
from sociogram.viz.camera import Camera, CameraState

logger = logging.getLogger(__name__)

LAYERS = ("edges", "nodes", "edgeLabels", "labels", "hovers")

# Matplotlib figures are laid out at this many dpi per unit pixel ratio.
BASE_DPI = 100.0
_POINTS_PER_PIXEL = 72.0 / BASE_DPI

_LAYER_ZORDER = {"edges": 1, "nodes": 2, "edgeLabels": 3, "labels": 4, "hovers": 5}


class Renderer:
    """
    Draws a GraphStore through a Camera.

    Args:
        store:  The view's GraphStore.
        camera: The view's Camera.
        config: SociogramConfig (viewport size, fonts, view extent).
    """

    def __init__(
        self,
        store: GraphStore,
        camera: Camera,
        config: SociogramConfig = DEFAULT_CONFIG,
    ) -> None:
        self.store = store
        self.camera = camera
        self.config = config
        self.width = config.viewport_width
        self.height = config.viewport_height
        self.pixel_ratio = config.pixel_ratio
        self.hovered: Optional[str] = None
        self._ax: Optional[Axes] = None
        self._artists: dict[str, list[Artist]] = {name: [] for name in LAYERS}

    # ── Coordinate mapping ────────────────────────────────────────────────────

    def pixels_per_unit(self, state: Optional[CameraState] = None) -> float:
        state = state or self.camera.state
        return min(self.width, self.height) / self.config.view_extent / state.ratio

    def graph_to_viewport(self, gx: float, gy: float) -> tuple[float, float]:
        state = self.camera.state
        s = self.pixels_per_unit(state)
        return self.width / 2 + (gx - state.x) * s, self.height / 2 - (gy - state.y) * s

    def viewport_to_graph(self, px: float, py: float) -> tuple[float, float]:
        state = self.camera.state
        s = self.pixels_per_unit(state)
        return state.x + (px - self.width / 2) / s, state.y - (py - self.height / 2) / s

    def visible_limits(
        self, state: Optional[CameraState] = None
    ) -> tuple[tuple[float, float], tuple[float, float]]:
        state = state or self.camera.state
        s = self.pixels_per_unit(state)
        half_w = self.width / 2 / s
        half_h = self.height / 2 / s
        return (state.x - half_w, state.x + half_w), (state.y - half_h, state.y + half_h)

    def node_at(self, px: float, py: float) -> Optional[str]:
        """Top-most node whose disc contains viewport point (px, py)."""
        hit = None
        for node in self.store.nodes():
            nx_, ny_ = self.graph_to_viewport(node.x, node.y)
            if (nx_ - px) ** 2 + (ny_ - py) ** 2 <= node.size ** 2:
                hit = node.id
        return hit

    # ── Camera operations ─────────────────────────────────────────────────────

    def home_state(self) -> CameraState:
        """Ratio 1, centred on the middle of the node bounding box."""
        bounds = self.store.bounds()
        if bounds is None:
            return CameraState()
        min_x, min_y, max_x, max_y = bounds
        return CameraState(x=(min_x + max_x) / 2, y=(min_y + max_y) / 2, ratio=1.0)

    def zoom_in(self) -> bool:
        return self.camera.animated_zoom()

    def zoom_out(self) -> bool:
        return self.camera.animated_unzoom()

    def center(self) -> bool:
        return self.camera.animated_reset(self.home_state())

    def step(self, now: Optional[float] = None) -> bool:
        """Advance camera animation; redraw if the live Axes is attached."""
        running = self.camera.tick(now)
        if self._ax is not None:
            self.refresh()
        return running

    # ── Drawing ───────────────────────────────────────────────────────────────

    def attach(self, ax: Axes) -> None:
        """Use `ax` as the live drawing surface."""
        self._ax = ax
        self.refresh()

    def detach(self) -> None:
        self._clear_artists()
        self._ax = None

    def _clear_artists(self) -> None:
        for artists in self._artists.values():
            for artist in artists:
                artist.remove()
        self._artists = {name: [] for name in LAYERS}

    def refresh(self) -> None:
        """Redraw the attached Axes from the current store and camera."""
        if self._ax is None:
            return
        self._clear_artists()
        self._artists = self.draw(self._ax)
        self._ax.figure.canvas.draw_idle()

    def draw(self, ax: Axes, state: Optional[CameraState] = None) -> dict[str, list[Artist]]:
        """
        Paint every layer into `ax` as seen through `state` (default: live camera).

        Returns:
            Dict of layer name → artists added to `ax`.
        """
        state = state or self.camera.state
        xlim, ylim = self.visible_limits(state)
        ax.set_xlim(*xlim)
        ax.set_ylim(*ylim)
        ax.set_axis_off()

        units_per_px = 1.0 / self.pixels_per_unit(state)
        nodes = {n.id: n for n in self.store.nodes()}
        layers: dict[str, list[Artist]] = {name: [] for name in LAYERS}

        for edge in self.store.edges():
            src = nodes[edge.source]
            tgt = nodes[edge.target]
            a = np.array([src.x, src.y])
            b = np.array([tgt.x, tgt.y])
            c = np.array(curve_control_point((src.x, src.y), (tgt.x, tgt.y), edge.as_render_edge()))

            # Stop the arrow head at the target's rim.
            approach = b - c if edge.curve_offset else b - a
            dist = float(np.hypot(*approach))
            if dist > 1e-12:
                b = b - approach / dist * tgt.size * units_per_px

            path = Path([tuple(a), tuple(c), tuple(b)], [Path.MOVETO, Path.CURVE3, Path.CURVE3])
            arrow = FancyArrowPatch(
                path=path,
                arrowstyle="-|>",
                mutation_scale=10 + edge.size * 2,
                color=edge.color,
                linewidth=edge.size * _POINTS_PER_PIXEL * 1.5,
                zorder=_LAYER_ZORDER["edges"],
            )
            ax.add_patch(arrow)
            layers["edges"].append(arrow)

            mid = 0.25 * a + 0.5 * c + 0.25 * np.array([tgt.x, tgt.y])
            label = ax.text(
                mid[0], mid[1], edge.label,
                fontsize=self.config.label_size * 0.8 * _POINTS_PER_PIXEL,
                fontfamily=self.config.label_font,
                color=edge.color,
                ha="center", va="center",
                bbox={"boxstyle": "round,pad=0.15", "fc": "white", "ec": "none", "alpha": 0.8},
                zorder=_LAYER_ZORDER["edgeLabels"],
            )
            layers["edgeLabels"].append(label)

        if nodes:
            ordered = list(nodes.values())
            scatter = ax.scatter(
                [n.x for n in ordered],
                [n.y for n in ordered],
                s=[(2 * n.size * _POINTS_PER_PIXEL) ** 2 for n in ordered],
                c=[n.color for n in ordered],
                edgecolors="white",
                linewidths=1.0,
                zorder=_LAYER_ZORDER["nodes"],
            )
            layers["nodes"].append(scatter)

            for n in ordered:
                text = ax.text(
                    n.x + n.size * units_per_px * 1.2, n.y, n.label,
                    fontsize=self.config.label_size * _POINTS_PER_PIXEL,
                    fontfamily=self.config.label_font,
                    fontweight="bold",
                    color="#000000",
                    ha="left", va="center",
                    zorder=_LAYER_ZORDER["labels"],
                )
                layers["labels"].append(text)

        if self.hovered is not None and self.hovered in nodes:
            n = nodes[self.hovered]
            ring = Circle(
                (n.x, n.y),
                radius=n.size * units_per_px * 1.35,
                fill=False,
                edgecolor=self.config.hover_color,
                linewidth=1.5,
                zorder=_LAYER_ZORDER["hovers"],
            )
            ax.add_patch(ring)
            layers["hovers"].append(ring)

        return layers

    def new_figure_size(self) -> tuple[float, float]:
        """Figure size in inches matching the viewport at BASE_DPI."""
        return self.width / BASE_DPI, self.height / BASE_DPI
