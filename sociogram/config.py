"""
sociogram/config.py — All tunable parameters for the sociogram engine.

No magic number should live in a layout, rendering, or export module. Node
sizing, camera limits, drag thresholds and export geometry all live here so
that a visual recalibration is a single-file diff.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class SociogramConfig:
    """
    Immutable configuration for the sociogram view.

    Override by constructing a new SociogramConfig (or dataclasses.replace on
    DEFAULT_CONFIG) with the desired values.
    """

    # ── Node sizing ───────────────────────────────────────────────────────────
    base_node_size: float = 10.0
    # Default value of the node-size slider.

    min_node_size: float = 5.0
    max_node_size: float = 20.0
    # Slider bounds. Values outside are clamped by SociogramView.update().

    size_policy: str = "score_weighted"
    # One of sociogram.scoring.SIZE_POLICIES: 'flat', 'score_weighted',
    # 'evaluation_count'. Every policy leaves isolated nodes at base size.

    # ── Initial placement ─────────────────────────────────────────────────────
    scatter_extent: float = 5.0
    # New nodes scatter uniformly in [-extent, extent] on both axes.

    circle_radius: float = 5.0
    # Radius used by the circular placement after a filter change.

    layout_seed: int = 42
    # Seed of the store-owned RNG used for scatter placement.

    # ── Edges ─────────────────────────────────────────────────────────────────
    curve_fraction: float = 0.2
    # Perpendicular bow of a bidirectional pair, as a fraction of the
    # segment length. The two arrows take +fraction and -fraction.

    edge_width: float = 2.0

    # ── Interaction ───────────────────────────────────────────────────────────
    drag_threshold_px: float = 5.0
    # Pointer travel (screen pixels) below which a press/release is a click.

    animation_duration_ms: int = 600
    zoom_factor: float = 1.5
    min_camera_ratio: float = 0.1
    max_camera_ratio: float = 5.0

    view_extent: float = 12.0
    # Graph units spanned by the shorter viewport side at camera ratio 1.

    # ── Viewport / rendering ──────────────────────────────────────────────────
    viewport_width: int = 960
    viewport_height: int = 640
    pixel_ratio: float = 1.0
    label_font: str = "monospace"
    label_size: float = 14.0
    default_node_color: str = "#4169E1"
    hover_color: str = "#000000"

    # ── Export ────────────────────────────────────────────────────────────────
    grid_spacing_px: int = 20
    grid_color: tuple = (0.0, 0.0, 0.0, 0.05)
    background_color: str = "#FFFFFF"
    legend_height_px: int = 70
    watermark_path: Optional[str] = None
    watermark_alpha: float = 0.6
    export_prefix: str = "sociogram"


# Singleton default: import this everywhere instead of constructing anew.
DEFAULT_CONFIG = SociogramConfig()
