"""
sociogram/viz/export.py — Export Composer: off-screen PNG of the live view.

The export is not a screen capture. A temporary renderer is stood up over the
same GraphStore with a copy of the live camera state and drawn into an
off-screen Agg figure:

    ┌──────────────────────────────┐
    │ white + 20 px grid           │  background
    │ edges / nodes / labels ...   │  same layers as the live view
    │                  [watermark] │  optional, bottom-right of graph area
    ├──────────────────────────────┤
    │ ■ 0 ... ■ 1 ... ■ 4 ...      │  optional legend strip
    └──────────────────────────────┘

A watermark that cannot be loaded is logged and skipped; the export still
succeeds. The off-screen figure is released on both success and failure.
"""

import io
import logging
import os
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional, Sequence

import matplotlib.image as mpimg
from matplotlib.backends.backend_agg import FigureCanvasAgg
from matplotlib.collections import LineCollection
from matplotlib.figure import Figure
from matplotlib.patches import Rectangle
import numpy as np

from sociogram.models import ScoreBand
from sociogram.scoring import SCORE_BANDS
from sociogram.viz.camera import Camera
from sociogram.viz.renderer import BASE_DPI, Renderer

logger = logging.getLogger(__name__)

WATERMARK_MARGIN_PX = 10


@dataclass(frozen=True)
class ExportedImage:
    """
    A rendered PNG held in memory.

    Fields:
        filename:    Timestamped file name, e.g. sociogram_20260101_120000_000001.png
        data:        PNG bytes.
        width:       Pixel width.
        height:      Pixel height (graph area plus legend strip).
        watermarked: Whether the watermark was composited.
    """
    filename: str
    data: bytes
    width: int
    height: int
    watermarked: bool


def export_filename(prefix: str, now: Optional[datetime] = None) -> str:
    now = now or datetime.now(tz=timezone.utc)
    return f"{prefix}_{now.strftime('%Y%m%d_%H%M%S_%f')}.png"


def _offscreen_renderer(live: Renderer) -> Renderer:
    """A second renderer over the same store, frozen at the live camera state."""
    camera = Camera(live.config)
    camera.set_state(live.camera.state)
    tmp = Renderer(live.store, camera, live.config)
    tmp.width = live.width
    tmp.height = live.height
    tmp.pixel_ratio = live.pixel_ratio
    tmp.hovered = live.hovered
    return tmp


def _draw_grid(fig: Figure, rect: list[float], width: int, height: int, spacing: int, color) -> None:
    ax = fig.add_axes(rect, zorder=0)
    ax.set_xlim(0, width)
    ax.set_ylim(height, 0)
    ax.set_axis_off()
    segments = [[(x, 0), (x, height)] for x in np.arange(0, width + 1, spacing)]
    segments += [[(0, y), (width, y)] for y in np.arange(0, height + 1, spacing)]
    ax.add_collection(LineCollection(segments, colors=[color], linewidths=0.72))


def _overlay_watermark(fig: Figure, path: str, right_px: float, bottom_px: float, alpha: float) -> bool:
    """Composite the watermark anchored to (right_px, bottom_px) in figure pixels."""
    try:
        image = mpimg.imread(path)
    except (OSError, ValueError) as exc:
        logger.warning("Watermark '%s' could not be loaded (%s); exporting without it.", path, exc)
        return False
    img_h, img_w = image.shape[:2]
    fig.figimage(
        image,
        xo=max(0, int(right_px - img_w - WATERMARK_MARGIN_PX)),
        yo=int(bottom_px + WATERMARK_MARGIN_PX),
        alpha=alpha,
        zorder=10,
    )
    return True


def _draw_legend(fig: Figure, rect: list[float], legend: Sequence[ScoreBand], font: str) -> None:
    ax = fig.add_axes(rect, zorder=2)
    ax.set_xlim(0, 1)
    ax.set_ylim(0, 1)
    ax.set_axis_off()
    ax.axhline(1.0, color="#000000", linewidth=1.5)

    slot = 1.0 / max(1, len(legend))
    for i, band in enumerate(legend):
        x = i * slot + 0.01
        ax.add_patch(Rectangle((x, 0.35), 0.018, 0.3, facecolor=band.color, edgecolor="#000000", linewidth=0.5))
        ax.text(
            x + 0.025, 0.5, f"{band.title} ({band.level})",
            fontsize=7.5, fontfamily=font, va="center", ha="left", color="#000000",
        )


def export_image(
    renderer: Renderer,
    legend: Optional[Sequence[ScoreBand]] = SCORE_BANDS,
    watermark_path: Optional[str] = None,
    now: Optional[datetime] = None,
) -> Optional[ExportedImage]:
    """
    Render the live view into a PNG with optional watermark and legend strip.

    Args:
        renderer:       The live Renderer (store + camera + viewport size).
        legend:         Score bands for the legend strip; None or empty omits it.
        watermark_path: Image to anchor bottom-right; defaults to
                        renderer.config.watermark_path. None disables it.
        now:            Timestamp for the file name (default: current UTC time).

    Returns:
        ExportedImage, or None if the off-screen figure could not be created.
    """
    config = renderer.config
    width, height = renderer.width, renderer.height
    pixel_ratio = renderer.pixel_ratio
    legend_h = config.legend_height_px if legend else 0
    total_h = height + legend_h
    watermark_path = watermark_path if watermark_path is not None else config.watermark_path

    try:
        fig = Figure(
            figsize=(width / BASE_DPI, total_h / BASE_DPI),
            dpi=BASE_DPI * pixel_ratio,
            facecolor=config.background_color,
        )
        FigureCanvasAgg(fig)
    except (ValueError, RuntimeError, MemoryError) as exc:
        logger.warning("Off-screen figure unavailable (%s); export aborted.", exc)
        return None

    offscreen = _offscreen_renderer(renderer)
    try:
        graph_rect = [0.0, legend_h / total_h, 1.0, height / total_h]

        _draw_grid(fig, graph_rect, width, height, config.grid_spacing_px, config.grid_color)

        graph_ax = fig.add_axes(graph_rect, zorder=1)
        graph_ax.patch.set_alpha(0.0)
        offscreen.draw(graph_ax)

        watermarked = False
        if watermark_path:
            watermarked = _overlay_watermark(
                fig,
                watermark_path,
                right_px=width * pixel_ratio,
                bottom_px=legend_h * pixel_ratio,
                alpha=config.watermark_alpha,
            )

        if legend:
            _draw_legend(fig, [0.0, 0.0, 1.0, legend_h / total_h], legend, config.label_font)

        buf = io.BytesIO()
        fig.savefig(buf, format="png", dpi=BASE_DPI * pixel_ratio, facecolor=config.background_color)
        image = ExportedImage(
            filename=export_filename(config.export_prefix, now),
            data=buf.getvalue(),
            width=int(round(width * pixel_ratio)),
            height=int(round(total_h * pixel_ratio)),
            watermarked=watermarked,
        )
    finally:
        offscreen.detach()
        fig.clear()

    logger.info(
        "Exported %s (%dx%d px, %d nodes, %d edges%s).",
        image.filename,
        image.width,
        image.height,
        len(renderer.store),
        renderer.store.number_of_edges(),
        ", watermarked" if image.watermarked else "",
    )
    return image


def save_exported_image(image: ExportedImage, output_dir: str) -> str:
    """
    Write an ExportedImage to `output_dir` (created if needed).

    Returns:
        Absolute path of the written file.
    """
    os.makedirs(output_dir, exist_ok=True)
    path = os.path.join(output_dir, image.filename)
    with open(path, "wb") as fh:
        fh.write(image.data)
    logger.info("Saved export to: %s", path)
    return os.path.abspath(path)
