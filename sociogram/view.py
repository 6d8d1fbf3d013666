"""
sociogram/view.py — The mounted view handle.

SociogramView owns one GraphStore, Camera, Renderer and InteractionController
for its lifetime and is the only object the surrounding application holds:

    view = SociogramView(on_evaluate=open_evaluation_form)
    view.update(members, relationships, name_filter="ali", base_size=12)
    view.zoom_in(); view.center()
    png = view.export_image()
    view.close()

Data flow per update():
    filter_graph → resolve_edges → GraphStore.sync (Score Model inside)

A change of name/department filter rebuilds positions on a circle so the
filtered result is legible; any other refresh keeps every node where it is.
"""

import logging
from typing import Optional, Sequence

from sociogram.config import DEFAULT_CONFIG, SociogramConfig
from sociogram.graph.edges import resolve_edges
from sociogram.graph.filters import filter_graph
from sociogram.graph.store import GraphStore, LayoutMode, SyncReport
from sociogram.models import Member, Relationship
from sociogram.scoring import SCORE_BANDS, SizePolicy
from sociogram.viz.camera import Camera, Clock
from sociogram.viz.export import ExportedImage, export_image
from sociogram.viz.interaction import EvaluateCallback, InteractionController, MatplotlibBinding
from sociogram.viz.renderer import BASE_DPI, Renderer

logger = logging.getLogger(__name__)


class SociogramView:
    """
    Interactive collaboration graph bound to one set of collaborators.

    Args:
        on_evaluate: Called with a member id when a node is clicked.
        config:      SociogramConfig.
        size_policy: Optional override of config.size_policy.
        clock:       Monotonic clock for camera animations (tests inject one).
    """

    def __init__(
        self,
        on_evaluate: Optional[EvaluateCallback] = None,
        config: SociogramConfig = DEFAULT_CONFIG,
        size_policy: Optional[SizePolicy] = None,
        clock: Optional[Clock] = None,
    ) -> None:
        self.config = config
        self.store = GraphStore(config, size_policy=size_policy)
        self.camera = Camera(config, clock=clock)
        self.renderer = Renderer(self.store, self.camera, config)
        self.controller = InteractionController(self.store, self.renderer, on_evaluate, config)
        self._binding: Optional[MatplotlibBinding] = None
        self._filters: Optional[tuple[str, str]] = None
        self._closed = False

    # ── Data ──────────────────────────────────────────────────────────────────

    def clamp_node_size(self, size: Optional[float]) -> float:
        if size is None:
            return self.config.base_node_size
        return max(self.config.min_node_size, min(self.config.max_node_size, float(size)))

    def update(
        self,
        members: Sequence[Member],
        relationships: Sequence[Relationship],
        name_filter: str = "",
        department_filter: str = "",
        base_size: Optional[float] = None,
    ) -> SyncReport:
        """
        Bring the view in line with a new data snapshot and/or filter state.

        Returns:
            The store's SyncReport for this refresh.
        """
        if self._closed:
            raise RuntimeError("SociogramView.update() called after close()")

        filters = (name_filter or "", department_filter or "")
        filter_changed = self._filters is not None and filters != self._filters
        self._filters = filters

        shown_members, shown_relationships = filter_graph(
            members, relationships, name_filter, department_filter,
        )
        render_edges = resolve_edges(shown_relationships, self.config)

        report = self.store.sync(
            shown_members,
            render_edges,
            self.clamp_node_size(base_size),
            relationships=shown_relationships,
            layout=LayoutMode.CIRCULAR if filter_changed else LayoutMode.SCATTER,
            rebuild=filter_changed,
        )
        self.controller.reconcile()
        self.renderer.refresh()

        logger.info(
            "View updated: %d/%d members, %d edges shown%s.",
            len(shown_members),
            len(members),
            report.edges,
            " (filter changed, circular rebuild)" if filter_changed else "",
        )
        return report

    # ── Toolbar ───────────────────────────────────────────────────────────────

    def zoom_in(self) -> bool:
        return self.controller.zoom_in()

    def zoom_out(self) -> bool:
        return self.controller.zoom_out()

    def center(self) -> bool:
        return self.controller.center()

    def export_image(self, with_legend: bool = True, watermark_path: Optional[str] = None) -> Optional[ExportedImage]:
        return export_image(
            self.renderer,
            legend=SCORE_BANDS if with_legend else None,
            watermark_path=watermark_path,
        )

    # ── Live surface ──────────────────────────────────────────────────────────

    def bind(self, figure=None):
        """
        Mount the view on a matplotlib figure (a new one if not given).

        Returns:
            The figure, ready for plt.show() under an interactive backend.
        """
        if figure is None:
            import matplotlib.pyplot as plt

            figure = plt.figure(
                figsize=self.renderer.new_figure_size(),
                dpi=BASE_DPI * self.renderer.pixel_ratio,
            )
        ax = figure.add_axes([0.0, 0.0, 1.0, 1.0])
        self.renderer.attach(ax)
        self._binding = MatplotlibBinding(self.controller, self.renderer)
        self._binding.connect(figure)
        return figure

    def close(self) -> None:
        """Unmount: disconnect events, drop artists and tear the store down."""
        if self._closed:
            return
        if self._binding is not None:
            self._binding.disconnect()
            self._binding = None
        self.renderer.detach()
        self.store.clear()
        self._closed = True
        logger.debug("View closed.")
