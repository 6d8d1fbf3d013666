"""
sociogram/cli.py — Command-line interface for the sociogram engine.

Runs the same pipeline as the interactive view (filter → resolve → sync) on a
JSON dataset snapshot and writes the result to disk:

Usage:
    sociogram render team.json                      # PNG with legend strip
    sociogram render team.json --name ali --department R&D
    sociogram html team.json --output team.html     # Plotly snapshot
    sociogram summary team.json                     # incoming scores per member

The dataset is {"nodes": [Member...], "edges": [Relationship...]}.
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from dataclasses import replace

from sociogram.config import DEFAULT_CONFIG, SociogramConfig
from sociogram.graph.store import LayoutMode


# ── Logging setup ─────────────────────────────────────────────────────────────

def _setup_logging(level: str = "INFO") -> None:
    """Configure root logger with timestamps and level names."""
    numeric = getattr(logging, level.upper(), logging.INFO)
    fmt = "%(asctime)s  %(levelname)-8s  %(name)s — %(message)s"
    datefmt = "%H:%M:%S"
    logging.basicConfig(level=numeric, format=fmt, datefmt=datefmt, stream=sys.stderr)
    # Matplotlib's font manager is chatty at DEBUG.
    logging.getLogger("matplotlib").setLevel(logging.WARNING)


logger = logging.getLogger("sociogram.cli")


def _config_from_args(args: argparse.Namespace) -> SociogramConfig:
    overrides = {}
    if getattr(args, "size_policy", None):
        overrides["size_policy"] = args.size_policy
    if getattr(args, "seed", None) is not None:
        overrides["layout_seed"] = args.seed
    if getattr(args, "width", None):
        overrides["viewport_width"] = args.width
    if getattr(args, "height", None):
        overrides["viewport_height"] = args.height
    if getattr(args, "pixel_ratio", None):
        overrides["pixel_ratio"] = args.pixel_ratio
    return replace(DEFAULT_CONFIG, **overrides)


def _build_view(args: argparse.Namespace):
    from sociogram.graph.edges import resolve_edges
    from sociogram.graph.filters import filter_graph
    from sociogram.models import load_dataset
    from sociogram.view import SociogramView

    members, relationships = load_dataset(args.dataset)
    view = SociogramView(config=_config_from_args(args))
    base_size = view.clamp_node_size(args.node_size)

    shown_members, shown_relationships = filter_graph(
        members, relationships, args.name, args.department,
    )
    view.store.sync(
        shown_members,
        resolve_edges(shown_relationships, view.config),
        base_size,
        relationships=shown_relationships,
        layout=LayoutMode(args.layout),
    )
    view.camera.set_state(view.renderer.home_state())
    return view, shown_relationships


# ── Subcommand: render ────────────────────────────────────────────────────────

def cmd_render(args: argparse.Namespace) -> int:
    """Filter the dataset, lay it out and export a PNG."""
    _setup_logging(args.log_level)
    from sociogram.viz.export import save_exported_image

    view, _ = _build_view(args)
    try:
        image = view.export_image(
            with_legend=not args.no_legend,
            watermark_path=args.watermark,
        )
        if image is None:
            logger.error("Export failed: off-screen renderer unavailable.")
            return 1
        path = save_exported_image(image, args.output_dir)
    finally:
        view.close()

    print(path)
    return 0


# ── Subcommand: html ──────────────────────────────────────────────────────────

def cmd_html(args: argparse.Namespace) -> int:
    """Write a standalone Plotly HTML snapshot."""
    _setup_logging(args.log_level)
    from sociogram.viz.plotly_graph import build_plotly_figure, save_figure_html

    view, shown_relationships = _build_view(args)
    try:
        fig = build_plotly_figure(view.store, shown_relationships)
        output = args.output or os.path.splitext(os.path.basename(args.dataset))[0] + ".html"
        save_figure_html(fig, output)
    finally:
        view.close()

    print(os.path.abspath(output))
    return 0


# ── Subcommand: summary ───────────────────────────────────────────────────────

def cmd_summary(args: argparse.Namespace) -> int:
    """Print each member's incoming average score and band."""
    _setup_logging(args.log_level)
    from sociogram.models import load_dataset
    from sociogram.scoring import average_incoming_score, score_band

    members, relationships = load_dataset(args.dataset)

    print()
    print(f"  {'Membre':<28} {'Dépt.':<16} {'Reçues':>6} {'Moyenne':>8}  Niveau")
    print("  " + "-" * 78)
    for member in sorted(members, key=lambda m: m.label.casefold()):
        received = sum(1 for r in relationships if r.target == member.id)
        avg = average_incoming_score(member.id, relationships)
        band = score_band(avg)
        print(
            f"  {member.label[:28]:<28} {member.department[:16]:<16} "
            f"{received:>6} {avg:>8.2f}  {band.level} {band.title}"
        )
    print()
    return 0


# ── Argument parser ───────────────────────────────────────────────────────────

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sociogram",
        description="Collaboration graph rendering from a team dataset snapshot.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log level (default: INFO)",
    )

    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")
    subparsers.required = True

    def add_view_flags(p: argparse.ArgumentParser) -> None:
        p.add_argument("dataset", metavar="DATASET", help="JSON snapshot with 'nodes' and 'edges'")
        p.add_argument("--name", default="", help="Member name substring filter")
        p.add_argument("--department", default="", help="Exact department filter")
        p.add_argument(
            "--node-size", type=float, default=None, metavar="N",
            help=f"Base node size, {DEFAULT_CONFIG.min_node_size:g}-{DEFAULT_CONFIG.max_node_size:g} "
                 f"(default: {DEFAULT_CONFIG.base_node_size:g})",
        )
        p.add_argument(
            "--layout", default=LayoutMode.CIRCULAR.value,
            choices=[m.value for m in LayoutMode],
            help="Initial placement (default: circular)",
        )
        p.add_argument(
            "--size-policy", default=None,
            choices=["flat", "score_weighted", "evaluation_count"],
            help=f"Node sizing policy (default: {DEFAULT_CONFIG.size_policy})",
        )
        p.add_argument("--seed", type=int, default=None, help="Scatter layout seed")
        p.add_argument("--width", type=int, default=None, help="Viewport width in pixels")
        p.add_argument("--height", type=int, default=None, help="Viewport height in pixels")

    p_render = subparsers.add_parser("render", help="Export the graph as PNG")
    add_view_flags(p_render)
    p_render.add_argument("--output-dir", default=".", metavar="PATH", help="Directory for the PNG")
    p_render.add_argument("--no-legend", action="store_true", help="Omit the legend strip")
    p_render.add_argument("--watermark", default=None, metavar="PATH", help="Watermark image")
    p_render.add_argument("--pixel-ratio", type=float, default=None, help="Output pixel density")
    p_render.set_defaults(func=cmd_render)

    p_html = subparsers.add_parser("html", help="Export an interactive Plotly HTML file")
    add_view_flags(p_html)
    p_html.add_argument("--output", default=None, metavar="PATH", help="HTML output path")
    p_html.set_defaults(func=cmd_html)

    p_summary = subparsers.add_parser("summary", help="Print incoming scores per member")
    p_summary.add_argument("dataset", metavar="DATASET")
    p_summary.set_defaults(func=cmd_summary)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
