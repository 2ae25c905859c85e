"""
Export layout runs to CSV, JSON and PNG.

Positions CSV columns (exact schema):
    tick, alpha, node_id, x_px, y_px, x_pct, zone, pinned

Zone changes CSV columns:
    tick, node_id, previous, zone
"""

import csv
import json
import subprocess
from pathlib import Path
from typing import Optional
from datetime import datetime

from PIL import Image, ImageDraw

from .canvas import pct_to_px
from .config import config_to_dict
from .edges import derive_edges
from .rendering import ZONE_COLORS, edge_style, with_opacity
from .runner import LayoutResult
from .zones import Zone


CSV_COLUMNS = ["tick", "alpha", "node_id", "x_px", "y_px", "x_pct", "zone", "pinned"]
ZONE_CHANGE_COLUMNS = ["tick", "node_id", "previous", "zone"]

LANE_TINT_OPACITY = 0.12


def export_csv(result: LayoutResult, path: Path) -> None:
    """
    Export per-node step records to CSV.

    Args:
        result: Layout result.
        path: Output CSV path.
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, 'w', newline='') as f:
        writer = csv.writer(f)
        writer.writerow(CSV_COLUMNS)
        for rec in result.records:
            writer.writerow([
                rec.tick,
                rec.alpha,
                rec.node_id,
                rec.x_px,
                rec.y_px,
                rec.x_pct,
                rec.zone,
                1 if rec.pinned else 0
            ])


def export_zone_changes(result: LayoutResult, path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, 'w', newline='') as f:
        writer = csv.writer(f)
        writer.writerow(ZONE_CHANGE_COLUMNS)
        for change in result.zone_changes:
            writer.writerow([change.tick, change.node_id, change.previous.value, change.zone.value])


def get_git_commit() -> Optional[str]:
    """Get current git commit hash if available."""
    try:
        proc = subprocess.run(
            ["git", "rev-parse", "HEAD"],
            capture_output=True,
            text=True,
            timeout=5
        )
    except (OSError, subprocess.SubprocessError):
        return None
    if proc.returncode == 0:
        return proc.stdout.strip()[:12]
    return None


def export_metadata(result: LayoutResult, path: Path) -> None:
    """
    Export metadata JSON with config, summary and the final scenario.
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    final_counts = result.final_scenario.zone_counts()
    metadata = {
        "timestamp": datetime.now().isoformat(),
        "git_commit": get_git_commit(),
        "config": config_to_dict(result.config),
        "canvas": {"width": result.canvas.width, "height": result.canvas.height},
        "summary": {
            "ticks": result.ticks,
            "reached_rest": result.reached_rest,
            "n_nodes": len(result.final_scenario.tasks),
            "n_zone_changes": len(result.zone_changes),
            "final_boundaries": list(result.final_boundaries.as_tuple()),
            "zone_counts": {zone.value: count for zone, count in final_counts.items()}
        },
        "final_scenario": result.final_scenario.to_dict()
    }

    with open(path, 'w') as f:
        json.dump(metadata, f, indent=2)


def export_snapshot_png(result: LayoutResult, path: Path) -> None:
    """
    Draw the final frame: tinted lanes, boundary lines, visible edges, nodes.
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    width = max(1, int(round(result.canvas.width)))
    height = max(1, int(round(result.canvas.height)))
    radius = result.config.canvas.node_radius

    img = Image.new("RGBA", (width, height), (18, 18, 20, 255))
    overlay = Image.new("RGBA", (width, height), (0, 0, 0, 0))
    draw = ImageDraw.Draw(overlay)

    boundaries = result.final_boundaries
    for zone in Zone:
        lo, hi = boundaries.lane_span_pct(zone)
        draw.rectangle(
            (pct_to_px(lo, width), 0, pct_to_px(hi, width), height),
            fill=with_opacity(ZONE_COLORS[zone], LANE_TINT_OPACITY)
        )
    for pct in boundaries.as_tuple():
        x = pct_to_px(pct, width)
        draw.line((x, 0, x, height), fill=(255, 255, 255, 90), width=1)

    final_tick = max((r.tick for r in result.records), default=None)
    last = {r.node_id: r for r in result.records if r.tick == final_tick}
    zones = {t.id: t.zone for t in result.final_scenario.tasks}

    for edge in derive_edges(result.final_scenario.tasks):
        style = edge_style(edge, zones)
        if not style.visible or edge.source not in last or edge.target not in last:
            continue
        s, t = last[edge.source], last[edge.target]
        draw.line((s.x_px, s.y_px, t.x_px, t.y_px),
                  fill=with_opacity(style.color, style.opacity), width=2)

    for node_id, rec in last.items():
        color = ZONE_COLORS[Zone(rec.zone)]
        draw.ellipse(
            (rec.x_px - radius, rec.y_px - radius, rec.x_px + radius, rec.y_px + radius),
            fill=color,
            outline=(255, 255, 255, 255),
            width=2
        )
        draw.text((rec.x_px - radius + 6, rec.y_px - 5), node_id[:8], fill=(255, 255, 255, 255))

    Image.alpha_composite(img, overlay).convert("RGB").save(path, format="PNG")


def export_results(result: LayoutResult, out_dir: Path, run_name: str, snapshot_png: bool = False) -> dict:
    """
    Export all results to output directory.

    Returns:
        Dict with paths to exported files.
    """
    out_dir = Path(out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)

    paths = {
        "csv": out_dir / f"{run_name}.csv",
        "zone_changes": out_dir / f"{run_name}_zone_changes.csv",
        "metadata": out_dir / f"{run_name}_metadata.json",
    }
    export_csv(result, paths["csv"])
    export_zone_changes(result, paths["zone_changes"])
    export_metadata(result, paths["metadata"])

    if snapshot_png:
        paths["png"] = out_dir / f"{run_name}.png"
        export_snapshot_png(result, paths["png"])

    return {key: str(p) for key, p in paths.items()}
