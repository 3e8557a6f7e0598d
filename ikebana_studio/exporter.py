from __future__ import annotations

import csv
from dataclasses import dataclass
from pathlib import Path

from .progress import CatalogSummary
from .utils import write_json_atomic

PROGRESS_FIELDS = ["graduation", "completed", "remaining", "total", "percentage"]


@dataclass
class ExportStats:
    rows_exported: int = 0


def export_progress_csv(summary: CatalogSummary, out_path: str | Path) -> ExportStats:
    """Export per-graduation progress to CSV.

    Columns: graduation, completed, remaining, total, percentage (1 decimal).
    One row per graduation in curriculum order; an empty catalog still
    yields a row per graduation with completed=0.
    """
    out_path = Path(out_path)
    stats = ExportStats()

    out_path.parent.mkdir(parents=True, exist_ok=True)
    with out_path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=PROGRESS_FIELDS)
        writer.writeheader()
        for p in summary.by_graduation.values():
            writer.writerow(
                {
                    "graduation": p.graduation,
                    "completed": p.completed,
                    "remaining": p.remaining,
                    "total": p.total,
                    "percentage": f"{p.percentage:.1f}",
                }
            )
            stats.rows_exported += 1
    return stats


def export_progress_json(summary: CatalogSummary, out_path: str | Path) -> ExportStats:
    data = summary.to_dict()
    write_json_atomic(out_path, data)
    return ExportStats(rows_exported=len(data["graduations"]))
