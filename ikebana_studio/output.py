from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from .utils import append_jsonl, ensure_dir, utc_now_iso

BOOKLET_FILENAME = "my-ikebana-booklet.pdf"


@dataclass
class OutputPaths:
    out_dir: Path
    booklet_pdf: Path
    cards_dir: Path
    previews_dir: Path
    summary_json: Path
    errors_jsonl: Path


def output_paths(out_dir: str | Path) -> OutputPaths:
    root = Path(out_dir)
    return OutputPaths(
        out_dir=root,
        booklet_pdf=root / BOOKLET_FILENAME,
        cards_dir=root / "cards",
        previews_dir=root / "previews",
        summary_json=root / "summary.json",
        errors_jsonl=root / "errors.jsonl",
    )


def create_output_dirs(out_dir: str | Path) -> OutputPaths:
    paths = output_paths(out_dir)
    for p in [paths.out_dir, paths.cards_dir]:
        ensure_dir(p)
    return paths


def record_error(paths: OutputPaths, stage: str, message: str, *, ref: str | None = None) -> None:
    entry = {"at": utc_now_iso(), "stage": stage, "message": message}
    if ref is not None:
        entry["ref"] = ref
    append_jsonl(paths.errors_jsonl, entry)
