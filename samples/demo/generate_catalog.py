"""Build a small demo catalog (photos + works.json) for trying the CLI.

Usage:
    python samples/demo/generate_catalog.py
    python -m ikebana_studio booklet --catalog samples/demo/works.json --out samples/demo/out
"""
from __future__ import annotations

from datetime import datetime, timedelta, timezone
from pathlib import Path

from PIL import Image, ImageDraw

from ikebana_studio.catalog import CatalogStore
from ikebana_studio.types import Variety, Work


def _photo(path: Path, size: tuple[int, int], vase: tuple[int, int, int]) -> None:
    w, h = size
    img = Image.new("RGB", size, (245, 240, 232))
    d = ImageDraw.Draw(img)
    # vase
    d.rectangle((w * 0.35, h * 0.65, w * 0.65, h * 0.95), fill=vase)
    # main lines (shin, soe, hikae)
    d.line((w * 0.5, h * 0.65, w * 0.3, h * 0.1), fill=(60, 90, 40), width=6)
    d.line((w * 0.5, h * 0.65, w * 0.75, h * 0.3), fill=(60, 90, 40), width=5)
    d.line((w * 0.5, h * 0.65, w * 0.2, h * 0.5), fill=(60, 90, 40), width=4)
    d.ellipse((w * 0.55, h * 0.45, w * 0.65, h * 0.55), fill=(200, 60, 90))
    path.parent.mkdir(parents=True, exist_ok=True)
    img.save(path, format="PNG")


def main() -> None:
    root = Path(__file__).parent
    start = datetime(2024, 2, 1, 10, 0, tzinfo=timezone.utc)

    # (curriculum id, size, vase colour, variety, favourite)
    plan = [
        (1, (600, 800), (40, 40, 60), Variety.MORIBANA, False),
        (1, (800, 600), (90, 60, 30), Variety.MORIBANA, True),
        (2, (600, 800), (40, 40, 60), Variety.MORIBANA, False),
        (3, (500, 900), (120, 120, 130), Variety.NAGEIRE, False),
        (11, (900, 600), (30, 70, 90), Variety.MORIBANA, False),
        (19, (700, 700), (150, 40, 40), Variety.NAGEIRE, True),
    ]

    works: list[Work] = []
    for i, (cid, size, vase, variety, fav) in enumerate(plan):
        rel = f"photos/study_{i:02d}.png"
        _photo(root / rel, size, vase)
        works.append(
            Work(
                id=f"demo-{i:02d}",
                curriculum_id=cid,
                image_ref=rel,
                author="Demo Student",
                created_at=start + timedelta(days=7 * i),
                is_favorite=fav,
                variety=variety,
            )
        )

    CatalogStore(root / "works.json").save(works)


if __name__ == "__main__":
    main()
