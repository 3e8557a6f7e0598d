"""Shared pytest fixtures: a small curriculum, synthetic photos, work factory."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Callable

import pytest
from PIL import Image, ImageDraw

from ikebana_studio.curriculum import CurriculumIndex
from ikebana_studio.images import ImageLoader
from ikebana_studio.types import CurriculumItem, Variety, Work

T0 = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def curriculum() -> CurriculumIndex:
    items = [
        CurriculumItem(1, "Basic", "Upright Style (Risshin-kei) (立真型)", Variety.MORIBANA),
        CurriculumItem(2, "Basic", "Slanting Style (Keishin-kei)", Variety.MORIBANA),
        CurriculumItem(3, "Basic", "Hanging Style", Variety.NAGEIRE),
        CurriculumItem(4, "Intermediate", "Arrangement with Leaves Only", Variety.MORIBANA),
        CurriculumItem(5, "Intermediate", "Free Style (Jiyuka) (自由花)", Variety.NAGEIRE),
    ]
    return CurriculumIndex(items, ["Basic", "Intermediate", "Advanced"])


def _photo(path: Path, size: tuple[int, int], color: tuple[int, int, int]) -> None:
    img = Image.new("RGB", size, color=(255, 255, 255))
    draw = ImageDraw.Draw(img)
    w, h = size
    draw.rectangle([w // 8, h // 8, w - w // 8, h - h // 8], fill=color, outline=(0, 0, 0))
    draw.ellipse([w // 3, h // 3, 2 * w // 3, 2 * h // 3], fill=(255, 255, 255))
    path.parent.mkdir(parents=True, exist_ok=True)
    img.save(path, format="PNG")


@pytest.fixture
def photo_dir(tmp_path: Path) -> Path:
    """Catalog directory with a portrait, a landscape and a square photo."""
    root = tmp_path / "catalog"
    _photo(root / "photos" / "portrait.png", (300, 400), (94, 45, 145))
    _photo(root / "photos" / "landscape.png", (640, 360), (46, 139, 87))
    _photo(root / "photos" / "square.png", (200, 200), (200, 120, 40))
    return root


@pytest.fixture
def image_loader(photo_dir: Path) -> ImageLoader:
    return ImageLoader(base_dir=photo_dir)


@pytest.fixture
def make_work() -> Callable[..., Work]:
    counter = {"n": 0}

    def factory(curriculum_id: int, **kwargs) -> Work:
        counter["n"] += 1
        fields = {
            "id": f"w{counter['n']}",
            "curriculum_id": curriculum_id,
            "image_ref": "photos/portrait.png",
            "author": "Hana",
            "created_at": T0 + timedelta(days=counter["n"]),
        }
        fields.update(kwargs)
        return Work(**fields)

    return factory
