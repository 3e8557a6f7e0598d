from __future__ import annotations

import json
from pathlib import Path
from typing import Iterable, Iterator

from .errors import CurriculumError
from .types import CurriculumItem, strip_secondary_script
from .utils import load_json

DEFAULT_CURRICULUM_PATH = Path(__file__).parent / "data" / "curriculum.json"

__all__ = ["CurriculumIndex", "load_curriculum", "display_title", "DEFAULT_CURRICULUM_PATH"]


def display_title(title: str) -> str:
    return strip_secondary_script(title)


class CurriculumIndex:
    """Static study table, in declared order, grouped by graduation."""

    def __init__(self, items: Iterable[CurriculumItem], graduations: Iterable[str] | None = None):
        self._items: tuple[CurriculumItem, ...] = tuple(items)

        if graduations is None:
            seen: list[str] = []
            for it in self._items:
                if it.graduation not in seen:
                    seen.append(it.graduation)
            graduations = seen
        self._graduations: tuple[str, ...] = tuple(graduations)

        if len(set(self._graduations)) != len(self._graduations):
            raise CurriculumError("duplicate graduation names")

        by_id: dict[int, CurriculumItem] = {}
        for it in self._items:
            if it.id in by_id:
                raise CurriculumError(f"duplicate curriculum id {it.id}")
            if it.graduation not in self._graduations:
                raise CurriculumError(f"item {it.id}: unknown graduation {it.graduation!r}")
            by_id[it.id] = it
        self._by_id = by_id

    @property
    def items(self) -> tuple[CurriculumItem, ...]:
        return self._items

    @property
    def graduations(self) -> tuple[str, ...]:
        return self._graduations

    def get(self, curriculum_id: int) -> CurriculumItem | None:
        return self._by_id.get(curriculum_id)

    def items_for(self, graduation: str) -> list[CurriculumItem]:
        return [it for it in self._items if it.graduation == graduation]

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[CurriculumItem]:
        return iter(self._items)

    def __contains__(self, curriculum_id: object) -> bool:
        return curriculum_id in self._by_id


def load_curriculum(path: str | Path | None = None) -> CurriculumIndex:
    """Load a curriculum table from JSON.

    Format:
    {
      "graduations": ["Basic", ...],          (optional, defines order)
      "items": [{"id": 1, "graduation": "Basic", "title": "...",
                 "suggested_variety": "Moribana"}, ...]
    }
    """
    src = Path(path) if path is not None else DEFAULT_CURRICULUM_PATH
    try:
        data = load_json(src)
    except (OSError, json.JSONDecodeError) as e:
        raise CurriculumError(f"cannot read curriculum {src}: {e}") from e
    if isinstance(data, list):
        raw_items, graduations = data, None
    elif isinstance(data, dict):
        raw_items = data.get("items")
        graduations = data.get("graduations")
        if not isinstance(raw_items, list):
            raise CurriculumError(f"{src.name}: object must contain list field: items")
    else:
        raise CurriculumError(f"{src.name}: must be a list or an object with items")

    try:
        items = [CurriculumItem.from_dict(d) for d in raw_items]
    except (KeyError, TypeError, ValueError) as e:
        raise CurriculumError(f"{src.name}: invalid item: {e}") from e
    return CurriculumIndex(items, graduations)
