from __future__ import annotations

import json
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Sequence

from .curriculum import CurriculumIndex
from .errors import CatalogError
from .types import Variety, Work
from .utils import load_json, utc_now, write_json_atomic


@dataclass
class CatalogStore:
    """JSON file of cataloged works: {"works": [...]}.

    Every load() re-reads the file, so callers always work on a fresh
    snapshot. Mutations rewrite the whole file atomically.
    """

    path: Path

    def __post_init__(self) -> None:
        self.path = Path(self.path)

    @property
    def base_dir(self) -> Path:
        return self.path.parent

    def load(self) -> list[Work]:
        if not self.path.exists():
            return []
        try:
            data = load_json(self.path)
        except (OSError, json.JSONDecodeError) as e:
            raise CatalogError(f"cannot read catalog {self.path}: {e}") from e
        if isinstance(data, list):
            raw = data
        elif isinstance(data, dict):
            raw = data.get("works")
            if not isinstance(raw, list):
                raise CatalogError(f"{self.path.name}: object must contain list field: works")
        else:
            raise CatalogError(f"{self.path.name}: must be a list or an object with works")

        works: list[Work] = []
        for idx, entry in enumerate(raw):
            if not isinstance(entry, dict):
                raise CatalogError(f"{self.path.name}: works[{idx}] is not an object")
            try:
                works.append(Work.from_dict(entry))
            except (KeyError, TypeError, ValueError) as e:
                raise CatalogError(f"{self.path.name}: works[{idx}] invalid: {e}") from e
        return works

    def save(self, works: Sequence[Work]) -> None:
        write_json_atomic(self.path, {"works": [w.to_dict() for w in works]})

    def get(self, work_id: str) -> Work:
        for w in self.load():
            if w.id == work_id:
                return w
        raise CatalogError(f"unknown work id: {work_id}")

    def add(self, work: Work) -> Work:
        works = self.load()
        if any(w.id == work.id for w in works):
            raise CatalogError(f"duplicate work id: {work.id}")
        works.append(work)
        self.save(works)
        return work

    def replace(self, work: Work) -> Work:
        works = self.load()
        for i, w in enumerate(works):
            if w.id == work.id:
                works[i] = work
                self.save(works)
                return work
        raise CatalogError(f"unknown work id: {work.id}")

    def toggle_favorite(self, work_id: str) -> Work:
        current = self.get(work_id)
        return self.replace(current.with_favorite(not current.is_favorite))

    def delete(self, work_id: str) -> None:
        works = self.load()
        kept = [w for w in works if w.id != work_id]
        if len(kept) == len(works):
            raise CatalogError(f"unknown work id: {work_id}")
        self.save(kept)


def new_work(
    curriculum: CurriculumIndex,
    *,
    curriculum_id: int,
    image_ref: str,
    author: str,
    custom_title: str = "",
    variety: Variety | str = Variety.NONE,
    description: str = "",
    tags: Sequence[str] = (),
) -> Work:
    """Create a work record the way the add-study form does.

    Image, study and author are required; the study must exist.
    """
    if not image_ref or curriculum_id is None or not author.strip():
        raise CatalogError("image, study and author are required")
    if curriculum_id not in curriculum:
        raise CatalogError(f"unknown curriculum id: {curriculum_id}")
    return Work(
        id=str(uuid.uuid4()),
        curriculum_id=int(curriculum_id),
        image_ref=image_ref,
        author=author.strip(),
        created_at=utc_now(),
        custom_title=custom_title.strip(),
        is_favorite=False,
        variety=Variety.parse(variety),
        description=description,
        tags=tuple(tags),
    )


def filter_works(
    curriculum: CurriculumIndex,
    works: Sequence[Work],
    search: str = "",
    favorites_only: bool = False,
) -> list[Work]:
    """Gallery filter: case-insensitive match on custom title, author or study
    title; newest first."""
    needle = search.strip().lower()
    out: list[tuple[int, Work]] = []
    for i, w in enumerate(works):
        if favorites_only and not w.is_favorite:
            continue
        if needle:
            item = curriculum.get(w.curriculum_id)
            haystacks = [w.custom_title.lower(), w.author.lower()]
            if item is not None:
                haystacks.append(item.title.lower())
            if not any(needle in h for h in haystacks):
                continue
        out.append((i, w))
    out.sort(key=lambda p: (-p[1].created_at.timestamp(), p[0]))
    return [w for _, w in out]
