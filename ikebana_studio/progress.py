from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Sequence

from .curriculum import CurriculumIndex
from .types import GraduationProgress, Representative, Variety, Work

logger = logging.getLogger(__name__)


def completed_ids(curriculum: CurriculumIndex, works: Sequence[Work]) -> set[int]:
    """Distinct curriculum ids with at least one work; stale ids are dropped."""
    out: set[int] = set()
    for w in works:
        if w.curriculum_id in curriculum:
            out.add(w.curriculum_id)
        else:
            logger.debug("work %s: unknown curriculum id %s ignored", w.id, w.curriculum_id)
    return out


def compute_graduation_progress(
    curriculum: CurriculumIndex,
    works: Sequence[Work],
) -> dict[str, GraduationProgress]:
    """Completion per graduation, in the curriculum's graduation order.

    completed = distinct curriculum ids of that graduation present in works
    total = curriculum items of that graduation
    """
    done = completed_ids(curriculum, works)
    progress: dict[str, GraduationProgress] = {}
    for grad in curriculum.graduations:
        items = curriculum.items_for(grad)
        completed = sum(1 for it in items if it.id in done)
        progress[grad] = GraduationProgress(graduation=grad, completed=completed, total=len(items))
    return progress


def _preference_key(indexed: tuple[int, Work]) -> tuple[bool, float, int]:
    # favourites first, then newest, then collection order
    index, work = indexed
    return (not work.is_favorite, -work.created_at.timestamp(), index)


def select_representatives(curriculum: CurriculumIndex, works: Sequence[Work]) -> list[Representative]:
    """Pick the single best work for every curriculum item that has one.

    Output follows curriculum declaration order, never work recency.
    """
    by_item: dict[int, list[tuple[int, Work]]] = {}
    for i, w in enumerate(works):
        by_item.setdefault(w.curriculum_id, []).append((i, w))

    reps: list[Representative] = []
    for item in curriculum:
        candidates = by_item.get(item.id)
        if not candidates:
            continue
        _, best = min(candidates, key=_preference_key)
        reps.append(Representative(item=item, work=best))
    return reps


def recent_works(works: Sequence[Work], limit: int = 5) -> list[Work]:
    indexed = sorted(enumerate(works), key=lambda p: (-p[1].created_at.timestamp(), p[0]))
    return [w for _, w in indexed[: max(0, limit)]]


def variety_distribution(works: Sequence[Work]) -> dict[str, int]:
    counts: dict[str, int] = {}
    for w in works:
        if w.variety is Variety.NONE:
            continue
        counts[w.variety.value] = counts.get(w.variety.value, 0) + 1
    return counts


@dataclass
class CatalogSummary:
    total_works: int = 0
    unique_studies: int = 0
    total_studies: int = 0
    by_graduation: dict[str, GraduationProgress] = field(default_factory=dict)
    variety_distribution: dict[str, int] = field(default_factory=dict)
    recent: list[Work] = field(default_factory=list)

    @property
    def completion_percentage(self) -> float:
        return (self.unique_studies / self.total_studies) * 100 if self.total_studies else 0.0

    def to_dict(self) -> dict[str, Any]:
        """Stable schema for chart/report consumers."""
        return {
            "total_works": self.total_works,
            "unique_studies": self.unique_studies,
            "total_studies": self.total_studies,
            "completion_percentage": round(self.completion_percentage, 1),
            "graduations": [
                {
                    "name": p.graduation,
                    "completed": p.completed,
                    "remaining": p.remaining,
                    "total": p.total,
                }
                for p in self.by_graduation.values()
            ],
            "varieties": [{"name": k, "value": v} for k, v in self.variety_distribution.items()],
            "recent": [
                {
                    "id": w.id,
                    "curriculum_id": w.curriculum_id,
                    "custom_title": w.custom_title,
                    "created_at": w.created_at.isoformat(),
                }
                for w in self.recent
            ],
        }


def summarize(curriculum: CurriculumIndex, works: Sequence[Work], *, recent_limit: int = 5) -> CatalogSummary:
    return CatalogSummary(
        total_works=len(works),
        unique_studies=len(completed_ids(curriculum, works)),
        total_studies=len(curriculum),
        by_graduation=compute_graduation_progress(curriculum, works),
        variety_distribution=variety_distribution(works),
        recent=recent_works(works, limit=recent_limit),
    )
