from __future__ import annotations

import dataclasses
import re
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Union

from .utils import parse_timestamp


class Variety(str, Enum):
    MORIBANA = "Moribana"
    NAGEIRE = "Nageire"
    NONE = "N/A"

    @classmethod
    def parse(cls, value: Any) -> "Variety":
        if isinstance(value, cls):
            return value
        text = str(value or "").strip()
        if not text:
            return cls.NONE
        for v in cls:
            if text.lower() in (v.value.lower(), v.name.lower()):
                return v
        raise ValueError(f"unknown variety: {value!r}")


def strip_secondary_script(title: str) -> str:
    """Title without its parenthetical annotations.

    "Upright Style (Risshin-kei) (立真型)" -> "Upright Style"

    Everything from the first '(' on is dropped. A title that is nothing but
    parentheses keeps its text minus characters outside Latin-1, which the
    PDF base fonts cannot draw, and without the parentheses that emptied.
    """
    head = title.split("(", 1)[0].strip()
    if head:
        return head
    latin = "".join(ch for ch in title if ord(ch) < 256)
    latin = re.sub(r"\(\s*\)", "", latin)
    return " ".join(latin.split())


@dataclass(frozen=True)
class CurriculumItem:
    id: int
    graduation: str
    title: str
    suggested_variety: Variety = Variety.NONE

    @property
    def display_title(self) -> str:
        return strip_secondary_script(self.title)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CurriculumItem":
        return cls(
            id=int(data["id"]),
            graduation=str(data["graduation"]),
            title=str(data["title"]),
            suggested_variety=Variety.parse(data.get("suggested_variety")),
        )


@dataclass(frozen=True)
class Work:
    id: str
    curriculum_id: int
    image_ref: str  # file path (relative to the catalog) or data: URL
    author: str
    created_at: datetime
    custom_title: str = ""
    is_favorite: bool = False
    variety: Variety = Variety.NONE
    description: str = ""
    tags: tuple[str, ...] = ()
    rating: int = 0  # 0-5
    professor_notes: str = ""

    def with_favorite(self, flag: bool) -> "Work":
        return dataclasses.replace(self, is_favorite=bool(flag))

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Work":
        tags = data.get("tags") or []
        return cls(
            id=str(data["id"]),
            curriculum_id=int(data["curriculum_id"]),
            image_ref=str(data.get("image_ref") or ""),
            author=str(data.get("author") or ""),
            created_at=parse_timestamp(data.get("created_at")),
            custom_title=str(data.get("custom_title") or ""),
            is_favorite=bool(data.get("is_favorite", False)),
            variety=Variety.parse(data.get("variety")),
            description=str(data.get("description") or ""),
            tags=tuple(str(t) for t in tags),
            rating=int(data.get("rating") or 0),
            professor_notes=str(data.get("professor_notes") or ""),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "curriculum_id": self.curriculum_id,
            "image_ref": self.image_ref,
            "author": self.author,
            "created_at": self.created_at.isoformat(),
            "custom_title": self.custom_title,
            "is_favorite": self.is_favorite,
            "variety": self.variety.value,
            "description": self.description,
            "tags": list(self.tags),
            "rating": self.rating,
            "professor_notes": self.professor_notes,
        }


@dataclass(frozen=True)
class Representative:
    item: CurriculumItem
    work: Work


@dataclass(frozen=True)
class GraduationProgress:
    graduation: str
    completed: int
    total: int

    @property
    def remaining(self) -> int:
        return self.total - self.completed

    @property
    def percentage(self) -> float:
        return (self.completed / self.total) * 100 if self.total else 0.0


class PageKind(str, Enum):
    COVER = "cover"
    CONTENT = "content"


RGB = tuple[int, int, int]


# Draw instructions. Units are millimetres with a top-left origin; text y is
# the baseline.


@dataclass(frozen=True)
class RectOp:
    x: float
    y: float
    width: float
    height: float
    fill: RGB


@dataclass(frozen=True)
class LineOp:
    x0: float
    y0: float
    x1: float
    y1: float
    color: RGB
    width: float = 0.2


@dataclass(frozen=True)
class TextOp:
    x: float
    y: float
    text: str
    font: str
    size: float
    color: RGB
    align: str = "left"  # left|center


@dataclass(frozen=True)
class ImageOp:
    x: float
    y: float
    width: float
    height: float
    image: Any  # PIL.Image.Image
    image_ref: str = ""


DrawOp = Union[RectOp, LineOp, TextOp, ImageOp]


@dataclass
class Page:
    kind: PageKind
    number: int | None  # 1-based over content pages; None for the cover
    width_mm: float
    height_mm: float
    ops: list[DrawOp] = field(default_factory=list)

    def texts(self) -> list[str]:
        return [op.text for op in self.ops if isinstance(op, TextOp)]

    def images(self) -> list[ImageOp]:
        return [op for op in self.ops if isinstance(op, ImageOp)]
