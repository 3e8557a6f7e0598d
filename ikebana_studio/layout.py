"""Geometry and text-wrapping helpers shared by the booklet and share card.

All functions are pure. Units are whatever the caller uses (mm for the
booklet, px for the share card).
"""
from __future__ import annotations

from typing import Callable

MeasureFn = Callable[[str], float]


def fit_box(content_width: float, content_height: float, max_width: float, max_height: float) -> tuple[float, float]:
    """Scale a box to fill max_width, shrinking to max_height if it overflows.

    The aspect ratio of the content box is preserved. All dimensions must be
    positive; zero or negative input is a caller bug.
    """
    if content_width <= 0 or content_height <= 0 or max_width <= 0 or max_height <= 0:
        raise ValueError(
            f"fit_box: dimensions must be positive "
            f"(content={content_width}x{content_height}, max={max_width}x{max_height})"
        )

    ratio = content_width / content_height
    width = float(max_width)
    height = width / ratio
    if height > max_height:
        height = float(max_height)
        width = height * ratio
    return width, height


def wrap_text(text: str, max_width: float, measure: MeasureFn) -> list[str]:
    """Greedy word wrap.

    - a line never measures wider than max_width, except a single word that
      is wider on its own (words are never split)
    - empty or blank text yields one empty line
    """
    words = text.split()
    if not words:
        return [""]

    lines: list[str] = []
    current = words[0]
    for word in words[1:]:
        candidate = f"{current} {word}"
        if measure(candidate) <= max_width:
            current = candidate
        else:
            lines.append(current)
            current = word
    lines.append(current)
    return lines


def advance_cursor(current_y: float, line_height: float, line_count: int) -> float:
    return current_y + line_height * line_count


def center_offset(outer: float, inner: float) -> float:
    return (outer - inner) / 2
