"""Booklet layout: one cover plus one page per represented study.

Pages are laid out as draw instructions on an A4 portrait canvas
(millimetres, top-left origin) and handed to writer.write_pdf. Content
pages follow curriculum order, not recency: the booklet shows progress
through the curriculum.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Sequence

from reportlab.lib.units import mm
from reportlab.pdfbase.pdfmetrics import stringWidth

from .curriculum import CurriculumIndex
from .errors import EmptyCatalogError
from .images import ImageLoader
from .layout import advance_cursor, center_offset, fit_box, wrap_text
from .output import BOOKLET_FILENAME
from .progress import select_representatives
from .types import ImageOp, LineOp, Page, PageKind, Representative, RectOp, TextOp, Work
from .utils import hex_to_rgb
from .writer import write_pdf

logger = logging.getLogger(__name__)

PAGE_WIDTH_MM = 210.0
PAGE_HEIGHT_MM = 297.0
MARGIN_MM = 20.0

WHITE = (255, 255, 255)
HEADER_BG = (245, 245, 245)
DIVIDER = (200, 200, 200)
FOOTER_GRAY = (150, 150, 150)

TITLE_FONT = "Times-Bold"
TITLE_SIZE = 24
TITLE_LINE_HEIGHT_MM = 10.0
META_LINE_HEIGHT_MM = 6.0
FOOTER_Y_MM = 285.0
# Lowest baseline for the metadata block, clear of the footer.
META_LIMIT_Y_MM = 277.0

__all__ = ["BookletRenderer", "render_booklet", "BOOKLET_FILENAME"]


def _measure(font: str, size: float):
    def measure(text: str) -> float:
        return stringWidth(text, font, size) / mm

    return measure


@dataclass
class BookletRenderer:
    curriculum: CurriculumIndex
    booklet_cfg: dict[str, Any] = field(default_factory=dict)
    image_loader: ImageLoader = field(default_factory=ImageLoader)

    def _color(self, key: str, default: Any) -> tuple[int, int, int]:
        return hex_to_rgb(self.booklet_cfg.get(key, default))

    def _date(self, value: datetime) -> str:
        return value.strftime(str(self.booklet_cfg.get("date_format", "%d/%m/%Y")))

    def _author(self, works: Sequence[Work], fallback: str | None) -> str:
        if works and works[0].author.strip():
            return works[0].author.strip()
        if fallback is None:
            fallback = str(self.booklet_cfg.get("author_fallback", "Ikebana Student"))
        return fallback

    def render(
        self,
        works: Sequence[Work],
        author_fallback: str | None = None,
        now: datetime | None = None,
    ) -> list[Page]:
        """Lay out the booklet for a catalog snapshot.

        Raises EmptyCatalogError (and produces no pages) when no curriculum
        item has a work. Image decode failures propagate as ImageDecodeError.
        """
        reps = select_representatives(self.curriculum, works)
        if not reps:
            raise EmptyCatalogError("add studies to your catalog to generate the booklet")

        author = self._author(works, author_fallback)
        generated = now if now is not None else datetime.now().astimezone()

        pages = [self._cover_page(author, generated)]
        for number, rep in enumerate(reps, start=1):
            pages.append(self._content_page(rep, number))

        logger.info("booklet laid out: %d content pages", len(reps))
        return pages

    def _cover_page(self, author: str, generated: datetime) -> Page:
        primary = self._color("primary_color", "#5E2D91")
        cx = PAGE_WIDTH_MM / 2
        page = Page(kind=PageKind.COVER, number=None, width_mm=PAGE_WIDTH_MM, height_mm=PAGE_HEIGHT_MM)

        page.ops.append(RectOp(0, 0, PAGE_WIDTH_MM, PAGE_HEIGHT_MM, fill=primary))

        title_lines = self.booklet_cfg.get("title_lines", ["My Little Book", "of Ikebana"])
        y = 100.0
        for line in title_lines:
            page.ops.append(TextOp(cx, y, str(line), "Times-Bold", 40, WHITE, align="center"))
            y = advance_cursor(y, 20.0, 1)

        subtitle_y = max(y, 140.0)
        page.ops.append(
            TextOp(cx, subtitle_y, str(self.booklet_cfg.get("subtitle", "Study Portfolio")), "Helvetica", 16, WHITE, align="center")
        )
        page.ops.append(LineOp(70, subtitle_y + 10, 140, subtitle_y + 10, WHITE, width=1.0))

        page.ops.append(TextOp(cx, 250, f"Author: {author}", "Helvetica", 14, WHITE, align="center"))
        page.ops.append(TextOp(cx, 260, f"Generated on: {self._date(generated)}", "Helvetica", 10, WHITE, align="center"))
        return page

    def _content_page(self, rep: Representative, number: int) -> Page:
        primary = self._color("primary_color", "#5E2D91")
        text_color = self._color("text_color", [60, 60, 60])
        subtext_color = self._color("subtext_color", [100, 100, 100])
        max_w = float(self.booklet_cfg.get("image_max_width_mm", 170))
        max_h = float(self.booklet_cfg.get("image_max_height_mm", 150))
        text_width = PAGE_WIDTH_MM - 2 * MARGIN_MM

        item, work = rep.item, rep.work
        page = Page(kind=PageKind.CONTENT, number=number, width_mm=PAGE_WIDTH_MM, height_mm=PAGE_HEIGHT_MM)

        # Header band
        page.ops.append(RectOp(0, 0, PAGE_WIDTH_MM, 30, fill=HEADER_BG))
        page.ops.append(TextOp(MARGIN_MM, 20, item.graduation.upper(), "Helvetica-Bold", 12, primary))

        study_title = item.display_title
        title_lines = wrap_text(study_title, text_width, _measure(TITLE_FONT, TITLE_SIZE))
        for i, line in enumerate(title_lines):
            y = advance_cursor(50.0, TITLE_LINE_HEIGHT_MM, i)
            page.ops.append(TextOp(MARGIN_MM, y, line, TITLE_FONT, TITLE_SIZE, text_color))
        title_height = advance_cursor(0.0, TITLE_LINE_HEIGHT_MM, len(title_lines))

        custom = work.custom_title.strip()
        show_custom = bool(custom) and custom != study_title

        # Shrink the image when a long title leaves too little room above the footer.
        img_y = 60.0 + title_height
        meta_height = 25.0 + (META_LINE_HEIGHT_MM if show_custom else 0.0)
        max_h = min(max_h, max(META_LIMIT_Y_MM - meta_height - img_y, 10.0))

        image = self.image_loader.load(work.image_ref)
        img_w, img_h = fit_box(image.width, image.height, max_w, max_h)
        img_x = center_offset(PAGE_WIDTH_MM, img_w)
        page.ops.append(ImageOp(img_x, img_y, img_w, img_h, image=image, image_ref=work.image_ref))

        # Metadata block below the image
        meta_y = img_y + img_h + 15
        page.ops.append(LineOp(MARGIN_MM, meta_y, PAGE_WIDTH_MM - MARGIN_MM, meta_y, DIVIDER))

        cursor = meta_y + 10
        if show_custom:
            page.ops.append(TextOp(MARGIN_MM, cursor, f"Title: {custom}", "Helvetica-Bold", 10, subtext_color))
            cursor = advance_cursor(cursor, META_LINE_HEIGHT_MM, 1)

        page.ops.append(TextOp(MARGIN_MM, cursor, f"Date: {self._date(work.created_at)}", "Helvetica-Bold", 10, subtext_color))
        page.ops.append(TextOp(120, cursor, f"Variety: {work.variety.value}", "Helvetica-Bold", 10, subtext_color))

        footer = str(self.booklet_cfg.get("footer", "Ikebana Studio"))
        page.ops.append(
            TextOp(PAGE_WIDTH_MM / 2, FOOTER_Y_MM, f"{footer} | Page {number}", "Helvetica", 8, FOOTER_GRAY, align="center")
        )
        return page

    def render_pdf(self, works: Sequence[Work], author_fallback: str | None = None, now: datetime | None = None) -> bytes:
        pages = self.render(works, author_fallback=author_fallback, now=now)
        title = " ".join(str(t) for t in self.booklet_cfg.get("title_lines", ["My Little Book", "of Ikebana"]))
        return write_pdf(pages, title=title, author=self._author(works, author_fallback))


def render_booklet(
    curriculum: CurriculumIndex,
    works: Sequence[Work],
    author_fallback: str | None = None,
    *,
    booklet_cfg: dict[str, Any] | None = None,
    image_loader: ImageLoader | None = None,
    now: datetime | None = None,
) -> list[Page]:
    renderer = BookletRenderer(
        curriculum=curriculum,
        booklet_cfg=booklet_cfg or {},
        image_loader=image_loader or ImageLoader(),
    )
    return renderer.render(works, author_fallback=author_fallback, now=now)
