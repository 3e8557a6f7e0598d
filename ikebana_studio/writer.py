from __future__ import annotations

from dataclasses import dataclass
from io import BytesIO
from pathlib import Path
from typing import Any, Sequence

from reportlab.lib.units import mm
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas

from .output import OutputPaths
from .types import ImageOp, LineOp, Page, RectOp, TextOp
from .utils import write_bytes_atomic, write_json_atomic


def _rgb(c: tuple[int, int, int]) -> tuple[float, float, float]:
    return c[0] / 255.0, c[1] / 255.0, c[2] / 255.0


def _draw_page(canv: canvas.Canvas, page: Page) -> None:
    page_h = page.height_mm * mm

    for op in page.ops:
        if isinstance(op, RectOp):
            canv.setFillColorRGB(*_rgb(op.fill))
            canv.rect(op.x * mm, page_h - (op.y + op.height) * mm, op.width * mm, op.height * mm, stroke=0, fill=1)
        elif isinstance(op, LineOp):
            canv.setStrokeColorRGB(*_rgb(op.color))
            canv.setLineWidth(op.width * mm)
            canv.line(op.x0 * mm, page_h - op.y0 * mm, op.x1 * mm, page_h - op.y1 * mm)
        elif isinstance(op, TextOp):
            canv.setFillColorRGB(*_rgb(op.color))
            canv.setFont(op.font, op.size)
            if op.align == "center":
                canv.drawCentredString(op.x * mm, page_h - op.y * mm, op.text)
            else:
                canv.drawString(op.x * mm, page_h - op.y * mm, op.text)
        elif isinstance(op, ImageOp):
            canv.drawImage(
                ImageReader(op.image),
                op.x * mm,
                page_h - (op.y + op.height) * mm,
                width=op.width * mm,
                height=op.height * mm,
            )
        else:
            raise TypeError(f"unknown draw op: {type(op).__name__}")


def write_pdf(pages: Sequence[Page], *, title: str = "", author: str = "") -> bytes:
    """Replay page draw ops onto a reportlab canvas and return the PDF bytes.

    The document is finalised before this returns; nothing is written to disk.
    """
    if not pages:
        raise ValueError("write_pdf: no pages")

    buffer = BytesIO()
    first = pages[0]
    canv = canvas.Canvas(buffer, pagesize=(first.width_mm * mm, first.height_mm * mm))
    if title:
        canv.setTitle(title)
    if author:
        canv.setAuthor(author)

    for page in pages:
        canv.setPageSize((page.width_mm * mm, page.height_mm * mm))
        _draw_page(canv, page)
        canv.showPage()
    canv.save()
    return buffer.getvalue()


@dataclass
class ArtifactWriter:
    paths: OutputPaths

    def write_booklet(self, pdf_bytes: bytes) -> Path:
        write_bytes_atomic(self.paths.booklet_pdf, pdf_bytes)
        return self.paths.booklet_pdf

    def write_share_card(self, filename: str, png_bytes: bytes) -> Path:
        out = self.paths.cards_dir / filename
        write_bytes_atomic(out, png_bytes)
        return out

    def write_summary(self, summary: dict[str, Any]) -> Path:
        write_json_atomic(self.paths.summary_json, summary)
        return self.paths.summary_json
