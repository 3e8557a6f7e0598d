"""Booklet layout and PDF output.

Tests cover:
1. Empty catalog handling
2. Page count, kinds, numbering and curriculum order
3. Cover author selection
4. Content page geometry (image fit, metadata block)
5. PDF bytes and page count (PyMuPDF)
6. Decode failures
"""
from __future__ import annotations

from datetime import datetime, timedelta

import pytest

from ikebana_studio.booklet import PAGE_HEIGHT_MM, PAGE_WIDTH_MM, BookletRenderer, render_booklet
from ikebana_studio.errors import EmptyCatalogError, ImageDecodeError
from ikebana_studio.types import LineOp, PageKind, TextOp, Variety
from ikebana_studio.writer import write_pdf

from conftest import T0

NOW = datetime(2024, 6, 1, 9, 30)


@pytest.fixture
def renderer(curriculum, image_loader) -> BookletRenderer:
    return BookletRenderer(curriculum=curriculum, booklet_cfg={}, image_loader=image_loader)


# ═══════════════════════════════════════════════════════════════════════════════
# PAGINATION
# ═══════════════════════════════════════════════════════════════════════════════

class TestPagination:
    def test_empty_catalog_produces_no_pages(self, curriculum, image_loader):
        with pytest.raises(EmptyCatalogError):
            render_booklet(curriculum, [], image_loader=image_loader)

    def test_only_stale_references_is_empty(self, renderer, make_work):
        with pytest.raises(EmptyCatalogError):
            renderer.render([make_work(404)])

    def test_cover_plus_one_page_per_study(self, renderer, make_work):
        works = [make_work(4), make_work(1), make_work(1), make_work(2), make_work(77)]
        pages = renderer.render(works, now=NOW)

        assert len(pages) == 1 + 3
        assert pages[0].kind is PageKind.COVER
        assert pages[0].number is None
        assert [p.kind for p in pages[1:]] == [PageKind.CONTENT] * 3
        assert [p.number for p in pages[1:]] == [1, 2, 3]
        assert all((p.width_mm, p.height_mm) == (PAGE_WIDTH_MM, PAGE_HEIGHT_MM) for p in pages)

    def test_content_pages_follow_curriculum_order(self, renderer, make_work):
        works = [make_work(5), make_work(2), make_work(4)]
        pages = renderer.render(works, now=NOW)
        headings = [p.texts()[1] for p in pages[1:]]
        assert headings == ["Slanting Style", "Arrangement with Leaves Only", "Free Style"]
        graduations = [p.texts()[0] for p in pages[1:]]
        assert graduations == ["BASIC", "INTERMEDIATE", "INTERMEDIATE"]

    def test_footer_numbering(self, renderer, make_work):
        pages = renderer.render([make_work(1), make_work(3)], now=NOW)
        assert "Ikebana Studio | Page 1" in pages[1].texts()
        assert "Ikebana Studio | Page 2" in pages[2].texts()


# ═══════════════════════════════════════════════════════════════════════════════
# COVER
# ═══════════════════════════════════════════════════════════════════════════════

class TestCover:
    def test_author_from_first_raw_work(self, renderer, make_work):
        # first raw work is a stale reference; it still names the author
        works = [make_work(99, author="Keiko"), make_work(1, author="Hana")]
        cover = renderer.render(works, now=NOW)[0]
        assert "Author: Keiko" in cover.texts()
        assert "Generated on: 01/06/2024" in cover.texts()

    def test_author_fallback(self, renderer, make_work):
        cover = renderer.render([make_work(1, author="  ")], author_fallback="Student", now=NOW)[0]
        assert "Author: Student" in cover.texts()

    def test_configured_titles(self, curriculum, image_loader, make_work):
        cfg = {"title_lines": ["Portfolio"], "subtitle": "Sogetsu", "date_format": "%Y-%m-%d"}
        r = BookletRenderer(curriculum=curriculum, booklet_cfg=cfg, image_loader=image_loader)
        texts = r.render([make_work(1)], now=NOW)[0].texts()
        assert texts[0] == "Portfolio"
        assert "Sogetsu" in texts
        assert "Generated on: 2024-06-01" in texts


# ═══════════════════════════════════════════════════════════════════════════════
# CONTENT PAGE
# ═══════════════════════════════════════════════════════════════════════════════

class TestContentPage:
    def test_image_fitted_and_centered(self, renderer, make_work):
        page = renderer.render([make_work(1, image_ref="photos/landscape.png")], now=NOW)[1]
        (img,) = page.images()
        assert img.width == pytest.approx(170.0)
        assert img.height == pytest.approx(170.0 * 360 / 640)
        assert img.x == pytest.approx(20.0)
        assert img.image.size == (640, 360)

    def test_portrait_limited_by_region_height(self, renderer, make_work):
        page = renderer.render([make_work(1, image_ref="photos/portrait.png")], now=NOW)[1]
        (img,) = page.images()
        assert img.height == pytest.approx(150.0)
        assert img.x == pytest.approx((210 - 112.5) / 2)

    def test_metadata_below_image(self, renderer, make_work):
        work = make_work(2, custom_title="Spring Study", variety=Variety.MORIBANA, created_at=T0)
        page = renderer.render([work], now=NOW)[1]
        (img,) = page.images()
        image_bottom = img.y + img.height

        divider = [op for op in page.ops if isinstance(op, LineOp)][0]
        assert divider.y0 == pytest.approx(image_bottom + 15)

        by_text = {op.text: op for op in page.ops if isinstance(op, TextOp)}
        title = by_text["Title: Spring Study"]
        date = by_text["Date: 01/03/2024"]
        variety = by_text["Variety: Moribana"]
        assert title.y == pytest.approx(image_bottom + 25)
        assert date.y == pytest.approx(title.y + 6)
        assert variety.y == date.y

    def test_custom_title_equal_to_study_is_omitted(self, renderer, make_work):
        page = renderer.render([make_work(4, custom_title="Arrangement with Leaves Only")], now=NOW)[1]
        assert not any(t.startswith("Title:") for t in page.texts())

    def test_long_title_wraps_and_pushes_image(self, curriculum, image_loader, make_work):
        from ikebana_studio.curriculum import CurriculumIndex
        from ikebana_studio.types import CurriculumItem

        long_title = "Arrangement Expressing the Movement of Water Through Branches and Leaves in Early Spring"
        index = CurriculumIndex([CurriculumItem(1, "Advanced", long_title)])
        r = BookletRenderer(curriculum=index, image_loader=image_loader)
        page = r.render([make_work(1)], now=NOW)[1]

        title_ops = [op for op in page.ops if isinstance(op, TextOp) and op.font == "Times-Bold"]
        assert len(title_ops) >= 2
        assert " ".join(op.text for op in title_ops) == long_title
        assert [op.y for op in title_ops] == [50.0 + 10 * i for i in range(len(title_ops))]
        (img,) = page.images()
        assert img.y == pytest.approx(60.0 + 10 * len(title_ops))

    def test_long_title_keeps_metadata_above_footer(self, image_loader, make_work):
        from ikebana_studio.booklet import META_LIMIT_Y_MM
        from ikebana_studio.curriculum import CurriculumIndex
        from ikebana_studio.types import CurriculumItem

        long_title = " ".join(["Arrangement Expressing the Movement of Water"] * 6)
        index = CurriculumIndex([CurriculumItem(1, "Advanced", long_title)])
        r = BookletRenderer(curriculum=index, image_loader=image_loader)
        work = make_work(1, image_ref="photos/portrait.png", custom_title="Spring Study")
        page = r.render([work], now=NOW)[1]

        (img,) = page.images()
        assert img.height < 150.0
        assert img.width / img.height == pytest.approx(300 / 400)
        by_text = {op.text: op for op in page.ops if isinstance(op, TextOp)}
        date = by_text["Date: 02/03/2024"]
        footer = by_text["Ikebana Studio | Page 1"]
        assert date.y <= META_LIMIT_Y_MM + 1e-9
        assert date.y < footer.y
        assert by_text["Title: Spring Study"].y < date.y

    def test_representative_used(self, renderer, make_work):
        plain = make_work(1, image_ref="photos/square.png", created_at=T0 + timedelta(days=30))
        fav = make_work(1, image_ref="photos/landscape.png", is_favorite=True)
        page = renderer.render([plain, fav], now=NOW)[1]
        assert page.images()[0].image_ref == "photos/landscape.png"

    def test_decode_failure_propagates(self, renderer, make_work, photo_dir):
        (photo_dir / "broken.png").write_bytes(b"not an image")
        with pytest.raises(ImageDecodeError):
            renderer.render([make_work(1, image_ref="broken.png")], now=NOW)

    def test_missing_image_propagates(self, renderer, make_work):
        with pytest.raises(ImageDecodeError):
            renderer.render([make_work(1, image_ref="photos/nope.png")], now=NOW)


# ═══════════════════════════════════════════════════════════════════════════════
# PDF OUTPUT
# ═══════════════════════════════════════════════════════════════════════════════

class TestPdfOutput:
    def test_pdf_bytes(self, renderer, make_work):
        pdf = renderer.render_pdf([make_work(1), make_work(4, image_ref="photos/square.png")], now=NOW)
        assert pdf.startswith(b"%PDF")
        assert pdf.rstrip().endswith(b"%%EOF")

    def test_pdf_page_count(self, renderer, make_work):
        fitz = pytest.importorskip("fitz")
        works = [make_work(1), make_work(2), make_work(5)]
        pdf = renderer.render_pdf(works, now=NOW)

        doc = fitz.open(stream=pdf, filetype="pdf")
        try:
            assert doc.page_count == 4
            first = doc.load_page(0)
            assert first.rect.width == pytest.approx(595.3, abs=0.5)
            assert "Upright Style" in doc.load_page(1).get_text()
        finally:
            doc.close()

    def test_pdf_metadata_names_cover_author(self, renderer, make_work):
        fitz = pytest.importorskip("fitz")
        pdf = renderer.render_pdf([make_work(1, author="Keiko")], now=NOW)

        doc = fitz.open(stream=pdf, filetype="pdf")
        try:
            assert doc.metadata["author"] == "Keiko"
            assert doc.metadata["title"] == "My Little Book of Ikebana"
        finally:
            doc.close()

    def test_write_pdf_rejects_no_pages(self):
        with pytest.raises(ValueError):
            write_pdf([])

    def test_previews(self, renderer, make_work, tmp_path):
        pytest.importorskip("fitz")
        from ikebana_studio.preview import render_pdf_previews

        pdf = renderer.render_pdf([make_work(1)], now=NOW)
        written = render_pdf_previews(pdf, tmp_path / "previews", dpi=36)
        assert [p.name for p in written] == ["page_001.png", "page_002.png"]
        assert all(p.exists() for p in written)
