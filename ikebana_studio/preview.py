from __future__ import annotations

from io import BytesIO
from pathlib import Path

from PIL import Image

from .utils import ensure_dir


def render_pdf_previews(pdf_bytes: bytes, out_dir: str | Path, *, dpi: int = 72) -> list[Path]:
    """Rasterise every booklet page to pages/page_<n>.png under out_dir."""
    try:
        import fitz  # PyMuPDF
    except Exception as e:  # pragma: no cover
        raise RuntimeError("PyMuPDF is required for previews. Install pymupdf.") from e

    out = Path(out_dir)
    ensure_dir(out)

    zoom = dpi / 72.0
    matrix = fitz.Matrix(zoom, zoom)

    written: list[Path] = []
    doc = fitz.open(stream=pdf_bytes, filetype="pdf")
    try:
        for i in range(doc.page_count):
            pix = doc.load_page(i).get_pixmap(matrix=matrix, alpha=False)
            img = Image.open(BytesIO(pix.tobytes("png"))).convert("RGB")
            path = out / f"page_{i + 1:03d}.png"
            img.save(path, format="PNG")
            written.append(path)
    finally:
        doc.close()
    return written
