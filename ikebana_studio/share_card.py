from __future__ import annotations

import logging
from dataclasses import dataclass, field
from io import BytesIO
from typing import Any

from PIL import Image, ImageDraw, ImageFilter, ImageFont

from .errors import UnresolvableReferenceError
from .images import ImageLoader
from .layout import advance_cursor, center_offset, fit_box, wrap_text
from .types import CurriculumItem, Work
from .utils import hex_to_rgb, safe_filename_token

logger = logging.getLogger(__name__)

WHITE = (255, 255, 255)
SUBTITLE_GRAY = (107, 114, 128)
LABEL_GRAY = (156, 163, 175)
VALUE_DARK = (31, 41, 55)

TITLE_LINE_HEIGHT = 45
DETAIL_LINE_HEIGHT = 35
SHADOW_OFFSET_Y = 10
SHADOW_BLUR = 10
SHADOW_ALPHA = 38  # ~15% black


def share_card_filename(item: CurriculumItem) -> str:
    return f"{safe_filename_token(item.display_title, fallback='share_card')}.png"


def _load_font(path: str | None, size: int) -> ImageFont.FreeTypeFont | ImageFont.ImageFont:
    if path:
        try:
            return ImageFont.truetype(path, size)
        except OSError:
            logger.warning("font %s not loadable, using default", path)
    return ImageFont.load_default(size=size)


def _blend(color: tuple[int, int, int], alpha: float) -> tuple[int, int, int]:
    # colour at `alpha` opacity over white
    return tuple(int(round(c * alpha + 255 * (1 - alpha))) for c in color)  # type: ignore[return-value]


@dataclass
class ShareCard:
    filename: str
    image: Image.Image

    def to_png_bytes(self) -> bytes:
        buf = BytesIO()
        self.image.save(buf, format="PNG")
        return buf.getvalue()


@dataclass
class ShareCardRenderer:
    share_cfg: dict[str, Any] = field(default_factory=dict)
    image_loader: ImageLoader = field(default_factory=ImageLoader)

    def render(self, work: Work, item: CurriculumItem | None) -> ShareCard:
        """Draw the share card for one work.

        A work whose study cannot be resolved is refused with
        UnresolvableReferenceError; nothing is drawn.
        """
        if item is None:
            raise UnresolvableReferenceError(work.curriculum_id, work.id)

        cfg = self.share_cfg
        width = int(cfg.get("canvas_width", 800))
        height = int(cfg.get("canvas_height", 1100))
        padding = int(cfg.get("padding", 60))
        content_w = width - padding * 2
        primary = hex_to_rgb(cfg.get("primary_color", "#5E2D91"))
        date_format = str(cfg.get("date_format", "%d/%m/%Y"))

        photo = self.image_loader.load(work.image_ref)
        dw, dh = fit_box(photo.width, photo.height, content_w, float(cfg.get("image_max_height", 600)))
        dw, dh = max(1, int(round(dw))), max(1, int(round(dh)))
        dx = int(round(center_offset(width, dw)))
        dy = padding

        card = Image.new("RGBA", (width, height), WHITE + (255,))

        shadow = Image.new("RGBA", (width, height), (0, 0, 0, 0))
        ImageDraw.Draw(shadow).rectangle(
            [dx, dy + SHADOW_OFFSET_Y, dx + dw, dy + SHADOW_OFFSET_Y + dh], fill=(0, 0, 0, SHADOW_ALPHA)
        )
        card = Image.alpha_composite(card, shadow.filter(ImageFilter.GaussianBlur(SHADOW_BLUR)))
        card.paste(photo.resize((dw, dh), Image.Resampling.LANCZOS), (dx, dy))

        draw = ImageDraw.Draw(card)
        title_font = _load_font(cfg.get("title_font"), 36)
        subtitle_font = _load_font(cfg.get("body_font"), 22)
        label_font = _load_font(cfg.get("body_font"), 18)
        value_font = _load_font(cfg.get("title_font") or cfg.get("body_font"), 18)
        footer_font = _load_font(cfg.get("body_font"), 16)

        def draw_centered(y: float, text: str, font: Any, fill: tuple[int, int, int]) -> None:
            x = center_offset(width, draw.textlength(text, font=font))
            draw.text((x, y), text, font=font, fill=fill)

        # Title block
        title = item.title if cfg.get("full_title", False) else item.display_title
        lines = wrap_text(title, content_w, lambda s: draw.textlength(s, font=title_font))
        top = dy + dh + 60
        for i, line in enumerate(lines):
            draw_centered(advance_cursor(top, TITLE_LINE_HEIGHT, i), line, title_font, primary)
        cursor = advance_cursor(top, TITLE_LINE_HEIGHT, len(lines) - 1) + 30

        # Graduation subtitle
        draw_centered(cursor, item.graduation.upper(), subtitle_font, SUBTITLE_GRAY)
        cursor += 60

        # Label/value rows
        left = padding + 40
        rows = [
            ("Author:", work.author),
            ("Date:", work.created_at.strftime(date_format)),
            ("Type:", work.variety.value),
        ]
        for label, value in rows:
            draw.text((left, cursor), label, font=label_font, fill=LABEL_GRAY)
            draw.text((left + 100, cursor), value, font=value_font, fill=VALUE_DARK)
            cursor = advance_cursor(cursor, DETAIL_LINE_HEIGHT, 1)

        footer = str(cfg.get("footer", "Made with Ikebana Studio"))
        draw_centered(height - 30 - 16, footer, footer_font, _blend(primary, 0.6))

        return ShareCard(filename=share_card_filename(item), image=card.convert("RGB"))


def render_share_card(
    work: Work,
    item: CurriculumItem | None,
    *,
    share_cfg: dict[str, Any] | None = None,
    image_loader: ImageLoader | None = None,
) -> ShareCard:
    renderer = ShareCardRenderer(share_cfg=share_cfg or {}, image_loader=image_loader or ImageLoader())
    return renderer.render(work, item)
