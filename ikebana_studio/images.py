from __future__ import annotations

import base64
import binascii
from dataclasses import dataclass
from io import BytesIO
from pathlib import Path

from PIL import Image, UnidentifiedImageError

from .errors import ImageDecodeError


def _decode_data_url(ref: str) -> bytes:
    # data:image/jpeg;base64,<payload>
    header, sep, payload = ref.partition(",")
    if not sep or ";base64" not in header:
        raise ImageDecodeError(ref[:40], "only base64 data URLs are supported")
    try:
        return base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ImageDecodeError(ref[:40], f"bad base64 payload: {e}") from e


def _flatten(img: Image.Image) -> Image.Image:
    """RGB copy of *img*; transparent areas become white, as on the page."""
    if img.mode in ("RGBA", "LA", "PA") or (img.mode == "P" and "transparency" in img.info):
        rgba = img.convert("RGBA")
        out = Image.new("RGB", rgba.size, (255, 255, 255))
        out.paste(rgba, mask=rgba.getchannel("A"))
        return out
    return img.convert("RGB")


@dataclass(frozen=True)
class ImageLoader:
    """Decode work images for measuring and drawing.

    References are file paths (relative ones resolve against base_dir) or
    base64 data URLs. Decoding is forced before returning, so the caller can
    measure the image immediately.
    """

    base_dir: Path | None = None

    def resolve(self, ref: str) -> Path:
        p = Path(ref)
        if not p.is_absolute() and self.base_dir is not None:
            p = Path(self.base_dir) / p
        return p

    def load(self, ref: str) -> Image.Image:
        if not ref:
            raise ImageDecodeError(ref, "empty image reference")

        label = ref[:40] if ref.startswith("data:") else ref
        try:
            if ref.startswith("data:"):
                src = BytesIO(_decode_data_url(ref))
            else:
                path = self.resolve(ref)
                if not path.is_file():
                    raise ImageDecodeError(ref, f"file not found: {path}")
                src = BytesIO(path.read_bytes())
            with Image.open(src) as img:
                img.load()
                out = _flatten(img)
        except ImageDecodeError:
            raise
        except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as e:
            raise ImageDecodeError(label, str(e)) from e

        if out.width <= 0 or out.height <= 0:
            raise ImageDecodeError(label, "image has no pixels")
        return out
