"""Image loading (with EXIF orientation), DPI-tagged PNG output and data URIs."""

from __future__ import annotations

import base64
import io
import logging
import math
from pathlib import Path

import numpy as np
from PIL import ExifTags, Image, UnidentifiedImageError

from pixel_lowres.errors import EncodeError, ImageLoadError, OutputError

logger = logging.getLogger(__name__)

METERS_PER_INCH = 0.0254
PPM_MAX = 0xFFFFFFFF

# EXIF orientation -> transposes that bring the image upright.
# PIL's ROTATE_* turn counter-clockwise, so ROTATE_270 is a clockwise quarter turn.
_ORIENTATION_OPS: dict[int, tuple[Image.Transpose, ...]] = {
    2: (Image.Transpose.FLIP_LEFT_RIGHT,),
    3: (Image.Transpose.ROTATE_180,),
    4: (Image.Transpose.FLIP_TOP_BOTTOM,),
    5: (Image.Transpose.ROTATE_270, Image.Transpose.FLIP_LEFT_RIGHT),
    6: (Image.Transpose.ROTATE_270,),
    7: (Image.Transpose.ROTATE_90, Image.Transpose.FLIP_LEFT_RIGHT),
    8: (Image.Transpose.ROTATE_90,),
}

_MIME_TYPES = {
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".gif": "image/gif",
    ".webp": "image/webp",
}


def read_orientation(img: Image.Image) -> int | None:
    """Return the EXIF orientation tag, or None when absent or unreadable."""
    try:
        value = img.getexif().get(ExifTags.Base.Orientation)
    except (OSError, ValueError, SyntaxError) as exc:
        logger.debug("Ignoring unreadable EXIF block: %s", exc)
        return None
    return value if isinstance(value, int) else None


def apply_orientation(img: Image.Image, orientation: int | None) -> Image.Image:
    """Rotate/flip *img* upright for an EXIF *orientation* (1-8)."""
    for op in _ORIENTATION_OPS.get(orientation, ()):
        img = img.transpose(op)
    return img


def load_image(path: str | Path) -> Image.Image:
    """Load an image, decode it fully and correct its EXIF orientation.

    Raises:
        ImageLoadError: if the file cannot be read or decoded.
    """
    p = Path(path)
    try:
        data = p.read_bytes()
    except OSError as exc:
        raise ImageLoadError(f"Failed to read file {p}: {exc}") from exc

    try:
        img = Image.open(io.BytesIO(data))
        img.load()
    except (UnidentifiedImageError, OSError, ValueError) as exc:
        raise ImageLoadError(f"Failed to decode image {p}: {exc}") from exc

    orientation = read_orientation(img)
    if orientation in _ORIENTATION_OPS:
        logger.debug("Applying EXIF orientation %d to %s", orientation, p.name)
    return to_8bit(apply_orientation(img, orientation))


def to_8bit(img: Image.Image) -> Image.Image:
    """Scale 16-bit grayscale (``I;16*`` / ``I``) down to 8-bit ``L``.

    Pillow's own ``convert`` clips these modes at 255; here each sample is
    mapped with ``(v + 128) // 257`` so 65535 -> 255 and mid-grey stays grey.
    Other modes are returned unchanged.
    """
    if img.mode != "I" and not img.mode.startswith("I;16"):
        return img
    arr = np.clip(np.asarray(img, dtype=np.int64), 0, 65535)
    return Image.fromarray(((arr + 128) // 257).astype(np.uint8))


def to_rgba_array(img: Image.Image) -> np.ndarray:
    """Convert a Pillow image to an (H, W, 4) uint8 array."""
    return np.array(img.convert("RGBA"), dtype=np.uint8)


def dpi_to_ppm(dpi: int) -> int:
    """Dots per inch -> pixels per metre, rounded half up (PNG pHYs units).

    Saturates at ``PPM_MAX``, the largest value a pHYs field can hold.
    """
    return min(PPM_MAX, int(math.floor(dpi / METERS_PER_INCH + 0.5)))


def write_png_with_dpi(path: str | Path, rgba: np.ndarray, dpi: int) -> None:
    """Encode an (H, W, 4) uint8 array as PNG with a pHYs chunk for *dpi*.

    Pillow writes ``pHYs`` as ``int(dpi / 0.0254 + 0.5)`` pixels per metre
    on both axes with the metre unit. It is handed ``ppm * 0.0254`` so the
    stored value is exactly :func:`dpi_to_ppm`, saturation included. If
    encoding fails the partial file is removed.

    Raises:
        EncodeError:  if the array is not RGBA8 or encoding fails.
        OutputError:  if the output file cannot be created.
    """
    if not isinstance(rgba, np.ndarray) or rgba.ndim != 3 or rgba.shape[2] != 4:
        raise EncodeError("PNG data must be an RGBA array with shape (H, W, 4)")
    if rgba.dtype != np.uint8:
        raise EncodeError("PNG data must have dtype=uint8")
    if rgba.shape[0] == 0 or rgba.shape[1] == 0:
        raise EncodeError(f"Cannot encode an empty {rgba.shape[1]}x{rgba.shape[0]} image")

    img = Image.fromarray(np.ascontiguousarray(rgba))
    ppm = dpi_to_ppm(dpi)
    phys_dpi = ppm * METERS_PER_INCH
    p = Path(path)
    try:
        fh = p.open("wb")
    except OSError as exc:
        raise OutputError(f"Failed to create {p}: {exc}") from exc

    try:
        with fh:
            img.save(fh, format="PNG", dpi=(phys_dpi, phys_dpi), compress_level=1)
    except Exception as exc:
        p.unlink(missing_ok=True)
        raise EncodeError(f"PNG write error for {p}: {exc}") from exc
    logger.debug("Wrote %s (%dx%d, %d ppm)", p, img.width, img.height, ppm)


def mime_type_for(path: str | Path) -> str:
    return _MIME_TYPES.get(Path(path).suffix.lower(), "application/octet-stream")


def file_to_data_uri(path: str | Path) -> str:
    """Read a file and return it as a ``data:<mime>;base64,...`` URI."""
    p = Path(path)
    try:
        data = p.read_bytes()
    except OSError as exc:
        raise ImageLoadError(f"Failed to read file {p}: {exc}") from exc
    b64 = base64.b64encode(data).decode("ascii")
    return f"data:{mime_type_for(p)};base64,{b64}"
