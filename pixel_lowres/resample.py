"""Resampling filter provider for the plain resize path."""

from __future__ import annotations

import logging
from collections.abc import Callable

import numpy as np
from PIL import Image
from skimage.transform import resize as sk_resize

from pixel_lowres.config import Resample

logger = logging.getLogger(__name__)

Resizer = Callable[[Image.Image, int, int], Image.Image]


def _pillow(filter_: Image.Resampling) -> Resizer:
    def resize(img: Image.Image, width: int, height: int) -> Image.Image:
        return img.resize((width, height), filter_)
    return resize


def _gaussian(img: Image.Image, width: int, height: int) -> Image.Image:
    """Gaussian-smoothed resize via scikit-image.

    Downscaling applies a Gaussian pre-filter sized to the scale factor,
    followed by linear interpolation.
    """
    arr = np.asarray(img.convert("RGBA"), dtype=np.float64)
    out = sk_resize(
        arr,
        (height, width, 4),
        order=1,
        anti_aliasing=True,
        preserve_range=True,
    )
    return Image.fromarray(np.clip(np.rint(out), 0, 255).astype(np.uint8))


RESAMPLERS: dict[Resample, Resizer] = {
    Resample.NEAREST: _pillow(Image.Resampling.NEAREST),
    Resample.TRIANGLE: _pillow(Image.Resampling.BILINEAR),
    Resample.CATMULL_ROM: _pillow(Image.Resampling.BICUBIC),
    Resample.GAUSSIAN: _gaussian,
    Resample.LANCZOS3: _pillow(Image.Resampling.LANCZOS),
}


def resize_image(
    img: Image.Image,
    width: int,
    height: int,
    filter: Resample = Resample.NEAREST,
) -> Image.Image:
    """Resize *img* to exactly ``width x height`` and return it as RGBA."""
    logger.debug("Resizing %dx%d -> %dx%d (%s)", img.width, img.height, width, height, filter)
    return RESAMPLERS[Resample.parse(filter)](img.convert("RGBA"), width, height)
