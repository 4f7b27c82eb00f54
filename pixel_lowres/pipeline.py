"""Conversion pipeline: pixelate or resize, then write a DPI-tagged PNG."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

import numpy as np
from PIL import Image

from pixel_lowres.config import LowresConfig, Resample
from pixel_lowres.image_io import load_image, to_rgba_array, write_png_with_dpi
from pixel_lowres.pixelate import pixelate
from pixel_lowres.resample import resize_image
from pixel_lowres.sizing import resolve_target_size

logger = logging.getLogger(__name__)

ImageLoader = Callable[[Path], Image.Image]
ImageResizer = Callable[[Image.Image, int, int, Resample], Image.Image]
PngWriter = Callable[[Path, np.ndarray, int], None]


@dataclass(frozen=True)
class ConversionResult:
    output: Path
    width: int
    height: int
    original_width: int
    original_height: int
    config: LowresConfig

    def summary(self) -> str:
        cfg = self.config
        block = str(cfg.block) if cfg.block is not None else "-"
        return (
            f"Wrote {self.output} at {self.width}x{self.height} pixels with "
            f"{cfg.dpi} DPI metadata (mode={cfg.mode}, block={block}, "
            f"filters: resize={cfg.filter}, pixel_down={cfg.pixel_down_filter}). "
            f"Original: {self.original_width}x{self.original_height}."
        )


def convert_image(
    img: Image.Image,
    config: LowresConfig,
    resizer: ImageResizer = resize_image,
    workers: int | None = None,
) -> np.ndarray:
    """Turn a loaded image into the RGBA8 output buffer.

    With ``config.block`` set the image is pixelated at its own size;
    otherwise it is resized to the size resolved from width/height/mode.

    Returns:
        (H, W, 4) uint8 array.
    """
    if config.pixelate:
        logger.info("Pixelating %dx%d with %dpx blocks", img.width, img.height, config.block)
        return pixelate(to_rgba_array(img), config.block, workers)

    w, h = resolve_target_size(
        img.width, img.height, config.width, config.height, config.mode,
    )
    logger.info("Resizing %dx%d -> %dx%d (%s)", img.width, img.height, w, h, config.filter)
    return to_rgba_array(resizer(img, w, h, config.filter))


def process_file(
    input_path: str | Path,
    output_path: str | Path,
    config: LowresConfig,
    loader: ImageLoader = load_image,
    resizer: ImageResizer = resize_image,
    writer: PngWriter = write_png_with_dpi,
    workers: int | None = None,
) -> ConversionResult:
    """Load *input_path*, convert it and write the PNG to *output_path*.

    Errors from any stage propagate unchanged.
    """
    input_path = Path(input_path)
    output_path = Path(output_path)
    t0 = time.perf_counter()

    img = loader(input_path)
    original_width, original_height = img.size
    rgba = convert_image(img, config, resizer=resizer, workers=workers)
    height, width = rgba.shape[:2]
    writer(output_path, rgba, config.dpi)

    logger.info(
        "Converted %s -> %s  (%.2f s)",
        input_path.name, output_path.name, time.perf_counter() - t0,
    )
    return ConversionResult(
        output=output_path,
        width=width,
        height=height,
        original_width=original_width,
        original_height=original_height,
        config=config,
    )
