"""
Pixel Lowres
============

Turn any image into a low-resolution copy or a blocky pixel mosaic and
write it as a PNG tagged with a physical DPI.

- **Resize**: exact or aspect-preserving, with five resampling kernels
- **Pixelate**: parallel block averaging at the original size
"""

__version__ = "1.0.0"

from pixel_lowres.config import LowresConfig, Resample, ResizeMode
from pixel_lowres.errors import (
    ConfigError,
    EncodeError,
    ImageLoadError,
    LowresError,
    OutputError,
)
from pixel_lowres.image_io import dpi_to_ppm, load_image, write_png_with_dpi
from pixel_lowres.pipeline import ConversionResult, convert_image, process_file
from pixel_lowres.pixelate import average_blocks, pixelate, reconstruct_mosaic
from pixel_lowres.resample import resize_image
from pixel_lowres.sizing import resolve_target_size

__all__ = [
    "ConfigError",
    "ConversionResult",
    "EncodeError",
    "ImageLoadError",
    "LowresConfig",
    "LowresError",
    "OutputError",
    "Resample",
    "ResizeMode",
    "average_blocks",
    "convert_image",
    "dpi_to_ppm",
    "load_image",
    "pixelate",
    "process_file",
    "reconstruct_mosaic",
    "resize_image",
    "resolve_target_size",
    "write_png_with_dpi",
]
