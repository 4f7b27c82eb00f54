"""Output size resolution for the resize path."""

from __future__ import annotations

import math

from pixel_lowres.config import DEFAULT_SIZE, ResizeMode
from pixel_lowres.errors import ConfigError


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def resolve_target_size(
    original_width: int,
    original_height: int,
    width: int | None = None,
    height: int | None = None,
    mode: ResizeMode = ResizeMode.AUTO,
) -> tuple[int, int]:
    """Compute the final (w, h) from partial width/height hints.

    - Both given: used verbatim, in either *mode*.
    - One given: the other follows the original aspect ratio (rounded half
      up, minimum 1).
    - Neither given: ``DEFAULT_SIZE``.

    *mode* is accepted for symmetry with the CLI; AUTO and EXACT resolve
    identically.

    Raises:
        ConfigError: if the original image has a zero dimension.
    """
    if original_width < 1 or original_height < 1:
        raise ConfigError(
            f"Image has zero dimension ({original_width}x{original_height})"
        )

    if width is not None and height is not None:
        return width, height
    if width is not None:
        h = max(1, _round_half_up(original_height * width / original_width))
        return width, h
    if height is not None:
        w = max(1, _round_half_up(original_width * height / original_height))
        return w, height
    return DEFAULT_SIZE
