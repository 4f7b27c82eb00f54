"""Centralised configuration via a frozen dataclass."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any

from pixel_lowres.errors import ConfigError

DEFAULT_DPI = 300
DEFAULT_SIZE = (64, 64)  # resize target when neither width nor height is given


class _ChoiceEnum(str, Enum):
    """String enum parsed case-insensitively by value or by member name."""

    @classmethod
    def parse(cls, raw: Any):
        if isinstance(raw, cls):
            return raw
        key = str(raw).strip().lower().replace("_", "").replace("-", "")
        for member in cls:
            if key in (member.value, member.name.lower().replace("_", "")):
                return member
        choices = ", ".join(m.value for m in cls)
        raise ConfigError(f"Invalid {cls.__name__} {raw!r} (choose from: {choices})")

    def __str__(self) -> str:
        return self.value


class Resample(_ChoiceEnum):
    """Named resampling kernels (see resample.RESAMPLERS)."""

    NEAREST = "nearest"
    TRIANGLE = "triangle"
    CATMULL_ROM = "catmullrom"
    GAUSSIAN = "gaussian"
    LANCZOS3 = "lanczos3"


class ResizeMode(_ChoiceEnum):
    """How a partial width/height is completed.

    AUTO keeps the aspect ratio when one side is missing; EXACT forces the
    given size and may distort. With both sides given they behave the same.
    """

    AUTO = "auto"
    EXACT = "exact"


@dataclass(frozen=True)
class LowresConfig:
    """All tuneable parameters for one conversion.

    Attributes:
        width:             Target width in pixels (resize path only).
        height:            Target height in pixels (resize path only).
        mode:              Resize behaviour when one side is omitted.
        filter:            Resampling kernel for the resize path.
        block:             Pixelation block size in source pixels. When set,
                           the image is pixelated at its original size and
                           width/height/mode/filter are ignored.
        pixel_down_filter: Accepted for compatibility; block averaging is
                           always an unweighted mean.
        dpi:               Physical resolution written to the PNG.
    """

    width: int | None = None
    height: int | None = None
    mode: ResizeMode = ResizeMode.AUTO
    filter: Resample = Resample.NEAREST
    block: int | None = None
    pixel_down_filter: Resample = Resample.TRIANGLE
    dpi: int = DEFAULT_DPI

    def __post_init__(self) -> None:
        for name in ("width", "height"):
            value = getattr(self, name)
            if value is not None and value < 1:
                raise ConfigError(f"{name} must be >= 1, got {value}")
        if self.dpi < 1:
            raise ConfigError(f"dpi must be >= 1, got {self.dpi}")

    @property
    def pixelate(self) -> bool:
        return self.block is not None

    @classmethod
    def from_mapping(cls, payload: Mapping[str, Any] | None) -> LowresConfig:
        """Build a config from a loosely-typed payload (e.g. decoded JSON).

        Every key is optional; missing or ``None`` values fall back to the
        defaults. Unknown keys are rejected.
        """
        payload = dict(payload or {})
        unknown = set(payload) - _FIELDS
        if unknown:
            raise ConfigError(f"Unknown config field(s): {', '.join(sorted(unknown))}")

        kwargs: dict[str, Any] = {}
        for name in ("width", "height", "block", "dpi"):
            if payload.get(name) is not None:
                kwargs[name] = _as_int(name, payload[name])
        if payload.get("mode") is not None:
            kwargs["mode"] = ResizeMode.parse(payload["mode"])
        for name in ("filter", "pixel_down_filter"):
            if payload.get(name) is not None:
                kwargs[name] = Resample.parse(payload[name])
        return cls(**kwargs)


_FIELDS = frozenset(
    {"width", "height", "mode", "filter", "block", "pixel_down_filter", "dpi"}
)


def _as_int(name: str, value: Any) -> int:
    if isinstance(value, bool):
        raise ConfigError(f"{name} must be an integer, got {value!r}")
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"{name} must be an integer, got {value!r}") from exc
