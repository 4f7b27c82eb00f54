"""Rich command-line interface powered by Typer."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import typer
from rich.console import Console
from rich.logging import RichHandler

from pixel_lowres.commands import serve
from pixel_lowres.config import LowresConfig, Resample, ResizeMode
from pixel_lowres.errors import LowresError
from pixel_lowres.pipeline import process_file

app = typer.Typer(
    name="pixel-lowres",
    help="Resize or pixelate images and write DPI-tagged PNGs.",
    add_completion=False,
    rich_markup_mode="rich",
)
console = Console(highlight=False)
err_console = Console(stderr=True, highlight=False)


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


# Defaults come from LowresConfig - single source of truth
_DEFAULTS = LowresConfig()


# -- convert command ---------------------------------------------------

@app.command()
def convert(
    input: Path = typer.Option(..., "--input", "-i", help="Input image (jpg, png, ...)"),
    output: Path = typer.Option(..., "--output", "-o", help="Output PNG path"),
    width: int | None = typer.Option(
        None, "--width", min=1, help="Target width in pixels (resize mode)",
    ),
    height: int | None = typer.Option(
        None, "--height", min=1, help="Target height in pixels (resize mode)",
    ),
    mode: ResizeMode = typer.Option(
        _DEFAULTS.mode, "--mode", case_sensitive=False,
        help="Resize behaviour (ignored if --block is set)",
    ),
    filter: Resample = typer.Option(
        _DEFAULTS.filter, "--filter", case_sensitive=False,
        help="Resampling filter for plain resize (ignored if --block is set)",
    ),
    block: int | None = typer.Option(
        None, "--block", min=0,
        help="Pixelation block size in source pixels; keeps original WxH",
    ),
    pixel_down_filter: Resample = typer.Option(
        _DEFAULTS.pixel_down_filter, "--pixel-down-filter", case_sensitive=False,
        help="Accepted for compatibility; blocks are always a plain average",
    ),
    dpi: int = typer.Option(_DEFAULTS.dpi, "--dpi", min=1, help="DPI written to the PNG"),
    workers: int | None = typer.Option(
        None, "--workers", min=1, help="Worker threads for pixelation (default: CPU count)",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    """Convert one image to a low-resolution or pixelated PNG."""
    _setup_logging(verbose)

    try:
        cfg = LowresConfig(
            width=width,
            height=height,
            mode=mode,
            filter=filter,
            block=block,
            pixel_down_filter=pixel_down_filter,
            dpi=dpi,
        )
        result = process_file(input, output, cfg, workers=workers)
    except LowresError as exc:
        err_console.print(f"error: {exc}", markup=False)
        raise typer.Exit(1) from exc

    console.print(result.summary(), markup=False, soft_wrap=True)


# -- bridge command ----------------------------------------------------

@app.command()
def bridge(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    """Serve JSON-lines commands on stdin/stdout for a desktop shell."""
    _setup_logging(verbose)
    handled = serve(sys.stdin, sys.stdout)
    logging.getLogger("pixel_lowres").debug("Bridge closed after %d request(s)", handled)


if __name__ == "__main__":
    app()
