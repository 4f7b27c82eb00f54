"""Remote command surface for a desktop shell.

The shell spawns ``pixel-lowres bridge`` and exchanges one JSON object per
line. Requests look like::

    {"id": 1, "command": "process_image",
     "args": {"input": "/photos/cat.jpg", "config": {"block": 8}}}

and every request gets exactly one response, either
``{"id": 1, "ok": [output_path, data_uri]}`` or
``{"id": 1, "error": "..."}``. Failures never escape as exceptions.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable, Mapping
from pathlib import Path
from typing import IO, Any

from pixel_lowres.config import LowresConfig
from pixel_lowres.errors import LowresError
from pixel_lowres.image_io import file_to_data_uri
from pixel_lowres.pipeline import process_file

logger = logging.getLogger(__name__)

OUTPUT_SUFFIX = "_lowres.png"


def output_path_for(input_path: str | Path) -> Path:
    """``/a/b/photo.jpg`` -> ``/a/b/photo_lowres.png``."""
    p = Path(input_path)
    return p.with_name(f"{p.stem}{OUTPUT_SUFFIX}")


def process_image(
    input: str,
    config: Mapping[str, Any] | None = None,
) -> tuple[str, str]:
    """Convert *input* next to itself and return (output path, data URI)."""
    cfg = LowresConfig.from_mapping(config)
    output = output_path_for(input)
    process_file(input, output, cfg)
    return str(output), file_to_data_uri(output)


def get_image_base64(path: str) -> str:
    return file_to_data_uri(path)


COMMANDS: dict[str, Callable[..., Any]] = {
    "process_image": process_image,
    "get_image_base64": get_image_base64,
}


def dispatch(request: Mapping[str, Any]) -> dict[str, Any]:
    """Run one request and wrap its result or error in a response dict."""
    request_id = request.get("id") if isinstance(request, Mapping) else None
    try:
        if not isinstance(request, Mapping):
            raise ValueError("Request must be a JSON object")
        name = request.get("command")
        handler = COMMANDS.get(name)
        if handler is None:
            raise ValueError(f"Unknown command {name!r}")
        args = request.get("args") or {}
        if not isinstance(args, Mapping):
            raise ValueError("args must be a JSON object")
        result = handler(**args)
    except (LowresError, ValueError, TypeError, OSError) as exc:
        logger.warning("Command failed: %s", exc)
        return {"id": request_id, "error": str(exc)}
    except Exception as exc:
        logger.exception("Command crashed")
        return {"id": request_id, "error": f"{type(exc).__name__}: {exc}"}

    if isinstance(result, tuple):
        result = list(result)
    return {"id": request_id, "ok": result}


def serve(stdin: IO[str], stdout: IO[str]) -> int:
    """Answer JSON-lines requests from *stdin* until EOF.

    Returns:
        Number of requests handled.
    """
    handled = 0
    for line in stdin:
        line = line.strip()
        if not line:
            continue
        try:
            request = json.loads(line)
        except json.JSONDecodeError as exc:
            response = {"id": None, "error": f"Invalid JSON: {exc}"}
        else:
            response = dispatch(request)
        stdout.write(json.dumps(response) + "\n")
        stdout.flush()
        handled += 1
    return handled
