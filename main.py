#!/usr/bin/env python3
"""
main.py: quick-start entry point.

    python main.py convert -i photo.jpg -o photo_small.png --width 320
    python main.py convert -i photo.jpg -o photo_pixel.png --block 8

Or drive it from a desktop shell over stdin/stdout:

    python main.py bridge
"""

from pixel_lowres.cli import app

if __name__ == "__main__":
    app()
