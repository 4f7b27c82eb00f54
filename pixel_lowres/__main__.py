"""``python -m pixel_lowres`` runs the CLI."""

from pixel_lowres.cli import app

if __name__ == "__main__":
    app()
