"""Entry point for ``python -m decline_predictor``."""

from .cli import run

if __name__ == "__main__":
    run()
