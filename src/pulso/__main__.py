"""Allow running as ``python -m pulso``."""

from pulso.cli.main import app

if __name__ == "__main__":
    app()
