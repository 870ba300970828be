"""Allow ``python -m leyline``."""

from leyline.cli.app import app

if __name__ == "__main__":
    app()
