"""Entry point for ``python -m youtuply``."""

from youtuply.bot import run

if __name__ == "__main__":
    run()
