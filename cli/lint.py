import sys

from cli._runner import run

SOURCES = ["app", "cli", "tests"]


def main() -> None:
    """Run ruff lint checks over the sources."""
    sys.exit(run(["uv", "run", "ruff", "check", *SOURCES]))


def format() -> None:
    """Format the sources with ruff."""
    sys.exit(run(["uv", "run", "ruff", "format", *SOURCES]))
