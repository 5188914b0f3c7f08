"""CLI entry point for fnregistry."""

import typer

from ._common import console

app = typer.Typer(
    name="fnregistry",
    help="fnregistry - Heuristic multi-language function registry",
    add_completion=False,
    rich_markup_mode="rich",
)


# Import the command to register it
from .extract import main as _main  # noqa: F401, E402

__all__ = ["app", "console"]
