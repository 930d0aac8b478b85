"""CLI entry point for package-insight."""

import typer

app = typer.Typer(
    name="package-insight",
    help="Package Insight - TypeScript/JavaScript package analyzer",
    add_completion=False,
    rich_markup_mode="rich",
)

# Import the command to register it
from .analyze import analyze as _analyze  # noqa: F401, E402
