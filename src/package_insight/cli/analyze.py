"""Main analysis command."""

from pathlib import Path
from typing import Optional

import typer
from rich.markup import escape
from rich.progress import Progress, SpinnerColumn, TextColumn, TimeElapsedColumn

from .. import __version__
from ..analysis import PackageAnalyzer
from ..exceptions import PackageInsightError
from ..history import HistoryStore
from ..insights import derive_insights
from ..logging_config import setup_logging
from ..reports import write_reports
from ..snapshot.models import Snapshot
from . import app
from ._common import console, err_console, resolve_config
from ._summary import print_summary


def _version_callback(value: bool) -> None:
    if value:
        console.print(
            f"[bold cyan]Package Insight[/bold cyan] version [green]{__version__}[/green]"
        )
        raise typer.Exit(0)


@app.command()
def analyze(
    package_path: Path = typer.Argument(
        ...,
        help="Path to the package directory (the folder holding package.json)",
    ),
    output_dir: Optional[Path] = typer.Option(
        None,
        "--output-dir",
        "-o",
        help="Root directory for reports and history (default: ./package-analysis)",
    ),
    skip_build: bool = typer.Option(
        False,
        "--skip-build",
        help="Do not run npm run clean/build",
    ),
    skip_pack: bool = typer.Option(
        False,
        "--skip-pack",
        help="Do not run npm pack",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose logging",
    ),
    quiet: bool = typer.Option(
        False,
        "--quiet",
        "-q",
        help="Only print errors",
    ),
    log_file: Optional[Path] = typer.Option(
        None,
        "--log-file",
        help="Also append log records to this file",
        dir_okay=False,
    ),
    config: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Configuration file (TOML)",
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
    ),
    version: bool = typer.Option(
        False,
        "--version",
        help="Show version and exit",
        callback=_version_callback,
        is_eager=True,
    ),
):
    """
    Analyze a TypeScript/JavaScript package and write Markdown, HTML and JSON reports.

    Inspects package.json, tsconfig, build output, installed dependencies,
    the npm tarball, and git/npm history. Every run is added to the
    package's history so later reports can show changes and trends.

    [bold cyan]Examples:[/bold cyan]

      package-insight ./my-lib

      package-insight ./my-lib --skip-build --skip-pack

      package-insight ./my-lib -o reports --verbose
    """
    # Flags only until the config (which may set verbosity or a log file) is loaded
    logger = setup_logging(_flag_verbosity(verbose, quiet))

    try:
        cfg = resolve_config(
            config=config,
            output_dir=output_dir,
            skip_build=skip_build,
            skip_pack=skip_pack,
            verbose=verbose,
            quiet=quiet,
            log_file=log_file,
        )
        logger = setup_logging(cfg.verbosity, cfg.log_file)
        quiet = cfg.verbosity == "quiet"

        analyzer = PackageAnalyzer(str(package_path), cfg)

        if quiet:
            snapshot = analyzer.build_snapshot()
        else:
            snapshot = _build_with_progress(analyzer)

        store = HistoryStore(analyzer.paths.history_dir)
        record = store.append(snapshot)
        logger.info(f"History record saved: {record}")

        history = store.load_all()
        insights = derive_insights(snapshot, history, thresholds=cfg.thresholds)
        paths = write_reports(snapshot, insights, history, analyzer.paths.output_dir)

        if not quiet:
            print_summary(console, snapshot, insights, paths)

    except typer.Exit:
        raise

    except PackageInsightError as e:
        logger.debug(f"{e.__class__.__name__}: {e}")
        err_console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1)

    except KeyboardInterrupt:
        logger.info("Analysis interrupted by user")
        err_console.print("\n[yellow]Analysis interrupted[/yellow]")
        raise typer.Exit(130)

    except Exception as e:
        logger.exception("Unexpected error during analysis")
        err_console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1)


def _flag_verbosity(verbose: bool, quiet: bool) -> str:
    if quiet:
        return "quiet"
    return "verbose" if verbose else "normal"


def _build_with_progress(analyzer: PackageAnalyzer) -> Snapshot:
    with Progress(
        SpinnerColumn(),
        TextColumn("[bold]{task.description}"),
        TimeElapsedColumn(),
        console=console,
        transient=True,
    ) as progress:
        task = progress.add_task(f"Analyzing {analyzer.package_name}...", total=None)
        return analyzer.build_snapshot(
            on_progress=lambda message: progress.update(task, description=message)
        )
