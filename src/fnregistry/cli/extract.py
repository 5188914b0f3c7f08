"""The registry command: scan, extract, write."""

from pathlib import Path
from typing import List, Optional

import typer
from rich.markup import escape

from ..exceptions import (
    ConfigurationError,
    FnRegistryError,
    OutputError,
    UnsupportedLanguageError,
)
from ..formatters import write_registry
from ..logging_config import setup_logging
from ..pipeline import RegistryPipeline
from . import app
from ._common import console, describe_paths, plural, resolve_config
from .progress import RegistryProgress, create_summary_table

EXIT_OUTPUT_ERROR = 1
EXIT_CONFIG_ERROR = 2


@app.command()
def main(
    paths: Optional[List[Path]] = typer.Argument(
        None,
        help="Files or directories to scan (default: current directory)",
        show_default=False,
    ),
    language: Optional[str] = typer.Option(
        None,
        "--language",
        "-l",
        help="c, cpp, rust, go, python or generic (default: generic)",
    ),
    include: Optional[List[str]] = typer.Option(
        None,
        "--include",
        "-i",
        help="Glob of files to scan instead of walking the paths (repeatable)",
    ),
    exclude: Optional[List[str]] = typer.Option(
        None,
        "--exclude",
        "-e",
        help="Glob of directories or files to skip (repeatable)",
    ),
    recursive: Optional[bool] = typer.Option(
        None,
        "--recursive/--no-recursive",
        help="Descend into subdirectories (default: on)",
        show_default=False,
    ),
    depth: Optional[int] = typer.Option(
        None,
        "--depth",
        help="Maximum directory depth below each path (0 = unlimited)",
        min=0,
    ),
    jobs: Optional[int] = typer.Option(
        None,
        "-j",
        "--jobs",
        help="Files processed in parallel (default: CPU count)",
        min=1,
    ),
    output: Optional[Path] = typer.Option(
        None,
        "-o",
        "--output",
        help="Output file; .json, .yaml/.yml and .csv pick the format, anything else is Markdown",
        dir_okay=False,
    ),
    by_script: bool = typer.Option(
        False,
        "--by-script",
        help="Group functions by file",
    ),
    only_header_files: bool = typer.Option(
        False,
        "--only-header-files",
        help="Scan header files only",
    ),
    add_relations: bool = typer.Option(
        False,
        "--add-relations",
        help="Count call sites for every function",
    ),
    only_dead_code: bool = typer.Option(
        False,
        "--only-dead-code",
        help="Keep only functions with no call sites (use with --add-relations)",
    ),
    timeout: Optional[float] = typer.Option(
        None,
        "--timeout",
        help="Abandon files not started within this many seconds",
        min=0.001,
    ),
    config: Optional[Path] = typer.Option(
        None,
        "-c",
        "--config",
        help="Configuration file (TOML)",
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable debug logging",
    ),
    quiet: bool = typer.Option(
        False,
        "--quiet",
        "-q",
        help="Only log errors; no progress or summary",
    ),
    log_file: Optional[Path] = typer.Option(
        None,
        "--log-file",
        help="Also append log records to this file",
        dir_okay=False,
    ),
    version: bool = typer.Option(
        False,
        "--version",
        help="Show version and exit",
    ),
):
    """
    Build a registry of the functions declared in a source tree.

    Declarations are found with fast line-oriented heuristics, not a
    parser. With [bold]--add-relations[/bold] every function also gets a
    count of the call sites that name it.

    [bold cyan]Examples:[/bold cyan]

      fnregistry src -l rust

      fnregistry -l c --add-relations --only-dead-code -o dead.md

      fnregistry -l python -e "tests" -o registry.json
    """
    if version:
        from .. import __version__

        console.print(f"[bold cyan]fnregistry[/bold cyan] version [green]{__version__}[/green]")
        raise typer.Exit(0)

    logger = setup_logging(
        verbose=verbose, quiet=quiet, log_file=str(log_file) if log_file is not None else None
    )

    try:
        settings = resolve_config(
            config=config,
            paths=paths,
            language=language,
            include=include,
            exclude=exclude,
            recursive=recursive,
            depth=depth,
            jobs=jobs,
            output_file=str(output) if output is not None else None,
            by_script=by_script or None,
            only_header_files=only_header_files or None,
            add_relations=add_relations or None,
            only_dead_code=only_dead_code or None,
            timeout_seconds=timeout,
            verbose=verbose or None,
            quiet=quiet or None,
        )

        progress = None if settings.is_quiet else RegistryProgress(console)
        pipeline = RegistryPipeline(settings, progress=progress)
        if progress is not None:
            progress.start()
        try:
            registry = pipeline.run()
        finally:
            if progress is not None:
                progress.finish()

        write_registry(registry, settings.output_file)

        if not settings.is_quiet:
            summary = registry.summary
            target = settings.output_file or "stdout"
            console.print(
                f"[green]Done![/green] {plural(summary.total_functions, 'function')} from "
                f"{plural(len(pipeline.files), 'file')} in {escape(describe_paths(settings.paths))} "
                f"written to {escape(target)}"
            )
            if settings.output_file:
                console.print(create_summary_table(summary, registry.relations_built))

    except typer.Exit:
        raise

    except (ConfigurationError, UnsupportedLanguageError) as e:
        logger.error(f"{e.__class__.__name__}: {e}")
        console.print(f"[red]Configuration error:[/red] {escape(str(e))}")
        raise typer.Exit(EXIT_CONFIG_ERROR)

    except OutputError as e:
        logger.error(f"{e.__class__.__name__}: {e}")
        console.print(f"[red]Output error:[/red] {escape(str(e))}")
        raise typer.Exit(EXIT_OUTPUT_ERROR)

    except FnRegistryError as e:
        logger.error(f"{e.__class__.__name__}: {e}")
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1)

    except KeyboardInterrupt:
        logger.info("Extraction interrupted by user")
        console.print("\n[yellow]Extraction interrupted[/yellow]")
        raise typer.Exit(130)

    except Exception as e:
        logger.exception("Unexpected error during extraction")
        console.print(f"[red]Unexpected error:[/red] {escape(str(e))}")
        raise typer.Exit(1)
