"""Main command: estimate the readability of one program."""

import warnings
from pathlib import Path
from typing import Optional

import typer
from rich.markup import escape

from .. import __version__
from ..api import analyze_path
from ..exceptions import FathomError, FathomWarning
from ..formatters import get_formatter
from ..logging_config import get_logger, setup_logging
from . import app
from ._common import console, resolve_config

logger = get_logger(__name__)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"fathom {__version__}")
        raise typer.Exit()


@app.command()
def main(
    path: Path = typer.Argument(
        ...,
        help="Python source file, or a .json op-tree document",
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
    ),
    verbose: int = typer.Option(
        0,
        "--verbose",
        "-v",
        count=True,
        help="-v reports skipped re-exported subroutines, -vv adds a per-op trace",
    ),
    fmt: Optional[str] = typer.Option(
        None,
        "--format",
        "-f",
        help="Output format: text (default), rich, json",
    ),
    config: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to a fathom.toml configuration file",
        exists=True,
        file_okay=True,
        dir_okay=False,
    ),
    module: Optional[str] = typer.Option(
        None,
        "--module",
        "-m",
        help="Module name for Python input (default: file stem)",
    ),
    no_recurse: bool = typer.Option(
        False,
        "--no-recurse",
        help="Only collect subroutines from the top-level namespace",
    ),
    fail_above: Optional[float] = typer.Option(
        None,
        "--fail-above",
        help="Exit 1 if the readability score exceeds this value (for CI gating)",
        min=0.0,
    ),
    show_warnings: bool = typer.Option(
        False,
        "--warnings",
        "-W",
        help="Report unresolvable symbols and unclassified ops",
    ),
    quiet: bool = typer.Option(
        False,
        "--quiet",
        "-q",
        help="Suppress all log output but errors",
    ),
    log_file: Optional[Path] = typer.Option(
        None,
        "--log-file",
        help="Also write log records to this file",
        dir_okay=False,
    ),
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
) -> None:
    """
    Estimate how hard a program is to read.

    Counts tokens, expressions, statements and subroutines in the program's
    op tree and turns their ratios into a readability score:

      [cyan]fathom script.py[/cyan]
      [cyan]fathom -v script.py[/cyan]            list skipped re-exported subs
      [cyan]fathom -f json dump.json[/cyan]       analyze a dumped op tree
    """
    log_target = str(log_file) if log_file else None
    setup_logging(verbosity=verbose, quiet=quiet, log_file=log_target)

    try:
        settings = resolve_config(
            config=config,
            verbose=verbose,
            fmt=fmt,
            no_recurse=no_recurse,
            fail_above=fail_above,
            emit_warnings=show_warnings,
        )
        if settings.verbosity != verbose:
            # raised by fathom.toml or FATHOM_VERBOSITY
            setup_logging(verbosity=settings.verbosity, quiet=quiet, log_file=log_target)
        logger.debug(f"Loaded settings: {settings}")

        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always")
            result = analyze_path(path, module=module, config=settings)
        for warning in caught:
            if issubclass(warning.category, FathomWarning):
                console.print(f"[yellow]warning:[/yellow] {escape(str(warning.message))}")
            else:
                warnings.showwarning(
                    warning.message, warning.category, warning.filename, warning.lineno
                )

        get_formatter(settings.output_format, verbosity=settings.verbosity).render(result)

        if settings.fail_above is not None and result.score > settings.fail_above:
            console.print(
                f"[red]FAIL:[/red] readability {result.score:.2f} "
                f"exceeds threshold {settings.fail_above:.2f}"
            )
            raise typer.Exit(1)

    except FathomError as e:
        logger.debug(f"{e.__class__.__name__}: {e}")
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1)

    except KeyboardInterrupt:
        console.print("\n[yellow]Analysis interrupted[/yellow]")
        raise typer.Exit(130)
