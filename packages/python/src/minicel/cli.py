"""Command line entry point: `minicel INPUT OUTPUT`."""

from __future__ import annotations

import logging
from enum import Enum
from pathlib import Path
from typing import Annotated

import typer

from minicel.errors import MinicelError
from minicel.interpreter import MinicelEngine
from minicel.sheet import Sheet
from minicel.utils import check_csv_file_path


class LogLevel(str, Enum):
    debug = "debug"
    info = "info"
    warning = "warning"
    error = "error"


app = typer.Typer(
    name="minicel",
    help="Evaluate the `=function(...)` formulas of a CSV file.",
    add_completion=False,
)


def init_logging(level: LogLevel) -> None:
    logging.basicConfig(
        level=level.value.upper(),
        format="%(levelname)s %(module)s: %(message)s",
        force=True,
    )


@app.command()
def main(
    input: Annotated[Path, typer.Argument(help="CSV file to evaluate.")],
    output: Annotated[Path, typer.Argument(help="CSV file to write the result to.")],
    flush_every: Annotated[
        int, typer.Option("--flush-every", min=1, help="Flush the output every N rows.")
    ] = 100,
    detect_cycles: Annotated[
        bool,
        typer.Option(
            "--detect-cycles/--no-detect-cycles",
            help="Report circular references instead of recursing forever.",
        ),
    ] = True,
    log_level: Annotated[
        LogLevel,
        typer.Option("--log-level", envvar="MINICEL_LOG", case_sensitive=False),
    ] = LogLevel.warning,
) -> None:
    init_logging(log_level)

    try:
        check_csv_file_path(input, exists=True)
        check_csv_file_path(output, exists=False)
    except ValueError as e:
        typer.echo(str(e))
        raise typer.Exit(1)

    try:
        sheet = Sheet.from_path(input)
        engine = MinicelEngine(
            sheet, flush_every=flush_every, detect_cycles=detect_cycles
        )
        engine.run(output)
    except MinicelError as e:
        typer.echo(str(e))
        raise typer.Exit(1)
