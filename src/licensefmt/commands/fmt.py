# Copyright 2026 Justin Cook
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

import sys
from importlib import metadata
from pathlib import Path
from typing import List, Optional

import click
import typer
from rich.console import Console

from licensefmt.core.config import load_settings
from licensefmt.core.errors import ConfigError
from licensefmt.core.logger import configure_logging, get_logger
from licensefmt.core.processor import FileProcessor

console = Console(stderr=True)
logger = get_logger("commands.fmt")

FALLBACK_VERSION = "0.1.0"


def get_version() -> str:
    try:
        return metadata.version("licensefmt")
    except metadata.PackageNotFoundError:
        return FALLBACK_VERSION


def _version_callback(value: bool):
    if value:
        typer.echo(f"licensefmt {get_version()}")
        raise typer.Exit()


def fmt(
    paths: Optional[List[Path]] = typer.Argument(
        None, help="Files or directories to format. Reads stdin when omitted."
    ),
    list_files: bool = typer.Option(
        False, "--list", "-l", help="List files whose formatting differs."
    ),
    diff: bool = typer.Option(False, "--diff", "-d", help="Display diffs."),
    write: bool = typer.Option(
        False, "--write", "-w", help="Write result to the source file instead of stdout."
    ),
    all_errors: bool = typer.Option(
        False, "--all-errors", "-e", help="Report all errors (not just the first 10 lines)."
    ),
    srcdir: Optional[str] = typer.Option(
        None, "--srcdir", metavar="DIR", help="Sort imports as if the source lived in DIR."
    ),
    license: Optional[Path] = typer.Option(
        None, "--license", help="License header file. Disables the header search."
    ),
    licwd: bool = typer.Option(
        False, "--licwd", help="Search the header file beginning in the current directory."
    ),
    local: Optional[str] = typer.Option(
        None, "--local", help="Treat imports with these comma separated prefixes as first party."
    ),
    builtin_diff: bool = typer.Option(
        False, "--builtin-diff", help="Compute diffs in-process instead of running diff(1)."
    ),
    config_file: Optional[Path] = typer.Option(
        None, "--config", help="Project configuration file (default: nearest .licensefmt.yaml)."
    ),
    verbose: int = typer.Option(
        0, "--verbose", "-v", count=True, help="Increase logging verbosity (-v, -vv, -vvv)."
    ),
    version: Optional[bool] = typer.Option(
        None, "--version", callback=_version_callback, is_eager=True, help="Show version and exit."
    ),
):
    """
    Add license headers to Python sources and reformat them with isort and black.
    """
    configure_logging(verbose)

    if write and not paths:
        raise click.UsageError("cannot use --write with standard input")

    try:
        settings = load_settings(
            config_file=str(config_file) if config_file else None,
            license=str(license) if license else None,
            license_search_cwd=licwd,
            srcdir=srcdir,
            list_files=list_files,
            diff=diff,
            overwrite=write,
            all_errors=all_errors,
            local=local,
            builtin_diff=builtin_diff,
        )
    except ConfigError as e:
        console.print(f"[red]Error: {e.path}: {e}[/red]")
        raise typer.Exit(code=2)

    logger.debug(f"Output mode: {settings.effective_mode.value}")

    processor = FileProcessor(
        settings,
        out=sys.stdout.buffer,
        stdin=sys.stdin.buffer,
    )
    exit_code = processor.run([str(p) for p in paths or []])

    logger.info(
        f"Processed {processor.processed} file(s), {processor.changed} changed, "
        f"{processor.failed} failed"
    )
    if exit_code:
        console.print(f"[red]{processor.failed} file(s) failed.[/red]")
        raise typer.Exit(code=exit_code)
