"""Shared Typer option definitions for CLI commands."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer


INPUTS_PANEL = "Input Handling"
OUTPUT_PANEL = "Output"
DIAGNOSTICS_PANEL = "Diagnostics"

BuildFileArgument = Annotated[
    Path,
    typer.Argument(
        metavar="BUILD_FILE",
        help="TOML build file describing the fragment, its variables and resources.",
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
        resolve_path=True,
        rich_help_panel=INPUTS_PANEL,
    ),
]

ResourceDirOption = Annotated[
    Path | None,
    typer.Option(
        "--resource-dir",
        help="Directory searched for override files (replaces the build file setting).",
        file_okay=False,
        dir_okay=True,
        resolve_path=True,
        rich_help_panel=INPUTS_PANEL,
    ),
]

OutputDirOption = Annotated[
    Path | None,
    typer.Option(
        "--output-dir",
        "-o",
        help="Directory receiving the fragment and staged resources.",
        file_okay=False,
        dir_okay=True,
        resolve_path=True,
        rich_help_panel=OUTPUT_PANEL,
    ),
]

VerboseOption = Annotated[
    int,
    typer.Option(
        "--verbose",
        "-v",
        count=True,
        help="Increase CLI verbosity. Combine multiple times for additional diagnostics.",
        rich_help_panel=DIAGNOSTICS_PANEL,
    ),
]

DebugOption = Annotated[
    bool,
    typer.Option(
        "--debug",
        help="Show full tracebacks when an unexpected error occurs.",
        rich_help_panel=DIAGNOSTICS_PANEL,
    ),
]
