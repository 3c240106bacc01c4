"""Print text escaped for the WiX preprocessor."""

from __future__ import annotations

import sys
from typing import Annotated

import typer

from wixsmith.core.escaping import escape_preprocessor


def escape(
    texts: Annotated[
        list[str] | None,
        typer.Argument(
            metavar="TEXT...",
            help="Strings to escape. Lines are read from stdin when omitted.",
        ),
    ] = None,
) -> None:
    """Double every '$' that does not start a $(...) reference."""
    if texts:
        for text in texts:
            typer.echo(escape_preprocessor(text))
        return
    for line in sys.stdin:
        typer.echo(escape_preprocessor(line.rstrip("\r\n")))


__all__ = ["escape"]
