"""CLI command implementations exposed via `wixsmith.ui.cli`.

The Typer command functions live in the sibling modules and are re-exported
here so they can be imported using dotted paths (e.g.
``wixsmith.ui.cli.commands.build``).
"""

from __future__ import annotations

from .build import build
from .escape import escape


__all__ = ["build", "escape"]
