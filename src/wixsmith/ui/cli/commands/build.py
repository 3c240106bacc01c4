"""Generate a WiX fragment and stage its resources from a build file."""

from __future__ import annotations

import shlex

import click
import typer

from wixsmith.core.config import BuildConfig, load_build_config
from wixsmith.core.exceptions import ConfigError, WixBuildError, exception_hint
from wixsmith.core.fragments import BuildResult, WixFragmentBuilder
from wixsmith.core.pipeline import WixPipeline

from .._options import (
    BuildFileArgument,
    DebugOption,
    OutputDirOption,
    ResourceDirOption,
    VerboseOption,
)
from ..diagnostics import CliEmitter
from ..state import CLIState, configure_logging, debug_enabled, emit_error, set_cli_state


def build(
    build_file: BuildFileArgument,
    output_dir: OutputDirOption = None,
    resource_dir: ResourceDirOption = None,
    verbose: VerboseOption = 0,
    debug: DebugOption = False,
) -> None:
    """Write the WiX fragment described by BUILD_FILE and stage its resources."""

    ctx = click.get_current_context(silent=True)
    typer_ctx = ctx if isinstance(ctx, typer.Context) else None
    state = set_cli_state(ctx=typer_ctx, verbosity=verbose, debug=debug)

    try:
        config = load_build_config(build_file)
    except ConfigError as exc:
        emit_error(str(exc), exception=exc)
        raise typer.Exit(code=1) from exc

    updates: dict[str, object] = {}
    if output_dir is not None:
        updates["output_dir"] = output_dir
    if resource_dir is not None:
        updates["resource_dir"] = resource_dir
    if updates:
        config = config.model_copy(update=updates)

    with configure_logging(state):
        builder, result = _run_build(config, state)

    typer.echo(f"Fragment: {result.fragment_path} ({result.origin.value})")
    for path in result.resources:
        typer.echo(f"Resource: {path}")

    if state.verbosity >= 1:
        pipeline = WixPipeline()
        builder.configure_pipeline(pipeline)
        for command in pipeline.candle_arguments(result.fragment_path.parent):
            typer.echo(f"candle: {shlex.join(command)}")


def _run_build(config: BuildConfig, state: CLIState) -> tuple[WixFragmentBuilder, BuildResult]:
    emitter = CliEmitter(state=state, debug_enabled=debug_enabled())
    try:
        builder = config.create_builder(emitter=emitter)
        builder.log_wix_features()
        return builder, builder.build()
    except (WixBuildError, OSError, ValueError) as exc:
        if debug_enabled():
            raise
        emit_error(f"Failed to build fragment: {exception_hint(exc) or exc}", exception=exc)
        raise typer.Exit(code=1) from exc


__all__ = ["build"]
