"""VPT render command: apply edits to a single file."""

from __future__ import annotations

import logging
import signal
from pathlib import Path
from typing import Any

import click
from pydantic import ValidationError

from vpt.cli.exit_codes import ExitCode
from vpt.cli.options import edit_options, spec_fields_from_options
from vpt.cli.output import echo_summary, error_exit
from vpt.config import VPTConfig
from vpt.core.formatting import format_file_size
from vpt.edit.describe import summarize_render
from vpt.edit.exceptions import EditSpecError
from vpt.edit.loader import format_validation_error
from vpt.edit.models import EditSpec
from vpt.executor.command import format_command
from vpt.executor.exceptions import ToolNotFoundError
from vpt.jobs.cancellation import CancellationToken
from vpt.jobs.orchestrator import TranscodeOrchestrator
from vpt.jobs.progress import StderrProgressReporter
from vpt.tools.ffmpeg_progress import ProgressEvent

logger = logging.getLogger(__name__)


@click.command("render")
@click.argument("input_path", type=click.Path(path_type=Path, dir_okay=False))
@edit_options
@click.option(
    "--dry-run",
    is_flag=True,
    help="Print the encoder command without running it.",
)
@click.option(
    "--quiet", "-q", is_flag=True, help="Suppress the progress display."
)
@click.pass_context
def render_command(
    ctx: click.Context,
    input_path: Path,
    dry_run: bool,
    quiet: bool,
    **options: Any,
) -> None:
    """Apply edits to INPUT_PATH and write a new file.

    Press Ctrl+C to cancel; the partial output is removed.

    Exit codes:
      0 - Render succeeded
      2 - Cancelled
      10 - Invalid edit options
      20 - Input file not found
      30 - ffmpeg not available
      40 - Render failed
    """
    config: VPTConfig = ctx.obj["config"]

    try:
        spec = EditSpec.model_validate(spec_fields_from_options(input_path, options))
    except ValidationError as e:
        error_exit(format_validation_error(e), ExitCode.VALIDATION_ERROR)

    if not spec.input_path.is_file():
        error_exit(
            f"Input file not found: {spec.input_path}", ExitCode.TARGET_NOT_FOUND
        )

    orchestrator = TranscodeOrchestrator(config)
    prepared = orchestrator.prepare(spec)
    echo_summary(prepared, summarize_render(prepared, config.encoding), err=not dry_run)

    if dry_run:
        try:
            command = orchestrator.plan(prepared)
        except EditSpecError as e:
            error_exit(str(e), ExitCode.VALIDATION_ERROR)
        click.echo(format_command("ffmpeg", command))
        return

    try:
        orchestrator.tool_path
    except ToolNotFoundError as e:
        error_exit(str(e), ExitCode.TOOL_NOT_AVAILABLE)

    reporter = StderrProgressReporter(enabled=not quiet)
    token = CancellationToken()

    def on_progress(event: ProgressEvent) -> None:
        reporter.on_job_progress(input_path.name, event)

    def on_interrupt(signum: int, frame: object) -> None:
        logger.info("Received %s, cancelling render...", signal.Signals(signum).name)
        token.cancel()

    previous = signal.signal(signal.SIGINT, on_interrupt)
    try:
        result = orchestrator.execute(prepared, on_progress=on_progress, cancel=token)
    finally:
        signal.signal(signal.SIGINT, previous)
        if not quiet:
            click.echo("", err=True)

    if result.success:
        output = result.output_path
        assert output is not None
        click.echo(f"Wrote {output} ({format_file_size(output.stat().st_size)})")
        return
    if result.cancelled:
        error_exit("Render cancelled", ExitCode.INTERRUPTED)
    error_exit(result.error_message or "Render failed", ExitCode.OPERATION_FAILED)
