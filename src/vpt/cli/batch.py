"""VPT batch command: run a YAML job file through the queue."""

from __future__ import annotations

import logging
import signal
from pathlib import Path

import click

from vpt.cli.exit_codes import ExitCode
from vpt.cli.output import error_exit
from vpt.config import VPTConfig
from vpt.edit.exceptions import EditSpecError, JobFileError
from vpt.edit.loader import load_job_file
from vpt.executor.command import format_command
from vpt.executor.exceptions import ToolNotFoundError
from vpt.jobs.orchestrator import TranscodeOrchestrator
from vpt.jobs.progress import StderrProgressReporter
from vpt.jobs.queue import BatchQueue

logger = logging.getLogger(__name__)


@click.command("batch")
@click.argument(
    "job_file", type=click.Path(path_type=Path, exists=True, dir_okay=False)
)
@click.option(
    "--dry-run",
    is_flag=True,
    help="Print each encoder command without running anything.",
)
@click.option(
    "--quiet", "-q", is_flag=True, help="Suppress the progress display."
)
@click.pass_context
def batch_command(
    ctx: click.Context, job_file: Path, dry_run: bool, quiet: bool
) -> None:
    """Run every job in JOB_FILE, one at a time.

    JOB_FILE is YAML with a "jobs" list of edit settings. A failed job does
    not stop the batch. Ctrl+C cancels the running job and leaves the rest
    pending.

    Exit codes:
      0 - All jobs succeeded
      2 - Interrupted
      10 - Invalid job file
      30 - ffmpeg not available
      40 - One or more jobs failed
    """
    config: VPTConfig = ctx.obj["config"]

    try:
        specs = load_job_file(job_file)
    except JobFileError as e:
        error_exit(str(e), ExitCode.VALIDATION_ERROR)

    orchestrator = TranscodeOrchestrator(config)

    if dry_run:
        for index, spec in enumerate(specs, start=1):
            try:
                command = orchestrator.plan(spec)
            except EditSpecError as e:
                error_exit(f"jobs[{index - 1}]: {e}", ExitCode.VALIDATION_ERROR)
            click.echo(f"# [{index}/{len(specs)}] {spec.input_path}")
            click.echo(format_command("ffmpeg", command))
        return

    try:
        orchestrator.tool_path
    except ToolNotFoundError as e:
        error_exit(str(e), ExitCode.TOOL_NOT_AVAILABLE)

    queue = BatchQueue(orchestrator, sink=StderrProgressReporter(enabled=not quiet))
    for spec in specs:
        queue.enqueue(spec)

    interrupted = False

    def on_interrupt(signum: int, frame: object) -> None:
        nonlocal interrupted
        interrupted = True
        logger.info("Received %s, stopping batch...", signal.Signals(signum).name)
        queue.stop()

    previous = signal.signal(signal.SIGINT, on_interrupt)
    try:
        summary = queue.process()
    finally:
        signal.signal(signal.SIGINT, previous)

    if summary is None:
        error_exit("Batch queue is already running", ExitCode.GENERAL_ERROR)

    if quiet:
        click.echo(
            f"{summary.done} done, {summary.failed} failed, "
            f"{summary.cancelled} cancelled, {summary.remaining} remaining"
        )

    if interrupted:
        raise SystemExit(ExitCode.INTERRUPTED)
    if summary.failed or summary.cancelled:
        raise SystemExit(ExitCode.OPERATION_FAILED)
