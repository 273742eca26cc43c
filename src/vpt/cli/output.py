"""Shared CLI output helpers."""

from __future__ import annotations

import sys
from typing import NoReturn

import click

from vpt.cli.exit_codes import ExitCode
from vpt.edit.describe import RenderSummary, describe_edits
from vpt.edit.models import EditSpec


def error_exit(message: str, code: ExitCode | int) -> NoReturn:
    """Print a one-line error to stderr and exit with code."""
    click.echo(f"Error: {message}", err=True)
    sys.exit(int(code))


def echo_summary(spec: EditSpec, summary: RenderSummary, err: bool = False) -> None:
    """Print the pre-render summary block."""
    edits = describe_edits(spec)
    click.echo(f"Input:       {spec.input_path}", err=err)
    click.echo(f"Output:      {summary.output_path}", err=err)
    click.echo(f"Edits:       {', '.join(edits) if edits else 'none'}", err=err)
    click.echo(f"Video codec: {summary.video_codec}", err=err)
    click.echo(f"Audio codec: {summary.audio_codec}", err=err)
    click.echo(f"Duration:    {summary.duration}", err=err)
    click.echo(f"Est. size:   {summary.size_estimate}", err=err)
