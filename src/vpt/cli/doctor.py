"""VPT doctor command for checking encoder availability."""

from __future__ import annotations

import click

from vpt.cli.exit_codes import ExitCode
from vpt.config import VPTConfig
from vpt.executor.interface import find_tool
from vpt.tools.detection import get_ffmpeg_version


def _format_status(available: bool) -> str:
    """Format status for display."""
    return "✓" if available else "✗"


@click.command("doctor")
@click.pass_context
def doctor_command(ctx: click.Context) -> None:
    """Check that ffmpeg is available and print its version.

    Exit codes:
      0 - ffmpeg found and runnable
      30 - ffmpeg missing or not runnable
    """
    config: VPTConfig = ctx.obj["config"]

    click.echo("VPT Encoder Health Check")
    click.echo("=" * 40)

    path = find_tool("ffmpeg", config.tools.ffmpeg)
    if path is None:
        click.echo(f"  {_format_status(False)} ffmpeg: not found")
        click.echo("    └─ Install ffmpeg: https://ffmpeg.org/download.html")
        click.echo("    └─ Or set VPT_FFMPEG_PATH / [tools] ffmpeg in config.toml")
        ctx.exit(ExitCode.TOOL_NOT_AVAILABLE)

    version, banner = get_ffmpeg_version(path)
    if banner is None:
        click.echo(f"  {_format_status(False)} ffmpeg: {path} (failed to run)")
        ctx.exit(ExitCode.TOOL_NOT_AVAILABLE)

    click.echo(f"  {_format_status(True)} ffmpeg: {version or 'unknown version'}")
    click.echo(f"    ├─ Path: {path}")
    click.echo(f"    └─ {banner}")
