"""CLI module for VPT."""

from __future__ import annotations

import logging
from pathlib import Path

import click

from vpt.cli.exit_codes import ExitCode
from vpt.cli.output import error_exit
from vpt.config import TomlParseError, VPTConfig, get_config
from vpt.logging import configure_logging

logger = logging.getLogger(__name__)


def _load_config(
    config_path: Path | None,
    log_level: str | None,
    log_file: Path | None,
    log_json: bool,
) -> VPTConfig:
    """Load configuration with CLI overrides, exiting on invalid config."""
    try:
        return get_config(
            config_path=config_path,
            log_level=log_level,
            log_file=log_file,
            log_format="json" if log_json else None,
            strict=config_path is not None,
        )
    except (TomlParseError, ValueError) as e:
        error_exit(f"Invalid configuration: {e}", ExitCode.CONFIG_ERROR)


@click.group()
@click.version_option(package_name="vpt")
@click.option(
    "--config",
    "config_path",
    type=click.Path(path_type=Path, dir_okay=False),
    default=None,
    help="Config file (default: ~/.vpt/config.toml).",
)
@click.option(
    "--log-level",
    type=click.Choice(["debug", "info", "warning", "error"], case_sensitive=False),
    default=None,
    help="Override log level (default: info).",
)
@click.option(
    "--log-file",
    type=click.Path(path_type=Path),
    default=None,
    help="Override log file path.",
)
@click.option(
    "--log-json",
    is_flag=True,
    default=False,
    help="Use JSON log format.",
)
@click.pass_context
def main(
    ctx: click.Context,
    config_path: Path | None,
    log_level: str | None,
    log_file: Path | None,
    log_json: bool,
) -> None:
    """VPT - trim, crop, rotate, watermark and transcode media with ffmpeg."""
    ctx.ensure_object(dict)

    # Preserve a config injected by tests
    if "config" not in ctx.obj:
        ctx.obj["config"] = _load_config(config_path, log_level, log_file, log_json)

    config: VPTConfig = ctx.obj["config"]
    configure_logging(config.logging)
    logger.debug(
        "VPT starting: log_level=%s, log_file=%s",
        config.logging.level,
        config.logging.file or "stderr",
    )


# Defer import to avoid circular dependency
def _register_commands() -> None:
    from vpt.cli.batch import batch_command
    from vpt.cli.doctor import doctor_command
    from vpt.cli.render import render_command

    main.add_command(render_command)
    main.add_command(batch_command)
    main.add_command(doctor_command)


_register_commands()
