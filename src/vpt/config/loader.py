"""Configuration loader with precedence handling.

Configuration is loaded with the following precedence (highest to lowest):
1. CLI arguments (passed directly to functions)
2. Environment variables (VPT_*)
3. Config file (~/.vpt/config.toml)
4. Default values

Environment variables:
- VPT_FFMPEG_PATH: Path to ffmpeg executable
- VPT_CONFIG_PATH: Path to config file (overrides default location)
- VPT_DATA_DIR: Path to VPT data directory (overrides ~/.vpt/)
- VPT_LOG_LEVEL / VPT_LOG_FILE / VPT_LOG_FORMAT: Logging overrides
- VPT_POLL_INTERVAL: Cancellation poll interval in seconds
- VPT_TEMP_DIR: Directory for temporary watermark images
"""

from __future__ import annotations

import logging
import os
import threading
import tomllib
from pathlib import Path
from typing import Any

from vpt.config.env import EnvReader
from vpt.config.models import (
    EncodingConfig,
    JobsConfig,
    LoggingConfig,
    ToolPathsConfig,
    VPTConfig,
)

logger = logging.getLogger(__name__)

# Default config location
DEFAULT_CONFIG_DIR = Path.home() / ".vpt"
DEFAULT_CONFIG_FILE = DEFAULT_CONFIG_DIR / "config.toml"

# Cache for loaded config files (path -> (parsed dict, mtime))
_config_cache: dict[Path, tuple[dict, float]] = {}
_config_cache_lock = threading.Lock()


class TomlParseError(ValueError):
    """Raised when a config file exists but cannot be parsed."""


def get_default_config_path() -> Path:
    """Get the default config file path.

    Can be overridden by VPT_CONFIG_PATH environment variable.
    """
    env_path = os.environ.get("VPT_CONFIG_PATH")
    if env_path:
        return Path(env_path)
    return get_data_dir() / "config.toml"


def get_data_dir() -> Path:
    """Get the VPT data directory (~/.vpt/ unless VPT_DATA_DIR is set)."""
    env_path = os.environ.get("VPT_DATA_DIR")
    if env_path:
        return Path(env_path).expanduser()
    return DEFAULT_CONFIG_DIR


def load_toml_file(path: Path, *, strict: bool = False) -> dict[str, Any]:
    """Parse a TOML file.

    Args:
        path: File to parse.
        strict: If True, raise TomlParseError on parse failures.

    Returns:
        Parsed dict, or empty dict if the file is missing (or unparseable
        when strict is False).
    """
    try:
        with path.open("rb") as f:
            return tomllib.load(f)
    except FileNotFoundError:
        return {}
    except (tomllib.TOMLDecodeError, OSError) as e:
        if strict:
            raise TomlParseError(f"Cannot parse config file {path}: {e}") from e
        logger.warning("Ignoring unparseable config file %s: %s", path, e)
        return {}


def load_config_file(path: Path | None = None, *, strict: bool = False) -> dict:
    """Load configuration from TOML file.

    Results are cached with mtime-based invalidation.
    Thread-safe: uses a lock to protect concurrent access to the cache.

    Args:
        path: Path to config file. If None, uses default location.
        strict: If True, raise TomlParseError on parse failures.

    Returns:
        Parsed configuration dict. Empty dict if file doesn't exist.
    """
    if path is None:
        path = get_default_config_path()

    try:
        current_mtime = path.stat().st_mtime
    except FileNotFoundError:
        current_mtime = 0.0

    with _config_cache_lock:
        if path in _config_cache:
            cached_config, cached_mtime = _config_cache[path]
            if current_mtime == cached_mtime:
                return cached_config

        result = load_toml_file(path, strict=strict)
        _config_cache[path] = (result, current_mtime)
        return result


def clear_config_cache() -> None:
    """Clear the config file cache. Primarily useful for testing."""
    with _config_cache_lock:
        _config_cache.clear()


def _optional_path(value: Any) -> Path | None:
    if value in (None, ""):
        return None
    return Path(str(value)).expanduser()


def get_config(
    config_path: Path | None = None,
    # CLI overrides (highest precedence)
    ffmpeg_path: Path | None = None,
    log_level: str | None = None,
    log_file: Path | None = None,
    log_format: str | None = None,
    # Optional dependency injection for testing
    env_reader: EnvReader | None = None,
    *,
    strict: bool = False,
) -> VPTConfig:
    """Get VPT configuration with full precedence handling.

    Args:
        config_path: Path to config file (overrides VPT_CONFIG_PATH).
        ffmpeg_path: CLI override for ffmpeg path.
        log_level: CLI override for log level.
        log_file: CLI override for log file.
        log_format: CLI override for log format ("text" or "json").
        env_reader: Optional EnvReader for testing (uses os.environ if None).
        strict: If True, raise TomlParseError on config file parse failures.

    Returns:
        VPTConfig with merged configuration.

    Raises:
        TomlParseError: When strict=True and the config file cannot be parsed.
        ValueError: When a merged value fails model validation.
    """
    reader = env_reader or EnvReader()
    file_config = load_config_file(config_path, strict=strict)

    tools_file = file_config.get("tools", {})
    encoding_file = file_config.get("encoding", {})
    jobs_file = file_config.get("jobs", {})
    logging_file = file_config.get("logging", {})

    tools = ToolPathsConfig(
        ffmpeg=ffmpeg_path
        or reader.get_path("VPT_FFMPEG_PATH")
        or _optional_path(tools_file.get("ffmpeg")),
    )

    defaults = EncodingConfig()
    encoding = EncodingConfig(
        video_codec=encoding_file.get("video_codec", defaults.video_codec),
        preset=encoding_file.get("preset", defaults.preset),
        crf=int(encoding_file.get("crf", defaults.crf)),
        audio_codec=encoding_file.get("audio_codec", defaults.audio_codec),
        audio_bitrate=encoding_file.get("audio_bitrate", defaults.audio_bitrate),
    )

    jobs_defaults = JobsConfig()
    jobs = JobsConfig(
        poll_interval=reader.get_float(
            "VPT_POLL_INTERVAL",
            float(jobs_file.get("poll_interval", jobs_defaults.poll_interval)),
        ),
        timeout_seconds=int(
            jobs_file.get("timeout_seconds", jobs_defaults.timeout_seconds)
        ),
        temp_directory=reader.get_path("VPT_TEMP_DIR")
        or _optional_path(jobs_file.get("temp_directory")),
    )

    log_defaults = LoggingConfig()
    logging_config = LoggingConfig(
        level=log_level
        or reader.get_str("VPT_LOG_LEVEL")
        or logging_file.get("level", log_defaults.level),
        file=log_file
        or reader.get_path("VPT_LOG_FILE", must_exist=False)
        or _optional_path(logging_file.get("file")),
        format=log_format
        or reader.get_str("VPT_LOG_FORMAT")
        or logging_file.get("format", log_defaults.format),
        include_stderr=bool(
            logging_file.get("include_stderr", log_defaults.include_stderr)
        ),
        max_bytes=int(logging_file.get("max_bytes", log_defaults.max_bytes)),
        backup_count=int(logging_file.get("backup_count", log_defaults.backup_count)),
    )

    return VPTConfig(
        tools=tools,
        encoding=encoding,
        jobs=jobs,
        logging=logging_config,
    )
