"""Configuration data models.

This module defines dataclasses for VPT configuration options.
"""

from dataclasses import dataclass, field
from pathlib import Path


@dataclass
class ToolPathsConfig:
    """Configuration for external tool paths.

    If not specified, ffmpeg is looked up in PATH.
    """

    ffmpeg: Path | None = None


@dataclass
class EncodingConfig:
    """Default encoder settings used when an edit carries no override."""

    video_codec: str = "libx264"
    preset: str = "veryfast"
    crf: int = 20
    audio_codec: str = "aac"
    audio_bitrate: str = "192k"

    def __post_init__(self) -> None:
        """Validate configuration."""
        if not 0 <= self.crf <= 63:
            raise ValueError(f"crf must be between 0 and 63, got {self.crf}")
        if not self.video_codec:
            raise ValueError("video_codec must not be empty")


@dataclass
class JobsConfig:
    """Configuration for job execution."""

    # Seconds between cancellation checks while the encoder runs
    poll_interval: float = 0.1

    # Hard limit for one encode in seconds (0 = no limit)
    timeout_seconds: int = 0

    # Directory for rasterized text watermarks (None = system temp dir)
    temp_directory: Path | None = None

    def __post_init__(self) -> None:
        """Validate configuration."""
        if not 0 < self.poll_interval <= 5:
            raise ValueError(
                f"poll_interval must be in (0, 5] seconds, got {self.poll_interval}"
            )
        if self.timeout_seconds < 0:
            raise ValueError("timeout_seconds must be >= 0")


@dataclass
class LoggingConfig:
    """Configuration for structured logging."""

    # Log level: debug, info, warning, error
    level: str = "info"

    # Log file path (None = stderr only)
    file: Path | None = None

    # Log format: text or json
    format: str = "text"

    # Also log to stderr when file is set
    include_stderr: bool = False

    # Rotation threshold in bytes (default 10MB)
    max_bytes: int = 10_485_760

    # Number of rotated files to keep
    backup_count: int = 5

    def __post_init__(self) -> None:
        """Validate configuration."""
        valid_levels = {"debug", "info", "warning", "error"}
        if self.level.lower() not in valid_levels:
            raise ValueError(f"level must be one of {valid_levels}, got {self.level}")
        valid_formats = {"text", "json"}
        if self.format.lower() not in valid_formats:
            raise ValueError(
                f"format must be one of {valid_formats}, got {self.format}"
            )


@dataclass
class VPTConfig:
    """Main configuration container for VPT.

    Aggregates all configuration sections.
    """

    tools: ToolPathsConfig = field(default_factory=ToolPathsConfig)
    encoding: EncodingConfig = field(default_factory=EncodingConfig)
    jobs: JobsConfig = field(default_factory=JobsConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    def get_tool_path(self, tool_name: str) -> Path | None:
        """Get configured path for a tool.

        Args:
            tool_name: Name of the tool (ffmpeg).

        Returns:
            Configured path or None if not configured.
        """
        return getattr(self.tools, tool_name.lower(), None)
