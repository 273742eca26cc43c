"""Exceptions for the execution layer."""


class ToolNotFoundError(RuntimeError):
    """Raised when the encoder executable cannot be resolved."""

    def __init__(self, tool_name: str, message: str | None = None) -> None:
        self.tool_name = tool_name
        super().__init__(
            message
            or f"Required tool '{tool_name}' is not available. "
            "Install it or set VPT_FFMPEG_PATH / [tools] ffmpeg in config.toml."
        )
