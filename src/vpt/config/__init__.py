"""Configuration management for VPT.

This module provides configuration loading with precedence handling:
1. CLI flags (highest priority)
2. Environment variables (VPT_*)
3. Config file (~/.vpt/config.toml)
4. Default values (lowest priority)
"""

from vpt.config.env import EnvReader
from vpt.config.loader import (
    TomlParseError,
    clear_config_cache,
    get_config,
    get_data_dir,
    get_default_config_path,
    load_config_file,
    load_toml_file,
)
from vpt.config.models import (
    EncodingConfig,
    JobsConfig,
    LoggingConfig,
    ToolPathsConfig,
    VPTConfig,
)

__all__ = [
    # Models
    "EncodingConfig",
    "JobsConfig",
    "LoggingConfig",
    "ToolPathsConfig",
    "VPTConfig",
    # Loader
    "EnvReader",
    "TomlParseError",
    "clear_config_cache",
    "get_config",
    "get_data_dir",
    "get_default_config_path",
    "load_config_file",
    "load_toml_file",
]
