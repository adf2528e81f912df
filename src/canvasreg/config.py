"""Configuration management for canvasreg.

Handles loading .canvasreg.yaml files with directory traversal,
environment variable overrides, and default values.
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from .canvases.builtin import PLATFORMS
from .canvases.registry import DEFAULT_CANVAS_TYPE
from .errors import CanvasregError

CONFIG_FILENAME = ".canvasreg.yaml"
ENV_THEME = "CANVASREG_THEME"
ENV_DEFAULT_CANVAS = "CANVASREG_DEFAULT_CANVAS"
ENV_LOG_LEVEL = "CANVASREG_LOG_LEVEL"

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class TemplateConfig:
    """Page template settings."""

    title: str = "Canvas"
    color_primary: str = "#4CAF50"
    color_secondary: str = "#76B852"


@dataclass
class CanvasregConfig:
    """Complete canvasreg configuration."""

    theme: str = "general"
    default_canvas: str = DEFAULT_CANVAS_TYPE
    platform: str = "markdown"
    canvases: dict[str, bool] | None = None  # {canvas_type: enabled}
    log_level: str = "WARNING"
    template: TemplateConfig = field(default_factory=TemplateConfig)
    config_path: Path | None = None  # Path where config was loaded from

    def validate(self) -> None:
        """Validate configuration.

        Raises:
            CanvasregError: If configuration is invalid.
        """
        if self.platform not in PLATFORMS:
            raise CanvasregError(
                f"Invalid platform: {self.platform}. "
                f"Must be one of: {', '.join(PLATFORMS)}"
            )

        if self.log_level.upper() not in LOG_LEVELS:
            raise CanvasregError(
                f"Invalid log_level: {self.log_level}. "
                f"Must be one of: {', '.join(LOG_LEVELS)}"
            )

        if not isinstance(self.default_canvas, str) or not self.default_canvas:
            raise CanvasregError("default_canvas must be a non-empty string")

        if self.canvases is not None:
            for canvas_type, enabled in self.canvases.items():
                if not isinstance(enabled, bool):
                    raise CanvasregError(
                        f"canvases.{canvas_type} must be true or false, "
                        f"got {enabled!r}"
                    )

    @property
    def logging_level(self) -> int:
        return getattr(logging, self.log_level.upper())


def find_config_file(start_path: Path | None = None) -> Path | None:
    """Find .canvasreg.yaml by traversing up from start_path.

    Args:
        start_path: Directory to start searching from. Defaults to cwd.

    Returns:
        Path to config file if found, None otherwise.
    """
    if start_path is None:
        start_path = Path.cwd()
    else:
        start_path = Path(start_path).resolve()

    if start_path.is_file():
        start_path = start_path.parent

    current = start_path
    while True:
        config_path = current / CONFIG_FILENAME
        if config_path.is_file():
            return config_path

        parent = current.parent
        if parent == current:
            return None
        current = parent


def load_config(
    config_path: Path | None = None,
    start_path: Path | None = None,
    theme_override: str | None = None,
) -> CanvasregConfig:
    """Load configuration from file, environment, and overrides.

    Priority (highest to lowest):
    1. Function arguments (theme_override)
    2. Environment variables (CANVASREG_THEME, CANVASREG_DEFAULT_CANVAS,
       CANVASREG_LOG_LEVEL)
    3. Config file (.canvasreg.yaml)
    4. Defaults

    Args:
        config_path: Explicit path to config file. If None, searches.
        start_path: Directory to start config file search from.
        theme_override: Override theme from CLI argument.

    Returns:
        Loaded and validated configuration.
    """
    config = CanvasregConfig()

    if config_path is not None:
        config_path = Path(config_path)
        if not config_path.is_file():
            raise CanvasregError(f"Config file not found: {config_path}")
    else:
        config_path = find_config_file(start_path)

    if config_path is not None:
        config = _load_config_file(config_path)

    env_theme = os.environ.get(ENV_THEME)
    if env_theme:
        config.theme = env_theme

    env_default = os.environ.get(ENV_DEFAULT_CANVAS)
    if env_default:
        config.default_canvas = env_default

    env_log_level = os.environ.get(ENV_LOG_LEVEL)
    if env_log_level:
        config.log_level = env_log_level.upper()

    if theme_override is not None:
        config.theme = theme_override

    config.validate()
    return config


def _load_config_file(config_path: Path) -> CanvasregConfig:
    """Load configuration from a YAML file.

    Raises:
        CanvasregError: If file cannot be read or parsed.
    """
    try:
        with open(config_path) as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise CanvasregError(f"Invalid YAML in {config_path}: {e}") from e
    except OSError as e:
        raise CanvasregError(f"Cannot read config file {config_path}: {e}") from e

    if not isinstance(data, dict):
        raise CanvasregError(f"Config file {config_path} must contain a mapping")

    config = CanvasregConfig(config_path=config_path)

    # Keys present with an empty value keep their defaults
    if data.get("theme") is not None:
        config.theme = str(data["theme"])

    if data.get("default_canvas") is not None:
        config.default_canvas = str(data["default_canvas"])

    if data.get("platform") is not None:
        config.platform = str(data["platform"])

    if data.get("log_level") is not None:
        config.log_level = str(data["log_level"]).upper()

    # An explicit empty mapping is kept as {} (section declared, nothing off)
    if "canvases" in data and isinstance(data["canvases"], dict):
        config.canvases = {str(k): v for k, v in data["canvases"].items()}

    if "template" in data and isinstance(data["template"], dict):
        template_data = data["template"]
        config.template = TemplateConfig(
            title=template_data.get("title", config.template.title),
            color_primary=template_data.get(
                "color_primary", config.template.color_primary
            ),
            color_secondary=template_data.get(
                "color_secondary", config.template.color_secondary
            ),
        )

    return config


def create_default_config(path: Path | None = None) -> Path:
    """Create a default .canvasreg.yaml config file.

    Args:
        path: Directory to create config in. Defaults to cwd.

    Returns:
        Path to created config file.

    Raises:
        CanvasregError: If file already exists or cannot be written.
    """
    if path is None:
        path = Path.cwd()
    else:
        path = Path(path)

    config_path = path / CONFIG_FILENAME

    if config_path.exists():
        raise CanvasregError(f"Config file already exists: {config_path}")

    config_content = f"""# canvasreg configuration

# Theme used when none is given on the command line
# (or use {ENV_THEME} env var)
theme: "general"

# Canvas returned when nothing matches by file type or theme
default_canvas: "{DEFAULT_CANVAS_TYPE}"

# Document canvas platform style: {", ".join(PLATFORMS)}
platform: "markdown"

# DEBUG, INFO, WARNING, ERROR or CRITICAL
log_level: "WARNING"

# Disable built-in canvases (uncomment to enable)
# canvases:
#   poster: false

# Page template
template:
  title: "Canvas"
  color_primary: "#4CAF50"
  color_secondary: "#76B852"
"""

    try:
        config_path.write_text(config_content)
    except OSError as e:
        raise CanvasregError(f"Cannot write config file: {e}") from e

    return config_path


def config_to_dict(config: CanvasregConfig) -> dict[str, Any]:
    """Convert config to dictionary for display."""
    return {
        "theme": config.theme,
        "default_canvas": config.default_canvas,
        "platform": config.platform,
        "log_level": config.log_level,
        "canvases": dict(config.canvases) if config.canvases is not None else None,
        "template": {
            "title": config.template.title,
            "color_primary": config.template.color_primary,
            "color_secondary": config.template.color_secondary,
        },
        "config_path": str(config.config_path) if config.config_path else None,
    }
