"""Project configuration helpers."""

import logging

import yaml
from pydantic import ValidationError

from .context import ProjectContext
from .core import ProjectConfig
from .errors import ConfigError
from .utils import atomic_write_text

logger = logging.getLogger(__name__)


def load_config(ctx: ProjectContext) -> ProjectConfig:
    """Load project configuration from .treesnap/config.yaml.

    Raises:
        NotInitialized: If the project has no control directory
        ConfigError: If the file is missing, unparsable, or invalid
    """
    ctx.require_initialized()
    if not ctx.config_path.exists():
        raise ConfigError(f"Configuration not found at {ctx.config_path}")

    try:
        data = yaml.safe_load(ctx.config_path.read_text(encoding="utf-8")) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Cannot read {ctx.config_path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"{ctx.config_path} must contain a mapping")

    try:
        return ProjectConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration in {ctx.config_path}: {e}") from e


def save_config(config: ProjectConfig, ctx: ProjectContext) -> None:
    """Save project configuration atomically."""
    text = yaml.safe_dump(config.model_dump(mode="json"), default_flow_style=False, sort_keys=False)
    atomic_write_text(ctx.config_path, text)
    logger.debug("Wrote config %s", ctx.config_path)
