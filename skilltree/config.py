"""
Progression configuration.

All tunables live in one frozen model so a session can be built for
tests or alternate rule sets without touching module state.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Optional

from pydantic import Field, ValidationError

from nexus.core.model import DataModel

logger = logging.getLogger(__name__)


class ConfigError(ValueError):
    """A configuration file could not be read or validated."""


class ProgressionConfig(DataModel):
    """
    Progression settings.

    Attributes:
        root_id: Expected id of the catalog's start node
        starting_skill_points: Balance of a fresh or reset session
        build_code_prefix: Text prefix of every build code
        catalog_path: Alternative catalog JSON; None for the shipped one
    """
    root_id: str = "start"
    starting_skill_points: int = Field(default=2, ge=0)
    build_code_prefix: str = Field(default="NEXUS-", min_length=1)
    catalog_path: Optional[Path] = None


def load_config(path: Path | str) -> ProgressionConfig:
    """
    Load settings from a JSON file.

    A missing file yields the defaults.

    Raises:
        ConfigError: If the file is not valid JSON or has invalid values
    """
    path = Path(path)
    if not path.exists():
        logger.warning(f"Config file not found: {path}, using defaults")
        return ProgressionConfig()

    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
        config = ProgressionConfig.model_validate(data)
    except (OSError, json.JSONDecodeError, ValidationError) as e:
        logger.error(f"Failed to load config {path}: {e}")
        raise ConfigError(f"Failed to load config {path}: {e}") from e

    # Relative catalog paths are relative to the config file
    if config.catalog_path is not None and not config.catalog_path.is_absolute():
        config = config.model_copy(update={"catalog_path": path.parent / config.catalog_path})

    logger.info(f"Loaded progression config from {path}")
    return config
