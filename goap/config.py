"""Engine configuration loaded from YAML.

Example ``config/goap.yaml``::

    logging:
      level: INFO
      colors: true
      renderer: console
    planning:
      default_action_cost: 1
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict

import structlog
import yaml

from goap.action import DEFAULT_ACTION_COST
from goap.errors import ConfigError

log = structlog.get_logger(__name__)

LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")
RENDERERS = ("console", "json")


def load_yaml_config(config_path: Path, config_name: str) -> Dict[str, Any]:
    """Load a YAML mapping, returning ``{}`` for an empty file."""
    if not config_path.is_file():
        log.error(f"{config_name} config file not found", path=str(config_path))
        raise ConfigError(f"{config_name} configuration file not found: {config_path}")
    try:
        with config_path.open("r") as f:
            config_data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        log.error(
            f"Error parsing YAML for {config_name}",
            path=str(config_path),
            error=str(e),
            exc_info=True,
        )
        raise ConfigError(f"Invalid YAML in {config_path}: {e}") from e
    if config_data is None:
        log.warning(f"{config_name} config file is empty.", path=str(config_path))
        return {}
    if not isinstance(config_data, dict):
        raise ConfigError(f"{config_name} config must be a mapping: {config_path}")
    log.info(f"{config_name} config loaded", path=str(config_path))
    return config_data


@dataclass(frozen=True)
class GoapConfig:
    log_level: str = "INFO"
    log_colors: bool = True
    log_renderer: str = "console"
    default_action_cost: int = DEFAULT_ACTION_COST

    def __post_init__(self) -> None:
        if self.log_level not in LOG_LEVELS:
            raise ConfigError(f"Unknown log level {self.log_level!r}")
        if self.log_renderer not in RENDERERS:
            raise ConfigError(f"Unknown log renderer {self.log_renderer!r}")
        cost = self.default_action_cost
        if isinstance(cost, bool) or not isinstance(cost, int) or cost < 0:
            raise ConfigError(f"default_action_cost must be a non-negative integer, got {cost!r}")

    @property
    def log_level_value(self) -> int:
        return getattr(logging, self.log_level)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GoapConfig":
        logging_cfg = data.get("logging") or {}
        planning_cfg = data.get("planning") or {}
        return cls(
            log_level=str(logging_cfg.get("level", "INFO")).upper(),
            log_colors=bool(logging_cfg.get("colors", True)),
            log_renderer=str(logging_cfg.get("renderer", "console")).lower(),
            default_action_cost=planning_cfg.get("default_action_cost", DEFAULT_ACTION_COST),
        )


def load_config(config_path: Path | str) -> GoapConfig:
    return GoapConfig.from_dict(load_yaml_config(Path(config_path), "GOAP"))


__all__ = ["GoapConfig", "load_config", "load_yaml_config"]
