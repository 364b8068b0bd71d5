"""Configuration for the task card tools.

Settings come from a JSON file (``$TASKCARD_CONFIG`` or ``pace.config.json``
in the working directory) with environment overrides on top. Keys may be
written in snake_case or in the camelCase of older config files.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from .models import PRIORITIES, TaskCardError

CONFIG_ENV = "TASKCARD_CONFIG"
PREFIX_ENV = "TASKCARD_PROJECT_PREFIX"
LOG_LEVEL_ENV = "TASKCARD_LOG_LEVEL"
LOG_FILE_ENV = "TASKCARD_LOG_FILE"
DEFAULT_CONFIG_FILE = "pace.config.json"

ESTIMATION_UNITS = ("hours", "days")


class ConfigError(TaskCardError):
    """Raised when a configuration file cannot be used."""


@dataclass(slots=True)
class GeneratorConfig:
    """Project-level settings for task card preparation."""

    project_name: str = "PACE项目"
    project_prefix: str = "PACE"
    # output_dir and template_dir are consumed by the document generator, not here
    output_dir: str = "specs"
    template_dir: str = "模板/任务卡"
    team_members: List[str] = field(default_factory=lambda: ["开发者A", "开发者B", "开发者C"])
    default_priority: str = "P1"
    estimation_unit: str = "hours"
    log_level: str = "INFO"
    log_file: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "project_name": self.project_name,
            "project_prefix": self.project_prefix,
            "output_dir": self.output_dir,
            "template_dir": self.template_dir,
            "team_members": list(self.team_members),
            "default_priority": self.default_priority,
            "estimation_unit": self.estimation_unit,
            "log_level": self.log_level,
            "log_file": self.log_file,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GeneratorConfig":
        """Create from a config mapping, accepting the nested camelCase layout."""
        defaults = cls()
        settings = data.get("defaultSettings") or data.get("default_settings") or {}

        def pick(snake: str, camel: str, fallback: Any) -> Any:
            if snake in data:
                return data[snake]
            if camel in data:
                return data[camel]
            return fallback

        return cls(
            project_name=pick("project_name", "projectName", defaults.project_name),
            project_prefix=pick("project_prefix", "projectPrefix", defaults.project_prefix),
            output_dir=pick("output_dir", "outputDir", defaults.output_dir),
            template_dir=pick("template_dir", "templateDir", defaults.template_dir),
            team_members=list(pick("team_members", "teamMembers", defaults.team_members)),
            default_priority=data.get("default_priority", settings.get("priority", defaults.default_priority)),
            estimation_unit=data.get(
                "estimation_unit", settings.get("estimationUnit", settings.get("estimation_unit", defaults.estimation_unit))
            ),
            log_level=pick("log_level", "logLevel", defaults.log_level),
            log_file=pick("log_file", "logFile", defaults.log_file),
        )

    def validate(self) -> List[str]:
        """Validate the configuration and return any issues."""
        issues = []

        if not self.project_prefix:
            issues.append("Project prefix is required")
        elif not self.project_prefix.isalpha() or not self.project_prefix.isupper():
            issues.append(f"Project prefix must be upper-case letters, got: {self.project_prefix}")
        if self.default_priority not in PRIORITIES:
            issues.append(f"Invalid default priority: {self.default_priority}")
        if self.estimation_unit not in ESTIMATION_UNITS:
            issues.append(f"Invalid estimation unit: {self.estimation_unit}")

        return issues


def _resolve_config_path(path: Optional[Union[str, Path]]) -> Optional[Path]:
    if path:
        return Path(path).expanduser()

    env_path = os.getenv(CONFIG_ENV)
    if env_path:
        return Path(env_path).expanduser()

    candidate = Path.cwd() / DEFAULT_CONFIG_FILE
    if candidate.exists():
        return candidate
    return None


def load_config(path: Optional[Union[str, Path]] = None) -> GeneratorConfig:
    """Load settings from ``path``, ``$TASKCARD_CONFIG`` or ``pace.config.json``.

    Falls back to the defaults when no file is configured. An explicitly named
    file that is missing, unreadable JSON or invalid settings raise ``ConfigError``.
    """
    config_path = _resolve_config_path(path)

    if config_path is None:
        config = GeneratorConfig()
    else:
        if not config_path.exists():
            raise ConfigError(f"Config file '{config_path}' does not exist.")
        try:
            data = json.loads(config_path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            raise ConfigError(f"Config file '{config_path}' is not valid JSON: {e}") from e
        if not isinstance(data, dict):
            raise ConfigError(f"Config file '{config_path}' must contain a JSON object.")
        config = GeneratorConfig.from_dict(data)

    env_prefix = os.getenv(PREFIX_ENV)
    if env_prefix:
        config.project_prefix = env_prefix
    env_level = os.getenv(LOG_LEVEL_ENV)
    if env_level:
        config.log_level = env_level.upper()
    env_log_file = os.getenv(LOG_FILE_ENV)
    if env_log_file:
        config.log_file = env_log_file

    issues = config.validate()
    if issues:
        raise ConfigError(f"Invalid configuration: {'; '.join(issues)}")

    return config
