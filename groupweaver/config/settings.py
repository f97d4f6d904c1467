import os
import json
import logging
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from dotenv import load_dotenv

from .profiles import default_ignore_patterns
from ..core.errors import ConfigError
from ..core.models import GroupingOptions, GroupingStrategy

logger = logging.getLogger(__name__)


@dataclass
class GroupingConfig:
    """Defaults used by the CLI when building and budgeting groups."""
    strategy: str = GroupingStrategy.MIXED.value
    max_group_size: int = 10
    min_relationship_strength: float = 0.3
    priority_threshold: float = 3
    token_limit: Optional[int] = None
    ignore_patterns: List[str] = field(default_factory=default_ignore_patterns)
    size_limit_mb: float = 1.0

    def to_options(self) -> GroupingOptions:
        return GroupingOptions(
            max_group_size=self.max_group_size,
            min_relationship_strength=self.min_relationship_strength,
            priority_threshold=self.priority_threshold,
        )


class SettingsManager:
    """
    Loads GroupingConfig from defaults, an optional YAML/JSON file and
    GROUPWEAVER_* environment variables, in that order of precedence.
    """

    # Environment variable -> (config attribute, converter)
    ENV_MAPPINGS = {
        'GROUPWEAVER_STRATEGY': ('strategy', str),
        'GROUPWEAVER_MAX_GROUP_SIZE': ('max_group_size', int),
        'GROUPWEAVER_MIN_STRENGTH': ('min_relationship_strength', float),
        'GROUPWEAVER_PRIORITY_THRESHOLD': ('priority_threshold', float),
        'GROUPWEAVER_TOKEN_LIMIT': ('token_limit', int),
    }

    def __init__(self, config_file: Optional[Path] = None, use_env: bool = True):
        self.config_file = Path(config_file) if config_file else None
        self.use_env = use_env
        self._config = self._load_config()

    @property
    def config(self) -> GroupingConfig:
        return self._config

    def _load_config(self) -> GroupingConfig:
        config = GroupingConfig()

        if self.config_file is not None:
            self._apply(config, self._read_file(self.config_file), source=str(self.config_file))

        if self.use_env:
            # Pick up a project-level .env without overriding the real environment
            load_dotenv(override=False)
            self._load_from_environment(config)

        self._validate(config)
        return config

    def _read_file(self, path: Path) -> Dict[str, Any]:
        if not path.exists():
            raise ConfigError(f"Config file not found: {path}", {"path": str(path)})

        try:
            with open(path, 'r', encoding='utf-8') as f:
                if path.suffix.lower() in ('.yaml', '.yml'):
                    data = yaml.safe_load(f)
                else:
                    data = json.load(f)
        except (yaml.YAMLError, json.JSONDecodeError) as e:
            raise ConfigError(f"Could not parse config file {path}: {e}", {"path": str(path)}) from e

        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigError(f"Config file {path} must contain a mapping", {"path": str(path)})

        # Settings may live under a top-level "grouping" section
        section = data.get('grouping', data)
        if not isinstance(section, dict):
            raise ConfigError(f"'grouping' section in {path} must be a mapping", {"path": str(path)})
        return section

    def _apply(self, config: GroupingConfig, values: Dict[str, Any], source: str) -> None:
        known = {f.name for f in fields(GroupingConfig)}
        for key, value in values.items():
            key = key.replace('-', '_')
            if key not in known:
                logger.warning(f"Ignoring unknown setting '{key}' in {source}")
                continue
            setattr(config, key, value)

    def _load_from_environment(self, config: GroupingConfig) -> None:
        for env_var, (attr, convert) in self.ENV_MAPPINGS.items():
            value = os.getenv(env_var)
            if not value:
                continue
            try:
                setattr(config, attr, convert(value))
            except ValueError as e:
                raise ConfigError(
                    f"Invalid value for {env_var}: {value!r}",
                    {"variable": env_var, "value": value}
                ) from e

    @staticmethod
    def _validate(config: GroupingConfig) -> None:
        valid_strategies = [s.value for s in GroupingStrategy]
        if config.strategy not in valid_strategies:
            raise ConfigError(
                f"Unknown strategy '{config.strategy}', expected one of {', '.join(valid_strategies)}",
                {"strategy": config.strategy}
            )

        if not isinstance(config.max_group_size, int) or config.max_group_size < 1:
            raise ConfigError(f"max_group_size must be a positive integer, got {config.max_group_size!r}")

        if not isinstance(config.min_relationship_strength, (int, float)) or \
                not 0 <= config.min_relationship_strength <= 1:
            raise ConfigError(
                f"min_relationship_strength must be within [0, 1], got {config.min_relationship_strength!r}"
            )

        if isinstance(config.priority_threshold, bool) or not isinstance(config.priority_threshold, (int, float)):
            raise ConfigError(f"priority_threshold must be a number, got {config.priority_threshold!r}")

        if config.token_limit is not None and (not isinstance(config.token_limit, int) or config.token_limit < 1):
            raise ConfigError(f"token_limit must be a positive integer, got {config.token_limit!r}")

        if not isinstance(config.ignore_patterns, list):
            raise ConfigError("ignore_patterns must be a list of glob patterns")
