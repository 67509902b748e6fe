# ROLEGATE_FEAT: config-manager-001
"""
ROLEGATE - Configuration Manager
================================

Builds the gatekeeper configuration from a YAML or JSON file.

Features:
- YAML/JSON configuration loading
- Environment variable overrides (ROLEGATE_STRATEGY, ROLEGATE_VOTERS__0__TYPE, ...)
- Configuration validation

File format:

    strategy: deny_wins          # or allow_wins
    voters:
      - type: default
      - type: ip_address
        allowed: ["10.0.0.0/8"]
      - type: time_based         # times must be quoted
        start_time: "09:00"
        end_time: "17:00"
        timezone: Europe/Berlin

Author: ROLEGATE Development Team
Version: 1.0.0
"""

import json
import logging
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Union
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import yaml

from rolegate.core.configuration import Configuration
from rolegate.core.exceptions import InvalidConfigError, MissingConfigError
from rolegate.core.strategy import STRATEGIES, get_strategy
from rolegate.db.repository import RoleRepository
from rolegate.voters.base import Voter
from rolegate.voters.default_voter import DefaultVoter
from rolegate.voters.ip_address import IpAddressVoter
from rolegate.voters.time_based import TIME_PATTERN, TimeBasedVoter

logger = logging.getLogger("ROLEGATE_ConfigManager")

VOTER_TYPES = ("default", "ip_address", "time_based")


class ConfigManager:
    """
    Configuration manager for the gatekeeper.

    Example:
        config_manager = ConfigManager("config/rolegate.yaml")
        configuration = config_manager.build_configuration(repository)
        gatekeeper = Gatekeeper(configuration)
    """

    def __init__(self, config_path: Optional[Union[str, Path]] = None):
        self._config_path: Optional[Path] = Path(config_path) if config_path else None
        self._raw_config: Dict[str, Any] = {}
        self._loaded_at: Optional[datetime] = None
        self._env_prefix = "ROLEGATE_"

        if self._config_path:
            self.load(self._config_path)

    def load(self, path: Union[str, Path]) -> None:
        """
        Load configuration from file.

        Raises:
            MissingConfigError: If the file does not exist
            InvalidConfigError: If the file cannot be parsed
        """
        path = Path(path)

        if not path.exists():
            raise MissingConfigError(f"Config file not found: {path}", details={"path": str(path)})

        try:
            with open(path, "r") as f:
                if path.suffix in [".yaml", ".yml"]:
                    raw = yaml.safe_load(f) or {}
                elif path.suffix == ".json":
                    raw = json.load(f)
                else:
                    raise InvalidConfigError(f"Unsupported config format: {path.suffix}")
        except (yaml.YAMLError, json.JSONDecodeError) as e:
            raise InvalidConfigError(f"Failed to parse config {path}: {e}") from e

        if not isinstance(raw, dict):
            raise InvalidConfigError(f"Config root must be a mapping: {path}")

        self._raw_config = raw
        self._apply_env_overrides()

        self._config_path = path
        self._loaded_at = datetime.now(timezone.utc)
        logger.info(f"Configuration loaded from: {path}")

    def load_dict(self, raw: Dict[str, Any]) -> None:
        """Load configuration from an in-memory mapping."""
        self._raw_config = dict(raw)
        self._apply_env_overrides()
        self._loaded_at = datetime.now(timezone.utc)

    def _apply_env_overrides(self) -> None:
        """Apply environment variable overrides."""
        for key, value in os.environ.items():
            if not key.startswith(self._env_prefix):
                continue
            config_key = key[len(self._env_prefix):].lower().replace("__", ".")
            if config_key != "strategy" and not config_key.startswith("voters."):
                continue
            self._set_nested(config_key, self._parse_value(value))

    def _parse_value(self, value: str) -> Any:
        """Parse string value to appropriate type."""
        if value.lower() in ("true", "false"):
            return value.lower() == "true"

        try:
            return int(value)
        except ValueError:
            pass

        return value

    def _set_nested(self, key: str, value: Any) -> None:
        """Set a nested config value using dot notation; digits index lists."""
        parts = key.split(".")
        current: Any = self._raw_config

        for part, following in zip(parts[:-1], parts[1:]):
            container = list if following.isdigit() else dict
            if isinstance(current, list):
                index = int(part)
                while len(current) <= index:
                    current.append(container())
                current = current[index]
            else:
                if part not in current:
                    current[part] = container()
                current = current[part]

        last = parts[-1]
        if isinstance(current, list):
            index = int(last)
            while len(current) <= index:
                current.append({})
            current[index] = value
        else:
            current[last] = value

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get configuration value by dot-notation key.

        Example:
            config_manager.get("voters.0.type")
        """
        current: Any = self._raw_config

        for part in key.split("."):
            if isinstance(current, dict) and part in current:
                current = current[part]
            elif isinstance(current, list) and part.isdigit() and int(part) < len(current):
                current = current[int(part)]
            else:
                return default

        return current

    @property
    def strategy_name(self) -> str:
        return str(self._raw_config.get("strategy", "deny_wins"))

    @property
    def voter_entries(self) -> List[Dict[str, Any]]:
        voters = self._raw_config.get("voters", [])
        return voters if isinstance(voters, list) else []

    def validate(self) -> List[str]:
        """
        Validate configuration.

        Returns:
            List of validation errors (empty if valid)
        """
        errors = []

        strategy = self.strategy_name.strip().lower().replace("-", "_")
        if strategy not in STRATEGIES:
            errors.append(f"strategy must be one of {sorted(STRATEGIES)}")

        if "voters" in self._raw_config and not isinstance(self._raw_config["voters"], list):
            errors.append("voters must be a list")

        entries = self.voter_entries
        if not entries:
            errors.append("voters must contain at least one voter")

        for index, entry in enumerate(entries):
            if not isinstance(entry, dict):
                errors.append(f"voters.{index} must be a mapping")
                continue
            voter_type = entry.get("type")
            if voter_type not in VOTER_TYPES:
                errors.append(f"voters.{index}.type must be one of {list(VOTER_TYPES)}")
            elif voter_type == "ip_address" and not isinstance(entry.get("allowed"), list):
                errors.append(f"voters.{index}.allowed must be a list")
            elif voter_type == "time_based":
                errors.extend(self._validate_window(index, entry))

        return errors

    def _validate_window(self, index: int, entry: Dict[str, Any]) -> List[str]:
        errors = []

        # YAML reads unquoted 17:00 as the base-60 integer 1020
        for key in ("start_time", "end_time"):
            if key not in entry:
                continue
            value = entry[key]
            if not isinstance(value, str) or not TIME_PATTERN.match(value):
                errors.append(
                    f"voters.{index}.{key} must be a quoted \"HH:MM\" string, got {value!r}"
                )

        if "timezone" in entry:
            try:
                ZoneInfo(str(entry["timezone"]))
            except (ZoneInfoNotFoundError, ValueError, OSError):
                errors.append(f"voters.{index}.timezone is not a known zone: {entry['timezone']!r}")

        return errors

    def build_configuration(
        self,
        repository: Optional[RoleRepository] = None,
        logger: Optional[logging.Logger] = None,
    ) -> Configuration:
        """
        Build the gatekeeper configuration.

        Raises:
            InvalidConfigError: If validation fails
            MissingConfigError: If a default voter is configured without a repository
        """
        errors = self.validate()
        if errors:
            raise InvalidConfigError(
                f"Invalid configuration: {'; '.join(errors)}",
                details={"errors": errors},
            )

        strategy = get_strategy(self.strategy_name)
        voters = [self._build_voter(entry, repository, strategy) for entry in self.voter_entries]

        return Configuration(voters=voters, strategy=strategy, logger=logger)

    def _build_voter(self, entry: Dict[str, Any], repository, strategy) -> Voter:
        voter_type = entry["type"]

        if voter_type == "default":
            if repository is None:
                raise MissingConfigError(
                    "The default voter requires a role repository",
                    code="NO_REPOSITORY",
                )
            voter_strategy = get_strategy(entry["strategy"]) if "strategy" in entry else strategy
            return DefaultVoter(repository, voter_strategy)

        if voter_type == "ip_address":
            return IpAddressVoter(entry["allowed"])

        return TimeBasedVoter(
            start_time=str(entry.get("start_time", "09:00")),
            end_time=str(entry.get("end_time", "17:00")),
            timezone=str(entry.get("timezone", "UTC")),
        )

    def get_info(self) -> Dict[str, Any]:
        """Get configuration info."""
        return {
            "path": str(self._config_path) if self._config_path else None,
            "loaded_at": self._loaded_at.isoformat() if self._loaded_at else None,
            "strategy": self.strategy_name,
            "voters": [entry.get("type") for entry in self.voter_entries if isinstance(entry, dict)],
            "validation_errors": self.validate(),
        }


__all__ = [
    "ConfigManager",
    "VOTER_TYPES",
]
