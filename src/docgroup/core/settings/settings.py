"""Settings - Configuration Manager for docgroup.

Settings manages configuration from JSON files, config dicts and
environment variables, providing one place where group option defaults and
per-group overrides are resolved.

Configuration hierarchy:
- docgroup: Core settings (defaults for every group)
  - use_transactions: Wrap creates in a store transaction
  - return_document_state: Return documents in operation results
  - allow_override: Let a registry replace an existing group
- groups: Per-group overrides
  - <group_name>: Same keys as the docgroup section

Environment variables follow the naming convention:
DOCGROUP__<section>__<key> for nested values
Example: DOCGROUP__DOCGROUP__USE_TRANSACTIONS=true
         DOCGROUP__GROUPS__CUSTOMERS__RETURN_DOCUMENT_STATE=true
"""

import json
import logging
import os
from copy import deepcopy
from pathlib import Path
from typing import Any

from docgroup.core.exceptions import InvalidArgument

logger = logging.getLogger(__name__)

SECTIONS = ("docgroup", "groups")


_TRUE_STRINGS = frozenset({"true", "1", "yes", "on"})
_FALSE_STRINGS = frozenset({"false", "0", "no", "off", ""})


def as_bool(value: Any, key: str) -> bool:
    """Coerce a boolean setting, accepting common string spellings.

    Env values that are not valid JSON (e.g. "False") arrive as strings.

    Raises:
        InvalidArgument: If the value is not a recognizable boolean.
    """
    if isinstance(value, bool):
        return value
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _TRUE_STRINGS:
            return True
        if lowered in _FALSE_STRINGS:
            return False
    raise InvalidArgument(f"Setting '{key}' must be a boolean", argument=key, value=value)


def _merge(target: dict[str, Any], source: dict[str, Any]) -> None:
    for key, value in source.items():
        if isinstance(value, dict) and isinstance(target.get(key), dict):
            _merge(target[key], value)
        else:
            target[key] = deepcopy(value)


class Settings:
    """Configuration manager for docgroup.

    Each DocGroup facade owns one Settings instance so that configuration
    state stays isolated between facades (and between tests).
    """

    ENV_PREFIX = "DOCGROUP"
    ENV_SEPARATOR = "__"

    def __init__(self, config_path: str | None = None):
        """Initialize the settings manager.

        Args:
            config_path: Path to JSON configuration file. If None, only the
                provided dict and environment variables are used.
        """
        self._config_path = config_path
        self._config = self.default_config()
        self._loaded = False
        logger.debug("Settings instance created with config_path=%s", config_path)

    @staticmethod
    def default_config() -> dict[str, Any]:
        """Return a new default config dict each time."""
        return {
            "docgroup": {
                "use_transactions": False,
                "return_document_state": False,
                "allow_override": True,
            },
            "groups": {},
        }

    def load(self, config: dict[str, Any] | None = None) -> None:
        """Load configuration from a config dict, JSON file and environment.

        Args:
            config: Optional config dict merged over the defaults.

        Priority (highest to lowest):
        1. Environment variables
        2. JSON file
        3. Provided config (if any)
        4. Default values
        """
        if self._loaded:
            logger.debug("Configuration already loaded, skipping reload")
            return

        self._config = self.default_config()

        if config is not None:
            self._merge_sections(config, source="config dict")

        if self._config_path:
            self._load_from_json()

        self._load_from_env()

        self._loaded = True
        logger.info("Configuration loaded successfully")
        logger.debug(
            "Final config structure: docgroup keys=%s, groups=%s",
            list(self._config["docgroup"].keys()),
            list(self._config["groups"].keys()),
        )

    def _load_from_json(self) -> None:
        """Load configuration from the JSON file."""
        config_file = Path(self._config_path)
        if not config_file.exists():
            logger.warning("Config file not found: %s", self._config_path)
            return

        try:
            with open(config_file, encoding="utf-8") as f:
                json_config = json.load(f)
        except json.JSONDecodeError as e:
            logger.error("Invalid JSON in config file %s: %s", self._config_path, e)
            raise ValueError(f"Invalid JSON configuration file: {e}") from e

        self._merge_sections(json_config, source=self._config_path)
        logger.info("Loaded configuration from JSON: %s", self._config_path)

    def _merge_sections(self, config: Any, source: str) -> None:
        """Validate and merge the known sections of a config mapping."""
        if not isinstance(config, dict):
            raise ValueError(f"Configuration from {source} must be an object")

        for section in SECTIONS:
            if section not in config:
                continue
            if not isinstance(config[section], dict):
                raise ValueError(f"'{section}' section must be an object")
            incoming = config[section]
            if section == "groups":
                # Group names are matched case-insensitively.
                incoming = {str(name).lower(): value for name, value in incoming.items()}
            _merge(self._config[section], incoming)

    def _load_from_env(self) -> None:
        """Load configuration from environment variables.

        Environment variables follow the pattern:
        DOCGROUP__<SECTION>__<KEY>__<SUBKEY>...

        Examples:
        - DOCGROUP__DOCGROUP__ALLOW_OVERRIDE=false
        - DOCGROUP__GROUPS__ORDERS__USE_TRANSACTIONS=true
        """
        prefix = f"{self.ENV_PREFIX}{self.ENV_SEPARATOR}"

        for env_key, env_value in os.environ.items():
            if not env_key.startswith(prefix):
                continue

            key_path = env_key[len(prefix) :].split(self.ENV_SEPARATOR)

            if len(key_path) < 2:
                logger.warning("Invalid env var format (too short): %s", env_key)
                continue

            section = key_path[0].lower()
            if section not in SECTIONS:
                logger.warning("Invalid section in env var %s: %s", env_key, section)
                continue

            if section == "groups" and len(key_path) < 3:
                logger.warning("Group env var too short: %s", env_key)
                continue

            parsed_value = self._parse_env_value(env_value)
            self._set_nested_value(section, key_path[1:], parsed_value)
            logger.debug("Set from env: %s = %s", env_key, parsed_value)

    def _parse_env_value(self, value: str) -> Any:
        """Parse environment variable value with type inference.

        Attempts to parse as JSON first, falls back to string.
        """
        try:
            return json.loads(value)
        except (json.JSONDecodeError, ValueError):
            return value

    def _set_nested_value(self, section: str, path: list[str], value: Any) -> None:
        target = self._config[section]
        for key in path[:-1]:
            target = target.setdefault(key.lower(), {})
        target[path[-1].lower()] = value

    def get_core_config(self, key: str | None = None, default: Any = None) -> Any:
        """Get core docgroup configuration.

        Args:
            key: Specific configuration key. If None, returns the whole section.
            default: Default value if key not found.

        Returns:
            Configuration value or default.
        """
        if not self._loaded:
            self.load()

        if key is None:
            return deepcopy(self._config["docgroup"])

        return self._config["docgroup"].get(key, default)

    def get_group_config(self, group_name: str, key: str | None = None, default: Any = None) -> Any:
        """Get the overrides configured for one group.

        Args:
            group_name: Group name (matched case-insensitively).
            key: Specific configuration key. If None, returns all overrides.
            default: Default value if key not found.

        Returns:
            Configuration value or default.
        """
        if not self._loaded:
            self.load()

        group_config = self._config["groups"].get(group_name.lower(), {})

        if key is None:
            return deepcopy(group_config)

        return group_config.get(key, default)

    def set_core_config(self, key: str, value: Any) -> None:
        """Set core configuration (runtime only, not persisted)."""
        if not self._loaded:
            self.load()

        self._config["docgroup"][key] = value
        logger.debug("Set docgroup config: %s = %s", key, value)

    def set_group_config(self, group_name: str, key: str, value: Any) -> None:
        """Set a group override (runtime only, not persisted)."""
        if not self._loaded:
            self.load()

        self._config["groups"].setdefault(group_name.lower(), {})[key] = value
        logger.debug("Set group config: %s.%s = %s", group_name, key, value)

    def get_all_config(self) -> dict[str, Any]:
        """Get complete configuration snapshot.

        Returns:
            Deep copy of entire configuration.
        """
        if not self._loaded:
            self.load()

        return deepcopy(self._config)

    def reload(self, config: dict[str, Any] | None = None) -> None:
        """Reload configuration from sources."""
        self._loaded = False
        self.load(config)
        logger.info("Configuration reloaded")

    @property
    def config_path(self) -> str | None:
        """Get the configuration file path."""
        return self._config_path

    @property
    def is_loaded(self) -> bool:
        """Check if configuration has been loaded."""
        return self._loaded
