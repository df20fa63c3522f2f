"""
Configuration Management - YAML-based configuration with environment overrides
=============================================================================

This module handles all configuration aspects including:
- Loading from YAML files
- Environment variable overrides
- Default values
- Configuration validation
"""

import os
import yaml
from pathlib import Path
from typing import Any, Dict, Optional, List
from dataclasses import dataclass, field, asdict

from .exceptions import ConfigError


DEFAULT_SOURCES = ["Training Data", "Pattern Matching System"]


@dataclass
class MatcherConfig:
    """
    Pattern matcher configuration.

    ``min_threshold`` and ``keyword_weight`` are tuning knobs: a record
    is only accepted when its combined score beats ``min_threshold``,
    and keyword overlap is discounted by ``keyword_weight`` before it
    competes with the structural pattern score.
    """
    patterns_path: str = ""  # Defaults to <data_dir>/patterns.json
    min_threshold: float = 0.6
    keyword_weight: float = 0.8
    sources: List[str] = field(default_factory=lambda: list(DEFAULT_SOURCES))

    def validate(self) -> None:
        """Validate matcher configuration parameters."""
        if not 0 <= self.min_threshold <= 1:
            raise ConfigError(
                f"min_threshold must be between 0 and 1, got {self.min_threshold}"
            )

        if not 0 <= self.keyword_weight <= 1:
            raise ConfigError(
                f"keyword_weight must be between 0 and 1, got {self.keyword_weight}"
            )

        if not self.sources:
            raise ConfigError("sources must list at least one provenance tag")


@dataclass
class WebConfig:
    """Web API server settings."""
    host: str = "127.0.0.1"
    port: int = 8080
    debug: bool = False

    def validate(self) -> None:
        """Validate web configuration."""
        if self.port < 1 or self.port > 65535:
            raise ConfigError(f"Invalid web port: {self.port}")


@dataclass
class Config:
    """
    Main configuration container.

    Aggregates all configuration sections into a single object
    and provides methods for validating and exporting.
    """
    app_name: str = "Pattern Responder"
    version: str = "1.0.0"
    debug: bool = False

    matcher: MatcherConfig = field(default_factory=MatcherConfig)
    web: WebConfig = field(default_factory=WebConfig)

    # Paths (set at runtime)
    config_dir: str = ""
    data_dir: str = ""
    log_dir: str = ""

    def validate(self) -> None:
        """
        Validate all configuration sections.

        Raises:
            ConfigError: If any configuration section is invalid
        """
        self.matcher.validate()
        self.web.validate()

    @property
    def patterns_path(self) -> str:
        """Resolved path of the pattern file."""
        if self.matcher.patterns_path:
            return self.matcher.patterns_path
        return str(Path(self.data_dir or ".") / "patterns.json")

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary."""
        return {
            "app_name": self.app_name,
            "version": self.version,
            "debug": self.debug,
            "data_dir": self.data_dir,
            "log_dir": self.log_dir,
            "matcher": asdict(self.matcher),
            "web": asdict(self.web),
        }


def get_default_config_dir() -> Path:
    """
    Get the default configuration directory path.

    Returns:
        Path to the configuration directory
    """
    if "RESPONDER_CONFIG_DIR" in os.environ:
        return Path(os.environ["RESPONDER_CONFIG_DIR"])

    if "XDG_CONFIG_HOME" in os.environ:
        return Path(os.environ["XDG_CONFIG_HOME"]) / "pattern-responder"

    return Path.home() / ".config" / "pattern-responder"


def get_default_data_dir() -> Path:
    """
    Get the default data directory path.

    Returns:
        Path to the data directory
    """
    if "RESPONDER_DATA_DIR" in os.environ:
        return Path(os.environ["RESPONDER_DATA_DIR"])

    if "XDG_DATA_HOME" in os.environ:
        return Path(os.environ["XDG_DATA_HOME"]) / "pattern-responder"

    return Path.home() / ".local" / "share" / "pattern-responder"


def load_config(config_path: Optional[str] = None, load_env: bool = True) -> Config:
    """
    Load configuration from YAML file with environment variable overrides.

    This function loads configuration in the following order:
    1. Default values from dataclass
    2. Values from YAML file
    3. Environment variable overrides

    Args:
        config_path: Path to configuration file (optional)
        load_env: Whether to load environment variable overrides

    Returns:
        Config object with loaded values

    Raises:
        ConfigError: If configuration is invalid or cannot be loaded
    """
    config = Config()

    config.config_dir = str(get_default_config_dir())
    config.data_dir = str(get_default_data_dir())
    config.log_dir = str(Path(config.data_dir) / "logs")

    if config_path:
        yaml_path = Path(config_path)
    else:
        yaml_path = Path(config.config_dir) / "config.yaml"

    if yaml_path.exists():
        try:
            with open(yaml_path, "r", encoding="utf-8") as f:
                yaml_config = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Failed to parse config file: {e}", {"path": str(yaml_path)})
        except OSError as e:
            raise ConfigError(f"Failed to read config file: {e}", {"path": str(yaml_path)})

        if not isinstance(yaml_config, dict):
            raise ConfigError("Config file must contain a mapping", {"path": str(yaml_path)})

        _apply_yaml_config(config, yaml_config)
    elif config_path:
        raise ConfigError("Config file not found", {"path": str(yaml_path)})

    if load_env:
        _apply_env_overrides(config)

    config.validate()

    return config


def _apply_yaml_config(config: Config, yaml_config: Dict[str, Any]) -> None:
    """
    Apply YAML configuration values to Config object.

    Unknown keys are ignored. Numeric settings are converted to the
    type of their default, so quoted numbers are accepted.

    Raises:
        ConfigError: If a section is not a mapping or a value has the wrong type
    """
    for key in ("app_name", "version", "debug", "data_dir", "log_dir"):
        if key in yaml_config:
            setattr(config, key, yaml_config[key])

    for section in ("matcher", "web"):
        values = yaml_config.get(section) or {}
        if not isinstance(values, dict):
            raise ConfigError(f"Config section '{section}' must be a mapping")

        section_obj = getattr(config, section)
        for key, value in values.items():
            if hasattr(section_obj, key):
                setattr(section_obj, key, _convert_value(section, key, value, getattr(section_obj, key)))


def _convert_value(section: str, key: str, value: Any, default: Any) -> Any:
    """Convert a YAML value to the type of the setting's default."""
    if isinstance(default, bool) or not isinstance(default, (int, float)):
        return value

    if isinstance(value, bool):
        raise ConfigError(f"Invalid value for {section}.{key}: expected a number", {"value": value})

    try:
        return type(default)(value)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Invalid value for {section}.{key}: {e}", {"value": value})


def _apply_env_overrides(config: Config) -> None:
    """
    Apply environment variable overrides to Config object.

    Environment variables follow the pattern: RESPONDER_SECTION_KEY
    For example: RESPONDER_MATCHER_MIN_THRESHOLD, RESPONDER_WEB_PORT
    """
    env_mappings = {
        "RESPONDER_DEBUG": (None, "debug", bool),

        # Matcher settings
        "RESPONDER_MATCHER_PATTERNS_PATH": ("matcher", "patterns_path"),
        "RESPONDER_MATCHER_MIN_THRESHOLD": ("matcher", "min_threshold", float),
        "RESPONDER_MATCHER_KEYWORD_WEIGHT": ("matcher", "keyword_weight", float),

        # Web settings
        "RESPONDER_WEB_HOST": ("web", "host"),
        "RESPONDER_WEB_PORT": ("web", "port", int),
        "RESPONDER_WEB_DEBUG": ("web", "debug", bool),
    }

    for env_var, mapping in env_mappings.items():
        value = os.environ.get(env_var)
        if value is None:
            continue

        section, key = mapping[0], mapping[1]
        converter = mapping[2] if len(mapping) > 2 else str
        target = getattr(config, section) if section else config

        if converter == bool:
            converted = value.lower() in ("true", "1", "yes", "on")
        else:
            try:
                converted = converter(value)
            except ValueError as e:
                raise ConfigError(f"Invalid value for {env_var}: {e}", {"value": value})

        setattr(target, key, converted)


def save_config(config: Config, config_path: Optional[str] = None) -> None:
    """
    Save configuration to YAML file.

    Args:
        config: Config object to save
        config_path: Path to save configuration (optional)

    Raises:
        ConfigError: If configuration cannot be saved
    """
    if config_path:
        yaml_path = Path(config_path)
    else:
        yaml_path = Path(config.config_dir) / "config.yaml"

    yaml_path.parent.mkdir(parents=True, exist_ok=True)

    try:
        with open(yaml_path, "w", encoding="utf-8") as f:
            yaml.dump(config.to_dict(), f, default_flow_style=False, sort_keys=False)
    except OSError as e:
        raise ConfigError(f"Failed to save config file: {e}", {"path": str(yaml_path)})


def create_default_config(
    config_dir: Optional[str] = None,
    config_path: Optional[str] = None
) -> Config:
    """
    Create a default configuration file with sensible defaults.

    Args:
        config_dir: Directory to create configuration in (optional)
        config_path: Configuration file to write; its directory is used
            when config_dir is not given (default: <config_dir>/config.yaml)

    Returns:
        Config object with default values
    """
    config = Config()

    if config_path and not config_dir:
        config_dir = str(Path(config_path).parent)

    if config_dir:
        config.config_dir = config_dir
        config.data_dir = str(Path(config_dir) / "data")
        config.log_dir = str(Path(config_dir) / "logs")
    else:
        config.config_dir = str(get_default_config_dir())
        config.data_dir = str(get_default_data_dir())
        config.log_dir = str(Path(config.data_dir) / "logs")

    Path(config.config_dir).mkdir(parents=True, exist_ok=True)
    Path(config.data_dir).mkdir(parents=True, exist_ok=True)
    Path(config.log_dir).mkdir(parents=True, exist_ok=True)

    save_config(config, config_path)

    return config
