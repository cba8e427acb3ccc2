"""
Configuration Management for BattleReport

Provides configuration loading from multiple sources:
- Default values
- Configuration files (YAML, TOML, JSON)
- Environment variables

Configuration precedence (highest to lowest):
1. Environment variables (BATTLEREPORT_*)
2. Configuration file
3. Default values
"""

import json
import logging
import os
import tomllib
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any

import yaml

from battlereport.core.constants import (
    DEFAULT_KILL_POINTS,
    DOMINATION_THRESHOLD,
    KILLING_SPREE_MIN,
    LEAD_GAP_THRESHOLD,
    OBJECTIVE_SCORE_THRESHOLD,
    STATUS_INTERVAL,
    HighlightType,
)

logger = logging.getLogger(__name__)


# ============================================================================
# Configuration Dataclasses
# ============================================================================


@dataclass
class NarrativeConfig:
    """Thresholds and policies for event inference."""

    # Lead change must beat the runner-up by more than this many points
    lead_gap_threshold: int = LEAD_GAP_THRESHOLD

    # Emit the "X leads with N points" status line every N snapshots (0 = never)
    status_interval: int = STATUS_INTERVAL

    # Non-kill score gain above this is reported as an objective
    objective_score_threshold: int = OBJECTIVE_SCORE_THRESHOLD

    # Points shown on a kill when the score delta cannot be split
    default_kill_points: int = DEFAULT_KILL_POINTS

    # Streak length that ends in a spree_ended event / counts as longest streak
    spree_min_streak: int = KILLING_SPREE_MIN

    # Raise SnapshotValidationError on anomalies instead of clamping them
    strict_validation: bool = False

    # Pair unambiguous kill/death deltas into domination/revenge events
    infer_rivalries: bool = False
    domination_threshold: int = DOMINATION_THRESHOLD


@dataclass
class HighlightConfig:
    """Which highlight kinds make it into the report."""

    enabled_types: list[str] = field(default_factory=lambda: [t.value for t in HighlightType])
    include_mvp: bool = True


@dataclass
class ExportConfig:
    """Configuration for report export."""

    default_format: str = "json"
    json_indent: int = 2
    csv_delimiter: str = ","
    include_metadata: bool = True


@dataclass
class LoggingConfig:
    """Configuration for logging."""

    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    file: str | None = None
    file_max_bytes: int = 10 * 1024 * 1024  # 10MB
    file_backup_count: int = 5


@dataclass
class BattleReportConfig:
    """Main configuration container."""

    narrative: NarrativeConfig = field(default_factory=NarrativeConfig)
    highlights: HighlightConfig = field(default_factory=HighlightConfig)
    export: ExportConfig = field(default_factory=ExportConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    # Version of the config format
    config_version: str = "1.0"


# ============================================================================
# Configuration Loading
# ============================================================================


def get_default_config_paths() -> list[Path]:
    """Config files searched, in order, when none is given explicitly."""
    cwd = Path.cwd()
    return [
        cwd / "battlereport.yaml",
        cwd / "battlereport.toml",
        cwd / "battlereport.json",
        Path.home() / ".config" / "battlereport" / "config.yaml",
    ]


def _load_yaml(path: Path) -> dict[str, Any]:
    with open(path) as f:
        return yaml.safe_load(f) or {}


def _load_toml(path: Path) -> dict[str, Any]:
    with open(path, "rb") as f:
        return tomllib.load(f)


def _load_json(path: Path) -> dict[str, Any]:
    with open(path) as f:
        return json.load(f)


_FILE_LOADERS = {
    ".yaml": _load_yaml,
    ".yml": _load_yaml,
    ".toml": _load_toml,
    ".json": _load_json,
}


def load_config_file(path: Path) -> dict[str, Any]:
    """Load configuration from a file, detecting format from extension."""
    if not path.exists():
        return {}

    loader = _FILE_LOADERS.get(path.suffix.lower())
    if loader is None:
        logger.warning(f"Unknown config file format: {path.suffix}")
        return {}
    return loader(path)


# Environment variable -> (section, field)
ENV_OVERRIDES: dict[str, tuple[str, str]] = {
    "BATTLEREPORT_LOG_LEVEL": ("logging", "level"),
    "BATTLEREPORT_LOG_FILE": ("logging", "file"),
    "BATTLEREPORT_EXPORT_FORMAT": ("export", "default_format"),
    "BATTLEREPORT_LEAD_GAP": ("narrative", "lead_gap_threshold"),
    "BATTLEREPORT_STATUS_INTERVAL": ("narrative", "status_interval"),
    "BATTLEREPORT_OBJECTIVE_THRESHOLD": ("narrative", "objective_score_threshold"),
    "BATTLEREPORT_STRICT": ("narrative", "strict_validation"),
    "BATTLEREPORT_INFER_RIVALRIES": ("narrative", "infer_rivalries"),
}


def load_env_config() -> dict[str, Any]:
    """
    Read BATTLEREPORT_* overrides.

    Values are converted to the type of the field's default, so
    ``BATTLEREPORT_STRICT=yes`` is a bool and ``BATTLEREPORT_LEAD_GAP=20`` an
    int. Values that do not convert are skipped with a warning.
    """
    defaults = BattleReportConfig()
    config: dict[str, Any] = {}

    for env_var, (section, key) in ENV_OVERRIDES.items():
        raw = os.environ.get(env_var)
        if raw is None:
            continue

        default = getattr(getattr(defaults, section), key)
        if isinstance(default, bool):
            value: Any = raw.strip().lower() in ("1", "true", "yes", "on")
        elif isinstance(default, int):
            try:
                value = int(raw)
            except ValueError:
                logger.warning(f"Ignoring {env_var}={raw!r}: expected an integer")
                continue
        else:
            value = raw

        config.setdefault(section, {})[key] = value

    return config


def merge_configs(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge two configuration dictionaries."""
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = merge_configs(result[key], value)
        else:
            result[key] = value

    return result


def dict_to_config(data: dict[str, Any]) -> BattleReportConfig:
    """Convert a dictionary to BattleReportConfig, ignoring unknown keys."""
    config = BattleReportConfig()

    for section in ("narrative", "highlights", "export", "logging"):
        if section not in data:
            continue
        target = getattr(config, section)
        for key, value in data[section].items():
            if hasattr(target, key):
                setattr(target, key, value)
            else:
                logger.warning(f"Ignoring unknown config key: {section}.{key}")

    if "config_version" in data:
        config.config_version = str(data["config_version"])

    return config


def load_config(config_file: Path | None = None, include_env: bool = True) -> BattleReportConfig:
    """
    Load configuration from all sources.

    Args:
        config_file: Explicit path to a config file (optional)
        include_env: Whether to include environment variables

    Returns:
        Merged BattleReportConfig
    """
    config_data: dict[str, Any] = {}

    # Try to find and load a config file
    if config_file:
        config_data = load_config_file(config_file)
        logger.info(f"Loaded config from: {config_file}")
    else:
        for path in get_default_config_paths():
            if path.exists():
                config_data = load_config_file(path)
                logger.info(f"Loaded config from: {path}")
                break

    # Merge environment variables
    if include_env:
        env_config = load_env_config()
        config_data = merge_configs(config_data, env_config)

    return dict_to_config(config_data)


# ============================================================================
# Configuration Saving
# ============================================================================


def save_config(config: BattleReportConfig, path: Path) -> None:
    """
    Save configuration to a file.

    Args:
        config: Configuration to save
        path: Path to save to (.yaml/.yml or .json)
    """
    data = config_to_dict(config)
    suffix = path.suffix.lower()

    if suffix in (".yaml", ".yml"):
        with open(path, "w") as f:
            yaml.dump(data, f, default_flow_style=False, sort_keys=False)

    elif suffix == ".json":
        with open(path, "w") as f:
            json.dump(data, f, indent=2)

    else:
        raise ValueError(f"Unknown config format: {suffix}")

    logger.info(f"Saved config to: {path}")


def config_to_dict(config: BattleReportConfig) -> dict[str, Any]:
    """Convert BattleReportConfig to a dictionary."""
    return asdict(config)


# ============================================================================
# Global Configuration
# ============================================================================

_global_config: BattleReportConfig | None = None


def get_config() -> BattleReportConfig:
    """Get the global configuration, loading it if necessary."""
    global _global_config

    if _global_config is None:
        _global_config = load_config()

    return _global_config


def set_config(config: BattleReportConfig) -> None:
    """Set the global configuration."""
    global _global_config
    _global_config = config


def reset_config() -> None:
    """Reset the global configuration to defaults."""
    global _global_config
    _global_config = None


# ============================================================================
# Configuration Templates
# ============================================================================

DEFAULT_CONFIG_YAML = """# BattleReport Configuration

# Event inference settings
narrative:
  lead_gap_threshold: 50
  status_interval: 5         # 0 disables the periodic status line
  objective_score_threshold: 50
  default_kill_points: 10
  spree_min_streak: 3
  strict_validation: false   # raise on negative deltas / unordered snapshots
  infer_rivalries: false     # domination/revenge from unambiguous kill pairs
  domination_threshold: 3

# Highlight selection
highlights:
  include_mvp: true
  # enabled_types: [first_blood, killing_spree, lead_change, domination, mvp]

# Export settings
export:
  default_format: json
  json_indent: 2
  csv_delimiter: ","
  include_metadata: true

# Logging settings
logging:
  level: INFO
  # file: /path/to/battlereport.log
"""


def generate_default_config(path: Path) -> None:
    """Generate a default configuration file."""
    suffix = path.suffix.lower()

    if suffix in (".yaml", ".yml"):
        path.write_text(DEFAULT_CONFIG_YAML)
    else:
        config = BattleReportConfig()
        save_config(config, path)

    logger.info(f"Generated default config at: {path}")
