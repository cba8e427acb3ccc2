"""
BattleReport Core - Foundation modules for round narratives.

This module contains the fundamental components:
- constants: Event/highlight kinds, streak tiers and default thresholds
- config: Application configuration management
- errors: Package exceptions
- utils: Logging setup, timing and formatting helpers
- parser: Round report payload parsing (import directly, it depends on analysis.models)
"""

from battlereport.core.config import (
    BattleReportConfig,
    ExportConfig,
    HighlightConfig,
    LoggingConfig,
    NarrativeConfig,
    get_config,
    load_config,
)
from battlereport.core.constants import (
    STREAK_TIERS,
    SYSTEM_PARTICIPANT,
    EventType,
    HighlightType,
)
from battlereport.core.errors import SnapshotValidationError

__all__ = [
    "BattleReportConfig",
    "ExportConfig",
    "HighlightConfig",
    "LoggingConfig",
    "NarrativeConfig",
    "get_config",
    "load_config",
    "STREAK_TIERS",
    "SYSTEM_PARTICIPANT",
    "EventType",
    "HighlightType",
    "SnapshotValidationError",
]
