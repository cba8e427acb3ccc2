"""
BattleReport Analysis - Narrative inference over leaderboard snapshots.

This module contains:
- models: Input records, events, highlights and the round summary
- participant_state: Per-participant deltas, streaks and attribution
- team_state: Team score aggregation and lead tracking
- events: The event synthesizer (one forward walk)
- highlights: Highlight selection including the MVP
- summary: Round summary calculation
"""

from battlereport.analysis.events import EventSynthesizer, filter_events, streak_tier
from battlereport.analysis.highlights import HighlightSelector
from battlereport.analysis.models import (
    BattleEvent,
    BattleReport,
    Entry,
    Highlight,
    RoundMeta,
    RoundSummary,
    Snapshot,
)
from battlereport.analysis.participant_state import ParticipantStateTracker, StateDelta
from battlereport.analysis.summary import SummaryCalculator
from battlereport.analysis.team_state import TeamAggregator

__all__: list[str] = [
    "BattleEvent",
    "BattleReport",
    "Entry",
    "Highlight",
    "RoundMeta",
    "RoundSummary",
    "Snapshot",
    "EventSynthesizer",
    "filter_events",
    "streak_tier",
    "HighlightSelector",
    "ParticipantStateTracker",
    "StateDelta",
    "SummaryCalculator",
    "TeamAggregator",
]
