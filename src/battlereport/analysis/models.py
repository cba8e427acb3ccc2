"""
Data Models for Round Narratives

Input records (Entry, Snapshot, RoundMeta), the per-run ParticipantState,
and the three report outputs: battle events, highlights and the round
summary.

Battle events form a closed family: every EventType has exactly one
dataclass below, and only the variants that carry a payload declare it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, ClassVar

from battlereport.core.constants import SYSTEM_PARTICIPANT, EventType, HighlightType
from battlereport.core.utils import format_duration

# =============================================================================
# Input Records
# =============================================================================


@dataclass(frozen=True)
class Entry:
    """One participant's cumulative stats in a leaderboard snapshot."""

    participant_id: str
    score: int
    kills: int
    deaths: int
    team_label: str
    rank: int | None = None
    ping: int | None = None


@dataclass(frozen=True)
class Snapshot:
    """All participants' cumulative stats at one instant of the round."""

    timestamp: datetime
    entries: tuple[Entry, ...] = ()

    def __post_init__(self) -> None:
        # Accept lists from callers but keep the record immutable
        if not isinstance(self.entries, tuple):
            object.__setattr__(self, "entries", tuple(self.entries))

    def unique_entries(self) -> tuple[Entry, ...]:
        """One entry per participant: the last one listed, in first-listed order."""
        latest: dict[str, Entry] = {}
        for entry in self.entries:
            latest[entry.participant_id] = entry
        return tuple(latest.values())


@dataclass(frozen=True)
class RoundMeta:
    """Round-level metadata supplied alongside the snapshots."""

    map_name: str
    start_time: datetime
    end_time: datetime | None = None
    game_type: str | None = None


# =============================================================================
# Per-run State
# =============================================================================


@dataclass
class ParticipantState:
    """Mutable tracking state for one participant during one report build."""

    cumulative_kills: int = 0
    cumulative_deaths: int = 0
    cumulative_score: int = 0
    current_streak: int = 0
    best_streak: int = 0
    # victim -> kills on that victim not yet answered by a revenge
    kill_attribution: dict[str, int] = field(default_factory=dict)
    # killer -> deaths to that killer not yet avenged
    death_attribution: dict[str, int] = field(default_factory=dict)


# =============================================================================
# Battle Events
# =============================================================================


@dataclass(frozen=True, kw_only=True)
class BattleEvent:
    """Base of every inferred event; use the concrete variants below."""

    type: ClassVar[EventType]

    timestamp: datetime
    participant: str
    message: str
    is_highlight: bool = False

    def to_dict(self) -> dict[str, Any]:
        """Serialize for the output contract (payload keys only when present)."""
        data: dict[str, Any] = {
            "timestamp": self.timestamp.isoformat(),
            "type": self.type.value,
            "participant": self.participant,
            "message": self.message,
            "is_highlight": self.is_highlight,
        }
        data.update(self._payload())
        return data

    def _payload(self) -> dict[str, Any]:
        return {}


@dataclass(frozen=True, kw_only=True)
class KillEvent(BattleEvent):
    type: ClassVar[EventType] = EventType.KILL
    value: int  # estimated points for this kill

    def _payload(self) -> dict[str, Any]:
        return {"value": self.value}


@dataclass(frozen=True, kw_only=True)
class DeathEvent(BattleEvent):
    type: ClassVar[EventType] = EventType.DEATH


@dataclass(frozen=True, kw_only=True)
class ObjectiveEvent(BattleEvent):
    type: ClassVar[EventType] = EventType.OBJECTIVE
    value: int  # non-kill score gained in the interval

    def _payload(self) -> dict[str, Any]:
        return {"value": self.value}


@dataclass(frozen=True, kw_only=True)
class SpawnEvent(BattleEvent):
    type: ClassVar[EventType] = EventType.SPAWN


@dataclass(frozen=True, kw_only=True)
class FirstBloodEvent(BattleEvent):
    type: ClassVar[EventType] = EventType.FIRST_BLOOD
    is_highlight: bool = True


@dataclass(frozen=True, kw_only=True)
class KillingSpreeEvent(BattleEvent):
    type: ClassVar[EventType] = EventType.KILLING_SPREE
    is_highlight: bool = True
    value: int  # streak length when the tier was reached
    tier: str

    def _payload(self) -> dict[str, Any]:
        return {"value": self.value, "tier": self.tier}


@dataclass(frozen=True, kw_only=True)
class SpreeEndedEvent(BattleEvent):
    type: ClassVar[EventType] = EventType.SPREE_ENDED
    value: int  # length of the broken streak

    def _payload(self) -> dict[str, Any]:
        return {"value": self.value}


@dataclass(frozen=True, kw_only=True)
class LeadChangeEvent(BattleEvent):
    type: ClassVar[EventType] = EventType.LEAD_CHANGE
    is_highlight: bool = True
    gap: int

    def _payload(self) -> dict[str, Any]:
        return {"gap": self.gap}


@dataclass(frozen=True, kw_only=True)
class DominationEvent(BattleEvent):
    type: ClassVar[EventType] = EventType.DOMINATION
    is_highlight: bool = True
    target: str

    def _payload(self) -> dict[str, Any]:
        return {"target": self.target}


@dataclass(frozen=True, kw_only=True)
class RevengeEvent(BattleEvent):
    type: ClassVar[EventType] = EventType.REVENGE
    target: str

    def _payload(self) -> dict[str, Any]:
        return {"target": self.target}


@dataclass(frozen=True, kw_only=True)
class SystemEvent(BattleEvent):
    type: ClassVar[EventType] = EventType.SYSTEM
    participant: str = SYSTEM_PARTICIPANT


# =============================================================================
# Highlights and Summary
# =============================================================================


@dataclass(frozen=True)
class Highlight:
    """A notable round moment."""

    type: HighlightType
    timestamp: datetime
    participant: str
    description: str
    value: int | float | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type.value,
            "timestamp": self.timestamp.isoformat(),
            "participant": self.participant,
            "description": self.description,
            "value": self.value,
        }


@dataclass(frozen=True)
class MvpRecord:
    player_name: str
    score: int
    kills: int
    deaths: int
    kd: float


@dataclass(frozen=True)
class StreakRecord:
    player_name: str
    streak: int


@dataclass(frozen=True)
class FirstBloodRecord:
    player_name: str
    timestamp: datetime


@dataclass(frozen=True)
class RoundSummary:
    """Aggregate view of a finished round."""

    duration: timedelta = timedelta(0)
    total_kills: int = 0
    total_deaths: int = 0
    participant_count: int = 0
    average_kd: float = 0.0
    mvp: MvpRecord | None = None
    longest_streak: StreakRecord | None = None
    first_blood: FirstBloodRecord | None = None
    lead_change_count: int = 0
    closest_gap: int = 0

    @property
    def duration_label(self) -> str:
        return format_duration(self.duration)

    @property
    def duration_ms(self) -> int:
        return int(self.duration.total_seconds() * 1000)

    def to_dict(self) -> dict[str, Any]:
        return {
            "duration": self.duration_label,
            "duration_ms": self.duration_ms,
            "total_kills": self.total_kills,
            "total_deaths": self.total_deaths,
            "participant_count": self.participant_count,
            "average_kd": self.average_kd,
            "lead_change_count": self.lead_change_count,
            "closest_gap": self.closest_gap,
            "mvp": (
                {
                    "player_name": self.mvp.player_name,
                    "score": self.mvp.score,
                    "kills": self.mvp.kills,
                    "deaths": self.mvp.deaths,
                    "kd": self.mvp.kd,
                }
                if self.mvp
                else None
            ),
            "longest_streak": (
                {
                    "player_name": self.longest_streak.player_name,
                    "streak": self.longest_streak.streak,
                }
                if self.longest_streak
                else None
            ),
            "first_blood": (
                {
                    "player_name": self.first_blood.player_name,
                    "timestamp": self.first_blood.timestamp.isoformat(),
                }
                if self.first_blood
                else None
            ),
        }


@dataclass(frozen=True)
class BattleReport:
    """The assembled narrative of one round."""

    events: list[BattleEvent] = field(default_factory=list)
    highlights: list[Highlight] = field(default_factory=list)
    summary: RoundSummary = field(default_factory=RoundSummary)
    # Input anomalies recovered while building (lenient mode only)
    warnings: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "events": [e.to_dict() for e in self.events],
            "highlights": [h.to_dict() for h in self.highlights],
            "summary": self.summary.to_dict(),
            "warnings": list(self.warnings),
        }
