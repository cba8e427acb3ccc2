"""
Event Synthesis for Round Narratives

Walks a round's leaderboard snapshots once, in order, and infers discrete
battle events from the differences between consecutive snapshots:

  - spawn: participant appears without a previous entry
  - first_blood: the first kill of the round
  - killing_spree: a streak reaching a new tier (3/5/7/10/15)
  - kill / death: one event per unit of the kill/death delta
  - spree_ended: a death breaking a streak of 3 or more
  - objective: a large non-kill score gain
  - lead_change: the top team changing by more than the lead gap
  - system: periodic "X leads" status lines
  - domination / revenge: optional, from unambiguous kill/death pairs

Per participant the rules run in a fixed order (first blood before the
kill it belongs to, streak tier before the kills, spree end before the
deaths). Events come back stable-sorted by timestamp.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from datetime import datetime

from battlereport.analysis.models import (
    BattleEvent,
    DeathEvent,
    DominationEvent,
    Entry,
    FirstBloodEvent,
    FirstBloodRecord,
    Highlight,
    KillEvent,
    KillingSpreeEvent,
    LeadChangeEvent,
    ObjectiveEvent,
    RevengeEvent,
    Snapshot,
    SpawnEvent,
    SpreeEndedEvent,
    SystemEvent,
)
from battlereport.analysis.participant_state import ParticipantStateTracker, StateDelta
from battlereport.analysis.team_state import TeamAggregator
from battlereport.core.config import NarrativeConfig
from battlereport.core.constants import STREAK_TIERS, EventType, HighlightType
from battlereport.core.errors import SnapshotValidationError

logger = logging.getLogger(__name__)


def streak_tier(streak: int) -> str | None:
    """Name of the highest streak tier reached by ``streak``, if any."""
    for threshold, name in STREAK_TIERS:
        if streak >= threshold:
            return name
    return None


@dataclass
class SynthesisResult:
    """Everything one walk produced, including the terminal tracker state."""

    tracker: ParticipantStateTracker
    teams: TeamAggregator
    events: list[BattleEvent] = field(default_factory=list)
    highlights: list[Highlight] = field(default_factory=list)
    first_blood: FirstBloodRecord | None = None
    warnings: list[str] = field(default_factory=list)


class EventSynthesizer:
    """
    Infers battle events from a snapshot sequence.

    The synthesizer holds configuration only; every call to synthesize()
    builds its own trackers, so one instance can serve many rounds.
    """

    def __init__(self, config: NarrativeConfig | None = None):
        self.config = config or NarrativeConfig()

    def synthesize(self, snapshots: Sequence[Snapshot]) -> SynthesisResult:
        """
        Walk the snapshots and emit events.

        Fewer than two snapshots carry no deltas, so nothing is emitted.
        The first snapshot is walked without a predecessor: every entry in it
        is a first sighting stamped at the round's first timestamp.
        """
        result = SynthesisResult(
            tracker=ParticipantStateTracker(),
            teams=TeamAggregator(self.config.lead_gap_threshold),
        )
        if len(snapshots) < 2:
            return result

        previous: dict[str, Entry] = {}
        previous_ts: datetime | None = None

        for index, snapshot in enumerate(snapshots):
            timestamp = snapshot.timestamp
            if previous_ts is not None and timestamp < previous_ts:
                self._anomaly(
                    result,
                    f"Snapshot {index} at {timestamp.isoformat()} is earlier than "
                    f"the snapshot before it ({previous_ts.isoformat()})",
                )

            current = self._index_entries(result, index, snapshot)

            self._detect_lead_change(result, timestamp, current.values())

            interval: list[tuple[Entry, StateDelta]] = []
            walked: set[str] = set()
            for entry in snapshot.entries:
                if current[entry.participant_id] is not entry or entry.participant_id in walked:
                    continue  # superseded duplicate
                walked.add(entry.participant_id)

                delta = result.tracker.observe(previous.get(entry.participant_id), entry)
                if delta.clamped:
                    self._anomaly(
                        result,
                        f"Negative {'/'.join(delta.clamped)} delta for "
                        f"{entry.participant_id} at {timestamp.isoformat()}; clamped to 0",
                    )

                if delta.spawned:
                    result.events.append(
                        SpawnEvent(
                            timestamp=timestamp,
                            participant=entry.participant_id,
                            message=f"{entry.participant_id} joined the battle",
                        )
                    )
                    continue

                self._apply_rules(result, entry, delta, timestamp)
                interval.append((entry, delta))

            if self.config.infer_rivalries:
                self._infer_rivalry(result, interval, timestamp)

            self._emit_status(result, index, timestamp, list(current.values()))

            previous = current
            previous_ts = timestamp

        result.events.sort(key=lambda e: e.timestamp)
        logger.debug(
            f"Synthesized {len(result.events)} events for "
            f"{len(result.tracker)} participants over {len(snapshots)} snapshots"
        )
        return result

    # ------------------------------------------------------------------
    # Per-participant rules
    # ------------------------------------------------------------------

    def _apply_rules(
        self,
        result: SynthesisResult,
        entry: Entry,
        delta: StateDelta,
        timestamp: datetime,
    ) -> None:
        name = entry.participant_id
        events = result.events

        if delta.kills > 0:
            if result.first_blood is None:
                result.first_blood = FirstBloodRecord(player_name=name, timestamp=timestamp)
                events.append(
                    FirstBloodEvent(
                        timestamp=timestamp,
                        participant=name,
                        message=f"FIRST BLOOD! {name} draws first blood!",
                    )
                )
                result.highlights.append(
                    Highlight(
                        type=HighlightType.FIRST_BLOOD,
                        timestamp=timestamp,
                        participant=name,
                        description=f"{name} draws first blood",
                    )
                )

            tier = streak_tier(delta.streak_after_kills)
            if tier is not None and tier != streak_tier(delta.streak_before):
                streak = delta.streak_after_kills
                events.append(
                    KillingSpreeEvent(
                        timestamp=timestamp,
                        participant=name,
                        message=f"{tier}! {name} is on a {streak} kill streak!",
                        value=streak,
                        tier=tier,
                    )
                )
                result.highlights.append(
                    Highlight(
                        type=HighlightType.KILLING_SPREE,
                        timestamp=timestamp,
                        participant=name,
                        description=f"{tier} - {streak} kill streak",
                        value=streak,
                    )
                )

            divisor = delta.kills + delta.deaths
            points = delta.score // divisor if divisor else self.config.default_kill_points
            for _ in range(delta.kills):
                events.append(
                    KillEvent(
                        timestamp=timestamp,
                        participant=name,
                        message=f"{name} eliminated an enemy (+{points} pts)",
                        value=points,
                    )
                )

        if delta.deaths > 0:
            if delta.broken_streak >= self.config.spree_min_streak:
                events.append(
                    SpreeEndedEvent(
                        timestamp=timestamp,
                        participant=name,
                        message=f"{name}'s {delta.broken_streak} kill streak has ended!",
                        value=delta.broken_streak,
                    )
                )
            for _ in range(delta.deaths):
                events.append(
                    DeathEvent(
                        timestamp=timestamp,
                        participant=name,
                        message=f"{name} was eliminated",
                    )
                )

        if delta.score > self.config.objective_score_threshold and delta.kills == 0:
            events.append(
                ObjectiveEvent(
                    timestamp=timestamp,
                    participant=name,
                    message=f"{name} completed an objective (+{delta.score} pts)",
                    value=delta.score,
                )
            )

    # ------------------------------------------------------------------
    # Per-snapshot rules
    # ------------------------------------------------------------------

    def _detect_lead_change(
        self, result: SynthesisResult, timestamp: datetime, entries: Iterable[Entry]
    ) -> None:
        change = result.teams.observe(entries)
        if change is None:
            return

        result.events.append(
            LeadChangeEvent(
                timestamp=timestamp,
                participant=change.team,
                message=f"{change.team} takes the lead!",
                gap=change.gap,
            )
        )
        result.highlights.append(
            Highlight(
                type=HighlightType.LEAD_CHANGE,
                timestamp=timestamp,
                participant=change.team,
                description=f"{change.team} takes the lead with {change.gap} point advantage",
                value=change.gap,
            )
        )

    def _emit_status(
        self, result: SynthesisResult, index: int, timestamp: datetime, entries: list[Entry]
    ) -> None:
        interval = self.config.status_interval
        if interval <= 0 or index == 0 or index % interval != 0 or not entries:
            return

        # max() keeps the first entry among equal scores
        leader = max(entries, key=lambda e: e.score)
        result.events.append(
            SystemEvent(
                timestamp=timestamp,
                message=(
                    f"{leader.participant_id} leads with {leader.score} points "
                    f"({leader.kills}/{leader.deaths})"
                ),
            )
        )

    def _infer_rivalry(
        self,
        result: SynthesisResult,
        interval: list[tuple[Entry, StateDelta]],
        timestamp: datetime,
    ) -> None:
        """Attribute the interval's kill when exactly one kill and one death happened."""
        killers = [(e, d) for e, d in interval if d.kills > 0]
        victims = [(e, d) for e, d in interval if d.deaths > 0]
        if len(killers) != 1 or len(victims) != 1:
            return
        (killer, kd), (victim, vd) = killers[0], victims[0]
        if kd.kills != 1 or vd.deaths != 1:
            return
        if killer.participant_id == victim.participant_id or killer.team_label == victim.team_label:
            return

        unanswered, is_revenge = result.tracker.attribute(
            killer.participant_id, victim.participant_id
        )
        if is_revenge:
            result.events.append(
                RevengeEvent(
                    timestamp=timestamp,
                    participant=killer.participant_id,
                    target=victim.participant_id,
                    message=f"{killer.participant_id} got revenge on {victim.participant_id}!",
                )
            )
        if unanswered == self.config.domination_threshold:
            result.events.append(
                DominationEvent(
                    timestamp=timestamp,
                    participant=killer.participant_id,
                    target=victim.participant_id,
                    message=f"{killer.participant_id} is dominating {victim.participant_id}!",
                )
            )
            result.highlights.append(
                Highlight(
                    type=HighlightType.DOMINATION,
                    timestamp=timestamp,
                    participant=killer.participant_id,
                    description=(
                        f"{killer.participant_id} dominates {victim.participant_id} "
                        f"with {unanswered} unanswered kills"
                    ),
                    value=unanswered,
                )
            )

    # ------------------------------------------------------------------
    # Input hygiene
    # ------------------------------------------------------------------

    def _index_entries(
        self, result: SynthesisResult, index: int, snapshot: Snapshot
    ) -> dict[str, Entry]:
        indexed: dict[str, Entry] = {}
        for entry in snapshot.entries:
            if entry.participant_id in indexed:
                self._anomaly(
                    result,
                    f"Duplicate entry for {entry.participant_id} in snapshot {index}; "
                    f"keeping the last one",
                )
            indexed[entry.participant_id] = entry
        return indexed

    def _anomaly(self, result: SynthesisResult, message: str) -> None:
        if self.config.strict_validation:
            raise SnapshotValidationError(message)
        logger.warning(message)
        result.warnings.append(message)


def filter_events(
    events: Iterable[BattleEvent],
    *,
    show_join_events: bool = True,
    show_death_events: bool = True,
    highlights_only: bool = False,
) -> list[BattleEvent]:
    """Narrow an event feed to the kinds a viewer asked to see."""
    filtered = []
    for event in events:
        if highlights_only and not event.is_highlight:
            continue
        if not show_join_events and event.type is EventType.SPAWN:
            continue
        if not show_death_events and event.type is EventType.DEATH:
            continue
        filtered.append(event)
    return filtered
