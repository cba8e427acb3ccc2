"""
Participant State Tracking

Turns pairs of consecutive leaderboard entries for the same participant into
sanitized deltas while keeping cumulative counters, the kill streak and
kill/death attribution for that participant.

Tracking is pure bookkeeping: a counter that goes backwards is treated as an
upstream anomaly, clamped to zero and reported on the delta, never raised.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from battlereport.analysis.models import Entry, ParticipantState

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StateDelta:
    """What changed for one participant between two snapshots."""

    participant: str
    spawned: bool = False
    kills: int = 0
    deaths: int = 0
    score: int = 0
    streak_before: int = 0  # streak before this interval's kills
    streak_after_kills: int = 0  # streak after kills, before any death reset
    broken_streak: int = 0  # streak lost to a death in this interval
    clamped: tuple[str, ...] = ()  # counters that went backwards


class ParticipantStateTracker:
    """
    Owns the ParticipantState of every participant seen during one build.

    States are created on first sighting and iterate in first-tracked order.
    """

    def __init__(self) -> None:
        self._states: dict[str, ParticipantState] = {}

    @property
    def states(self) -> dict[str, ParticipantState]:
        return self._states

    def get(self, participant: str) -> ParticipantState | None:
        return self._states.get(participant)

    def __contains__(self, participant: str) -> bool:
        return participant in self._states

    def __len__(self) -> int:
        return len(self._states)

    def observe(self, prev_entry: Entry | None, curr_entry: Entry) -> StateDelta:
        """
        Fold one interval into the participant's state.

        Args:
            prev_entry: The participant's entry in the previous snapshot, or
                None when they were not present there (spawn)
            curr_entry: The participant's entry in the current snapshot

        Returns:
            StateDelta with clamped kill/death/score deltas and streak values
        """
        name = curr_entry.participant_id
        state = self._states.get(name)
        if state is None:
            state = ParticipantState()
            self._states[name] = state

        state.cumulative_kills = curr_entry.kills
        state.cumulative_deaths = curr_entry.deaths
        state.cumulative_score = curr_entry.score

        if prev_entry is None:
            return StateDelta(
                participant=name,
                spawned=True,
                streak_before=state.current_streak,
                streak_after_kills=state.current_streak,
            )

        clamped: list[str] = []
        kills = self._delta("kills", prev_entry.kills, curr_entry.kills, clamped)
        deaths = self._delta("deaths", prev_entry.deaths, curr_entry.deaths, clamped)
        score = self._delta("score", prev_entry.score, curr_entry.score, clamped)
        if clamped:
            logger.debug(f"Clamped negative {', '.join(clamped)} delta for {name}")

        streak_before = state.current_streak
        if kills > 0:
            state.current_streak += kills
            state.best_streak = max(state.best_streak, state.current_streak)
        streak_after_kills = state.current_streak

        broken_streak = 0
        if deaths > 0:
            broken_streak = state.current_streak
            state.current_streak = 0

        return StateDelta(
            participant=name,
            kills=kills,
            deaths=deaths,
            score=score,
            streak_before=streak_before,
            streak_after_kills=streak_after_kills,
            broken_streak=broken_streak,
            clamped=tuple(clamped),
        )

    def attribute(self, killer: str, victim: str) -> tuple[int, bool]:
        """
        Record one kill of ``victim`` by ``killer``.

        Returns:
            (unanswered kills of killer on victim, whether this kill avenged
            earlier deaths of the killer to the victim)
        """
        killer_state = self._states.setdefault(killer, ParticipantState())
        victim_state = self._states.setdefault(victim, ParticipantState())

        is_revenge = killer_state.death_attribution.pop(victim, 0) > 0
        if is_revenge:
            victim_state.kill_attribution.pop(killer, None)

        killer_state.kill_attribution[victim] = killer_state.kill_attribution.get(victim, 0) + 1
        victim_state.death_attribution[killer] = victim_state.death_attribution.get(killer, 0) + 1
        return killer_state.kill_attribution[victim], is_revenge

    @staticmethod
    def _delta(counter: str, previous: int, current: int, clamped: list[str]) -> int:
        diff = current - previous
        if diff < 0:
            clamped.append(counter)
            return 0
        return diff
