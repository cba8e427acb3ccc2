"""
Round Summary Calculation

Computes the aggregate RoundSummary from the terminal snapshot and the
final participant states of one walk.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from datetime import timedelta

from battlereport.analysis.models import (
    FirstBloodRecord,
    MvpRecord,
    ParticipantState,
    RoundMeta,
    RoundSummary,
    Snapshot,
    StreakRecord,
)
from battlereport.core.constants import KILLING_SPREE_MIN
from battlereport.core.utils import kd_ratio, safe_divide

logger = logging.getLogger(__name__)


class SummaryCalculator:
    """Builds the RoundSummary once the walk is complete."""

    def __init__(self, spree_min_streak: int = KILLING_SPREE_MIN):
        self.spree_min_streak = spree_min_streak

    @staticmethod
    def empty() -> RoundSummary:
        """Summary of a round without snapshots: all zero, no MVP."""
        return RoundSummary()

    def calculate(
        self,
        meta: RoundMeta,
        final_snapshot: Snapshot,
        states: Mapping[str, ParticipantState],
        *,
        lead_change_count: int = 0,
        closest_gap: int | None = None,
        first_blood: FirstBloodRecord | None = None,
    ) -> RoundSummary:
        """
        Summarize a round.

        Args:
            meta: Round metadata (start/end times)
            final_snapshot: Last snapshot of the round; its entries are
                expected to be sorted by score, highest first; a duplicated
                participant counts once, with its last entry
            states: Final participant states in first-tracked order
            lead_change_count: Lead changes detected during the walk
            closest_gap: Narrowest top-two team gap seen, None if never computed
            first_blood: First blood record, if any kill happened

        Returns:
            RoundSummary
        """
        entries = final_snapshot.unique_entries()

        total_kills = sum(e.kills for e in entries)
        total_deaths = sum(e.deaths for e in entries)
        average_kd = round(safe_divide(total_kills, total_deaths, default=float(total_kills)), 2)

        mvp = None
        if entries:
            top = entries[0]
            mvp = MvpRecord(
                player_name=top.participant_id,
                score=top.score,
                kills=top.kills,
                deaths=top.deaths,
                kd=kd_ratio(top.kills, top.deaths),
            )

        end_time = meta.end_time or final_snapshot.timestamp
        duration = end_time - meta.start_time
        if duration < timedelta(0):
            logger.warning(
                f"Round ends ({end_time.isoformat()}) before it starts "
                f"({meta.start_time.isoformat()}); reporting zero duration"
            )
            duration = timedelta(0)

        return RoundSummary(
            duration=duration,
            total_kills=total_kills,
            total_deaths=total_deaths,
            participant_count=len(entries),
            average_kd=average_kd,
            mvp=mvp,
            longest_streak=self._longest_streak(states),
            first_blood=first_blood,
            lead_change_count=lead_change_count,
            closest_gap=closest_gap if closest_gap is not None else 0,
        )

    def _longest_streak(self, states: Mapping[str, ParticipantState]) -> StreakRecord | None:
        best: StreakRecord | None = None
        for name, state in states.items():
            # Strict comparison keeps the first-tracked participant on ties
            if best is None or state.best_streak > best.streak:
                best = StreakRecord(player_name=name, streak=state.best_streak)

        if best is None or best.streak < self.spree_min_streak:
            return None
        return best
