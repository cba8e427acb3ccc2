"""
Team Aggregation

Sums each snapshot's scores per team label and follows which team leads,
counting lead changes and the narrowest gap between the top two teams.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass

from battlereport.analysis.models import Entry
from battlereport.core.constants import LEAD_GAP_THRESHOLD

logger = logging.getLogger(__name__)


@dataclass
class TeamScore:
    """Aggregate of one team within a single snapshot."""

    total_score: int = 0
    player_count: int = 0


@dataclass(frozen=True)
class LeadChange:
    team: str
    previous_team: str
    gap: int


def aggregate_team_scores(entries: Iterable[Entry]) -> dict[str, TeamScore]:
    """Team label -> TeamScore, in order of each team's first entry."""
    teams: dict[str, TeamScore] = {}
    for entry in entries:
        team = teams.setdefault(entry.team_label, TeamScore())
        team.total_score += entry.score
        team.player_count += 1
    return teams


class TeamAggregator:
    """
    Lead tracking across the snapshots of one round.

    The leader of every snapshot with at least two teams is remembered, even
    when the gap is too small to call a lead change, so a change is always
    judged against the immediately preceding leader.
    """

    def __init__(self, lead_gap_threshold: int = LEAD_GAP_THRESHOLD):
        self.lead_gap_threshold = lead_gap_threshold
        self.previous_leader: str | None = None
        self.lead_change_count = 0
        self.closest_gap: int | None = None

    def observe(self, entries: Iterable[Entry]) -> LeadChange | None:
        """Fold one snapshot in; return the lead change it causes, if any."""
        teams = aggregate_team_scores(entries)
        if len(teams) < 2:
            return None

        # Stable sort keeps first-seen order among tied teams
        ranked = sorted(teams.items(), key=lambda item: item[1].total_score, reverse=True)
        leader, leader_score = ranked[0]
        gap = leader_score.total_score - ranked[1][1].total_score

        if self.closest_gap is None or gap < self.closest_gap:
            self.closest_gap = gap

        change = None
        previous = self.previous_leader
        if previous is not None and previous != leader and gap > self.lead_gap_threshold:
            self.lead_change_count += 1
            change = LeadChange(team=leader, previous_team=previous, gap=gap)
            logger.debug(f"Lead change: {previous} -> {leader} (+{gap})")

        self.previous_leader = leader
        return change
