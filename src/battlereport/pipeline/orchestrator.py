"""
Round Report Orchestrator - Main pipeline for turning snapshots into a report.

One forward pass over the snapshots produces the event feed; the summary and
highlights are derived from the walk's terminal state.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from battlereport.analysis.events import EventSynthesizer
from battlereport.analysis.highlights import HighlightSelector
from battlereport.analysis.models import BattleReport, RoundMeta, Snapshot, SystemEvent
from battlereport.analysis.summary import SummaryCalculator
from battlereport.core.config import BattleReportConfig, get_config
from battlereport.core.utils import PerformanceMonitor

logger = logging.getLogger(__name__)


class ReportAssembler:
    """
    Orchestrates the complete round narrative pipeline.

    Handles:
    - Round start/end system events
    - Event synthesis (participant and team tracking)
    - Summary calculation from terminal state
    - Highlight selection (including the MVP)

    Every build owns its own working state, so an assembler can be shared.
    """

    def __init__(self, config: BattleReportConfig | None = None):
        self.config = config or get_config()
        self.synthesizer = EventSynthesizer(self.config.narrative)
        self.summaries = SummaryCalculator(self.config.narrative.spree_min_streak)
        self.selector = HighlightSelector(self.config.highlights)

    def build(self, snapshots: Sequence[Snapshot], meta: RoundMeta) -> BattleReport:
        """
        Execute the pipeline for one round.

        Args:
            snapshots: Time-ascending leaderboard snapshots of the round
            meta: Round metadata (map name, start and optional end time)

        Returns:
            BattleReport with events, highlights and summary
        """
        if not snapshots:
            logger.info(f"No snapshots for round on {meta.map_name}; returning empty report")
            return BattleReport(summary=self.summaries.empty())

        with PerformanceMonitor(f"Battle report for {meta.map_name}"):
            walk = self.synthesizer.synthesize(snapshots)
            final_snapshot = snapshots[-1]

            events = [
                SystemEvent(
                    timestamp=meta.start_time,
                    message=f"Battle begins on {meta.map_name}",
                )
            ]
            events.extend(walk.events)

            summary = self.summaries.calculate(
                meta,
                final_snapshot,
                walk.tracker.states,
                lead_change_count=walk.teams.lead_change_count,
                closest_gap=walk.teams.closest_gap,
                first_blood=walk.first_blood,
            )

            round_end = meta.end_time or final_snapshot.timestamp
            highlights = self.selector.select(walk.highlights, summary, round_end)

            final_entries = final_snapshot.unique_entries()
            if final_entries:
                winner = final_entries[0]
                events.append(
                    SystemEvent(
                        timestamp=final_snapshot.timestamp,
                        message=(
                            f"Battle concluded! {winner.participant_id} achieved victory "
                            f"with {winner.score} points!"
                        ),
                        is_highlight=True,
                    )
                )

            events.sort(key=lambda e: e.timestamp)

        logger.info(
            f"Built report for {meta.map_name}: {len(events)} events, "
            f"{len(highlights)} highlights, {summary.participant_count} participants"
        )
        return BattleReport(
            events=events,
            highlights=highlights,
            summary=summary,
            warnings=list(walk.warnings),
        )


def build_report(
    snapshots: Sequence[Snapshot],
    meta: RoundMeta,
    config: BattleReportConfig | None = None,
) -> BattleReport:
    """Build the battle report of one round (see ReportAssembler.build)."""
    return ReportAssembler(config).build(snapshots, meta)
