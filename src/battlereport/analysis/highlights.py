"""
Highlight Selection for Round Narratives.

Curates the notable moments of a round:
  - First blood, streak tiers, lead changes and dominations
    (collected during the event walk)
  - The MVP (only known once the round is over)

Returns highlights sorted by timestamp (ascending, ties keep walk order).
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import datetime

from battlereport.analysis.models import Highlight, RoundSummary
from battlereport.core.config import HighlightConfig
from battlereport.core.constants import HighlightType

logger = logging.getLogger(__name__)


def _mvp_highlight(summary: RoundSummary, round_end: datetime) -> list[Highlight]:
    """Terminal MVP highlight, stamped at round end."""
    mvp = summary.mvp
    if mvp is None:
        return []
    return [
        Highlight(
            type=HighlightType.MVP,
            timestamp=round_end,
            participant=mvp.player_name,
            description=f"MVP with {mvp.score} points and {mvp.kills} kills",
            value=mvp.score,
        )
    ]


class HighlightSelector:
    """Filters walk highlights by kind and appends the round MVP."""

    def __init__(self, config: HighlightConfig | None = None):
        self.config = config or HighlightConfig()

    @property
    def enabled_types(self) -> set[HighlightType]:
        return {HighlightType(t) for t in self.config.enabled_types}

    def select(
        self,
        walk_highlights: Iterable[Highlight],
        summary: RoundSummary,
        round_end: datetime | None,
    ) -> list[Highlight]:
        """
        Build the final highlight list.

        Args:
            walk_highlights: Highlights emitted while walking the snapshots
            summary: The computed round summary (source of the MVP)
            round_end: Round end time; None when the round had no snapshots

        Returns:
            Highlights sorted ascending by timestamp
        """
        enabled = self.enabled_types
        highlights = [h for h in walk_highlights if h.type in enabled]

        if self.config.include_mvp and HighlightType.MVP in enabled and round_end is not None:
            highlights.extend(_mvp_highlight(summary, round_end))

        highlights.sort(key=lambda h: h.timestamp)
        logger.debug(f"Selected {len(highlights)} highlights")
        return highlights
