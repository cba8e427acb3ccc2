"""
BattleReport - Round Narrative Engine

Turns the periodic leaderboard snapshots of a finished game round into a
play-by-play event feed, a set of highlights and a round summary.

Usage:
    from battlereport import build_report, load_round_report

    snapshots, meta = load_round_report(Path("round.json"))
    report = build_report(snapshots, meta)

    for event in report.events:
        print(f"{event.timestamp:%H:%M:%S} {event.message}")
"""

__version__ = "0.3.0"
__author__ = "BattleReport Contributors"


def __getattr__(name):
    """Lazy import for the public API."""
    # Pipeline
    if name == "build_report":
        from battlereport.pipeline.orchestrator import build_report
        return build_report
    elif name == "ReportAssembler":
        from battlereport.pipeline.orchestrator import ReportAssembler
        return ReportAssembler
    # Input
    elif name == "load_round_report":
        from battlereport.core.parser import load_round_report
        return load_round_report
    elif name == "parse_round_report":
        from battlereport.core.parser import parse_round_report
        return parse_round_report
    # Models
    elif name in ("Entry", "Snapshot", "RoundMeta", "BattleReport", "BattleEvent", "Highlight", "RoundSummary"):
        from battlereport.analysis import models
        return getattr(models, name)
    elif name == "filter_events":
        from battlereport.analysis.events import filter_events
        return filter_events
    elif name == "SnapshotValidationError":
        from battlereport.core.errors import SnapshotValidationError
        return SnapshotValidationError
    raise AttributeError(f"module 'battlereport' has no attribute '{name}'")


__all__ = [
    # Version
    "__version__",
    # Pipeline
    "build_report",
    "ReportAssembler",
    # Input
    "load_round_report",
    "parse_round_report",
    # Models
    "Entry",
    "Snapshot",
    "RoundMeta",
    "BattleReport",
    "BattleEvent",
    "Highlight",
    "RoundSummary",
    "filter_events",
    "SnapshotValidationError",
]
