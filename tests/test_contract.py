"""
Contract validation tests: ensure the assembled report matches the contract.

Builds reports from synthetic rounds that exercise every event variant and
validates every field exists with the right type.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

from battlereport.analysis.models import (
    DominationEvent,
    Entry,
    KillEvent,
    RoundMeta,
    Snapshot,
    SpawnEvent,
)
from battlereport.core.config import BattleReportConfig
from battlereport.core.constants import EventType
from battlereport.pipeline.contract import (
    EVENT_PAYLOADS,
    validate_event,
    validate_report,
    validate_summary,
)
from battlereport.pipeline.orchestrator import build_report

T0 = datetime(2025, 3, 1, 20, 0, tzinfo=UTC)


def _make_entry(name: str, kills: int, deaths: int, score: int, team: str) -> Entry:
    return Entry(participant_id=name, score=score, kills=kills, deaths=deaths, team_label=team)


def _make_round() -> tuple[list[Snapshot], RoundMeta]:
    """A round that produces every event type the engine can infer."""
    rows = [
        # (Ace kills/deaths/score, Bolt kills/deaths/score)
        ((0, 0, 0), (0, 0, 0)),
        ((1, 0, 10), (0, 1, 0)),
        ((2, 0, 20), (0, 2, 0)),
        ((3, 0, 30), (0, 3, 0)),
        ((3, 1, 30), (1, 3, 10)),
        ((3, 1, 30), (1, 3, 300)),
    ]
    snapshots = [
        Snapshot(
            timestamp=T0 + timedelta(seconds=30 * i),
            entries=(_make_entry("Ace", *ace, "Axis"), _make_entry("Bolt", *bolt, "Allies")),
        )
        for i, (ace, bolt) in enumerate(rows)
    ]
    meta = RoundMeta(map_name="Kursk", start_time=T0, end_time=T0 + timedelta(minutes=3))
    return snapshots, meta


def _make_config() -> BattleReportConfig:
    config = BattleReportConfig()
    config.narrative.infer_rivalries = True
    return config


class TestSyntheticContract:
    def test_full_report_is_valid(self):
        snapshots, meta = _make_round()

        result = build_report(snapshots, meta, _make_config()).to_dict()

        errors = validate_report(result)
        assert errors == [], "\n".join(errors)

    def test_every_event_type_is_exercised(self):
        snapshots, meta = _make_round()

        result = build_report(snapshots, meta, _make_config()).to_dict()

        seen = {e["type"] for e in result["events"]}
        assert seen >= {
            "spawn",
            "first_blood",
            "kill",
            "killing_spree",
            "spree_ended",
            "death",
            "revenge",
            "domination",
            "objective",
            "lead_change",
            "system",
        }

    def test_empty_report_is_valid(self):
        _, meta = _make_round()

        result = build_report([], meta, _make_config()).to_dict()

        assert validate_report(result) == []
        assert result["summary"]["mvp"] is None


class TestValidators:
    def test_missing_top_level_key(self):
        errors = validate_report({"events": [], "highlights": [], "summary": {}})

        assert "MISSING report.warnings" in errors

    def test_payload_key_required(self):
        event = KillEvent(timestamp=T0, participant="Ace", message="m", value=10).to_dict()
        del event["value"]

        assert validate_event(event) == ["MISSING event.value"]

    def test_payload_key_on_wrong_type(self):
        event = SpawnEvent(timestamp=T0, participant="Ace", message="m").to_dict()
        event["gap"] = 10

        errors = validate_event(event)

        assert len(errors) == 1
        assert errors[0].startswith("UNEXPECTED event.gap")

    def test_unknown_event_type(self):
        event = SpawnEvent(timestamp=T0, participant="Ace", message="m").to_dict()
        event["type"] = "teleport"

        assert validate_event(event)[0].startswith("VALUE event.type")

    def test_domination_payload(self):
        event = DominationEvent(timestamp=T0, participant="Ace", message="m", target="Bolt").to_dict()

        assert validate_event(event) == []
        assert event["target"] == "Bolt"

    def test_summary_records_must_be_present(self):
        summary = build_report([], _make_round()[1], _make_config()).summary.to_dict()
        del summary["first_blood"]

        assert validate_summary(summary) == ["MISSING summary.first_blood"]

    def test_every_payload_type_is_a_known_event(self):
        assert set(EVENT_PAYLOADS) <= set(EventType)
