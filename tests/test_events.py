"""Tests for event synthesis over snapshot sequences."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from battlereport.analysis.events import EventSynthesizer, filter_events, streak_tier
from battlereport.analysis.models import Entry, Snapshot
from battlereport.core.config import NarrativeConfig
from battlereport.core.constants import EventType, HighlightType
from battlereport.core.errors import SnapshotValidationError

T0 = datetime(2025, 3, 1, 20, 0, tzinfo=UTC)


def _at(seconds: int) -> datetime:
    return T0 + timedelta(seconds=seconds)


def _entry(
    name: str = "P", kills: int = 0, deaths: int = 0, score: int = 0, team: str = "Axis"
) -> Entry:
    return Entry(participant_id=name, score=score, kills=kills, deaths=deaths, team_label=team)


def _snap(seconds: int, *entries: Entry) -> Snapshot:
    return Snapshot(timestamp=_at(seconds), entries=entries)


def _types(events, at: datetime | None = None) -> list[str]:
    return [e.type.value for e in events if at is None or e.timestamp == at]


def _of_type(events, event_type: EventType) -> list:
    return [e for e in events if e.type is event_type]


class TestStreakTier:
    @pytest.mark.parametrize(
        "streak,expected",
        [
            (0, None),
            (2, None),
            (3, "KILLING SPREE"),
            (4, "KILLING SPREE"),
            (5, "RAMPAGE"),
            (7, "DOMINATING"),
            (9, "DOMINATING"),
            (10, "UNSTOPPABLE"),
            (15, "GODLIKE"),
            (40, "GODLIKE"),
        ],
    )
    def test_highest_threshold_reached(self, streak, expected):
        assert streak_tier(streak) == expected


class TestBasicInference:
    """Spawn, kill, death and objective inference."""

    def test_short_sequences_produce_nothing(self):
        synth = EventSynthesizer()

        assert synth.synthesize([]).events == []
        assert synth.synthesize([_snap(0, _entry())]).events == []

    def test_spawn_then_kill(self):
        """One spawn at t0, then first blood and a 10 point kill at t1."""
        result = EventSynthesizer().synthesize(
            [_snap(0, _entry(score=0)), _snap(30, _entry(kills=1, score=10))]
        )

        assert _types(result.events) == ["spawn", "first_blood", "kill"]
        spawn, _, kill = result.events
        assert spawn.timestamp == _at(0)
        assert spawn.participant == "P"
        assert kill.timestamp == _at(30)
        assert kill.value == 10

    def test_one_kill_event_per_unit(self):
        """Points are split over kills and deaths of the interval."""
        result = EventSynthesizer().synthesize(
            [_snap(0, _entry()), _snap(30, _entry(kills=2, deaths=1, score=31))]
        )

        kills = _of_type(result.events, EventType.KILL)
        assert [k.value for k in kills] == [10, 10]
        assert len(_of_type(result.events, EventType.DEATH)) == 1

    def test_zero_score_kill_is_worth_zero(self):
        result = EventSynthesizer().synthesize(
            [_snap(0, _entry()), _snap(30, _entry(kills=1, score=0))]
        )

        assert _of_type(result.events, EventType.KILL)[0].value == 0

    def test_identical_snapshots_produce_no_activity(self):
        """No kill/death/objective events when nothing changed."""
        same = _entry(kills=3, deaths=2, score=120)
        result = EventSynthesizer().synthesize([_snap(0, same), _snap(30, same), _snap(60, same)])

        assert _types(result.events) == ["spawn"]

    def test_objective_from_non_kill_score(self):
        result = EventSynthesizer().synthesize(
            [
                _snap(0, _entry()),
                _snap(30, _entry(score=60)),
                _snap(60, _entry(score=110)),  # +50 is not enough
                _snap(90, _entry(kills=1, score=200)),  # kills rule it out
            ]
        )

        objectives = _of_type(result.events, EventType.OBJECTIVE)
        assert len(objectives) == 1
        assert objectives[0].value == 60
        assert objectives[0].timestamp == _at(30)

    def test_death_without_kills(self):
        result = EventSynthesizer().synthesize(
            [_snap(0, _entry()), _snap(30, _entry(deaths=2))]
        )

        assert _types(result.events, _at(30)) == ["death", "death"]

    def test_returning_participant_spawns_again(self):
        result = EventSynthesizer().synthesize(
            [
                _snap(0, _entry("A"), _entry("B")),
                _snap(30, _entry("A")),
                _snap(60, _entry("A"), _entry("B", kills=3)),
            ]
        )

        spawns = _of_type(result.events, EventType.SPAWN)
        assert [(s.participant, s.timestamp) for s in spawns] == [
            ("A", _at(0)),
            ("B", _at(0)),
            ("B", _at(60)),
        ]
        # Kills across an absence are not inferred
        assert _of_type(result.events, EventType.KILL) == []


class TestFirstBlood:
    def test_first_kill_is_first_blood_once(self):
        result = EventSynthesizer().synthesize(
            [
                _snap(0, _entry("A"), _entry("B")),
                _snap(30, _entry("A", kills=1), _entry("B", kills=1)),
                _snap(60, _entry("A", kills=2), _entry("B", kills=3)),
            ]
        )

        first_bloods = _of_type(result.events, EventType.FIRST_BLOOD)
        assert len(first_bloods) == 1
        assert first_bloods[0].participant == "A"  # entry order breaks the tie
        assert first_bloods[0].is_highlight is True
        assert result.first_blood.player_name == "A"
        assert result.first_blood.timestamp == _at(30)
        assert [h.type for h in result.highlights].count(HighlightType.FIRST_BLOOD) == 1

    def test_first_blood_precedes_kill(self):
        result = EventSynthesizer().synthesize(
            [_snap(0, _entry()), _snap(30, _entry(kills=1, score=10))]
        )

        assert _types(result.events, _at(30)) == ["first_blood", "kill"]


class TestKillingSpree:
    def test_spree_fires_once_per_tier(self):
        """Kills 1, 2, 3, 4: one killing_spree when the streak reaches 3."""
        result = EventSynthesizer().synthesize(
            [_snap(i * 30, _entry(kills=i, score=i * 10)) for i in range(5)]
        )

        sprees = _of_type(result.events, EventType.KILLING_SPREE)
        assert len(sprees) == 1
        assert sprees[0].timestamp == _at(90)
        assert sprees[0].value == 3
        assert sprees[0].tier == "KILLING SPREE"

    def test_next_tier_fires_again(self):
        result = EventSynthesizer(NarrativeConfig(status_interval=0)).synthesize(
            [_snap(i * 30, _entry(kills=i)) for i in range(7)]
        )

        sprees = _of_type(result.events, EventType.KILLING_SPREE)
        assert [(s.value, s.tier) for s in sprees] == [(3, "KILLING SPREE"), (5, "RAMPAGE")]
        assert [h.value for h in result.highlights if h.type is HighlightType.KILLING_SPREE] == [3, 5]

    def test_jump_over_tiers_fires_highest_once(self):
        result = EventSynthesizer().synthesize([_snap(0, _entry()), _snap(30, _entry(kills=8))])

        sprees = _of_type(result.events, EventType.KILLING_SPREE)
        assert [(s.value, s.tier) for s in sprees] == [(8, "DOMINATING")]

    def test_spree_precedes_kills(self):
        result = EventSynthesizer().synthesize(
            [_snap(0, _entry(kills=0)), _snap(30, _entry(kills=2)), _snap(60, _entry(kills=3))]
        )

        assert _types(result.events, _at(60)) == ["killing_spree", "kill"]


class TestSpreeEnded:
    def test_death_ends_streak_of_four(self):
        """Streak 4 then a death: spree_ended(4) followed by the death."""
        result = EventSynthesizer().synthesize(
            [
                _snap(0, _entry()),
                _snap(30, _entry(kills=4)),
                _snap(60, _entry(kills=4, deaths=1)),
            ]
        )

        assert _types(result.events, _at(60)) == ["spree_ended", "death"]
        ended = _of_type(result.events, EventType.SPREE_ENDED)
        assert len(ended) == 1
        assert ended[0].value == 4
        assert result.tracker.get("P").current_streak == 0

    def test_short_streak_ends_silently(self):
        result = EventSynthesizer().synthesize(
            [_snap(0, _entry()), _snap(30, _entry(kills=2)), _snap(60, _entry(kills=2, deaths=1))]
        )

        assert _of_type(result.events, EventType.SPREE_ENDED) == []


class TestLeadChange:
    def _axis_allies(self, seconds: int, axis: int, allies: int) -> Snapshot:
        return _snap(
            seconds,
            _entry("a1", score=axis, team="Axis"),
            _entry("b1", score=allies, team="Allies"),
        )

    def test_one_lead_change(self):
        result = EventSynthesizer().synthesize(
            [self._axis_allies(0, 100, 0), self._axis_allies(30, 100, 200)]
        )

        changes = _of_type(result.events, EventType.LEAD_CHANGE)
        assert len(changes) == 1
        assert changes[0].timestamp == _at(30)
        assert changes[0].participant == "Allies"
        assert changes[0].gap == 100
        assert changes[0].is_highlight is True
        assert [h.type for h in result.highlights] == [HighlightType.LEAD_CHANGE]
        assert result.teams.lead_change_count == 1

    def test_narrow_lead_is_ignored(self):
        result = EventSynthesizer().synthesize(
            [self._axis_allies(0, 100, 0), self._axis_allies(30, 100, 140)]
        )

        assert _of_type(result.events, EventType.LEAD_CHANGE) == []
        assert result.teams.closest_gap == 40

    def test_single_team_has_no_gap(self):
        result = EventSynthesizer().synthesize(
            [_snap(0, _entry("a1"), _entry("a2")), _snap(30, _entry("a1", score=90), _entry("a2"))]
        )

        assert result.teams.closest_gap is None


class TestPeriodicStatus:
    def test_status_every_fifth_snapshot(self):
        snapshots = [
            _snap(i * 30, _entry("A", score=10 * i), _entry("B", score=20 * i)) for i in range(11)
        ]

        result = EventSynthesizer().synthesize(snapshots)

        system = _of_type(result.events, EventType.SYSTEM)
        assert [e.timestamp for e in system] == [_at(150), _at(300)]
        assert system[0].message == "B leads with 100 points (0/0)"
        assert all(not e.is_highlight for e in system)

    def test_status_interval_configurable(self):
        snapshots = [_snap(i * 30, _entry()) for i in range(7)]

        every_second = EventSynthesizer(NarrativeConfig(status_interval=2)).synthesize(snapshots)
        disabled = EventSynthesizer(NarrativeConfig(status_interval=0)).synthesize(snapshots)

        assert len(_of_type(every_second.events, EventType.SYSTEM)) == 3
        assert _of_type(disabled.events, EventType.SYSTEM) == []

    def test_empty_snapshot_has_no_status(self):
        snapshots = [_snap(i * 30) for i in range(6)]

        assert EventSynthesizer().synthesize(snapshots).events == []


class TestAnomalies:
    def test_negative_delta_is_clamped_with_warning(self):
        result = EventSynthesizer().synthesize(
            [_snap(0, _entry(kills=5, score=50)), _snap(30, _entry(kills=3, score=20))]
        )

        assert _types(result.events) == ["spawn"]
        assert len(result.warnings) == 1
        assert "P" in result.warnings[0]

    def test_strict_mode_raises_on_negative_delta(self):
        synth = EventSynthesizer(NarrativeConfig(strict_validation=True))

        with pytest.raises(SnapshotValidationError):
            synth.synthesize([_snap(0, _entry(kills=5)), _snap(30, _entry(kills=3))])

    def test_out_of_order_snapshots_still_sorted(self):
        result = EventSynthesizer().synthesize(
            [_snap(60, _entry()), _snap(30, _entry(kills=1)), _snap(90, _entry(kills=2))]
        )

        timestamps = [e.timestamp for e in result.events]
        assert timestamps == sorted(timestamps)
        assert len(result.warnings) == 1

    def test_strict_mode_raises_on_out_of_order(self):
        synth = EventSynthesizer(NarrativeConfig(strict_validation=True))

        with pytest.raises(SnapshotValidationError):
            synth.synthesize([_snap(60, _entry()), _snap(30, _entry())])

    def test_duplicate_entries_processed_once(self):
        result = EventSynthesizer().synthesize(
            [_snap(0, _entry()), _snap(30, _entry(kills=1), _entry(kills=2))]
        )

        assert len(_of_type(result.events, EventType.KILL)) == 2
        assert any("Duplicate" in w for w in result.warnings)

    def test_duplicate_entries_count_once_for_team_score(self):
        """A repeated participant is not summed twice into its team's score."""
        result = EventSynthesizer().synthesize(
            [
                _snap(0, _entry("A", score=40, team="Axis"), _entry("B", score=0, team="Allies")),
                _snap(
                    30,
                    _entry("A", score=40, team="Axis"),
                    _entry("A", score=40, team="Axis"),
                    _entry("B", score=70, team="Allies"),
                ),
            ]
        )

        assert result.teams.previous_leader == "Allies"
        assert result.teams.closest_gap == 30
        assert result.teams.lead_change_count == 0


class TestRivalries:
    def _duel(self, seconds: int, a_kills: int, a_deaths: int, b_kills: int, b_deaths: int) -> Snapshot:
        return _snap(
            seconds,
            _entry("A", kills=a_kills, deaths=a_deaths, team="Axis"),
            _entry("B", kills=b_kills, deaths=b_deaths, team="Allies"),
        )

    def _sequence(self) -> list[Snapshot]:
        return [
            self._duel(0, 0, 0, 0, 0),
            self._duel(30, 1, 0, 0, 1),
            self._duel(60, 2, 0, 0, 2),
            self._duel(90, 3, 0, 0, 3),
            self._duel(120, 3, 1, 1, 3),
        ]

    def test_disabled_by_default(self):
        result = EventSynthesizer().synthesize(self._sequence())

        assert _of_type(result.events, EventType.DOMINATION) == []
        assert _of_type(result.events, EventType.REVENGE) == []

    def test_domination_and_revenge(self):
        result = EventSynthesizer(NarrativeConfig(infer_rivalries=True)).synthesize(
            self._sequence()
        )

        dominations = _of_type(result.events, EventType.DOMINATION)
        assert len(dominations) == 1
        assert dominations[0].participant == "A"
        assert dominations[0].target == "B"
        assert dominations[0].timestamp == _at(90)
        assert HighlightType.DOMINATION in [h.type for h in result.highlights]

        revenges = _of_type(result.events, EventType.REVENGE)
        assert len(revenges) == 1
        assert revenges[0].participant == "B"
        assert revenges[0].target == "A"
        assert revenges[0].timestamp == _at(120)

    def test_ambiguous_interval_is_not_attributed(self):
        result = EventSynthesizer(NarrativeConfig(infer_rivalries=True)).synthesize(
            [self._duel(0, 0, 0, 0, 0), self._duel(30, 2, 0, 0, 2)]
        )

        assert result.tracker.get("A").kill_attribution == {}


class TestFilterEvents:
    def _events(self):
        return EventSynthesizer().synthesize(
            [
                _snap(0, _entry()),
                _snap(30, _entry(kills=1, score=10)),
                _snap(60, _entry(kills=1, deaths=1, score=10)),
            ]
        ).events

    def test_default_keeps_everything(self):
        events = self._events()

        assert filter_events(events) == events

    def test_hide_joins_and_deaths(self):
        filtered = filter_events(self._events(), show_join_events=False, show_death_events=False)

        assert _types(filtered) == ["first_blood", "kill"]

    def test_highlights_only(self):
        filtered = filter_events(self._events(), highlights_only=True)

        assert _types(filtered) == ["first_blood"]
