"""
Round Report Parsing

Reads the round report payload served by the stats API (camelCase JSON)
and turns it into the engine's input records: a list of Snapshot and a
RoundMeta.

Payload shape:
    {
      "session": {...},                      # optional, ignored
      "round": {"mapName", "gameType", "startTime", "endTime", ...},
      "leaderboardSnapshots": [
        {"timestamp", "entries": [{"rank", "playerName", "score",
                                   "kills", "deaths", "ping", "teamLabel"}]}
      ]
    }
"""

from __future__ import annotations

import json
import logging
from datetime import UTC, datetime
from pathlib import Path
from typing import Annotated, Any

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, ValidationError

from battlereport.analysis.models import Entry, RoundMeta, Snapshot
from battlereport.core.errors import SnapshotValidationError

logger = logging.getLogger(__name__)


def _assume_utc(value: datetime) -> datetime:
    # Timestamps without an offset are UTC, so they compare with "...Z" ones
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


UtcDatetime = Annotated[datetime, AfterValidator(_assume_utc)]


class _Payload(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class LeaderboardEntryPayload(_Payload):
    rank: int | None = None
    player_name: str = Field(..., alias="playerName")
    score: int = 0
    kills: int = 0
    deaths: int = 0
    ping: int | None = None
    team_label: str = Field("", alias="teamLabel")

    def to_entry(self) -> Entry:
        return Entry(
            participant_id=self.player_name,
            score=self.score,
            kills=self.kills,
            deaths=self.deaths,
            team_label=self.team_label,
            rank=self.rank,
            ping=self.ping,
        )


class LeaderboardSnapshotPayload(_Payload):
    timestamp: UtcDatetime
    entries: list[LeaderboardEntryPayload] = Field(default_factory=list)

    def to_snapshot(self) -> Snapshot:
        return Snapshot(
            timestamp=self.timestamp,
            entries=tuple(e.to_entry() for e in self.entries),
        )


class RoundInfoPayload(_Payload):
    map_name: str = Field(..., alias="mapName")
    game_type: str | None = Field(None, alias="gameType")
    start_time: UtcDatetime = Field(..., alias="startTime")
    end_time: UtcDatetime | None = Field(None, alias="endTime")
    total_participants: int | None = Field(None, alias="totalParticipants")
    is_active: bool | None = Field(None, alias="isActive")

    def to_meta(self) -> RoundMeta:
        return RoundMeta(
            map_name=self.map_name,
            start_time=self.start_time,
            end_time=self.end_time,
            game_type=self.game_type,
        )


class RoundReportPayload(_Payload):
    round: RoundInfoPayload
    leaderboard_snapshots: list[LeaderboardSnapshotPayload] = Field(
        default_factory=list, alias="leaderboardSnapshots"
    )
    session: dict[str, Any] | None = None


def parse_round_report(data: dict[str, Any]) -> tuple[list[Snapshot], RoundMeta]:
    """
    Convert a round report payload into engine input.

    Args:
        data: Decoded round report JSON

    Returns:
        (snapshots in payload order, round metadata)

    Raises:
        SnapshotValidationError: if the payload does not match the schema
    """
    try:
        payload = RoundReportPayload.model_validate(data)
    except ValidationError as e:
        issues = [
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
        ]
        raise SnapshotValidationError(issues) from e

    snapshots = [s.to_snapshot() for s in payload.leaderboard_snapshots]
    meta = payload.round.to_meta()
    logger.debug(f"Parsed {len(snapshots)} snapshots for round on {meta.map_name}")
    return snapshots, meta


def load_round_report(path: Path) -> tuple[list[Snapshot], RoundMeta]:
    """Read and parse a round report JSON file."""
    with open(path) as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise SnapshotValidationError(f"{path.name}: invalid JSON ({e})") from e

    if not isinstance(data, dict):
        raise SnapshotValidationError(f"{path.name}: expected a JSON object")

    logger.info(f"Loaded round report from: {path}")
    return parse_round_report(data)
