"""
BattleReport - Constants

Defines event/highlight kinds, streak tiers and the default thresholds used
when inferring a round narrative from leaderboard snapshots.
"""

from enum import StrEnum


class EventType(StrEnum):
    """
    Kinds of battle events inferred from snapshot deltas.

    Only kill, objective, killing_spree and spree_ended carry a numeric value.
    """

    KILL = "kill"
    DEATH = "death"
    OBJECTIVE = "objective"
    SPAWN = "spawn"
    FIRST_BLOOD = "first_blood"
    KILLING_SPREE = "killing_spree"
    SPREE_ENDED = "spree_ended"
    LEAD_CHANGE = "lead_change"
    DOMINATION = "domination"
    REVENGE = "revenge"
    SYSTEM = "system"


class HighlightType(StrEnum):
    """Curated round moments surfaced next to the event feed."""

    FIRST_BLOOD = "first_blood"
    KILLING_SPREE = "killing_spree"
    LEAD_CHANGE = "lead_change"
    COMEBACK = "comeback"  # reserved, never inferred from leaderboard deltas
    DOMINATION = "domination"
    MVP = "mvp"


# Participant name used for events that are not attributable to a player
SYSTEM_PARTICIPANT = "SYSTEM"

# Kill streak tiers, highest first so a descending scan resolves a streak
# to the highest threshold it has reached
STREAK_TIERS: tuple[tuple[int, str], ...] = (
    (15, "GODLIKE"),
    (10, "UNSTOPPABLE"),
    (7, "DOMINATING"),
    (5, "RAMPAGE"),
    (3, "KILLING SPREE"),
)

# Smallest streak that counts as a spree (spree_ended, longest streak)
KILLING_SPREE_MIN = 3

# Lead changes only count when the new leader is ahead by more than this
LEAD_GAP_THRESHOLD = 50

# Non-kill score gain above this is read as an objective capture
OBJECTIVE_SCORE_THRESHOLD = 50

# Per-kill points shown when the score delta cannot be split
DEFAULT_KILL_POINTS = 10

# Snapshot cadence of the cosmetic "X leads with N points" status line
STATUS_INTERVAL = 5

# Unanswered kills on the same victim before a domination is called
DOMINATION_THRESHOLD = 3
