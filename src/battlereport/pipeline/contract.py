"""
BattleReport Output Contract: the single source of truth.

Defines the exact JSON structure that BattleReport.to_dict() returns.
Every field name, nesting level, and type is locked here.

Rules:
  1. The orchestrator MUST produce output matching REPORT_CONTRACT.
  2. Consumers MUST read fields using the paths defined here.
  3. Any new field goes here FIRST, then gets wired through all layers.

Validated by: tests/test_contract.py
"""

from __future__ import annotations

from battlereport.core.constants import EventType, HighlightType

# ─── Top-level result shape ───────────────────────────────────────────
REPORT_CONTRACT: dict = {
    "events": list,
    "highlights": list,
    "summary": dict,
    "warnings": list,
}

# ─── One event ───────────────────────────────────────────────────────
EVENT_CONTRACT: dict = {
    "timestamp": str,
    "type": str,
    "participant": str,
    "message": str,
    "is_highlight": bool,
}

# Payload keys each event type must carry (and no other type may)
EVENT_PAYLOADS: dict[str, dict] = {
    EventType.KILL: {"value": int},
    EventType.OBJECTIVE: {"value": int},
    EventType.KILLING_SPREE: {"value": int, "tier": str},
    EventType.SPREE_ENDED: {"value": int},
    EventType.LEAD_CHANGE: {"gap": int},
    EventType.DOMINATION: {"target": str},
    EventType.REVENGE: {"target": str},
}

# ─── One highlight ───────────────────────────────────────────────────
HIGHLIGHT_CONTRACT: dict = {
    "type": str,
    "timestamp": str,
    "participant": str,
    "description": str,
    "value": (int, float),  # may be None
}

# ─── Summary ─────────────────────────────────────────────────────────
SUMMARY_CONTRACT: dict = {
    "duration": str,
    "duration_ms": int,
    "total_kills": int,
    "total_deaths": int,
    "participant_count": int,
    "average_kd": (int, float),
    "lead_change_count": int,
    "closest_gap": int,
}

# Nullable nested summary records
SUMMARY_RECORDS: dict[str, dict] = {
    "mvp": {
        "player_name": str,
        "score": int,
        "kills": int,
        "deaths": int,
        "kd": (int, float),
    },
    "longest_streak": {
        "player_name": str,
        "streak": int,
    },
    "first_blood": {
        "player_name": str,
        "timestamp": str,
    },
}

_PAYLOAD_KEYS = {key for payload in EVENT_PAYLOADS.values() for key in payload}


def validate_event(event: dict, path: str = "event", errors: list[str] | None = None) -> list[str]:
    """Validate one serialized event. Returns list of errors."""
    if errors is None:
        errors = []
    _validate_dict(event, EVENT_CONTRACT, path, errors)
    if not isinstance(event, dict):
        return errors

    event_type = event.get("type")
    if event_type not in {t.value for t in EventType}:
        errors.append(f"VALUE {path}.type: unknown event type {event_type!r}")
        return errors

    payload = EVENT_PAYLOADS.get(event_type, {})
    _validate_dict(event, payload, path, errors)
    for key in _PAYLOAD_KEYS - payload.keys():
        if key in event:
            errors.append(f"UNEXPECTED {path}.{key} on {event_type} event")
    return errors


def validate_summary(summary: dict, errors: list[str] | None = None) -> list[str]:
    """Validate a serialized summary. Returns list of errors."""
    if errors is None:
        errors = []
    _validate_dict(summary, SUMMARY_CONTRACT, "summary", errors)
    if not isinstance(summary, dict):
        return errors

    for key, contract in SUMMARY_RECORDS.items():
        if key not in summary:
            errors.append(f"MISSING summary.{key}")
        elif summary[key] is not None:
            _validate_dict(summary[key], contract, f"summary.{key}", errors)
    return errors


def validate_report(result: dict) -> list[str]:
    """Validate a full BattleReport.to_dict() result. Returns list of errors."""
    errors: list[str] = []
    _validate_dict(result, REPORT_CONTRACT, "report", errors)
    if errors:
        return errors

    for i, event in enumerate(result["events"]):
        validate_event(event, f"events[{i}]", errors)

    highlight_types = {t.value for t in HighlightType}
    for i, highlight in enumerate(result["highlights"]):
        _validate_dict(highlight, HIGHLIGHT_CONTRACT, f"highlights[{i}]", errors)
        if isinstance(highlight, dict) and highlight.get("type") not in highlight_types:
            errors.append(f"VALUE highlights[{i}].type: unknown highlight type")

    validate_summary(result["summary"], errors)
    return errors


def _validate_dict(data: dict, contract: dict, path: str, errors: list[str]) -> None:
    """Recursively validate data against contract schema."""
    if not isinstance(data, dict):
        errors.append(f"{path}: expected dict, got {type(data).__name__}")
        return

    for key, expected_type in contract.items():
        full_path = f"{path}.{key}"
        if key not in data:
            errors.append(f"MISSING {full_path}")
            continue

        value = data[key]

        # If expected_type is a dict, recurse
        if isinstance(expected_type, dict):
            _validate_dict(value, expected_type, full_path, errors)
        # If expected_type is a tuple of types, check isinstance
        elif isinstance(expected_type, tuple):
            if value is not None and not isinstance(value, expected_type):
                errors.append(
                    f"TYPE {full_path}: expected {expected_type}, "
                    f"got {type(value).__name__} = {value!r}"
                )
        # Single type check
        elif expected_type is not None:
            if value is not None and not isinstance(value, expected_type):
                errors.append(
                    f"TYPE {full_path}: expected {expected_type.__name__}, "
                    f"got {type(value).__name__} = {value!r}"
                )
