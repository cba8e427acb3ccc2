"""
Export Functionality for BattleReport

Provides export formats for built reports:
- JSON (default): the complete report contract, optionally with metadata
- CSV: the event feed, one row per event
"""

import csv
import json
import logging
from collections.abc import Iterable
from datetime import datetime
from io import StringIO
from pathlib import Path
from typing import Any

from battlereport import __version__
from battlereport.analysis.models import BattleEvent, BattleReport

logger = logging.getLogger(__name__)

EVENT_CSV_COLUMNS = ["timestamp", "type", "participant", "message", "is_highlight", "value", "tier", "gap", "target"]


def report_to_dict(report: BattleReport) -> dict[str, Any]:
    """Convert a report to its JSON-ready contract dictionary."""
    return report.to_dict()


# ============================================================================
# JSON Export
# ============================================================================


def export_to_json(
    report: BattleReport,
    output_path: Path | None = None,
    indent: int = 2,
    include_metadata: bool = True,
) -> str:
    """
    Export a report to JSON format.

    Args:
        report: The built report
        output_path: Optional path to write the file
        indent: JSON indentation level
        include_metadata: Whether to include export metadata

    Returns:
        JSON string
    """
    export_data = report_to_dict(report)

    if include_metadata:
        export_data = {
            "_metadata": {
                "exported_at": datetime.now().isoformat(),
                "format": "battlereport_json",
                "version": __version__,
            },
            **export_data,
        }

    json_str = json.dumps(export_data, indent=indent, default=str)

    if output_path:
        output_path.write_text(json_str)
        logger.info(f"Exported JSON to: {output_path}")

    return json_str


# ============================================================================
# CSV Export
# ============================================================================


def export_events_to_csv(
    events: Iterable[BattleEvent],
    output_path: Path | None = None,
    delimiter: str = ",",
    include_header: bool = True,
) -> str:
    """
    Export an event feed to CSV format.

    Payload columns (value, tier, gap, target) are empty for event types
    that do not carry them.

    Returns:
        CSV string
    """
    output = StringIO()
    writer = csv.DictWriter(
        output, fieldnames=EVENT_CSV_COLUMNS, delimiter=delimiter, restval=""
    )

    if include_header:
        writer.writeheader()

    for event in events:
        writer.writerow(event.to_dict())

    csv_str = output.getvalue()

    if output_path:
        output_path.write_text(csv_str)
        logger.info(f"Exported CSV to: {output_path}")

    return csv_str


def export_report(
    report: BattleReport,
    output_path: Path,
    indent: int = 2,
    delimiter: str = ",",
    include_metadata: bool = True,
) -> None:
    """Write a report to ``output_path``, picking the format from its suffix."""
    suffix = output_path.suffix.lower()

    if suffix == ".json":
        export_to_json(report, output_path, indent=indent, include_metadata=include_metadata)
    elif suffix == ".csv":
        export_events_to_csv(report.events, output_path, delimiter=delimiter)
    else:
        raise ValueError(f"Unsupported export format: {suffix} (use .json or .csv)")
