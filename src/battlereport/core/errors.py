"""Exceptions raised by BattleReport."""

from __future__ import annotations


class SnapshotValidationError(ValueError):
    """Snapshot input that cannot be (or, in strict mode, must not be) recovered."""

    def __init__(self, issues: list[str] | str):
        if isinstance(issues, str):
            issues = [issues]
        self.issues = list(issues)
        super().__init__("; ".join(self.issues))
