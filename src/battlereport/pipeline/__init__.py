"""
BattleReport Pipeline - Round report orchestration.

This module handles the complete round processing pipeline:
- Event synthesis (EventSynthesizer)
- Summary and highlight assembly
- Output contract validation
"""

from battlereport.pipeline.orchestrator import ReportAssembler, build_report

__all__ = ["ReportAssembler", "build_report"]
