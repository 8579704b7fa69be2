"""Comparison layer - note matching and result orchestration."""

from .results import ComparisonResult, EnhancedComparisonResult, AnalysisDetails
from .notes import NoteSetComparator
from .orchestrator import ComparisonOrchestrator, MODES

__all__ = [
    "ComparisonResult",
    "EnhancedComparisonResult",
    "AnalysisDetails",
    "NoteSetComparator",
    "ComparisonOrchestrator",
    "MODES",
]
