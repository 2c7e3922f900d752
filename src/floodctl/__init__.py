"""Cleaning and reporting pipeline for DPWH flood control project data."""

from .cleaning import NoValidDataError, clean, clean_with_report
from .reports import analyze_contractors, analyze_cost_trends, analyze_regions, summarize
from .state import DatasetNotLoadedError, DatasetState

__all__ = [
    "DatasetNotLoadedError",
    "DatasetState",
    "NoValidDataError",
    "analyze_contractors",
    "analyze_cost_trends",
    "analyze_regions",
    "clean",
    "clean_with_report",
    "summarize",
]
__version__ = "0.1.0"
