"""
Progress package exports.
"""

from jp_trainer.progress.service import build_progress_dashboard, export_progress_rows
from jp_trainer.progress.types import ProgressDashboardData

__all__ = [
    "build_progress_dashboard",
    "export_progress_rows",
    "ProgressDashboardData",
]
