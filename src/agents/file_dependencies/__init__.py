"""File Dependencies Agent — forward dependency reports for project files."""

from src.agents.file_dependencies.report_formatter import DependencyReportFormatter
from src.agents.file_dependencies.service import FileDependencyAnalyzer

__all__ = [
    "DependencyReportFormatter",
    "FileDependencyAnalyzer",
]
