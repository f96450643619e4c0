"""
File Dependency Analyzer

Request handling behind the get_file_dependencies tool: resolves the
target file inside the project, asks the provider for its forward
dependency map and formats the result.

Only failures up to and including the provider call produce an error
response. Once a map exists the formatter always yields an envelope.
"""

import logging
from pathlib import Path

from src.agents.file_dependencies.config import FileDependenciesSettings
from src.agents.file_dependencies.models import ToolResponse
from src.agents.file_dependencies.providers import (
    DependencyProvider,
    PythonImportProvider,
)
from src.agents.file_dependencies.report_formatter import DependencyReportFormatter
from src.shared.exceptions import (
    FileDependenciesError,
    ProjectNotFoundError,
    TargetNotFoundError,
)
from src.shared.logging import generate_correlation_id

logger = logging.getLogger("file-deps.service")


class FileDependencyAnalyzer:
    """Resolves, analyses and formats one file per call."""

    def __init__(
        self,
        settings: FileDependenciesSettings,
        provider: DependencyProvider | None = None,
        formatter: DependencyReportFormatter | None = None,
    ):
        self.settings = settings
        self._provider = provider
        self.formatter = formatter or DependencyReportFormatter(
            preview_limit=settings.preview_limit
        )

    def _get_provider(self, project_root: Path) -> DependencyProvider:
        if self._provider is None:
            self._provider = PythonImportProvider(
                project_root, max_files=self.settings.max_files
            )
        return self._provider

    def resolve_target(self, path_in_project: str) -> tuple[Path, Path]:
        """
        Return (project_root, absolute target path).

        Raises:
            ProjectNotFoundError: project root is not a directory.
            TargetNotFoundError: empty, missing, non-file or escaping path.
        """
        project_root = self.settings.resolved_project_root()
        if not project_root.is_dir():
            raise ProjectNotFoundError("project directory not found")

        if not path_in_project or not path_in_project.strip():
            raise TargetNotFoundError("path_in_project must not be empty")

        target = (project_root / path_in_project.lstrip("/\\")).resolve()
        if not target.is_relative_to(project_root):
            raise TargetNotFoundError(f"path is outside the project: {path_in_project}")
        if not target.exists():
            raise TargetNotFoundError(f"file not found: {path_in_project}")
        if not target.is_file():
            raise TargetNotFoundError(f"not a file: {path_in_project}")
        return project_root, target

    def analyze(self, path_in_project: str, request_id: str | None = None) -> ToolResponse:
        """Analyse one file and return the JSON envelope or an error."""
        request_id = request_id or generate_correlation_id()
        logger.info("[%s] get_file_dependencies path=%r", request_id, path_in_project)

        try:
            project_root, target = self.resolve_target(path_in_project)
            dependencies = self._get_provider(project_root).compute_dependencies(target)

            output_path = self.settings.output_path_for(request_id)
            report = self.formatter.format_report(
                dependencies, path_in_project, output_path
            )
        except FileDependenciesError as e:
            logger.info("[%s] rejected: %s", request_id, e.message)
            return ToolResponse(error=e.message)
        except Exception as e:
            logger.error("[%s] dependency analysis failed: %s", request_id, e, exc_info=True)
            return ToolResponse(error=f"Dependency analysis failed: {e}")

        logger.info(
            "[%s] files=%d dependencies=%d output=%s persisted=%s",
            request_id, report.files_analyzed, report.dependencies_count,
            report.output_file, report.persisted,
        )
        return ToolResponse(status=report.envelope)
