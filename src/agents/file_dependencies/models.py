"""
Report Models

Data classes for the dependency report produced by the formatter, plus
the pydantic request/response models exchanged at the tool boundary.
"""

import json
from collections.abc import Collection, Mapping
from dataclasses import dataclass, field

import pydantic

# A file is identified by its absolute path; None marks an unresolvable one.
FileId = str | None
DependencyMap = Mapping[FileId, Collection[FileId]]

UNKNOWN_PATH = "unknown"


@dataclass
class FileNode:
    """One analysed file and the files it depends on."""

    path: str
    dependencies: list[str] = field(default_factory=list)


@dataclass
class ReportDocument:
    """Ordered dependency tree, sorted by file path at the top level."""

    is_backward: bool = False
    files: list[FileNode] = field(default_factory=list)


@dataclass
class DependencyReport:
    """Every artifact produced for one analysed dependency map."""

    target_file: str
    dependencies_count: int
    files_analyzed: int
    output_file: str
    document: ReportDocument
    xml: str
    summary: str
    envelope: str
    persisted: bool = False


class ToolResponse(pydantic.BaseModel):
    """Either a JSON envelope (status) or a user-visible error message."""

    status: str | None = None
    error: str | None = None

    @property
    def is_error(self) -> bool:
        return self.error is not None

    def to_json(self) -> str:
        """Text returned to the MCP client."""
        if self.error is not None:
            return json.dumps({"error": self.error})
        return self.status or ""
