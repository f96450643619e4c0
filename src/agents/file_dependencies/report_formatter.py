"""
Dependency Report Formatter

Turns a forward dependency map into the artifacts returned by the
get_file_dependencies tool:

  - an ordered XML tree (root / file / dependency elements),
  - a plain-text summary for humans,
  - a JSON envelope bundling both with counts and the output path,
  - a best-effort copy of the XML written to a side-channel file.

The map is treated as flat data: traversal already happened upstream,
so cycles and self-references are rendered as-is.
"""

import json
import logging
import xml.etree.ElementTree as ET
from pathlib import Path
from xml.sax.saxutils import escape

from src.agents.file_dependencies.models import (
    UNKNOWN_PATH,
    DependencyMap,
    DependencyReport,
    FileId,
    FileNode,
    ReportDocument,
)

logger = logging.getLogger("file-deps.report_formatter")

XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8"?>'


def _ordered_unique(dependencies) -> list[FileId]:
    """Drop duplicate targets, keeping first-seen order."""
    return list(dict.fromkeys(dependencies or ()))


def short_name(file_id: FileId) -> str:
    """Last path segment of a file id, e.g. '/proj/A.kt' -> 'A.kt'."""
    if not file_id:
        return UNKNOWN_PATH
    name = file_id.replace("\\", "/").rstrip("/").rsplit("/", 1)[-1]
    return name or file_id


class DependencyReportFormatter:
    """
    Stateless formatter for dependency maps.

    Safe to share between concurrent invocations; the only shared
    resource is the persist destination, which callers choose.
    """

    def __init__(self, preview_limit: int = 3):
        self.preview_limit = preview_limit

    # ─── Document ──────────────────────────────────────────

    def build_document(self, dependencies: DependencyMap) -> ReportDocument:
        """
        Build the ordered report tree.

        Files are sorted case-insensitively by path (stable, so equal keys
        keep map order). Dependencies keep their iteration order.
        """
        ordered = sorted(
            dependencies.items(),
            key=lambda item: (item[0] or "").lower(),
        )
        files = [
            FileNode(
                path=file_id or UNKNOWN_PATH,
                dependencies=[
                    dep or UNKNOWN_PATH for dep in _ordered_unique(deps)
                ],
            )
            for file_id, deps in ordered
        ]
        return ReportDocument(is_backward=False, files=files)

    def serialize_document(self, document: ReportDocument) -> str:
        """
        Render the report tree as XML.

        Attribute values are escaped by ElementTree. If rendering fails,
        a minimal document with an <error> element is returned instead.
        """
        try:
            root = ET.Element(
                "root", {"isBackward": "true" if document.is_backward else "false"}
            )
            for node in document.files:
                file_el = ET.SubElement(root, "file", {"path": node.path})
                for dep in node.dependencies:
                    ET.SubElement(file_el, "dependency", {"path": dep})
            ET.indent(root, space="  ")
            body = ET.tostring(root, encoding="unicode")
            return f"{XML_DECLARATION}\n{body}\n"
        except Exception as e:
            logger.warning("XML generation failed: %s", e)
            return (
                f"{XML_DECLARATION}\n"
                f"<error>Failed to generate XML: {escape(str(e))}</error>"
            )

    # ─── Summary ───────────────────────────────────────────

    def build_summary(self, dependencies: DependencyMap, target_label: str) -> str:
        """
        Human-readable overview of the analysis.

        Files are listed in map order, not the sorted document order.
        """
        total_files = len(dependencies)
        total_deps = count_dependencies(dependencies)

        lines = [
            f"Dependencies Analysis for: {target_label}",
            "",
            "Analysis Results:",
            f"- Files analyzed: {total_files}",
            f"- Total dependencies: {total_deps}",
            "",
        ]

        if not dependencies:
            lines.append("No dependencies found. File may be self-contained.")
            return "\n".join(lines) + "\n"

        lines.append("Dependency breakdown:")
        for file_id, deps in dependencies.items():
            deps = _ordered_unique(deps)
            lines.append(f"- {short_name(file_id)}: {len(deps)} dependencies")
            for dep in deps[: self.preview_limit]:
                lines.append(f"  └─ {short_name(dep)}")
            remaining = len(deps) - self.preview_limit
            if remaining > 0:
                lines.append(f"  └─ ... and {remaining} more")

        return "\n".join(lines) + "\n"

    # ─── Side-channel file ─────────────────────────────────

    def persist(self, xml_text: str, destination: str) -> bool:
        """
        Write the XML report to destination, creating parent directories.

        Fire-and-forget: every failure is discarded and reported only
        through the return value, never raised.
        """
        try:
            path = Path(destination)
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(xml_text, encoding="utf-8")
            return True
        except Exception as e:
            logger.debug("Could not write dependency report to %s: %s", destination, e)
            return False

    # ─── Envelope ──────────────────────────────────────────

    def build_envelope(
        self,
        target_label: str,
        dependencies_count: int,
        files_analyzed: int,
        output_path: str,
        summary: str,
        xml_text: str,
    ) -> str:
        """Fixed-shape JSON payload returned to the tool caller."""
        payload = {
            "target_file": target_label,
            "dependencies_count": dependencies_count,
            "files_analyzed": files_analyzed,
            "output_file": output_path,
            "dependencies_summary": summary,
            "dependencies_xml": xml_text,
        }
        return json.dumps(payload, indent=2, ensure_ascii=False)

    # ─── Pipeline ──────────────────────────────────────────

    def format_report(
        self,
        dependencies: DependencyMap,
        target_label: str,
        output_path: str,
    ) -> DependencyReport:
        """Run document, persist, summary and envelope steps in order."""
        document = self.build_document(dependencies)
        xml_text = self.serialize_document(document)
        persisted = self.persist(xml_text, output_path)
        summary = self.build_summary(dependencies, target_label)

        dependencies_count = count_dependencies(dependencies)
        files_analyzed = len(dependencies)
        envelope = self.build_envelope(
            target_label,
            dependencies_count,
            files_analyzed,
            output_path,
            summary,
            xml_text,
        )
        return DependencyReport(
            target_file=target_label,
            dependencies_count=dependencies_count,
            files_analyzed=files_analyzed,
            output_file=output_path,
            document=document,
            xml=xml_text,
            summary=summary,
            envelope=envelope,
            persisted=persisted,
        )


def count_dependencies(dependencies: DependencyMap) -> int:
    """Total number of dependency targets across all files."""
    return sum(len(_ordered_unique(deps)) for deps in dependencies.values())
