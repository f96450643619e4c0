"""
Unit tests for the dependency report formatter.

Pure formatting over literal dependency maps; the only I/O is the
persist step, which writes under pytest's tmp_path.
"""

import json
import xml.etree.ElementTree as ET
from unittest.mock import patch

import pytest

from src.agents.file_dependencies import report_formatter
from src.agents.file_dependencies.models import FileNode, ReportDocument
from src.agents.file_dependencies.report_formatter import (
    DependencyReportFormatter,
    count_dependencies,
    short_name,
)


# ─── Fixtures ────────────────────────────────────────────────


SINGLE_FILE_MAP = {"/proj/A.kt": ["/proj/B.kt", "/proj/C.kt"]}

MIXED_CASE_MAP = {
    "/proj/zeta.py": ["/proj/alpha.py"],
    "/proj/Beta.py": [],
    "/proj/alpha.py": ["/proj/zeta.py", "/proj/Beta.py"],
    "/proj/ALPHA2.py": ["/proj/zeta.py"],
}


@pytest.fixture
def formatter():
    return DependencyReportFormatter()


def _file_paths(xml_text: str) -> list[str]:
    root = ET.fromstring(xml_text.split("\n", 1)[1])
    return [el.get("path") for el in root.findall("file")]


# ─── build_document / serialize_document ────────────────────


class TestDocument:
    """Tests for the ordered XML report tree."""

    def test_single_file_document(self, formatter):
        xml_text = formatter.serialize_document(formatter.build_document(SINGLE_FILE_MAP))

        assert xml_text == (
            '<?xml version="1.0" encoding="UTF-8"?>\n'
            '<root isBackward="false">\n'
            '  <file path="/proj/A.kt">\n'
            '    <dependency path="/proj/B.kt" />\n'
            '    <dependency path="/proj/C.kt" />\n'
            "  </file>\n"
            "</root>\n"
        )

    def test_empty_map_gives_empty_root(self, formatter):
        document = formatter.build_document({})
        assert document.files == []

        xml_text = formatter.serialize_document(document)
        root = ET.fromstring(xml_text.split("\n", 1)[1])
        assert root.tag == "root"
        assert root.get("isBackward") == "false"
        assert list(root) == []

    def test_files_sorted_case_insensitively(self, formatter):
        xml_text = formatter.serialize_document(formatter.build_document(MIXED_CASE_MAP))

        assert _file_paths(xml_text) == [
            "/proj/alpha.py",
            "/proj/ALPHA2.py",
            "/proj/Beta.py",
            "/proj/zeta.py",
        ]

    def test_sort_ignores_input_order(self, formatter):
        reversed_map = dict(reversed(list(MIXED_CASE_MAP.items())))

        first = formatter.serialize_document(formatter.build_document(MIXED_CASE_MAP))
        second = formatter.serialize_document(formatter.build_document(reversed_map))

        assert _file_paths(first) == _file_paths(second)

    def test_sort_is_stable_for_equal_keys(self, formatter):
        document = formatter.build_document({"/p/Same.py": ["/p/x"], "/p/same.py": ["/p/y"]})
        assert [f.dependencies for f in document.files] == [["/p/x"], ["/p/y"]]

    def test_repeated_serialization_is_identical(self, formatter):
        first = formatter.serialize_document(formatter.build_document(MIXED_CASE_MAP))
        second = formatter.serialize_document(formatter.build_document(MIXED_CASE_MAP))
        assert first == second

    def test_dependency_order_and_duplicates(self, formatter):
        document = formatter.build_document(
            {"/p/a.py": ["/p/c.py", "/p/b.py", "/p/c.py"]}
        )
        assert document.files[0].dependencies == ["/p/c.py", "/p/b.py"]

    def test_missing_paths_become_unknown(self, formatter):
        document = formatter.build_document({None: ["/p/b.py", None], "/p/a.py": []})

        # A missing path sorts as the empty string
        assert [f.path for f in document.files] == ["unknown", "/p/a.py"]
        assert document.files[0].dependencies == ["/p/b.py", "unknown"]

    def test_cycles_rendered_flat(self, formatter):
        document = formatter.build_document(
            {"/p/a.py": ["/p/b.py", "/p/a.py"], "/p/b.py": ["/p/a.py"]}
        )
        assert document.files == [
            FileNode("/p/a.py", ["/p/b.py", "/p/a.py"]),
            FileNode("/p/b.py", ["/p/a.py"]),
        ]

    def test_special_characters_are_escaped(self, formatter):
        weird = '/proj/we"ird & <odd>.py'
        xml_text = formatter.serialize_document(
            formatter.build_document({weird: [weird]})
        )

        assert '"ird' not in xml_text
        assert "&quot;" in xml_text
        assert "&amp;" in xml_text
        assert "&lt;odd&gt;" in xml_text

        root = ET.fromstring(xml_text.split("\n", 1)[1])
        file_el = root.find("file")
        assert file_el.get("path") == weird
        assert file_el.find("dependency").get("path") == weird

    def test_serialization_failure_returns_error_document(self, formatter):
        document = ReportDocument(files=[FileNode("/p/a.py", ["/p/b.py"])])

        with patch.object(report_formatter.ET, "tostring", side_effect=RuntimeError("boom <x>")):
            xml_text = formatter.serialize_document(document)

        assert xml_text.startswith('<?xml version="1.0" encoding="UTF-8"?>\n')
        error = ET.fromstring(xml_text.split("\n", 1)[1])
        assert error.tag == "error"
        assert error.text == "Failed to generate XML: boom <x>"


# ─── build_summary ──────────────────────────────────────────


class TestSummary:
    """Tests for the human-readable summary."""

    def test_empty_map(self, formatter):
        summary = formatter.build_summary({}, "src/app.py")

        assert "Dependencies Analysis for: src/app.py" in summary
        assert "No dependencies found" in summary
        assert "- Files analyzed: 0" in summary
        assert "Dependency breakdown:" not in summary

    def test_single_file(self, formatter):
        summary = formatter.build_summary(SINGLE_FILE_MAP, "A.kt")

        assert "- Files analyzed: 1" in summary
        assert "- Total dependencies: 2" in summary
        assert "A.kt: 2 dependencies" in summary
        assert "  └─ B.kt" in summary
        assert "  └─ C.kt" in summary
        assert "more" not in summary

    def test_preview_truncated_to_three(self, formatter):
        deps = [f"/proj/dep{i}.py" for i in range(5)]
        summary = formatter.build_summary({"/proj/main.py": deps}, "main.py")
        lines = summary.splitlines()

        assert "- main.py: 5 dependencies" in lines
        previews = [line for line in lines if line.startswith("  └─ dep")]
        assert previews == ["  └─ dep0.py", "  └─ dep1.py", "  └─ dep2.py"]
        assert lines[-1] == "  └─ ... and 2 more"

    def test_exactly_three_has_no_elision(self, formatter):
        deps = ["/p/a.py", "/p/b.py", "/p/c.py"]
        summary = formatter.build_summary({"/p/main.py": deps}, "main.py")
        assert "... and" not in summary

    def test_custom_preview_limit(self):
        formatter = DependencyReportFormatter(preview_limit=1)
        summary = formatter.build_summary({"/p/m.py": ["/p/a.py", "/p/b.py"]}, "m.py")
        assert "  └─ ... and 1 more" in summary

    def test_files_listed_in_map_order(self, formatter):
        summary = formatter.build_summary(MIXED_CASE_MAP, "zeta.py")
        names = [
            line[2:].split(":")[0]
            for line in summary.splitlines()
            if line.endswith(" dependencies")
        ]

        assert names == ["zeta.py", "Beta.py", "alpha.py", "ALPHA2.py"]

    def test_windows_paths_and_missing_names(self, formatter):
        summary = formatter.build_summary({"C:\\proj\\main.py": [None]}, "main.py")
        assert "- main.py: 1 dependencies" in summary
        assert "  └─ unknown" in summary


# ─── persist ────────────────────────────────────────────────


class TestPersist:
    """Tests for the best-effort side-channel write."""

    def test_writes_and_creates_parents(self, formatter, tmp_path):
        destination = tmp_path / "nested" / "dir" / "deps.log"

        assert formatter.persist("<root/>", str(destination)) is True
        assert destination.read_text(encoding="utf-8") == "<root/>"

    def test_overwrites_existing_content(self, formatter, tmp_path):
        destination = tmp_path / "deps.log"
        destination.write_text("old content that is longer", encoding="utf-8")

        formatter.persist("new", str(destination))
        assert destination.read_text(encoding="utf-8") == "new"

    def test_failure_is_swallowed(self, formatter, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory", encoding="utf-8")

        assert formatter.persist("<root/>", str(blocker / "deps.log")) is False

    def test_unexpected_error_is_swallowed(self, formatter, tmp_path):
        with patch.object(report_formatter.Path, "write_text", side_effect=RuntimeError("disk gone")):
            assert formatter.persist("<root/>", str(tmp_path / "deps.log")) is False


# ─── build_envelope / format_report ─────────────────────────


class TestEnvelope:
    """Tests for the JSON envelope and the full pipeline."""

    def test_fixed_key_order(self, formatter):
        envelope = formatter.build_envelope("a.py", 0, 0, "/tmp/deps.log", "", "")
        assert list(json.loads(envelope)) == [
            "target_file",
            "dependencies_count",
            "files_analyzed",
            "output_file",
            "dependencies_summary",
            "dependencies_xml",
        ]

    def test_text_fields_are_escaped(self, formatter):
        tricky = 'quote " backslash \\ newline \n return \r tab \t'
        envelope = formatter.build_envelope(tricky, 1, 1, tricky, tricky, tricky)
        parsed = json.loads(envelope)

        assert parsed["target_file"] == tricky
        assert parsed["dependencies_summary"] == tricky
        assert parsed["dependencies_xml"] == tricky

    def test_counts_match_map(self, formatter, tmp_path):
        report = formatter.format_report(MIXED_CASE_MAP, "zeta.py", str(tmp_path / "deps.log"))
        parsed = json.loads(report.envelope)

        assert parsed["files_analyzed"] == 4
        assert parsed["dependencies_count"] == 4
        assert count_dependencies(MIXED_CASE_MAP) == 4

    def test_end_to_end_single_file(self, formatter, tmp_path):
        destination = tmp_path / "deps.log"
        report = formatter.format_report(SINGLE_FILE_MAP, "A.kt", str(destination))
        parsed = json.loads(report.envelope)

        assert parsed["target_file"] == "A.kt"
        assert parsed["files_analyzed"] == 1
        assert parsed["dependencies_count"] == 2
        assert parsed["output_file"] == str(destination)
        assert "A.kt: 2 dependencies" in parsed["dependencies_summary"]

        root = ET.fromstring(parsed["dependencies_xml"].split("\n", 1)[1])
        files = root.findall("file")
        assert [f.get("path") for f in files] == ["/proj/A.kt"]
        assert [d.get("path") for d in files[0].findall("dependency")] == [
            "/proj/B.kt",
            "/proj/C.kt",
        ]

        assert report.persisted is True
        assert destination.read_text(encoding="utf-8") == parsed["dependencies_xml"]

    def test_persist_failure_leaves_envelope_unchanged(self, formatter, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("", encoding="utf-8")
        with patch.object(formatter, "persist", return_value=True):
            reference = formatter.format_report(SINGLE_FILE_MAP, "A.kt", str(blocker / "deps.log"))
        failed = formatter.format_report(SINGLE_FILE_MAP, "A.kt", str(blocker / "deps.log"))

        assert failed.persisted is False
        assert failed.envelope == reference.envelope
        assert json.loads(failed.envelope)["output_file"] == str(blocker / "deps.log")


class TestShortName:
    def test_short_names(self):
        assert short_name("/proj/src/A.kt") == "A.kt"
        assert short_name("relative.py") == "relative.py"
        assert short_name("") == "unknown"
        assert short_name(None) == "unknown"
