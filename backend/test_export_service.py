"""
Tests for the export format registry, download filenames and batch export.
"""
import json
from datetime import date

import pytest

from archflow.services.export_service import (
    EXPORT_FORMATS,
    UnsupportedExportFormatError,
    build_export_filename,
    export_layout,
    export_multiple_formats,
    get_supported_formats,
    sanitize_project_name,
)

LAYOUT = {
    "rooms": [{"id": "r1", "name": "Office", "area": 100, "x": 0, "y": 0, "width": 10, "height": 10}],
    "circulation": [],
}

EXPORT_DATE = date(2024, 3, 5)


# ============================================================================
# Filenames
# ============================================================================

class TestFilenames:
    def test_punctuation_and_spaces_removed(self):
        assert build_export_filename("My Project!", "svg", EXPORT_DATE) == "MyProject_2024-03-05.svg"

    def test_underscores_kept(self):
        assert sanitize_project_name("floor_plan-v2") == "floor_planv2"

    @pytest.mark.parametrize("name", [None, "", "!!!"])
    def test_empty_falls_back(self, name):
        assert build_export_filename(name, "dxf", EXPORT_DATE) == "layout_2024-03-05.dxf"


# ============================================================================
# Registry
# ============================================================================

class TestRegistry:
    def test_formats(self):
        keys = [f["key"] for f in get_supported_formats()]
        assert keys == ["dxf", "svg", "pdf", "pdf_document", "json", "csv"]

    def test_pdf_report_is_html(self):
        assert EXPORT_FORMATS["pdf"].extension == "html"
        assert EXPORT_FORMATS["pdf"].mime_type == "text/html"

    def test_listing_has_no_encoder(self):
        assert "encode" not in get_supported_formats()[0]


# ============================================================================
# Single export
# ============================================================================

class TestExportLayout:
    def test_json(self):
        result = export_layout(LAYOUT, {"name": "Demo"}, "json", EXPORT_DATE)
        assert result["success"] is True
        assert result["filename"] == "Demo_2024-03-05.json"
        assert result["mime_type"] == "application/json"
        assert json.loads(result["content"])["metadata"] == {"name": "Demo"}
        assert result["size"] == len(result["content"].encode("utf-8"))

    def test_format_key_case_insensitive(self):
        assert export_layout(LAYOUT, None, "SVG", EXPORT_DATE)["mime_type"] == "image/svg+xml"

    def test_csv(self):
        result = export_layout(LAYOUT, None, "csv", EXPORT_DATE)
        assert result["content"].splitlines()[1] == 'r1,"Office",100,10,10,0,0'

    def test_pdf_document_bytes(self):
        result = export_layout(LAYOUT, None, "pdf_document", EXPORT_DATE)
        assert result["content"].startswith(b"%PDF")
        assert result["size"] == len(result["content"])
        assert result["filename"].endswith(".pdf")

    def test_unsupported(self):
        with pytest.raises(UnsupportedExportFormatError, match="Unsupported format: bogus"):
            export_layout(LAYOUT, None, "bogus")


# ============================================================================
# Batch export
# ============================================================================

class TestBatchExport:
    def test_default_formats(self):
        results = export_multiple_formats(LAYOUT, {"name": "Demo"}, export_date=EXPORT_DATE)
        assert list(results) == ["svg", "dxf", "json"]
        assert all(r["success"] for r in results.values())

    def test_failure_is_isolated(self):
        results = export_multiple_formats(LAYOUT, None, ["svg", "bogus"], EXPORT_DATE)
        assert results["svg"]["success"] is True
        assert results["bogus"] == {"success": False, "error": "Unsupported format: bogus"}

    def test_encoder_error_is_isolated(self, monkeypatch):
        def broken(layout, info):
            raise RuntimeError("encoder exploded")

        monkeypatch.setitem(EXPORT_FORMATS, "dxf", EXPORT_FORMATS["dxf"].__class__(
            **{**EXPORT_FORMATS["dxf"].to_dict(), "encode": broken}
        ))
        results = export_multiple_formats(LAYOUT, None, ["dxf", "json"], EXPORT_DATE)
        assert results["dxf"] == {"success": False, "error": "encoder exploded"}
        assert results["json"]["success"] is True
