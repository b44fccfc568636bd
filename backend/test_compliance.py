"""
Tests for the building-code rule tables and the compliance engine.
"""
import pytest

from archflow.services.building_codes import (
    BUILDING_CODES,
    RoomType,
    Threshold,
    Unit,
    get_applicable_codes,
    get_available_codes,
    get_rule_table,
    get_supported_countries,
)
from archflow.services.compliance import (
    check_compliance,
    generate_compliance_report,
    infer_room_type,
    requires_turning_space,
)


def room(room_id, name, area, x=0, y=0, w=10, h=10):
    return {"id": room_id, "name": name, "area": area, "x": x, "y": y, "width": w, "height": h}


def single_path_layout(width):
    return {
        "rooms": [room("r1", "Lobby", 200), room("r2", "Hall", 200, x=10)],
        "circulation": [{"from": "r1", "to": "r2", "width": width}],
    }


OFFICE_MEETING = {
    "rooms": [
        room("office", "office", 50),
        room("meeting", "meeting", 150, x=10),
    ],
    "circulation": [{"from": "office", "to": "meeting", "width": 2}],
}


# ============================================================================
# Rule tables
# ============================================================================

class TestRuleTables:
    def test_registry_keys(self):
        assert set(BUILDING_CODES["US"]) == {"IBC", "ADA", "IRC"}
        assert set(BUILDING_CODES["CA"]) == {"NBC"}

    def test_registry_is_read_only(self):
        with pytest.raises(TypeError):
            BUILDING_CODES["ZZ"] = {}

    def test_unknown_codes_are_dropped(self):
        tables = get_applicable_codes("US", ["ADA", "NOPE", "IBC"])
        assert [t.key for t in tables] == ["ADA", "IBC"]
        assert get_applicable_codes("ZZ", ["IBC"]) == []

    def test_millimetres_convert_to_inches(self):
        assert Threshold(1100, Unit.MILLIMETERS).to_inches() == 43.3
        assert Threshold(4, Unit.FEET).to_inches() == 48

    def test_area_threshold_rejects_lengths(self):
        with pytest.raises(ValueError):
            Threshold(36, Unit.INCHES).to_square_feet()

    def test_rule_table_serializes_units(self):
        data = get_rule_table("CA", "NBC").to_dict()
        assert data["corridor_width"] == {"value": 1100, "unit": "millimeters", "description": "Minimum corridor width"}
        assert get_rule_table("US", "IRC").to_dict()["room_area"]["bedroom"]["value"] == 70

    def test_country_listing(self):
        countries = {c["code"]: c for c in get_supported_countries()}
        assert countries["US"]["name"] == "United States"
        assert [c["key"] for c in get_available_codes("CA")] == ["NBC"]


# ============================================================================
# Room classification
# ============================================================================

class TestInferRoomType:
    @pytest.mark.parametrize("name,expected", [
        ("Office Kitchenette", RoomType.OFFICE),
        ("Conference Room", RoomType.MEETING),
        ("Staff Bathroom", RoomType.RESTROOM),
        ("Master Bedroom", RoomType.BEDROOM),
        ("KITCHEN", RoomType.KITCHEN),
        ("Living Area", RoomType.LIVING),
        ("Storage", RoomType.GENERAL),
        (None, RoomType.GENERAL),
    ])
    def test_first_match_wins(self, name, expected):
        assert infer_room_type(name) == expected

    def test_turning_space_rooms(self):
        assert requires_turning_space("Meeting Room")
        assert not requires_turning_space("Bedroom")


# ============================================================================
# Compliance checks
# ============================================================================

class TestCheckCompliance:
    def test_unknown_country_is_config_error(self):
        result = check_compliance(single_path_layout(4), {"country": "ZZ", "codes": ["IBC"]})
        assert result["status"] == "error"
        assert len(result["issues"]) == 1
        assert result["issues"][0]["code"] == "CONFIG_ERROR"
        assert result["issues"][0]["severity"] == "error"
        assert result["summary"] == {"total_checks": 0, "passed": 0, "failed": 0, "warnings": 0}

    def test_ada_narrow_path(self):
        result = check_compliance(single_path_layout(3), {"country": "US", "codes": ["ADA"]})
        assert result["status"] == "non-compliant"
        critical = [i for i in result["issues"] if i["severity"] == "critical"]
        assert any(i["code"].endswith(("_ACCESSIBLE_ROUTE", "_CORRIDOR_WIDTH")) for i in critical)

    def test_ibc_office_and_corridor(self):
        result = check_compliance(OFFICE_MEETING, {"country": "US", "codes": ["IBC"]})
        assert result["status"] == "non-compliant"

        area_issues = [i for i in result["issues"] if i["type"] == "room_area"]
        assert len(area_issues) == 1
        assert area_issues[0]["location"] == "office"
        assert area_issues[0]["required"] == 80
        assert area_issues[0]["actual"] == 50

        corridor = [i for i in result["issues"] if i["code"] == "IBC_CORRIDOR_WIDTH"]
        assert len(corridor) == 1
        assert corridor[0]["actual"] == 24
        assert corridor[0]["required"] == 44
        assert corridor[0]["unit"] == "inches"

    def test_ibc_check_counts(self):
        result = check_compliance(OFFICE_MEETING, {"country": "US", "codes": ["IBC"]})
        # corridor, accessible route and exit width fail; meeting area and both turning spaces pass
        assert result["summary"] == {"total_checks": 7, "passed": 3, "failed": 4, "warnings": 0}

    @pytest.mark.parametrize("settings", [
        {"country": "US", "codes": ["IBC", "ADA", "IRC"]},
        {"country": "US", "codes": ["ADA"], "accessibility": False},
        {"country": "CA", "codes": ["NBC"]},
        None,
    ])
    def test_total_checks_invariant(self, settings):
        summary = check_compliance(OFFICE_MEETING, settings)["summary"]
        assert summary["total_checks"] == summary["passed"] + summary["failed"] + summary["warnings"]

    def test_accessibility_disabled(self):
        result = check_compliance(single_path_layout(3), {"country": "US", "codes": ["ADA"], "accessibility": False})
        codes = [i["code"] for i in result["issues"] + result["warnings"]]
        assert not any(c.endswith(("_ACCESSIBLE_ROUTE", "_TURNING_SPACE")) for c in codes)
        assert result["status"] == "compliant"

    def test_accessibility_none_means_default_on(self):
        result = check_compliance(single_path_layout(3), {"country": "US", "codes": ["ADA"], "accessibility": None})
        assert result["status"] == "non-compliant"
        assert any(i["code"] == "ADA_ACCESSIBLE_ROUTE" for i in result["issues"])

    def test_turning_space_warning(self):
        layout = {
            "rooms": [room("wc", "Restroom", 20)],
            "circulation": [],
        }
        result = check_compliance(layout, {"country": "US", "codes": ["ADA"]})
        assert result["status"] == "warning"
        assert result["issues"] == []
        warning = result["warnings"][0]
        assert warning["code"] == "ADA_TURNING_SPACE"
        assert warning["required"] == 25
        assert "60\"" in warning["recommendation"]

    def test_canada_converts_millimetres(self):
        passing = check_compliance(single_path_layout(4), {"country": "CA", "codes": ["NBC"]})
        assert passing["status"] == "compliant"

        failing = check_compliance(single_path_layout(3), {"country": "CA", "codes": ["NBC"]})
        issue = failing["issues"][0]
        assert issue["code"] == "NBC_CORRIDOR_WIDTH"
        assert issue["required"] == 43.3
        assert issue["actual"] == 36

    def test_defaults_to_us_ibc_ada(self):
        result = check_compliance(single_path_layout(3))
        codes = {i["code"].split("_")[0] for i in result["issues"]}
        assert codes == {"IBC", "ADA"}

    def test_dangling_paths_are_checked_not_raised(self):
        layout = {"rooms": [], "circulation": [{"from": "a", "to": "b", "width": 5}]}
        result = check_compliance(layout, {"country": "US", "codes": ["IBC"]})
        assert result["status"] == "compliant"


# ============================================================================
# Report
# ============================================================================

class TestComplianceReport:
    def test_rate_and_recommendations(self):
        result = check_compliance(OFFICE_MEETING, {"country": "US", "codes": ["IBC"]})
        report = generate_compliance_report(result)

        assert report["summary"]["compliance_rate"] == 43  # 3 of 7
        titles = [r["title"] for r in report["recommendations"]]
        assert titles == ["Increase Corridor Widths", "Increase Room Sizes", "Improve Accessibility"]
        assert report["recommendations"][0]["description"].startswith("1 corridor(s)")
        assert len(report["critical_issues"]) == 4
        assert report["next_steps"][0] == "Address all critical compliance issues before proceeding"

    def test_rate_without_checks(self):
        report = generate_compliance_report({"status": "compliant", "issues": [], "warnings": [],
                                             "summary": {"total_checks": 0, "passed": 0}})
        assert report["summary"]["compliance_rate"] == 100
        assert report["next_steps"][0] == "Layout appears to meet basic code requirements"

    def test_input_not_modified(self):
        result = check_compliance(OFFICE_MEETING, {"country": "US", "codes": ["IBC"]})
        generate_compliance_report(result)
        assert "compliance_rate" not in result["summary"]
