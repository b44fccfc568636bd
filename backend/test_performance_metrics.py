"""
Tests for layout performance metrics: the five scores, their floors on empty
layouts, and the recommendations derived from them.
"""
import pytest

from archflow.services.performance_metrics import (
    calculate_accessibility_score,
    calculate_adjacency_score,
    calculate_all_metrics,
    calculate_circulation_efficiency,
    calculate_daylight_hours,
    calculate_energy_efficiency,
    calculate_space_utilization,
    generate_recommendations,
)


def room(room_id, x, y, w, h, area=None, name=None):
    return {
        "id": room_id,
        "name": name or room_id,
        "area": area if area is not None else w * h,
        "x": x, "y": y, "width": w, "height": h,
    }


def path(from_id, to_id, width):
    return {"from": from_id, "to": to_id, "width": width}


SIDE_BY_SIDE = {
    "rooms": [room("a", 0, 0, 100, 100), room("b", 100, 0, 100, 100)],
    "circulation": [path("a", "b", 4)],
}

SAMPLE_LAYOUTS = [
    {"rooms": [], "circulation": []},
    SIDE_BY_SIDE,
    {
        "rooms": [room("a", 0, 0, 10, 10, area=400), room("b", 50, 80, 5, 5, area=5)],
        "circulation": [path("a", "b", 40), path("a", "ghost", 1)],
    },
    {"rooms": [room("x", 0, 0, 0, 0, area=0)], "circulation": None},
]


# ============================================================================
# Empty layouts
# ============================================================================

class TestEmptyLayout:
    def test_floors(self):
        metrics = calculate_all_metrics({"rooms": [], "circulation": []})
        assert metrics["circulation_efficiency"] == 0
        assert metrics["daylight_hours"] == 3.0
        assert metrics["energy_efficiency"] == 0
        assert metrics["space_utilization"] == 0
        assert metrics["accessibility_score"] == 100

    def test_recommendations_for_empty(self):
        metrics = calculate_all_metrics({})
        types = [r["type"] for r in metrics["recommendations"]]
        assert types == ["circulation", "daylight", "energy"]


# ============================================================================
# Ranges
# ============================================================================

class TestScoreRanges:
    @pytest.mark.parametrize("layout", SAMPLE_LAYOUTS)
    def test_all_scores_in_range(self, layout):
        metrics = calculate_all_metrics(layout)
        for key in ("circulation_efficiency", "energy_efficiency", "space_utilization", "accessibility_score"):
            assert 0 <= metrics[key] <= 100
        assert 3 <= metrics["daylight_hours"] <= 12


# ============================================================================
# Individual scores
# ============================================================================

class TestCirculationEfficiency:
    def test_origin_distance_times_width(self):
        layout = {
            "rooms": [room("a", 0, 0, 10, 10, area=100), room("b", 10, 0, 10, 10, area=100)],
            "circulation": [path("a", "b", 4)],
        }
        # 10 ft * 4 ft over 200 sq ft -> 100 - 0.2 * 50
        assert calculate_circulation_efficiency(layout) == 90

    def test_missing_circulation_scores_zero(self):
        assert calculate_circulation_efficiency({"rooms": [room("a", 0, 0, 10, 10)]}) == 0

    def test_dangling_path_is_skipped(self):
        layout = {"rooms": [room("a", 0, 0, 10, 10)], "circulation": [path("a", "ghost", 4)]}
        assert calculate_circulation_efficiency(layout) == 100

    def test_zero_area_scores_zero(self):
        layout = {"rooms": [room("a", 0, 0, 10, 10, area=0)], "circulation": []}
        assert calculate_circulation_efficiency(layout) == 0


class TestDaylightHours:
    def test_single_room_touches_every_wall(self):
        # weights 0.3 + 1.0 + 0.7 + 0.7, scaled by 100/1000 -> 0.27 * 8 + 4
        layout = {"rooms": [room("a", 0, 0, 10, 10, area=100)]}
        assert calculate_daylight_hours(layout) == pytest.approx(6.2)

    def test_clamped_to_maximum(self):
        layout = {"rooms": [room("a", 0, 0, 100, 100, area=10000)]}
        assert calculate_daylight_hours(layout) == 12.0

    def test_zero_size_building(self):
        layout = {"rooms": [room("a", 5, 5, 0, 0, area=0)]}
        assert calculate_daylight_hours(layout) == 4.0


class TestEnergyEfficiency:
    def test_adjacent_rooms_detected(self):
        assert calculate_adjacency_score(SIDE_BY_SIDE["rooms"]) == 1.0

    def test_adjacency_contributes(self):
        separated = {"rooms": [room("a", 0, 0, 100, 100), room("b", 150, 0, 100, 100)]}
        assert calculate_adjacency_score(separated["rooms"]) == 0.0
        assert calculate_energy_efficiency(SIDE_BY_SIDE) == 63
        assert calculate_energy_efficiency(separated) == 49

    def test_single_room_has_no_pairs(self):
        assert calculate_adjacency_score([room("a", 0, 0, 1, 1)]) == 0.0


class TestSpaceUtilization:
    def test_fully_packed(self):
        assert calculate_space_utilization(SIDE_BY_SIDE) == 100

    def test_capped_at_100(self):
        layout = {"rooms": [room("a", 0, 0, 10, 10, area=500)]}
        assert calculate_space_utilization(layout) == 100

    def test_half_used(self):
        layout = {"rooms": [room("a", 0, 0, 10, 10), room("b", 10, 10, 10, 10)]}
        assert calculate_space_utilization(layout) == 50


class TestAccessibilityScore:
    def test_all_paths_wide_enough(self):
        assert calculate_accessibility_score(SIDE_BY_SIDE) == 100

    def test_narrow_path_fails_rooms_too(self):
        layout = {"rooms": SIDE_BY_SIDE["rooms"], "circulation": [path("a", "b", 3)]}
        assert calculate_accessibility_score(layout) == 0

    def test_unconnected_room(self):
        layout = {
            "rooms": SIDE_BY_SIDE["rooms"] + [room("c", 200, 0, 10, 10)],
            "circulation": [path("a", "b", 4)],
        }
        assert calculate_accessibility_score(layout) == 75

    def test_custom_minimum_width(self):
        layout = {"rooms": SIDE_BY_SIDE["rooms"], "circulation": [path("a", "b", 3)]}
        assert calculate_accessibility_score(layout, {"min_corridor_width": 3}) == 100


# ============================================================================
# Recommendations
# ============================================================================

class TestRecommendations:
    def test_none_when_all_good(self):
        metrics = {
            "circulation_efficiency": 90, "daylight_hours": 8,
            "energy_efficiency": 80, "accessibility_score": 100,
        }
        assert generate_recommendations(metrics) == []

    def test_fixed_order_and_priorities(self):
        metrics = {
            "circulation_efficiency": 10, "daylight_hours": 3,
            "energy_efficiency": 10, "accessibility_score": 50,
        }
        recommendations = generate_recommendations(metrics)
        assert [(r["type"], r["priority"]) for r in recommendations] == [
            ("circulation", "high"),
            ("daylight", "medium"),
            ("energy", "high"),
            ("accessibility", "critical"),
        ]
        assert all(r["message"] and r["impact"] for r in recommendations)

    def test_options_reach_accessibility(self):
        layout = {"rooms": SIDE_BY_SIDE["rooms"], "circulation": [path("a", "b", 3)]}
        metrics = calculate_all_metrics(layout, {"accessibility": {"min_corridor_width": 3}})
        assert metrics["accessibility_score"] == 100
