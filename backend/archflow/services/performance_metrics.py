# backend/archflow/services/performance_metrics.py
"""
Layout Performance Metrics
==========================

Derives five independent scores from a layout plus a list of advisory
recommendations:

- Circulation efficiency (0-100): circulation "area" versus usable area
- Daylight hours (3-12): exterior-wall proximity weighted by orientation
- Energy efficiency (0-100): compactness, perimeter ratio, shared walls
- Space utilization (0-100): room area versus bounding-box area
- Accessibility score (0-100): corridor widths and room access

The daylight and energy figures are heuristics. Their constants (daylight
x8 + 4 clamped to 3-12, energy weights 0.4/0.3/0.3) are kept for
compatibility with earlier reports and are not validated building-science
formulas. The daylight score in particular is a proxy for solar exposure,
not a daylight simulation.

None of these functions raise on incomplete data: missing collections,
empty layouts and circulation paths pointing at unknown rooms all degrade
to low scores or the documented floor.
"""

from typing import Dict, Any, List, Optional
import logging

from .geometry import (
    METRICS_EMPTY_BOUNDS,
    calculate_bounds,
    bounds_size,
    clamp,
    euclidean_distance,
    get_circulation,
    get_room_origin,
    get_rooms,
    index_rooms_by_id,
    resolve_path_endpoints,
    rooms_share_edge,
    round_half_up,
    total_room_area,
)

logger = logging.getLogger(__name__)


# =============================================================================
# CONSTANTS
# =============================================================================

DEFAULT_MIN_CORRIDOR_WIDTH = 4.0  # feet

# Sun exposure weights per exterior wall (top edge of the plan is north)
ORIENTATION_WEIGHTS = {
    'north': 0.3,
    'south': 1.0,
    'east': 0.7,
    'west': 0.7,
}

DAYLIGHT_MIN_HOURS = 3.0
DAYLIGHT_MAX_HOURS = 12.0
DAYLIGHT_AREA_NORMALIZER = 1000.0  # sq ft

ENERGY_WEIGHTS = {
    'compactness': 0.4,
    'perimeter': 0.3,
    'adjacency': 0.3,
}

# Recommendation thresholds
CIRCULATION_THRESHOLD = 70
DAYLIGHT_THRESHOLD = 6
ENERGY_THRESHOLD = 60
ACCESSIBILITY_THRESHOLD = 90


# =============================================================================
# INDIVIDUAL SCORES
# =============================================================================

def calculate_circulation_efficiency(layout_data: Dict) -> int:
    """
    Score circulation overhead (0-100, higher is better).

    Each resolvable path contributes distance(from origin, to origin) * width
    as an approximate circulation area. The ratio of that to the summed
    room areas is scaled by 50 and subtracted from 100.
    """
    rooms = get_rooms(layout_data)
    if not rooms or layout_data.get('circulation') is None:
        return 0

    rooms_by_id = index_rooms_by_id(rooms)
    circulation_area = 0.0
    skipped = 0

    for path in get_circulation(layout_data):
        endpoints = resolve_path_endpoints(path, rooms_by_id)
        if endpoints is None:
            skipped += 1
            continue
        from_room, to_room = endpoints
        distance = euclidean_distance(get_room_origin(from_room), get_room_origin(to_room))
        circulation_area += distance * path.get('width', 0)

    if skipped:
        logger.debug(f"Circulation efficiency: skipped {skipped} path(s) with unknown rooms")

    usable_area = total_room_area(rooms)
    if usable_area <= 0:
        return 0

    ratio = circulation_area / usable_area
    return round_half_up(clamp(100 - ratio * 50, 0, 100))


def calculate_daylight_hours(layout_data: Dict) -> float:
    """
    Estimate average daylight hours per day (3-12).

    For every room, proximity to each exterior wall of the bounding box is
    1 - distance/building_dimension (floored at 0), weighted by
    ORIENTATION_WEIGHTS and scaled by room area / 1000 sq ft. The average
    over rooms maps to hours through avg * 8 + 4.
    """
    rooms = get_rooms(layout_data)
    if not rooms:
        return DAYLIGHT_MIN_HOURS

    bounds = calculate_bounds(rooms, METRICS_EMPTY_BOUNDS)
    building_width, building_height = bounds_size(bounds)

    def proximity(distance: float, dimension: float) -> float:
        # A zero-size building puts every room on its exterior wall
        if dimension <= 0:
            return 1.0
        return max(0.0, 1 - distance / dimension)

    total_score = 0.0
    for room in rooms:
        x, y = room.get('x', 0), room.get('y', 0)
        w, h = room.get('width', 0), room.get('height', 0)

        proximity_scores = {
            'north': proximity(y - bounds['min_y'], building_height),
            'south': proximity(bounds['max_y'] - (y + h), building_height),
            'east': proximity(bounds['max_x'] - (x + w), building_width),
            'west': proximity(x - bounds['min_x'], building_width),
        }
        room_score = sum(
            proximity_scores[direction] * weight
            for direction, weight in ORIENTATION_WEIGHTS.items()
        )
        total_score += room_score * (room.get('area', 0) / DAYLIGHT_AREA_NORMALIZER)

    average_score = total_score / len(rooms)
    hours = clamp(average_score * 8 + 4, DAYLIGHT_MIN_HOURS, DAYLIGHT_MAX_HOURS)
    return round_half_up(hours, 1)


def calculate_adjacency_score(rooms: List[Dict]) -> float:
    """Fraction of room pairs that share a wall (0-1)."""
    adjacent_pairs = 0
    total_pairs = 0

    for i, room1 in enumerate(rooms):
        for room2 in rooms[i + 1:]:
            total_pairs += 1
            if rooms_share_edge(room1, room2):
                adjacent_pairs += 1

    return adjacent_pairs / total_pairs if total_pairs > 0 else 0.0


def calculate_energy_efficiency(layout_data: Dict) -> int:
    """
    Score energy performance of the plan shape (0-100).

    0.4 * compactness + 0.3 * perimeter score + 0.3 * adjacency, where
    compactness = room area / bounding-box area, the perimeter score
    penalises perimeter / sqrt(area), and adjacency rewards shared walls.
    """
    rooms = get_rooms(layout_data)
    if not rooms:
        return 0

    bounds = calculate_bounds(rooms, METRICS_EMPTY_BOUNDS)
    width, height = bounds_size(bounds)
    building_area = width * height
    if building_area <= 0:
        return 0

    compactness = total_room_area(rooms) / building_area
    perimeter = 2 * (width + height)
    perimeter_ratio = perimeter / building_area ** 0.5
    adjacency = calculate_adjacency_score(rooms)

    compactness_score = min(100, compactness * 100)
    perimeter_score = max(0, 100 - perimeter_ratio * 10)
    adjacency_efficiency = adjacency * 20

    total = (compactness_score * ENERGY_WEIGHTS['compactness']
             + perimeter_score * ENERGY_WEIGHTS['perimeter']
             + adjacency_efficiency * ENERGY_WEIGHTS['adjacency'])
    return round_half_up(clamp(total, 0, 100))


def calculate_space_utilization(layout_data: Dict) -> int:
    """Room area as a percentage of the bounding box, capped at 100."""
    rooms = get_rooms(layout_data)
    if not rooms:
        return 0

    width, height = bounds_size(calculate_bounds(rooms, METRICS_EMPTY_BOUNDS))
    building_area = width * height
    if building_area <= 0:
        return 0

    utilization = total_room_area(rooms) / building_area * 100
    return max(0, min(100, round_half_up(utilization)))


def calculate_accessibility_score(
    layout_data: Dict,
    accessibility_settings: Optional[Dict[str, Any]] = None
) -> int:
    """
    Share of accessibility checks passed (0-100).

    One check per circulation path (width >= minimum) and one per room
    (at least one incident path of adequate width). No checks at all
    scores 100.
    """
    settings = accessibility_settings or {}
    min_width = settings.get('min_corridor_width') or DEFAULT_MIN_CORRIDOR_WIDTH

    rooms = get_rooms(layout_data)
    circulation = get_circulation(layout_data)

    total_checks = 0
    failures = 0

    for path in circulation:
        total_checks += 1
        if path.get('width', 0) < min_width:
            failures += 1

    for room in rooms:
        total_checks += 1
        room_id = room.get('id')
        has_access = any(
            (path.get('from') == room_id or path.get('to') == room_id)
            and path.get('width', 0) >= min_width
            for path in circulation
        )
        if not has_access:
            failures += 1

    if total_checks == 0:
        return 100
    return round_half_up(100 * (total_checks - failures) / total_checks)


# =============================================================================
# RECOMMENDATIONS
# =============================================================================

def generate_recommendations(metrics: Dict[str, Any]) -> List[Dict[str, str]]:
    """
    Advisory notes for scores below their thresholds.

    Order is fixed (circulation, daylight, energy, accessibility) and is not
    sorted by priority.
    """
    recommendations = []

    if metrics['circulation_efficiency'] < CIRCULATION_THRESHOLD:
        recommendations.append({
            'type': 'circulation',
            'priority': 'high',
            'message': 'Consider reducing circulation paths or optimizing room adjacencies to improve efficiency.',
            'impact': 'Reduces wasted space and improves flow',
        })

    if metrics['daylight_hours'] < DAYLIGHT_THRESHOLD:
        recommendations.append({
            'type': 'daylight',
            'priority': 'medium',
            'message': 'Position more rooms near exterior walls to increase natural light exposure.',
            'impact': 'Improves occupant wellbeing and reduces lighting costs',
        })

    if metrics['energy_efficiency'] < ENERGY_THRESHOLD:
        recommendations.append({
            'type': 'energy',
            'priority': 'high',
            'message': 'Optimize building shape for better energy performance. Consider more compact design.',
            'impact': 'Reduces heating and cooling costs',
        })

    if metrics['accessibility_score'] < ACCESSIBILITY_THRESHOLD:
        recommendations.append({
            'type': 'accessibility',
            'priority': 'critical',
            'message': 'Ensure all circulation paths meet minimum width requirements for accessibility.',
            'impact': 'Required for code compliance and universal access',
        })

    return recommendations


# =============================================================================
# MAIN ENTRY POINT
# =============================================================================

def calculate_all_metrics(layout_data: Dict, options: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """
    Calculate all performance metrics for a layout.

    Args:
        layout_data: Dict with 'rooms' and 'circulation'
        options: Optional {'accessibility': {'min_corridor_width': feet}}

    Returns:
        Dict with the five scores and a 'recommendations' list
    """
    options = options or {}
    layout_data = layout_data or {}

    metrics = {
        'circulation_efficiency': calculate_circulation_efficiency(layout_data),
        'daylight_hours': calculate_daylight_hours(layout_data),
        'energy_efficiency': calculate_energy_efficiency(layout_data),
        'space_utilization': calculate_space_utilization(layout_data),
        'accessibility_score': calculate_accessibility_score(layout_data, options.get('accessibility')),
    }
    metrics['recommendations'] = generate_recommendations(metrics)

    logger.info(
        f"Metrics for {len(get_rooms(layout_data))} room(s): "
        f"circulation={metrics['circulation_efficiency']} daylight={metrics['daylight_hours']}h "
        f"energy={metrics['energy_efficiency']} utilization={metrics['space_utilization']} "
        f"accessibility={metrics['accessibility_score']}"
    )
    return metrics
