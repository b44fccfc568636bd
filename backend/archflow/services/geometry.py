# backend/archflow/services/geometry.py
# Geometric helpers shared by the metrics, compliance and export services
# Bounding boxes, room lookup, centres/origins and rectangle adjacency
#
# Rooms and circulation paths are plain dicts as received from the layout
# generator. Coordinates are building-local units, (0, 0) top-left.

from typing import Dict, List, Optional, Tuple, Any
import math
import logging

logger = logging.getLogger(__name__)

# =============================================================================
# EMPTY-LAYOUT DEFAULTS
# =============================================================================

# Exports keep a visible 100x100 canvas when there is nothing to draw
EXPORT_EMPTY_BOUNDS = {'min_x': 0, 'max_x': 100, 'min_y': 0, 'max_y': 100}

# Metrics must report exactly zero for an empty layout
METRICS_EMPTY_BOUNDS = {'min_x': 0, 'max_x': 0, 'min_y': 0, 'max_y': 0}

# Exact-coincidence tolerance for shared room edges
EDGE_TOLERANCE = 1e-9


# =============================================================================
# NUMERIC UTILITIES
# =============================================================================

def clamp(value: float, lower: float, upper: float) -> float:
    """Constrain value to the closed interval [lower, upper]."""
    return max(lower, min(upper, value))


def round_half_up(value: float, digits: int = 0) -> float:
    """
    Round with halves going up (2.5 -> 3), not to the nearest even number.

    Python's round() uses banker's rounding; scores are specified with
    conventional rounding so 72.5 must become 73.
    """
    factor = 10 ** digits
    rounded = math.floor(value * factor + 0.5) / factor
    if digits == 0:
        return int(rounded)
    return rounded


def euclidean_distance(p1: Tuple[float, float], p2: Tuple[float, float]) -> float:
    return math.hypot(p2[0] - p1[0], p2[1] - p1[1])


# =============================================================================
# LAYOUT ACCESSORS
# =============================================================================

def get_rooms(layout_data: Optional[Dict]) -> List[Dict]:
    """Rooms of a layout; missing or null collections read as empty."""
    if not layout_data:
        return []
    return layout_data.get('rooms') or []


def get_circulation(layout_data: Optional[Dict]) -> List[Dict]:
    """Circulation paths of a layout; missing or null collections read as empty."""
    if not layout_data:
        return []
    return layout_data.get('circulation') or []


def index_rooms_by_id(rooms: List[Dict]) -> Dict[Any, Dict]:
    """
    Build an id -> room lookup.

    If two rooms share an id the first one wins, so lookups behave like a
    linear search from the start of the room list.
    """
    index = {}
    for room in rooms:
        index.setdefault(room.get('id'), room)
    return index


def resolve_path_endpoints(
    path: Dict,
    rooms_by_id: Dict[Any, Dict]
) -> Optional[Tuple[Dict, Dict]]:
    """
    Return the (from_room, to_room) pair of a circulation path.

    Returns None when either endpoint references a room that does not
    exist. Dangling paths are expected while a layout is being edited and
    are skipped by callers, never treated as errors.
    """
    from_room = rooms_by_id.get(path.get('from'))
    to_room = rooms_by_id.get(path.get('to'))
    if from_room is None or to_room is None:
        return None
    return from_room, to_room


def get_room_origin(room: Dict) -> Tuple[float, float]:
    """Top-left corner of a room."""
    return (room.get('x', 0), room.get('y', 0))


def get_room_center(room: Dict, scale: float = 1) -> Tuple[float, float]:
    """
    Get the center point of a room.

    Returns: (center_x, center_y), multiplied by scale
    """
    x = room.get('x', 0)
    y = room.get('y', 0)
    w = room.get('width', 0)
    h = room.get('height', 0)
    return ((x + w / 2) * scale, (y + h / 2) * scale)


def total_room_area(rooms: List[Dict]) -> float:
    """Sum of the advisory area fields (sq ft), not width*height."""
    return sum(room.get('area', 0) for room in rooms)


# =============================================================================
# BOUNDING BOX
# =============================================================================

def calculate_bounds(rooms: List[Dict], empty_default: Dict[str, float]) -> Dict[str, float]:
    """
    Axis-aligned bounding box of a room set.

    Args:
        rooms: List of room dicts with x, y, width, height
        empty_default: Box returned when there are no rooms. Pass
            EXPORT_EMPTY_BOUNDS for drawings, METRICS_EMPTY_BOUNDS for scores.

    Returns:
        Dict with min_x, max_x, min_y, max_y
    """
    if not rooms:
        return dict(empty_default)

    first = rooms[0]
    bounds = {
        'min_x': first.get('x', 0),
        'max_x': first.get('x', 0) + first.get('width', 0),
        'min_y': first.get('y', 0),
        'max_y': first.get('y', 0) + first.get('height', 0),
    }
    for room in rooms[1:]:
        x, y = room.get('x', 0), room.get('y', 0)
        bounds['min_x'] = min(bounds['min_x'], x)
        bounds['max_x'] = max(bounds['max_x'], x + room.get('width', 0))
        bounds['min_y'] = min(bounds['min_y'], y)
        bounds['max_y'] = max(bounds['max_y'], y + room.get('height', 0))
    return bounds


def bounds_size(bounds: Dict[str, float]) -> Tuple[float, float]:
    """(width, height) of a bounding box."""
    return (bounds['max_x'] - bounds['min_x'], bounds['max_y'] - bounds['min_y'])


# =============================================================================
# ROOM ADJACENCY DETECTION
# =============================================================================

def _edges_coincide(a: float, b: float, tolerance: float) -> bool:
    return abs(a - b) <= tolerance


def rooms_share_edge(room1: Dict, room2: Dict, tolerance: float = EDGE_TOLERANCE) -> bool:
    """
    Check if two rooms share a wall.

    One room's right edge must equal the other's left edge with a positive
    vertical overlap, or one room's bottom edge must equal the other's top
    edge with a positive horizontal overlap. Corner-only contact and gaps
    of any size do not count.
    """
    x1, y1 = room1.get('x', 0), room1.get('y', 0)
    w1, h1 = room1.get('width', 0), room1.get('height', 0)
    x2, y2 = room2.get('x', 0), room2.get('y', 0)
    w2, h2 = room2.get('width', 0), room2.get('height', 0)

    # Side by side (shared vertical wall)
    horizontal_touch = (_edges_coincide(x1 + w1, x2, tolerance)
                        or _edges_coincide(x2 + w2, x1, tolerance))
    vertical_overlap = not (y1 + h1 <= y2 or y2 + h2 <= y1)

    # One above the other (shared horizontal wall)
    vertical_touch = (_edges_coincide(y1 + h1, y2, tolerance)
                      or _edges_coincide(y2 + h2, y1, tolerance))
    horizontal_overlap = not (x1 + w1 <= x2 or x2 + w2 <= x1)

    return (horizontal_touch and vertical_overlap) or (vertical_touch and horizontal_overlap)
