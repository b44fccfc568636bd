# backend/archflow/services/layout_optimizer.py
# Parameter adjustments applied to an existing layout
# Always returns a new layout; the input is left untouched

from typing import Dict, Any, Optional
import copy
import logging

logger = logging.getLogger(__name__)


def scale_room_dimensions(layout_data: Dict, multiplier: float) -> Dict:
    """
    Scale every room's width and height by multiplier (area by its square).

    Room positions are kept, so scaled rooms may overlap or drift apart;
    callers re-run metrics and compliance on the result.
    """
    if multiplier is None or multiplier <= 0:
        raise ValueError(f"Room size multiplier must be positive, got {multiplier}")

    adjusted = copy.deepcopy(layout_data or {})
    adjusted['rooms'] = [
        {
            **room,
            'width': room.get('width', 0) * multiplier,
            'height': room.get('height', 0) * multiplier,
            'area': room.get('area', 0) * multiplier * multiplier,
        }
        for room in adjusted.get('rooms') or []
    ]
    return adjusted


def optimize_layout_parameters(layout_data: Dict, parameters: Optional[Dict[str, Any]] = None) -> Dict:
    """
    Apply user-driven parameter changes to a layout.

    Supported parameters:
        room_size: multiplier for room dimensions
    """
    parameters = parameters or {}
    optimized = copy.deepcopy(layout_data or {})

    room_size = parameters.get('room_size')
    if room_size is not None:
        logger.info(f"Scaling {len(optimized.get('rooms') or [])} room(s) by {room_size}")
        optimized = scale_room_dimensions(optimized, room_size)

    return optimized
