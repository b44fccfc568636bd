# backend/archflow/services/exporters.py
"""
Layout Export Encoders
======================

Pure encoders from layout data to file content:

- DXF (AutoCAD R2000) via ezdxf: ROOMS / CIRCULATION / TEXT layers
- SVG via svgwrite: rooms as rects, circulation as lines
- JSON envelope: version, timestamp, caller metadata, layout echo
- CSV room schedule

Circulation paths whose endpoints do not resolve are skipped silently.
None of the encoders modify the layout they are given.
"""

import io
import json
import logging
import re
from datetime import datetime, timezone
from typing import Dict, Any, List, Optional

import ezdxf
from ezdxf.enums import TextEntityAlignment
import svgwrite

from .geometry import (
    EXPORT_EMPTY_BOUNDS,
    calculate_bounds,
    bounds_size,
    get_circulation,
    get_room_center,
    get_rooms,
    index_rooms_by_id,
    resolve_path_endpoints,
)

logger = logging.getLogger(__name__)


# =============================================================================
# CONSTANTS
# =============================================================================

JSON_EXPORT_VERSION = "1.0"

DXF_VERSION = "R2000"  # AC1015
DXF_TEXT_HEIGHT = 12

# $INSUNITS codes
DXF_UNITS = {
    'inches': 1,
    'feet': 2,
}

# Layer name -> ACI colour
DXF_LAYERS = {
    'ROOMS': 1,        # red
    'CIRCULATION': 2,  # yellow
    'TEXT': 7,         # white/black
}

DEFAULT_SVG_OPTIONS = {
    'width': 800,
    'height': 600,
    'scale': 1,
    'include_text': True,
    'background_color': '#ffffff',
    'room_color': '#e5e7eb',
    'room_stroke': '#374151',
    'circulation_color': '#3b82f6',
}

XML_ILLEGAL_CHARS = re.compile(r'[^\x09\x0a\x0d\x20-\ud7ff\ue000-\ufffd\U00010000-\U0010ffff]')

CSV_HEADERS = ['Room ID', 'Room Name', 'Area (sq ft)', 'Width (ft)', 'Height (ft)', 'X Position', 'Y Position']


def format_number(value: Any) -> str:
    """Render numbers without a trailing .0 (12.0 -> '12', 12.5 -> '12.5')."""
    if value is None:
        return ''
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def xml_safe_text(value: Any) -> str:
    """Drop characters outside the XML 1.0 Char range (control codes etc.)."""
    return XML_ILLEGAL_CHARS.sub('', '' if value is None else str(value))


def _resolved_paths(rooms: List[Dict], circulation: List[Dict]):
    """Yield (path, from_room, to_room) for paths with known endpoints."""
    rooms_by_id = index_rooms_by_id(rooms)
    for path in circulation:
        endpoints = resolve_path_endpoints(path, rooms_by_id)
        if endpoints is None:
            logger.debug(f"Export: skipping path {path.get('from')} -> {path.get('to')} (unknown room)")
            continue
        yield path, endpoints[0], endpoints[1]


# =============================================================================
# DXF
# =============================================================================

def export_to_dxf(layout_data: Dict, options: Optional[Dict[str, Any]] = None) -> str:
    """
    Export layout to DXF text.

    Options:
        units: 'feet' (default) or 'inches', written to $INSUNITS
        scale: multiplier applied to every coordinate (default 1)
        include_text: label rooms at their centres (default True)
    """
    options = options or {}
    units = options.get('units', 'feet')
    scale = options.get('scale', 1)
    include_text = options.get('include_text', True)

    if units not in DXF_UNITS:
        raise ValueError(f"Unsupported DXF units: {units}")

    rooms = get_rooms(layout_data)
    circulation = get_circulation(layout_data)

    doc = ezdxf.new(DXF_VERSION)
    doc.header['$INSUNITS'] = DXF_UNITS[units]
    for name, color in DXF_LAYERS.items():
        doc.layers.add(name, color=color)

    msp = doc.modelspace()

    for room in rooms:
        x = room.get('x', 0) * scale
        y = room.get('y', 0) * scale
        w = room.get('width', 0) * scale
        h = room.get('height', 0) * scale

        # 4 corners plus the first corner again
        msp.add_lwpolyline(
            [(x, y), (x + w, y), (x + w, y + h), (x, y + h), (x, y)],
            close=True,
            dxfattribs={'layer': 'ROOMS'},
        )

        if include_text:
            center = (x + w / 2, y + h / 2)
            msp.add_text(
                str(room.get('name', '')),
                height=DXF_TEXT_HEIGHT,
                dxfattribs={'layer': 'TEXT', 'style': 'Standard'},
            ).set_placement(center, align=TextEntityAlignment.MIDDLE_CENTER)

    for path, from_room, to_room in _resolved_paths(rooms, circulation):
        msp.add_line(
            get_room_center(from_room, scale),
            get_room_center(to_room, scale),
            dxfattribs={'layer': 'CIRCULATION'},
        )

    stream = io.StringIO()
    doc.write(stream)
    return stream.getvalue()


# =============================================================================
# SVG
# =============================================================================

def export_to_svg(layout_data: Dict, options: Optional[Dict[str, Any]] = None) -> str:
    """
    Export layout to an SVG document.

    The viewBox covers the room bounding box (a 100x100 box when there are
    no rooms) multiplied by options['scale'].
    """
    opts = dict(DEFAULT_SVG_OPTIONS)
    opts.update(options or {})
    scale = opts['scale']

    rooms = get_rooms(layout_data)
    circulation = get_circulation(layout_data)

    bounds = calculate_bounds(rooms, EXPORT_EMPTY_BOUNDS)
    view_width, view_height = bounds_size(bounds)

    dwg = svgwrite.Drawing(size=(opts['width'], opts['height']))
    dwg.viewbox(bounds['min_x'] * scale, bounds['min_y'] * scale, view_width * scale, view_height * scale)

    dwg.defs.add(dwg.style(
        f".room {{ fill: {opts['room_color']}; stroke: {opts['room_stroke']}; stroke-width: 2; }}\n"
        ".room-text { font-family: Arial, sans-serif; font-size: 14px; text-anchor: middle; dominant-baseline: middle; }\n"
        f".circulation {{ stroke: {opts['circulation_color']}; stroke-width: 3; }}"
    ))
    dwg.add(dwg.rect(insert=(0, 0), size=('100%', '100%'), fill=opts['background_color']))

    for room in rooms:
        x = room.get('x', 0) * scale
        y = room.get('y', 0) * scale
        w = room.get('width', 0) * scale
        h = room.get('height', 0) * scale

        dwg.add(dwg.rect(insert=(x, y), size=(w, h), class_='room'))
        if opts['include_text']:
            dwg.add(dwg.text(xml_safe_text(room.get('name', '')), insert=(x + w / 2, y + h / 2), class_='room-text'))

    for path, from_room, to_room in _resolved_paths(rooms, circulation):
        dwg.add(dwg.line(
            start=get_room_center(from_room, scale),
            end=get_room_center(to_room, scale),
            class_='circulation',
        ))

    stream = io.StringIO()
    dwg.write(stream, pretty=True)
    return stream.getvalue()


# =============================================================================
# JSON
# =============================================================================

def export_to_json(layout_data: Dict, metadata: Optional[Dict[str, Any]] = None) -> str:
    """
    Wrap the layout in a versioned envelope.

    The 'layout' field is the input echoed back unchanged, so parsing the
    output and reading 'layout' returns an equal structure.
    """
    exported_at = datetime.now(timezone.utc).isoformat(timespec='milliseconds').replace('+00:00', 'Z')
    envelope = {
        'version': JSON_EXPORT_VERSION,
        'exportedAt': exported_at,
        'metadata': metadata if metadata is not None else {},
        'layout': layout_data,
    }
    return json.dumps(envelope, indent=2, default=str)


# =============================================================================
# CSV
# =============================================================================

def _quote(value: Any) -> str:
    text = '' if value is None else str(value)
    return '"' + text.replace('"', '""') + '"'


def export_room_schedule_to_csv(rooms: Optional[List[Dict]]) -> str:
    """
    Room schedule, one row per room.

    Room names are always quoted; ids and numbers are written bare.
    """
    lines = [','.join(CSV_HEADERS)]

    for room in rooms or []:
        lines.append(','.join([
            format_number(room.get('id')),
            _quote(room.get('name')),
            format_number(room.get('area')),
            format_number(room.get('width')),
            format_number(room.get('height')),
            format_number(room.get('x')),
            format_number(room.get('y')),
        ]))

    return '\n'.join(lines) + '\n'
