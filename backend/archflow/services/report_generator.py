"""
Layout report exports.

export_to_pdf builds the printable HTML report (open in a browser and print
to PDF). export_to_pdf_document renders the same content as an actual PDF
with reportlab.
"""

import html
import logging
from io import BytesIO
from datetime import datetime
from typing import Dict, Any, List, Optional

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm
from reportlab.platypus import SimpleDocTemplate, Table, TableStyle, Paragraph, Spacer
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.lib.enums import TA_CENTER
from reportlab.graphics.shapes import Drawing, Rect, String, Line

from .compliance import infer_room_type
from .exporters import export_to_svg, format_number
from .geometry import (
    EXPORT_EMPTY_BOUNDS,
    bounds_size,
    calculate_bounds,
    get_circulation,
    get_room_center,
    get_rooms,
    index_rooms_by_id,
    resolve_path_endpoints,
    total_room_area,
)

logger = logging.getLogger(__name__)

REPORT_TITLE = "ArchFlow Layout Report"

METRIC_LABELS = [
    ('circulation_efficiency', 'Circulation Efficiency', '%'),
    ('daylight_hours', 'Daylight Hours', 'h'),
    ('energy_efficiency', 'Energy Efficiency', '%'),
    ('space_utilization', 'Space Utilization', '%'),
    ('accessibility_score', 'Accessibility Score', '%'),
]

HTML_STYLES = """
        body { font-family: Arial, sans-serif; margin: 20px; }
        .header { text-align: center; margin-bottom: 30px; }
        .project-info { margin-bottom: 20px; }
        .layout-container { text-align: center; margin: 20px 0; }
        .metrics { display: grid; grid-template-columns: repeat(auto-fit, minmax(200px, 1fr)); gap: 15px; margin: 20px 0; }
        .metric-card { border: 1px solid #ddd; padding: 15px; border-radius: 8px; }
        .metric-value { font-size: 24px; font-weight: bold; color: #3b82f6; }
        .metric-label { font-size: 14px; color: #666; }
        .section { margin: 20px 0; }
        .section h3 { color: #374151; border-bottom: 2px solid #e5e7eb; padding-bottom: 5px; }
        @media print { body { margin: 0; } }
"""


def _compliance_rate(compliance: Dict[str, Any]) -> Optional[Any]:
    """Rate from a report, a summary, or None when it was never computed."""
    if compliance.get('compliance_rate') is not None:
        return compliance['compliance_rate']
    return (compliance.get('summary') or {}).get('compliance_rate')


def _strip_xml_declaration(svg: str) -> str:
    if svg.startswith('<?xml'):
        return svg.split('?>', 1)[1].lstrip()
    return svg


# =============================================================================
# HTML (print-to-PDF) REPORT
# =============================================================================

def export_to_pdf(
    layout_data: Dict,
    project_info: Optional[Dict[str, Any]] = None,
    options: Optional[Dict[str, Any]] = None
) -> str:
    """
    Build the printable HTML report.

    Metrics and compliance sections appear only when project_info carries
    'metrics' / 'compliance' and the matching include_* option is on.
    """
    project_info = project_info or {}
    options = options or {}
    include_metrics = options.get('include_metrics', True)
    include_compliance = options.get('include_compliance', True)

    rooms = get_rooms(layout_data)
    svg = _strip_xml_declaration(export_to_svg(layout_data, {'width': 600, 'height': 400}))

    def esc(value: Any) -> str:
        return html.escape(str(value))

    parts = [f"""<!DOCTYPE html>
<html>
<head>
    <meta charset="UTF-8">
    <title>{esc(REPORT_TITLE)}</title>
    <style>{HTML_STYLES}    </style>
</head>
<body>
    <div class="header">
        <h1>{esc(REPORT_TITLE)}</h1>
        <p>Generated on {datetime.now().strftime('%d %B %Y')}</p>
    </div>

    <div class="project-info">
        <h2>Project Information</h2>
        <p><strong>Project Name:</strong> {esc(project_info.get('name') or 'Untitled Project')}</p>
        <p><strong>Layout Name:</strong> {esc(project_info.get('layout_name') or 'Layout')}</p>
        <p><strong>Total Area:</strong> {format_number(total_room_area(rooms))} sq ft</p>
        <p><strong>Number of Rooms:</strong> {len(rooms)}</p>
    </div>

    <div class="layout-container">
        <h3>Floor Plan</h3>
        {svg}
    </div>
"""]

    metrics = project_info.get('metrics')
    if include_metrics and metrics:
        cards = []
        for key, label, suffix in METRIC_LABELS:
            if key not in metrics:
                continue
            cards.append(f"""            <div class="metric-card">
                <div class="metric-value">{esc(metrics[key])}{suffix}</div>
                <div class="metric-label">{label}</div>
            </div>""")
        parts.append(f"""
    <div class="section">
        <h3>Performance Metrics</h3>
        <div class="metrics">
{chr(10).join(cards)}
        </div>
    </div>""")

    compliance = project_info.get('compliance')
    if include_compliance and compliance:
        rate = _compliance_rate(compliance)
        parts.append(f"""
    <div class="section">
        <h3>Code Compliance</h3>
        <p><strong>Status:</strong> {esc(compliance.get('status', 'unknown'))}</p>
        <p><strong>Compliance Rate:</strong> {esc(rate if rate is not None else 'N/A')}%</p>
    </div>""")

    parts.append("""
</body>
</html>""")

    return ''.join(parts)


# =============================================================================
# REPORTLAB PDF DOCUMENT
# =============================================================================

class LayoutPDFGenerator:
    """Generate a PDF report for a layout"""

    def __init__(self):
        self.page_width, self.page_height = A4
        self.margin = 15 * mm
        self.drawing_width = self.page_width - 2 * self.margin
        self.drawing_height = 110 * mm

    def generate(self, layout_data: Dict, project_info: Dict[str, Any]) -> bytes:
        buffer = BytesIO()
        doc = SimpleDocTemplate(
            buffer,
            pagesize=A4,
            rightMargin=self.margin,
            leftMargin=self.margin,
            topMargin=self.margin,
            bottomMargin=self.margin,
            title=REPORT_TITLE,
        )

        story = []
        styles = getSampleStyleSheet()
        title_style = ParagraphStyle(
            'ReportTitle',
            parent=styles['Heading1'],
            fontSize=20,
            textColor=colors.HexColor('#1e40af'),
            spaceAfter=12,
            alignment=TA_CENTER,
        )

        rooms = get_rooms(layout_data)

        story.append(Paragraph(REPORT_TITLE, title_style))
        story.append(Spacer(1, 5 * mm))

        details = [
            ['Project Name:', project_info.get('name') or 'Untitled Project'],
            ['Layout Name:', project_info.get('layout_name') or 'Layout'],
            ['Date Generated:', datetime.now().strftime('%d %B %Y')],
            ['Total Area:', f"{format_number(total_room_area(rooms))} sq ft"],
            ['Number of Rooms:', str(len(rooms))],
        ]
        details_table = Table(details, colWidths=[50 * mm, 110 * mm])
        details_table.setStyle(TableStyle([
            ('BACKGROUND', (0, 0), (0, -1), colors.HexColor('#f3f4f6')),
            ('FONTNAME', (0, 0), (0, -1), 'Helvetica-Bold'),
            ('FONTNAME', (1, 0), (1, -1), 'Helvetica'),
            ('GRID', (0, 0), (-1, -1), 0.5, colors.grey),
            ('TOPPADDING', (0, 0), (-1, -1), 6),
            ('BOTTOMPADDING', (0, 0), (-1, -1), 6),
        ]))
        story.append(details_table)
        story.append(Spacer(1, 8 * mm))

        story.append(Paragraph("Floor Plan", styles['Heading2']))
        story.append(self._draw_floor_plan(layout_data))
        story.append(Spacer(1, 8 * mm))

        story.append(Paragraph("Room Schedule", styles['Heading2']))
        story.append(self._room_schedule_table(rooms))

        metrics = project_info.get('metrics')
        if metrics:
            story.append(Spacer(1, 8 * mm))
            story.append(Paragraph("Performance Metrics", styles['Heading2']))
            rows = [['Metric', 'Value']]
            for key, label, suffix in METRIC_LABELS:
                if key in metrics:
                    rows.append([label, f"{metrics[key]}{suffix}"])
            story.append(self._simple_table(rows))

        compliance = project_info.get('compliance')
        if compliance:
            story.append(Spacer(1, 8 * mm))
            story.append(Paragraph("Code Compliance", styles['Heading2']))
            rate = _compliance_rate(compliance)
            rows = [
                ['Status', str(compliance.get('status', 'unknown'))],
                ['Compliance Rate', f"{rate}%" if rate is not None else 'N/A'],
            ]
            issues = compliance.get('critical_issues', compliance.get('issues', []))
            for issue in issues:
                rows.append([issue.get('code', ''), Paragraph(html.escape(issue.get('message', '')), styles['BodyText'])])
            story.append(self._simple_table(rows, header=False))

        doc.build(story)
        return buffer.getvalue()

    def _simple_table(self, rows: List[List[Any]], header: bool = True) -> Table:
        table = Table(rows, colWidths=[60 * mm, 110 * mm])
        style = [
            ('GRID', (0, 0), (-1, -1), 0.5, colors.grey),
            ('VALIGN', (0, 0), (-1, -1), 'TOP'),
        ]
        if header:
            style += [
                ('BACKGROUND', (0, 0), (-1, 0), colors.HexColor('#1e40af')),
                ('TEXTCOLOR', (0, 0), (-1, 0), colors.whitesmoke),
                ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
            ]
        table.setStyle(TableStyle(style))
        return table

    def _room_schedule_table(self, rooms: List[Dict]) -> Table:
        schedule = [['Room', 'Dimensions', 'Area (sq ft)']]
        for room in rooms:
            schedule.append([
                str(room.get('name', room.get('id', ''))),
                f"{format_number(room.get('width'))}' x {format_number(room.get('height'))}'",
                format_number(room.get('area')),
            ])
        schedule.append(['Total Area', '', format_number(total_room_area(rooms))])

        table = Table(schedule, colWidths=[80 * mm, 50 * mm, 40 * mm])
        table.setStyle(TableStyle([
            ('BACKGROUND', (0, 0), (-1, 0), colors.HexColor('#1e40af')),
            ('TEXTCOLOR', (0, 0), (-1, 0), colors.whitesmoke),
            ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
            ('GRID', (0, 0), (-1, -1), 0.5, colors.grey),
            ('BACKGROUND', (0, -1), (-1, -1), colors.HexColor('#dbeafe')),
            ('FONTNAME', (0, -1), (-1, -1), 'Helvetica-Bold'),
        ]))
        return table

    def _draw_floor_plan(self, layout_data: Dict) -> Drawing:
        """Draw rooms and circulation scaled to the drawing area"""
        rooms = get_rooms(layout_data)
        bounds = calculate_bounds(rooms, EXPORT_EMPTY_BOUNDS)
        plan_width, plan_height = bounds_size(bounds)

        d = Drawing(self.drawing_width, self.drawing_height)
        if not rooms or plan_width <= 0 or plan_height <= 0:
            return d

        pad = 10
        scale = min((self.drawing_width - 2 * pad) / plan_width,
                    (self.drawing_height - 2 * pad) / plan_height)

        # Plan y grows downwards, PDF y grows upwards
        def tx(x): return pad + (x - bounds['min_x']) * scale
        def ty(y): return self.drawing_height - pad - (y - bounds['min_y']) * scale

        for room in rooms:
            x, y = room.get('x', 0), room.get('y', 0)
            w, h = room.get('width', 0) * scale, room.get('height', 0) * scale
            d.add(Rect(tx(x), ty(y) - h, w, h,
                       fillColor=self._get_room_color(room.get('name')),
                       strokeColor=colors.black, strokeWidth=1))
            cx, cy = get_room_center(room)
            d.add(String(tx(cx), ty(cy), str(room.get('name', '')),
                         fontSize=7, fillColor=colors.black, textAnchor='middle'))

        rooms_by_id = index_rooms_by_id(rooms)
        for path in get_circulation(layout_data):
            endpoints = resolve_path_endpoints(path, rooms_by_id)
            if endpoints is None:
                continue
            (x1, y1), (x2, y2) = get_room_center(endpoints[0]), get_room_center(endpoints[1])
            d.add(Line(tx(x1), ty(y1), tx(x2), ty(y2),
                       strokeColor=colors.HexColor('#3b82f6'), strokeWidth=2))

        return d

    def _get_room_color(self, room_name: Optional[str]) -> colors.Color:
        color_map = {
            'office': colors.HexColor('#dbeafe'),
            'meeting': colors.HexColor('#e0e7ff'),
            'restroom': colors.HexColor('#fce7f3'),
            'bedroom': colors.HexColor('#dbeafe'),
            'kitchen': colors.HexColor('#fef3c7'),
            'living': colors.HexColor('#d1fae5'),
        }
        return color_map.get(infer_room_type(room_name).value, colors.HexColor('#e5e7eb'))


def export_to_pdf_document(layout_data: Dict, project_info: Optional[Dict[str, Any]] = None) -> bytes:
    """Main entry point for PDF generation"""
    generator = LayoutPDFGenerator()
    return generator.generate(layout_data, project_info or {})
