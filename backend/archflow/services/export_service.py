# backend/archflow/services/export_service.py
# Multi-format layout export
# Format registry, download filenames and the batch export that isolates
# each format's failure from its siblings

from typing import Dict, Any, Callable, Iterable, List, Optional, Union
from dataclasses import dataclass
from datetime import date
import logging
import re

from .exporters import (
    export_room_schedule_to_csv,
    export_to_dxf,
    export_to_json,
    export_to_svg,
)
from .geometry import get_rooms
from .report_generator import export_to_pdf, export_to_pdf_document

logger = logging.getLogger(__name__)

DEFAULT_FORMATS = ('svg', 'dxf', 'json')
DEFAULT_FILENAME = 'layout'


class UnsupportedExportFormatError(ValueError):
    """Raised when an export format key is not in the registry."""

    def __init__(self, export_format: str):
        self.export_format = export_format
        super().__init__(f"Unsupported format: {export_format}")


@dataclass(frozen=True)
class ExportFormat:
    key: str
    name: str
    description: str
    extension: str
    category: str
    mime_type: str
    encode: Callable[[Dict, Dict[str, Any]], Union[str, bytes]]

    def to_dict(self) -> Dict[str, str]:
        return {
            'key': self.key,
            'name': self.name,
            'description': self.description,
            'extension': self.extension,
            'category': self.category,
            'mime_type': self.mime_type,
        }


EXPORT_FORMATS: Dict[str, ExportFormat] = {
    fmt.key: fmt for fmt in [
        ExportFormat(
            key='dxf',
            name='AutoCAD DXF',
            description='CAD format compatible with AutoCAD and other CAD software',
            extension='dxf',
            category='cad',
            mime_type='application/dxf',
            encode=lambda layout, info: export_to_dxf(layout),
        ),
        ExportFormat(
            key='svg',
            name='SVG Vector',
            description='Scalable vector graphics format',
            extension='svg',
            category='vector',
            mime_type='image/svg+xml',
            encode=lambda layout, info: export_to_svg(layout),
        ),
        ExportFormat(
            key='pdf',
            name='PDF Report',
            description='Printable layout report with metrics (HTML, print to PDF)',
            extension='html',
            category='document',
            mime_type='text/html',
            encode=lambda layout, info: export_to_pdf(layout, info),
        ),
        ExportFormat(
            key='pdf_document',
            name='PDF Document',
            description='Layout report rendered as a PDF file',
            extension='pdf',
            category='document',
            mime_type='application/pdf',
            encode=lambda layout, info: export_to_pdf_document(layout, info),
        ),
        ExportFormat(
            key='json',
            name='JSON Data',
            description='Raw layout data in JSON format',
            extension='json',
            category='data',
            mime_type='application/json',
            encode=lambda layout, info: export_to_json(layout, info),
        ),
        ExportFormat(
            key='csv',
            name='Room Schedule',
            description='Room information in CSV format',
            extension='csv',
            category='data',
            mime_type='text/csv',
            encode=lambda layout, info: export_room_schedule_to_csv(get_rooms(layout)),
        ),
    ]
}


def get_supported_formats() -> List[Dict[str, str]]:
    return [fmt.to_dict() for fmt in EXPORT_FORMATS.values()]


def get_export_format(export_format: str) -> ExportFormat:
    fmt = EXPORT_FORMATS.get((export_format or '').lower())
    if fmt is None:
        raise UnsupportedExportFormatError(export_format)
    return fmt


def sanitize_project_name(name: Optional[str]) -> str:
    """Keep only [A-Za-z0-9_]; empty results fall back to 'layout'."""
    sanitized = re.sub(r'[^A-Za-z0-9_]', '', name or '')
    return sanitized or DEFAULT_FILENAME


def build_export_filename(project_name: Optional[str], extension: str, export_date: Optional[date] = None) -> str:
    """{sanitizedProjectName}_{YYYY-MM-DD}.{ext}"""
    export_date = export_date or date.today()
    return f"{sanitize_project_name(project_name)}_{export_date.isoformat()}.{extension}"


def export_layout(
    layout_data: Dict,
    project_info: Optional[Dict[str, Any]],
    export_format: str,
    export_date: Optional[date] = None
) -> Dict[str, Any]:
    """
    Encode a layout in one format.

    Returns {success, content, filename, mime_type, size}.
    Raises UnsupportedExportFormatError for unknown format keys.
    """
    project_info = project_info or {}
    fmt = get_export_format(export_format)
    content = fmt.encode(layout_data, project_info)
    size = len(content) if isinstance(content, bytes) else len(content.encode('utf-8'))

    return {
        'success': True,
        'content': content,
        'filename': build_export_filename(project_info.get('name'), fmt.extension, export_date),
        'mime_type': fmt.mime_type,
        'size': size,
    }


def export_multiple_formats(
    layout_data: Dict,
    project_info: Optional[Dict[str, Any]] = None,
    formats: Iterable[str] = DEFAULT_FORMATS,
    export_date: Optional[date] = None
) -> Dict[str, Dict[str, Any]]:
    """
    Export a layout in several formats.

    Every format is attempted independently. A failing or unknown format
    produces {'success': False, 'error': message} for that key only.
    """
    export_date = export_date or date.today()
    results = {}

    for export_format in formats:
        try:
            results[export_format] = export_layout(layout_data, project_info, export_format, export_date)
        except UnsupportedExportFormatError as e:
            logger.warning(str(e))
            results[export_format] = {'success': False, 'error': str(e)}
        except Exception as e:
            logger.error(f"Export to {export_format} failed: {e}", exc_info=True)
            results[export_format] = {'success': False, 'error': str(e)}

    succeeded = sum(1 for r in results.values() if r['success'])
    logger.info(f"Batch export: {succeeded}/{len(results)} format(s) succeeded")
    return results
