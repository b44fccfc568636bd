# backend/archflow/routers/exports.py
# Layout downloads in CAD, vector, document and data formats

from fastapi import APIRouter, HTTPException
from fastapi.responses import Response
from typing import List
import base64
import logging

from .. import schemas, config
from ..services.export_service import (
    export_layout,
    export_multiple_formats,
    get_supported_formats,
    UnsupportedExportFormatError,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/exports", tags=["exports"])


def project_info_dict(project_info: schemas.ProjectInfoSchema = None):
    return project_info.model_dump(exclude_none=True) if project_info else {}


def to_export_record(result: dict) -> dict:
    """JSON-safe batch entry; binary content is base64 encoded."""
    if not result.get('success'):
        return {'success': False, 'error': result.get('error')}

    content = result['content']
    if isinstance(content, bytes):
        content, encoding = base64.b64encode(content).decode('ascii'), 'base64'
    else:
        encoding = 'utf-8'

    return {
        'success': True,
        'filename': result['filename'],
        'mime_type': result['mime_type'],
        'size': result['size'],
        'content': content,
        'encoding': encoding,
    }


@router.get("/formats", response_model=List[schemas.ExportFormatResponse])
def list_formats():
    return get_supported_formats()


@router.post("/batch")
def export_batch(request: schemas.BatchExportRequest):
    """Export in several formats; a failing format does not affect the others."""
    formats = request.formats if request.formats is not None else config.DEFAULT_EXPORT_FORMATS
    results = export_multiple_formats(
        request.layout.to_layout(),
        project_info_dict(request.project_info),
        formats
    )
    return {export_format: to_export_record(result) for export_format, result in results.items()}


@router.post("/{export_format}")
def export_single(export_format: str, request: schemas.ExportRequest):
    """Download a layout in one format."""
    try:
        result = export_layout(
            request.layout.to_layout(),
            project_info_dict(request.project_info),
            export_format
        )
    except UnsupportedExportFormatError as e:
        raise HTTPException(status_code=400, detail=str(e))

    logger.info(f"Exported {result['filename']} ({result['size']} bytes)")
    return Response(
        content=result['content'],
        media_type=result['mime_type'],
        headers={"Content-Disposition": f'attachment; filename="{result["filename"]}"'}
    )
