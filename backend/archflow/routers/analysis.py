# backend/archflow/routers/analysis.py
# Layout analysis: performance metrics, compliance checks and parameter tweaks

from fastapi import APIRouter, HTTPException
from typing import Dict, Any
import logging

from .. import schemas, config
from ..services.performance_metrics import calculate_all_metrics
from ..services.compliance import check_compliance, generate_compliance_report
from ..services.layout_optimizer import optimize_layout_parameters

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/analysis", tags=["analysis"])


def resolve_norm_settings(norm_settings: schemas.NormSettingsSchema = None) -> Dict[str, Any]:
    """Fill omitted country/codes from the configured defaults."""
    settings = norm_settings or schemas.NormSettingsSchema()
    return {
        'country': settings.country or config.DEFAULT_COUNTRY,
        'codes': settings.codes if settings.codes is not None else list(config.DEFAULT_CODES),
        'accessibility': settings.accessibility,
    }


@router.post("/metrics", response_model=schemas.MetricsResponse)
def analyze_metrics(request: schemas.MetricsRequest):
    """Score a layout on circulation, daylight, energy, utilization and accessibility."""
    min_width = config.MIN_CORRIDOR_WIDTH_FT
    if request.options and request.options.min_corridor_width:
        min_width = request.options.min_corridor_width

    return calculate_all_metrics(
        request.layout.to_layout(),
        {'accessibility': {'min_corridor_width': min_width}}
    )


@router.post("/compliance", response_model=schemas.ComplianceResultResponse)
def analyze_compliance(request: schemas.ComplianceRequest):
    """Check a layout against the requested building codes."""
    return check_compliance(request.layout.to_layout(), resolve_norm_settings(request.norm_settings))


@router.post("/compliance/report", response_model=schemas.ComplianceReportResponse)
def compliance_report(request: schemas.ComplianceRequest):
    """Compliance check plus compliance rate, recommendations and next steps."""
    result = check_compliance(request.layout.to_layout(), resolve_norm_settings(request.norm_settings))
    return generate_compliance_report(result)


@router.post("/optimize")
def optimize_layout(request: schemas.OptimizeRequest):
    """Apply parameter changes and return the adjusted layout."""
    try:
        return optimize_layout_parameters(
            request.layout.to_layout(),
            request.parameters.model_dump(exclude_none=True)
        )
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
