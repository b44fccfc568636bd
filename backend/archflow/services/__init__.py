# backend/archflow/services/__init__.py
# Layout analysis services: metrics, building-code compliance and exports

from .geometry import (
    calculate_bounds,
    rooms_share_edge,
    get_room_center,
    index_rooms_by_id,
    EXPORT_EMPTY_BOUNDS,
    METRICS_EMPTY_BOUNDS
)

from .performance_metrics import (
    calculate_all_metrics,
    calculate_circulation_efficiency,
    calculate_daylight_hours,
    calculate_energy_efficiency,
    calculate_space_utilization,
    calculate_accessibility_score,
    calculate_adjacency_score,
    generate_recommendations
)

from .building_codes import (
    get_applicable_codes,
    get_available_codes,
    get_supported_countries,
    get_country_name,
    get_rule_table,
    BUILDING_CODES,
    RoomType
)

from .compliance import (
    check_compliance,
    generate_compliance_report,
    infer_room_type,
    requires_turning_space,
    ComplianceStatus
)

from .exporters import (
    export_to_dxf,
    export_to_svg,
    export_to_json,
    export_room_schedule_to_csv
)

from .report_generator import (
    export_to_pdf,
    export_to_pdf_document
)

from .export_service import (
    export_layout,
    export_multiple_formats,
    build_export_filename,
    get_supported_formats,
    UnsupportedExportFormatError,
    EXPORT_FORMATS
)

from .layout_optimizer import (
    optimize_layout_parameters,
    scale_room_dimensions
)

__all__ = [
    # Geometry
    'calculate_bounds',
    'rooms_share_edge',
    'get_room_center',
    'index_rooms_by_id',
    'EXPORT_EMPTY_BOUNDS',
    'METRICS_EMPTY_BOUNDS',

    # Performance Metrics
    'calculate_all_metrics',
    'calculate_circulation_efficiency',
    'calculate_daylight_hours',
    'calculate_energy_efficiency',
    'calculate_space_utilization',
    'calculate_accessibility_score',
    'calculate_adjacency_score',
    'generate_recommendations',

    # Building Codes
    'get_applicable_codes',
    'get_available_codes',
    'get_supported_countries',
    'get_country_name',
    'get_rule_table',
    'BUILDING_CODES',
    'RoomType',

    # Compliance
    'check_compliance',
    'generate_compliance_report',
    'infer_room_type',
    'requires_turning_space',
    'ComplianceStatus',

    # Exports
    'export_to_dxf',
    'export_to_svg',
    'export_to_json',
    'export_room_schedule_to_csv',
    'export_to_pdf',
    'export_to_pdf_document',
    'export_layout',
    'export_multiple_formats',
    'build_export_filename',
    'get_supported_formats',
    'UnsupportedExportFormatError',
    'EXPORT_FORMATS',

    # Layout Optimizer
    'optimize_layout_parameters',
    'scale_room_dimensions',
]
