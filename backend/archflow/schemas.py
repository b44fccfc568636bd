from pydantic import BaseModel, Field, validator
from typing import Optional, List, Dict, Any
from enum import Enum
from .validators import LayoutValidators

# Enums
class ComplianceStatusEnum(str, Enum):
    COMPLIANT = "compliant"
    WARNING = "warning"
    NON_COMPLIANT = "non-compliant"
    ERROR = "error"

# Layout Schemas
class RoomSchema(BaseModel):
    id: str
    name: str
    area: float = Field(..., gt=0)
    x: float
    y: float
    width: float = Field(..., gt=0)
    height: float = Field(..., gt=0)

    class Config:
        extra = "allow"

class CirculationPathSchema(BaseModel):
    from_: str = Field(..., alias="from")
    to: str
    width: float = Field(..., gt=0)

    class Config:
        populate_by_name = True
        extra = "allow"

class LayoutDataSchema(BaseModel):
    rooms: List[RoomSchema] = []
    circulation: List[CirculationPathSchema] = []

    @validator('rooms')
    def validate_room_ids(cls, v):
        LayoutValidators.validate_unique_room_ids([room.id for room in v])
        return v

    def to_layout(self) -> Dict[str, Any]:
        """Plain dict in the wire shape ('from'/'to' keys) for the services"""
        return self.model_dump(by_alias=True)

# Settings Schemas
class NormSettingsSchema(BaseModel):
    country: Optional[str] = None
    codes: Optional[List[str]] = None
    accessibility: bool = True

class MetricsOptionsSchema(BaseModel):
    min_corridor_width: Optional[float] = Field(None, gt=0)

class LayoutParametersSchema(BaseModel):
    room_size: Optional[float] = None

    @validator('room_size')
    def validate_room_size(cls, v):
        LayoutValidators.validate_room_size_multiplier(v)
        return v

class ProjectInfoSchema(BaseModel):
    name: Optional[str] = None
    layout_name: Optional[str] = None
    metrics: Optional[Dict[str, Any]] = None
    compliance: Optional[Dict[str, Any]] = None

    class Config:
        extra = "allow"

# Requests
class MetricsRequest(BaseModel):
    layout: LayoutDataSchema
    options: Optional[MetricsOptionsSchema] = None

class ComplianceRequest(BaseModel):
    layout: LayoutDataSchema
    norm_settings: Optional[NormSettingsSchema] = None

class OptimizeRequest(BaseModel):
    layout: LayoutDataSchema
    parameters: LayoutParametersSchema

class ExportRequest(BaseModel):
    layout: LayoutDataSchema
    project_info: Optional[ProjectInfoSchema] = None

class BatchExportRequest(ExportRequest):
    formats: Optional[List[str]] = None

# Metrics Responses
class RecommendationResponse(BaseModel):
    type: str
    priority: str
    message: str
    impact: str

class MetricsResponse(BaseModel):
    circulation_efficiency: int = Field(ge=0, le=100)
    daylight_hours: float = Field(ge=3, le=12)
    energy_efficiency: int = Field(ge=0, le=100)
    space_utilization: int = Field(ge=0, le=100)
    accessibility_score: int = Field(ge=0, le=100)
    recommendations: List[RecommendationResponse]

# Compliance Responses
class ComplianceIssueResponse(BaseModel):
    type: str
    severity: str
    message: str
    code: str
    location: Optional[str] = None
    required: Optional[float] = None
    actual: Optional[float] = None
    unit: Optional[str] = None
    recommendation: Optional[str] = None

class ComplianceSummaryResponse(BaseModel):
    total_checks: int
    passed: int
    failed: int
    warnings: int
    compliance_rate: Optional[int] = None

class ComplianceResultResponse(BaseModel):
    status: ComplianceStatusEnum
    issues: List[ComplianceIssueResponse]
    warnings: List[ComplianceIssueResponse]
    summary: ComplianceSummaryResponse

class ComplianceRecommendationResponse(BaseModel):
    priority: str
    title: str
    description: str
    action: str

class ComplianceReportResponse(BaseModel):
    status: ComplianceStatusEnum
    summary: ComplianceSummaryResponse
    critical_issues: List[ComplianceIssueResponse]
    warnings: List[ComplianceIssueResponse]
    recommendations: List[ComplianceRecommendationResponse]
    next_steps: List[str]

# Export Responses
class ExportFormatResponse(BaseModel):
    key: str
    name: str
    description: str
    extension: str
    category: str
    mime_type: str

class ExportRecordResponse(BaseModel):
    success: bool
    filename: Optional[str] = None
    mime_type: Optional[str] = None
    size: Optional[int] = None
    content: Optional[str] = None
    encoding: Optional[str] = None  # "utf-8" or "base64"
    error: Optional[str] = None
