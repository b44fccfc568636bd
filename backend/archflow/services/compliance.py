# backend/archflow/services/compliance.py
"""
Building Code Compliance Checker
================================

Evaluates a layout against the rule tables selected by norm settings
(country + code ids) and produces a flat, serializable result:

- Corridor widths (every circulation path, feet converted to inches)
- Minimum room areas by inferred room type
- Accessible routes and wheelchair turning space
- Door / exit widths (each circulation path stands for one door)

Issues are records, not exceptions. The only caller-facing failure is a
configuration error (unknown country or no matching codes), reported as
status "error" with a single CONFIG_ERROR issue.

Room types come from a fixed, ordered substring match on the room name
(see infer_room_type). It is a deliberately simple heuristic: "Office
Kitchenette" is an office because "office" is tested first.
"""

from typing import Dict, Any, List, Optional
from dataclasses import dataclass, field
from enum import Enum
import logging

from .building_codes import (
    AccessibilityRules,
    BuildingCodeRuleTable,
    RoomType,
    Unit,
    get_applicable_codes,
)
from .geometry import get_circulation, get_rooms, round_half_up

logger = logging.getLogger(__name__)

DEFAULT_COUNTRY = 'US'
DEFAULT_CODES = ['IBC', 'ADA']

MAX_DOOR_WIDTH_INCHES = 36  # a path wider than a door still counts as one door

# Ordered: first match wins
ROOM_TYPE_KEYWORDS = [
    (RoomType.OFFICE, ('office',)),
    (RoomType.MEETING, ('meeting', 'conference')),
    (RoomType.RESTROOM, ('restroom', 'bathroom')),
    (RoomType.BEDROOM, ('bedroom',)),
    (RoomType.KITCHEN, ('kitchen',)),
    (RoomType.LIVING, ('living',)),
]

TURNING_SPACE_ROOM_TYPES = {RoomType.OFFICE, RoomType.MEETING, RoomType.RESTROOM}


class ComplianceStatus(str, Enum):
    COMPLIANT = "compliant"
    WARNING = "warning"
    NON_COMPLIANT = "non-compliant"
    ERROR = "error"


class Severity(str, Enum):
    CRITICAL = "critical"  # blocks compliant status
    WARNING = "warning"    # advisory only
    ERROR = "error"        # configuration problem


# =============================================================================
# RESULT RECORDS
# =============================================================================

@dataclass
class ComplianceIssue:
    """Single compliance finding."""
    type: str
    severity: Severity
    message: str
    code: str
    location: Optional[str] = None
    required: Optional[float] = None
    actual: Optional[float] = None
    unit: Optional[str] = None
    recommendation: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        record = {
            'type': self.type,
            'severity': self.severity.value,
            'message': self.message,
            'code': self.code,
            'location': self.location,
            'required': self.required,
            'actual': self.actual,
            'unit': self.unit,
        }
        if self.recommendation is not None:
            record['recommendation'] = self.recommendation
        return record


@dataclass
class ComplianceTally:
    """Accumulates findings and check counters during one evaluation."""
    issues: List[ComplianceIssue] = field(default_factory=list)
    warnings: List[ComplianceIssue] = field(default_factory=list)
    passed: int = 0
    failed: int = 0
    warned: int = 0

    def record_pass(self):
        self.passed += 1

    def record_issue(self, issue: ComplianceIssue):
        self.issues.append(issue)
        self.failed += 1

    def record_warning(self, warning: ComplianceIssue):
        self.warnings.append(warning)
        self.warned += 1

    @property
    def status(self) -> ComplianceStatus:
        if any(issue.severity == Severity.CRITICAL for issue in self.issues):
            return ComplianceStatus.NON_COMPLIANT
        if self.issues or self.warnings:
            return ComplianceStatus.WARNING
        return ComplianceStatus.COMPLIANT

    def to_result(self, status: Optional[ComplianceStatus] = None) -> Dict[str, Any]:
        status = status or self.status
        return {
            'status': status.value,
            'issues': [issue.to_dict() for issue in self.issues],
            'warnings': [warning.to_dict() for warning in self.warnings],
            'summary': {
                'total_checks': self.passed + self.failed + self.warned,
                'passed': self.passed,
                'failed': self.failed,
                'warnings': self.warned,
            },
        }


# =============================================================================
# ROOM CLASSIFICATION
# =============================================================================

def infer_room_type(room_name: Optional[str]) -> RoomType:
    """
    Classify a room from its name.

    Case-insensitive substring match in a fixed order: office, meeting /
    conference, restroom / bathroom, bedroom, kitchen, living. Anything else
    is GENERAL.
    """
    name = (room_name or '').lower()
    for room_type, keywords in ROOM_TYPE_KEYWORDS:
        if any(keyword in name for keyword in keywords):
            return room_type
    return RoomType.GENERAL


def requires_turning_space(room_name: Optional[str]) -> bool:
    """Rooms that typically need a wheelchair turning circle."""
    return infer_room_type(room_name) in TURNING_SPACE_ROOM_TYPES


def _fmt(value: float) -> str:
    return f"{value:g}"


def _path_location(prefix: str, index: int, path: Dict) -> str:
    return f"{prefix} {index + 1}: {path.get('from')} → {path.get('to')}"


# =============================================================================
# CHECKS
# =============================================================================

def _check_corridor_widths(
    circulation: List[Dict],
    minimum_inches: float,
    code_key: str,
    tally: ComplianceTally,
    issue_type: str = 'corridor_width',
    label: str = 'Corridor width',
    code_suffix: str = 'CORRIDOR_WIDTH'
):
    for index, path in enumerate(circulation):
        width_ft = path.get('width', 0)
        width_in = width_ft * 12

        if width_in < minimum_inches:
            tally.record_issue(ComplianceIssue(
                type=issue_type,
                severity=Severity.CRITICAL,
                message=(f"{label} {_fmt(width_ft)}' ({_fmt(width_in)}\") is below minimum "
                         f"{_fmt(minimum_inches)}\" required by {code_key}"),
                code=f"{code_key}_{code_suffix}",
                location=_path_location('Path', index, path),
                required=minimum_inches,
                actual=width_in,
                unit=Unit.INCHES.value,
            ))
        else:
            tally.record_pass()


def _check_room_areas(rooms: List[Dict], table: BuildingCodeRuleTable, tally: ComplianceTally):
    for room in rooms:
        requirement = table.room_area.get(infer_room_type(room.get('name')))
        if requirement is None:
            continue

        minimum = requirement.to_square_feet()
        area = room.get('area', 0)
        name = room.get('name', room.get('id'))

        if area < minimum:
            tally.record_issue(ComplianceIssue(
                type='room_area',
                severity=Severity.CRITICAL,
                message=(f"{name} area {_fmt(area)} sq ft is below minimum "
                         f"{_fmt(minimum)} sq ft required by {table.key}"),
                code=f"{table.key}_ROOM_AREA",
                location=name,
                required=minimum,
                actual=area,
                unit=Unit.SQUARE_FEET.value,
            ))
        else:
            tally.record_pass()


def _check_accessibility(
    rooms: List[Dict],
    circulation: List[Dict],
    rules: AccessibilityRules,
    code_key: str,
    tally: ComplianceTally
):
    if rules.corridor_width is not None:
        _check_corridor_widths(
            circulation,
            rules.corridor_width.to_inches(),
            code_key,
            tally,
            issue_type='accessibility_route',
            label='Accessible route width',
            code_suffix='ACCESSIBLE_ROUTE',
        )

    if rules.turning_space is not None:
        diameter_in = rules.turning_space.to_inches()
        min_area = (diameter_in / 12) ** 2  # sq ft

        for room in rooms:
            name = room.get('name', room.get('id'))
            area = room.get('area', 0)

            if area < min_area and requires_turning_space(room.get('name')):
                tally.record_warning(ComplianceIssue(
                    type='turning_space',
                    severity=Severity.WARNING,
                    message=f"{name} may not have adequate turning space for wheelchairs",
                    code=f"{code_key}_TURNING_SPACE",
                    location=name,
                    required=round(min_area, 2),
                    actual=area,
                    unit=Unit.SQUARE_FEET.value,
                    recommendation=f"Ensure {_fmt(diameter_in)}\" diameter turning space is available",
                ))
            else:
                tally.record_pass()


def _check_door_widths(circulation: List[Dict], table: BuildingCodeRuleTable, tally: ComplianceTally):
    threshold = table.door_width or table.exit_width
    required = threshold.to_inches()

    for index, path in enumerate(circulation):
        door_width = min(path.get('width', 0) * 12, MAX_DOOR_WIDTH_INCHES)

        if door_width < required:
            tally.record_issue(ComplianceIssue(
                type='door_width',
                severity=Severity.CRITICAL,
                message=(f"Door width {_fmt(door_width)}\" is below minimum "
                         f"{_fmt(required)}\" required by {table.key}"),
                code=f"{table.key}_DOOR_WIDTH",
                location=_path_location('Door', index, path),
                required=required,
                actual=door_width,
                unit=Unit.INCHES.value,
            ))
        else:
            tally.record_pass()


def run_code_checks(
    layout_data: Dict,
    table: BuildingCodeRuleTable,
    tally: ComplianceTally,
    accessibility: bool = True
):
    """Run every check a single rule table defines."""
    rooms = get_rooms(layout_data)
    circulation = get_circulation(layout_data)

    if table.corridor_width is not None:
        _check_corridor_widths(circulation, table.corridor_width.to_inches(), table.key, tally)

    if table.room_area:
        _check_room_areas(rooms, table, tally)

    if accessibility and table.accessibility is not None:
        _check_accessibility(rooms, circulation, table.accessibility, table.key, tally)

    if table.door_width is not None or table.exit_width is not None:
        _check_door_widths(circulation, table, tally)


# =============================================================================
# MAIN ENTRY POINT
# =============================================================================

def check_compliance(layout_data: Dict, norm_settings: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """
    Check a layout against the building codes named in norm settings.

    Args:
        layout_data: Dict with 'rooms' and 'circulation'
        norm_settings: {'country': 'US', 'codes': ['IBC', 'ADA'], 'accessibility': True}

    Returns:
        Dict with status, issues, warnings and summary counters
    """
    settings = norm_settings or {}
    country = settings.get('country') or DEFAULT_COUNTRY
    codes = settings.get('codes')
    if codes is None:
        codes = DEFAULT_CODES
    accessibility = settings.get('accessibility') is not False

    tally = ComplianceTally()
    tables = get_applicable_codes(country, list(codes))

    if not tables:
        logger.warning(f"No building codes found for country={country} codes={list(codes)}")
        tally.issues.append(ComplianceIssue(
            type='configuration',
            severity=Severity.ERROR,
            message=f"No building codes found for country: {country}",
            code='CONFIG_ERROR',
        ))
        return tally.to_result(ComplianceStatus.ERROR)

    for table in tables:
        run_code_checks(layout_data or {}, table, tally, accessibility=accessibility)

    result = tally.to_result()
    logger.info(
        f"Compliance {country}/{','.join(t.key for t in tables)}: {result['status']} "
        f"({tally.failed} issue(s), {tally.warned} warning(s), {tally.passed} passed)"
    )
    return result


# =============================================================================
# REPORT
# =============================================================================

_ISSUE_RECOMMENDATIONS = {
    'corridor_width': {
        'priority': 'high',
        'title': 'Increase Corridor Widths',
        'description': '{count} corridor(s) need to be widened to meet code requirements',
        'action': 'Modify layout to increase corridor widths or redesign circulation paths',
    },
    'room_area': {
        'priority': 'high',
        'title': 'Increase Room Sizes',
        'description': '{count} room(s) are below minimum area requirements',
        'action': 'Increase room dimensions or combine adjacent spaces',
    },
    'accessibility_route': {
        'priority': 'critical',
        'title': 'Improve Accessibility',
        'description': '{count} accessible route(s) need to be widened',
        'action': 'Ensure all routes meet ADA width requirements',
    },
}

_NEXT_STEPS = {
    ComplianceStatus.NON_COMPLIANT.value: [
        'Address all critical compliance issues before proceeding',
        'Review and modify layout design to meet code requirements',
        'Re-run compliance check after making changes',
    ],
    ComplianceStatus.WARNING.value: [
        'Review warning items and consider addressing them',
        'Verify compliance with local amendments to building codes',
        'Consider consulting with a local architect or code official',
    ],
}

_DEFAULT_NEXT_STEPS = [
    'Layout appears to meet basic code requirements',
    'Verify with local building department for any additional requirements',
    'Consider professional review before final design',
]


def generate_compliance_recommendations(issues: List[Dict[str, Any]]) -> List[Dict[str, str]]:
    """One recommendation per mapped issue type, in first-seen order."""
    counts: Dict[str, int] = {}
    for issue in issues:
        issue_type = issue.get('type')
        counts[issue_type] = counts.get(issue_type, 0) + 1

    recommendations = []
    for issue_type, count in counts.items():
        template = _ISSUE_RECOMMENDATIONS.get(issue_type)
        if template is None:
            continue
        recommendation = dict(template)
        recommendation['description'] = template['description'].format(count=count)
        recommendations.append(recommendation)
    return recommendations


def generate_next_steps(status: str) -> List[str]:
    return list(_NEXT_STEPS.get(status, _DEFAULT_NEXT_STEPS))


def generate_compliance_report(compliance_result: Dict[str, Any]) -> Dict[str, Any]:
    """
    Post-process a compliance result into a report.

    Adds compliance_rate (passed / total checks, 100 when nothing was
    checked), the critical issues, category recommendations and a fixed
    next-steps script for the status.
    """
    status = compliance_result.get('status')
    issues = compliance_result.get('issues', [])
    warnings = compliance_result.get('warnings', [])
    summary = dict(compliance_result.get('summary', {}))

    total_checks = summary.get('total_checks', 0)
    passed = summary.get('passed', 0)
    summary['compliance_rate'] = round_half_up(passed / total_checks * 100) if total_checks > 0 else 100

    return {
        'status': status,
        'summary': summary,
        'critical_issues': [issue for issue in issues if issue.get('severity') == Severity.CRITICAL.value],
        'warnings': warnings,
        'recommendations': generate_compliance_recommendations(issues),
        'next_steps': generate_next_steps(status),
    }
