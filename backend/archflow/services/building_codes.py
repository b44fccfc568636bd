# backend/archflow/services/building_codes.py
# Building code rule tables keyed by country, then code id
# Static, versioned dataset loaded once at import and never mutated
#
# Adding a jurisdiction is a data-only change: add a BuildingCodeRuleTable
# to _RULE_TABLES. Every threshold carries its unit; the compliance engine
# converts before comparing.

from typing import Dict, Any, List, Mapping, Optional
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
import logging

logger = logging.getLogger(__name__)

REGISTRY_VERSION = "2024.1"


# =============================================================================
# ENUMS AND UNITS
# =============================================================================

class RoomType(str, Enum):
    """Closed set of room types inferred from free-text room names."""
    OFFICE = "office"
    MEETING = "meeting"
    RESTROOM = "restroom"
    BEDROOM = "bedroom"
    KITCHEN = "kitchen"
    LIVING = "living"
    GENERAL = "general"


class Unit(str, Enum):
    INCHES = "inches"
    MILLIMETERS = "millimeters"
    FEET = "feet"
    SQUARE_FEET = "sq ft"
    RATIO = "ratio"


_TO_INCHES = {
    Unit.INCHES: 1.0,
    Unit.FEET: 12.0,
    Unit.MILLIMETERS: 1 / 25.4,
}


@dataclass(frozen=True)
class Threshold:
    """A numeric limit with an explicit unit."""
    value: float
    unit: Unit
    description: str = ""

    def to_inches(self) -> float:
        if self.unit not in _TO_INCHES:
            raise ValueError(f"Cannot convert {self.unit.value} to inches")
        return round(self.value * _TO_INCHES[self.unit], 1)

    def to_square_feet(self) -> float:
        if self.unit != Unit.SQUARE_FEET:
            raise ValueError(f"Cannot convert {self.unit.value} to square feet")
        return self.value

    def to_dict(self) -> Dict[str, Any]:
        return {'value': self.value, 'unit': self.unit.value, 'description': self.description}


@dataclass(frozen=True)
class AccessibilityRules:
    """Accessible-route sub-rules of a building code."""
    door_width: Optional[Threshold] = None
    corridor_width: Optional[Threshold] = None
    turning_space: Optional[Threshold] = None  # diameter


@dataclass(frozen=True)
class BuildingCodeRuleTable:
    """Thresholds for one building code in one jurisdiction."""
    key: str
    country: str
    name: str
    version: str
    corridor_width: Optional[Threshold] = None
    door_width: Optional[Threshold] = None
    exit_width: Optional[Threshold] = None
    room_area: Mapping[RoomType, Threshold] = field(default_factory=lambda: MappingProxyType({}))
    accessibility: Optional[AccessibilityRules] = None
    # Published limits the layout model cannot check (ceiling heights etc.)
    reference: Mapping[str, Threshold] = field(default_factory=lambda: MappingProxyType({}))

    def to_dict(self) -> Dict[str, Any]:
        """Serializable summary for API responses."""
        def opt(t: Optional[Threshold]):
            return t.to_dict() if t else None

        return {
            'key': self.key,
            'country': self.country,
            'name': self.name,
            'version': self.version,
            'corridor_width': opt(self.corridor_width),
            'door_width': opt(self.door_width),
            'exit_width': opt(self.exit_width),
            'room_area': {room_type.value: t.to_dict() for room_type, t in self.room_area.items()},
            'accessibility': {
                'door_width': opt(self.accessibility.door_width),
                'corridor_width': opt(self.accessibility.corridor_width),
                'turning_space': opt(self.accessibility.turning_space),
            } if self.accessibility else None,
            'reference': {name: t.to_dict() for name, t in self.reference.items()},
        }


# =============================================================================
# RULE TABLES
# =============================================================================

_RULE_TABLES = [
    BuildingCodeRuleTable(
        key='IBC',
        country='US',
        name='International Building Code',
        version='2021',
        corridor_width=Threshold(44, Unit.INCHES, 'Minimum corridor width for egress'),
        exit_width=Threshold(32, Unit.INCHES, 'Minimum exit door width'),
        room_area=MappingProxyType({
            RoomType.OFFICE: Threshold(80, Unit.SQUARE_FEET),
            RoomType.MEETING: Threshold(120, Unit.SQUARE_FEET),
            RoomType.RESTROOM: Threshold(30, Unit.SQUARE_FEET),
        }),
        accessibility=AccessibilityRules(
            door_width=Threshold(32, Unit.INCHES),
            corridor_width=Threshold(36, Unit.INCHES),
            turning_space=Threshold(60, Unit.INCHES),
        ),
    ),
    BuildingCodeRuleTable(
        key='ADA',
        country='US',
        name='Americans with Disabilities Act',
        version='2010',
        corridor_width=Threshold(36, Unit.INCHES, 'Minimum accessible route width'),
        door_width=Threshold(32, Unit.INCHES, 'Minimum clear width for doorways'),
        # Local addition, not part of the published ADA corridor table: 48" passing route and turning space
        accessibility=AccessibilityRules(
            door_width=Threshold(32, Unit.INCHES),
            corridor_width=Threshold(48, Unit.INCHES, 'Accessible route with wheelchair passing allowance'),
            turning_space=Threshold(60, Unit.INCHES, 'Wheelchair turning space diameter'),
        ),
        reference=MappingProxyType({
            'reach_range_high': Threshold(48, Unit.INCHES, 'Maximum forward reach'),
            'reach_range_low': Threshold(15, Unit.INCHES, 'Minimum forward reach'),
        }),
    ),
    BuildingCodeRuleTable(
        key='IRC',
        country='US',
        name='International Residential Code',
        version='2021',
        corridor_width=Threshold(36, Unit.INCHES, 'Minimum hallway width'),
        room_area=MappingProxyType({
            RoomType.BEDROOM: Threshold(70, Unit.SQUARE_FEET),
        }),
        reference=MappingProxyType({
            'ceiling_height': Threshold(90, Unit.INCHES, 'Minimum habitable ceiling height'),
            'window_area': Threshold(0.08, Unit.RATIO, 'Glazing as a fraction of floor area'),
        }),
    ),
    BuildingCodeRuleTable(
        key='NBC',
        country='CA',
        name='National Building Code of Canada',
        version='2020',
        corridor_width=Threshold(1100, Unit.MILLIMETERS, 'Minimum corridor width'),
        exit_width=Threshold(850, Unit.MILLIMETERS, 'Minimum exit width'),
    ),
]


def _build_registry(tables: List[BuildingCodeRuleTable]) -> Mapping[str, Mapping[str, BuildingCodeRuleTable]]:
    by_country: Dict[str, Dict[str, BuildingCodeRuleTable]] = {}
    for table in tables:
        by_country.setdefault(table.country, {})[table.key] = table
    return MappingProxyType({
        country: MappingProxyType(codes) for country, codes in by_country.items()
    })


BUILDING_CODES = _build_registry(_RULE_TABLES)

COUNTRY_NAMES = {
    'US': 'United States',
    'CA': 'Canada',
    'UK': 'United Kingdom',
    'AU': 'Australia',
}


# =============================================================================
# LOOKUPS
# =============================================================================

def get_applicable_codes(country: str, codes: List[str]) -> List[BuildingCodeRuleTable]:
    """
    Rule tables for the requested codes that exist for the country.

    Unknown countries and unknown code ids are dropped, preserving the
    requested order.
    """
    country_codes = BUILDING_CODES.get(country)
    if not country_codes:
        return []
    return [country_codes[code] for code in codes if code in country_codes]


def get_rule_table(country: str, code: str) -> Optional[BuildingCodeRuleTable]:
    return BUILDING_CODES.get(country, {}).get(code)


def get_available_codes(country: str) -> List[Dict[str, str]]:
    """Codes published for a country: key, name, version."""
    country_codes = BUILDING_CODES.get(country)
    if not country_codes:
        return []
    return [
        {'key': table.key, 'name': table.name, 'version': table.version}
        for table in country_codes.values()
    ]


def get_country_name(country_code: str) -> str:
    return COUNTRY_NAMES.get(country_code, country_code)


def get_supported_countries() -> List[Dict[str, Any]]:
    """All countries with rule tables, with their available codes."""
    return [
        {
            'code': country,
            'name': get_country_name(country),
            'codes': get_available_codes(country),
        }
        for country in BUILDING_CODES
    ]
