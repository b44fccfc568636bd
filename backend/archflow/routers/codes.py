# backend/archflow/routers/codes.py
# Read-only access to the building-code rule tables

from fastapi import APIRouter, HTTPException

from ..services.building_codes import (
    BUILDING_CODES,
    REGISTRY_VERSION,
    get_available_codes,
    get_country_name,
    get_rule_table,
    get_supported_countries,
)

router = APIRouter(prefix="/api/v1/codes", tags=["codes"])


@router.get("/countries")
def list_countries():
    return {
        'registry_version': REGISTRY_VERSION,
        'countries': get_supported_countries(),
    }


@router.get("/{country}")
def get_country_codes(country: str):
    country = country.upper()
    if country not in BUILDING_CODES:
        raise HTTPException(status_code=404, detail=f"No building codes found for country: {country}")

    return {
        'code': country,
        'name': get_country_name(country),
        'codes': get_available_codes(country),
    }


@router.get("/{country}/{code}")
def get_code_rules(country: str, code: str):
    """Full rule table for one code, thresholds with their units."""
    table = get_rule_table(country.upper(), code.upper())
    if table is None:
        raise HTTPException(status_code=404, detail=f"Building code {code} not found for country: {country}")
    return table.to_dict()
