from typing import Dict, List, Optional

from fastapi import APIRouter, HTTPException, Path

from app.schemas.carbon import (
    CarbonReport,
    EmissionFactor,
    FootprintInput,
    ScopeEmissions,
    ScopeInput,
)
from app.services.carbon_calculator import calculate_scope, generate_carbon_report
from app.services.emission_factors import list_emission_factors

router = APIRouter()


@router.get("/factors", response_model=Dict[int, List[EmissionFactor]])
def emission_factors(scope: Optional[int] = None):
    """
    Emission factor table, optionally for a single scope.
    """
    try:
        return list_emission_factors(scope)
    except ValueError as exc:
        raise HTTPException(status_code=404, detail=str(exc))


@router.post("/scope/{scope}", response_model=ScopeEmissions)
def scope_emissions(payload: ScopeInput, scope: int = Path(..., ge=1, le=3)):
    """
    Emissions for one GHG scope from consumption by fuel / energy / activity type.
    """
    return calculate_scope(scope, payload.consumption, payload.period)


@router.post("/footprint", response_model=CarbonReport)
def carbon_footprint(payload: FootprintInput):
    """
    Scope 1, 2 and 3 emissions for a period, with trend and recommendations.
    """
    return generate_carbon_report(
        payload.fuel_consumption,
        payload.electricity_consumption,
        payload.activities,
        period=payload.period,
        history=payload.history,
        company_id=payload.company_id,
    )
