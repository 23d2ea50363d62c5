"""
Emission factors in tCO2e per unit, grouped by GHG Protocol scope.

Scope 2 factors are per MWh; the carbon calculator converts kWh input before
applying them.
"""

from types import MappingProxyType
from typing import Dict, List, Mapping, Optional

from app.schemas.carbon import EmissionFactor


def _table(entries: Dict[str, tuple]) -> Mapping[str, EmissionFactor]:
    return MappingProxyType(
        {key: EmissionFactor(key=key, factor=factor, unit=unit) for key, (factor, unit) in entries.items()}
    )


# Scope 1 - direct emissions
SCOPE1_FACTORS = _table(
    {
        "naturalGas": (0.0053, "kWh"),
        "diesel": (2.68, "liter"),
        "gasoline": (2.31, "liter"),
        "coal": (2.42, "kg"),
        "propane": (1.51, "liter"),
        "fuelOil": (2.96, "liter"),
    }
)

# Scope 2 - purchased electricity by generation source
SCOPE2_FACTORS = _table(
    {
        "grid_average": (0.4, "MWh"),
        "renewable": (0.0, "MWh"),
        "coal": (0.82, "MWh"),
        "natural_gas": (0.35, "MWh"),
        "nuclear": (0.012, "MWh"),
        "hydro": (0.024, "MWh"),
    }
)

# Scope 3 - value chain activities
SCOPE3_FACTORS = _table(
    {
        "business_travel": (0.21, "km"),
        "employee_commuting": (0.17, "km"),
        "waste_disposal": (0.57, "tonne"),
        "water_supply": (0.344, "m3"),
        "purchased_goods": (2.1, "USD 1000"),
        "freight_transport": (0.11, "tonne-km"),
    }
)

EMISSION_FACTORS: Mapping[int, Mapping[str, EmissionFactor]] = MappingProxyType(
    {1: SCOPE1_FACTORS, 2: SCOPE2_FACTORS, 3: SCOPE3_FACTORS}
)


def _scope_table(scope: int) -> Mapping[str, EmissionFactor]:
    try:
        return EMISSION_FACTORS[scope]
    except KeyError:
        raise ValueError(f"Unknown GHG scope: {scope!r} (expected 1, 2 or 3)") from None


def get_emission_factor(scope: int, key: str) -> Optional[EmissionFactor]:
    """Return the factor for `key` in `scope`, or None when it is not listed."""
    return _scope_table(scope).get(key)


def list_emission_factors(scope: Optional[int] = None) -> Dict[int, List[EmissionFactor]]:
    scopes = [scope] if scope is not None else sorted(EMISSION_FACTORS)
    return {s: list(_scope_table(s).values()) for s in scopes}
