"""
Roof area and system size estimates for commercial buildings.
"""

import math

from .bc_data import BC_PRODUCTION_FACTOR

# Share of building footprint usable for panels
ROOF_AREA_FACTORS = {
    'Manufacturing': 0.7,  # Large flat roofs
    'Warehouse/Distribution': 0.8,
    'Retail/Commercial': 0.5,
    'Office Building': 0.6,
    'Healthcare': 0.4,  # Complex roof structures
    'Education': 0.5,
    'Agriculture': 0.6,
    'Other': 0.5,
}
DEFAULT_ROOF_AREA_FACTOR = 0.5

PANEL_AREA_SQFT = 20
PANEL_CAPACITY_KW = 0.35
MIN_SYSTEM_SIZE_KW = 20


def estimate_roof_area(building_square_footage: float, building_type: str) -> int:
    """
    Estimate usable roof area from building size and type.

    Args:
        building_square_footage: Building footprint (sq ft)
        building_type: Business category, e.g. 'Manufacturing'

    Returns:
        Usable roof area in sq ft
    """
    factor = ROOF_AREA_FACTORS.get(building_type, DEFAULT_ROOF_AREA_FACTOR)
    return math.floor(building_square_footage * factor + 0.5)


def optimize_system_size(
    available_roof_area: float,
    monthly_usage_kwh: float,
    peak_demand_kw: float
) -> float:
    """
    Recommend a system size bounded by roof space and annual consumption.

    Args:
        available_roof_area: Usable roof area (sq ft)
        monthly_usage_kwh: Average monthly consumption
        peak_demand_kw: Peak demand; not used by the current sizing rule

    Returns:
        Recommended size in kW, rounded to the nearest 5 kW, at least 20 kW
    """
    max_panels = math.floor(available_roof_area / PANEL_AREA_SQFT)
    max_system_size = max_panels * PANEL_CAPACITY_KW

    annual_usage = monthly_usage_kwh * 12
    optimal_system_size = annual_usage / BC_PRODUCTION_FACTOR

    # Conservative: 90% of the usage-matched size
    recommended = min(max_system_size, optimal_system_size * 0.9)

    return max(MIN_SYSTEM_SIZE_KW, math.floor(recommended / 5 + 0.5) * 5)
