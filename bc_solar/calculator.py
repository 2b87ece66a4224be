"""
Commercial solar calculation engine for British Columbia.
Sizes production, stacks incentives and derives payback, ROI and CO2 offset.
"""

import logging
import math
from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional

from .bc_data import (
    ANALYSIS_YEARS,
    BASE_COST_PER_KW,
    BASE_SYSTEM_EFFICIENCY,
    BATTERY_STORAGE_COSTS,
    BC_GRID_EMISSION_FACTOR,
    FEDERAL_ITC_RATE,
    INSTALLATION_COST_FACTORS,
    INSTALLATION_EFFICIENCY_FACTORS,
    PANEL_COST_FACTORS,
    PANEL_EFFICIENCY_FACTORS,
    estimate_cleanbc_rebate,
    get_energy_rate,
    get_irradiance,
)
from .calculation_cache import CalculationCache
from .inputs import CalculationInput

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CalculationResult:
    """Production and financial forecast for one CalculationInput."""
    system_size_kw: float
    annual_production_kwh: float
    total_cost_cad: float
    rebate_cad: float  # CleanBC Business rebate
    federal_incentive_cad: float
    net_cost_cad: float
    annual_savings_cad: float
    payback_years: float
    roi_25_year_percent: float
    co2_offset_annual_tonnes: float

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _round_half_up(value: float, digits: int = 0) -> float:
    """Round halves upward; non-finite values are returned unchanged."""
    if not math.isfinite(value):
        return value
    scale = 10 ** digits
    return math.floor(value * scale + 0.5) / scale


def _divide(numerator: float, denominator: float) -> float:
    """Float division that yields inf or nan for a zero denominator instead of raising."""
    if denominator == 0:
        if numerator == 0 or math.isnan(numerator):
            return math.nan
        return math.copysign(math.inf, numerator) * math.copysign(1.0, denominator)
    return numerator / denominator


def calculate_system_efficiency(inputs: CalculationInput) -> float:
    """Base efficiency with panel and installation multipliers applied."""
    efficiency = BASE_SYSTEM_EFFICIENCY
    efficiency *= PANEL_EFFICIENCY_FACTORS.get(inputs.panel_quality.value, 1.0)
    efficiency *= INSTALLATION_EFFICIENCY_FACTORS.get(inputs.installation_type.value, 1.0)
    return efficiency


def calculate_cost_per_kw(inputs: CalculationInput) -> float:
    """Installed cost per kW after installation and panel adjustments."""
    cost_per_kw = BASE_COST_PER_KW
    cost_per_kw *= INSTALLATION_COST_FACTORS.get(inputs.installation_type.value, 1.0)
    cost_per_kw *= PANEL_COST_FACTORS.get(inputs.panel_quality.value, 1.0)
    return cost_per_kw


def compute(inputs: CalculationInput) -> CalculationResult:
    """
    Calculate production, incentives and returns for a commercial system.

    Args:
        inputs: Validated calculator inputs

    Returns:
        CalculationResult with rounded financial projections. Payback and
        ROI are inf or nan when their divisor is zero; net cost is not
        clamped and may be negative.
    """
    system_size = inputs.system_size_kw

    # Production
    irradiance = get_irradiance(inputs.location_region)
    peak_sun_hours = irradiance * 365
    system_efficiency = calculate_system_efficiency(inputs)
    annual_production = system_size * peak_sun_hours * system_efficiency

    # Costs
    total_cost = system_size * calculate_cost_per_kw(inputs)
    total_cost += BATTERY_STORAGE_COSTS[inputs.battery_storage.value]

    # Incentives
    rebate = estimate_cleanbc_rebate(system_size)
    federal_incentive = total_cost * FEDERAL_ITC_RATE
    net_cost = total_cost - rebate - federal_incentive

    # Returns
    energy_rate = get_energy_rate(inputs.rate_tier_label)
    annual_savings = annual_production * energy_rate
    payback = _divide(net_cost, annual_savings)
    roi = _divide(annual_savings * ANALYSIS_YEARS - net_cost, net_cost) * 100

    co2_offset = (annual_production * BC_GRID_EMISSION_FACTOR) / 1000  # tonnes

    result = CalculationResult(
        system_size_kw=system_size,
        annual_production_kwh=_round_half_up(annual_production),
        total_cost_cad=_round_half_up(total_cost),
        rebate_cad=_round_half_up(rebate),
        federal_incentive_cad=_round_half_up(federal_incentive),
        net_cost_cad=_round_half_up(net_cost),
        annual_savings_cad=_round_half_up(annual_savings),
        payback_years=_round_half_up(payback, 1),
        roi_25_year_percent=_round_half_up(roi, 1),
        co2_offset_annual_tonnes=_round_half_up(co2_offset, 1),
    )
    logger.debug(
        "Computed %.1f kW estimate: irradiance=%.2f efficiency=%.4f rate=%.4f",
        system_size, irradiance, system_efficiency, energy_rate
    )
    return result


def calculate_commercial_solar(
    inputs: CalculationInput,
    cache: Optional[CalculationCache] = None
) -> CalculationResult:
    """
    Calculate a commercial estimate, reusing a cached result when available.

    Cache failures are logged and bypassed; the result is always computed
    directly when the cache cannot answer.

    Args:
        inputs: Validated calculator inputs
        cache: Optional result cache owned by the caller

    Returns:
        CalculationResult for the inputs
    """
    if cache is None:
        return compute(inputs)

    try:
        cached = cache.get(inputs)
    except Exception:
        logger.warning("Calculation cache lookup failed, computing directly", exc_info=True)
        cached = None

    if cached is not None:
        return cached

    result = compute(inputs)

    try:
        cache.set(inputs, result)
    except Exception:
        logger.warning("Could not store calculation in cache", exc_info=True)

    return result
