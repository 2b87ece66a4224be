"""
Multi-year financial projections for commercial solar in BC.
Covers the interactive what-if model and helpers for the results dashboard.
"""

import math
from dataclasses import dataclass
from typing import List

import numpy as np

from .bc_data import (
    ANALYSIS_YEARS,
    ANNUAL_DEGRADATION,
    BC_HYDRO_REBATE_CAP,
    BC_HYDRO_REBATE_PER_KW,
    BC_PRODUCTION_FACTOR,
    DEFAULT_COST_PER_WATT,
    DEFAULT_ENERGY_RATE,
    DEFAULT_RATE_ESCALATION,
    FEDERAL_ITC_RATE,
    PST_RATE,
    get_energy_rate,
)
from .calculator import CalculationResult


@dataclass
class FinancialModelResult:
    """Results for the interactive financial model."""
    gross_cost: float
    annual_production_kwh: float
    federal_itc: float
    bc_hydro_rebate: float
    pst_savings: float
    total_incentives: float
    net_cost: float
    year1_savings: float
    payback_years: float
    irr_percent: float  # Annualized growth of cumulative savings over net cost
    roi_25_year: float
    cumulative_savings_25_year: float
    savings_by_year: List[float]
    cumulative_savings: List[float]  # By year


def calculate_financial_model(
    system_size_kw: float,
    cost_per_watt: float = DEFAULT_COST_PER_WATT,
    rate_escalation: float = DEFAULT_RATE_ESCALATION,
    energy_rate: float = DEFAULT_ENERGY_RATE,
    analysis_years: int = ANALYSIS_YEARS
) -> FinancialModelResult:
    """
    Project savings for a system with escalating rates and panel degradation.

    Args:
        system_size_kw: System size in kW
        cost_per_watt: Installed cost (CAD/W)
        rate_escalation: Annual energy rate increase (e.g., 0.0375 for 3.75%)
        energy_rate: Current energy rate (CAD/kWh)
        analysis_years: Number of years to analyze

    Returns:
        FinancialModelResult with incentive breakdown and yearly savings
    """
    gross_cost = system_size_kw * 1000 * cost_per_watt
    annual_production = system_size_kw * BC_PRODUCTION_FACTOR

    federal_itc = gross_cost * FEDERAL_ITC_RATE
    bc_hydro_rebate = min(system_size_kw * BC_HYDRO_REBATE_PER_KW, BC_HYDRO_REBATE_CAP)
    pst_savings = gross_cost * PST_RATE  # PST exemption on equipment
    total_incentives = federal_itc + bc_hydro_rebate + pst_savings

    net_cost = gross_cost - total_incentives

    year1_savings = annual_production * energy_rate
    payback = net_cost / year1_savings if year1_savings else math.inf

    # Degradation and escalation compound from year 1
    year_index = np.arange(analysis_years)
    production = annual_production * (1 - ANNUAL_DEGRADATION) ** year_index
    rates = energy_rate * (1 + rate_escalation) ** year_index
    savings_by_year = production * rates
    cumulative = np.cumsum(savings_by_year)
    total_savings = float(cumulative[-1]) if analysis_years > 0 else 0.0

    savings_ratio = total_savings / net_cost if net_cost else math.nan
    if savings_ratio > 0:
        irr = (savings_ratio ** (1 / analysis_years) - 1) * 100
    else:
        irr = math.nan
    roi = (total_savings - net_cost) / net_cost * 100 if net_cost else math.nan

    return FinancialModelResult(
        gross_cost=gross_cost,
        annual_production_kwh=annual_production,
        federal_itc=federal_itc,
        bc_hydro_rebate=bc_hydro_rebate,
        pst_savings=pst_savings,
        total_incentives=total_incentives,
        net_cost=net_cost,
        year1_savings=year1_savings,
        payback_years=payback,
        irr_percent=irr,
        roi_25_year=roi,
        cumulative_savings_25_year=total_savings,
        savings_by_year=savings_by_year.tolist(),
        cumulative_savings=cumulative.tolist()
    )


def project_cumulative_position(
    result: CalculationResult,
    years: int = ANALYSIS_YEARS
) -> List[float]:
    """
    Cumulative cash position by year for a calculator result.

    Starts from the negative net cost and adds flat annual savings.

    Args:
        result: Calculator result
        years: Number of years to project

    Returns:
        Cumulative position at the end of each year
    """
    year_number = np.arange(1, years + 1)
    position = -result.net_cost_cad + year_number * result.annual_savings_cad
    return position.tolist()


def estimate_monthly_usage_from_bill(monthly_bill_cad: float, rate_tier: str) -> float:
    """
    Monthly kWh a BC Hydro bill implies at the tier's energy rate.

    Unrecognized tiers are priced at the Medium General Service rate, the
    same fallback the calculator uses. Demand and basic charges are ignored,
    so this overstates usage for bills with large demand components.
    """
    return monthly_bill_cad / get_energy_rate(rate_tier)


def calculate_offset_percentage(
    annual_production_kwh: float,
    annual_usage_kwh: float
) -> float:
    """
    Share of annual consumption the system's production covers.

    Not capped: oversized systems return more than 100. The dashboard
    caps the displayed figure at 100% since BC Hydro net metering credits
    surplus generation rather than paying it out.

    Args:
        annual_production_kwh: Estimated annual production
        annual_usage_kwh: Monthly usage × 12

    Returns:
        Offset percentage, or 0 when usage is not positive
    """
    if annual_usage_kwh <= 0:
        return 0
    return annual_production_kwh / annual_usage_kwh * 100
