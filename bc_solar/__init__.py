"""BC commercial solar calculation engine."""

from .inputs import (
    CalculationInput,
    InputValidationError,
    RateTier,
    InstallationType,
    PanelQuality,
    BatteryStorage
)

from .calculator import (
    compute,
    calculate_commercial_solar,
    calculate_system_efficiency,
    calculate_cost_per_kw,
    CalculationResult
)

from .calculation_cache import (
    CalculationCache,
    CacheEntry,
    make_cache_key
)

from .financial_calcs import (
    calculate_financial_model,
    project_cumulative_position,
    estimate_monthly_usage_from_bill,
    calculate_offset_percentage,
    FinancialModelResult
)

from .sizing import (
    estimate_roof_area,
    optimize_system_size,
    ROOF_AREA_FACTORS
)

from .bc_data import (
    BC_SOLAR_IRRADIANCE,
    BC_COMMERCIAL_RATES,
    FEDERAL_ITC_RATE,
    CACHE_TTL_SECONDS,
    get_irradiance,
    get_energy_rate,
    estimate_cleanbc_rebate
)
