"""
British Columbia solar resource, commercial rate and incentive tables.
"""

# Daily peak sun hours (kWh/m²/day) by BC sub-region
BC_SOLAR_IRRADIANCE = {
    'vancouver': 3.2,
    'victoria': 3.5,
    'kelowna': 3.8,
    'kamloops': 3.6,
    'prince_george': 3.1,
}
DEFAULT_IRRADIANCE = 3.3  # Provincial average

# BC Hydro commercial energy rates (CAD/kWh)
BC_COMMERCIAL_RATES = {
    'Small General Service': 0.1139,
    'Medium General Service': 0.1059,
    'Large General Service': 0.0879,
    'Transmission Service': 0.0759,
}
DEFAULT_RATE_TIER = 'Medium General Service'

# System efficiency
BASE_SYSTEM_EFFICIENCY = 0.85
PANEL_EFFICIENCY_FACTORS = {
    'High Efficiency': 1.10,
    'Premium Tier 1': 1.15,
}
INSTALLATION_EFFICIENCY_FACTORS = {
    'Ground-Mount': 1.05,  # Better orientation and access
    'Tracker System': 1.25,
}

# Installed cost
BASE_COST_PER_KW = 1750  # CAD/kW, commercial roof-mount baseline
INSTALLATION_COST_FACTORS = {
    'Ground-Mount': 1.10,
    'Carport/Canopy': 1.30,
    'Tracker System': 1.50,
}
PANEL_COST_FACTORS = {
    'High Efficiency': 1.15,
    'Premium Tier 1': 1.25,
}
BATTERY_STORAGE_COSTS = {
    'No Battery': 0,
    '50kWh Commercial Battery': 75000,
    '100kWh Commercial Battery': 140000,
    '200kWh+ Custom Solution': 250000,
}

# CleanBC Business rebate tiers
CLEANBC_MIN_SYSTEM_KW = 20
CLEANBC_TIER_BREAK_KW = 100  # Inclusive upper bound of the small tier
CLEANBC_REBATES = {
    'small': {
        'name': 'CleanBC Business (20-100 kW)',
        'rebate_per_kw': 500,
        'max_rebate': 50000,
    },
    'large': {
        'name': 'CleanBC Business (over 100 kW)',
        'rebate_per_kw': 400,
        'max_rebate': 125000,
    },
}

# Federal Investment Tax Credit
FEDERAL_ITC_RATE = 0.30

# BC grid emission factor (kg CO2 per kWh)
BC_GRID_EMISSION_FACTOR = 0.42

ANALYSIS_YEARS = 25

# Result cache
CACHE_TTL_SECONDS = 5 * 60
CACHE_CLEANUP_THRESHOLD = 100

# Interactive financial model defaults
DEFAULT_COST_PER_WATT = 2.50  # CAD/W installed
DEFAULT_RATE_ESCALATION = 0.0375
DEFAULT_ENERGY_RATE = 0.1080
BC_PRODUCTION_FACTOR = 1200  # kWh per kW per year
ANNUAL_DEGRADATION = 0.007
BC_HYDRO_REBATE_PER_KW = 1000
BC_HYDRO_REBATE_CAP = 10000
PST_RATE = 0.07


def normalize_region(location: str) -> str:
    """Normalize a free-form region name into an irradiance table key."""
    if not location:
        return ''
    key = location.strip().lower()
    for sep in (' ', '-'):
        key = key.replace(sep, '_')
    return key


def get_irradiance(location: str) -> float:
    """Get peak sun hours for a region, with fallback to the provincial average."""
    return BC_SOLAR_IRRADIANCE.get(normalize_region(location), DEFAULT_IRRADIANCE)


def get_energy_rate(rate_tier: str) -> float:
    """Get energy rate for a tier, with fallback to Medium General Service."""
    return BC_COMMERCIAL_RATES.get(rate_tier, BC_COMMERCIAL_RATES[DEFAULT_RATE_TIER])


def estimate_cleanbc_rebate(system_size_kw: float) -> float:
    """
    Estimate the CleanBC Business rebate for a system size.

    The 100 kW boundary belongs to the lower tier. Systems under 20 kW
    receive nothing.

    Args:
        system_size_kw: System size in kW

    Returns:
        Rebate amount in CAD
    """
    if CLEANBC_MIN_SYSTEM_KW <= system_size_kw <= CLEANBC_TIER_BREAK_KW:
        tier = CLEANBC_REBATES['small']
    elif system_size_kw > CLEANBC_TIER_BREAK_KW:
        tier = CLEANBC_REBATES['large']
    else:
        return 0.0

    rebate = system_size_kw * tier['rebate_per_kw']
    return min(rebate, tier['max_rebate'])
