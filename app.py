"""
BC Commercial Solar Calculator
Streamlit application for estimating commercial solar production, incentives and returns.
"""

import logging
import os

import streamlit as st
import pandas as pd
import plotly.graph_objects as go

from bc_solar import (
    BC_COMMERCIAL_RATES,
    BC_SOLAR_IRRADIANCE,
    CACHE_TTL_SECONDS,
    ROOF_AREA_FACTORS,
    BatteryStorage,
    CalculationCache,
    CalculationInput,
    InputValidationError,
    InstallationType,
    PanelQuality,
    calculate_commercial_solar,
    calculate_financial_model,
    calculate_offset_percentage,
    estimate_monthly_usage_from_bill,
    estimate_roof_area,
    optimize_system_size,
    project_cumulative_position,
)

logging.basicConfig(
    level=os.environ.get("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s"
)
logger = logging.getLogger(__name__)

# Page configuration
st.set_page_config(
    page_title="BC Commercial Solar Calculator",
    page_icon="☀️",
    layout="wide",
    initial_sidebar_state="expanded"
)

STEPS = ["1. Business", "2. System", "3. Results"]


def get_cache_ttl_seconds() -> float:
    """Get the result cache TTL from Streamlit secrets, the environment, or the default."""
    # Try Streamlit secrets first (for deployment)
    try:
        return float(st.secrets["SOLAR_CACHE_TTL_SECONDS"])
    except (KeyError, FileNotFoundError):
        pass

    value = os.environ.get("SOLAR_CACHE_TTL_SECONDS")
    if value:
        try:
            return float(value)
        except ValueError:
            logger.warning("Ignoring invalid SOLAR_CACHE_TTL_SECONDS=%r", value)

    return CACHE_TTL_SECONDS


@st.cache_resource
def get_calculation_cache() -> CalculationCache:
    """One result cache per server process, shared by all sessions."""
    ttl = get_cache_ttl_seconds()
    logger.info("Creating calculation cache with %.0f s TTL", ttl)
    return CalculationCache(ttl_seconds=ttl)


def initialize_session_state():
    """Initialize session state variables."""
    defaults = {
        'step': 1,
        'business_name': '',
        'business_type': 'Manufacturing',
        'location_region': 'Vancouver',
        'building_square_footage': 40000.0,
        'available_roof_area': 0.0,
        'monthly_usage_kwh': 25000.0,
        'monthly_bill_cad': 3000.0,
        'peak_demand_kw': 150.0,
        'system_size_kw': 0.0,
        'rate_tier': 'Medium General Service',
        'installation_type': InstallationType.ROOF_MOUNT.value,
        'panel_quality': PanelQuality.STANDARD.value,
        'battery_storage': BatteryStorage.NONE.value,
    }
    for key, value in defaults.items():
        if key not in st.session_state:
            st.session_state[key] = value


def render_step_indicator():
    """Render the step progress indicator."""
    cols = st.columns(len(STEPS))
    for i, (col, step_name) in enumerate(zip(cols, STEPS), 1):
        if i < st.session_state.step:
            col.markdown(f"✅ **{step_name}**")
        elif i == st.session_state.step:
            col.markdown(f"🔵 **{step_name}**")
        else:
            col.markdown(f"⚪ {step_name}")

    st.divider()


def region_label(key: str) -> str:
    return key.replace('_', ' ').title()


def step1_business_details():
    """Step 1: Business, building and consumption details."""
    st.header("🏢 Step 1: Your Business")

    col1, col2 = st.columns(2)

    with col1:
        st.session_state.business_name = st.text_input(
            "Business Name",
            value=st.session_state.business_name
        )

        building_types = list(ROOF_AREA_FACTORS.keys())
        st.session_state.business_type = st.selectbox(
            "Business Type",
            options=building_types,
            index=building_types.index(st.session_state.business_type)
        )

        regions = [region_label(key) for key in BC_SOLAR_IRRADIANCE] + ["Other BC location"]
        current_region = st.session_state.location_region
        st.session_state.location_region = st.selectbox(
            "Region",
            options=regions,
            index=regions.index(current_region) if current_region in regions else len(regions) - 1,
            help="Other locations use the BC average of 3.3 peak sun hours"
        )

        st.session_state.building_square_footage = st.number_input(
            "Building Square Footage",
            min_value=1000.0,
            value=float(st.session_state.building_square_footage),
            step=1000.0,
            format="%.0f"
        )

    with col2:
        st.session_state.monthly_usage_kwh = st.number_input(
            "Monthly Electricity Usage (kWh)",
            min_value=1000.0,
            value=float(st.session_state.monthly_usage_kwh),
            step=500.0,
            format="%.0f"
        )

        st.session_state.monthly_bill_cad = st.number_input(
            "Monthly Electricity Bill (CAD)",
            min_value=500.0,
            value=float(st.session_state.monthly_bill_cad),
            step=100.0,
            format="%.0f"
        )

        tiers = list(BC_COMMERCIAL_RATES.keys())
        st.session_state.rate_tier = st.selectbox(
            "BC Hydro Rate Tier",
            options=tiers,
            index=tiers.index(st.session_state.rate_tier),
            format_func=lambda tier: f"{tier} (${BC_COMMERCIAL_RATES[tier]:.4f}/kWh)"
        )

        implied_usage = estimate_monthly_usage_from_bill(
            st.session_state.monthly_bill_cad,
            st.session_state.rate_tier
        )
        st.caption(f"Your bill implies about **{implied_usage:,.0f} kWh/month** at this tier's rate")
        if st.button("Use bill estimate for usage"):
            st.session_state.monthly_usage_kwh = max(float(round(implied_usage)), 1000.0)
            st.rerun()

        st.session_state.peak_demand_kw = st.number_input(
            "Peak Demand (kW)",
            min_value=10.0,
            value=float(st.session_state.peak_demand_kw),
            step=5.0,
            format="%.0f"
        )

        estimated_roof = estimate_roof_area(
            st.session_state.building_square_footage,
            st.session_state.business_type
        )
        st.info(f"Estimated usable roof area: **{estimated_roof:,} sq ft**")

    st.divider()

    col1, col2, col3 = st.columns([1, 1, 1])
    with col3:
        if st.button("Continue →", type="primary", use_container_width=True):
            st.session_state.available_roof_area = float(estimated_roof)
            st.session_state.system_size_kw = float(optimize_system_size(
                estimated_roof,
                st.session_state.monthly_usage_kwh,
                st.session_state.peak_demand_kw
            ))
            st.session_state.step = 2
            st.rerun()


def step2_system_configuration():
    """Step 2: System size and equipment options."""
    st.header("☀️ Step 2: System Configuration")

    col1, col2 = st.columns(2)

    with col1:
        st.subheader("System Size")
        st.caption(
            f"Recommended from {st.session_state.available_roof_area:,.0f} sq ft of roof "
            f"and {st.session_state.monthly_usage_kwh:,.0f} kWh/month"
        )
        st.session_state.system_size_kw = st.number_input(
            "System Size (kW)",
            min_value=1.0,
            max_value=5000.0,
            value=max(float(st.session_state.system_size_kw), 20.0),
            step=5.0,
            help="CleanBC Business rebates apply from 20 kW"
        )

    with col2:
        st.subheader("Equipment")
        for key, label, enum_cls in [
            ('installation_type', "Installation Type", InstallationType),
            ('panel_quality', "Panel Quality", PanelQuality),
            ('battery_storage', "Battery Storage", BatteryStorage),
        ]:
            options = [member.value for member in enum_cls]
            st.session_state[key] = st.selectbox(
                label,
                options=options,
                index=options.index(st.session_state[key])
            )

    st.divider()

    col1, col2, col3 = st.columns([1, 1, 1])
    with col1:
        if st.button("← Back", use_container_width=True):
            st.session_state.step = 1
            st.rerun()
    with col3:
        if st.button("Calculate Results →", type="primary", use_container_width=True):
            st.session_state.step = 3
            st.rerun()


def build_calculation_input() -> CalculationInput:
    """Assemble calculator inputs from session state."""
    region = st.session_state.location_region
    return CalculationInput.from_dict({
        'system_size_kw': st.session_state.system_size_kw,
        'monthly_usage_kwh': st.session_state.monthly_usage_kwh,
        'current_monthly_bill_cad': st.session_state.monthly_bill_cad,
        'rate_tier': st.session_state.rate_tier,
        'installation_type': st.session_state.installation_type,
        'panel_quality': st.session_state.panel_quality,
        'battery_storage': st.session_state.battery_storage,
        'location_region': '' if region == "Other BC location" else region,
    })


def render_cumulative_chart(cumulative_position, title):
    years = list(range(1, len(cumulative_position) + 1))

    fig = go.Figure()

    fig.add_trace(go.Scatter(
        x=years,
        y=cumulative_position,
        mode='lines+markers',
        name='Cumulative Position',
        line=dict(color='green', width=3),
        fill='tozeroy',
        fillcolor='rgba(0, 255, 0, 0.1)'
    ))

    # Add break-even line
    fig.add_hline(y=0, line_dash="dash", line_color="red",
                  annotation_text="Break-even")

    fig.update_layout(
        title=title,
        xaxis_title="Year",
        yaxis_title="Cumulative Position (CAD)",
        hovermode='x unified',
        height=400
    )

    st.plotly_chart(fig, use_container_width=True)


def step3_results():
    """Step 3: Results dashboard."""
    st.header("📊 Step 3: Your Solar Estimate")

    try:
        inputs = build_calculation_input()
    except InputValidationError as e:
        st.error(f"Please check your inputs: {e}")
        if st.button("← Back to System"):
            st.session_state.step = 2
            st.rerun()
        return

    result = calculate_commercial_solar(inputs, cache=get_calculation_cache())

    annual_usage = st.session_state.monthly_usage_kwh * 12
    offset_pct = calculate_offset_percentage(result.annual_production_kwh, annual_usage)

    col1, col2, col3, col4 = st.columns(4)
    with col1:
        st.metric("Annual Production", f"{result.annual_production_kwh:,.0f} kWh")
    with col2:
        st.metric("Usage Offset", f"{min(offset_pct, 100):.0f}%")
    with col3:
        st.metric("Annual Savings", f"${result.annual_savings_cad:,.0f}")
    with col4:
        st.metric("CO₂ Offset", f"{result.co2_offset_annual_tonnes:.1f} t/yr")

    st.divider()

    col1, col2 = st.columns([1, 1])

    with col1:
        st.subheader("💰 Investment & Incentives")

        breakdown = pd.DataFrame([
            ("Total System Cost", result.total_cost_cad),
            ("CleanBC Business Rebate", -result.rebate_cad),
            ("Federal ITC (30%)", -result.federal_incentive_cad),
            ("Net Cost", result.net_cost_cad),
        ], columns=["Item", "CAD"])
        st.dataframe(
            breakdown.style.format({"CAD": "${:,.0f}"}),
            hide_index=True,
            use_container_width=True
        )

        st.metric("Simple Payback", f"{result.payback_years:.1f} years")
        st.metric("25-Year ROI", f"{result.roi_25_year_percent:.1f}%")

    with col2:
        render_cumulative_chart(
            project_cumulative_position(result),
            "Cumulative Position Over 25 Years"
        )

    st.divider()

    with st.expander("🔧 Interactive Financial Model"):
        render_financial_model(inputs.system_size_kw)

    col1, col2, col3 = st.columns([1, 1, 1])
    with col1:
        if st.button("← Back to System", use_container_width=True):
            st.session_state.step = 2
            st.rerun()
    with col3:
        if st.button("🔄 Start New Estimate", use_container_width=True):
            for key in list(st.session_state.keys()):
                del st.session_state[key]
            st.rerun()


def render_financial_model(default_size_kw: float):
    """What-if model with rate escalation and panel degradation."""
    col1, col2 = st.columns(2)

    with col1:
        system_size = st.slider("System Size (kW)", 20.0, 1000.0, min(max(default_size_kw, 20.0), 1000.0), 5.0)
        cost_per_watt = st.slider("Installed Cost ($/W)", 1.50, 4.00, 2.50, 0.05)
    with col2:
        escalation = st.slider("Rate Escalation (%/yr)", 0.0, 8.0, 3.75, 0.25)
        energy_rate = st.slider("Energy Rate ($/kWh)", 0.05, 0.20, 0.1080, 0.0005, format="%.4f")

    model = calculate_financial_model(
        system_size_kw=system_size,
        cost_per_watt=cost_per_watt,
        rate_escalation=escalation / 100,
        energy_rate=energy_rate
    )

    col1, col2, col3, col4 = st.columns(4)
    col1.metric("Net Cost", f"${model.net_cost:,.0f}")
    col2.metric("Payback", f"{model.payback_years:.1f} years")
    col3.metric("IRR (approx.)", f"{model.irr_percent:.1f}%")
    col4.metric("25-Year ROI", f"{model.roi_25_year:.0f}%")

    yearly = pd.DataFrame({
        'Year': range(1, len(model.savings_by_year) + 1),
        'Savings': model.savings_by_year,
        'Cumulative': model.cumulative_savings,
    })
    yearly['Net Position'] = yearly['Cumulative'] - model.net_cost
    render_cumulative_chart(yearly['Net Position'].tolist(), "Net Position with Escalation")


def main():
    """Main application entry point."""

    # Initialize session state
    initialize_session_state()

    # Sidebar
    with st.sidebar:
        st.title("☀️ Solar Calculator")
        st.markdown("**BC Commercial Solar Calculator**")
        st.divider()

        st.markdown("### About")
        st.markdown("""
        Estimate for your business:
        - Annual solar production
        - CleanBC and federal incentives
        - Payback period, 25-year ROI and CO₂ offset

        Estimates use regional BC irradiance and BC Hydro commercial rates.
        """)

        st.divider()

        # Quick navigation
        st.markdown("### Quick Jump")
        step = st.radio(
            "Go to step:",
            [1, 2, 3],
            index=st.session_state.step - 1,
            format_func=lambda x: STEPS[x - 1],
            label_visibility="collapsed"
        )
        if step != st.session_state.step:
            st.session_state.step = step
            st.rerun()

    # Main content
    st.title("☀️ BC Commercial Solar Calculator")

    render_step_indicator()

    if st.session_state.step == 1:
        step1_business_details()
    elif st.session_state.step == 2:
        step2_system_configuration()
    elif st.session_state.step == 3:
        step3_results()


if __name__ == "__main__":
    main()
