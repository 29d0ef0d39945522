"""
Streamlit Dashboard for the Preparedness Risk Engine

Admin risk calculator for previewing hazard scores, multipliers and
strategy recommendations against the current catalog.
"""

import streamlit as st
import plotly.express as px
from datetime import date
import sys
import os

# Add src directory to path
sys.path.append(os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "src"))

from catalog_connectors import connector_from_settings
from risk_scoring import CatalogUnavailableError, RiskEngine, from_simplified_answers, get_settings
from risk_scoring.engine import assessment_frame, data_quality_label, overall_risk_score, recommendation_frame

# Page configuration
st.set_page_config(
    page_title="Preparedness Risk Calculator",
    page_icon="🌀",
    layout="wide",
    initial_sidebar_state="expanded"
)

settings = get_settings()


# Initialize connector
@st.cache_resource
def get_connector():
    return connector_from_settings(settings)


def load_snapshot():
    try:
        return get_connector().load_snapshot()
    except CatalogUnavailableError as e:
        st.error(f"Catalog unavailable: {e.message}")
        st.stop()


snapshot = load_snapshot()

# Title and description
st.title(" Preparedness Risk Calculator")
st.markdown("**Preview hazard scores and strategy recommendations for a business**")

# Sidebar
st.sidebar.header("Configuration")

st.sidebar.subheader("🏪 Business")
business_type_ids = sorted(bt.business_type_id for bt in snapshot.business_types)
business_type_id = st.sidebar.selectbox("Business Type", business_type_ids)

st.sidebar.subheader("📍 Location")
location_ids = ["(unknown)"] + sorted(loc.location_id for loc in snapshot.locations)
location_choice = st.sidebar.selectbox("Location", location_ids)
location_id = None if location_choice == "(unknown)" else location_choice
location = snapshot.location(location_id) if location_id else None

as_of = st.sidebar.date_input("Assessment Date", value=date.today())

st.sidebar.subheader(" Business Profile")
customer_base = st.sidebar.radio(
    "Customers", ["mainly_tourists", "mix", "mainly_locals"], index=1, horizontal=True
)
power_dependency = st.sidebar.selectbox(
    "Without power the business", ["cannot_operate", "partially", "can_operate"], index=1
)
digital_dependency = st.sidebar.selectbox(
    "Digital systems are", ["essential", "helpful", "not_used"], index=1
)
imports_from_overseas = st.sidebar.checkbox("Imports from overseas")
sells_perishable = st.sidebar.checkbox("Sells perishable goods")
minimal_inventory = st.sidebar.checkbox("Keeps minimal inventory")
expensive_equipment = st.sidebar.checkbox("Relies on expensive equipment")
flood_risk = st.sidebar.slider("Location flood risk", min_value=0, max_value=10, value=5)

# Analysis button
if st.sidebar.button(" Calculate Risk", type="primary"):
    with st.spinner("Scoring hazards..."):
        characteristics = from_simplified_answers(
            customer_base=customer_base,
            power_dependency=power_dependency,
            digital_dependency=digital_dependency,
            imports_from_overseas=imports_from_overseas,
            sells_perishable=sells_perishable,
            minimal_inventory=minimal_inventory,
            expensive_equipment=expensive_equipment,
            is_coastal=bool(location and location.is_coastal),
            is_urban=bool(location and location.is_urban),
            flood_risk=flood_risk,
        )

        engine = RiskEngine(snapshot, settings)
        results = engine.assess_risks(business_type_id, location_id, characteristics, as_of)
        recommendations = engine.recommend_strategies(
            engine.active_hazards(results), characteristics, business_type_id
        )

        # Store in session state
        st.session_state.results = results
        st.session_state.recommendations = recommendations
        st.session_state.analysis_complete = True

# Main content
if st.session_state.get("analysis_complete", False):
    results = st.session_state.results
    recommendations = st.session_state.recommendations
    risks = assessment_frame(results)

    # Risk Score Cards
    st.subheader(" Risk Assessment Summary")

    col1, col2, col3, col4 = st.columns(4)

    with col1:
        st.metric(label="Overall Score", value=f"{overall_risk_score(results):.1f}/100")

    with col2:
        st.metric(label="Force-Selected", value=int((risks["disposition"] == "force_selected").sum()))

    with col3:
        st.metric(label="Selected", value=int((risks["disposition"] == "selected").sum()))

    with col4:
        st.metric(label="Data Quality", value=data_quality_label(results).title())

    if any(r.multipliers_unavailable for r in results):
        st.warning("⚠️ Multiplier rules are unavailable - showing unadjusted scores")

    st.markdown("---")

    tab1, tab2, tab3 = st.tabs(["📈 Hazards", "✖️ Multipliers", "🛠️ Strategies"])

    with tab1:
        st.subheader("Hazard Scores")

        if not risks.empty:
            fig = px.bar(
                risks,
                x="hazard_id",
                y="final_score",
                color="disposition",
                labels={"hazard_id": "Hazard", "final_score": "Final Score (0-10)"},
                title="Final Hazard Scores",
                color_discrete_map={
                    "force_selected": "#d62728",
                    "selected": "#ff7f0e",
                    "available": "#7f7f7f"
                }
            )
            fig.add_hline(y=settings.force_preselect_score, line_dash="dash", annotation_text="Force select")
            fig.add_hline(y=settings.min_preselect_score, line_dash="dot", annotation_text="Pre-select")
            st.plotly_chart(fig, use_container_width=True)

            st.dataframe(risks, use_container_width=True)
        else:
            st.info("No hazards are linked to this business type.")

    with tab2:
        st.subheader("Applied Multipliers")

        fired = [r for r in results if r.applied_multipliers]
        if fired:
            for result in fired:
                with st.expander(f"{result.hazard_id}: {result.raw_score} → {result.final_score}"):
                    for multiplier in result.applied_multipliers:
                        st.write(f"**{multiplier.name}** ×{multiplier.factor}")
                        if multiplier.reasoning.en:
                            st.caption(multiplier.reasoning.en)
        else:
            st.info("No multipliers applied for this profile.")

    with tab3:
        st.subheader("Recommended Strategies")

        if recommendations.error:
            st.warning(f"Strategy catalog: {recommendations.error.replace('_', ' ')}")

        strategies = recommendation_frame(recommendations)
        if not strategies.empty:
            fig = px.scatter(
                strategies,
                x="cost",
                y="effectiveness",
                size="roi",
                color="priority",
                hover_name="strategy_id",
                title="Effectiveness vs Cost",
                labels={"cost": "Relative Cost", "effectiveness": "Effectiveness (0-1)"}
            )
            st.plotly_chart(fig, use_container_width=True)

            st.dataframe(strategies, use_container_width=True)

            for rec in recommendations.recommendations:
                if rec.conflicts:
                    st.error(f"**{rec.strategy_id}** conflicts with {', '.join(rec.conflicts)}")
        elif not recommendations.error:
            st.info("No strategies apply to the selected hazards.")

else:
    # Instructions
    st.info("👈 Choose a business type and location in the sidebar and click **Calculate Risk**.")

    st.markdown(f"""
    ### How Scores Are Calculated

    1. Each hazard starts from the business type's base risk level, replaced by the
       location's level when the catalog has one
    2. Coastal, urban and peak-season factors adjust the score
    3. Multiplier rules scale the score based on the business profile
    4. Scores of {settings.force_preselect_score} or more are force-selected; {settings.min_preselect_score} or more are pre-selected
    5. Strategies covering the selected hazards are ranked by priority, effectiveness and ROI
    """)

# Footer
st.sidebar.markdown("---")
st.sidebar.markdown(f"""
**Preparedness Risk Calculator**
Version 1.0.0
Catalog: {settings.catalog_url or settings.catalog_path}
""")
