"""
Streamlit UI for the warung pricing tools.

Features:
- Price calculator: cost price + category → suggested retail/wholesale prices
- Markup rules table with an add form
- Bulk repricing preview and apply
- Backup download and restore
"""
import streamlit as st
import pandas as pd
import sys
from pathlib import Path
from datetime import datetime

# Add src to path for imports
src_path = Path(__file__).parent.parent.parent
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))

from warung_pricing.config.settings import configure_logging
from warung_pricing.data.backup import backup_filename
from warung_pricing.engine.models import MarkupRule
from warung_pricing.services.context import PricingContext


st.set_page_config(
    page_title="Warung Pricing",
    layout="wide",
    initial_sidebar_state="expanded"
)

ALL_CATEGORIES = "__all__"


@st.cache_resource
def get_context():
    """Get cached service context."""
    configure_logging()
    return PricingContext.build()


def format_rupiah(amount) -> str:
    return f"Rp {amount:,.0f}".replace(",", ".")


try:
    ctx = get_context()
except Exception as e:
    st.error(f"System Error: {e}")
    st.stop()

categories = ctx.categories.list_categories()
category_names = {c.id: c.name for c in categories}


def category_label(category_id) -> str:
    if not category_id:
        return "All products"
    return category_names.get(category_id, "Unknown category")


# ============================================================================
# SIDEBAR: Status
# ============================================================================
with st.sidebar:
    st.header("🏪 Warung Pricing")
    stats = ctx.markup_rules.get_stats()
    if stats['total']:
        st.success(f"🔧 **{stats['total']} Markup Rules**")
    else:
        st.warning("⚠️ No markup rules yet")
    st.caption(f"Data: `{ctx.settings.data_dir}`")


st.title("Selling Price Calculator")
st.caption(f"v{ctx.settings.app_version} | {datetime.now().strftime('%Y-%m-%d')}")

tab1, tab2, tab3, tab4 = st.tabs(["🧮 Calculator", "🔧 Markup Rules", "📦 Reprice", "💾 Backup"])


# ============================================================================
# TAB 1: CALCULATOR
# ============================================================================
with tab1:
    col1, col2 = st.columns([1.2, 1.8], gap="large")

    with col1:
        cost = st.number_input("Cost price", min_value=0, value=0, step=500)
        options = [ALL_CATEGORIES] + [c.id for c in categories]
        selected = st.selectbox(
            "Category",
            options=options,
            format_func=lambda v: "All categories" if v == ALL_CATEGORIES else category_names[v],
        )
        category_id = None if selected == ALL_CATEGORIES else selected

    with col2:
        if cost <= 0:
            st.info("Enter a cost price to see suggested prices.")
        else:
            markup, trace = ctx.resolver.explain(cost, category_id)
            prices = ctx.resolver.prices_for(markup, cost) if markup is not None else None

            if prices is None:
                st.warning("No markup rule covers this cost price. Enter selling prices manually.")
            else:
                m1, m2 = st.columns(2)
                m1.metric("Retail", format_rupiah(prices.retail_price), format_rupiah(prices.retail_price - cost))
                m2.metric("Wholesale", format_rupiah(prices.wholesale_price), format_rupiah(prices.wholesale_price - cost))
                st.caption(f"Rule: {category_label(markup.category_id)} ({markup.type})")

            with st.expander("🔍 Resolution Details"):
                for step in trace:
                    if step.value:
                        st.caption(f"**{step.step}**: {step.description} = `{step.value}`")
                    else:
                        st.caption(f"**{step.step}**: {step.description}")


# ============================================================================
# TAB 2: MARKUP RULES
# ============================================================================
with tab2:
    rules = ctx.markup_rules.list_rules()
    if rules:
        rules_data = []
        for rule in rules:
            upper = format_rupiah(rule.max_price) if rule.max_price is not None else "and up"
            if rule.markup_type == "fixed":
                retail, wholesale = format_rupiah(rule.retail_markup_fixed), format_rupiah(rule.wholesale_markup_fixed)
            else:
                retail, wholesale = f"+{rule.retail_markup_percent:g}%", f"+{rule.wholesale_markup_percent:g}%"
            rules_data.append({
                "Category": category_label(rule.category_id),
                "From": format_rupiah(rule.min_price),
                "To": upper,
                "Type": rule.markup_type,
                "Retail": retail,
                "Wholesale": wholesale,
                "ID": rule.id,
            })
        st.dataframe(pd.DataFrame(rules_data), use_container_width=True, hide_index=True)
    else:
        st.info("No markup rules configured.")

    with st.form("add_rule"):
        st.subheader("Add rule")
        c1, c2, c3 = st.columns(3)
        min_price = c1.number_input("Min cost", min_value=0, value=0, step=1000)
        no_max = c2.checkbox("No upper limit")
        max_price = c2.number_input("Max cost", min_value=0, value=10000, step=1000)
        rule_category = c3.selectbox(
            "Applies to",
            options=[ALL_CATEGORIES] + [c.id for c in categories],
            format_func=lambda v: "All categories" if v == ALL_CATEGORIES else category_names[v],
        )
        markup_type = st.radio("Markup type", ["percent", "fixed"], horizontal=True)
        d1, d2 = st.columns(2)
        retail_value = d1.number_input("Retail markup", min_value=0.0, value=0.0)
        wholesale_value = d2.number_input("Wholesale markup", min_value=0.0, value=0.0)

        if st.form_submit_button("➕ Add Rule", type="primary"):
            rule = MarkupRule(
                id="",
                min_price=min_price,
                max_price=None if no_max else max_price,
                markup_type=markup_type,
                category_id=None if rule_category == ALL_CATEGORIES else rule_category,
            )
            if markup_type == "fixed":
                rule.retail_markup_fixed, rule.wholesale_markup_fixed = retail_value, wholesale_value
            else:
                rule.retail_markup_percent, rule.wholesale_markup_percent = retail_value, wholesale_value

            validation = ctx.markup_rules.validate_rule(rule)
            for warning in validation.warnings:
                st.warning(warning)
            if validation.valid:
                ctx.markup_rules.create_rule(rule)
                st.success("Markup rule added")
                st.rerun()
            else:
                for error in validation.errors:
                    st.error(error)

    if rules:
        to_delete = st.selectbox("Delete rule", options=[r.id for r in rules])
        if st.button("🗑️ Delete"):
            ctx.markup_rules.delete_rule(to_delete)
            st.rerun()


# ============================================================================
# TAB 3: BULK REPRICE
# ============================================================================
with tab3:
    preview = ctx.products.reprice_preview()
    if preview.empty:
        st.info("No products in the catalog.")
    else:
        changed = int(preview['Changed'].sum())
        st.metric("Products with new prices", changed)
        st.dataframe(preview, use_container_width=True, hide_index=True, height=500)

        if st.button("🔄 Apply Markup Prices", type="primary", disabled=changed == 0):
            report = ctx.products.bulk_reprice()
            st.success(f"Updated {report.updated} products")
            if report.skipped:
                st.info(f"{report.skipped} products skipped (no cost price or markup rule)")


# ============================================================================
# TAB 4: BACKUP
# ============================================================================
with tab4:
    st.download_button(
        "📥 Download Backup",
        data=ctx.backup.export_json(),
        file_name=backup_filename(),
        mime="application/json",
    )

    uploaded = st.file_uploader("Restore from backup", type=["json"])
    if uploaded is not None and st.button("♻️ Restore", type="secondary"):
        result = ctx.backup.import_json(uploaded.getvalue().decode("utf-8"))
        if result.success:
            st.success(f"{result.message}: {result.item_counts}")
        else:
            st.error(result.message)
