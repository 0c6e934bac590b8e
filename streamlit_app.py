#!/usr/bin/env python3
"""
Streamlit Supplement Stack Analyzer - Web App Version
"""

import streamlit as st
import pandas as pd
import plotly.express as px

from catalog_loader import CatalogClient, is_remote, load_catalog
from category_coverage import sort_by_rating
from config import get_settings
from dosage import (
    FOOD_OPTIONS,
    FREQUENCY_OPTIONS,
    TIMING_OPTIONS,
    UNIT_OPTIONS,
    autofill_from_recommended,
    build_schedule,
    generate_dosage_summary,
    option_label,
)
from evidence import assess
from logger_config import setup_logging
from models import Selection
from stack_analyzer import StackAnalyzer
from stack_store import JsonFileStore, StackLibrary

settings = get_settings()
setup_logging(settings.log_level)

# Page configuration
st.set_page_config(
    page_title="💊 Supplement Stack Analyzer",
    page_icon="💊",
    layout="wide",
)

SEVERITY_ICONS = {"severe": "🔴", "moderate": "🟠", "mild": "🟡"}

CHART_LAYOUT = dict(
    paper_bgcolor='rgba(0,0,0,0)',
    plot_bgcolor='rgba(0,0,0,0)',
    font=dict(color='white', size=12),
)


@st.cache_resource
def get_catalog(source: str):
    client = None
    if is_remote(source):
        client = CatalogClient(source, timeout=settings.request_timeout, max_retries=settings.max_retries)
    return load_catalog(source, client)


def get_library() -> StackLibrary:
    return StackLibrary(JsonFileStore(settings.stacks_file))


# Initialize session state
if 'selection' not in st.session_state:
    st.session_state.selection = Selection()
if 'stack_id' not in st.session_state:
    st.session_state.stack_id = None
if 'stack_name' not in st.session_state:
    st.session_state.stack_name = ""

try:
    catalog = get_catalog(settings.catalog_source)
except (FileNotFoundError, ValueError) as e:
    st.error(f"❌ Could not load the catalog: {e}")
    st.stop()

library = get_library()
selection: Selection = st.session_state.selection

# ===== SIDEBAR: SAVED STACKS =====
st.sidebar.header("💾 Saved Stacks")
saved = library.list_stacks()
if saved:
    labels = {stack.id: f"{stack.name} ({len(stack.item_ids)})" for stack in saved}
    chosen = st.sidebar.selectbox("Stack", list(labels), format_func=labels.get)
    col_load, col_delete = st.sidebar.columns(2)
    if col_load.button("Load"):
        loaded = library.load_stack(chosen, catalog)
        if loaded is not None:
            st.session_state.selection = loaded
            st.session_state.stack_id = chosen
            st.session_state.stack_name = next(s.name for s in saved if s.id == chosen)
            st.rerun()
    if col_delete.button("Delete"):
        library.delete_stack(chosen)
        if st.session_state.stack_id == chosen:
            st.session_state.selection = Selection()
            st.session_state.stack_id = None
            st.session_state.stack_name = ""
        st.rerun()
else:
    st.sidebar.info("No saved stacks yet")

stack_name = st.sidebar.text_input("Stack name", value=st.session_state.stack_name)
if st.sidebar.button("Save current stack"):
    stack = library.save_stack(stack_name.strip(), selection, stack_id=st.session_state.stack_id)
    if stack:
        st.session_state.stack_id = stack.id
        st.session_state.stack_name = stack.name
        st.sidebar.success(f"Saved '{stack.name}'")
    else:
        st.sidebar.warning("Enter a name and select at least one item")

# ===== ITEM PICKER =====
st.markdown("## 💊 Stack Builder")

query = st.text_input("🔍 Search", placeholder="Name, alias or category")
if len(query.strip()) >= 2:
    options = catalog.search(query)
    if not options:
        st.info("No supplements match your search.")
else:
    options = [item for _, items in catalog.grouped_by_category() for item in items]

option_ids = list(dict.fromkeys([item.id for item in options] + selection.ids))


def format_option(item_id: str) -> str:
    item = catalog.get(item_id)
    return f"[{assess(item.evidence).tier}] {item.name}" if item else item_id


chosen_ids = st.multiselect("Items", option_ids, default=selection.ids, format_func=format_option)
for item_id in selection.ids:
    if item_id not in chosen_ids:
        selection.remove(item_id)
for item_id in chosen_ids:
    selection.add(item_id)

if st.button("Clear all"):
    st.session_state.selection = Selection()
    st.session_state.stack_id = None
    st.session_state.stack_name = ""
    st.rerun()

# ===== DOSING CONFIG =====
for entry in selection.entries:
    item = catalog.get(entry.item_id)
    if item is None:
        continue
    with st.expander(f"⚙️ {item.name} - {item.dosage.standard or 'no reference dose'}"):
        if st.button("Use recommended", key=f"autofill-{item.id}"):
            selection.set_config(item.id, autofill_from_recommended(item, entry.config))
            st.rerun()
        config = entry.config
        cols = st.columns(5)
        dose = cols[0].text_input("Dose", value=config.dose, key=f"dose-{item.id}")
        unit = cols[1].selectbox(
            "Unit", UNIT_OPTIONS, key=f"unit-{item.id}",
            index=UNIT_OPTIONS.index(config.unit) if config.unit in UNIT_OPTIONS else 0
        )
        timing_values = [value for value, _ in TIMING_OPTIONS]
        timing = cols[2].selectbox(
            "Timing", timing_values, key=f"timing-{item.id}",
            index=timing_values.index(config.timing) if config.timing in timing_values else 0,
            format_func=lambda v: option_label(TIMING_OPTIONS, v)
        )
        food_values = [value for value, _ in FOOD_OPTIONS]
        with_food = cols[3].selectbox(
            "Food", food_values, key=f"food-{item.id}",
            index=food_values.index(config.with_food) if config.with_food in food_values else 0,
            format_func=lambda v: option_label(FOOD_OPTIONS, v)
        )
        frequency_values = [value for value, _ in FREQUENCY_OPTIONS]
        frequency = cols[4].selectbox(
            "Frequency", frequency_values, key=f"freq-{item.id}",
            index=frequency_values.index(config.frequency) if config.frequency in frequency_values else 0,
            format_func=lambda v: option_label(FREQUENCY_OPTIONS, v)
        )
        notes = st.text_input("Notes", value=config.notes, key=f"notes-{item.id}")
        selection.update_config(
            item.id, dose=dose, unit=unit, timing=timing, with_food=with_food,
            frequency=frequency, notes=notes
        )

# ===== ANALYSIS =====
report = StackAnalyzer(catalog).analyze(selection)

if report.is_empty:
    st.info("Add items to see the stack analysis.")
    st.stop()

# ===== WARNINGS =====
if report.warnings:
    st.markdown("### 🚨 Safety Warnings")
    st.markdown("<hr/>", unsafe_allow_html=True)
    for warning in report.warnings:
        text = f"{SEVERITY_ICONS.get(warning.severity.value, '⚪')} {warning.text}"
        if warning.severity.value == "severe":
            st.error(text)
        elif warning.severity.value == "moderate":
            st.warning(text)
        else:
            st.info(text)

# ===== EVIDENCE =====
evidence = report.evidence
st.markdown("### 🔬 Evidence")
st.markdown("<hr/>", unsafe_allow_html=True)
col1, col2, col3, col4 = st.columns(4)
col1.metric("Average Score", evidence.avg_score)
col2.metric("Tier", f"{evidence.tier_info.tier} - {evidence.tier_info.label}")
col3.metric("Total Studies", evidence.totals["total_studies"])
col4.metric("Meta-analyses", evidence.totals["meta_analyses"])

evidence_df = pd.DataFrame([
    {
        "Item": entry.name,
        "Score": entry.score,
        "Tier": entry.assessment.tier,
        "RCTs": entry.assessment.breakdown["rcts"],
        "Meta-analyses": entry.assessment.breakdown["meta_analyses"],
        "Human studies": entry.assessment.breakdown["human_studies"],
    }
    for entry in evidence.individual
])
st.dataframe(evidence_df, hide_index=True, use_container_width=True)

# ===== CATEGORY COVERAGE =====
st.markdown("### 📊 Category Coverage")
st.markdown("<hr/>", unsafe_allow_html=True)
coverage = sort_by_rating(report.category_coverage)
fig_coverage = px.bar(
    x=[entry.rating for entry in coverage],
    y=[entry.category.name for entry in coverage],
    orientation='h',
    range_x=[0, 10],
    title="Effectiveness by Category",
    labels={'x': 'Rating (out of 10)', 'y': 'Category'},
    color=[entry.category.name for entry in coverage],
    color_discrete_sequence=[entry.category.color or '#667eea' for entry in coverage],
)
fig_coverage.update_layout(showlegend=False, **CHART_LAYOUT)
fig_coverage.update_traces(hovertemplate='%{y}<br>%{x}/10<extra></extra>')
st.plotly_chart(fig_coverage, use_container_width=True)

# ===== SYNERGIES & INTERACTIONS =====
col_left, col_right = st.columns(2)
with col_left:
    st.markdown("### 🔗 Synergies")
    if report.synergies:
        for match in report.synergies:
            with st.expander(f"{match.name} ({match.strength})"):
                st.markdown(f"**{' + '.join(match.item_names)}** · {match.evidence_level} evidence")
                st.write(match.rule.description)
                st.caption(match.rule.mechanism)
    else:
        st.info("No documented synergies in this stack")

with col_right:
    st.markdown("### ⚠️ Interactions")
    if report.interactions:
        for record in report.interactions:
            st.markdown(
                f"{SEVERITY_ICONS.get(record.severity, '⚪')} **{record.from_name} × {record.to_name}**: {record.effect}"
            )
    else:
        st.info("No known interactions between selected items")

# ===== BENEFITS & SIDE EFFECTS =====
col_left, col_right = st.columns(2)
with col_left:
    st.markdown("### ✅ Benefits")
    for entry in report.benefits:
        st.markdown(f"- {entry.text} *({', '.join(entry.sources)})*")
with col_right:
    st.markdown("### ➖ Side Effects")
    for entry in report.side_effects:
        st.markdown(f"- {entry.text} *({', '.join(entry.sources)})*")

# ===== DOSAGE SCHEDULE =====
st.markdown("### 📋 Daily Schedule")
st.markdown("<hr/>", unsafe_allow_html=True)
summary = generate_dosage_summary(selection, catalog)
schedule = build_schedule(summary)
if not schedule.has_schedule:
    st.caption("Configure timing on each item to see your daily schedule.")
    st.dataframe(
        pd.DataFrame([{"Item": line.name, "Standard dose": line.standard} for line in summary]),
        hide_index=True, use_container_width=True
    )
else:
    for timing, lines in schedule.blocks:
        st.markdown(f"**{option_label(TIMING_OPTIONS, timing)}**")
        for line in lines:
            food = option_label(FOOD_OPTIONS, line.config.with_food) if line.config.with_food else ""
            st.markdown(f"- {line.name}: {line.display_dose}" + (f" · {food}" if food else ""))
    if schedule.unscheduled:
        st.caption("Not scheduled: " + ", ".join(f"{line.name} ({line.standard})" for line in schedule.unscheduled))
