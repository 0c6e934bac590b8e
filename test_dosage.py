#!/usr/bin/env python3
"""
Tests for dosing auto-fill and the daily schedule
"""
from dosage import (
    SCHEDULE_ORDER,
    TIMING_OPTIONS,
    DosageLine,
    autofill_from_recommended,
    build_schedule,
    generate_dosage_summary,
    option_label,
)
from models import DoseConfig, Dosage, Item, Selection


def item_with(standard="", timing=""):
    return Item(id="x", name="X", dosage=Dosage(standard=standard, timing=timing))


def test_autofill_parses_dose_unit_timing_and_food(catalog):
    config = autofill_from_recommended(catalog.get("magnesium"))
    assert config.dose == "200-400"
    assert config.unit == "mg"
    assert config.timing == "bedtime"
    assert config.with_food == "with-food"
    assert config.frequency == "once-daily"


def test_autofill_converts_mcg(catalog):
    config = autofill_from_recommended(catalog.get("huperzine-a"))
    assert config.dose == "50-200"
    assert config.unit == "µg"
    assert config.timing == "morning"


def test_autofill_split_doses_on_empty_stomach(catalog):
    config = autofill_from_recommended(catalog.get("nac"))
    assert config.timing == "split"
    assert config.with_food == "without-food"
    assert config.frequency == "twice-daily"


def test_autofill_fat_and_three_times_daily():
    assert autofill_from_recommended(item_with("2000 IU", "Morning with a fat-containing meal")).with_food == "with-fat"
    config = autofill_from_recommended(item_with("500 mg", "Three times daily with meals"))
    assert config.frequency == "three-daily"
    assert config.with_food == "with-food"


def test_autofill_keeps_fields_without_hints():
    current = DoseConfig(dose="7", unit="g", timing="midday", with_food="either", notes="mine")
    config = autofill_from_recommended(item_with("as prescribed", ""), current)
    assert config.dose == "7"
    assert config.unit == "g"
    assert config.timing == "midday"
    assert config.with_food == "either"
    assert config.frequency == "once-daily"
    assert config.notes == "mine"
    assert current.frequency == ""


def test_dosage_summary_follows_selection(catalog):
    selection = Selection.from_ids(["glycine", "ghost", "creatine-monohydrate"])
    summary = generate_dosage_summary(selection, catalog)
    assert [line.id for line in summary] == ["glycine", "creatine-monohydrate"]
    assert summary[1].standard == "3-5 g daily"
    assert summary[0].config is selection.config_for("glycine")


def line(name, timing="", dose=""):
    return DosageLine(id=name, name=name, standard="1 g", optimal="", timing="",
                      config=DoseConfig(dose=dose, timing=timing))


def test_schedule_groups_by_timing_in_fixed_order():
    schedule = build_schedule([
        line("a", "bedtime"), line("b"), line("c", "morning"), line("d", "bedtime"), line("e", "whenever"),
    ])
    assert [timing for timing, _ in schedule.blocks] == ["morning", "bedtime", "whenever"]
    assert [l.name for l in schedule.blocks[1][1]] == ["a", "d"]
    assert [l.name for l in schedule.unscheduled] == ["b"]
    assert schedule.has_schedule


def test_schedule_without_timings():
    schedule = build_schedule([line("a"), line("b")])
    assert not schedule.has_schedule
    assert len(schedule.unscheduled) == 2


def test_display_dose_prefers_config():
    assert line("a", dose="5").display_dose == "5 mg"
    assert line("a").display_dose == "1 g"


def test_option_labels():
    assert option_label(TIMING_OPTIONS, "pre-workout") == "Pre-Workout"
    assert option_label(TIMING_OPTIONS, "custom") == "custom"
    assert SCHEDULE_ORDER[0] == "morning"
