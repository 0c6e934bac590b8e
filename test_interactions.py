#!/usr/bin/env python3
"""
Tests for interaction matching
"""
from interactions import detect_interactions, substance_matches
from models import Item


def test_elvanse_and_trazodone_give_one_moderate_record(catalog):
    records = detect_interactions(catalog.resolve(["elvanse", "trazodone"]))
    assert len(records) == 1
    record = records[0]
    assert (record.from_id, record.to_id) == ("elvanse", "trazodone")
    assert record.severity == "moderate"
    assert record.substance == "Trazodone"


def test_unrelated_third_item_changes_nothing(catalog):
    base = detect_interactions(catalog.resolve(["elvanse", "trazodone"]))
    with_third = detect_interactions(catalog.resolve(["elvanse", "creatine-monohydrate", "trazodone"]))
    assert with_third == base


def test_reciprocal_declarations_collapse(make_item):
    caffeine = make_item("caffeine", aliases=["Stimulants"],
                         interactions=[("Stimulants", "Jitters", "moderate")])
    guarana = make_item("guarana", aliases=["Stimulants"],
                        interactions=[("Stimulants", "Jitters", "moderate")])
    records = detect_interactions([caffeine, guarana])
    assert len(records) == 1
    assert records[0].from_id == "caffeine"


def test_records_sorted_by_severity(make_item):
    target = make_item("target", name="Target")
    items = [
        make_item("mild", interactions=[("Target", "a", "mild")]),
        make_item("odd", interactions=[("Target", "b", "unheard-of")]),
        make_item("severe", interactions=[("Target", "c", "severe")]),
        make_item("moderate", interactions=[("Target", "d", "moderate")]),
        target,
    ]
    records = detect_interactions(items)
    assert [r.severity for r in records] == ["severe", "moderate", "mild", "unheard-of"]


def test_first_match_in_selection_order_wins(make_item):
    source = make_item("src", interactions=[("Fish oil", "Bleeding", "mild")])
    first = make_item("first", name="Fish Oil Capsules")
    second = make_item("second", name="Krill", aliases=["Fish oil"])
    records = detect_interactions([source, first, second])
    assert [r.to_id for r in records] == ["first"]
    records = detect_interactions([source, second, first])
    assert [r.to_id for r in records] == ["second"]


def test_item_never_matches_itself(make_item):
    lonely = make_item("lonely", name="Lonely", interactions=[("Lonely", "x", "severe")])
    assert detect_interactions([lonely]) == []


def test_empty_substance_is_skipped(make_item):
    source = make_item("src", interactions=[("", "x", "severe")])
    other = make_item("other", name="Other")
    assert detect_interactions([source, other]) == []


def test_substance_matching_rules():
    omega = Item(id="omega-3", name="Omega-3 Fish Oil", aliases=("EPA",))
    assert substance_matches("omega-3", omega)  # name contains substance
    assert substance_matches("epa", omega)  # alias contains substance
    assert substance_matches("High-dose Omega-3 Fish Oil products", omega)  # substance contains name
    assert substance_matches("omega-3 supplements", omega)  # substance contains first word
    assert not substance_matches("Warfarin", omega)
    assert not substance_matches("", omega)


def test_empty_name_never_matches_by_token():
    nameless = Item(id="x", name="")
    assert not substance_matches("anything", nameless)


def test_catalog_pairs_declare_expected_risks(catalog):
    records = detect_interactions(catalog.resolve(["ritalin", "elvanse"]))
    assert [(r.from_id, r.to_id, r.severity) for r in records] == [("ritalin", "elvanse", "severe")]


def test_capitalised_severity_sorts_last(make_item):
    items = [
        make_item("alpha", name="Alpha", interactions=[("Beta", "Bleeding", "Severe")]),
        make_item("beta", name="Beta", interactions=[("Alpha", "Drowsiness", "mild")]),
    ]
    assert [r.severity for r in detect_interactions(items)] == ["mild", "Severe"]
