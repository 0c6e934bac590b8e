#!/usr/bin/env python3
"""
Tests for the stack analyzer
"""
from models import Selection
from stack_analyzer import AnalysisReport, StackAnalyzer, analyze


def test_empty_selection_gives_empty_report(catalog):
    report = StackAnalyzer(catalog).analyze(Selection())
    assert report.is_empty
    assert report.evidence is None
    assert report.category_coverage == {}
    assert report.synergies == []
    assert report.interactions == []
    assert report.benefits == []
    assert report.side_effects == []
    assert report.warnings == []


def test_unresolvable_selection_is_empty(catalog):
    assert StackAnalyzer(catalog).analyze(["ghost", "phantom"]).is_empty


def test_glynac_stack(catalog):
    report = StackAnalyzer(catalog).analyze(Selection.from_ids(["nac", "glycine"]))
    assert not report.is_empty
    assert [m.name for m in report.synergies] == ["GlyNAC Protocol"]
    assert report.interactions == []
    assert report.warnings == []
    assert list(report.category_coverage) == ["sleep", "stress-mood", "longevity"]
    assert report.category_coverage["longevity"].item_names == ["NAC (N-Acetyl Cysteine)", "Glycine"]
    assert [e.id for e in report.evidence.individual] == ["nac", "glycine"]


def test_unknown_ids_are_dropped(catalog):
    with_ghost = StackAnalyzer(catalog).analyze(["nac", "ghost", "glycine"])
    without = StackAnalyzer(catalog).analyze(["nac", "glycine"])
    assert with_ghost == without


def test_stimulant_stack_report(catalog):
    report = StackAnalyzer(catalog).analyze(["elvanse", "ritalin", "l-tyrosine"])
    assert [m.name for m in report.synergies] == [
        "Dopamine Substrate Replenishment",
        "Dopamine Precursor Support",
    ]
    assert [w.code for w in report.warnings] == [
        "PRESCRIPTION_MEDICATION",
        "SEVERE_INTERACTION",
        "MULTIPLE_STIMULANTS",
    ]
    assert report.interactions[0].severity == "severe"


def test_every_call_recomputes(catalog):
    analyzer = StackAnalyzer(catalog)
    first = analyzer.analyze(["nac", "glycine"])
    second = analyzer.analyze(["nac", "glycine"])
    assert first == second
    assert first is not second


def test_module_level_analyze(catalog):
    report = analyze(["nac", "glycine"], catalog.items, catalog.categories)
    assert [m.name for m in report.synergies] == ["GlyNAC Protocol"]
    assert analyze([], catalog.items, catalog.categories) == AnalysisReport.empty()


def test_custom_synergy_rules(catalog):
    report = analyze(["nac", "glycine"], catalog.items, catalog.categories, synergy_rules=[])
    assert report.synergies == []


def test_repeated_ids_count_once(catalog):
    repeated = analyze(["nac", "nac", "glycine"], catalog.items, catalog.categories)
    once = analyze(["nac", "glycine"], catalog.items, catalog.categories)
    assert repeated == once
    assert [e.id for e in repeated.evidence.individual] == ["nac", "glycine"]
