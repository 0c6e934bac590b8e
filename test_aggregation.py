#!/usr/bin/env python3
"""
Tests for benefit, side effect and evidence aggregation
"""
from aggregation import aggregate_benefits, aggregate_evidence, aggregate_side_effects

CORTISOL = "Reduces cortisol levels by 14-28% in chronically stressed adults"
CORTISOL_LONGER = "Reduces cortisol levels by 14-28% in chronically stressed adults over 8 weeks"


def test_benefits_sharing_a_40_char_prefix_merge(make_item):
    x = make_item("x", name="Ashwagandha", benefits=[CORTISOL])
    y = make_item("y", name="Rhodiola", benefits=[CORTISOL_LONGER.upper()])
    merged = aggregate_benefits([x, y])
    assert len(merged) == 1
    assert merged[0].text == CORTISOL
    assert merged[0].sources == ["Ashwagandha", "Rhodiola"]


def test_short_texts_with_different_endings_stay_apart(make_item):
    x = make_item("x", benefits=["Reduces cortisol by 14-28%"])
    y = make_item("y", benefits=["Reduces cortisol by 14-30%, improves mood"])
    assert len(aggregate_benefits([x, y])) == 2


def test_source_is_listed_once_and_order_is_first_seen(make_item):
    x = make_item("x", name="X", side_effects=["Nausea", "Headache", "nausea"])
    y = make_item("y", name="Y", side_effects=["Insomnia", "Headache"])
    merged = aggregate_side_effects([x, y])
    assert [m.text for m in merged] == ["Nausea", "Headache", "Insomnia"]
    assert merged[0].sources == ["X"]
    assert merged[1].sources == ["X", "Y"]


def test_evidence_summary(make_item):
    strong = make_item("strong", name="Strong", evidence={"metaAnalyses": 5, "systematicReviews": 10,
                                                          "rcts": 50, "humanStudies": 200, "totalStudies": 400})
    weak = make_item("weak", name="Weak", evidence={"rcts": 10, "totalStudies": 20})
    none = make_item("none", name="None")
    summary = aggregate_evidence([weak, strong, none])

    scores = [entry.score for entry in summary.individual]
    assert scores == [10, 71, 0]
    assert summary.avg_score == 27
    assert summary.tier_info.tier == "D"
    assert summary.tier_counts == {"S": 0, "A": 1, "B": 0, "C": 0, "D": 2}
    assert summary.totals["total_studies"] == 420
    assert summary.totals["rcts"] == 60
    assert [e.name for e in summary.strongest] == ["Strong", "Weak", "None"]
    assert [e.name for e in summary.weakest] == ["None", "Weak", "Strong"]


def test_strongest_and_weakest_take_three(make_item):
    items = [make_item(f"i{n}", name=f"I{n}", evidence={"rcts": n * 10}) for n in range(5)]
    summary = aggregate_evidence(items)
    assert [e.name for e in summary.strongest] == ["I4", "I3", "I2"]
    assert [e.name for e in summary.weakest] == ["I0", "I1", "I2"]


def test_empty_evidence_summary(make_item):
    summary = aggregate_evidence([])
    assert summary.avg_score == 0
    assert summary.individual == []
    assert sum(summary.tier_counts.values()) == 0
