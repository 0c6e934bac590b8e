#!/usr/bin/env python3
"""
Tests for catalog lookup, search and grouping
"""
import pytest

from catalog import Catalog
from models import Category


def test_bundled_catalog_shape(catalog):
    assert len(catalog) == 20
    assert catalog.get("nac").name == "NAC (N-Acetyl Cysteine)"
    assert catalog.get("missing") is None
    assert "magnesium" in catalog
    assert catalog.get_category("medication").name == "Prescription Medication"


def test_resolve_keeps_order_and_drops_unknown(catalog):
    assert [i.id for i in catalog.resolve(["glycine", "ghost", "nac"])] == ["glycine", "nac"]
    assert [i.id for i in catalog.resolve(["nac", "glycine", "nac"])] == ["nac", "glycine"]


def test_duplicate_ids_keep_first(make_item):
    catalog = Catalog([make_item("a", name="First"), make_item("a", name="Second")], [])
    assert len(catalog) == 1
    assert catalog.get("a").name == "First"


def test_items_in_category_sorting(catalog):
    by_evidence = catalog.items_in_category("sleep")
    assert len(by_evidence) == 6
    assert by_evidence[-1].id == "glycine"
    alpha = [item.name for item in catalog.items_in_category("sleep", sort="alpha")]
    assert alpha == sorted(alpha, key=str.casefold)
    with pytest.raises(ValueError):
        catalog.items_in_category("sleep", sort="random")


def test_search_matches_name_alias_tagline_and_category(catalog):
    assert [i.id for i in catalog.search("tyrosine")] == ["l-tyrosine"]
    assert [i.id for i in catalog.search("VYVANSE")] == ["elvanse"]
    assert "melatonin" in [i.id for i in catalog.search("circadian")]
    assert {i.id for i in catalog.search("medication")} == {"elvanse", "ritalin", "trazodone"}


def test_short_queries_return_nothing(catalog):
    assert catalog.search("") == []
    assert catalog.search(" m ") == []


def test_search_limit(catalog):
    assert len(catalog.search("sleep", limit=2)) == 2


def test_grouped_by_category_puts_medication_last(make_item):
    categories = [Category(id="medication", name="Meds"), Category(id="sleep", name="Sleep"),
                  Category(id="empty", name="Empty")]
    items = [make_item("a", categories=["sleep"]), make_item("b", categories=["medication"])]
    groups = Catalog(items, categories).grouped_by_category()
    assert [(c.id, [i.id for i in group]) for c, group in groups] == [("sleep", ["a"]), ("medication", ["b"])]
