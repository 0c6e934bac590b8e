"""
Shared pytest fixtures.
"""
from pathlib import Path

import pytest

from catalog import Catalog
from catalog_loader import load_catalog
from models import Category, EvidenceCounts, InteractionDeclaration, Item

DATA_DIR = Path(__file__).parent / "data"


@pytest.fixture(scope="session")
def catalog() -> Catalog:
    """The bundled catalog"""
    return load_catalog(DATA_DIR)


@pytest.fixture
def make_item():
    """Factory for small hand-built items"""
    def _make(item_id, name=None, categories=(), evidence=None, mechanism="",
              interactions=(), benefits=(), side_effects=(), aliases=()):
        return Item(
            id=item_id,
            name=name if name is not None else item_id.title(),
            aliases=tuple(aliases),
            categories=tuple(categories),
            evidence=EvidenceCounts.from_dict(evidence),
            mechanism=mechanism,
            interactions=tuple(
                InteractionDeclaration(substance=s, effect=e, severity=sev) for s, e, sev in interactions
            ),
            benefits=tuple(benefits),
            side_effects=tuple(side_effects),
        )
    return _make


@pytest.fixture
def categories():
    return [
        Category(id="sleep", name="Sleep"),
        Category(id="cognition", name="Cognition"),
        Category(id="energy", name="Energy"),
    ]
