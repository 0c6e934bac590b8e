#!/usr/bin/env python3
"""
Tests for catalog loading from disk and HTTP
"""
import json

import pytest
import requests

import catalog_loader
from catalog_loader import CatalogClient, load_catalog

CATEGORIES = {"categories": [{"id": "sleep", "name": "Sleep"}, {"name": "No id"}]}
SUPPLEMENTS = {"supplements": [
    {"id": "glycine", "name": "Glycine", "categories": ["sleep"]},
    {"name": "Anonymous"},
    {"id": "glycine", "name": "Glycine again"},
    "not a record",
]}


def write_catalog(directory, categories=CATEGORIES, supplements=SUPPLEMENTS):
    (directory / "categories.json").write_text(json.dumps(categories), encoding="utf-8")
    (directory / "supplements.json").write_text(json.dumps(supplements), encoding="utf-8")


class FakeResponse:
    def __init__(self, status_code=200, payload=None, headers=None):
        self.status_code = status_code
        self._payload = payload
        self.headers = headers or {}

    def json(self):
        if self._payload is None:
            raise ValueError("no JSON")
        return self._payload


@pytest.fixture(autouse=True)
def no_sleep(monkeypatch):
    monkeypatch.setattr(catalog_loader.time, "sleep", lambda seconds: None)


def test_load_from_directory_skips_bad_records(tmp_path, caplog):
    write_catalog(tmp_path)
    with caplog.at_level("WARNING"):
        catalog = load_catalog(tmp_path)
    assert catalog.ids == ["glycine"]
    assert catalog.get("glycine").name == "Glycine"
    assert [c.id for c in catalog.categories] == ["sleep"]
    assert "without id" in caplog.text


def test_missing_directory(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_catalog(tmp_path / "nope")


def test_missing_file(tmp_path):
    (tmp_path / "categories.json").write_text(json.dumps(CATEGORIES), encoding="utf-8")
    with pytest.raises(FileNotFoundError):
        load_catalog(tmp_path)


def test_invalid_json(tmp_path):
    write_catalog(tmp_path)
    (tmp_path / "supplements.json").write_text("{not json", encoding="utf-8")
    with pytest.raises(ValueError):
        load_catalog(tmp_path)


def test_document_without_record_list(tmp_path):
    write_catalog(tmp_path, supplements={"items": []})
    with pytest.raises(ValueError, match="supplements"):
        load_catalog(tmp_path)


def test_load_from_url(monkeypatch):
    calls = []

    def fake_get(url, headers=None, timeout=None):
        calls.append(url)
        payload = CATEGORIES if url.endswith("categories.json") else SUPPLEMENTS
        return FakeResponse(200, payload)

    monkeypatch.setattr(catalog_loader.requests, "get", fake_get)
    catalog = load_catalog("https://example.org/data/")
    assert calls == ["https://example.org/data/categories.json", "https://example.org/data/supplements.json"]
    assert catalog.ids == ["glycine"]


def test_client_retries_rate_limits(monkeypatch):
    responses = [FakeResponse(429, headers={"Retry-After": "1"}), FakeResponse(429), FakeResponse(200, {"ok": True})]
    monkeypatch.setattr(catalog_loader.requests, "get", lambda url, headers=None, timeout=None: responses.pop(0))
    client = CatalogClient("https://example.org", max_retries=3)
    assert client.fetch_document("x.json") == {"ok": True}
    assert responses == []


def test_client_gives_up_after_retries(monkeypatch):
    monkeypatch.setattr(catalog_loader.requests, "get",
                        lambda url, headers=None, timeout=None: FakeResponse(429))
    with pytest.raises(ValueError, match="429"):
        CatalogClient("https://example.org", max_retries=2).fetch_document("x.json")


def test_client_does_not_retry_other_errors(monkeypatch):
    calls = []

    def fake_get(url, headers=None, timeout=None):
        calls.append(url)
        return FakeResponse(500)

    monkeypatch.setattr(catalog_loader.requests, "get", fake_get)
    with pytest.raises(ValueError, match="500"):
        CatalogClient("https://example.org").fetch_document("x.json")
    assert len(calls) == 1


def test_client_retries_network_errors(monkeypatch):
    def fake_get(url, headers=None, timeout=None):
        raise requests.ConnectionError("down")

    monkeypatch.setattr(catalog_loader.requests, "get", fake_get)
    with pytest.raises(ValueError, match="down"):
        CatalogClient("https://example.org", max_retries=1).fetch_document("x.json")


def test_client_rejects_invalid_json(monkeypatch):
    monkeypatch.setattr(catalog_loader.requests, "get",
                        lambda url, headers=None, timeout=None: FakeResponse(200, None))
    with pytest.raises(ValueError, match="Invalid JSON"):
        CatalogClient("https://example.org").fetch_document("x.json")


def test_infinite_study_count_in_document(tmp_path):
    write_catalog(tmp_path)
    (tmp_path / "supplements.json").write_text(
        '{"supplements": [{"id": "x", "name": "X", "evidence": {"rcts": Infinity, "humanStudies": 4}}]}',
        encoding="utf-8",
    )
    item = load_catalog(tmp_path).get("x")
    assert item.evidence.rcts == 0
    assert item.evidence.human_studies == 4
