"""
Catalog loading from a local data directory or a remote base URL.

Both sources hold two JSON documents:
    categories.json   {"categories": [...]}
    supplements.json  {"supplements": [...]}
"""
from __future__ import annotations

import json
import logging
import random
import time
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

import requests

from catalog import Catalog
from models import Category, Item
from synergy import find_unresolved_rule_ids, get_default_rules

logger = logging.getLogger(__name__)

CATEGORIES_FILE = "categories.json"
SUPPLEMENTS_FILE = "supplements.json"


class CatalogClient:
    """Fetches catalog documents over HTTP."""

    def __init__(self, base_url: str, timeout: float = 10.0, max_retries: int = 3):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.max_retries = max_retries
        self.headers = {
            'User-Agent': 'SupplementStackAnalyzer/1.0',
            'Accept': 'application/json;q=0.9,*/*;q=0.8'
        }
        self.last_request_time = 0.0
        self.min_delay = 0.1  # Minimum 100ms between requests

    def _make_request_with_retry(self, url: str) -> requests.Response:
        """
        GET with exponential backoff for rate limiting and network errors.

        Raises:
            ValueError: On a non-retryable HTTP error or once retries run out
        """
        for attempt in range(self.max_retries + 1):
            time_since_last = time.time() - self.last_request_time
            if time_since_last < self.min_delay:
                time.sleep(self.min_delay - time_since_last)

            try:
                self.last_request_time = time.time()
                response = requests.get(url, headers=self.headers, timeout=self.timeout)
            except requests.RequestException as e:
                if attempt < self.max_retries:
                    wait_time = 2 ** attempt + random.uniform(0, 1)
                    logger.warning("Request to %s failed (%s), retrying in %.1fs", url, e, wait_time)
                    time.sleep(wait_time)
                    continue
                raise ValueError(f"Failed to fetch {url}: {e}") from e

            if response.status_code == 200:
                return response

            if response.status_code == 429 and attempt < self.max_retries:
                retry_after = response.headers.get('Retry-After')
                if retry_after:
                    try:
                        wait_time = float(retry_after)
                    except ValueError:
                        wait_time = 2 ** attempt
                else:
                    wait_time = 2 ** attempt + random.uniform(0, 1)  # Jitter
                logger.warning("Rate limited by %s, retrying in %.1fs", url, wait_time)
                time.sleep(wait_time)
                continue

            raise ValueError(f"Failed to fetch {url}: HTTP {response.status_code}")

        raise ValueError(f"Failed to fetch {url}: retries exhausted")

    def fetch_document(self, name: str) -> Dict[str, Any]:
        """
        Fetch and decode one JSON document.

        Raises:
            ValueError: On HTTP errors or invalid JSON
        """
        url = f"{self.base_url}/{name}"
        response = self._make_request_with_retry(url)
        try:
            return response.json()
        except ValueError as e:
            raise ValueError(f"Invalid JSON in {url}: {e}") from e


def _read_document(path: Path) -> Dict[str, Any]:
    try:
        with open(path, 'r', encoding='utf-8') as f:
            return json.load(f)
    except FileNotFoundError:
        raise FileNotFoundError(f"Catalog file not found: {path}")
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON in catalog file {path}: {e}")


def _records(document: Any, key: str, source: str) -> List[Mapping[str, Any]]:
    """The record list under `key`; non-mapping entries are dropped."""
    if not isinstance(document, Mapping) or not isinstance(document.get(key), list):
        raise ValueError(f"{source} has no '{key}' list")
    return [record for record in document[key] if isinstance(record, Mapping)]


def parse_categories(document: Any, source: str = CATEGORIES_FILE) -> List[Category]:
    """Categories from a categories.json document, skipping records without an id."""
    categories: List[Category] = []
    seen = set()
    for record in _records(document, "categories", source):
        if not record.get("id"):
            logger.warning("Skipping category without id in %s: %r", source, record.get("name"))
            continue
        category = Category.from_dict(record)
        if category.id in seen:
            logger.warning("Duplicate category id %r in %s, keeping the first", category.id, source)
            continue
        seen.add(category.id)
        categories.append(category)
    return categories


def parse_items(document: Any, source: str = SUPPLEMENTS_FILE) -> List[Item]:
    """Items from a supplements.json document, skipping records without an id."""
    items: List[Item] = []
    seen = set()
    for record in _records(document, "supplements", source):
        if not record.get("id"):
            logger.warning("Skipping supplement without id in %s: %r", source, record.get("name"))
            continue
        item = Item.from_dict(record)
        if item.id in seen:
            logger.warning("Duplicate supplement id %r in %s, keeping the first", item.id, source)
            continue
        seen.add(item.id)
        items.append(item)
    return items


def is_remote(source: Union[str, Path]) -> bool:
    return str(source).startswith(("http://", "https://"))


def load_catalog(
    source: Union[str, Path],
    client: Optional[CatalogClient] = None
) -> Catalog:
    """
    Load the catalog from a directory or an http(s) base URL.

    Args:
        source: Data directory or base URL
        client: HTTP client for remote sources (built from source if None)

    Returns:
        Catalog with items and categories in file order

    Raises:
        FileNotFoundError: If the directory or a catalog file is missing
        ValueError: On invalid JSON, missing record lists or HTTP errors
    """
    if is_remote(source):
        client = client or CatalogClient(str(source))
        categories_doc = client.fetch_document(CATEGORIES_FILE)
        items_doc = client.fetch_document(SUPPLEMENTS_FILE)
    else:
        directory = Path(source)
        if not directory.is_dir():
            raise FileNotFoundError(f"Catalog directory not found: {directory}")
        categories_doc = _read_document(directory / CATEGORIES_FILE)
        items_doc = _read_document(directory / SUPPLEMENTS_FILE)

    catalog = Catalog(parse_items(items_doc), parse_categories(categories_doc))
    logger.info("Loaded %d items and %d categories from %s", len(catalog), len(catalog.categories), source)

    for rule_name, missing in find_unresolved_rule_ids(get_default_rules(), catalog.ids).items():
        logger.debug("Synergy rule %r references unknown ids: %s", rule_name, ", ".join(missing))

    return catalog
