"""
Saved stack persistence.

Stacks are stored as one JSON list under a single key of a key-value store.
Only the selection (ids + dosing configs) is persisted, never analysis output.
"""
from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

from catalog import Catalog
from models import DoseConfig, Selection

logger = logging.getLogger(__name__)

STORAGE_KEY = 'supplementsEncy_customStacks'

STACK_ID_PREFIX = 'custom-'


class KeyValueStore:
    """Minimal storage interface: JSON-compatible values under string keys."""

    def load(self, key: str) -> Optional[Any]:
        raise NotImplementedError

    def save(self, key: str, value: Any) -> None:
        raise NotImplementedError


class MemoryStore(KeyValueStore):
    """In-process store (tests, Streamlit session)."""

    def __init__(self):
        self.data: Dict[str, Any] = {}

    def load(self, key: str) -> Optional[Any]:
        return self.data.get(key)

    def save(self, key: str, value: Any) -> None:
        self.data[key] = value


class JsonFileStore(KeyValueStore):
    """All keys in one JSON object on disk."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def _read_all(self) -> Dict[str, Any]:
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except FileNotFoundError:
            return {}
        except json.JSONDecodeError as e:
            logger.warning("Ignoring corrupt store file %s: %s", self.path, e)
            return {}
        if not isinstance(data, dict):
            logger.warning("Ignoring store file %s: expected a JSON object", self.path)
            return {}
        return data

    def load(self, key: str) -> Optional[Any]:
        return self._read_all().get(key)

    def save(self, key: str, value: Any) -> None:
        data = self._read_all()
        data[key] = value
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, 'w', encoding='utf-8') as f:
            json.dump(data, f, indent=2, ensure_ascii=False)


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass
class SavedStack:
    """A named selection with dosing configs"""
    id: str
    name: str
    item_ids: List[str] = field(default_factory=list)
    item_configs: Dict[str, DoseConfig] = field(default_factory=dict)
    created_at: str = ""
    updated_at: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "SavedStack":
        """
        Build from a stored record.

        Raises:
            KeyError: If the record has no id
        """
        ids = data.get("itemIds", data.get("supplementIds")) or []
        configs = data.get("itemConfigs", data.get("supplementConfigs")) or {}
        return cls(
            id=str(data["id"]),
            name=str(data.get("name") or ""),
            item_ids=[str(item_id) for item_id in ids],
            item_configs={
                str(item_id): DoseConfig.from_dict(config)
                for item_id, config in configs.items()
            } if isinstance(configs, Mapping) else {},
            created_at=str(data.get("createdAt") or ""),
            updated_at=str(data.get("updatedAt") or ""),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "itemIds": list(self.item_ids),
            "itemConfigs": {item_id: config.to_dict() for item_id, config in self.item_configs.items()},
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }


class StackLibrary:
    """Saved stacks kept in a key-value store"""

    def __init__(self, store: KeyValueStore, key: str = STORAGE_KEY):
        self.store = store
        self.key = key

    def list_stacks(self) -> List[SavedStack]:
        """Stored stacks in save order. A corrupt list reads as empty."""
        raw = self.store.load(self.key)
        if raw is None:
            return []
        if not isinstance(raw, list):
            logger.warning("Saved stack list under %r is not a list, ignoring it", self.key)
            return []

        stacks: List[SavedStack] = []
        for record in raw:
            if not isinstance(record, Mapping) or not record.get("id"):
                logger.warning("Skipping malformed saved stack record")
                continue
            stacks.append(SavedStack.from_dict(record))
        return stacks

    def _write(self, stacks: List[SavedStack]) -> None:
        self.store.save(self.key, [stack.to_dict() for stack in stacks])

    def get(self, stack_id: str) -> Optional[SavedStack]:
        for stack in self.list_stacks():
            if stack.id == stack_id:
                return stack
        return None

    def _new_id(self, stacks: List[SavedStack]) -> str:
        existing = {stack.id for stack in stacks}
        millis = int(time.time() * 1000)
        while f"{STACK_ID_PREFIX}{millis}" in existing:
            millis += 1
        return f"{STACK_ID_PREFIX}{millis}"

    def save_stack(
        self,
        name: str,
        selection: Selection,
        stack_id: Optional[str] = None
    ) -> Optional[SavedStack]:
        """
        Save a selection under a name.

        Args:
            name: Display name
            selection: Current selection
            stack_id: Existing stack to overwrite (a new id is made if None)

        Returns:
            The saved stack, or None when the name or selection is empty
        """
        if not name or len(selection) == 0:
            return None

        stacks = self.list_stacks()
        now = _now_iso()
        stack = SavedStack(
            id=stack_id or self._new_id(stacks),
            name=name,
            item_ids=selection.ids,
            item_configs={entry.item_id: entry.config for entry in selection.entries},
            created_at=now,
            updated_at=now,
        )

        for index, existing in enumerate(stacks):
            if existing.id == stack.id:
                stack.created_at = existing.created_at or now
                stacks[index] = stack
                break
        else:
            stacks.append(stack)

        self._write(stacks)
        logger.info("Saved stack %r (%s) with %d item(s)", name, stack.id, len(stack.item_ids))
        return stack

    def load_stack(self, stack_id: str, catalog: Catalog) -> Optional[Selection]:
        """
        Rebuild a selection from a saved stack.
        Ids missing from the catalog are dropped; stored configs are merged
        over the defaults.
        """
        stack = self.get(stack_id)
        if stack is None:
            return None

        selection = Selection()
        for item_id in stack.item_ids:
            if item_id not in catalog:
                logger.info("Saved stack %s references unknown item %r, dropping it", stack_id, item_id)
                continue
            config = stack.item_configs.get(item_id)
            selection.add(item_id, DoseConfig.from_dict(config.to_dict()) if config else DoseConfig())
        return selection

    def delete_stack(self, stack_id: str) -> bool:
        """Remove a stack; returns False if it did not exist."""
        stacks = self.list_stacks()
        remaining = [stack for stack in stacks if stack.id != stack_id]
        if len(remaining) == len(stacks):
            return False
        self._write(remaining)
        return True
