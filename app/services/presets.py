# =============================================================================
# Filter Presets — Named Query Specifications Kept by the Client
# =============================================================================
#
# A preset is a QuerySpec minus the page number, saved under a name. The
# whole preset list lives as one JSON blob under a fixed key in whatever
# key-value store the client injects (a file, a browser bridge, a dict in
# tests). The server never sees presets; applying one just produces a
# QuerySpec that is sent like any other query.
#
# Behaviour:
# - Names are unique case-insensitively; saving an existing name replaces
#   that preset in place.
# - A blob that cannot be parsed is logged and treated as an empty list, so
#   a corrupt store never locks the user out of the list view.
# =============================================================================

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Protocol

from pydantic import BaseModel, ValidationError

from app.errors import NotFoundFailure, ValidationFailure
from app.services.query_engine import QuerySpec

logger = logging.getLogger(__name__)

DEFAULT_PRESET_KEY = "userListPresets"


class KeyValueStore(Protocol):
    def get(self, name: str) -> str | None:
        ...

    def set(self, name: str, value: str) -> None:
        ...


class InMemoryKeyValueStore:
    def __init__(self) -> None:
        self._data: dict[str, str] = {}

    def get(self, name: str) -> str | None:
        return self._data.get(name)

    def set(self, name: str, value: str) -> None:
        self._data[name] = value


class JsonFileKeyValueStore:
    """All keys in one JSON object on disk, rewritten on every set()."""

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)

    def _load(self) -> dict[str, str]:
        if not self._path.exists():
            return {}
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Could not read key-value file %s: %s", self._path, e)
            return {}
        return data if isinstance(data, dict) else {}

    def get(self, name: str) -> str | None:
        value = self._load().get(name)
        return value if isinstance(value, str) else None

    def set(self, name: str, value: str) -> None:
        data = self._load()
        data[name] = value
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(json.dumps(data, indent=2), encoding="utf-8")


class FilterPreset(BaseModel):
    name: str
    term: str = ""
    status: str = "all"
    gender: str = "all"
    sort_field: str = "createdAt"
    sort_order: str = "desc"
    limit: int = 10

    @classmethod
    def from_spec(cls, name: str, spec: QuerySpec) -> FilterPreset:
        return cls(
            name=name,
            **spec.model_dump(include={
                "term", "status", "gender", "sort_field", "sort_order", "limit",
            }),
        )

    def to_spec(self) -> QuerySpec:
        """Applying a preset always starts from the first page."""
        return QuerySpec(**self.model_dump(exclude={"name"}), page=1)


class PresetBook:
    def __init__(self, store: KeyValueStore, key: str = DEFAULT_PRESET_KEY) -> None:
        self._store = store
        self._key = key

    def list_presets(self) -> list[FilterPreset]:
        raw = self._store.get(self._key)
        if not raw:
            return []
        try:
            items = json.loads(raw)
            if not isinstance(items, list):
                raise TypeError(f"expected a list, got {type(items).__name__}")
            return [FilterPreset.model_validate(item) for item in items]
        except (json.JSONDecodeError, TypeError, ValidationError) as e:
            logger.warning("Ignoring unreadable presets under %r: %s", self._key, e)
            return []

    def get(self, name: str) -> FilterPreset | None:
        wanted = name.strip().lower()
        for preset in self.list_presets():
            if preset.name.lower() == wanted:
                return preset
        return None

    def save(self, name: str, spec: QuerySpec) -> FilterPreset:
        name = name.strip()
        if not name:
            raise ValidationFailure("Please enter a preset name")

        preset = FilterPreset.from_spec(name, spec)
        presets = self.list_presets()
        for index, existing in enumerate(presets):
            if existing.name.lower() == name.lower():
                presets[index] = preset
                logger.info("Preset %r updated", name)
                break
        else:
            presets.append(preset)
            logger.info("Preset %r saved", name)

        self._write(presets)
        return preset

    def apply(self, name: str) -> QuerySpec:
        preset = self.get(name)
        if preset is None:
            raise NotFoundFailure(f"Preset {name!r} not found")
        return preset.to_spec()

    def delete(self, name: str) -> bool:
        wanted = name.strip().lower()
        presets = self.list_presets()
        kept = [p for p in presets if p.name.lower() != wanted]
        if len(kept) == len(presets):
            return False
        self._write(kept)
        return True

    def _write(self, presets: list[FilterPreset]) -> None:
        self._store.set(
            self._key, json.dumps([p.model_dump() for p in presets]),
        )
