# =============================================================================
# Unit Tests — Filter Presets
# =============================================================================

from __future__ import annotations

import json

import pytest

from app.errors import NotFoundFailure, ValidationFailure
from app.services.presets import (
    FilterPreset,
    InMemoryKeyValueStore,
    JsonFileKeyValueStore,
    PresetBook,
)
from app.services.query_engine import QuerySpec


def _book() -> tuple[PresetBook, InMemoryKeyValueStore]:
    store = InMemoryKeyValueStore()
    return PresetBook(store, key="userListPresets"), store


class TestPresetBook:
    def test_empty_book(self):
        book, _ = _book()
        assert book.list_presets() == []
        assert book.get("anything") is None

    def test_save_drops_page_keeps_limit(self):
        book, _ = _book()
        spec = QuerySpec(term="ana", status="Active", page=4, limit=25)
        preset = book.save("Active Anas", spec)

        assert preset.name == "Active Anas"
        assert preset.limit == 25
        assert "page" not in preset.model_dump()

    def test_apply_round_trips_filters_and_resets_page(self):
        book, _ = _book()
        spec = QuerySpec(
            term="ana", status="Active", gender="Female",
            sort_field="firstName", sort_order="asc", page=4, limit=25,
        )
        book.save("mine", spec)

        applied = book.apply("mine")
        assert applied == spec.model_copy(update={"page": 1})

    def test_save_same_name_replaces_case_insensitively(self):
        book, _ = _book()
        book.save("Active", QuerySpec(status="Active"))
        book.save("other", QuerySpec(gender="Male"))
        book.save("ACTIVE", QuerySpec(status="Inactive"))

        presets = book.list_presets()
        assert [p.name for p in presets] == ["ACTIVE", "other"]
        assert presets[0].status == "Inactive"

    def test_blank_name_rejected(self):
        book, _ = _book()
        with pytest.raises(ValidationFailure):
            book.save("   ", QuerySpec())

    def test_apply_unknown_raises(self):
        book, _ = _book()
        with pytest.raises(NotFoundFailure):
            book.apply("missing")

    def test_delete(self):
        book, _ = _book()
        book.save("a", QuerySpec())
        book.save("b", QuerySpec())

        assert book.delete("A") is True
        assert [p.name for p in book.list_presets()] == ["b"]
        assert book.delete("A") is False

    def test_stored_as_single_json_blob(self):
        book, store = _book()
        book.save("a", QuerySpec(term="x"))

        blob = json.loads(store.get("userListPresets"))
        assert isinstance(blob, list)
        assert blob[0]["name"] == "a"
        assert blob[0]["term"] == "x"

    @pytest.mark.parametrize("blob", ["{not json", '{"a": 1}', '[{"limit": "many"}]'])
    def test_corrupt_blob_reads_as_empty(self, blob):
        book, store = _book()
        store.set("userListPresets", blob)
        assert book.list_presets() == []

    def test_corrupt_blob_is_overwritten_on_save(self):
        book, store = _book()
        store.set("userListPresets", "{not json")
        book.save("fresh", QuerySpec())
        assert [p.name for p in book.list_presets()] == ["fresh"]


class TestFilterPreset:
    def test_to_spec_uses_page_one(self):
        preset = FilterPreset(name="p", term="t", limit=50)
        spec = preset.to_spec()
        assert spec.page == 1
        assert spec.limit == 50
        assert spec.term == "t"


class TestJsonFileKeyValueStore:
    def test_missing_file_reads_none(self, tmp_path):
        store = JsonFileKeyValueStore(tmp_path / "presets.json")
        assert store.get("k") is None

    def test_set_then_get(self, tmp_path):
        path = tmp_path / "nested" / "presets.json"
        store = JsonFileKeyValueStore(path)
        store.set("k", "v")
        store.set("other", "w")

        assert path.exists()
        assert JsonFileKeyValueStore(path).get("k") == "v"
        assert JsonFileKeyValueStore(path).get("other") == "w"

    def test_corrupt_file_reads_none(self, tmp_path):
        path = tmp_path / "presets.json"
        path.write_text("garbage", encoding="utf-8")
        assert JsonFileKeyValueStore(path).get("k") is None

    def test_preset_book_over_file(self, tmp_path):
        path = tmp_path / "presets.json"
        PresetBook(JsonFileKeyValueStore(path)).save("saved", QuerySpec(term="ana"))

        reloaded = PresetBook(JsonFileKeyValueStore(path))
        assert reloaded.apply("saved").term == "ana"
