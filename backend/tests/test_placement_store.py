"""
Tests for the key-value placement store.
"""

import json
import os
import sys
from datetime import date, datetime, timezone

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from stockcal.domain.events import EventRecord
from stockcal.domain.placements import (
    InMemoryKeyValueStore,
    JsonFileKeyValueStore,
    Placement,
    PlacementStore,
    placement_storage_key,
)
from stockcal.utils.errors import FixedDateEventError, InvalidDateError


def movable_event(event_id=7) -> EventRecord:
    return EventRecord(
        id=event_id,
        title="Robinhood Options Trading Expansion",
        event_date=datetime(2025, 11, 5, 9, 0, tzinfo=timezone.utc),
        category="corporate_action",
        impact_scope="single_stock",
        primary_ticker="HOOD",
        affected_tickers=["HOOD"],
        is_fixed_date=False,
    )


@pytest.fixture
def kv():
    return InMemoryKeyValueStore()


class TestStorageKey:
    def test_global_key(self):
        assert placement_storage_key("user_a") == "event-placements-user_a"

    def test_ticker_key_is_upper_cased(self):
        assert placement_storage_key("user_a", "hood") == "event-placements-user_a-HOOD"


class TestPlacementStore:
    """Place, remove and persistence"""

    def test_place_persists_json_document(self, kv):
        store = PlacementStore(kv, "user_a")
        store.place(7, "2025-11-14")

        payload = json.loads(kv.get("event-placements-user_a"))
        assert payload == [{"eventId": 7, "date": "2025-11-14"}]

    def test_place_is_idempotent(self, kv):
        store = PlacementStore(kv, "user_a")
        first = store.place(7, date(2025, 11, 14))
        second = store.place(7, "2025-11-14")

        assert first == second
        assert len(store.placements()) == 1

    def test_same_event_on_two_dates(self, kv):
        store = PlacementStore(kv, "user_a")
        store.place(7, "2025-11-14")
        store.place(7, "2025-11-21")

        assert [p.date for p in store.placements()] == ["2025-11-14", "2025-11-21"]
        assert store.placements_on("2025-11-21") == [Placement(7, "2025-11-21")]

    def test_remove_existing(self, kv):
        store = PlacementStore(kv, "user_a")
        store.place(7, "2025-11-14")

        assert store.remove(7, "2025-11-14") is True
        assert store.placements() == []
        assert json.loads(kv.get("event-placements-user_a")) == []

    def test_remove_missing_is_noop(self, kv):
        store = PlacementStore(kv, "user_a")
        store.place(7, "2025-11-14")

        assert store.remove(7, "2025-11-15") is False
        assert store.is_placed(7, "2025-11-14")

    def test_reload_from_store(self, kv):
        PlacementStore(kv, "user_a").place(7, "2025-11-14")
        reloaded = PlacementStore(kv, "user_a")
        assert reloaded.is_placed(7, "2025-11-14")

    def test_ticker_calendars_are_separate(self, kv):
        PlacementStore(kv, "user_a", "HOOD").place(7, "2025-11-14")

        assert PlacementStore(kv, "user_a").placements() == []
        hood = PlacementStore(kv, "user_a", "hood").placements()
        assert hood == [Placement(7, "2025-11-14", "HOOD")]

    def test_users_are_separate(self, kv):
        PlacementStore(kv, "user_a").place(7, "2025-11-14")
        assert PlacementStore(kv, "user_b").placements() == []

    def test_corrupt_document_loads_empty(self, kv):
        kv.set("event-placements-user_a", "{not json")
        assert PlacementStore(kv, "user_a").placements() == []

    def test_bad_stored_date_loads_empty(self, kv):
        kv.set("event-placements-user_a", json.dumps([{"eventId": 7, "date": "not-a-date"}]))
        store = PlacementStore(kv, "user_a")

        assert store.placements() == []
        store.place(7, "2025-11-14")
        assert store.is_placed(7, "2025-11-14")

    def test_fixed_date_event_rejected(self, kv):
        event = movable_event().model_copy(update={"is_fixed_date": True})
        store = PlacementStore(kv, "user_a")

        with pytest.raises(FixedDateEventError):
            store.place(event.id, "2025-11-14", event=event)
        assert store.placements() == []

    def test_invalid_date_rejected(self, kv):
        with pytest.raises(InvalidDateError):
            PlacementStore(kv, "user_a").place(7, "14/11/2025")

    def test_to_dicts(self, kv):
        store = PlacementStore(kv, "user_a", "HOOD")
        store.place(7, "2025-11-14", event=movable_event())
        assert store.to_dicts() == [{"event_id": 7, "date": "2025-11-14", "stock_ticker": "HOOD"}]


class TestJsonFileKeyValueStore:
    """File-backed store survives a new instance"""

    def test_roundtrip_through_file(self, tmp_path):
        path = tmp_path / "placements.json"
        PlacementStore(JsonFileKeyValueStore(str(path)), "user_a").place(7, "2025-11-14")

        reopened = PlacementStore(JsonFileKeyValueStore(str(path)), "user_a")
        assert reopened.is_placed(7, "2025-11-14")

    def test_missing_file_reads_empty(self, tmp_path):
        store = JsonFileKeyValueStore(str(tmp_path / "nested" / "kv.json"))
        assert store.get("anything") is None

    def test_delete_key(self, tmp_path):
        store = JsonFileKeyValueStore(str(tmp_path / "kv.json"))
        store.set("a", "1")
        store.set("b", "2")
        store.delete("a")
        assert store.get("a") is None
        assert store.get("b") == "2"

    def test_corrupt_file_reads_empty(self, tmp_path):
        path = tmp_path / "kv.json"
        path.write_text("[[[", encoding="utf-8")
        assert JsonFileKeyValueStore(str(path)).get("a") is None

    def test_undecodable_file_reads_empty(self, tmp_path):
        path = tmp_path / "kv.json"
        path.write_bytes(b'{"k": "\xff\xfe"}')
        assert JsonFileKeyValueStore(str(path)).get("k") is None

    def test_non_string_values_are_dropped(self, tmp_path):
        path = tmp_path / "kv.json"
        path.write_text(json.dumps({"k": 1, "ok": "[]"}), encoding="utf-8")
        store = JsonFileKeyValueStore(str(path))

        assert store.get("k") is None
        assert store.get("ok") == "[]"

    def test_write_after_corrupt_read_keeps_original_bytes(self, tmp_path):
        path = tmp_path / "kv.json"
        original = b'{"event-placements-u1": "[]", "event-placements-u2": "[{\\"eventId\\": 3'
        path.write_bytes(original)
        store = JsonFileKeyValueStore(str(path))

        store.set("stock-recent-searches-u3", '["AAPL"]')

        assert (tmp_path / "kv.json.corrupt").read_bytes() == original
        assert json.loads(path.read_text(encoding="utf-8")) == {"stock-recent-searches-u3": '["AAPL"]'}

    def test_delete_leaves_corrupt_file_untouched(self, tmp_path):
        path = tmp_path / "kv.json"
        path.write_text("[[[", encoding="utf-8")

        JsonFileKeyValueStore(str(path)).delete("a")
        assert path.read_text(encoding="utf-8") == "[[["
