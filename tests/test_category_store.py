import json
from datetime import date, timedelta

import pytest

from glow_tracker.exceptions import StorageReadError
from glow_tracker.kvstore import InMemoryKeyValueStore
from glow_tracker.models import DEFAULT_ITEMS
from glow_tracker.repositories import CategoryStore, is_completed_on


def stored(kv, category):
    raw = kv.get(f"{category}-items")
    return None if raw is None else json.loads(raw)


def counter_ids(start=1):
    state = {"n": start}

    def factory():
        value = f"id-{state['n']}"
        state["n"] += 1
        return value

    return factory


class UnreadableStore(InMemoryKeyValueStore):
    def get(self, key):
        raise StorageReadError("disk on fire")


class TestAdd:
    def test_add_appends_trimmed_item(self, kv, clock):
        store = CategoryStore(kv, "exercise", clock=clock)
        items = store.add("  Yoga  ")
        assert len(items) == 1
        item = items[0]
        assert item["name"] == "Yoga"
        assert item["completed"] == {}
        assert item["createdAt"] == "2025-01-25T09:30:00.000Z"
        assert isinstance(item["id"], str) and item["id"]
        # Full list is persisted under the category key
        assert stored(kv, "exercise") == items

    @pytest.mark.parametrize("name", ["", "   ", "\t\n"])
    def test_blank_name_is_noop(self, kv, name):
        store = CategoryStore(kv, "exercise")
        store.add("Yoga")
        before = store.items()
        assert store.add(name) == before
        assert len(store.items()) == 1

    def test_ids_unique_and_order_preserved(self, kv):
        store = CategoryStore(kv, "skincare")
        for n in ["a", "b", "c", "d"]:
            store.add(n)
        items = store.items()
        assert [i["name"] for i in items] == ["a", "b", "c", "d"]
        assert len({i["id"] for i in items}) == 4

    def test_colliding_id_factory_is_retried(self, kv):
        ids = iter(["x", "x", "y"])
        store = CategoryStore(kv, "skincare", id_factory=lambda: next(ids))
        store.add("first")
        store.add("second")
        assert [i["id"] for i in store.items()] == ["x", "y"]

    def test_items_returns_copies(self, kv):
        store = CategoryStore(kv, "study")
        store.add("Review notes")
        snapshot = store.items()
        snapshot[0]["name"] = "mutated"
        assert store.items()[0]["name"] == "Review notes"


class TestBulkSeed:
    def test_seed_study_scenario(self, kv):
        store = CategoryStore(kv, "study")
        items = store.bulk_seed(["Read for 30 minutes", "Review notes"])
        assert [i["name"] for i in items] == ["Read for 30 minutes", "Review notes"]
        assert all(i["completed"] == {} for i in items)
        assert items[0]["id"] != items[1]["id"]

    def test_seed_ids_do_not_collide_with_existing(self, kv):
        store = CategoryStore(kv, "study", id_factory=counter_ids())
        store.add("existing")
        # Restart the counter so the factory proposes "id-1" again
        store._id_factory = counter_ids()
        items = store.bulk_seed(["one", "two"])
        ids = [i["id"] for i in items]
        assert len(set(ids)) == 3

    def test_blank_names_skipped(self, kv):
        store = CategoryStore(kv, "study")
        items = store.bulk_seed(["Flashcard review", "  ", ""])
        assert [i["name"] for i in items] == ["Flashcard review"]

    def test_seed_defaults_only_when_empty(self, kv):
        store = CategoryStore(kv, "haircare")
        items = store.seed_defaults()
        assert [i["name"] for i in items] == DEFAULT_ITEMS["haircare"]
        # Second call leaves the populated category alone
        assert len(store.seed_defaults()) == len(DEFAULT_ITEMS["haircare"])

    def test_seed_defaults_on_nonempty_is_noop(self, kv):
        store = CategoryStore(kv, "haircare")
        store.add("Shampoo")
        assert [i["name"] for i in store.seed_defaults()] == ["Shampoo"]


class TestRenameDelete:
    def test_rename_trims(self, kv):
        store = CategoryStore(kv, "supplements")
        item = store.add("Vitamin D")[0]
        items = store.rename(item["id"], "  Vitamin D3 ")
        assert items[0]["name"] == "Vitamin D3"
        assert items[0]["id"] == item["id"]
        assert items[0]["createdAt"] == item["createdAt"]

    def test_rename_unknown_id_or_blank_is_noop(self, kv):
        store = CategoryStore(kv, "supplements")
        store.add("Omega-3")
        before = store.items()
        assert store.rename("missing", "Fish oil") == before
        assert store.rename(before[0]["id"], "   ") == before

    def test_delete(self, kv):
        store = CategoryStore(kv, "exercise")
        store.bulk_seed(["Cardio workout", "Stretching"])
        first = store.items()[0]
        items = store.delete(first["id"])
        assert [i["name"] for i in items] == ["Stretching"]
        assert stored(kv, "exercise") == items

    def test_delete_unknown_id_is_noop(self, kv):
        store = CategoryStore(kv, "exercise")
        store.add("Yoga")
        before = store.items()
        assert store.delete("unknown-id") == before

    def test_numeric_ids_from_import_match_path_strings(self, kv):
        store = CategoryStore(kv, "exercise")
        store.replace([{"id": 1737800000000, "name": "Yoga", "completed": {}, "createdAt": "x"}])
        store.rename("1737800000000", "Hot yoga")
        assert store.items()[0]["name"] == "Hot yoga"
        assert store.delete("1737800000000") == []

    def test_exact_id_wins_over_text_form(self, kv, clock):
        store = CategoryStore(kv, "exercise", clock=clock)
        store.replace(
            [
                {"id": 1, "name": "Numeric", "completed": {}},
                {"id": "1", "name": "Text", "completed": {}},
            ]
        )
        items = store.rename("1", "Renamed")
        assert [i["name"] for i in items] == ["Numeric", "Renamed"]

        items = store.toggle_today("1")
        assert items[0]["completed"] == {}
        assert items[1]["completed"] == {"2025-01-25": True}

        items = store.delete("1")
        assert items == [{"id": 1, "name": "Numeric", "completed": {}}]
        # With the exact match gone, the text form reaches the numeric id
        assert store.delete("1") == []

    def test_only_one_item_affected_by_text_match(self, kv):
        store = CategoryStore(kv, "exercise")
        store.replace([{"id": 2, "name": "a"}, {"id": 2, "name": "b"}])
        items = store.rename("2", "renamed")
        assert [i["name"] for i in items] == ["renamed", "b"]
        assert [i["name"] for i in store.delete("2")] == ["b"]


class TestToggleToday:
    def test_toggle_scenario(self, kv, clock):
        store = CategoryStore(kv, "exercise", clock=clock)
        item = store.add("Yoga")[0]
        items = store.toggle_today(item["id"])
        assert items[0]["completed"] == {"2025-01-25": True}

    def test_toggle_twice_restores_state(self, kv, clock):
        store = CategoryStore(kv, "exercise", clock=clock)
        item = store.add("Yoga")[0]
        store.toggle_today(item["id"])
        items = store.toggle_today(item["id"])
        assert not is_completed_on(items[0], date(2025, 1, 25))

    def test_toggle_only_touches_today(self, kv, clock):
        store = CategoryStore(kv, "exercise", clock=clock)
        store.replace(
            [{"id": "a", "name": "Yoga", "completed": {"2025-01-24": True, "2025-01-20": False}, "createdAt": "x"}]
        )
        items = store.toggle_today("a")
        assert items[0]["completed"] == {"2025-01-24": True, "2025-01-20": False, "2025-01-25": True}

    def test_toggle_follows_clock_to_next_day(self, kv, clock):
        store = CategoryStore(kv, "exercise", clock=clock)
        item = store.add("Yoga")[0]
        store.toggle_today(item["id"])
        clock.moment = clock.moment + timedelta(days=1)
        items = store.toggle_today(item["id"])
        assert items[0]["completed"] == {"2025-01-25": True, "2025-01-26": True}
        assert store.completed_today_count() == 1

    def test_toggle_unknown_id_is_noop(self, kv):
        store = CategoryStore(kv, "exercise")
        store.add("Yoga")
        before = store.items()
        assert store.toggle_today("nope") == before

    def test_malformed_completed_map_treated_as_empty(self, kv, clock):
        store = CategoryStore(kv, "exercise", clock=clock)
        store.replace([{"id": "a", "name": "Yoga", "completed": "garbage"}])
        assert store.toggle_today("a")[0]["completed"] == {"2025-01-25": True}


class TestPersistence:
    def test_reload_from_store(self, kv):
        CategoryStore(kv, "bodycare").add("Exfoliate")
        reloaded = CategoryStore(kv, "bodycare")
        assert [i["name"] for i in reloaded.items()] == ["Exfoliate"]

    @pytest.mark.parametrize("raw", ["{not json", '{"a": 1}', "42"])
    def test_corrupt_value_loads_empty(self, kv, raw):
        kv.set("bodycare-items", raw)
        assert CategoryStore(kv, "bodycare").items() == []

    def test_unreadable_store_loads_empty(self):
        assert CategoryStore(UnreadableStore(), "bodycare").items() == []

    def test_write_failure_keeps_memory_state(self):
        kv = InMemoryKeyValueStore(quota_bytes=10)
        store = CategoryStore(kv, "skincare")
        items = store.add("Moisturizer with SPF")
        assert [i["name"] for i in items] == ["Moisturizer with SPF"]
        assert store.last_write_error is not None
        assert "quota exceeded" in str(store.last_write_error)
        assert kv.get("skincare-items") is None
        # Session keeps working from memory
        store.add("Night moisturizer")
        assert len(store.items()) == 2

    def test_successful_write_clears_error(self):
        kv = InMemoryKeyValueStore(quota_bytes=10)
        store = CategoryStore(kv, "skincare")
        store.add("Moisturizer with SPF")
        assert store.last_write_error is not None
        kv._quota_bytes = None
        store.add("Night moisturizer")
        assert store.last_write_error is None
        assert len(stored(kv, "skincare")) == 2

    def test_noop_does_not_write(self, kv):
        store = CategoryStore(kv, "skincare")
        store.add("   ")
        store.delete("missing")
        assert kv.keys() == []

    def test_unknown_category_rejected(self, kv):
        with pytest.raises(ValueError):
            CategoryStore(kv, "gardening")
