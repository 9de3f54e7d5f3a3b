"""
Unit tests for the working color store.
"""

import pytest

from prizm.services.colors.parser import parse
from prizm.services.store import InMemoryColorStore, SessionStoreRegistry, default_name


class TestInMemoryColorStore:
    @pytest.fixture
    def store(self):
        store = InMemoryColorStore()
        store.add(parse("#3498db"))
        store.add(parse("#e74c3c"))
        return store

    def test_add_assigns_default_names(self, store):
        assert store.names() == ["Color 1", "Color 2"]
        assert len(store) == 2

    def test_add_dedups_by_hex(self, store):
        assert store.add(parse("rgb(52, 152, 219)")) is False
        assert len(store) == 2

    def test_remove(self, store):
        removed = store.remove(0)
        assert removed.hex_key() == "#3498db"
        assert [c.hex_key() for c in store.colors()] == ["#e74c3c"]

    def test_remove_out_of_range(self, store):
        with pytest.raises(IndexError):
            store.remove(5)
        with pytest.raises(IndexError):
            store.remove(-1)

    def test_remove_all(self, store):
        store.remove_all()
        assert store.colors() == []
        assert store.names() == []

    def test_rename_and_reset(self, store):
        assert store.rename(1, "  Accent ") == "Accent"
        assert store.names()[1] == "Accent"
        assert store.rename(1, "   ") == default_name(2) == "Color 2"

    def test_default_names_unique_after_removal(self, store):
        store.add(parse("#2ecc71"))
        store.remove(0)
        store.add(parse("#f1c40f"))
        names = store.names()
        assert names == ["Color 2", "Color 3", "Color 4"]
        assert len(set(names)) == len(names)

    def test_blank_rename_restores_own_number(self, store):
        store.remove(0)
        assert store.rename(0, "") == "Color 2"

    def test_numbering_restarts_after_remove_all(self, store):
        store.remove_all()
        store.add(parse("#000"))
        assert store.names() == ["Color 1"]

    def test_returned_lists_are_copies(self, store):
        store.colors().clear()
        assert len(store) == 2


class TestSessionStoreRegistry:
    def test_one_store_per_session(self):
        registry = SessionStoreRegistry()
        first = registry.get("a")
        assert registry.get("a") is first
        assert registry.get("b") is not first

    def test_drop(self):
        registry = SessionStoreRegistry()
        store = registry.get("a")
        store.add(parse("#000"))
        registry.drop("a")
        assert len(registry.get("a")) == 0

    def test_peek_does_not_create(self):
        registry = SessionStoreRegistry()
        assert registry.peek("a") is None
        assert len(registry) == 0
        store = registry.get("a")
        assert registry.peek("a") is store

    def test_least_recently_used_session_evicted(self):
        registry = SessionStoreRegistry(max_sessions=3)
        for session in ("a", "b", "c"):
            registry.get(session)
        registry.get("a")
        registry.peek("b")
        registry.get("d")
        assert len(registry) == 3
        assert "c" not in registry
        assert all(session in registry for session in ("a", "b", "d"))

    def test_many_sessions_stay_bounded(self):
        registry = SessionStoreRegistry(max_sessions=10)
        for i in range(100):
            registry.get(f"s{i}").add(parse("#000"))
        assert len(registry) == 10
        assert "s99" in registry and "s0" not in registry
