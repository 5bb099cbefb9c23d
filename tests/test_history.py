"""Tests for the per-client history store."""

import threading

import pytest

from postguard.app.services.admission.history import HistoryStore


@pytest.fixture
def store():
    return HistoryStore(window_seconds=3600, max_entries=5)


class TestHistoryStore:
    """Test time-windowed history."""

    def test_unknown_client_has_no_history(self, store):
        assert store.recent("203.0.113.1", now=0.0) == []
        assert len(store) == 0

    def test_appended_entry_is_returned(self, store):
        store.append("203.0.113.1", "first post", now=100.0)

        entries = store.recent("203.0.113.1", now=200.0)

        assert len(entries) == 1
        assert entries[0].content == "first post"
        assert entries[0].seen_at == 100.0

    def test_entries_expire_after_window(self, store):
        store.append("203.0.113.1", "old post", now=0.0)
        store.append("203.0.113.1", "new post", now=1800.0)

        entries = store.recent("203.0.113.1", now=3600.0)

        assert [e.content for e in entries] == ["new post"]

    def test_entry_survives_just_inside_window(self, store):
        store.append("203.0.113.1", "post", now=0.0)
        assert len(store.recent("203.0.113.1", now=3599.0)) == 1

    def test_fully_expired_client_is_removed(self, store):
        store.append("203.0.113.1", "post", now=0.0)

        assert store.recent("203.0.113.1", now=4000.0) == []
        assert len(store) == 0

    def test_clients_are_independent(self, store):
        store.append("203.0.113.1", "post a", now=0.0)
        store.append("203.0.113.2", "post b", now=0.0)

        assert [e.content for e in store.recent("203.0.113.1", now=1.0)] == ["post a"]
        assert [e.content for e in store.recent("203.0.113.2", now=1.0)] == ["post b"]

    def test_history_is_capped_per_client(self, store):
        for i in range(8):
            store.append("203.0.113.1", f"post {i}", now=float(i))

        entries = store.recent("203.0.113.1", now=10.0)

        assert [e.content for e in entries] == [f"post {i}" for i in range(3, 8)]

    def test_returned_list_is_a_copy(self, store):
        store.append("203.0.113.1", "post", now=0.0)
        store.recent("203.0.113.1", now=1.0).clear()

        assert len(store.recent("203.0.113.1", now=1.0)) == 1


class TestHistorySweep:
    """Test the full-store sweep."""

    def test_sweep_removes_idle_clients(self, store):
        store.append("203.0.113.1", "old", now=0.0)
        store.append("203.0.113.2", "recent", now=3000.0)

        removed = store.sweep(now=3700.0)

        assert removed == 1
        assert len(store) == 1
        assert store.recent("203.0.113.2", now=3700.0)[0].content == "recent"

    def test_sweep_on_empty_store(self, store):
        assert store.sweep(now=0.0) == 0

    def test_sweep_skips_busy_client(self, store):
        store.append("203.0.113.1", "old", now=0.0)
        held = threading.Event()
        done = threading.Event()

        def hold():
            with store.lock_for("203.0.113.1"):
                held.set()
                done.wait(timeout=5)

        holder = threading.Thread(target=hold)
        holder.start()
        assert held.wait(timeout=5)
        try:
            assert store.sweep(now=4000.0) == 0
            assert len(store) == 1
        finally:
            done.set()
            holder.join()

        assert store.sweep(now=4000.0) == 1


class TestHistoryDefaults:
    """Test the default per-client cap."""

    def test_default_cap_keeps_a_busy_hour(self):
        store = HistoryStore()
        for i in range(120):
            store.append("203.0.113.1", f"post {i}", now=float(i))

        assert len(store.recent("203.0.113.1", now=200.0)) == 120
