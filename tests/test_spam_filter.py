"""
Tests for the spam filter store.
"""

import asyncio
import threading

import pytest

from p2p_rate_alert.components.spam_filter import (
    SPAM_WINDOW_SECONDS,
    SpamFilterStore,
)

T0 = 1_700_000_000.0


class TestSpamFilterStore:
    """Test cases for SpamFilterStore."""

    def setup_method(self):
        """Set up test fixtures."""
        self.now = T0
        self.store = SpamFilterStore(clock=lambda: self.now)

    def test_window_is_five_hours(self):
        """Test the default spam window."""
        assert SPAM_WINDOW_SECONDS == 5 * 3600
        assert self.store.window_seconds == 5 * 3600

    def test_unknown_identity_not_suppressed(self):
        """Test that an identity never recorded is not suppressed."""
        assert self.store.is_suppressed("alice") is False

    def test_suppressed_until_window_end(self):
        """Test that a recorded identity stays suppressed for five hours."""
        self.store.record("alice")

        assert self.store.is_suppressed("alice", T0) is True
        assert self.store.is_suppressed("alice", T0 + 3600) is True
        assert self.store.is_suppressed("alice", T0 + SPAM_WINDOW_SECONDS) is True

    def test_not_suppressed_after_window_plus_eviction(self):
        """Test that an entry stops suppressing after the window and eviction."""
        self.store.record("alice")

        later = T0 + SPAM_WINDOW_SECONDS + 60
        self.store.evict_expired(later)

        assert "alice" not in self.store
        assert self.store.is_suppressed("alice", later) is False

    def test_expired_entry_does_not_suppress_before_eviction(self):
        """Test that lookups ignore expired entries not yet evicted."""
        self.store.record("alice")

        assert self.store.is_suppressed("alice", T0 + SPAM_WINDOW_SECONDS + 1) is False
        assert "alice" in self.store

    def test_record_twice_is_idempotent(self):
        """Test that recording twice behaves like recording once."""
        self.store.record("alice")
        self.store.record("alice")

        assert len(self.store) == 1
        assert self.store.is_suppressed("alice") is True

    def test_last_write_wins(self):
        """Test that a later record refreshes the timestamp."""
        self.store.record("alice", T0)
        self.store.record("alice", T0 + 3600)

        self.store.evict_expired(T0 + SPAM_WINDOW_SECONDS + 60)

        assert self.store.is_suppressed("alice", T0 + SPAM_WINDOW_SECONDS + 60)

    def test_evict_only_expired(self):
        """Test that eviction keeps fresh entries."""
        self.store.record("old", T0)
        self.store.record("fresh", T0 + 4 * 3600)

        evicted = self.store.evict_expired(T0 + SPAM_WINDOW_SECONDS + 1)

        assert evicted == 1
        assert "old" not in self.store
        assert "fresh" in self.store

    def test_concurrent_records(self):
        """Test that concurrent writers do not lose entries."""
        def writer(prefix):
            for i in range(200):
                self.store.record(f"{prefix}-{i}")

        threads = [threading.Thread(target=writer, args=(n,)) for n in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(self.store) == 800

    @pytest.mark.asyncio
    async def test_run_evicts_periodically_and_stops(self):
        """Test the background eviction loop."""
        store = SpamFilterStore(window_seconds=10, eviction_interval=0.01)
        store.record("alice", 0.0)
        shutdown = asyncio.Event()

        task = asyncio.create_task(store.run(shutdown))
        await asyncio.sleep(0.05)

        assert "alice" not in store

        shutdown.set()
        await asyncio.wait_for(task, timeout=1)
