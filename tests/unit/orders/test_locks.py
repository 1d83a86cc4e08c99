"""
Unit tests for KeyedLock.
"""

import threading
import time

import pytest

from core.domain.exceptions import OrderLockTimeoutError
from orders.infrastructure.locks import KeyedLock


class TestKeyedLock:
    """Tests for per-key locking."""

    def test_entries_are_released(self):
        """Test no entry survives once the holder leaves."""
        locks = KeyedLock()

        with locks.hold("TT1234"):
            assert len(locks) == 1

        assert len(locks) == 0

    def test_entry_released_after_exception(self):
        """Test the lock is released when the block raises."""
        locks = KeyedLock(timeout=0.1)

        with pytest.raises(RuntimeError):
            with locks.hold("TT1234"):
                raise RuntimeError("boom")

        with locks.hold("TT1234"):
            pass
        assert len(locks) == 0

    def test_different_keys_do_not_block(self):
        """Test holding one key leaves others free."""
        locks = KeyedLock(timeout=0.1)

        with locks.hold("TT1111"):
            with locks.hold("TT2222"):
                assert len(locks) == 2

    def test_same_key_times_out(self):
        """Test a busy key raises after the timeout."""
        locks = KeyedLock(timeout=0.05)
        held = threading.Event()
        release = threading.Event()

        def holder():
            with locks.hold("TT1234"):
                held.set()
                release.wait(5)

        thread = threading.Thread(target=holder)
        thread.start()
        try:
            held.wait(5)
            with pytest.raises(OrderLockTimeoutError):
                with locks.hold("TT1234"):
                    pass
        finally:
            release.set()
            thread.join()

        assert len(locks) == 0

    def test_serializes_critical_sections(self):
        """Test holders of one key never overlap."""
        locks = KeyedLock(timeout=5)
        inside = []
        overlaps = []

        def worker():
            with locks.hold("TT1234"):
                if inside:
                    overlaps.append(True)
                inside.append(1)
                time.sleep(0.005)
                inside.pop()

        threads = [threading.Thread(target=worker) for _ in range(10)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert overlaps == []
        assert len(locks) == 0
