"""Tests for per-key serialization."""

from __future__ import annotations

import threading
import time

from app.application.utils.keyed_lock import KeyedLock


def test_same_key_runs_one_at_a_time():
    locks = KeyedLock()
    active = 0
    max_active = 0
    counter_lock = threading.Lock()

    def work():
        nonlocal active, max_active
        with locks.hold("41790000000"):
            with counter_lock:
                active += 1
                max_active = max(max_active, active)
            time.sleep(0.01)
            with counter_lock:
                active -= 1

    threads = [threading.Thread(target=work) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert max_active == 1
    assert len(locks) == 0


def test_different_keys_do_not_block_each_other():
    locks = KeyedLock()
    entered = threading.Event()
    release = threading.Event()

    def hold_first():
        with locks.hold("a"):
            entered.set()
            release.wait(timeout=2)

    t = threading.Thread(target=hold_first)
    t.start()
    assert entered.wait(timeout=2)

    with locks.hold("b"):
        pass  # would deadlock if "b" shared the lock of "a"

    release.set()
    t.join()


def test_lock_released_on_error():
    locks = KeyedLock()
    try:
        with locks.hold("a"):
            raise RuntimeError("boom")
    except RuntimeError:
        pass

    with locks.hold("a"):
        pass
    assert len(locks) == 0
