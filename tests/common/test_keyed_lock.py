import threading
import time

from src.shopfloor.shopfloor.common.locks import KeyedLock


def test_entries_are_dropped_after_release():
    locks = KeyedLock()

    with locks.hold(1):
        assert len(locks) == 1
    assert len(locks) == 0


def test_same_key_serializes():
    locks = KeyedLock()
    inside = []
    overlap = []

    def worker():
        with locks.hold("user-1"):
            if inside:
                overlap.append(True)
            inside.append(True)
            time.sleep(0.01)
            inside.pop()

    threads = [threading.Thread(target=worker) for _ in range(5)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert overlap == []
    assert len(locks) == 0


def test_different_keys_do_not_block():
    locks = KeyedLock()

    with locks.hold(1):
        acquired = threading.Event()

        def other():
            with locks.hold(2):
                acquired.set()

        t = threading.Thread(target=other)
        t.start()
        assert acquired.wait(timeout=1)
        t.join()
