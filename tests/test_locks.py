"""
Reader/writer lock behaviour.
"""

import threading

from src.core.locks import ReadWriteLock


def test_readers_share_the_lock():
    lock = ReadWriteLock()
    both_inside = threading.Barrier(2, timeout=2)
    errors = []

    def reader():
        with lock.read_locked():
            try:
                both_inside.wait()
            except threading.BrokenBarrierError as e:
                errors.append(e)

    threads = [threading.Thread(target=reader) for _ in range(2)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=5)

    assert errors == []
    assert lock.readers == 0


def test_writer_waits_for_readers():
    lock = ReadWriteLock()
    writer_done = threading.Event()

    def writer():
        with lock.write_locked():
            writer_done.set()

    lock.acquire_read()
    t = threading.Thread(target=writer)
    t.start()

    assert not writer_done.wait(timeout=0.1)
    lock.release_read()
    assert writer_done.wait(timeout=2)
    t.join(timeout=2)
    assert not lock.write_held


def test_readers_wait_for_writer():
    lock = ReadWriteLock()
    reader_done = threading.Event()

    def reader():
        with lock.read_locked():
            reader_done.set()

    lock.acquire_write()
    t = threading.Thread(target=reader)
    t.start()

    assert not reader_done.wait(timeout=0.1)
    lock.release_write()
    assert reader_done.wait(timeout=2)
    t.join(timeout=2)


def test_lock_released_on_exception():
    lock = ReadWriteLock()

    try:
        with lock.write_locked():
            raise RuntimeError("boom")
    except RuntimeError:
        pass

    assert not lock.write_held
    with lock.read_locked():
        assert lock.readers == 1
