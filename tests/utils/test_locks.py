"""Tests for the read/write lock"""

import threading

import pytest

from trackhabit.utils.locks import ReadWriteLock


def test_readers_share_the_lock():
    lock = ReadWriteLock()

    with lock.shared():
        with lock.shared():
            assert lock.readers == 2
    assert lock.readers == 0

def test_writer_excludes_readers():
    lock = ReadWriteLock()
    acquired = threading.Event()

    def reader():
        with lock.shared():
            acquired.set()

    with lock.exclusive():
        assert lock.is_exclusive
        thread = threading.Thread(target=reader)
        thread.start()
        assert not acquired.wait(0.2)

    assert acquired.wait(5)
    thread.join(5)

def test_waiting_writer_blocks_new_readers():
    lock = ReadWriteLock()
    writer_done = threading.Event()
    late_reader_entered = threading.Event()
    order = []

    def writer():
        with lock.exclusive():
            order.append('writer')
        writer_done.set()

    def late_reader():
        with lock.shared():
            order.append('reader')
            late_reader_entered.set()

    lock.acquire_shared()
    writer_thread = threading.Thread(target=writer)
    writer_thread.start()
    # Give the writer time to start waiting
    writer_done.wait(0.2)
    reader_thread = threading.Thread(target=late_reader)
    reader_thread.start()
    assert not late_reader_entered.wait(0.2)

    lock.release_shared()
    writer_thread.join(5)
    reader_thread.join(5)

    assert order == ['writer', 'reader']

def test_release_without_hold():
    lock = ReadWriteLock()

    with pytest.raises(RuntimeError):
        lock.release_shared()
    with pytest.raises(RuntimeError):
        lock.release_exclusive()
