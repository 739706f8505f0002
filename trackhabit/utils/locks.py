"""Thread synchronisation helpers."""

import threading
from contextlib import contextmanager


class ReadWriteLock:
    """Writer-preferring readers/writer lock.

    Any number of threads may hold the lock shared at the same time; an
    exclusive holder excludes everybody else. Once a writer is waiting, new
    readers queue behind it so a backup is not starved by steady traffic.
    Not reentrant.
    """

    def __init__(self):
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False
        self._writers_waiting = 0

    def acquire_shared(self):
        with self._cond:
            while self._writer or self._writers_waiting:
                self._cond.wait()
            self._readers += 1

    def release_shared(self):
        with self._cond:
            if self._readers <= 0:
                raise RuntimeError("release_shared() called without a shared hold")
            self._readers -= 1
            if self._readers == 0:
                self._cond.notify_all()

    def acquire_exclusive(self):
        with self._cond:
            self._writers_waiting += 1
            try:
                while self._writer or self._readers:
                    self._cond.wait()
            finally:
                self._writers_waiting -= 1
            self._writer = True

    def release_exclusive(self):
        with self._cond:
            if not self._writer:
                raise RuntimeError("release_exclusive() called without an exclusive hold")
            self._writer = False
            self._cond.notify_all()

    @contextmanager
    def shared(self):
        self.acquire_shared()
        try:
            yield self
        finally:
            self.release_shared()

    @contextmanager
    def exclusive(self):
        self.acquire_exclusive()
        try:
            yield self
        finally:
            self.release_exclusive()

    @property
    def readers(self):
        with self._cond:
            return self._readers

    @property
    def is_exclusive(self):
        with self._cond:
            return self._writer
