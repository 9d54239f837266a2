"""Tests for the readers-writer lock."""

import threading

import pytest

from kubecloud.sshkeys.locking import ReadWriteLock


class TestReadWriteLock:
    def test_readers_share(self):
        lock = ReadWriteLock()
        both_inside = threading.Barrier(2, timeout=5)

        def reader():
            with lock.read_locked():
                both_inside.wait()

        threads = [threading.Thread(target=reader) for _ in range(2)]
        for t in threads:
            t.start()
        for t in threads:
            t.join(timeout=5)
        assert not both_inside.broken

    def test_writer_excludes_reader(self):
        lock = ReadWriteLock()
        events = []
        lock.acquire_write()

        def reader():
            with lock.read_locked():
                events.append("read")

        t = threading.Thread(target=reader)
        t.start()
        t.join(timeout=0.1)
        assert events == []
        events.append("write-done")
        lock.release_write()
        t.join(timeout=5)
        assert events == ["write-done", "read"]

    def test_writer_waits_for_readers(self):
        lock = ReadWriteLock()
        events = []
        lock.acquire_read()

        def writer():
            with lock.write_locked():
                events.append("write")

        t = threading.Thread(target=writer)
        t.start()
        t.join(timeout=0.1)
        assert events == []
        lock.release_read()
        t.join(timeout=5)
        assert events == ["write"]

    def test_released_on_exception(self):
        lock = ReadWriteLock()
        with pytest.raises(ValueError):
            with lock.write_locked():
                raise ValueError("boom")
        with lock.write_locked():
            pass

    def test_release_without_acquire(self):
        lock = ReadWriteLock()
        with pytest.raises(RuntimeError):
            lock.release_read()
        with pytest.raises(RuntimeError):
            lock.release_write()
