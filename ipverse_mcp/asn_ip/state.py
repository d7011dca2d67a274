"""Shared, lock-guarded access to a mirror."""

from __future__ import annotations

import logging
import threading
import weakref
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from ipverse_mcp.asn_ip.upstream import MirrorState, Upstream

logger = logging.getLogger(__name__)


class ReadWriteLock:
    """Many readers or one writer. Waiting writers block new readers."""

    def __init__(self) -> None:
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False
        self._writers_waiting = 0

    def acquire_read(self) -> None:
        with self._cond:
            while self._writer or self._writers_waiting:
                self._cond.wait()
            self._readers += 1

    def release_read(self) -> None:
        with self._cond:
            self._readers -= 1
            if self._readers == 0:
                self._cond.notify_all()

    def acquire_write(self) -> None:
        with self._cond:
            self._writers_waiting += 1
            try:
                while self._writer or self._readers:
                    self._cond.wait()
            finally:
                self._writers_waiting -= 1
            self._writer = True

    def release_write(self) -> None:
        with self._cond:
            self._writer = False
            self._cond.notify_all()

    @contextmanager
    def read(self) -> Iterator[None]:
        self.acquire_read()
        try:
            yield
        finally:
            self.release_read()

    @contextmanager
    def write(self) -> Iterator[None]:
        self.acquire_write()
        try:
            yield
        finally:
            self.release_write()


class SharedMirror:
    """Handle shared by the sync driver and the lookup path.

    ``provision`` and ``update`` hold the write lock for their whole
    duration so no reader ever sees a half-applied checkout.
    """

    def __init__(self, upstream: Upstream) -> None:
        self.upstream = upstream
        self.lock = ReadWriteLock()

    @property
    def repo_path(self) -> Path:
        return self.upstream.repo_path

    def provision(self) -> MirrorState:
        with self.lock.write():
            return self.upstream.provision()

    def update(self) -> list[Path]:
        with self.lock.write():
            return self.upstream.update()

    @contextmanager
    def read(self) -> Iterator[Upstream]:
        """Hold the read lock while resolving and reading mirror files."""
        with self.lock.read():
            yield self.upstream


_registry: weakref.WeakValueDictionary[Path, SharedMirror] = weakref.WeakValueDictionary()
_registry_lock = threading.Lock()


def open_mirror(upstream: Upstream) -> SharedMirror:
    """Return the process-wide SharedMirror for *upstream*'s location.

    The registry holds weak references: the handle lives as long as its
    longest holder, and a later call after every holder is gone builds
    a fresh one.
    """
    key = upstream.repo_path
    with _registry_lock:
        mirror = _registry.get(key)
        if mirror is None:
            mirror = SharedMirror(upstream)
            _registry[key] = mirror
            logger.debug("Opened shared mirror at %s", key)
        return mirror
